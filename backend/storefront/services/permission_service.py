# Overview: Role-based permission resolution for authenticated users.

"""
Permission Checking

DESIGN PRINCIPLES:
- Fail closed: unknown roles and inactive users have no permissions
- Log denials only: permission grants are not logged
"""

from flask import current_app

from ..models import User
from ..permissions import DEFAULT_ROLE_PERMISSIONS, validate_permission_code


class PermissionDeniedError(Exception):
    """Raised when user lacks required permission."""
    pass


def get_role_permissions(role: str) -> set[str]:
    return set(DEFAULT_ROLE_PERMISSIONS.get(role, ()))


def get_user_permissions(user: User) -> set[str]:
    """
    Get all permission codes for a user.

    Returns set of permission codes (e.g., {"CREATE_SALE", "VIEW_INVENTORY"}).
    """
    if user is None or not user.is_active:
        return set()
    return get_role_permissions(user.role)


def user_has_permission(user: User, permission_code: str) -> bool:
    return permission_code in get_user_permissions(user)


def require_permission(user: User, permission_code: str, resource: str | None = None) -> None:
    """
    Raise PermissionDeniedError unless user holds permission_code.

    Denials are logged with the requested resource for security monitoring.
    """
    if not validate_permission_code(permission_code):
        raise ValueError(f"Unknown permission code: {permission_code}")

    if user_has_permission(user, permission_code):
        return

    current_app.logger.warning(
        "Permission denied: user_id=%s role=%s permission=%s resource=%s",
        getattr(user, "id", None),
        getattr(user, "role", None),
        permission_code,
        resource,
    )
    raise PermissionDeniedError(f"Role '{getattr(user, 'role', None)}' lacks permission {permission_code}")
