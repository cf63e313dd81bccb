# Overview: Employee account management (admin only).

"""
User Management Service

WHY: Accounts are created by administrators, never self-registered.
Deactivating or deleting an account revokes its sessions immediately.
"""

from __future__ import annotations

import re

from flask import current_app

from ..extensions import db
from ..errors import ConflictError, InvalidArgumentError, InvalidStateError, NotFoundError
from ..models import ROLES, User
from .auth_service import PasswordValidationError, hash_password
from .session_service import revoke_all_user_sessions

# Shape check only: one @ and a dotted domain
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _normalize_email(value) -> str:
    email = value.strip().lower() if isinstance(value, str) else ""
    if not _EMAIL_RE.match(email):
        raise InvalidArgumentError("Valid email is required")
    return email


def _normalize_role(value) -> str:
    if value not in ROLES:
        raise InvalidArgumentError(f"role must be one of: {', '.join(ROLES)}")
    return value


def _hash(password: str) -> str:
    try:
        return hash_password(password, rounds=current_app.config.get("BCRYPT_ROUNDS", 12))
    except PasswordValidationError as e:
        raise InvalidArgumentError(str(e))


def _email_taken(email: str, exclude_id: int | None = None) -> bool:
    query = db.session.query(User.id).filter(User.email == email)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return query.first() is not None


def list_users() -> list[User]:
    return db.session.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def create_user(payload: dict) -> User:
    """Raises InvalidArgumentError on bad input, ConflictError on duplicate e-mail."""
    if not isinstance(payload, dict):
        raise InvalidArgumentError("Invalid JSON payload")

    name = (payload.get("name") or "").strip()
    if not name:
        raise InvalidArgumentError("Name is required")
    email = _normalize_email(payload.get("email"))
    role = _normalize_role(payload.get("role"))
    password_hash = _hash(payload.get("password"))

    if _email_taken(email):
        raise ConflictError("User already exists with this email", details={"email": email})

    user = User(name=name, email=email, password_hash=password_hash, role=role, is_active=True)
    db.session.add(user)
    db.session.commit()
    current_app.logger.info("Created user %s (%s, role=%s)", user.id, user.email, user.role)
    return user


def update_user(user_id: int, payload: dict) -> User:
    """
    Update name, email, role, active flag or password.

    A password change or deactivation revokes the user's sessions.
    """
    if not isinstance(payload, dict):
        raise InvalidArgumentError("Invalid JSON payload")

    user = get_user(user_id)
    try:
        revoke_reason = _apply_user_updates(user, payload)
        if revoke_reason:
            revoke_all_user_sessions(user.id, revoke_reason, commit=False)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return user


def _apply_user_updates(user: User, payload: dict) -> str | None:
    revoke_reason = None

    if payload.get("name") is not None:
        name = str(payload["name"]).strip()
        if not name:
            raise InvalidArgumentError("Name cannot be blank")
        user.name = name

    if payload.get("email") is not None:
        email = _normalize_email(payload["email"])
        if _email_taken(email, exclude_id=user.id):
            raise ConflictError("User already exists with this email", details={"email": email})
        user.email = email

    if payload.get("role") is not None:
        user.role = _normalize_role(payload["role"])

    if payload.get("isActive") is not None:
        if not isinstance(payload["isActive"], bool):
            raise InvalidArgumentError("isActive must be a boolean")
        if user.is_active and not payload["isActive"]:
            revoke_reason = "Account deactivated"
        user.is_active = payload["isActive"]

    if payload.get("password"):
        user.password_hash = _hash(payload["password"])
        revoke_reason = revoke_reason or "Password changed"

    return revoke_reason


def deactivate_user(user_id: int, actor_user_id: int) -> User:
    user = get_user(user_id)
    if user.id == actor_user_id:
        raise InvalidStateError("Cannot deactivate your own account")

    user.is_active = False
    revoke_all_user_sessions(user.id, "Account deactivated", commit=False)
    db.session.commit()
    return user


def delete_user(user_id: int, actor_user_id: int) -> str:
    """Permanent delete. Returns the deleted user's name."""
    user = get_user(user_id)
    if user.id == actor_user_id:
        raise InvalidStateError("Cannot delete your own account")

    name = user.name
    db.session.delete(user)
    db.session.commit()
    current_app.logger.info("Deleted user %s (%s)", user_id, name)
    return name
