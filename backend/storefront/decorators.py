# Overview: Request, permission and activity-logging decorators for API routes.

from functools import wraps

from flask import g, jsonify, make_response, request

from .services import activity_service, permission_service, session_service
from .services.permission_service import PermissionDeniedError


def _is_authenticated() -> bool:
    return hasattr(g, "current_user")


def require_auth(f):
    """
    Require a valid bearer token.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.session_context: The full SessionContext object

    SECURITY: Returns 401 if:
    - No Authorization header
    - Invalid, expired or revoked token
    - User account deactivated
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"message": "Authentication required"}), 401

        token = auth_header.split(" ", 1)[1].strip()

        context = session_service.validate_session(token)
        if not context:
            return jsonify({"message": "Invalid or expired token"}), 401

        g.current_user = context.user
        g.session_context = context

        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """Require a specific permission. Must be applied below @require_auth."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"message": "Authentication required"}), 401

            try:
                permission_service.require_permission(g.current_user, permission_code, resource=request.path)
            except PermissionDeniedError as e:
                return jsonify({
                    "message": "Permission denied",
                    "details": {"required_permission": permission_code, "reason": str(e)},
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def log_activity(action: str, module: str):
    """
    Record an ActivityLog entry after a successful (< 400) response.

    The view may set g.activity_entity = (entity_type, entity_id) and
    g.activity_description to enrich the entry. Logging failures never
    affect the response.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            response = make_response(f(*args, **kwargs))

            user = getattr(g, "current_user", None)
            if response.status_code < 400 and user is not None:
                entity_type, entity_id = g.pop("activity_entity", (None, None))
                activity_service.log_activity(
                    user.id,
                    action,
                    module,
                    g.pop("activity_description", None) or f"{action.replace('_', ' ')} performed",
                    entity_type=entity_type,
                    entity_id=entity_id,
                    ip_address=request.remote_addr,
                    user_agent=request.headers.get("User-Agent"),
                    metadata={
                        "method": request.method,
                        "path": request.path,
                        "params": dict(request.view_args or {}),
                        "query": request.args.to_dict(),
                    },
                )

            return response

        return decorated_function
    return decorator
