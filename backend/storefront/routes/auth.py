# Overview: Flask API routes for login, logout and the current user.

# backend/storefront/routes/auth.py
"""
Authentication API routes

SECURITY FEATURES:
- bcrypt password verification
- Session management with hashed bearer tokens
- Login and logout recorded in the activity log
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth
from ..services import activity_service, auth_service, permission_service, session_service

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate by email + password and create a session token.

    Token must be included as `Authorization: Bearer <token>` on protected routes.
    """
    try:
        data = request.get_json(silent=True) or {}
        email = data.get("email")
        password = data.get("password")

        if not email or not password:
            return jsonify({"message": "Email and password are required"}), 400

        user_agent = request.headers.get("User-Agent")
        ip_address = request.remote_addr

        user = auth_service.authenticate(email, password)
        if not user:
            current_app.logger.warning("Failed login for %s from %s", email, ip_address)
            return jsonify({"message": "Invalid credentials"}), 401

        session, token = session_service.create_session(
            user_id=user.id,
            user_agent=user_agent,
            ip_address=ip_address,
        )

        activity_service.log_activity(
            user.id,
            "login",
            "auth",
            f"{user.name} logged in",
            ip_address=ip_address,
            user_agent=user_agent,
        )

        return jsonify({
            "message": "Login successful",
            "token": token,
            "user": user.to_dict(),
            "permissions": sorted(permission_service.get_user_permissions(user)),
            "session": session.to_dict(),
        }), 200

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"message": "Internal server error"}), 500


@auth_bp.post("/logout")
@require_auth
def logout_route():
    """
    Revoke the presented session token.

    WHY: Explicit logout prevents token reuse.
    """
    try:
        user = g.current_user
        token = request.headers["Authorization"].split(" ", 1)[1].strip()
        session_service.revoke_session(token, reason="User logout")

        activity_service.log_activity(
            user.id,
            "logout",
            "auth",
            f"{user.name} logged out",
            ip_address=request.remote_addr,
            user_agent=request.headers.get("User-Agent"),
        )
        return jsonify({"message": "Logout successful"}), 200

    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"message": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
def me_route():
    """Current user with permission codes, for UI filtering."""
    user = g.current_user
    return jsonify({
        "user": user.to_dict(),
        "permissions": sorted(permission_service.get_user_permissions(user)),
    }), 200
