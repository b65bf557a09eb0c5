# Overview: Flask API routes for QR login; parses input and returns JSON responses.

# backend/shoptrack/routes/auth.py
"""
QR authentication API routes

The identity provider login lives elsewhere; these routes cover the QR
path only:
- admins mint a single-use token for a user (printed as a QR code)
- anyone holding the QR code exchanges it once for a session
"""

from flask import Blueprint, request, jsonify, current_app, g, session

from ..container import current_services
from ..decorators import require_auth, require_role
from ..errors import InvalidOrExpiredTokenError, ShopTrackError
from ..extensions import db
from ..models.common import ROLE_ADMIN
from ..services import user_service


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.get("/user")
@require_auth
def current_user_route():
    return jsonify(g.current_user.to_dict())


@auth_bp.post("/qr-login")
def qr_login_route():
    """
    Exchange a QR token for a session.

    Unknown, expired and already used tokens all answer the same 401.
    """
    data = request.get_json(silent=True) or {}
    token = data.get("token")
    if not token:
        return jsonify({"error": "QR token is required"}), 400

    services = current_services()
    try:
        user = services.tokens.redeem(token)
    except InvalidOrExpiredTokenError as e:
        services.recorder.record_activity(
            action="qr_login_failed",
            entity_type="qr_token",
            ip_address=request.remote_addr,
            user_agent=request.headers.get("User-Agent"),
        )
        return jsonify({"error": e.message}), e.status_code
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to redeem QR token")
        return jsonify({"error": "QR login failed"}), 500

    session.clear()
    session["user_id"] = user.id

    services.recorder.record_activity(
        action="qr_login",
        user_id=user.id,
        entity_type="user",
        entity_id=user.id,
        description=f"QR login: {user.display_name}",
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
    )
    return jsonify({"user": user.to_dict(), "success": True}), 200


@auth_bp.post("/generate-qr")
@require_auth
@require_role(ROLE_ADMIN)
def generate_qr_route():
    """Mint a QR login token for targetUserId (admin only)."""
    data = request.get_json(silent=True) or {}
    target_user_id = data.get("targetUserId")
    if not target_user_id:
        return jsonify({"error": "Target user ID is required"}), 400

    services = current_services()
    try:
        token = services.tokens.issue(target_user_id)
    except ShopTrackError as e:
        db.session.rollback()
        return jsonify({"error": e.message}), e.status_code
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to generate QR token")
        return jsonify({"error": "Failed to generate QR token"}), 500

    services.recorder.record_activity(
        action="generate_qr_token",
        user_id=g.current_user.id,
        entity_type="user",
        entity_id=target_user_id,
        description=f"Generated QR login token for user {target_user_id}",
    )
    return jsonify({
        "token": token,
        "expires_in_minutes": services.tokens.ttl.total_seconds() / 60,
    }), 201


@auth_bp.post("/select-role")
@require_auth
def select_role_route():
    """First-login self selection; once a role is set only an admin can change it."""
    data = request.get_json(silent=True) or {}
    if g.current_user.role:
        return jsonify({"error": "Role already assigned"}), 409

    services = current_services()
    try:
        user = user_service.set_role(services.store, g.current_user.id, data.get("role"))
    except ShopTrackError as e:
        db.session.rollback()
        return jsonify({"error": e.message}), e.status_code
    return jsonify(user.to_dict()), 200


@auth_bp.post("/logout")
def logout_route():
    session.clear()
    return jsonify({"message": "Logout successful"}), 200
