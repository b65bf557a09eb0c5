# Overview: Flask API routes for admin activity review and role assignment.

from flask import Blueprint, request, jsonify, current_app, g

from ..container import current_services
from ..decorators import require_auth, require_role
from ..errors import ShopTrackError
from ..extensions import db
from ..models.common import ROLE_ADMIN
from ..services import user_service


admin_bp = Blueprint("admin", __name__, url_prefix="/api")


def _limit_arg(default: int = 50) -> int:
    try:
        return int(request.args.get("limit", default))
    except (TypeError, ValueError):
        return default


@admin_bp.get("/admin/activity")
@require_auth
@require_role(ROLE_ADMIN)
def recent_activity_route():
    entries = current_services().recorder.recent_activity(_limit_arg())
    return jsonify([e.to_dict() for e in entries]), 200


@admin_bp.get("/admin/fulfillments")
@require_auth
@require_role(ROLE_ADMIN)
def fulfillments_route():
    logs = current_services().fulfillment.list_fulfillments(_limit_arg())
    return jsonify([log.to_dict() for log in logs]), 200


@admin_bp.post("/users/update-role")
@require_auth
@require_role(ROLE_ADMIN)
def update_role_route():
    """
    Change a user's role.

    Request body: {"userId": str, "role": "inventory" | "engineer" | "admin"}
    """
    data = request.get_json(silent=True) or {}
    target_user_id = data.get("userId")
    if not target_user_id:
        return jsonify({"error": "userId is required"}), 400

    services = current_services()
    try:
        user = user_service.set_role(services.store, target_user_id, data.get("role"))
    except ShopTrackError as e:
        db.session.rollback()
        return jsonify({"error": e.message}), e.status_code
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to update user role")
        return jsonify({"error": "Failed to update user role"}), 500

    services.recorder.record_activity(
        action="update_role",
        user_id=g.current_user.id,
        entity_type="user",
        entity_id=user.id,
        description=f"Set role of {user.display_name} to {user.role}",
    )
    return jsonify(user.to_dict()), 200
