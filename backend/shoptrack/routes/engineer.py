# Overview: Flask API routes for the engineer dashboard.

from flask import Blueprint, jsonify, g

from ..container import current_services
from ..decorators import require_auth, require_role
from ..models import Product
from ..models.common import ROLE_ENGINEER


engineer_bp = Blueprint("engineer", __name__, url_prefix="/api/engineer")


@engineer_bp.get("/component-requests")
@require_auth
@require_role(ROLE_ENGINEER)
def my_requests_route():
    requests = current_services().requests.list_for_requester(g.current_user.id)
    return jsonify([r.to_dict(include_summaries=True) for r in requests]), 200


@engineer_bp.get("/products/<product_id>/timeline")
@require_auth
@require_role(ROLE_ENGINEER)
def product_timeline_route(product_id: str):
    services = current_services()
    if services.store.get(Product, product_id) is None:
        return jsonify({"error": "Product not found"}), 404
    events = services.recorder.product_timeline(product_id)
    return jsonify([e.to_dict() for e in events]), 200
