# Overview: Flask API routes for component requests, fulfillment and QR scans.

# backend/shoptrack/routes/inventory.py
"""
Inventory API routes.

Engineers raise component requests; inventory staff work the pending queue
and close requests by scanning the component label.
"""
from flask import Blueprint, request, jsonify, current_app, g

from ..container import current_services
from ..decorators import require_auth, require_role
from ..errors import ShopTrackError
from ..extensions import db
from ..models.common import ROLE_ADMIN, ROLE_ENGINEER, ROLE_INVENTORY
from ..permissions import has_role
from ..services import scan_service


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.post("/request-component")
@require_auth
@require_role(ROLE_ENGINEER)
def request_component_route():
    """
    Create a component request.

    Request body:
    {
        "productId": str,
        "componentId": str,
        "requestedQuantity": int
    }

    Returns:
        201: Request created (status pending)
        400: Invalid request
        404: Product or component not found
    """
    data = request.get_json(silent=True) or {}

    try:
        component_request = current_services().requests.create(
            product_id=data.get("productId"),
            component_id=data.get("componentId"),
            requested_quantity=data.get("requestedQuantity"),
            requested_by=g.current_user.id,
        )
        return jsonify(component_request.to_dict()), 201

    except ShopTrackError as e:
        db.session.rollback()
        return jsonify({"error": e.message}), e.status_code
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to create component request")
        return jsonify({"error": "Failed to create component request"}), 500


@inventory_bp.get("/component-requests")
@require_auth
@require_role(ROLE_INVENTORY)
def pending_requests_route():
    requests = current_services().requests.list_pending()
    return jsonify([r.to_dict(include_summaries=True) for r in requests]), 200


@inventory_bp.post("/fulfill-request")
@require_auth
@require_role(ROLE_INVENTORY)
def fulfill_request_route():
    """
    Fulfill a pending request with the scanned component.

    Request body:
    {
        "requestId": str,
        "componentQR": str   # scanned label payload
    }

    Returns:
        200: Request fulfilled (may carry "warning" if the timeline entry failed)
        400: Missing fields
        404: Request or component not found
        409: Request not pending, or scanned component does not match
    """
    data = request.get_json(silent=True) or {}
    request_id = data.get("requestId")
    component_qr = data.get("componentQR")
    if not request_id or not component_qr:
        return jsonify({"error": "requestId and componentQR are required"}), 400

    try:
        result = current_services().fulfillment.fulfill_scanned(
            request_id=request_id,
            qr_payload=component_qr,
            fulfilled_by=g.current_user.id,
        )
        return jsonify(result.to_dict()), 200

    except ShopTrackError as e:
        db.session.rollback()
        return jsonify({"error": e.message}), e.status_code
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to fulfill component request")
        return jsonify({"error": "Failed to fulfill request"}), 500


@inventory_bp.post("/component-requests/<request_id>/cancel")
@require_auth
@require_role(ROLE_ENGINEER, ROLE_ADMIN)
def cancel_request_route(request_id: str):
    """Cancel a pending request. Engineers may only cancel their own."""
    services = current_services()
    try:
        component_request = services.requests.get(request_id)
        if not has_role(g.current_user, ROLE_ADMIN) and component_request.requested_by != g.current_user.id:
            return jsonify({"error": "Only the requester or an admin can cancel this request"}), 403

        component_request = services.requests.cancel(request_id, cancelled_by=g.current_user.id)
        return jsonify(component_request.to_dict()), 200

    except ShopTrackError as e:
        db.session.rollback()
        return jsonify({"error": e.message}), e.status_code
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Failed to cancel component request")
        return jsonify({"error": "Failed to cancel request"}), 500


@inventory_bp.post("/scan-qr")
@require_auth
def scan_qr_route():
    """
    Resolve a scanned QR payload.

    Request body: {"qrCode": str, "type": "product" | "location" | "component" (optional)}
    """
    data = request.get_json(silent=True) or {}
    try:
        scan = scan_service.resolve(current_services().store, data.get("qrCode"), expected=data.get("type") or None)
        return jsonify(scan.to_dict()), 200
    except ShopTrackError as e:
        return jsonify({"error": e.message}), e.status_code
