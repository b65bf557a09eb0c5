# Overview: Service-layer operations for component requests; creation, listing and cancellation.

"""
Request Ledger

LIFECYCLE:
1. pending: created by an engineer against a product repair
2. fulfilled: closed by the fulfillment engine (see fulfillment_service.py)
3. cancelled: withdrawn before fulfillment

fulfilled and cancelled are terminal.

STOCK: Creating a request does not check Component.stock_quantity.
"""

from __future__ import annotations

import logging

from sqlalchemy import update
from sqlalchemy.orm import joinedload

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Component, ComponentRequest, Product, User
from ..models.common import REQUEST_STATUS_CANCELLED, REQUEST_STATUS_PENDING
from ..store import DataStore
from .concurrency import run_with_retry
from .event_recorder import EventRecorder

logger = logging.getLogger(__name__)


def validate_quantity(value) -> int:
    """Requested quantity must be a positive integer (bools and floats rejected)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("requested_quantity must be an integer")
    if value <= 0:
        raise ValidationError("requested_quantity must be positive")
    return value


class RequestLedger:
    def __init__(self, store: DataStore, recorder: EventRecorder | None = None):
        self.store = store
        self.recorder = recorder

    def create(
        self,
        product_id: str,
        component_id: str,
        requested_quantity: int,
        requested_by: str,
    ) -> ComponentRequest:
        """
        Open a pending request for requested_quantity units of a component.

        Raises:
            ValidationError: missing identifiers or non-positive quantity
            NotFoundError: product, component or requester does not exist
        """
        for name, value in (
            ("product_id", product_id),
            ("component_id", component_id),
            ("requested_by", requested_by),
        ):
            if not value:
                raise ValidationError(f"{name} is required")
        quantity = validate_quantity(requested_quantity)

        def _op() -> ComponentRequest:
            with self.store.transaction():
                if self.store.get(Product, product_id) is None:
                    raise NotFoundError(f"Product {product_id} not found")
                if self.store.get(Component, component_id) is None:
                    raise NotFoundError(f"Component {component_id} not found")
                if self.store.get(User, requested_by) is None:
                    raise NotFoundError(f"User {requested_by} not found")

                request = ComponentRequest(
                    product_id=product_id,
                    component_id=component_id,
                    requested_quantity=quantity,
                    status=REQUEST_STATUS_PENDING,
                    requested_by=requested_by,
                )
                self.store.add(request)
            return request

        request = run_with_retry(self.store, _op)
        logger.info("Component request %s created by %s", request.id, requested_by)

        if self.recorder is not None:
            self.recorder.record_product_event(
                product_id=product_id,
                event_type="component_requested",
                description=f"Component requested: {request.id}",
                user_id=requested_by,
            )
        return request

    def get(self, request_id: str) -> ComponentRequest:
        request = self.store.get(ComponentRequest, request_id)
        if request is None:
            raise NotFoundError("Request not found")
        return request

    def list_pending(self) -> list[ComponentRequest]:
        """Pending requests with product/component loaded, oldest first (triage queue)."""
        return (
            self._joined_query()
            .filter(ComponentRequest.status == REQUEST_STATUS_PENDING)
            .order_by(ComponentRequest.created_at.asc())
            .all()
        )

    def list_for_requester(self, user_id: str) -> list[ComponentRequest]:
        """All of a user's requests with product/component loaded, newest first."""
        return (
            self._joined_query()
            .filter(ComponentRequest.requested_by == user_id)
            .order_by(ComponentRequest.created_at.desc())
            .all()
        )

    def cancel(self, request_id: str, cancelled_by: str) -> ComponentRequest:
        """
        Withdraw a pending request.

        Raises NotFoundError for an unknown id and ConflictError when the
        request already reached a terminal state.
        """
        def _op() -> ComponentRequest:
            with self.store.transaction():
                request = self.store.get(ComponentRequest, request_id)
                if request is None:
                    raise NotFoundError("Request not found")
                if request.status != REQUEST_STATUS_PENDING:
                    raise ConflictError(f"Cannot cancel request in {request.status} status")

                result = self.store.execute(
                    update(ComponentRequest)
                    .where(
                        ComponentRequest.id == request_id,
                        ComponentRequest.status == REQUEST_STATUS_PENDING,
                    )
                    .values(status=REQUEST_STATUS_CANCELLED)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    raise ConflictError("Request is no longer pending")
            self.store.session.refresh(request)
            return request

        request = run_with_retry(self.store, _op)
        logger.info("Component request %s cancelled by %s", request_id, cancelled_by)

        if self.recorder is not None:
            self.recorder.record_activity(
                action="cancel_component_request",
                user_id=cancelled_by,
                entity_type="component_request",
                entity_id=request_id,
                description=f"Cancelled component request {request_id}",
            )
        return request

    def _joined_query(self):
        return self.store.query(ComponentRequest).options(
            joinedload(ComponentRequest.product),
            joinedload(ComponentRequest.component),
        )
