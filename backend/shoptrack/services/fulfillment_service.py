# Overview: Service-layer operations for fulfilling component requests against a scanned component.

"""
Fulfillment Engine

WHY: Inventory staff close a component request by scanning the physical part.
The scan must match what was requested, a request must never be fulfilled
twice, and every fulfillment must leave exactly one FulfillmentLog row.

ATOMICITY: The pending -> fulfilled transition is a conditional
UPDATE ... WHERE status = 'pending' with an affected-row check, and the
FulfillmentLog insert happens in the same transaction. If either write fails
both are rolled back. FulfillmentLog.request_id is UNIQUE as a second guard.

AUDIT: The product timeline entry is written after commit by the recorder.
If that write fails the fulfillment still stands; the result carries
timeline_event=None.

STOCK: Component.stock_quantity is not decremented.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Component, ComponentRequest, FulfillmentLog, ProductEvent, User
from ..models.common import REQUEST_STATUS_FULFILLED, REQUEST_STATUS_PENDING
from ..store import DataStore
from . import scan_service
from .concurrency import run_with_retry
from .event_recorder import EventRecorder
from shoptrack.time_utils import utcnow

logger = logging.getLogger(__name__)

MAX_FULFILLMENT_LIMIT = 500


@dataclass
class FulfillmentResult:
    request: ComponentRequest
    component: Component
    fulfillment_log: FulfillmentLog
    timeline_event: ProductEvent | None = None
    audit_failed: bool = False

    @property
    def degraded(self) -> bool:
        """True when the fulfillment committed but its timeline entry did not."""
        return self.audit_failed

    def to_dict(self) -> dict:
        data = {
            "request": self.request.to_dict(),
            "component": self.component.to_dict(),
            "fulfillment_log": self.fulfillment_log.to_dict(),
        }
        if self.degraded:
            data["warning"] = "Fulfillment saved but timeline entry could not be recorded"
        return data


class FulfillmentEngine:
    def __init__(self, store: DataStore, recorder: EventRecorder | None = None):
        self.store = store
        self.recorder = recorder

    def fulfill(self, request_id: str, scanned_component_id: str, fulfilled_by: str) -> FulfillmentResult:
        """
        Fulfill a pending request with the component that was scanned.

        Raises:
            ValidationError: missing identifiers
            NotFoundError: request, component or fulfilling user does not exist
            ConflictError: request is not pending, or the scanned component
                does not match the request
        """
        if not request_id or not scanned_component_id or not fulfilled_by:
            raise ValidationError("request_id, component and fulfilled_by are required")

        def _op() -> tuple[ComponentRequest, Component, FulfillmentLog]:
            with self.store.transaction():
                request = self.store.get(ComponentRequest, request_id)
                if request is None:
                    raise NotFoundError("Request not found")

                component = self.store.get(Component, scanned_component_id)
                if component is None:
                    raise NotFoundError("Component not found")

                if self.store.get(User, fulfilled_by) is None:
                    raise NotFoundError("User not found")

                if request.status != REQUEST_STATUS_PENDING:
                    raise ConflictError(f"Cannot fulfill request in {request.status} status")

                if request.component_id != component.id:
                    raise ConflictError("Scanned component does not match request")

                now = utcnow()
                result = self.store.execute(
                    update(ComponentRequest)
                    .where(
                        ComponentRequest.id == request_id,
                        ComponentRequest.status == REQUEST_STATUS_PENDING,
                    )
                    .values(
                        status=REQUEST_STATUS_FULFILLED,
                        fulfilled_by=fulfilled_by,
                        fulfilled_at=now,
                    )
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    # Another caller won the race between our read and the update.
                    raise ConflictError("Request is no longer pending")

                log = FulfillmentLog(
                    product_id=request.product_id,
                    component_id=component.id,
                    request_id=request.id,
                    quantity=request.requested_quantity,
                    inventory_person_id=fulfilled_by,
                    created_at=now,
                )
                self.store.add(log)
                try:
                    self.store.flush()
                except IntegrityError as exc:
                    raise ConflictError("Request already has a fulfillment entry") from exc

            self.store.session.refresh(request)
            return request, component, log

        request, component, log = run_with_retry(self.store, _op)
        logger.info("Component request %s fulfilled by %s", request_id, fulfilled_by)

        event = None
        audit_failed = False
        if self.recorder is not None:
            event = self.recorder.record_product_event(
                product_id=request.product_id,
                event_type="component_received",
                description=f"Component {component.component_name} x{request.requested_quantity} "
                            f"supplied for request {request.id}",
                user_id=fulfilled_by,
            )
            audit_failed = event is None
            if audit_failed:
                logger.warning("Fulfillment of request %s committed without a timeline entry", request_id)

        return FulfillmentResult(request=request, component=component, fulfillment_log=log, timeline_event=event,
                                 audit_failed=audit_failed)

    def fulfill_scanned(self, request_id: str, qr_payload: str, fulfilled_by: str) -> FulfillmentResult:
        """Resolve the scanned component label, then fulfill."""
        try:
            scan = scan_service.resolve(self.store, qr_payload, expected=scan_service.KIND_COMPONENT)
        except NotFoundError:
            raise NotFoundError("Component not found")
        return self.fulfill(request_id, scan.entity.id, fulfilled_by)

    def list_fulfillments(self, limit: int = 50) -> list[FulfillmentLog]:
        limit = max(1, min(int(limit), MAX_FULFILLMENT_LIMIT))
        return (
            self.store.query(FulfillmentLog)
            .order_by(FulfillmentLog.created_at.desc())
            .limit(limit)
            .all()
        )
