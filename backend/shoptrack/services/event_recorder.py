# Overview: Append-only product timeline and activity audit trail.

"""
Event/Activity Recorder

WHY: Dashboards show a per-product timeline and an admin activity feed.
The recorder is never a decision point: it only appends.

ISOLATION: Writes run in their own transaction and are meant to be called
after the primary operation has committed. A database failure while
appending is rolled back, logged, and reported as None; it never turns the
triggering action into a failure.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from ..errors import AuditWriteError, ValidationError
from ..models import ActivityLog, ProductEvent
from ..models.common import PRODUCT_EVENT_TYPES
from ..store import DataStore

logger = logging.getLogger(__name__)

MAX_ACTIVITY_LIMIT = 500


class EventRecorder:
    def __init__(self, store: DataStore):
        self.store = store

    def record_product_event(
        self,
        product_id: str,
        event_type: str,
        description: str,
        user_id: str | None = None,
    ) -> ProductEvent | None:
        """Append a timeline entry; returns None if the write failed."""
        if not product_id:
            raise ValidationError("product_id is required")
        if event_type not in PRODUCT_EVENT_TYPES:
            raise ValidationError(f"Unknown product event type: {event_type!r}")
        if not description:
            raise ValidationError("description is required")

        event = ProductEvent(
            product_id=product_id,
            event_type=event_type,
            description=description,
            user_id=user_id,
        )
        try:
            return self._append(event)
        except AuditWriteError as exc:
            logger.error("Product event not recorded (product=%s, type=%s): %s", product_id, event_type, exc)
            return None

    def record_activity(
        self,
        action: str,
        user_id: str | None = None,
        entity_type: str | None = None,
        entity_id: str | None = None,
        description: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> ActivityLog | None:
        """Append an activity entry; returns None if the write failed."""
        if not action:
            raise ValidationError("action is required")

        entry = ActivityLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            ip_address=ip_address,
            user_agent=user_agent[:512] if user_agent else None,
        )
        try:
            return self._append(entry)
        except AuditWriteError as exc:
            logger.error("Activity not recorded (action=%s): %s", action, exc)
            return None

    def product_timeline(self, product_id: str) -> list[ProductEvent]:
        return (
            self.store.query(ProductEvent)
            .filter(ProductEvent.product_id == product_id)
            .order_by(ProductEvent.created_at.desc())
            .all()
        )

    def recent_activity(self, limit: int = 50) -> list[ActivityLog]:
        limit = max(1, min(int(limit), MAX_ACTIVITY_LIMIT))
        return (
            self.store.query(ActivityLog)
            .order_by(ActivityLog.created_at.desc())
            .limit(limit)
            .all()
        )

    def _append(self, entry):
        try:
            with self.store.transaction():
                self.store.add(entry)
        except SQLAlchemyError as exc:
            raise AuditWriteError(f"{type(entry).__name__} write failed: {exc}") from exc
        return entry
