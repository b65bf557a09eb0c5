from __future__ import annotations

from ..extensions import db
from .common import PRODUCT_EVENT_TYPES, new_id
from shoptrack.time_utils import to_utc_z, utcnow


class ProductEvent(db.Model):
    """
    Timeline entry for a product (received, component requested, ...).

    IMMUTABLE: Append-only. Read newest-first by the engineer dashboard.
    """
    __tablename__ = "product_events"
    __table_args__ = (
        db.Index("ix_product_events_product_created", "product_id", "created_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    product_id = db.Column(db.String(36), db.ForeignKey("products.id"), nullable=False)
    event_type = db.Column(
        db.Enum(*PRODUCT_EVENT_TYPES, name="product_event_type", native_enum=False),
        nullable=False,
    )
    description = db.Column(db.Text, nullable=False)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "event_type": self.event_type,
            "description": self.description,
            "user_id": self.user_id,
            "created_at": to_utc_z(self.created_at),
        }


class ActivityLog(db.Model):
    """
    System-wide activity audit trail for the admin dashboard.

    IMMUTABLE: Append-only. user_id is nullable for anonymous actions
    (e.g. a failed QR login).
    """
    __tablename__ = "activity_logs"
    __table_args__ = (
        db.Index("ix_activity_logs_created", "created_at"),
        db.Index("ix_activity_logs_entity", "entity_type", "entity_id"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)
    action = db.Column(db.String(64), nullable=False)
    entity_type = db.Column(db.String(64), nullable=True)  # e.g. "product", "user", "component_request"
    entity_id = db.Column(db.String(64), nullable=True)
    description = db.Column(db.Text, nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.String(512), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "ip_address": self.ip_address,
            "created_at": to_utc_z(self.created_at),
        }
