from __future__ import annotations

from ..extensions import db
from .common import REQUEST_STATUS_PENDING, REQUEST_STATUSES, new_id
from shoptrack.time_utils import to_utc_z, utcnow


class ComponentRequest(db.Model):
    """
    Engineer's demand for a quantity of one component against one product.

    LIFECYCLE: pending -> fulfilled (fulfillment engine) or pending -> cancelled.
    Both outcomes are terminal. fulfilled_by/fulfilled_at are set iff
    status == fulfilled; the CHECK constraint holds that at the database level.
    """
    __tablename__ = "component_requests"
    __table_args__ = (
        db.CheckConstraint("requested_quantity > 0", name="ck_component_requests_quantity_positive"),
        db.CheckConstraint(
            "(status = 'fulfilled' AND fulfilled_by IS NOT NULL AND fulfilled_at IS NOT NULL)"
            " OR (status != 'fulfilled' AND fulfilled_by IS NULL AND fulfilled_at IS NULL)",
            name="ck_component_requests_fulfilled_fields",
        ),
        db.Index("ix_component_requests_status_created", "status", "created_at"),
        db.Index("ix_component_requests_requested_by", "requested_by"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    product_id = db.Column(db.String(36), db.ForeignKey("products.id"), nullable=False)
    component_id = db.Column(db.String(36), db.ForeignKey("components.id"), nullable=False)
    requested_quantity = db.Column(db.Integer, nullable=False)
    status = db.Column(
        db.Enum(*REQUEST_STATUSES, name="component_request_status", native_enum=False),
        nullable=False,
        default=REQUEST_STATUS_PENDING,
    )
    requested_by = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False)
    fulfilled_by = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)
    fulfilled_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    product = db.relationship("Product")
    component = db.relationship("Component")
    requester = db.relationship("User", foreign_keys=[requested_by])
    fulfiller = db.relationship("User", foreign_keys=[fulfilled_by])

    def to_dict(self, include_summaries: bool = False) -> dict:
        data = {
            "id": self.id,
            "product_id": self.product_id,
            "component_id": self.component_id,
            "requested_quantity": self.requested_quantity,
            "status": self.status,
            "requested_by": self.requested_by,
            "fulfilled_by": self.fulfilled_by,
            "fulfilled_at": to_utc_z(self.fulfilled_at),
            "created_at": to_utc_z(self.created_at),
        }
        if include_summaries:
            data["product"] = self.product.summary() if self.product else None
            data["component"] = self.component.summary() if self.component else None
        return data


class FulfillmentLog(db.Model):
    """
    Immutable record of one fulfilled component request.

    IMMUTABLE: Never update or delete. Written in the same transaction as the
    request's pending -> fulfilled transition; request_id is UNIQUE so a
    request can never carry two fulfillment entries.
    """
    __tablename__ = "fulfillment_logs"
    __table_args__ = (
        db.UniqueConstraint("request_id", name="uq_fulfillment_logs_request_id"),
        db.Index("ix_fulfillment_logs_created", "created_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    product_id = db.Column(db.String(36), db.ForeignKey("products.id"), nullable=False)
    component_id = db.Column(db.String(36), db.ForeignKey("components.id"), nullable=False)
    request_id = db.Column(db.String(36), db.ForeignKey("component_requests.id"), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    inventory_person_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    request = db.relationship("ComponentRequest", backref=db.backref("fulfillment_log", uselist=False))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "component_id": self.component_id,
            "request_id": self.request_id,
            "quantity": self.quantity,
            "inventory_person_id": self.inventory_person_id,
            "created_at": to_utc_z(self.created_at),
        }
