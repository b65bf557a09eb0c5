from __future__ import annotations

from ..extensions import db
from .common import PRODUCT_STATUSES, new_id
from shoptrack.time_utils import to_utc_z, utcnow


class ShelfLocation(db.Model):
    """Physical storage location with its own scannable code."""
    __tablename__ = "shelf_locations"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    location_name = db.Column(db.String(120), nullable=False)
    qr_code = db.Column(db.String(128), nullable=False, unique=True, index=True)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "location_name": self.location_name,
            "qr_code": self.qr_code,
            "description": self.description,
            "created_at": to_utc_z(self.created_at),
        }


class Product(db.Model):
    """
    Item brought in for repair.

    Products are created and moved around by the inventory dashboards; the
    request/fulfillment core only reads them.
    """
    __tablename__ = "products"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    unique_repair_id = db.Column(db.String(64), nullable=False, unique=True)
    product_name = db.Column(db.String(255), nullable=False)
    company_name = db.Column(db.String(255), nullable=False)
    problem_description = db.Column(db.Text, nullable=False)
    is_repeated_item = db.Column(db.Boolean, nullable=False, default=False)
    qr_code_data = db.Column(db.String(128), nullable=True, unique=True, index=True)
    shelf_location_id = db.Column(db.String(36), db.ForeignKey("shelf_locations.id"), nullable=True)
    status = db.Column(
        db.Enum(*PRODUCT_STATUSES, name="product_status", native_enum=False),
        nullable=False,
        default="pending",
    )
    assigned_engineer_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)
    created_by = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    shelf_location = db.relationship("ShelfLocation")

    def summary(self) -> dict:
        return {
            "id": self.id,
            "unique_repair_id": self.unique_repair_id,
            "product_name": self.product_name,
            "company_name": self.company_name,
        }

    def to_dict(self) -> dict:
        return {
            **self.summary(),
            "problem_description": self.problem_description,
            "is_repeated_item": self.is_repeated_item,
            "qr_code_data": self.qr_code_data,
            "shelf_location_id": self.shelf_location_id,
            "status": self.status,
            "assigned_engineer_id": self.assigned_engineer_id,
            "created_by": self.created_by,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Component(db.Model):
    """
    Spare part kept on a shelf.

    stock_quantity is informational: requests and fulfillments do not
    check or decrement it.
    """
    __tablename__ = "components"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    component_name = db.Column(db.String(255), nullable=False)
    qr_code = db.Column(db.String(128), nullable=False, unique=True, index=True)
    image_url = db.Column(db.String(512), nullable=True)
    datasheet_url = db.Column(db.String(512), nullable=True)
    shelf_location_id = db.Column(db.String(36), db.ForeignKey("shelf_locations.id"), nullable=True)
    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    shelf_location = db.relationship("ShelfLocation")

    def summary(self) -> dict:
        return {
            "id": self.id,
            "component_name": self.component_name,
            "qr_code": self.qr_code,
            "shelf_location_id": self.shelf_location_id,
        }

    def to_dict(self) -> dict:
        return {
            **self.summary(),
            "image_url": self.image_url,
            "datasheet_url": self.datasheet_url,
            "stock_quantity": self.stock_quantity,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
