from __future__ import annotations

from ..extensions import db
from .common import ROLES, new_id
from shoptrack.time_utils import to_utc_z, utcnow


class User(db.Model):
    """
    Workshop user account.

    Identity itself is owned by the external identity provider; this row only
    mirrors it so tokens, requests and logs can reference the user.
    Role is NULL until chosen on first login or assigned by an admin.
    """
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    email = db.Column(db.String(255), nullable=True, unique=True)
    first_name = db.Column(db.String(120), nullable=True)
    last_name = db.Column(db.String(120), nullable=True)
    profile_image_url = db.Column(db.String(512), nullable=True)
    role = db.Column(db.Enum(*ROLES, name="user_role", native_enum=False), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def display_name(self) -> str:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) or (self.email or self.id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "profile_image_url": self.profile_image_url,
            "role": self.role,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class QRToken(db.Model):
    """
    Single-use, time-limited QR login credential.

    A token is redeemable iff used IS NULL and now < expires_at.
    `used` is written once by redemption and never cleared; rows are never
    deleted so issued tokens stay auditable.
    """
    __tablename__ = "qr_tokens"
    __table_args__ = (
        db.Index("ix_qr_tokens_user_id", "user_id"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    token = db.Column(db.String(64), nullable=False, unique=True, index=True)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False)
    used = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    user = db.relationship("User", backref=db.backref("qr_tokens", lazy=True))

    def to_dict(self) -> dict:
        # The token value itself is a credential and is never serialized.
        return {
            "id": self.id,
            "user_id": self.user_id,
            "expires_at": to_utc_z(self.expires_at),
            "used": to_utc_z(self.used),
            "created_at": to_utc_z(self.created_at),
        }
