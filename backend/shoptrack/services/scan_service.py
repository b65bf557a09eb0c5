# Overview: Resolve scanned QR payloads to products, shelf locations or components.

"""
QR payload resolution

WHY: Prevents silent mis-scans. A bare code could match a product, a shelf
location and a component at the same time, so new labels carry an explicit
type tag and resolve against exactly one table:

    product:<qr_code_data>
    location:<qr_code>
    component:<qr_code>

COMPATIBILITY: Untagged payloads (labels printed before tagging) are still
accepted and probed in the order product -> location -> component; the first
hit wins.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import NotFoundError, ValidationError
from ..models import Component, Product, ShelfLocation
from ..store import DataStore

KIND_PRODUCT = "product"
KIND_LOCATION = "location"
KIND_COMPONENT = "component"

# Probe order for untagged payloads
LOOKUP_PRIORITY = [KIND_PRODUCT, KIND_LOCATION, KIND_COMPONENT]

_LOOKUPS = {
    KIND_PRODUCT: (Product, Product.qr_code_data),
    KIND_LOCATION: (ShelfLocation, ShelfLocation.qr_code),
    KIND_COMPONENT: (Component, Component.qr_code),
}


@dataclass
class ScanResult:
    kind: str
    entity: Product | ShelfLocation | Component

    def to_dict(self) -> dict:
        return {"type": self.kind, "result": self.entity.to_dict()}


def encode_payload(kind: str, code: str) -> str:
    """Build the tagged payload printed on a label."""
    if kind not in _LOOKUPS:
        raise ValidationError(f"Unknown QR type: {kind!r}")
    if not code:
        raise ValidationError("QR code value is required")
    return f"{kind}:{code}"


def parse_payload(payload: str) -> tuple[str | None, str]:
    """
    Split payload into (kind, code).

    kind is None for untagged payloads. A prefix that is not a known kind is
    treated as part of an untagged code, since legacy codes may contain ':'.
    """
    if payload is not None and not isinstance(payload, str):
        raise ValidationError("QR code must be a string")
    value = (payload or "").strip()
    if not value:
        raise ValidationError("QR code is required")
    prefix, sep, rest = value.partition(":")
    if sep and prefix.lower() in _LOOKUPS:
        if not rest:
            raise ValidationError("QR code value is required")
        return prefix.lower(), rest
    return None, value


def lookup(store: DataStore, kind: str, code: str):
    model, column = _LOOKUPS[kind]
    return store.query(model).filter(column == code).first()


def resolve(store: DataStore, payload: str, expected: str | None = None) -> ScanResult:
    """
    Resolve a scanned payload to its entity.

    expected restricts resolution to one kind (e.g. the fulfillment screen
    only accepts components). A tagged payload of another kind is rejected.

    Raises:
        ValidationError: empty payload, unknown expected kind, or tag/expected mismatch
        NotFoundError: nothing matches
    """
    if expected is not None and expected not in _LOOKUPS:
        raise ValidationError(f"Unknown QR type: {expected!r}")

    kind, code = parse_payload(payload)

    if kind is not None:
        if expected is not None and kind != expected:
            raise ValidationError(f"Scanned a {kind} code, expected a {expected} code")
        kinds = [kind]
    elif expected is not None:
        kinds = [expected]
    else:
        kinds = LOOKUP_PRIORITY

    for candidate in kinds:
        entity = lookup(store, candidate, code)
        if entity is not None:
            return ScanResult(kind=candidate, entity=entity)

    raise NotFoundError("QR code not found")
