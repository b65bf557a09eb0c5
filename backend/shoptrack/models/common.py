from __future__ import annotations

import uuid


# User roles (role-gated dashboards)
ROLE_INVENTORY = "inventory"
ROLE_ENGINEER = "engineer"
ROLE_ADMIN = "admin"
ROLES = (ROLE_INVENTORY, ROLE_ENGINEER, ROLE_ADMIN)

# Component request lifecycle: pending -> fulfilled | cancelled (both terminal)
REQUEST_STATUS_PENDING = "pending"
REQUEST_STATUS_FULFILLED = "fulfilled"
REQUEST_STATUS_CANCELLED = "cancelled"
REQUEST_STATUSES = (REQUEST_STATUS_PENDING, REQUEST_STATUS_FULFILLED, REQUEST_STATUS_CANCELLED)

PRODUCT_STATUSES = ("pending", "in_progress", "completed")

PRODUCT_EVENT_TYPES = (
    "received",
    "assigned",
    "component_requested",
    "component_received",
    "in_progress",
    "completed",
)


def new_id() -> str:
    """Opaque primary key (UUID4, 122 random bits)."""
    return str(uuid.uuid4())
