# Overview: Single capability check consumed by the route decorators.

"""
Role capabilities

Every dashboard route is gated on exactly one check: does the signed-in
user hold one of the roles the route names? Authorization stays here and in
decorators.py; the services never look at roles.

A user whose role is still unset holds no capability.
"""

from __future__ import annotations

from .models import User
from .models.common import ROLES


def has_role(user: User | None, *roles: str) -> bool:
    """True if user exists and its role is one of roles (exact match)."""
    unknown = [r for r in roles if r not in ROLES]
    if unknown:
        raise ValueError(f"Unknown role(s): {', '.join(unknown)}")
    if user is None or not user.role:
        return False
    return user.role in roles
