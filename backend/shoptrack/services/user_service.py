# Overview: User lookups and role assignment used by the token and request flows.

"""
User collaborator

Identity lives with the external identity provider. These helpers only
mirror the account (upsert on login callback / CLI), look it up, and
change its role.
"""

from __future__ import annotations

from ..errors import NotFoundError, ValidationError
from ..models import User
from ..models.common import ROLES
from ..store import DataStore
from shoptrack.time_utils import utcnow


def validate_role(role: str | None) -> str | None:
    if role is not None and role not in ROLES:
        raise ValidationError(f"Invalid role: {role!r}")
    return role


def get_user(store: DataStore, user_id: str) -> User:
    user = store.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def list_users(store: DataStore) -> list[User]:
    return store.query(User).order_by(User.created_at.asc()).all()


def upsert_user(
    store: DataStore,
    *,
    user_id: str | None = None,
    email: str | None = None,
    first_name: str | None = None,
    last_name: str | None = None,
    profile_image_url: str | None = None,
    role: str | None = None,
) -> User:
    """
    Insert a user, or update the given fields of an existing one.

    Matches on user_id when given, otherwise on email. Fields passed as None
    are left untouched on update.
    """
    validate_role(role)

    with store.transaction():
        user = None
        if user_id:
            user = store.get(User, user_id)
        elif email:
            user = store.query(User).filter(User.email == email).first()

        if user is None:
            user = User(
                email=email,
                first_name=first_name,
                last_name=last_name,
                profile_image_url=profile_image_url,
                role=role,
            )
            if user_id:
                user.id = user_id
            store.add(user)
        else:
            for field, value in (
                ("email", email),
                ("first_name", first_name),
                ("last_name", last_name),
                ("profile_image_url", profile_image_url),
                ("role", role),
            ):
                if value is not None:
                    setattr(user, field, value)
            user.updated_at = utcnow()
    return user


def set_role(store: DataStore, user_id: str, role: str) -> User:
    """Assign role (admin action, or the user's own choice on first login)."""
    if role is None:
        raise ValidationError("role is required")
    validate_role(role)

    with store.transaction():
        user = store.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        user.role = role
        user.updated_at = utcnow()
    return user
