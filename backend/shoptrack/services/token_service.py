# Overview: Service-layer operations for QR login tokens; issue and single-use redemption.

"""
QR Token Service

WHY: Lets a user sign in by scanning a QR code an admin printed for them,
as an alternative to the identity provider login.

SECURITY PROPERTIES:
- Token strings are uuid4 (122 random bits), unique, not guessable
- Fixed time-to-live (QR_TOKEN_TTL_MINUTES, 15 minutes by default)
- Single use: redemption is one conditional UPDATE ... WHERE used IS NULL
  with an affected-row check, so two concurrent redemptions of the same
  token can never both succeed
- Unknown, expired and already used tokens fail identically
- Expiry is checked lazily at redemption; there is no background sweep
- Token rows are never deleted (audit)
"""

from __future__ import annotations

import logging
import uuid
from datetime import timedelta

from sqlalchemy import update

from ..errors import InvalidOrExpiredTokenError, NotFoundError
from ..models import QRToken, User
from ..store import DataStore
from .concurrency import run_with_retry
from shoptrack.time_utils import utcnow

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL = timedelta(minutes=15)


def generate_token() -> str:
    """
    Generate an opaque token string.

    uuid4 draws 122 bits from os.urandom, enough that tokens cannot be
    enumerated; uniqueness is additionally enforced by the column constraint.
    """
    return str(uuid.uuid4())


class TokenService:
    def __init__(self, store: DataStore, ttl: timedelta = DEFAULT_TOKEN_TTL):
        self.store = store
        self.ttl = ttl

    def issue(self, user_id: str) -> str:
        """
        Mint a new QR login token for user_id and return the token string.

        Authorization (admin-only) is the caller's job. Every call creates a
        new independent row; earlier live tokens of the same user stay valid.

        Raises NotFoundError if the user does not exist.
        """
        if self.store.get(User, user_id) is None:
            raise NotFoundError("User not found")

        now = utcnow()
        qr_token = QRToken(
            token=generate_token(),
            user_id=user_id,
            expires_at=now + self.ttl,
            created_at=now,
        )
        with self.store.transaction():
            self.store.add(qr_token)

        logger.info("Issued QR token %s for user %s", qr_token.id, user_id)
        return qr_token.token

    def redeem(self, token: str) -> User:
        """
        Consume token and return its owner.

        Succeeds only when the token exists, has not been used and has not
        expired. The validity check and the "mark used" write are a single
        compare-and-swap UPDATE, so at most one caller ever wins.

        Raises InvalidOrExpiredTokenError for every failure cause.
        """
        if not isinstance(token, str) or not token.strip():
            raise InvalidOrExpiredTokenError()

        def _op() -> User:
            with self.store.transaction():
                now = utcnow()
                result = self.store.execute(
                    update(QRToken)
                    .where(
                        QRToken.token == token,
                        QRToken.used.is_(None),
                        QRToken.expires_at > now,
                    )
                    .values(used=now)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    raise InvalidOrExpiredTokenError()

                user = (
                    self.store.query(User)
                    .join(QRToken, QRToken.user_id == User.id)
                    .filter(QRToken.token == token)
                    .one()
                )
            return user

        try:
            user = run_with_retry(self.store, _op)
        except InvalidOrExpiredTokenError:
            logger.warning("Rejected QR token redemption")
            raise

        logger.info("Redeemed QR token for user %s", user.id)
        return user

    def get_user_for_token(self, token: str) -> User | None:
        """Read-only check: owner of a currently redeemable token, without consuming it."""
        if not token:
            return None
        return (
            self.store.query(User)
            .join(QRToken, QRToken.user_id == User.id)
            .filter(
                QRToken.token == token,
                QRToken.used.is_(None),
                QRToken.expires_at > utcnow(),
            )
            .first()
        )
