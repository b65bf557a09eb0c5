# Overview: Pytest coverage for QR login token issuing and redemption.

"""
QR Token Service Tests

Verifies:
- Round trip: issue then redeem returns the owning user
- Single use: a second redemption fails
- Expiry: an expired token fails even if never used
- Unknown / blank tokens fail with the same error as used or expired ones
- Each issue creates an independent token row
"""

import time
from datetime import timedelta

import pytest

from shoptrack.errors import InvalidOrExpiredTokenError, NotFoundError
from shoptrack.models import QRToken
from shoptrack.services.token_service import DEFAULT_TOKEN_TTL, TokenService
from shoptrack.time_utils import utcnow


class TestIssue:

    def test_issue_persists_token_with_ttl(self, db_session, token_service, engineer):
        before = utcnow()
        token = token_service.issue(engineer.id)

        row = db_session.query(QRToken).filter_by(token=token).one()
        assert row.user_id == engineer.id
        assert row.used is None
        assert before + DEFAULT_TOKEN_TTL <= row.expires_at <= utcnow() + DEFAULT_TOKEN_TTL

    def test_default_ttl_is_fifteen_minutes(self):
        assert DEFAULT_TOKEN_TTL == timedelta(minutes=15)

    def test_issue_returns_uuid_shaped_unique_strings(self, token_service, engineer):
        tokens = {token_service.issue(engineer.id) for _ in range(5)}
        assert len(tokens) == 5
        for token in tokens:
            assert len(token) == 36
            assert token.count("-") == 4

    def test_multiple_live_tokens_per_user(self, db_session, token_service, engineer):
        first = token_service.issue(engineer.id)
        second = token_service.issue(engineer.id)

        assert db_session.query(QRToken).filter_by(user_id=engineer.id).count() == 2
        # Issuing a new token does not invalidate the older one
        assert token_service.redeem(first).id == engineer.id
        assert token_service.redeem(second).id == engineer.id

    def test_issue_for_unknown_user(self, db_session, token_service):
        with pytest.raises(NotFoundError):
            token_service.issue("no-such-user")
        assert db_session.query(QRToken).count() == 0


class TestRedeem:

    def test_round_trip(self, token_service, engineer):
        token = token_service.issue(engineer.id)
        user = token_service.redeem(token)
        assert user.id == engineer.id

    def test_redeem_marks_token_used(self, db_session, token_service, engineer):
        token = token_service.issue(engineer.id)
        token_service.redeem(token)

        row = db_session.query(QRToken).filter_by(token=token).one()
        assert row.used is not None
        assert row.used <= utcnow()

    def test_second_redeem_fails(self, token_service, engineer):
        token = token_service.issue(engineer.id)
        token_service.redeem(token)

        with pytest.raises(InvalidOrExpiredTokenError):
            token_service.redeem(token)

    def test_used_timestamp_never_overwritten(self, db_session, token_service, engineer):
        token = token_service.issue(engineer.id)
        token_service.redeem(token)
        first_used = db_session.query(QRToken).filter_by(token=token).one().used

        with pytest.raises(InvalidOrExpiredTokenError):
            token_service.redeem(token)

        db_session.expire_all()
        assert db_session.query(QRToken).filter_by(token=token).one().used == first_used

    def test_expired_token_fails(self, db_session, store, engineer):
        """TTL forced to 1ms; after 10ms the unused token is rejected."""
        short_lived = TokenService(store, ttl=timedelta(milliseconds=1))
        token = short_lived.issue(engineer.id)
        time.sleep(0.01)

        with pytest.raises(InvalidOrExpiredTokenError):
            short_lived.redeem(token)

        # Expired tokens are not consumed, just rejected
        assert db_session.query(QRToken).filter_by(token=token).one().used is None

    def test_unknown_token_fails(self, token_service):
        with pytest.raises(InvalidOrExpiredTokenError):
            token_service.redeem("00000000-0000-4000-8000-000000000000")

    @pytest.mark.parametrize("value", ["", "   ", None, 12345, {"token": "x"}])
    def test_blank_or_non_string_token_fails(self, token_service, value):
        with pytest.raises(InvalidOrExpiredTokenError):
            token_service.redeem(value)

    def test_failure_causes_are_indistinguishable(self, store, token_service, engineer):
        """Unknown, used and expired tokens produce the same message."""
        used = token_service.issue(engineer.id)
        token_service.redeem(used)

        expired_service = TokenService(store, ttl=timedelta(milliseconds=1))
        expired = expired_service.issue(engineer.id)
        time.sleep(0.01)

        messages = set()
        for token in ("unknown-token", used, expired):
            with pytest.raises(InvalidOrExpiredTokenError) as exc_info:
                token_service.redeem(token)
            messages.add(str(exc_info.value))
        assert messages == {"Invalid or expired QR token"}


class TestPeek:

    def test_get_user_for_token_does_not_consume(self, token_service, engineer):
        token = token_service.issue(engineer.id)

        assert token_service.get_user_for_token(token).id == engineer.id
        assert token_service.redeem(token).id == engineer.id
        assert token_service.get_user_for_token(token) is None
