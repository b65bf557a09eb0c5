# Overview: Pytest coverage for the append-only product timeline and activity log.

import logging
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from shoptrack.errors import ValidationError
from shoptrack.models import ActivityLog, ProductEvent


class TestProductEvents:

    def test_record_and_read_timeline_newest_first(self, db_session, recorder, product, engineer):
        received = recorder.record_product_event(product.id, "received", "Booked in at counter")
        assigned = recorder.record_product_event(product.id, "assigned", "Assigned to engineer", engineer.id)
        received.created_at = received.created_at - timedelta(hours=1)
        db_session.commit()

        timeline = recorder.product_timeline(product.id)
        assert [e.id for e in timeline] == [assigned.id, received.id]
        assert timeline[0].user_id == engineer.id

    def test_required_fields(self, recorder, product):
        with pytest.raises(ValidationError):
            recorder.record_product_event(None, "received", "x")
        with pytest.raises(ValidationError):
            recorder.record_product_event(product.id, "shipped", "x")
        with pytest.raises(ValidationError):
            recorder.record_product_event(product.id, "received", "")

    def test_write_failure_is_isolated(self, db_session, recorder, product, monkeypatch, caplog):
        def broken_commit():
            raise OperationalError("INSERT INTO product_events", {}, Exception("disk I/O error"))

        monkeypatch.setattr(recorder.store, "commit", broken_commit)

        with caplog.at_level(logging.ERROR, logger="shoptrack.services.event_recorder"):
            result = recorder.record_product_event(product.id, "received", "Booked in")

        assert result is None
        assert "Product event not recorded" in caplog.text
        monkeypatch.undo()
        assert db_session.query(ProductEvent).count() == 0


class TestActivity:

    def test_record_activity(self, db_session, recorder, admin_user):
        entry = recorder.record_activity(
            action="update_role",
            user_id=admin_user.id,
            entity_type="user",
            entity_id="u-1",
            description="Set role",
            user_agent="x" * 600,
        )
        assert entry is not None
        stored = db_session.query(ActivityLog).one()
        assert stored.action == "update_role"
        assert len(stored.user_agent) == 512

    def test_anonymous_activity(self, recorder):
        assert recorder.record_activity(action="qr_login_failed").user_id is None

    def test_action_required(self, recorder):
        with pytest.raises(ValidationError):
            recorder.record_activity(action="")

    def test_recent_activity_limit_and_order(self, db_session, recorder):
        entries = [recorder.record_activity(action=f"action_{i}") for i in range(5)]
        for age, entry in enumerate(reversed(entries)):
            entry.created_at = entry.created_at - timedelta(minutes=age)
        db_session.commit()

        recent = recorder.recent_activity(limit=3)
        assert [e.action for e in recent] == ["action_4", "action_3", "action_2"]
        assert len(recorder.recent_activity(limit=0)) == 1
