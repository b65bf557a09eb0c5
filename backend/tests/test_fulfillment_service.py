# Overview: Pytest coverage for the fulfillment engine.

"""
Fulfillment Engine Tests

Verifies:
- Matching scan fulfills the request and writes exactly one FulfillmentLog
- Mismatched scan is a conflict and leaves the request pending
- Fulfilled and cancelled requests cannot be fulfilled (no duplicate log)
- Stock quantity is not touched by fulfillment
- A failed log insert rolls back the status change as well
- A failed timeline write degrades the result but keeps the fulfillment
"""

import logging

import pytest
from sqlalchemy.exc import IntegrityError

from shoptrack.errors import AuditWriteError, ConflictError, NotFoundError, ValidationError
from shoptrack.models import Component, ComponentRequest, FulfillmentLog, ProductEvent
from shoptrack.services.event_recorder import EventRecorder
from shoptrack.services.fulfillment_service import FulfillmentEngine


class FailingRecorder(EventRecorder):
    """Recorder whose appends always fail, as if the audit tables were unavailable."""

    def _append(self, entry):
        raise AuditWriteError("audit store unavailable")


class TestFulfill:

    def test_matching_scan_fulfills(self, db_session, engine, pending_request, component, inventory_user):
        result = engine.fulfill(pending_request.id, component.id, inventory_user.id)

        assert result.request.status == "fulfilled"
        assert result.request.fulfilled_by == inventory_user.id
        assert result.request.fulfilled_at is not None
        assert result.component.id == component.id
        assert not result.degraded

        log = db_session.query(FulfillmentLog).filter_by(request_id=pending_request.id).one()
        assert log.product_id == pending_request.product_id
        assert log.component_id == component.id
        assert log.quantity == 2
        assert log.inventory_person_id == inventory_user.id

    def test_fulfill_records_component_received_event(
        self, db_session, engine, pending_request, product, component, inventory_user
    ):
        engine.fulfill(pending_request.id, component.id, inventory_user.id)

        types = [e.event_type for e in db_session.query(ProductEvent).filter_by(product_id=product.id)]
        assert sorted(types) == ["component_received", "component_requested"]

    def test_mismatched_component_conflict(
        self, db_session, engine, pending_request, other_component, inventory_user
    ):
        """Request for C1, scanning C2 -> conflict, request stays pending."""
        with pytest.raises(ConflictError) as exc_info:
            engine.fulfill(pending_request.id, other_component.id, inventory_user.id)
        assert "does not match" in str(exc_info.value)

        db_session.expire_all()
        request = db_session.get(ComponentRequest, pending_request.id)
        assert request.status == "pending"
        assert request.fulfilled_by is None
        assert db_session.query(FulfillmentLog).count() == 0

    def test_refulfill_rejected_without_duplicate_log(
        self, db_session, engine, pending_request, component, inventory_user
    ):
        engine.fulfill(pending_request.id, component.id, inventory_user.id)

        with pytest.raises(ConflictError):
            engine.fulfill(pending_request.id, component.id, inventory_user.id)

        assert db_session.query(FulfillmentLog).filter_by(request_id=pending_request.id).count() == 1

    def test_cancelled_request_cannot_be_fulfilled(
        self, db_session, engine, ledger, pending_request, component, engineer, inventory_user
    ):
        ledger.cancel(pending_request.id, cancelled_by=engineer.id)

        with pytest.raises(ConflictError):
            engine.fulfill(pending_request.id, component.id, inventory_user.id)
        assert db_session.query(FulfillmentLog).count() == 0

    def test_unknown_request(self, engine, component, inventory_user):
        with pytest.raises(NotFoundError):
            engine.fulfill("missing", component.id, inventory_user.id)

    def test_unknown_component(self, db_session, engine, pending_request, inventory_user):
        with pytest.raises(NotFoundError):
            engine.fulfill(pending_request.id, "missing", inventory_user.id)
        assert db_session.get(ComponentRequest, pending_request.id).status == "pending"

    def test_missing_identifiers(self, engine, pending_request, component):
        with pytest.raises(ValidationError):
            engine.fulfill(pending_request.id, component.id, None)

    def test_stock_quantity_unchanged(self, db_session, engine, pending_request, component, inventory_user):
        engine.fulfill(pending_request.id, component.id, inventory_user.id)

        db_session.expire_all()
        assert db_session.get(Component, component.id).stock_quantity == 12

    def test_log_write_failure_leaves_request_pending(
        self, db_session, store, engine, pending_request, component, inventory_user, monkeypatch
    ):
        def failing_flush():
            raise IntegrityError("INSERT INTO fulfillment_logs", {}, Exception("disk full"))

        monkeypatch.setattr(store, "flush", failing_flush)
        with pytest.raises(ConflictError):
            engine.fulfill(pending_request.id, component.id, inventory_user.id)
        monkeypatch.undo()

        db_session.expire_all()
        request = db_session.get(ComponentRequest, pending_request.id)
        assert request.status == "pending"
        assert request.fulfilled_by is None
        assert request.fulfilled_at is None
        assert db_session.query(FulfillmentLog).count() == 0


class TestDegradedAudit:

    def test_timeline_failure_keeps_fulfillment(
        self, db_session, store, pending_request, component, inventory_user, caplog
    ):
        engine = FulfillmentEngine(store, recorder=FailingRecorder(store))

        with caplog.at_level(logging.WARNING):
            result = engine.fulfill(pending_request.id, component.id, inventory_user.id)

        assert result.degraded
        assert "warning" in result.to_dict()
        db_session.expire_all()
        assert db_session.get(ComponentRequest, pending_request.id).status == "fulfilled"
        assert db_session.query(FulfillmentLog).count() == 1
        assert "Product event not recorded" in caplog.text

    def test_no_recorder_is_not_degraded(self, db_session, store, pending_request, component, inventory_user):
        result = FulfillmentEngine(store).fulfill(pending_request.id, component.id, inventory_user.id)

        assert result.timeline_event is None
        assert not result.degraded
        assert "warning" not in result.to_dict()


class TestScannedPayload:

    def test_tagged_component_payload(self, engine, pending_request, inventory_user):
        result = engine.fulfill_scanned(pending_request.id, "component:CMP-LM317", inventory_user.id)
        assert result.request.status == "fulfilled"

    def test_untagged_component_payload(self, engine, pending_request, inventory_user):
        result = engine.fulfill_scanned(pending_request.id, "CMP-LM317", inventory_user.id)
        assert result.request.status == "fulfilled"

    def test_unknown_payload(self, engine, pending_request, inventory_user):
        with pytest.raises(NotFoundError):
            engine.fulfill_scanned(pending_request.id, "component:NOPE", inventory_user.id)

    def test_product_label_rejected(self, engine, pending_request, inventory_user):
        with pytest.raises(ValidationError):
            engine.fulfill_scanned(pending_request.id, "product:REP-0001", inventory_user.id)


class TestListFulfillments:

    def test_newest_first(self, engine, ledger, product, component, engineer, inventory_user):
        first = ledger.create(product.id, component.id, 1, engineer.id)
        second = ledger.create(product.id, component.id, 1, engineer.id)
        engine.fulfill(first.id, component.id, inventory_user.id)
        engine.fulfill(second.id, component.id, inventory_user.id)

        logs = engine.list_fulfillments()
        assert [log.request_id for log in logs] == [second.id, first.id]
        assert len(engine.list_fulfillments(limit=1)) == 1
