"""
Pytest fixtures for shoptrack backend tests.

Provides test database setup, users for each dashboard role, a small
workshop inventory, and a test client with a login helper.
"""

import pytest

from shoptrack import create_app
from shoptrack.config import TestConfig
from shoptrack.extensions import db
from shoptrack.models import User, ShelfLocation, Product, Component
from shoptrack.services.event_recorder import EventRecorder
from shoptrack.services.fulfillment_service import FulfillmentEngine
from shoptrack.services.request_ledger import RequestLedger
from shoptrack.services.token_service import TokenService
from shoptrack.store import DataStore


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def store(db_session):
    return DataStore(db_session)


@pytest.fixture(scope='function')
def recorder(store):
    return EventRecorder(store)


@pytest.fixture(scope='function')
def token_service(store):
    return TokenService(store)


@pytest.fixture(scope='function')
def ledger(store, recorder):
    return RequestLedger(store, recorder=recorder)


@pytest.fixture(scope='function')
def engine(store, recorder):
    return FulfillmentEngine(store, recorder=recorder)


def _make_user(db_session, email, role):
    first, _, _ = email.partition("@")
    user = User(email=email, first_name=first.capitalize(), last_name="Test", role=role)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def admin_user(db_session):
    return _make_user(db_session, "admin@shop.test", "admin")


@pytest.fixture(scope='function')
def engineer(db_session):
    return _make_user(db_session, "engineer@shop.test", "engineer")


@pytest.fixture(scope='function')
def other_engineer(db_session):
    return _make_user(db_session, "engineer2@shop.test", "engineer")


@pytest.fixture(scope='function')
def inventory_user(db_session):
    return _make_user(db_session, "inventory@shop.test", "inventory")


@pytest.fixture(scope='function')
def shelf(db_session):
    location = ShelfLocation(location_name="Rack A / Shelf 3", qr_code="LOC-A3")
    db_session.add(location)
    db_session.commit()
    return location


@pytest.fixture(scope='function')
def product(db_session, inventory_user, shelf):
    """Repair job brought in by inventory staff."""
    product = Product(
        unique_repair_id="REP-0001",
        product_name="Bench Power Supply",
        company_name="Acme Labs",
        problem_description="No output on channel 2",
        qr_code_data="REP-0001",
        shelf_location_id=shelf.id,
        created_by=inventory_user.id,
    )
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def component(db_session, shelf):
    component = Component(
        component_name="LM317 regulator",
        qr_code="CMP-LM317",
        shelf_location_id=shelf.id,
        stock_quantity=12,
    )
    db_session.add(component)
    db_session.commit()
    return component


@pytest.fixture(scope='function')
def other_component(db_session, shelf):
    component = Component(
        component_name="1N4007 diode",
        qr_code="CMP-1N4007",
        shelf_location_id=shelf.id,
        stock_quantity=200,
    )
    db_session.add(component)
    db_session.commit()
    return component


@pytest.fixture(scope='function')
def pending_request(ledger, product, component, engineer):
    return ledger.create(
        product_id=product.id,
        component_id=component.id,
        requested_quantity=2,
        requested_by=engineer.id,
    )


@pytest.fixture(scope='function')
def login(client):
    """Sign the test client in as a user (what the QR login route does)."""
    def _login(user):
        with client.session_transaction() as sess:
            sess["user_id"] = user.id
        return client
    return _login
