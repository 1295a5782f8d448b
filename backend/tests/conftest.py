"""
Pytest fixtures for the store backend tests.

Provides an in-memory app, a test client, and processors over a small
seeded store (with and without the snapshot gate).
"""

import pytest

from retailpos import create_app
from retailpos.config import Config
from retailpos.domain import Customer, Lot, Product, StoreState, Supplier, User, Variant
from retailpos.extensions import db
from retailpos.policy import StorePolicy
from retailpos.processor import EXTENSION_KEY, CommerceEventProcessor
from retailpos.services.snapshot_service import SnapshotGate


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SNAPSHOT_KEY = "POS_DATA_TEST"
    SEED_DEMO_DATA = False
    ALLOW_NEGATIVE_STOCK = True
    ALLOW_OVER_RECEIVE = True


def seeded_state() -> StoreState:
    """
    p-1  Widget: plain product, stock 10, cost 20.00
    p-2  Gadget: two variants (S: 5, L: 3), product counter 0
    p-3  Vitamins: batch-tracked, one lot of 10
    s-1  Acme supplier; c-1 Alice customer; u-1 admin user
    """
    state = StoreState.initial()
    state.products = [
        Product(id="p-1", name="Widget", sku="W-1", price_cents=5000, cost_price_cents=2000,
                stock=10, min_stock_level=3),
        Product(id="p-2", name="Gadget", sku="G-1", price_cents=3000, cost_price_cents=1000,
                stock=0, variants=[
                    Variant(id="v-2s", name="Small", price_cents=3000, stock=5),
                    Variant(id="v-2l", name="Large", price_cents=4000, stock=3),
                ]),
        Product(id="p-3", name="Vitamins", sku="VIT-1", price_cents=1500, cost_price_cents=500,
                stock=10, has_batch=True, lots=[
                    Lot(id="lot-a", lot_number="A-100", quantity=10, cost_price_cents=500,
                        expiry_date="2027-06-30"),
                ]),
    ]
    state.suppliers = [Supplier(id="s-1", name="Sam", business_name="Acme")]
    state.customers = [Customer(id="c-1", name="Alice")]
    state.users = [User(id="u-1", name="Admin User", email="admin@pos.local", role="Admin")]
    return state


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestingConfig)

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
    """Fresh database and no cached processor for each test."""
    with app.app_context():
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        app.extensions.pop(EXTENSION_KEY, None)

        yield db.session

        db.session.rollback()
        app.extensions.pop(EXTENSION_KEY, None)


@pytest.fixture
def state():
    return seeded_state()


@pytest.fixture
def processor(state):
    """In-memory processor (no persistence) over the seeded store."""
    return CommerceEventProcessor(state, StorePolicy())


@pytest.fixture
def strict_processor(state):
    """Negative stock and over-receiving both disallowed."""
    return CommerceEventProcessor(state, StorePolicy(allow_negative_stock=False, allow_over_receive=False))


@pytest.fixture
def gate(app, db_session):
    return SnapshotGate(app.config["SNAPSHOT_KEY"])


@pytest.fixture
def api_processor(app, db_session, gate):
    """Seeded processor installed as the app-wide one, persisting through the gate."""
    processor = CommerceEventProcessor(seeded_state(), StorePolicy.from_config(app.config), gate)
    app.extensions[EXTENSION_KEY] = processor
    return processor
