"""
Pytest fixtures for souq_admin backend tests.

Provides the in-memory application, per-test table wipe, stores for both
stock paths (atomic counter and read-then-write fallback) and a command
registry bound to the atomic store.
"""

import json
from datetime import datetime
from decimal import Decimal

import pytest
from souq_admin import create_app
from souq_admin.commands import build_registry
from souq_admin.extensions import db
from souq_admin.models import Category, Customer, Product
from souq_admin.services.datastore import SqlAlchemyDataStore
from souq_admin.services.order_service import OrderNumberGenerator


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'ADMIN_API_TOKEN': None,
        'STORE_TIMEZONE': 'UTC',
    })

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
    """Store with the atomic stock counter switched on."""
    return SqlAlchemyDataStore(db_session, atomic_counters=True, readonly_sql=True)


@pytest.fixture(scope='function')
def fallback_store(db_session):
    """Store without optional primitives: stock goes through read-then-write."""
    return SqlAlchemyDataStore(db_session, atomic_counters=False, readonly_sql=False)


@pytest.fixture(scope='function')
def registry(store):
    return build_registry(store, numbers=OrderNumberGenerator())


@pytest.fixture(scope='function')
def call(registry):
    """Dispatch a command by name and return the envelope."""
    def _call(name, /, **arguments):
        return registry.dispatch(name, arguments)
    return _call


def payload_of(envelope):
    """JSON part of a successful envelope ("<message>:\\n<json>" or plain JSON)."""
    assert not envelope.get("error"), envelope["content"]
    content = envelope["content"]
    if content[:1] not in ("[", "{"):
        content = content.split(":\n", 1)[1]
    return json.loads(content)


@pytest.fixture(scope='function')
def make_product(db_session):
    """Insert a product directly through the ORM and return it."""
    counter = {"n": 0}

    def _make(name="Widget", price="10.00", stock=5, **fields):
        counter["n"] += 1
        product = Product(
            name=name,
            slug=fields.pop("slug", f"{name.lower().replace(' ', '-')}-{counter['n']}"),
            base_price=Decimal(price),
            stock_quantity=stock,
            **fields,
        )
        db_session.add(product)
        db_session.commit()
        return product

    return _make


@pytest.fixture(scope='function')
def make_category(db_session):
    def _make(name="Jewelry", slug=None):
        category = Category(name=name, slug=slug or name.lower().replace(' ', '-'))
        db_session.add(category)
        db_session.commit()
        return category

    return _make


@pytest.fixture(scope='function')
def make_customer(db_session):
    def _make(email="layla@example.com", first_name="Layla", last_name="Haddad"):
        customer = Customer(email=email, first_name=first_name, last_name=last_name)
        db_session.add(customer)
        db_session.commit()
        return customer

    return _make


def at(text):
    """UTC-naive datetime from an ISO string, for pinning created_at."""
    return datetime.fromisoformat(text)
