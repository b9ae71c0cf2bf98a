"""Shared fixtures: a fresh SQLite database per test."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, insert, select

from app.db.engine import build_engine, get_engine, init_db
from app.db.schema import customer, product
from app.main import app
from app.services.bills import BillWriter


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.sqlite'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def writer(engine):
    return BillWriter(engine)


@pytest.fixture
def client(engine):
    app.dependency_overrides[get_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_customer(engine):
    """Insert a customer and return its id."""
    def _make(first_name="Test name", last_name="Test last name"):
        with engine.begin() as conn:
            result = conn.execute(
                insert(customer).values(first_name=first_name, last_name=last_name)
            )
            return result.inserted_primary_key[0]
    return _make


@pytest.fixture
def make_product(engine):
    """Insert a product and return its id."""
    def _make(name="Test Product", price=100000, quantity=10):
        with engine.begin() as conn:
            result = conn.execute(
                insert(product).values(
                    name=name,
                    description=f"Description of {name}",
                    price=price,
                    quantity=quantity,
                )
            )
            return result.inserted_primary_key[0]
    return _make


@pytest.fixture
def count_rows(engine):
    """Return the number of rows in a table."""
    def _count(table):
        with engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(table)).scalar_one()
    return _count
