import logging
import os
import tempfile

# Point the service at a throwaway SQLite database before anything imports it
_DB_DIR = tempfile.mkdtemp(prefix="inventory-api-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'inventory.db')}"
os.environ["RUN_MIGRATIONS"] = "false"
os.environ["DB_CONNECT_RETRIES"] = "1"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from inventory_api.domain.models import Base, Product
from inventory_api.infrastructure.db import SessionLocal, engine
from inventory_api.main import app

logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


@pytest.fixture(autouse=True)
def clean_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_product():
    def _make(name="TestProd", description="A test product", stock_quantity=100, low_stock_threshold=20):
        product = Product(
            name=name,
            description=description,
            stock_quantity=stock_quantity,
            low_stock_threshold=low_stock_threshold,
        )
        # Short-lived session: SQLite transactions hold the write lock
        with SessionLocal() as db:
            db.add(product)
            db.commit()
            db.refresh(product)
            db.expunge(product)
        return product
    return _make


@pytest.fixture
def product(make_product):
    return make_product()


@pytest.fixture
def read_product():
    def _read(product_id):
        with SessionLocal() as db:
            product = db.get(Product, product_id)
            if product is not None:
                db.expunge(product)
            return product
    return _read
