"""
Pytest configuration and shared fixtures.

Registers the ``integration`` marker (tests needing a real MongoDB) and
provides record stores for both backends plus an API test client.
"""

import mongomock
import pytest
from fastapi.testclient import TestClient
from invoicevault.api.deps import get_store
from invoicevault.api.main import app
from invoicevault.core.config import settings
from invoicevault.services.storage import JsonFileRecordStore, MongoConnectionPool, MongoRecordStore


def pytest_addoption(parser):
    """Add custom command-line options"""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests against a real MongoDB (MONGODB_URI)"
    )


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test requiring a real MongoDB"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --run-integration is specified"""
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="need --run-integration option to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture
def invoice_factory():
    """Build invoice payloads the way the browser client posts them"""
    def make(invoice_id="inv-001", **overrides):
        payload = {
            "id": invoice_id,
            "fileName": "acme-march.pdf",
            "rawTextPreview": "INVOICE ACME Corp ...",
            "invoiceNumber": "INV-1001",
            "clientName": "ACME Corp",
            "date": "2025-03-14",
            "year": 2025,
            "month": 3,
            "monthName": "March",
            "quarter": "Q1",
            "subtotal": 100.0,
            "tax": 13.0,
            "total": 113.0,
            "currency": "CAD",
            "paymentMethod": "E-Transfer",
            "hstNumber": "123456789RT0001",
            "lineItems": [
                {"description": "Widget", "quantity": 2, "unitPrice": 30, "ourPrice": 20, "amount": 60},
                {"description": "Gadget", "quantity": 1, "unitPrice": 40, "ourPrice": 25, "amount": 40},
            ],
            "category": "Hardware",
        }
        payload.update(overrides)
        return payload
    return make


@pytest.fixture
def json_store(tmp_path):
    return JsonFileRecordStore(tmp_path / "invoices.json")


@pytest.fixture
def mongo_pool():
    pool = MongoConnectionPool("mongodb://test", client_factory=lambda uri, **kwargs: mongomock.MongoClient())
    yield pool
    pool.close()


@pytest.fixture
def mongo_store(mongo_pool):
    return MongoRecordStore(mongo_pool, "invoicevault_test", "invoices")


@pytest.fixture(params=["json", "mongo"])
def store(request):
    """Run a test once per storage backend"""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def client(json_store, monkeypatch):
    """API client on a fresh JSON store with the login gate off"""
    monkeypatch.setattr(settings, "auth_enabled", False)
    app.dependency_overrides[get_store] = lambda: json_store
    yield TestClient(app)
    app.dependency_overrides.clear()
