# tests/conftest.py
import pytest

from product_registry import create_app
from product_registry.config.settings import TestingConfig
from product_registry.models.product import Caller
from product_registry.services.ledger.ledger_client import LedgerClient
from product_registry.services.registry.state_machine import RegistryStateMachine
from product_registry.services.registry.store import InMemoryProductStore


@pytest.fixture
def store():
    return InMemoryProductStore()


@pytest.fixture
def registry(store):
    """State machine over a fresh in-memory store"""
    return RegistryStateMachine(store)


@pytest.fixture
def ledger(registry):
    client = LedgerClient(registry, max_workers=4, handle_limit=50, max_page_size=50)
    yield client
    client.close()


@pytest.fixture
def manufacturer():
    return Caller(identity="maker-1", role="manufacturer")


@pytest.fixture
def distributor():
    return Caller(identity="dist-1", role="distributor")


@pytest.fixture
def retailer():
    return Caller(identity="shop-1", role="retailer")


@pytest.fixture
def app():
    """Create test app"""
    app = create_app(TestingConfig)
    yield app
    app.extensions['registry'].ledger.close()


@pytest.fixture
def client(app):
    """Create test client"""
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    """Build authorization headers for a role"""
    tokens = app.extensions['registry'].tokens

    def _headers(role, identity=None):
        token = tokens.generate_token(identity or f"{role}-user", role)
        return {'Authorization': f'Bearer {token}'}

    return _headers
