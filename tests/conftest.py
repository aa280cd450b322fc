"""
Global test configuration and fixtures for Registry Console

This module provides shared test fixtures and configuration that can be used
across all test modules. It includes settings isolation, the fake registry
service, session and storage fixtures, and the web shell test client.
"""

from datetime import datetime, timezone

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from registry_console.api.client import RegistryApiClient
from registry_console.core.config import Settings
from registry_console.core.session import SessionManager
from registry_console.core.utils.storage import MemoryKeyValueStore, TokenStorage
from registry_console.main import create_app
from registry_console.web.context import ConsoleContext
from tests.utils.factories import TEST_SECRET_KEY, FakeRegistryServer, FakeWalletProvider, TokenFactory

TEST_API_BASE_URL = "http://registry.test/api"


# ============================================================================
# Test Environment Setup
# ============================================================================

@pytest.fixture(scope="function")
def test_settings(tmp_path):
    """Settings isolated from the environment and .env"""
    return Settings(
        _env_file=None,
        ENVIRONMENT="development",
        DEV_MODE=True,
        TOKEN_STORE_URL=f"sqlite:///{tmp_path}/console.db",
        SECRET_KEY=TEST_SECRET_KEY,
        WALLET_PROVIDER_URL=None,
    )


# ============================================================================
# Registry Service Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def registry_server():
    """Fake registry service seeded with one owner and one land"""
    server = FakeRegistryServer()
    owner = server.add_owner(name="Asha Verma")
    server.add_owner(name="Ravi Kumar", email="ravi@example.com", proofId="PASSPORT-77")
    server.add_land(owner["_id"], location="Pune, Maharashtra", surveyNumber="SN-42")
    server.add_user("clerk@registry.test", "s3cret-pass")
    return server


@pytest.fixture(scope="function")
def transport(registry_server):
    return httpx.MockTransport(registry_server.handle)


@pytest_asyncio.fixture
async def api_client(transport):
    """Registry API client talking to the fake service"""
    client = RegistryApiClient(TEST_API_BASE_URL, transport=transport)
    yield client
    await client.aclose()


# ============================================================================
# Session Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def memory_store():
    return MemoryKeyValueStore()


@pytest.fixture(scope="function")
def token_storage(memory_store):
    return TokenStorage(memory_store)


@pytest.fixture(scope="function")
def session_manager(token_storage):
    return SessionManager(token_storage)


@pytest.fixture(scope="function")
def valid_token():
    return TokenFactory.create_token(user={"id": "u-1", "email": "clerk@registry.test"})


@pytest.fixture(scope="function")
def fixed_now():
    return datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# Wallet Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def wallet_provider():
    return FakeWalletProvider()


# ============================================================================
# Application Client Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def console(test_settings, memory_store, transport, wallet_provider):
    """Console wired to the fake service, an in-memory store and a fake wallet"""
    return ConsoleContext.from_settings(
        test_settings,
        store=memory_store,
        transport=transport,
        wallet_provider=wallet_provider,
    )


@pytest.fixture(scope="function")
def client(console):
    """Web shell test client; redirects are returned, not followed"""
    with TestClient(create_app(console), follow_redirects=False) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def logged_in_client(client, valid_token, console):
    """Test client whose console holds a valid session"""
    console.session.set_token(valid_token)
    return client


# ============================================================================
# Test Markers and Configuration
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers and settings"""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as exercising several components together"
    )
    config.addinivalue_line(
        "markers", "critical: mark test as critical path functionality"
    )
    config.addinivalue_line(
        "markers", "security: mark test as security-related"
    )
    config.addinivalue_line(
        "markers", "encryption: mark test as covering encryption at rest"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on file location"""
    for item in items:
        if "security" in str(item.fspath):
            item.add_marker(pytest.mark.security)
        if "critical" in str(item.fspath):
            item.add_marker(pytest.mark.critical)
