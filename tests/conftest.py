"""
Pytest configuration and fixtures for the test suite.
"""
import asyncio
import os
import sys

import httpx
import pytest
import pytest_asyncio
import respx

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from gmail_proxy_app.config import Settings
from gmail_proxy_app.main import create_app


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as an async test"
    )


@pytest.fixture(scope="session")
def anyio_backend():
    """Set the async backend for pytest-asyncio."""
    return "asyncio"


def make_settings(**overrides):
    values = {
        "client_id": "test-client-id.apps.googleusercontent.com",
        "client_secret": "test-client-secret",
        "redirect_uri": "http://localhost:3001/auth/callback",
        "session_secret": "test-session-secret",
        "revoke_on_logout": True,
        "metadata_concurrency": 10,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings():
    """Process-scoped settings."""
    return make_settings()


@pytest.fixture
def google():
    """Mock every outbound call to Google; unmatched requests fail the test."""
    with respx.mock(assert_all_called=False) as mock:
        yield mock


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest_asyncio.fixture
async def client(app, google):
    """HTTP client driving the app in-process, keeping cookies across calls."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
    await app.state.oauth_flow.aclose()
    await app.state.http_client.aclose()


@pytest.fixture
def drain_email_lookups(app):
    """Wait for the detached email lookups started by the callback."""

    async def _drain():
        pending = list(app.state.oauth_flow.pending_lookups)
        if pending:
            await asyncio.gather(*pending)

    return _drain
