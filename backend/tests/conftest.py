"""
DrawCalc Backend - Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the whole suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── test_settings: Settings isolated from the developer's .env
    ├── fake_client / fake_factory: canned InferenceClient + counting factory
    ├── app / test_client: FastAPI app wired to the fake client, HTTPX AsyncClient
    ├── sample_png_bytes: tiny PNG payload for uploads
    └── gemini_response: builder for SDK-shaped responses
"""

import os

# Set before any drawcalc import so the module-level Settings() sees them
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from drawcalc.config import Settings
from drawcalc.main import create_app
from drawcalc.services.client_provider import InferenceClientProvider

from tests.fakes import FakeInferenceClient


@pytest.fixture
def test_settings():
    """Settings with an explicit key and no .env lookup."""
    return Settings(_env_file=None, gemini_api_key="test-key-not-real", log_level="WARNING")


@pytest.fixture
def fake_client():
    return FakeInferenceClient()


@pytest.fixture
def fake_factory(fake_client):
    """A MagicMock factory so tests can assert whether construction happened."""
    return MagicMock(return_value=fake_client)


@pytest.fixture
def app(test_settings, fake_factory):
    return create_app(
        settings=test_settings,
        client_provider=InferenceClientProvider(fake_factory),
    )


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    ASGITransport does not run lifespan events, so the inference client is
    constructed lazily by the first /calculate that gets that far.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_png_bytes():
    """PNG signature plus an IHDR-sized tail; never decoded, only forwarded."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + b"\x00" * 17


@pytest.fixture
def gemini_response():
    """
    Build a MagicMock shaped like a google.generativeai response.

    Usage:
        gemini_response('[{"expr": "2+2", "result": 4}]')
        gemini_response(None)  # no candidates
    """

    def build(text):
        response = MagicMock()
        if text is None:
            response.candidates = []
            return response
        part = MagicMock()
        part.text = text
        candidate = MagicMock()
        candidate.content.parts = [part]
        response.candidates = [candidate]
        return response

    return build
