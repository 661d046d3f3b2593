"""
DrawCalc Backend - Application Lifecycle Tests
==============================================

What we test:
    ✅ Lifespan builds the client at startup and closes it at shutdown
    ✅ A construction failure in the lifespan is logged, the app still starts
    ✅ run() exits with status 1 (CRITICAL log) when GEMINI_API_KEY is missing
    ✅ run() serves on the configured host and port with a ready client
"""

import logging
from unittest.mock import MagicMock, patch

import pytest

from drawcalc import main
from drawcalc.config import Settings
from drawcalc.exceptions import ConfigurationError
from drawcalc.main import create_app, lifespan, run
from drawcalc.services.client_provider import InferenceClientProvider


@pytest.fixture
def keep_test_logging():
    """setup_logging() replaces root handlers, which would detach caplog."""
    with patch("drawcalc.main.setup_logging") as setup:
        yield setup


@pytest.mark.usefixtures("keep_test_logging")
class TestLifespan:
    @pytest.mark.asyncio
    async def test_startup_builds_and_shutdown_closes(self, app, fake_factory, fake_client):
        async with lifespan(app):
            fake_factory.assert_called_once()
            assert fake_client.closed is False

        assert fake_client.closed is True

    @pytest.mark.asyncio
    async def test_startup_failure_is_logged(self, test_settings, caplog):
        provider = InferenceClientProvider(
            MagicMock(side_effect=ConfigurationError("GEMINI_API_KEY environment variable not set"))
        )
        app = create_app(settings=test_settings, client_provider=provider)

        with caplog.at_level(logging.ERROR, logger="drawcalc.main"):
            async with lifespan(app):
                assert provider.state == InferenceClientProvider.FAILED

        assert "GEMINI_API_KEY environment variable not set" in caplog.text

    @pytest.mark.asyncio
    async def test_shutdown_without_client_is_quiet(self, test_settings):
        factory = MagicMock(side_effect=ConfigurationError("no key"))
        app = create_app(settings=test_settings, client_provider=InferenceClientProvider(factory))

        async with lifespan(app):
            pass

        factory.assert_called_once()


@pytest.mark.usefixtures("keep_test_logging")
class TestRun:
    def test_missing_api_key_exits_with_status_1(self, monkeypatch, caplog):
        monkeypatch.setattr(main, "default_settings", Settings(_env_file=None, gemini_api_key=""))

        with patch("drawcalc.main.uvicorn.run") as serve, caplog.at_level(
            logging.CRITICAL, logger="drawcalc.main"
        ):
            with pytest.raises(SystemExit) as excinfo:
                run()

        assert excinfo.value.code == 1
        serve.assert_not_called()
        critical = [r for r in caplog.records if r.levelno == logging.CRITICAL]
        assert len(critical) == 1
        assert "GEMINI_API_KEY environment variable not set" in critical[0].getMessage()

    def test_serves_configured_address(self, monkeypatch):
        monkeypatch.setattr(
            main,
            "default_settings",
            Settings(_env_file=None, gemini_api_key="test-key", host="127.0.0.1", port=9099),
        )

        with patch("drawcalc.services.gemini_client.genai"), patch(
            "drawcalc.main.uvicorn.run"
        ) as serve:
            run()

        serve.assert_called_once()
        application = serve.call_args.args[0]
        assert serve.call_args.kwargs["host"] == "127.0.0.1"
        assert serve.call_args.kwargs["port"] == 9099
        assert application.state.client_provider.state == InferenceClientProvider.READY
