"""
DrawCalc Backend - Configuration Tests
======================================
"""

import pytest
from pydantic import ValidationError

from drawcalc.config import Settings


class TestDefaults:
    def test_server_defaults(self, monkeypatch):
        monkeypatch.delenv("PORT", raising=False)
        cfg = Settings(_env_file=None)
        assert cfg.port == 8080
        assert cfg.host == "0.0.0.0"
        assert cfg.max_upload_size == 10 * 1024 * 1024

    def test_generation_defaults(self):
        generation = Settings(_env_file=None).generation
        assert generation.temperature == 1.0
        assert generation.top_k == 64
        assert generation.top_p == 0.95
        assert generation.max_output_tokens == 8192

    def test_timeout_and_model_defaults(self):
        cfg = Settings(_env_file=None)
        assert cfg.gemini_timeout_seconds == 60
        assert cfg.gemini_model == "gemini-1.5-flash"


class TestEnvironment:
    def test_port_from_env(self, monkeypatch):
        monkeypatch.setenv("PORT", "9090")
        assert Settings(_env_file=None).port == 9090

    def test_api_key_from_env(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "  abc123  ")
        assert Settings(_env_file=None).gemini_api_key == "abc123"

    def test_missing_api_key_is_empty(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        assert Settings(_env_file=None).gemini_api_key == ""

    def test_log_level_normalized(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert Settings(_env_file=None).log_level == "DEBUG"

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_invalid_port(self, monkeypatch):
        monkeypatch.setenv("PORT", "70000")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)
