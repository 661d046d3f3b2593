"""
DrawCalc Backend - Application Configuration
============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or a .env file),
       validates types and ranges, and exposes a module-level `settings` object.
Who:   Imported by the application factory, the inference client and the tests.
When:  Loaded once at module import time.

Environment variables (case-insensitive):
    GEMINI_API_KEY   required for the inference client
    PORT             listener port, default 8080
    HOST             bind address, default 0.0.0.0
    LOG_LEVEL        DEBUG / INFO / WARNING / ERROR / CRITICAL
    GEMINI_*         model name, timeout and generation parameters
    MAX_UPLOAD_SIZE  cap on the multipart body in bytes (10 MiB)
    CORS_*           values of the Access-Control-Allow-* headers
"""

from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class GenerationSettings(BaseModel):
    """
    Sampling parameters sent with every Gemini request.

    The defaults are the values the calculator prompt was tuned against.
    """

    temperature: float = Field(default=1.0, ge=0.0, le=2.0)
    top_k: int = Field(default=64, ge=1)
    top_p: float = Field(default=0.95, gt=0.0, le=1.0)
    max_output_tokens: int = Field(default=8192, ge=1)

    model_config = {"frozen": True}

    def as_kwargs(self) -> Dict[str, Any]:
        return self.model_dump()


DEFAULT_GENERATION = GenerationSettings()


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every setting has a development default except GEMINI_API_KEY, which
    the inference client refuses to start without.
    """

    # ── Google Gemini ─────────────────────────────────────────────────────
    # How to obtain: https://aistudio.google.com/app/apikey
    gemini_api_key: str = Field(
        default="",
        description="Google Gemini API key used by the inference client",
    )
    gemini_model: str = Field(default="gemini-1.5-flash")

    # Upper bound on a single generate_content call; no retry follows a timeout
    gemini_timeout_seconds: float = Field(default=60.0, gt=0, le=600)

    gemini_temperature: float = Field(default=DEFAULT_GENERATION.temperature, ge=0.0, le=2.0)
    gemini_top_k: int = Field(default=DEFAULT_GENERATION.top_k, ge=1)
    gemini_top_p: float = Field(default=DEFAULT_GENERATION.top_p, gt=0.0, le=1.0)
    gemini_max_output_tokens: int = Field(default=DEFAULT_GENERATION.max_output_tokens, ge=1)

    # ── Uploads ───────────────────────────────────────────────────────────
    # Default: 10 MiB = 10 * 1024 * 1024 = 10485760
    max_upload_size: int = Field(default=10_485_760, ge=1_048_576, le=52_428_800)

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_allow_origin: str = Field(default="*")
    cors_allow_methods: str = Field(default="POST, GET, OPTIONS, PUT, DELETE")
    cors_allow_headers: str = Field(
        default="Accept, Content-Type, Content-Length, Authorization"
    )

    # ── Server ────────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("gemini_api_key")
    @classmethod
    def strip_api_key(cls, v: str) -> str:
        return v.strip()

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def generation(self) -> GenerationSettings:
        """Groups the gemini_* sampling fields into one immutable value."""
        return GenerationSettings(
            temperature=self.gemini_temperature,
            top_k=self.gemini_top_k,
            top_p=self.gemini_top_p,
            max_output_tokens=self.gemini_max_output_tokens,
        )

# Module-level instance, used when create_app() is not handed one explicitly
settings = Settings()
