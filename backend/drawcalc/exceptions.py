"""
DrawCalc Backend - Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for each failure the service can report.
How:   Each exception carries a human-readable message, a context dict, and the
       HTTP status the global handlers in main.py answer with. Error bodies are
       plain text: the message only. The context is logged server-side.
Who:   Raised by the calculate route and the inference client.

Exception Hierarchy:
    DrawCalcError (base)                      → 500
    ├── ClientInputError                      → 400 (bad form, missing field)
    ├── UploadReadError                       → 500
    ├── ConfigurationError                    → 500 (missing credential)
    ├── UpstreamServiceError                  → 500
    │   ├── UpstreamTransportError            → 500 (network / timeout)
    │   └── MalformedUpstreamResponseError    → 500 (no candidates, bad JSON)
    └── ResponseEncodingError                 → 500

Nothing in this hierarchy is retried.
"""

from typing import Any, Dict, Optional


class DrawCalcError(Exception):
    """
    Base exception for all DrawCalc application errors.

    Attributes:
        message:  Error description returned as the plain-text response body
        context:  Additional debug info (logged, NOT returned to the client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ClientInputError(DrawCalcError):
    """
    Raised when the upload itself is unusable.

    When:    Non-multipart body, unparsable form, body over the size cap,
             missing `drawing` field.
    HTTP:    400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Bad request",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UploadReadError(DrawCalcError):
    """Raised when the uploaded file cannot be read into memory."""

    def __init__(
        self,
        message: str = "Error reading uploaded file",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConfigurationError(DrawCalcError):
    """
    Raised when the inference client cannot be constructed.

    What:    GEMINI_API_KEY is missing, or the SDK rejected its configuration.
    When:    First call to InferenceClientProvider.get(); at startup for the
             console script, which exits non-zero on it.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Inference client is not configured",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UpstreamServiceError(DrawCalcError):
    """Base for failures talking to, or understanding, the remote model."""

    def __init__(
        self,
        message: str = "Inference service failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UpstreamTransportError(UpstreamServiceError):
    """
    Raised when the Gemini call fails on the wire or runs past its timeout.

    The message keeps the SDK's error text so the caller can tell a quota
    error from a timeout without reading server logs.
    """


class MalformedUpstreamResponseError(UpstreamServiceError):
    """
    Raised when Gemini answers but the answer is unusable.

    When:    No candidates / no content parts, or the reply text is not a
             JSON array of results even after the salvage parse.
    """


class ResponseEncodingError(DrawCalcError):
    """Raised when the decoded results cannot be serialized to JSON."""

    def __init__(
        self,
        message: str = "Error encoding response",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
