"""
DrawCalc Backend - Google Gemini Inference Client
=================================================

What:  Concrete InferenceClient that asks a Gemini multimodal model to solve a
       handwritten drawing.
How:   Sends the fixed calculator prompt plus the image bytes as an inline
       image/png part, bounded by a per-call timeout, then hands the reply
       text to the response parser.
Who:   Built once per process by InferenceClientProvider; called by the
       /calculate route for every upload.

Failure policy:
    - Missing API key or SDK setup failure → ConfigurationError at construction
    - Timeout or transport failure → UpstreamTransportError, no retry
    - Empty candidates / parts or undecodable text → MalformedUpstreamResponseError
    - Task cancellation (client disconnect) propagates and aborts the call
"""

import asyncio
import logging
import time
import uuid
from typing import Any, List, Optional

import google.generativeai as genai

from drawcalc.config import DEFAULT_GENERATION, GenerationSettings, Settings
from drawcalc.exceptions import (
    ConfigurationError,
    MalformedUpstreamResponseError,
    UpstreamTransportError,
)
from drawcalc.schemas.result import MathResult
from drawcalc.services.inference_base import InferenceClient
from drawcalc.services.prompts import CALCULATION_PROMPT, IMAGE_MIME_TYPE
from drawcalc.services.response_parser import parse_model_reply

logger = logging.getLogger(__name__)


class GeminiClient(InferenceClient):
    """
    Gemini implementation of the drawing interpreter.

    The SDK keeps authentication in module-level state (genai.configure), so
    one client per process is the expected usage.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = "gemini-1.5-flash",
        generation: GenerationSettings = DEFAULT_GENERATION,
        timeout: float = 60.0,
    ):
        if not api_key:
            raise ConfigurationError(
                message="GEMINI_API_KEY environment variable not set",
                context={"setting": "gemini_api_key"},
            )

        try:
            genai.configure(api_key=api_key)
            self.model: Optional[Any] = genai.GenerativeModel(
                model_name,
                generation_config=genai.GenerationConfig(**generation.as_kwargs()),
            )
        except Exception as e:
            raise ConfigurationError(
                message=f"failed to create genai client: {e}",
                context={"model": model_name, "error_type": type(e).__name__},
            ) from e

        self.model_name = model_name
        self.generation = generation
        self.timeout = timeout

        logger.info(
            "GeminiClient initialized with model=%s, timeout=%.0fs, "
            "temperature=%s, top_k=%d, top_p=%s, max_output_tokens=%d",
            model_name,
            timeout,
            generation.temperature,
            generation.top_k,
            generation.top_p,
            generation.max_output_tokens,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiClient":
        """Factory used by the composition root; reads the key from configuration."""
        return cls(
            api_key=settings.gemini_api_key,
            model_name=settings.gemini_model,
            generation=settings.generation,
            timeout=settings.gemini_timeout_seconds,
        )

    @property
    def closed(self) -> bool:
        return self.model is None

    async def process_drawing(self, image_data: bytes) -> List[MathResult]:
        """
        Send the drawing to Gemini and decode the calculated results.

        Flow:
            1. Compose prompt text + inline image part
            2. generate_content_async, bounded by self.timeout
            3. Reject replies without candidates or content parts
            4. Strict JSON decode of the first part, salvage parse on failure
        """
        if self.model is None:
            raise UpstreamTransportError(
                message="inference client is closed",
                context={"model": self.model_name},
            )

        call_id = str(uuid.uuid4())[:8]
        contents = [
            CALCULATION_PROMPT,
            {"mime_type": IMAGE_MIME_TYPE, "data": image_data},
        ]

        logger.info(
            "[%s] Sending drawing to %s (%d bytes)",
            call_id,
            self.model_name,
            len(image_data),
        )
        start_time = time.perf_counter()

        try:
            response = await asyncio.wait_for(
                self.model.generate_content_async(
                    contents,
                    request_options={"timeout": self.timeout},
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.warning("[%s] Gemini call timed out after %.0fms", call_id, duration_ms)
            raise UpstreamTransportError(
                message=f"error generating content: timed out after {self.timeout:g}s",
                context={"call_id": call_id, "timeout": self.timeout},
            ) from e
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.warning(
                "[%s] Gemini call failed after %.0fms: %s",
                call_id,
                duration_ms,
                str(e),
            )
            raise UpstreamTransportError(
                message=f"error generating content: {e}",
                context={"call_id": call_id, "error_type": type(e).__name__},
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000
        text = self._reply_text(response, call_id)

        logger.info("[%s] Gemini replied in %.0fms with %d chars", call_id, duration_ms, len(text))
        logger.debug("[%s] Gemini response: %s", call_id, text)

        return parse_model_reply(text)

    @staticmethod
    def _reply_text(response: Any, call_id: str) -> str:
        """Text of the first part of the first candidate."""
        candidates = getattr(response, "candidates", None) or []
        content = getattr(candidates[0], "content", None) if candidates else None
        parts = getattr(content, "parts", None) or []
        if not parts:
            raise MalformedUpstreamResponseError(
                message="no response from model",
                context={"call_id": call_id, "candidates": len(candidates)},
            )
        return getattr(parts[0], "text", "") or ""

    def close(self) -> None:
        """
        Drop the model handle.

        The SDK pools its gRPC/REST transports internally and exposes no close
        call, so releasing our reference is all that can be done here.
        """
        if self.model is None:
            return
        self.model = None
        logger.info("GeminiClient closed (model=%s)", self.model_name)
