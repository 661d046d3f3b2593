"""
DrawCalc Backend - Inference Client Provider
============================================

What:  Owns the process-wide InferenceClient and builds it at most once.
How:   A lock-guarded, once-only initialization barrier around a factory.
Who:   Created by the composition root (create_app / run), stored on
       app.state, handed to routes via Depends.

State Machine:
    UNINITIALIZED ──get()──▶ INITIALIZING ──factory ok──▶ READY
                                          └─factory raised─▶ FAILED

    READY and FAILED are terminal. Every caller racing the first get()
    blocks on the lock, then sees the same client or the same error.
"""

import logging
import threading
from typing import Callable, Optional

from drawcalc.exceptions import ConfigurationError, DrawCalcError
from drawcalc.services.inference_base import InferenceClient

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], InferenceClient]


class InferenceClientProvider:
    """
    Lazily constructs one InferenceClient and hands out that same instance.

    A threading.Lock is used rather than an asyncio one: the factory is
    synchronous, and the provider must also hold up when called from
    worker threads (tests, sync startup in run()).
    """

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"

    def __init__(self, factory: ClientFactory):
        self._factory = factory
        self._lock = threading.Lock()
        self._state = self.UNINITIALIZED
        self._client: Optional[InferenceClient] = None
        self._error: Optional[DrawCalcError] = None
        self._closed = False

    @property
    def state(self) -> str:
        return self._state

    def get(self) -> InferenceClient:
        """
        Return the shared client, constructing it on first use.

        Raises:
            ConfigurationError: construction failed, now or on an earlier call.
        """
        # Fast path once READY; the attribute writes below happen under the lock
        if self._state == self.READY and self._client is not None:
            return self._client

        with self._lock:
            if self._state == self.UNINITIALIZED:
                self._initialize()

        if self._state == self.FAILED:
            assert self._error is not None
            raise self._error.with_traceback(None)
        assert self._client is not None
        return self._client

    def _initialize(self) -> None:
        self._state = self.INITIALIZING
        logger.info("Constructing inference client")
        try:
            client = self._factory()
        except DrawCalcError as e:
            self._error = e
            self._state = self.FAILED
            logger.error("Inference client construction failed: %s", e.message)
        except Exception as e:
            self._error = ConfigurationError(
                message=f"failed to construct inference client: {e}",
                context={"error_type": type(e).__name__},
            )
            self._state = self.FAILED
            logger.error("Inference client construction failed: %s", e, exc_info=True)
        else:
            self._client = client
            self._state = self.READY
            logger.info("Inference client ready (%s)", type(client).__name__)

    def close(self) -> None:
        """Close the client if one was built; a no-op otherwise."""
        with self._lock:
            if self._closed or self._client is None:
                return
            self._closed = True
            client = self._client
        client.close()
