"""Test doubles shared by the suite."""

from typing import List, Optional
from unittest.mock import AsyncMock

from drawcalc.schemas.result import MathResult
from drawcalc.services.inference_base import InferenceClient


class FakeInferenceClient(InferenceClient):
    """Returns whatever results the test loads into `process_drawing`."""

    def __init__(self, results: Optional[List[MathResult]] = None):
        # Instance attribute shadows the method below; tests set return_value / side_effect
        self.process_drawing = AsyncMock(return_value=results or [])
        self.closed = False

    async def process_drawing(self, image_data: bytes) -> List[MathResult]:
        raise NotImplementedError

    def close(self) -> None:
        self.closed = True
