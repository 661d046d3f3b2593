"""
DrawCalc Backend - Abstract Inference Client Interface
======================================================

What:  Abstract base class for the component that turns a drawing into results.
How:   Concrete implementations inherit from InferenceClient and implement
       process_drawing() and close().
Who:   Called by the /calculate route through InferenceClientProvider.

Implementations:
    - GeminiClient: Google Gemini multimodal model
    - Test doubles in tests/ return canned result lists
"""

from abc import ABC, abstractmethod
from typing import List

from drawcalc.schemas.result import MathResult


class InferenceClient(ABC):
    """
    Contract:
        - process_drawing() accepts raw image bytes and returns the decoded results
        - Failures are raised as UpstreamServiceError subclasses; nothing is retried
        - Instances hold no per-call state and are shared by concurrent requests
    """

    @abstractmethod
    async def process_drawing(self, image_data: bytes) -> List[MathResult]:
        """
        Interpret a handwritten drawing.

        Args:
            image_data: The uploaded file, sent to the model as image/png.

        Returns:
            The decoded results in model order; may be empty.

        Raises:
            UpstreamTransportError: network failure or timeout.
            MalformedUpstreamResponseError: empty or undecodable reply.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Release network/session resources. Safe to call more than once."""
        ...
