"""
DrawCalc Backend - Health Check Route
=====================================

What:  Liveness probe for load balancers and container health checks.
How:   Always 200 with body "OK". It does not touch the inference client,
       so a missing API key or a Gemini outage never fails the probe.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_class=PlainTextResponse,
    summary="Liveness probe",
)
async def health_check() -> PlainTextResponse:
    return PlainTextResponse("OK")
