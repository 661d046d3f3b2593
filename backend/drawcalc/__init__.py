"""
DrawCalc Backend - Application Package
======================================

What: Marks the `drawcalc` directory as a Python package.
Who:  Used by uvicorn (`drawcalc.main:app`), the `drawcalc` console script, and pytest.

Architecture Note:

    ┌─────────────────────────────────────┐
    │      Routes (HTTP front door)       │  ← multipart parsing, response shaping
    ├─────────────────────────────────────┤
    │   Services (inference client)       │  ← prompt, Gemini call, JSON salvage
    ├─────────────────────────────────────┤
    │        Schemas (data records)       │  ← MathResult
    └─────────────────────────────────────┘

    Nothing is persisted; every record lives for a single request.
"""

__version__ = "1.0.0"
