"""
DrawCalc Backend - Model Reply Parser
====================================

What:  Turns Gemini's free-form text reply into a list of MathResult.
How:   Two stages, nothing more:
         1. Strict decode of the whole text as a JSON array of result objects.
         2. Salvage: cut from the first "[" to the last "]" (inclusive) and
            strict-decode that slice.
       If the salvage also fails, the error from stage 1 is reported.

Known gap:
    Taking the first "[" and the last "]" of the whole text mis-extracts when
    the model emits more than one bracketed span, e.g. prose that quotes
    "[x]" before the real array. The slice is then invalid JSON and the call
    fails; it is never silently narrowed to one of the spans.
"""

import logging
from typing import List, Optional

from pydantic import ValidationError

from drawcalc.exceptions import MalformedUpstreamResponseError
from drawcalc.schemas.result import MathResult, MathResultList

logger = logging.getLogger(__name__)


def extract_bracketed_span(text: str) -> Optional[str]:
    """
    Return text[first "[" : last "]" + 1], or None when no such span exists.

    A missing "[" starts the slice at 0 and a missing "]" ends it at the end
    of the text, so a reply with neither bracket yields the whole text back.
    """
    start = text.find("[")
    if start < 0:
        start = 0
    end = text.rfind("]")
    end = end + 1 if end >= 0 else len(text)
    if end <= start:
        return None
    return text[start:end]


def decode_results(text: str) -> List[MathResult]:
    """Strict decode; raises pydantic.ValidationError on anything but a result array."""
    return MathResultList.validate_json(text)


def parse_model_reply(text: str) -> List[MathResult]:
    """
    Decode a model reply, falling back to the salvage parse.

    Raises:
        MalformedUpstreamResponseError: neither stage produced a result array.
            The message and __cause__ carry the first (whole-text) error.
    """
    try:
        return decode_results(text)
    except ValidationError as original:
        span = extract_bracketed_span(text)
        if span is not None:
            try:
                results = decode_results(span)
            except ValidationError as salvage_error:
                logger.debug("Salvage parse failed as well: %s", salvage_error)
            else:
                logger.info(
                    "Recovered %d result(s) from a %d-char span of a %d-char reply",
                    len(results),
                    len(span),
                    len(text),
                )
                return results

        raise MalformedUpstreamResponseError(
            message=f"error parsing response as JSON: {_first_error(original)}",
            context={"reply_length": len(text), "reply_preview": text[:200]},
        ) from original


def _first_error(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    if location:
        return f"{first['msg']} at {location}"
    return first["msg"]
