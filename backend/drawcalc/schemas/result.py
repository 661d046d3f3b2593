"""
DrawCalc Backend - Result Schemas
=================================

What:  The record decoded from the model reply, and the shaping rule that turns
       a list of them into the /calculate response body.
How:   MathResult validates the objects inside the model's JSON array. The model
       writes the expression under "expr"; "expression" is accepted as well.
       The response always uses "expression".

Response shape:
    exactly one result  → {"expression": ..., "result": ...}
    zero or several     → [{"expression": ..., "result": ..., "assign": true?}, ...]
"""

from typing import Any, Dict, List, Union

from pydantic import AliasChoices, BaseModel, Field, TypeAdapter


class MathResult(BaseModel):
    """
    One expression/value pair read from the model's answer.

    `result` is whatever JSON value the model produced: usually a number,
    a string for symbolic answers or abstract-concept drawings.
    """

    expression: str = Field(
        default="",
        validation_alias=AliasChoices("expr", "expression"),
        description="The expression, variable name, or drawing explanation",
    )
    result: Any = Field(default=None, description="Computed value or concept")
    # Only JSON true/false; "true" or 1 fail the decode
    assign: bool = Field(
        default=False,
        strict=True,
        description="True when the result is a value assigned to a variable",
    )

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"expression": self.expression, "result": self.result}
        if self.assign:
            payload["assign"] = True
        return payload


# Validates a whole reply in one pass: JSON syntax and the array-of-objects shape
MathResultList = TypeAdapter(List[MathResult])


def shape_results(results: List[MathResult]) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
    """
    Build the /calculate response body.

    A single result is flattened to {"expression", "result"} (assign dropped);
    anything else, including an empty list, stays an array.
    """
    if len(results) == 1:
        only = results[0]
        return {"expression": only.expression, "result": only.result}
    return [r.to_payload() for r in results]
