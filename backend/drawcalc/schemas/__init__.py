# Schemas package init
from drawcalc.schemas.result import MathResult, MathResultList, shape_results

__all__ = ["MathResult", "MathResultList", "shape_results"]
