"""Money / rounding helpers.

Centralized so formulas, conversion results and the rate board use identical
rounding semantics.
"""

from __future__ import annotations
import math
from decimal import Decimal, ROUND_HALF_UP, localcontext

# Default decimal context precision; widened per value when needed
_MIN_PRECISION = 28


def round_to(value: float, places: int) -> float:
    if not math.isfinite(value):
        return value
    exact = Decimal(str(value))
    with localcontext() as ctx:
        # quantize needs every integer digit plus the requested fraction digits
        ctx.prec = max(_MIN_PRECISION, exact.adjusted() + places + 2)
        quantum = Decimal(1).scaleb(-places)
        return float(exact.quantize(quantum, rounding=ROUND_HALF_UP))


def round2(value: float) -> float:
    return round_to(value, 2)
