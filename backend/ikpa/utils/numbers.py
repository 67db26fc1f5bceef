"""Numeric helpers shared by the scoring services."""
import math
from decimal import Decimal, ROUND_HALF_UP, localcontext


def round_half_up(value: float, places: int = 0) -> float:
    """
    Round ``value`` to ``places`` decimals with ties going away from zero.

    Python's built-in ``round`` uses banker's rounding, which turns 72.5 into
    72. Scores are displayed to users, so 72.5 must become 73.

    NaN and infinities are returned unchanged.
    """
    if not math.isfinite(value):
        return value
    number = Decimal(repr(round(value, 9)))
    with localcontext() as ctx:
        # Enough digits for the integer part of any finite float
        ctx.prec = max(ctx.prec, number.adjusted() + places + 2)
        quantized = number.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    return float(quantized)


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp ``value`` into ``[lower, upper]``. NaN clamps to ``lower``."""
    if math.isnan(value):
        return lower
    return max(lower, min(upper, value))


def format_number(value: float) -> str:
    """Render a number without trailing zeros (60.0 -> '60', 0.30 -> '0.3')."""
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return text if text not in ("", "-0") else "0"
