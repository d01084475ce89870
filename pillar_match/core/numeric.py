"""Fixed-point helpers shared by the scorers.

Scores are computed on ``Decimal`` values built from the shortest repr of each
float, so ``3.7 - 3.5`` is exactly ``0.2`` and half-way cases round up the same
way on every platform.
"""

from decimal import ROUND_HALF_UP, Decimal

HUNDRED = Decimal(100)
_CENT = Decimal("0.01")
_UNIT = Decimal(1)


def to_decimal(value: float | int | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def clamp(value: Decimal, lo: Decimal = Decimal(0), hi: Decimal = HUNDRED) -> Decimal:
    return max(lo, min(hi, value))


def quantize(value: Decimal) -> Decimal:
    """Round to two decimal places, half up."""
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def round_half_up(value: Decimal) -> int:
    """Round to the nearest integer, half up (95.5 -> 96)."""
    return int(value.quantize(_UNIT, rounding=ROUND_HALF_UP))


def mean(values: list[Decimal]) -> Decimal:
    if not values:
        return Decimal(0)
    return sum(values, Decimal(0)) / len(values)
