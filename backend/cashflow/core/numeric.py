"""Money and percentage helpers.

Percentages are computed as ``part / whole`` rounded half-up to four decimal
places, then scaled by 100, so a ratio of 2/3 becomes ``66.67``. Currency
amounts keep two decimal places.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
RATIO_PRECISION = Decimal("0.0001")
DISPLAY_PRECISION = Decimal("0.1")
HUNDRED = Decimal(100)
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Coerce a collaborator amount (Decimal, int, float, str or None) to cents."""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """Return ``part`` as a percentage of ``whole``; 0 when ``whole`` is not positive."""
    if whole <= 0:
        return Decimal(0)
    ratio = (Decimal(part) / Decimal(whole)).quantize(RATIO_PRECISION, rounding=ROUND_HALF_UP)
    return ratio * HUNDRED


def divide_money(amount: Decimal, divisor: int) -> Decimal:
    if divisor <= 0:
        return ZERO
    return (Decimal(amount) / divisor).quantize(CENT, rounding=ROUND_HALF_UP)


def display_percentage(value: Decimal) -> Decimal:
    """One-decimal rendering used in human-readable messages only."""
    return Decimal(value).quantize(DISPLAY_PRECISION, rounding=ROUND_HALF_UP)
