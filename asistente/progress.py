"""Progress percentage helpers."""

from decimal import ROUND_HALF_UP, Decimal


def percent(numerator: int | float, denominator: int | float) -> int:
    """``round(numerator / denominator * 100)`` with half-up rounding.

    Python's built-in round() rounds half to even; progress bars round .5 up.
    """
    if not denominator:
        return 0
    value = Decimal(str(numerator)) / Decimal(str(denominator)) * 100
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def conversation_progress(message_count: int) -> float:
    """Cosmetic chat progress derived from the transcript length.

    Ramps 10 points per message up to 80, then 1.5 per message capped at 95.
    """
    if message_count <= 1:
        return 0.0
    if message_count < 10:
        return float(min(80, message_count * 10))
    return min(95.0, 80 + (message_count - 10) * 1.5)
