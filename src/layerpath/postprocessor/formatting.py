"""Number formatting and unit helpers for program text."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

BANNER = "; " + "-" * 70


def format_number(value: float, decimals: int = 3) -> str:
    """
    Format like the ``0.###`` pattern: at most ``decimals`` digits, no trailing zeros.

    Rounds half away from zero and never emits ``-0``.

    >>> format_number(1.23456)
    '1.235'
    >>> format_number(2.0)
    '2'
    """
    quantum = Decimal(1).scaleb(-decimals)
    rounded = Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP)
    text = format(rounded, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


def format_value(value: Any, decimals: int = 3) -> str:
    """Numbers through ``format_number``; anything else verbatim."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return format_number(value, decimals)
    try:
        return format_number(float(value), decimals)
    except (TypeError, ValueError):
        return str(value)


def mm_per_s_to_mm_per_min(speed: float) -> float:
    return speed * 60.0


def mm_per_min_to_mm_per_s(speed: float) -> float:
    return speed / 60.0
