"""Numeric utilities for consistent float handling."""

import math
from decimal import Decimal, InvalidOperation

NAN = float('nan')


def F(x) -> float:
    """
    Robust float conversion for ints/floats/strings/Decimals/None.

    Single source of truth for numeric conversions. Missing or unparsable
    inputs become NaN so that downstream code can treat them as gaps instead
    of crashing on them.

    Args:
        x: Value to convert (int, float, str, Decimal or None)

    Returns:
        float: Converted value (NaN when missing)

    Raises:
        TypeError: If type is not supported
    """
    if x is None:
        return NAN
    if isinstance(x, bool):
        raise TypeError(f"Unsupported numeric type: {type(x)}")
    if isinstance(x, float):
        return x
    if isinstance(x, int):
        return float(x)
    if isinstance(x, Decimal):
        return float(x)
    if isinstance(x, str):
        text = x.strip()
        if not text:
            return NAN
        try:
            return float(Decimal(text))
        except (InvalidOperation, ValueError):
            return NAN
    raise TypeError(f"Unsupported numeric type: {type(x)}")


def is_missing(value) -> bool:
    """True for None, NaN and +/-inf."""
    if value is None:
        return True
    try:
        return not math.isfinite(value)
    except TypeError:
        return True


def clamp_length(value, minimum: int = 1) -> int:
    """Floor a window length and clamp it to a validated minimum."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return minimum
    if not math.isfinite(number):
        return minimum
    return max(minimum, int(math.floor(number)))


def clamp_float(value, default: float, minimum: float = None) -> float:
    """Coerce a real-valued knob, falling back to the default when unusable."""
    try:
        number = F(value)
    except TypeError:
        return default
    if is_missing(number):
        return default
    if minimum is not None and number < minimum:
        return minimum
    return number
