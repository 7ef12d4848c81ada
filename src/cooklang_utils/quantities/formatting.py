"""Turn decimal quantities into cook-friendly fractions and back."""

import math
from typing import Optional, Tuple

from cooklang_utils.quantities.number_utils import (
    _is_fraction,
    _is_integer,
    _is_number,
    _parse_fraction,
)

# --- Constants ---

DEFAULT_TOLERANCE = 0.02

# Fractions a cook would write, as (numerator, denominator). Order breaks ties.
COMMON_FRACTIONS = [
    (1, 2),
    (1, 4),
    (3, 4),
    (1, 3),
    (2, 3),
    (1, 8),
    (3, 8),
    (5, 8),
    (7, 8),
    (1, 6),
    (5, 6),
    (1, 12),
    (5, 12),
    (7, 12),
    (11, 12),
]

# --- Functions ---


def _closest_fraction(fraction: float, tolerance: float) -> Optional[Tuple[int, int]]:
    """Find the common fraction nearest to a value in [0, 1) within tolerance."""
    best = None
    best_distance = tolerance
    for numerator, denominator in COMMON_FRACTIONS:
        distance = abs(fraction - numerator / denominator)
        if distance < best_distance:
            best = (numerator, denominator)
            best_distance = distance
    return best


def format_decimal(value: float) -> str:
    """Format a decimal with precision that shrinks as the value grows.

    Values below 0.1 keep three decimals, below 10 two, otherwise one.
    Trailing zeros are trimmed.

    Examples:
        >>> format_decimal(0.45)
        '0.45'
        >>> format_decimal(113.398)
        '113.4'
    """
    magnitude = abs(value)
    if magnitude < 0.1:
        text = f"{value:.3f}"
    elif magnitude < 10:
        text = f"{value:.2f}"
    else:
        text = f"{value:.1f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_as_fraction(value: float, tolerance: float = DEFAULT_TOLERANCE) -> str:
    """Format a value as a whole number plus a common cooking fraction.

    Args:
        value: The number to format.
        tolerance: How far the fractional part may sit from a table entry.
            Zero or negative values fall back to DEFAULT_TOLERANCE.

    Returns:
        Text such as "1 1/2", "3/8" or "2", or a trimmed decimal when no
        common fraction is close enough.

    Examples:
        >>> format_as_fraction(1.5)
        '1 1/2'
        >>> format_as_fraction(0.45)
        '0.45'
    """
    if tolerance <= 0:
        tolerance = DEFAULT_TOLERANCE
    if value < 0:
        return "-" + format_as_fraction(-value, tolerance)
    if value == 0:
        return "0"

    whole = int(value)
    fraction = value - whole
    if fraction < tolerance:
        return str(whole)
    if fraction > 1 - tolerance:
        return str(whole + 1)

    closest = _closest_fraction(fraction, tolerance)
    if closest is None:
        return format_decimal(value)
    numerator, denominator = closest
    if whole:
        return f"{whole} {numerator}/{denominator}"
    return f"{numerator}/{denominator}"


def format_quantity(value: float) -> str:
    """Short display form of a numeric quantity ("3", "1.5", "113.4")."""
    if value == int(value):
        return str(int(value))
    return format_decimal(value)


def parse_fraction(text: str) -> float:
    """Parse "w n/d", "n/d" or a plain decimal into a float.

    Raises:
        ValueError: If the text is not a number or the denominator is zero.

    Examples:
        >>> parse_fraction("2 1/4")
        2.25
    """
    cleaned = text.strip()
    if cleaned.startswith("-"):
        return -parse_fraction(cleaned[1:])

    try:
        words = cleaned.split()
        if len(words) == 2 and _is_integer(words[0]) and _is_fraction(words[1]):
            return float(int(words[0]) + _parse_fraction(words[1]))
        if len(words) == 1 and _is_fraction(cleaned):
            return float(_parse_fraction(cleaned))
    except ZeroDivisionError as e:
        raise ValueError(f"Zero denominator in fraction: {text!r}") from e

    if len(words) == 1 and _is_number(cleaned):
        value = float(cleaned)
        if math.isfinite(value):
            return value
    raise ValueError(f"Cannot parse fraction: {text!r}")


def is_nice_fraction(value: float, tolerance: float = DEFAULT_TOLERANCE) -> bool:
    """Check whether a value sits close to a whole number or common fraction."""
    if tolerance <= 0:
        tolerance = DEFAULT_TOLERANCE
    fraction = abs(value) - int(abs(value))
    if fraction < tolerance or fraction > 1 - tolerance:
        return True
    return _closest_fraction(fraction, tolerance) is not None


def round_to_nice_fraction(value: float, tolerance: float = DEFAULT_TOLERANCE) -> float:
    """Snap a value to the nearest whole number or common fraction.

    Values with no common fraction within tolerance are returned unchanged.
    Zero or negative tolerances fall back to DEFAULT_TOLERANCE.

    Examples:
        >>> round_to_nice_fraction(0.42)
        0.4166666666666667
        >>> round_to_nice_fraction(0.45)
        0.45
    """
    if tolerance <= 0:
        tolerance = DEFAULT_TOLERANCE
    if value < 0:
        return -round_to_nice_fraction(-value, tolerance)

    whole = int(value)
    fraction = value - whole
    if fraction < tolerance:
        return float(whole)
    if fraction > 1 - tolerance:
        return float(whole + 1)

    closest = _closest_fraction(fraction, tolerance)
    if closest is None:
        return value
    numerator, denominator = closest
    return whole + numerator / denominator
