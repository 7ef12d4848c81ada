import re
from decimal import Decimal

# Unicode vulgar fraction glyphs as (numerator, denominator).
UNICODE_FRAC = {
    "½": (1, 2),
    "¼": (1, 4),
    "¾": (3, 4),
    "⅓": (1, 3),
    "⅔": (2, 3),
    "⅕": (1, 5),
    "⅖": (2, 5),
    "⅗": (3, 5),
    "⅘": (4, 5),
    "⅙": (1, 6),
    "⅚": (5, 6),
    "⅐": (1, 7),
    "⅛": (1, 8),
    "⅜": (3, 8),
    "⅝": (5, 8),
    "⅞": (7, 8),
    "⅑": (1, 9),
    "⅒": (1, 10),
}

_NUMBER = r"\d+(?:\.\d+)?"
_FRACTION_TEXT = re.compile(rf"(?:(\d+)\s+)?({_NUMBER})\s*/\s*({_NUMBER})")


def _is_integer(text: str) -> bool:
    """Check if a string represents a valid integer."""
    try:
        int(text)
        return True
    except ValueError:
        return False


def _is_number(text: str) -> bool:
    """Check if a string represents a valid number (int or float)."""
    try:
        float(text)
        return True
    except ValueError:
        return False


def _is_fraction(text: str) -> bool:
    """Check if a string represents a valid fraction (e.g., '1/2')."""
    if "/" not in text:
        return False
    parts = text.split("/")
    return len(parts) == 2 and all(_is_integer(part.strip()) for part in parts)


def _parse_fraction(text: str) -> Decimal:
    """Parse a fraction string (e.g., '1/2') into a Decimal."""
    if "/" not in text:
        raise ValueError(f"Not a fraction: {text}")

    numerator_str, denominator_str = text.split("/")
    numerator = Decimal(numerator_str.strip())
    denominator = Decimal(denominator_str.strip())

    if denominator == 0:
        raise ZeroDivisionError("Division by zero in fraction")

    return numerator / denominator


def _has_leading_zero(text: str) -> bool:
    return len(text) > 1 and text[0] == "0"


def format_float(value: float) -> str:
    """Render a float in its shortest round-tripping form without exponent.

    Examples:
        >>> format_float(0.5)
        '0.5'
        >>> format_float(2.0)
        '2'
    """
    text = repr(value)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    if text.endswith(".0"):
        text = text[:-2]
    return text


def evaluate_fraction(text: str) -> str:
    """Convert fraction text inside a quantity to its decimal string.

    Handles simple fractions ('1/2'), mixed numbers ('1 1/2', '1 1 / 2')
    and Unicode vulgar fractions with an optional whole part ('1½').
    Anything that cannot be evaluated, including fractions written with
    a leading zero such as '01/2' and zero denominators, is returned
    unchanged.

    Args:
        text: Quantity text as written between the braces.

    Returns:
        The decimal representation, or the text unchanged.

    Examples:
        >>> evaluate_fraction("1 1/2")
        '1.5'
        >>> evaluate_fraction("⅓")
        '0.3333333333333333'
        >>> evaluate_fraction("01/2")
        '01/2'
    """
    stripped = text.strip()

    for index, ch in enumerate(stripped):
        if ch not in UNICODE_FRAC:
            continue
        whole_text = stripped[:index].strip()
        if stripped[index + 1 :].strip() or (whole_text and not whole_text.isdecimal()):
            return text
        numerator, denominator = UNICODE_FRAC[ch]
        whole = int(whole_text) if whole_text else 0
        return format_float(whole + numerator / denominator)

    match = _FRACTION_TEXT.fullmatch(stripped)
    if match is None:
        return text

    whole_text, numerator_text, denominator_text = match.groups()
    if _has_leading_zero(numerator_text) or _has_leading_zero(denominator_text):
        return text

    numerator = float(numerator_text)
    denominator = float(denominator_text)
    if denominator == 0:
        return text

    result = numerator / denominator
    if whole_text:
        result += int(whole_text)
    return format_float(result)
