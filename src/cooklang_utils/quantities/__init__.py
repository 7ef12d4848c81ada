"""Quantity evaluation, unit resolution and conversion utilities."""

from .bartender import (
    COCKTAIL_UNITS,
    CocktailUnit,
    ConversionMode,
    SmartUnitResult,
    convert_volume_bartender,
    detect_ingredient_list_unit_system,
    detect_unit_system_from_unit,
    format_bartender_value,
    get_cocktail_unit,
    is_cocktail_specific_unit,
    select_best_unit,
    should_skip_conversion,
)
from .formatting import (
    COMMON_FRACTIONS,
    DEFAULT_TOLERANCE,
    format_as_fraction,
    format_decimal,
    format_quantity,
    is_nice_fraction,
    parse_fraction,
    round_to_nice_fraction,
)
from .number_utils import evaluate_fraction, format_float
from .units import (
    UNIT_LOOKUP,
    UNIT_MAP,
    ConversionError,
    Dimension,
    TypedUnit,
    UnitSystem,
    convert_quantity,
    convert_to_system,
    get_unit_type,
    normalize_unit,
    resolve_unit,
)

__all__ = [
    "evaluate_fraction",
    "format_float",
    "COMMON_FRACTIONS",
    "DEFAULT_TOLERANCE",
    "format_as_fraction",
    "format_decimal",
    "format_quantity",
    "is_nice_fraction",
    "parse_fraction",
    "round_to_nice_fraction",
    "UNIT_LOOKUP",
    "UNIT_MAP",
    "ConversionError",
    "Dimension",
    "TypedUnit",
    "UnitSystem",
    "convert_quantity",
    "convert_to_system",
    "get_unit_type",
    "normalize_unit",
    "resolve_unit",
    "COCKTAIL_UNITS",
    "CocktailUnit",
    "ConversionMode",
    "SmartUnitResult",
    "convert_volume_bartender",
    "detect_ingredient_list_unit_system",
    "detect_unit_system_from_unit",
    "format_bartender_value",
    "get_cocktail_unit",
    "is_cocktail_specific_unit",
    "select_best_unit",
    "should_skip_conversion",
]
