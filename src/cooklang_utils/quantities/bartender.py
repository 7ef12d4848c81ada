"""Bartender-friendly volume conversion for cocktail recipes.

Cocktail specs are written in dashes, barspoons and round ounce
fractions rather than precise metric conversions. The helpers here
convert a volume to millilitres using bar-standard measures and then
pick the unit a bartender would actually reach for.
"""

import dataclasses
import enum
import logging
from typing import Iterable, Optional

from cooklang_utils.quantities.formatting import (
    format_as_fraction,
    is_nice_fraction,
    round_to_nice_fraction,
)
from cooklang_utils.quantities.units import UnitSystem

logger = logging.getLogger(__name__)


class ConversionMode(enum.Enum):
    PRECISE = "precise"
    BARTENDER = "bartender"


# --- Constants ---

ML_PER_OZ = 30.0  # bar standard; a fluid ounce is really ML_PER_OZ_PRECISE
ML_PER_OZ_PRECISE = 29.5735
ML_PER_TBSP = 15.0
ML_PER_TSP = 5.0
ML_PER_CUP = 240.0
ML_PER_DASH = 0.92
ML_PER_SPLASH = 7.5
ML_PER_BARSPOON = 5.0
ML_PER_JIGGER = 45.0
ML_PER_PONY = 30.0


@dataclasses.dataclass(frozen=True)
class CocktailUnit:
    name: str
    aliases: tuple
    ml_value: float
    system: Optional[UnitSystem] = None
    is_cocktail: bool = False

    @property
    def us_value(self) -> float:
        """Size of the unit in bar ounces."""
        return self.ml_value / ML_PER_OZ


COCKTAIL_UNITS = [
    # Bar measures, the same in every system
    CocktailUnit("dash", ("dashes",), ML_PER_DASH, is_cocktail=True),
    CocktailUnit("splash", ("splashes",), ML_PER_SPLASH, is_cocktail=True),
    CocktailUnit(
        "barspoon",
        ("barspoons", "bar spoon", "bar spoons"),
        ML_PER_BARSPOON,
        is_cocktail=True,
    ),
    CocktailUnit("jigger", ("jiggers",), ML_PER_JIGGER, is_cocktail=True),
    CocktailUnit("pony", ("ponies",), ML_PER_PONY, is_cocktail=True),
    # US
    CocktailUnit(
        "fl oz",
        ("fluid ounce", "fluid ounces", "fl. oz", "fl. oz."),
        ML_PER_OZ,
        UnitSystem.US,
    ),
    CocktailUnit("oz", ("ounce", "ounces"), ML_PER_OZ, UnitSystem.US),
    CocktailUnit("tbsp", ("tablespoon", "tablespoons", "T"), ML_PER_TBSP, UnitSystem.US),
    CocktailUnit("tsp", ("teaspoon", "teaspoons", "t"), ML_PER_TSP, UnitSystem.US),
    CocktailUnit("cup", ("cups", "c"), ML_PER_CUP, UnitSystem.US),
    CocktailUnit("quart", ("quarts", "qt"), 946.0, UnitSystem.US),
    CocktailUnit("pint", ("pints", "pt"), 473.0, UnitSystem.US),
    CocktailUnit("gallon", ("gallons", "gal"), 3785.0, UnitSystem.US),
    # Metric
    CocktailUnit(
        "ml",
        ("milliliter", "milliliters", "millilitre", "millilitres"),
        1.0,
        UnitSystem.METRIC,
    ),
    CocktailUnit(
        "cl",
        ("centiliter", "centiliters", "centilitre", "centilitres"),
        10.0,
        UnitSystem.METRIC,
    ),
    CocktailUnit(
        "dl",
        ("deciliter", "deciliters", "decilitre", "decilitres"),
        100.0,
        UnitSystem.METRIC,
    ),
    CocktailUnit("l", ("liter", "liters", "litre", "litres"), 1000.0, UnitSystem.METRIC),
]

COCKTAIL_UNIT_LOOKUP = {
    alias: unit for unit in COCKTAIL_UNITS for alias in (unit.name, *unit.aliases)
}

# Plural display names for units that take an "s".
_PLURALS = {
    "dash": "dashes",
    "splash": "splashes",
    "cup": "cups",
    "barspoon": "barspoons",
}


@dataclasses.dataclass(frozen=True)
class SmartUnitResult:
    value: float
    unit: str

    def __str__(self) -> str:
        return format_bartender_value(self)


# --- Functions ---


def _round_half_up(value: float) -> float:
    """Round half away from zero for non-negative values (2.5 -> 3)."""
    return float(int(value + 0.5))


def get_cocktail_unit(name: str) -> Optional[CocktailUnit]:
    """Find a bar unit by name or alias.

    "T" (tablespoon) and "t" (teaspoon) match case-sensitively; everything
    else ignores case.
    """
    text = name.strip()
    if text in COCKTAIL_UNIT_LOOKUP:
        return COCKTAIL_UNIT_LOOKUP[text]
    return COCKTAIL_UNIT_LOOKUP.get(text.lower())


def select_best_unit(ml_value: float, system: UnitSystem) -> SmartUnitResult:
    """Pick the unit a bartender would use for a volume.

    Tiny volumes become dashes in every system. Metric amounts are rounded
    to 5 ml (2.5 ml below 10 ml) and shown in ml, cl or l. US amounts use
    barspoons, ounce fractions or cups depending on size.

    Args:
        ml_value: The volume in millilitres.
        system: The target system. Imperial is treated like US.

    Returns:
        A SmartUnitResult with the rounded value and unit name.

    Examples:
        >>> select_best_unit(45, UnitSystem.US)
        SmartUnitResult(value=1.5, unit='oz')
        >>> select_best_unit(100, UnitSystem.METRIC)
        SmartUnitResult(value=10.0, unit='cl')
    """
    if 0 < ml_value <= 3:
        dashes = max(_round_half_up(ml_value / ML_PER_DASH), 1.0)
        return SmartUnitResult(dashes, "dash")

    if system == UnitSystem.METRIC:
        return _select_best_metric_unit(ml_value)
    return _select_best_us_unit(ml_value)


def _select_best_metric_unit(ml_value: float) -> SmartUnitResult:
    if ml_value >= 10:
        rounded = _round_half_up(ml_value / 5) * 5
        if rounded >= 1000:
            return SmartUnitResult(rounded / 1000, "l")
        if rounded >= 100:
            return SmartUnitResult(rounded / 10, "cl")
        return SmartUnitResult(rounded, "ml")

    rounded = _round_half_up(ml_value / 2.5) * 2.5
    if rounded < 1:
        return SmartUnitResult(ml_value, "ml")
    return SmartUnitResult(rounded, "ml")


def _select_best_us_unit(ml_value: float) -> SmartUnitResult:
    oz_value = ml_value / ML_PER_OZ

    if ml_value < 10:
        barspoons = ml_value / ML_PER_BARSPOON
        if barspoons <= 2 and is_nice_fraction(barspoons, 0.1):
            return SmartUnitResult(round_to_nice_fraction(barspoons, 0.1), "barspoon")
        return SmartUnitResult(round_to_nice_fraction(oz_value, 0.05), "oz")

    if ml_value <= ML_PER_CUP:
        return SmartUnitResult(round_to_nice_fraction(oz_value, 0.05), "oz")

    cups = ml_value / ML_PER_CUP
    return SmartUnitResult(round_to_nice_fraction(cups, 0.05), "cup")


def convert_volume_bartender(
    value: float, from_unit: str, system: UnitSystem
) -> SmartUnitResult:
    """Convert a volume into bar-friendly units of another system.

    Units missing from the bar table are handed back unchanged.
    """
    unit = get_cocktail_unit(from_unit)
    if unit is None:
        logger.warning(f"Unknown bar unit '{from_unit}', leaving {value} unconverted")
        return SmartUnitResult(value, from_unit)
    return select_best_unit(value * unit.ml_value, system)


def format_bartender_value(result: SmartUnitResult) -> str:
    """Render a result as a fraction plus unit, e.g. "1 1/2 oz" or "3 dashes"."""
    unit = result.unit
    if result.value != 1:
        unit = _PLURALS.get(unit, unit)
    return f"{format_as_fraction(result.value)} {unit}"


def detect_unit_system_from_unit(unit: str) -> Optional[UnitSystem]:
    """Return the system a bar unit belongs to, or None for bar-only units."""
    cocktail_unit = get_cocktail_unit(unit)
    return cocktail_unit.system if cocktail_unit else None


def detect_ingredient_list_unit_system(units: Iterable[str]) -> Optional[UnitSystem]:
    """Find the dominant system among a recipe's units.

    Ties between US and metric go to US. Returns None when no unit
    belongs to either system.
    """
    us_count = 0
    metric_count = 0
    for unit in units:
        system = detect_unit_system_from_unit(unit)
        if system == UnitSystem.US:
            us_count += 1
        elif system == UnitSystem.METRIC:
            metric_count += 1

    if metric_count > us_count:
        return UnitSystem.METRIC
    if us_count or metric_count:
        return UnitSystem.US
    return None


def is_cocktail_specific_unit(unit: str) -> bool:
    cocktail_unit = get_cocktail_unit(unit)
    return cocktail_unit is not None and cocktail_unit.is_cocktail


def should_skip_conversion(unit: str, system: UnitSystem) -> bool:
    """Whether a unit is already in the target system or a universal bar measure."""
    if detect_unit_system_from_unit(unit) == system:
        return True
    return is_cocktail_specific_unit(unit)
