"""Unit resolution and dimensional conversion for recipe quantities."""

import dataclasses
import enum
import functools
import logging
from typing import Dict, List, Optional, Tuple

import pint

logger = logging.getLogger(__name__)


class ConversionError(ValueError):
    """Raised when a quantity cannot be expressed in the requested unit."""


class Dimension(enum.Enum):
    MASS = "mass"
    VOLUME = "volume"
    LENGTH = "length"
    TEMPERATURE = "temperature"
    TIME = "time"
    ENERGY = "energy"
    UNKNOWN = "unknown"


class UnitSystem(enum.Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"
    US = "us"

    @classmethod
    def from_name(cls, name: str) -> "UnitSystem":
        """Look up a system by name, ignoring case and surrounding space."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown unit system: {name!r}") from None


# --- Reference tables ---

# Canonical symbol -> aliases people write in recipes.
UNIT_MAP = {
    # Mass
    "mg": ["milligram", "milligrams", "milligramme", "milligrammes"],
    "g": ["gram", "grams", "gramme", "grammes", "gr"],
    "kg": ["kilogram", "kilograms", "kilo", "kilos", "kgs"],
    "oz": ["ounce", "ounces"],
    "lb": ["pound", "pounds", "lbs"],
    # Volume
    "ml": ["milliliter", "milliliters", "millilitre", "millilitres"],
    "cl": ["centiliter", "centiliters", "centilitre", "centilitres"],
    "dl": ["deciliter", "deciliters", "decilitre", "decilitres"],
    "l": ["L", "liter", "liters", "litre", "litres"],
    "tsp": ["t", "teaspoon", "teaspoons", "tsps"],
    "tbsp": ["T", "tablespoon", "tablespoons", "tbs", "tbl", "tbsps"],
    "cup": ["c", "cups"],
    "fl oz": ["floz", "fl. oz", "fluid ounce", "fluid ounces"],
    "pt": ["pint", "pints"],
    "qt": ["quart", "quarts"],
    "gal": ["gallon", "gallons"],
    "imp fl oz": ["imperial fluid ounce", "imperial fluid ounces"],
    "imp pt": ["imperial pint", "imperial pints"],
    "imp gal": ["imperial gallon", "imperial gallons"],
    # Length
    "mm": ["millimeter", "millimeters", "millimetre", "millimetres"],
    "cm": ["centimeter", "centimeters", "centimetre", "centimetres"],
    "m": ["meter", "meters", "metre", "metres"],
    "in": ["inch", "inches", '"'],
    "ft": ["foot", "feet"],
    # Temperature
    "°C": ["°c", "℃", "degc", "celsius", "degrees celsius"],
    "°F": ["°f", "℉", "degf", "fahrenheit", "degrees fahrenheit"],
    "K": ["kelvin"],
    # Time
    "s": ["sec", "secs", "second", "seconds"],
    "min": ["mins", "minute", "minutes"],
    "h": ["hr", "hrs", "hour", "hours"],
    "d": ["day", "days"],
    # Energy
    "cal": ["calorie", "calories"],
    "kcal": ["Cal", "kilocalorie", "kilocalories"],
    "J": ["j", "joule", "joules"],
    "kJ": ["kj", "kilojoule", "kilojoules"],
}

UNIT_LOOKUP = {
    alias: canonical
    for canonical, aliases in UNIT_MAP.items()
    for alias in [canonical, *aliases]
}

# Canonical symbol -> (pint unit name, dimension).
UNIT_DEFINITIONS: Dict[str, Tuple[str, Dimension]] = {
    "mg": ("milligram", Dimension.MASS),
    "g": ("gram", Dimension.MASS),
    "kg": ("kilogram", Dimension.MASS),
    "oz": ("ounce", Dimension.MASS),
    "lb": ("pound", Dimension.MASS),
    "ml": ("milliliter", Dimension.VOLUME),
    "cl": ("centiliter", Dimension.VOLUME),
    "dl": ("deciliter", Dimension.VOLUME),
    "l": ("liter", Dimension.VOLUME),
    "tsp": ("teaspoon", Dimension.VOLUME),
    "tbsp": ("tablespoon", Dimension.VOLUME),
    "cup": ("cup", Dimension.VOLUME),
    "fl oz": ("fluid_ounce", Dimension.VOLUME),
    "pt": ("pint", Dimension.VOLUME),
    "qt": ("quart", Dimension.VOLUME),
    "gal": ("gallon", Dimension.VOLUME),
    "imp fl oz": ("imperial_fluid_ounce", Dimension.VOLUME),
    "imp pt": ("imperial_pint", Dimension.VOLUME),
    "imp gal": ("imperial_gallon", Dimension.VOLUME),
    "mm": ("millimeter", Dimension.LENGTH),
    "cm": ("centimeter", Dimension.LENGTH),
    "m": ("meter", Dimension.LENGTH),
    "in": ("inch", Dimension.LENGTH),
    "ft": ("foot", Dimension.LENGTH),
    "°C": ("degree_Celsius", Dimension.TEMPERATURE),
    "°F": ("degree_Fahrenheit", Dimension.TEMPERATURE),
    "K": ("kelvin", Dimension.TEMPERATURE),
    "s": ("second", Dimension.TIME),
    "min": ("minute", Dimension.TIME),
    "h": ("hour", Dimension.TIME),
    "d": ("day", Dimension.TIME),
    "cal": ("calorie", Dimension.ENERGY),
    "kcal": ("kilocalorie", Dimension.ENERGY),
    "J": ("joule", Dimension.ENERGY),
    "kJ": ("kilojoule", Dimension.ENERGY),
}

# The pivot unit each system converts into before picking a display unit.
SYSTEM_CANONICAL_UNITS = {
    UnitSystem.METRIC: {
        Dimension.MASS: "g",
        Dimension.VOLUME: "ml",
        Dimension.LENGTH: "cm",
        Dimension.TEMPERATURE: "°C",
    },
    UnitSystem.US: {
        Dimension.MASS: "oz",
        Dimension.VOLUME: "cup",
        Dimension.LENGTH: "in",
        Dimension.TEMPERATURE: "°F",
    },
    UnitSystem.IMPERIAL: {
        Dimension.MASS: "oz",
        Dimension.VOLUME: "imp fl oz",
        Dimension.LENGTH: "in",
        Dimension.TEMPERATURE: "°F",
    },
}

# (lower bound in the canonical unit, display unit), largest bound first.
SYSTEM_UNIT_BUCKETS: Dict[Tuple[UnitSystem, Dimension], List[Tuple[float, str]]] = {
    (UnitSystem.METRIC, Dimension.MASS): [(1000, "kg"), (0, "g")],
    (UnitSystem.METRIC, Dimension.VOLUME): [(1000, "l"), (0, "ml")],
    # 4 cups is a quart and 1/16 cup a tablespoon.
    (UnitSystem.US, Dimension.VOLUME): [
        (4, "qt"),
        (1, "cup"),
        (1 / 16, "tbsp"),
        (0, "tsp"),
    ],
    (UnitSystem.US, Dimension.MASS): [(16, "lb"), (0, "oz")],
    (UnitSystem.IMPERIAL, Dimension.VOLUME): [
        (160, "imp gal"),
        (20, "imp pt"),
        (0, "imp fl oz"),
    ],
    (UnitSystem.IMPERIAL, Dimension.MASS): [(16, "lb"), (0, "oz")],
}

_BUCKET_EPSILON = 1e-9


@dataclasses.dataclass(frozen=True)
class TypedUnit:
    """A unit symbol tagged with its physical dimension.

    Units missing from the reference table get Dimension.UNKNOWN and no
    pint unit; they only compare equal to the same normalized symbol.
    """

    symbol: str
    dimension: Dimension
    pint_unit: Optional[str] = None

    @property
    def is_known(self) -> bool:
        return self.pint_unit is not None


@functools.lru_cache(maxsize=None)
def get_unit_registry() -> pint.UnitRegistry:
    """Shared pint registry, built on first use."""
    return pint.UnitRegistry()


def normalize_unit(unit: str) -> str:
    """Normalize a unit string to its canonical symbol.

    Case-sensitive aliases ("T" for tablespoon, "t" for teaspoon) are
    matched first. Everything else is matched case-insensitively with a
    trailing period dropped. Unrecognized units come back lowercased with
    internal whitespace collapsed.

    Examples:
        >>> normalize_unit("Tablespoons")
        'tbsp'
        >>> normalize_unit("oz.")
        'oz'
        >>> normalize_unit("Cloves")
        'cloves'
    """
    text = unit.strip()
    if text in UNIT_LOOKUP:
        return UNIT_LOOKUP[text]
    folded = " ".join(text.lower().rstrip(".").split())
    return UNIT_LOOKUP.get(folded, folded)


@functools.lru_cache(maxsize=None)
def resolve_unit(unit: str) -> Optional[TypedUnit]:
    """Resolve free text to a TypedUnit, or None for an empty unit."""
    if not unit or not unit.strip():
        return None
    symbol = normalize_unit(unit)
    definition = UNIT_DEFINITIONS.get(symbol)
    if definition is None:
        return TypedUnit(symbol, Dimension.UNKNOWN)
    pint_unit, dimension = definition
    return TypedUnit(symbol, dimension, pint_unit)


def get_unit_type(unit: str) -> str:
    """Return the dimension name of a unit ("mass", "volume", ...) or ""."""
    typed = resolve_unit(unit)
    return typed.dimension.value if typed else ""


def convert_quantity(value: float, from_unit: TypedUnit, to_unit: TypedUnit) -> float:
    """Convert a value between two typed units.

    Raises:
        ConversionError: If the units measure different dimensions, or
            either is unknown and the symbols differ.
    """
    if from_unit.dimension != to_unit.dimension:
        raise ConversionError(
            f"Cannot convert {from_unit.symbol} ({from_unit.dimension.value}) "
            f"to {to_unit.symbol} ({to_unit.dimension.value})"
        )
    if from_unit.symbol == to_unit.symbol:
        return value
    if not (from_unit.is_known and to_unit.is_known):
        raise ConversionError(
            f"No conversion known between {from_unit.symbol} and {to_unit.symbol}"
        )

    ureg = get_unit_registry()
    try:
        quantity = ureg.Quantity(value, from_unit.pint_unit).to(to_unit.pint_unit)
    except pint.DimensionalityError as e:
        raise ConversionError(str(e)) from e
    return float(quantity.magnitude)


def convert_to_system(
    value: float, unit: TypedUnit, system: UnitSystem
) -> Tuple[float, str]:
    """Express a quantity in the idiomatic unit of a measurement system.

    The value is first converted to the system's canonical unit for its
    dimension, then moved to the display unit whose bucket the converted
    magnitude falls in.

    Args:
        value: Quantity in `unit`.
        unit: The quantity's typed unit.
        system: Target measurement system.

    Returns:
        A tuple of (converted value, unit symbol).

    Raises:
        ConversionError: If the system has no unit for the dimension.

    Examples:
        >>> convert_to_system(1500, resolve_unit("g"), UnitSystem.METRIC)
        (1.5, 'kg')
    """
    canonical = SYSTEM_CANONICAL_UNITS[system].get(unit.dimension)
    if canonical is None:
        raise ConversionError(
            f"The {system.value} system has no unit for {unit.dimension.value}"
        )
    canonical_unit = resolve_unit(canonical)
    converted = convert_quantity(value, unit, canonical_unit)
    logger.debug(f"Converted {value} {unit.symbol} to {converted} {canonical}")

    for lower_bound, symbol in SYSTEM_UNIT_BUCKETS.get((system, unit.dimension), []):
        if abs(converted) >= lower_bound * (1 - _BUCKET_EPSILON):
            if symbol == canonical:
                return converted, symbol
            return convert_quantity(converted, canonical_unit, resolve_unit(symbol)), symbol
    return converted, canonical
