import pytest

from cooklang_utils.quantities import bartender
from cooklang_utils.quantities.bartender import (
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
from cooklang_utils.quantities.units import UnitSystem


@pytest.mark.parametrize(
    "ml_value, system, expected",
    [
        (1, UnitSystem.US, "1 dash"),
        (2.5, UnitSystem.METRIC, "3 dashes"),
        (30, UnitSystem.US, "1 oz"),
        (45, UnitSystem.US, "1 1/2 oz"),
        (15, UnitSystem.US, "1/2 oz"),
        (22.5, UnitSystem.US, "3/4 oz"),
        (240, UnitSystem.US, "8 oz"),
        (480, UnitSystem.US, "2 cups"),
        (5, UnitSystem.US, "1 barspoon"),
        (7.5, UnitSystem.US, "1 1/2 barspoons"),
        (100, UnitSystem.METRIC, "10 cl"),
        (1000, UnitSystem.METRIC, "1 l"),
        (22, UnitSystem.METRIC, "20 ml"),
        (60, UnitSystem.METRIC, "60 ml"),
    ],
)
def test_select_best_unit(ml_value, system, expected):
    """Test the unit and rounding a bartender would use."""
    assert str(select_best_unit(ml_value, system)) == expected


def test_small_metric_amounts_round_to_half_steps():
    """Test that metric amounts under 10 ml round to 2.5 ml."""
    assert select_best_unit(7, UnitSystem.METRIC) == SmartUnitResult(7.5, "ml")
    assert select_best_unit(4, UnitSystem.METRIC) == SmartUnitResult(5.0, "ml")


@pytest.mark.parametrize(
    "value, unit, system, expected",
    [
        (2, "oz", UnitSystem.METRIC, SmartUnitResult(60.0, "ml")),
        (0.75, "oz", UnitSystem.METRIC, SmartUnitResult(25.0, "ml")),
        (1, "jigger", UnitSystem.US, SmartUnitResult(1.5, "oz")),
        (1, "Fluid Ounce", UnitSystem.METRIC, SmartUnitResult(30.0, "ml")),
        (3, "cl", UnitSystem.US, SmartUnitResult(1.0, "oz")),
        (1, "T", UnitSystem.METRIC, SmartUnitResult(15.0, "ml")),
    ],
)
def test_convert_volume_bartender(value, unit, system, expected):
    """Test converting bar volumes between systems."""
    assert convert_volume_bartender(value, unit, system) == expected


def test_convert_unknown_unit_warns(mocker):
    """Test that an unknown unit is returned unchanged with a warning."""
    mock_warning = mocker.patch.object(bartender.logger, "warning")
    result = convert_volume_bartender(3, "pinch", UnitSystem.US)
    assert result == SmartUnitResult(3, "pinch")
    mock_warning.assert_called_once()


def test_format_bartender_value_plurals():
    """Test that plural names only apply to amounts other than one."""
    assert format_bartender_value(SmartUnitResult(2, "splash")) == "2 splashes"
    assert format_bartender_value(SmartUnitResult(1, "splash")) == "1 splash"
    assert format_bartender_value(SmartUnitResult(2, "oz")) == "2 oz"


@pytest.mark.parametrize(
    "name, expected_name",
    [
        ("dash", "dash"),
        ("Dashes", "dash"),
        (" Bar Spoon ", "barspoon"),
        ("c", "cup"),
        ("qt", "quart"),
        ("T", "tbsp"),
        ("t", "tsp"),
        ("TBSP", "tbsp"),
    ],
)
def test_get_cocktail_unit(name, expected_name):
    """Test looking up bar units by alias."""
    assert get_cocktail_unit(name).name == expected_name


def test_get_cocktail_unit_missing():
    """Test that units outside the bar table are not found."""
    assert get_cocktail_unit("pinch") is None


def test_us_value():
    """Test unit sizes in bar ounces."""
    assert get_cocktail_unit("jigger").us_value == pytest.approx(1.5)
    assert get_cocktail_unit("tbsp").us_value == pytest.approx(0.5)


@pytest.mark.parametrize(
    "unit, expected",
    [
        ("oz", UnitSystem.US),
        ("cups", UnitSystem.US),
        ("ml", UnitSystem.METRIC),
        ("Litres", UnitSystem.METRIC),
        ("dash", None),
        ("pinch", None),
    ],
)
def test_detect_unit_system_from_unit(unit, expected):
    """Test which system a single unit belongs to."""
    assert detect_unit_system_from_unit(unit) is expected


@pytest.mark.parametrize(
    "units, expected",
    [
        (["oz", "oz", "ml"], UnitSystem.US),
        (["ml", "cl", "oz"], UnitSystem.METRIC),
        (["oz", "ml"], UnitSystem.US),
        (["dash", "pinch"], None),
        ([], None),
    ],
)
def test_detect_ingredient_list_unit_system(units, expected):
    """Test the dominant system of a list of units, ties going to US."""
    assert detect_ingredient_list_unit_system(units) is expected


@pytest.mark.parametrize(
    "unit, expected",
    [("Dashes", True), ("barspoon", True), ("oz", False), ("pinch", False)],
)
def test_is_cocktail_specific_unit(unit, expected):
    """Test recognition of bar-only measures."""
    assert is_cocktail_specific_unit(unit) is expected


@pytest.mark.parametrize(
    "unit, system, expected",
    [
        ("ml", UnitSystem.METRIC, True),
        ("oz", UnitSystem.US, True),
        ("oz", UnitSystem.METRIC, False),
        ("dash", UnitSystem.US, True),
        ("pinch", UnitSystem.METRIC, False),
    ],
)
def test_should_skip_conversion(unit, system, expected):
    """Test skipping units already in the target system or bar-only."""
    assert should_skip_conversion(unit, system) is expected
