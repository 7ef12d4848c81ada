"""Ingredients with numeric quantities, and the lists that consolidate them."""

import dataclasses
import logging
import math
from typing import Dict, Iterator, List, Optional

import numpy as np
import pandas as pd

from cooklang_utils.quantities.bartender import (
    ConversionMode,
    convert_volume_bartender,
    get_cocktail_unit,
    should_skip_conversion,
)
from cooklang_utils.quantities.formatting import format_as_fraction, format_quantity
from cooklang_utils.quantities.number_utils import _is_number, format_float
from cooklang_utils.quantities.units import (
    ConversionError,
    TypedUnit,
    UnitSystem,
    convert_quantity,
    convert_to_system,
    resolve_unit,
)
from cooklang_utils.recipes.models import SOME, Component

logger = logging.getLogger(__name__)

# Bar ounces are fluid ounces.
_BAR_UNIT_TYPES = {"oz": "fl oz"}


@dataclasses.dataclass
class Ingredient:
    """An ingredient with a numeric quantity.

    A quantity of None means the amount is unspecified ("some"). Text that
    is not a number, such as "2-3", is kept in quantity_text and treated as
    unspecified for arithmetic.

    Ingredients built directly carry no typed unit and never convert; use
    Ingredient.create or Ingredient.from_component to resolve one.
    """

    name: str
    quantity: Optional[float] = None
    unit: str = ""
    typed_unit: Optional[TypedUnit] = None
    fixed: bool = False
    optional: bool = False
    annotation: str = ""
    quantity_text: str = ""

    @classmethod
    def create(
        cls, name: str, quantity: Optional[float], unit: str = "", **kwargs
    ) -> "Ingredient":
        return cls(
            name=name, quantity=quantity, unit=unit, typed_unit=resolve_unit(unit), **kwargs
        )

    @classmethod
    def from_component(cls, component: Component) -> "Ingredient":
        text = component.quantity.strip()
        quantity = None
        quantity_text = ""
        if text and text != SOME:
            if _is_number(text) and math.isfinite(float(text)):
                quantity = float(text)
            else:
                logger.debug(f"Quantity '{text}' of {component.name} is not numeric")
                quantity_text = text
        return cls.create(
            component.name,
            quantity,
            component.unit,
            fixed=component.fixed,
            optional=component.optional,
            annotation=component.value,
            quantity_text=quantity_text,
        )

    @property
    def is_some(self) -> bool:
        return self.quantity is None

    @property
    def unit_type(self) -> str:
        """Dimension of the unit ("mass", "volume", ...) or "" without one."""
        return self.typed_unit.dimension.value if self.typed_unit else ""

    def can_convert_to(self, unit: str) -> bool:
        target = resolve_unit(unit)
        if self.typed_unit is None or target is None:
            return False
        if self.typed_unit.dimension != target.dimension:
            return False
        if self.typed_unit.symbol == target.symbol:
            return True
        return self.typed_unit.is_known and target.is_known

    def convert_to(self, unit: str) -> "Ingredient":
        """Return a copy expressed in another unit.

        Raises:
            ConversionError: If the ingredient has no typed unit, no
                numeric quantity, or the units measure different things.
        """
        if self.typed_unit is None:
            raise ConversionError(f"{self.name} has no unit to convert from")
        if self.quantity is None:
            raise ConversionError(f"{self.name} has no quantity to convert")
        target = resolve_unit(unit)
        if target is None:
            raise ConversionError(f"No target unit given for {self.name}")
        value = convert_quantity(self.quantity, self.typed_unit, target)
        return dataclasses.replace(self, quantity=value, unit=unit, typed_unit=target)

    def convert_to_system(self, system: UnitSystem) -> "Ingredient":
        """Return a copy in the idiomatic unit of a measurement system.

        Ingredients that cannot be converted come back as unchanged copies.
        """
        if self.typed_unit is None or self.quantity is None:
            return dataclasses.replace(self)
        try:
            value, symbol = convert_to_system(self.quantity, self.typed_unit, system)
        except ConversionError as e:
            logger.debug(f"Keeping {self.name} in '{self.unit}': {e}")
            return dataclasses.replace(self)
        return dataclasses.replace(
            self, quantity=value, unit=symbol, typed_unit=resolve_unit(symbol)
        )

    def convert_to_bartender(self, system: UnitSystem) -> "Ingredient":
        """Return a copy converted with bar measures and bartender rounding."""
        if self.quantity is None or should_skip_conversion(self.unit, system):
            return dataclasses.replace(self)
        result = convert_volume_bartender(self.quantity, self.unit, system)
        return dataclasses.replace(
            self,
            quantity=result.value,
            unit=result.unit,
            typed_unit=resolve_unit(_BAR_UNIT_TYPES.get(result.unit, result.unit)),
        )

    def scale(self, factor: float) -> "Ingredient":
        if self.fixed or self.quantity is None:
            return dataclasses.replace(self)
        return dataclasses.replace(self, quantity=self.quantity * factor)

    def display_quantity(self, fractions: bool = False) -> str:
        """Human-readable amount, e.g. "1000 g", "1.5 tsp", "3" or "some".

        Args:
            fractions: Render the number as a cooking fraction ("1 1/2").
        """
        if self.quantity is None:
            return self.quantity_text or SOME
        if fractions:
            amount = format_as_fraction(self.quantity)
        else:
            amount = format_quantity(self.quantity)
        return f"{amount} {self.unit}" if self.unit else amount

    def render(self) -> str:
        """Render back to Cooklang source, e.g. "@garlic{3%cloves}(minced)"."""
        if self.quantity is not None:
            amount = format_float(self.quantity)
        else:
            amount = self.quantity_text

        body = f"={amount}" if self.fixed and amount else amount
        if self.unit:
            body += f"%{self.unit}"

        sigil = "@?" if self.optional else "@"
        text = f"{sigil}{self.name}{{{body}}}"
        if self.annotation:
            text += f"({self.annotation})"
        return text


def _add(total: Optional[float], value: float) -> float:
    return value if total is None else total + value


def _consolidate_group(
    name: str, members: List[Ingredient], target_unit: str
) -> List[Ingredient]:
    """Merge same-named ingredients into one summed entry plus leftovers."""
    group_has_unit = any(member.unit for member in members)
    if group_has_unit:
        unify_unit = target_unit or next(member.unit for member in members if member.unit)
    else:
        unify_unit = ""

    total = None
    leftovers = []
    for member in members:
        if member.quantity is None:
            leftovers.append(dataclasses.replace(member))
        elif not member.unit:
            if group_has_unit:
                leftovers.append(dataclasses.replace(member))
            else:
                total = _add(total, member.quantity)
        elif member.unit == unify_unit:
            total = _add(total, member.quantity)
        else:
            try:
                converted = member.convert_to(unify_unit)
            except ConversionError as e:
                logger.debug(f"Not merging {member.unit} of {name} into {unify_unit}: {e}")
                leftovers.append(dataclasses.replace(member))
                continue
            total = _add(total, converted.quantity)

    merged = []
    if total is not None:
        merged.append(
            Ingredient(
                name=name,
                quantity=total,
                unit=unify_unit,
                typed_unit=resolve_unit(unify_unit),
                fixed=all(member.fixed for member in members),
                optional=all(member.optional for member in members),
            )
        )
    return merged + leftovers


@dataclasses.dataclass
class IngredientList:
    """An ordered collection of ingredients that may repeat names."""

    ingredients: List[Ingredient] = dataclasses.field(default_factory=list)

    def __len__(self) -> int:
        return len(self.ingredients)

    def __iter__(self) -> Iterator[Ingredient]:
        return iter(self.ingredients)

    def __getitem__(self, index: int) -> Ingredient:
        return self.ingredients[index]

    def append(self, ingredient: Ingredient) -> None:
        self.ingredients.append(ingredient)

    def get_by_name(self, name: str) -> List[Ingredient]:
        return [ingredient for ingredient in self.ingredients if ingredient.name == name]

    def group_by_name(self) -> Dict[str, List[Ingredient]]:
        """Group ingredients by exact name, in order of first appearance."""
        groups: Dict[str, List[Ingredient]] = {}
        for ingredient in self.ingredients:
            groups.setdefault(ingredient.name, []).append(ingredient)
        return groups

    def consolidate_by_name(self, target_unit: str = "") -> "IngredientList":
        """Merge ingredients sharing a name by summing compatible quantities.

        For each name with several entries, quantities are summed in a
        unifying unit: target_unit if given, otherwise the unit of the first
        entry that has one. Entries that cannot join the sum stay separate,
        in the order they appeared:

        - unspecified ("some") quantities
        - unit-less entries, when other entries of the name have a unit
        - entries whose unit cannot be converted to the unifying unit

        Args:
            target_unit: Unit to express merged sums in.

        Returns:
            A new IngredientList; this one is left untouched.

        Examples:
            >>> flour = IngredientList([
            ...     Ingredient.create("flour", 500, "g"),
            ...     Ingredient.create("flour", 0.5, "kg"),
            ... ])
            >>> flour.consolidate_by_name().to_map()
            {'flour': '1000 g'}
        """
        consolidated = IngredientList()
        for name, members in self.group_by_name().items():
            if len(members) == 1:
                consolidated.append(dataclasses.replace(members[0]))
            else:
                consolidated.ingredients.extend(
                    _consolidate_group(name, members, target_unit)
                )
        return consolidated

    def convert_to_system(
        self, system: UnitSystem, mode: ConversionMode = ConversionMode.PRECISE
    ) -> "IngredientList":
        """Convert every ingredient that can be converted to a system.

        In bartender mode, ingredients measured in bar units are converted
        with bar measures and rounded to what a bartender would pour.
        """
        converted = IngredientList()
        for ingredient in self.ingredients:
            if mode == ConversionMode.BARTENDER and get_cocktail_unit(ingredient.unit):
                converted.append(ingredient.convert_to_bartender(system))
            else:
                converted.append(ingredient.convert_to_system(system))
        return converted

    def convert_to_system_with_consolidation(self, system: UnitSystem) -> "IngredientList":
        """Convert to a system, merge duplicates, and re-pick units for the sums."""
        return self.convert_to_system(system).consolidate_by_name().convert_to_system(system)

    def scale(self, factor: float) -> "IngredientList":
        return IngredientList([ingredient.scale(factor) for ingredient in self.ingredients])

    def to_map(self, fractions: bool = False) -> Dict[str, str]:
        """Map each name to its display amount; repeated names join with ", "."""
        return {
            name: ", ".join(member.display_quantity(fractions) for member in members)
            for name, members in self.group_by_name().items()
        }

    def to_bartender_map(self, system: UnitSystem) -> Dict[str, str]:
        """Bar-friendly amounts in a system, e.g. {"gin": "1 1/2 oz"}."""
        return self.convert_to_system(system, ConversionMode.BARTENDER).to_map(fractions=True)

    def to_dataframe(self) -> pd.DataFrame:
        """Tabulate the ingredients, with NaN for unspecified quantities."""
        rows = [
            {
                "name": ingredient.name,
                "quantity": np.nan if ingredient.quantity is None else ingredient.quantity,
                "unit": ingredient.unit,
                "unit_type": ingredient.unit_type,
                "fixed": ingredient.fixed,
                "optional": ingredient.optional,
                "annotation": ingredient.annotation,
            }
            for ingredient in self.ingredients
        ]
        columns = ["name", "quantity", "unit", "unit_type", "fixed", "optional", "annotation"]
        return pd.DataFrame(rows, columns=columns)
