"""Shopping lists built from one or more recipes."""

import dataclasses
import logging
from typing import Dict, List

import pandas as pd

from cooklang_utils.quantities.units import UnitSystem
from cooklang_utils.recipes.ingredients import IngredientList
from cooklang_utils.recipes.recipe import Recipe

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class ShoppingList:
    """Consolidated ingredients for a set of recipes."""

    recipes: List[Recipe]
    ingredients: IngredientList
    scale_factor: float = 1.0

    def count(self) -> int:
        return len(self.ingredients)

    def to_map(self) -> Dict[str, str]:
        return self.ingredients.to_map()

    def scale(self, factor: float) -> "ShoppingList":
        if factor <= 0:
            raise ValueError(f"Scale factor must be positive, got {factor}")
        return ShoppingList(
            recipes=list(self.recipes),
            ingredients=self.ingredients.scale(factor),
            scale_factor=self.scale_factor * factor,
        )

    def convert_to_system(self, system: UnitSystem) -> "ShoppingList":
        return dataclasses.replace(
            self, ingredients=self.ingredients.convert_to_system_with_consolidation(system)
        )

    def to_dataframe(self) -> pd.DataFrame:
        return self.ingredients.to_dataframe()


def _collect(recipes) -> IngredientList:
    if not recipes:
        raise ValueError("At least one recipe is required for a shopping list")
    combined = IngredientList()
    for recipe in recipes:
        combined.ingredients.extend(recipe.get_ingredients())
    return combined


def create_shopping_list(*recipes: Recipe) -> ShoppingList:
    """Combine the ingredients of several recipes into one list.

    Args:
        *recipes: The recipes to shop for.

    Returns:
        A ShoppingList with same-named ingredients consolidated.

    Raises:
        ValueError: If no recipes are given.
    """
    ingredients = _collect(recipes).consolidate_by_name()
    logger.info(
        f"Shopping list for {len(recipes)} recipe(s) has {len(ingredients)} entries"
    )
    return ShoppingList(recipes=list(recipes), ingredients=ingredients)


def create_shopping_list_for_servings(servings: float, *recipes: Recipe) -> ShoppingList:
    """Scale every recipe to the same number of servings, then combine them."""
    scaled = [recipe.scale_to_servings(servings) for recipe in recipes]
    return ShoppingList(
        recipes=scaled, ingredients=_collect(scaled).consolidate_by_name()
    )


def create_shopping_list_for_servings_with_unit(
    servings: float, unit: str, *recipes: Recipe
) -> ShoppingList:
    """Like create_shopping_list_for_servings, with amounts in one unit.

    Entries whose unit cannot be converted to `unit` keep their own unit.

    Examples:
        >>> shopping = create_shopping_list_for_servings_with_unit(4, "kg", recipe)
        >>> shopping.to_map()["flour"]
        '1 kg'
    """
    scaled = [recipe.scale_to_servings(servings) for recipe in recipes]
    converted = IngredientList()
    for ingredient in _collect(scaled):
        if ingredient.quantity is not None and ingredient.can_convert_to(unit):
            converted.append(ingredient.convert_to(unit))
        else:
            converted.append(ingredient)
    return ShoppingList(
        recipes=scaled, ingredients=converted.consolidate_by_name(target_unit=unit)
    )
