"""Cooklang Utils - Parse Cooklang recipes, scale them and build shopping lists."""

__version__ = "0.1.0"

from . import parsing, quantities, recipes
from .parsing import CooklangParser, ParseError, parse_bytes, parse_string
from .quantities import ConversionError, UnitSystem
from .recipes import (
    Ingredient,
    IngredientList,
    Recipe,
    ShoppingList,
    create_shopping_list,
    create_shopping_list_for_servings,
    create_shopping_list_for_servings_with_unit,
)

__all__ = [
    "parsing",
    "quantities",
    "recipes",
    "CooklangParser",
    "ParseError",
    "parse_string",
    "parse_bytes",
    "ConversionError",
    "UnitSystem",
    "Ingredient",
    "IngredientList",
    "Recipe",
    "ShoppingList",
    "create_shopping_list",
    "create_shopping_list_for_servings",
    "create_shopping_list_for_servings_with_unit",
]
