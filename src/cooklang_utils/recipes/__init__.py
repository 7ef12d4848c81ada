"""Recipe model, ingredient lists and shopping lists."""

from .ingredients import Ingredient, IngredientList
from .models import SOME, Component, ComponentKind, Step, split_list
from .recipe import Recipe
from .shopping import (
    ShoppingList,
    create_shopping_list,
    create_shopping_list_for_servings,
    create_shopping_list_for_servings_with_unit,
)

__all__ = [
    "SOME",
    "Component",
    "ComponentKind",
    "Step",
    "split_list",
    "Ingredient",
    "IngredientList",
    "Recipe",
    "ShoppingList",
    "create_shopping_list",
    "create_shopping_list_for_servings",
    "create_shopping_list_for_servings_with_unit",
]
