"""The parsed recipe and the transformations it supports."""

import dataclasses
import datetime
import logging
from typing import Dict, List, Optional, Tuple

from cooklang_utils.quantities.bartender import ConversionMode, get_cocktail_unit
from cooklang_utils.quantities.formatting import format_quantity
from cooklang_utils.quantities.number_utils import _is_number, format_float
from cooklang_utils.quantities.units import UnitSystem
from cooklang_utils.recipes.ingredients import Ingredient, IngredientList
from cooklang_utils.recipes.models import Component, ComponentKind, Step, split_list

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class Recipe:
    """A recipe: metadata plus ordered steps of components.

    Recipes are not modified after parsing. scale, scale_to_servings and
    convert_to_system return new recipes.
    """

    metadata: Dict[str, str] = dataclasses.field(default_factory=dict)
    steps: List[Step] = dataclasses.field(default_factory=list)

    # --- Metadata ---

    @property
    def title(self) -> str:
        return self.metadata.get("title", "")

    @property
    def description(self) -> str:
        return self.metadata.get("description", "")

    @property
    def cuisine(self) -> str:
        return self.metadata.get("cuisine", "")

    @property
    def difficulty(self) -> str:
        return self.metadata.get("difficulty", "")

    @property
    def prep_time(self) -> str:
        return self.metadata.get("prep_time", "")

    @property
    def total_time(self) -> str:
        return self.metadata.get("total_time", "")

    @property
    def author(self) -> str:
        return self.metadata.get("author", "")

    @property
    def tags(self) -> List[str]:
        return split_list(self.metadata.get("tags", ""))

    @property
    def images(self) -> List[str]:
        return split_list(self.metadata.get("images") or self.metadata.get("image", ""))

    @property
    def servings(self) -> float:
        """Number of servings, 1 when missing, unreadable or not positive."""
        text = self.metadata.get("servings", "").strip()
        if not _is_number(text):
            return 1.0
        value = float(text)
        return value if value > 0 else 1.0

    @property
    def date(self) -> Optional[datetime.date]:
        text = self.metadata.get("date", "").strip()
        try:
            return datetime.datetime.strptime(text, "%Y-%m-%d").date()
        except ValueError:
            return None

    # --- Components ---

    def _components(self, kind: ComponentKind) -> List[Component]:
        return [c for step in self.steps for c in step.components if c.kind == kind]

    def get_ingredients(self) -> IngredientList:
        return IngredientList(
            [Ingredient.from_component(c) for c in self._components(ComponentKind.INGREDIENT)]
        )

    def get_cookware(self) -> List[Tuple[str, int]]:
        """Return (name, count) pairs; counts that are not numbers become 1."""
        cookware = []
        for component in self._components(ComponentKind.COOKWARE):
            count = 1
            if _is_number(component.quantity):
                count = int(float(component.quantity))
            cookware.append((component.name, count))
        return cookware

    def get_timers(self) -> List[Component]:
        return self._components(ComponentKind.TIMER)

    def get_collected_ingredients(self, target_unit: str = "") -> IngredientList:
        return self.get_ingredients().consolidate_by_name(target_unit)

    def get_collected_ingredients_map(self) -> Dict[str, str]:
        return self.get_collected_ingredients().to_map()

    # --- Transformations ---

    def _map_ingredients(self, transform) -> List[Step]:
        steps = []
        for step in self.steps:
            components = [
                transform(c) if c.kind == ComponentKind.INGREDIENT else dataclasses.replace(c)
                for c in step.components
            ]
            steps.append(Step(components))
        return steps

    def scale(self, factor: float) -> "Recipe":
        """Return a copy with every scalable ingredient multiplied by factor.

        Fixed quantities, unspecified quantities and cookware stay as they
        are. The servings metadata is scaled along with the ingredients.

        Raises:
            ValueError: If factor is not positive.
        """
        if factor <= 0:
            raise ValueError(f"Scale factor must be positive, got {factor}")

        def scale_component(component: Component) -> Component:
            if component.fixed or not _is_number(component.quantity):
                return dataclasses.replace(component)
            scaled = float(component.quantity) * factor
            return dataclasses.replace(component, quantity=format_float(scaled))

        metadata = dict(self.metadata)
        if "servings" in metadata:
            metadata["servings"] = format_float(self.servings * factor)
        logger.debug(f"Scaling '{self.title}' by {factor}")
        return Recipe(metadata=metadata, steps=self._map_ingredients(scale_component))

    def scale_to_servings(self, servings: float) -> "Recipe":
        if servings <= 0:
            raise ValueError(f"Servings must be positive, got {servings}")
        scaled = self.scale(servings / self.servings)
        scaled.metadata["servings"] = format_float(float(servings))
        return scaled

    def convert_to_system(
        self, system: UnitSystem, mode: ConversionMode = ConversionMode.PRECISE
    ) -> "Recipe":
        """Return a copy with ingredient amounts expressed in another system."""

        def convert_component(component: Component) -> Component:
            ingredient = Ingredient.from_component(component)
            if mode == ConversionMode.BARTENDER and get_cocktail_unit(ingredient.unit):
                converted = ingredient.convert_to_bartender(system)
            else:
                converted = ingredient.convert_to_system(system)
            if converted.quantity is None or converted.unit == ingredient.unit:
                return dataclasses.replace(component)
            return dataclasses.replace(
                component,
                quantity=format_quantity(converted.quantity),
                unit=converted.unit,
            )

        return Recipe(metadata=dict(self.metadata), steps=self._map_ingredients(convert_component))
