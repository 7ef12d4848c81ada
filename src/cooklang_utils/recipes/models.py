import dataclasses
import enum
from typing import List

# Quantity text for an ingredient written without an amount.
SOME = "some"


class ComponentKind(enum.Enum):
    TEXT = "text"
    INGREDIENT = "ingredient"
    COOKWARE = "cookware"
    TIMER = "timer"
    SECTION = "section"
    NOTE = "note"
    COMMENT = "comment"
    BLOCK_COMMENT = "block_comment"


# Kinds that sit inside running prose.
INLINE_KINDS = frozenset(
    {
        ComponentKind.TEXT,
        ComponentKind.INGREDIENT,
        ComponentKind.COOKWARE,
        ComponentKind.TIMER,
    }
)

# Kinds that reference something in the kitchen and may carry an annotation.
REFERENCE_KINDS = frozenset(
    {ComponentKind.INGREDIENT, ComponentKind.COOKWARE, ComponentKind.TIMER}
)


@dataclasses.dataclass
class Component:
    """One piece of a recipe step.

    Ingredients, cookware and timers carry name, quantity and unit, and
    keep a trailing parenthesised annotation in value. Text, notes and
    comments keep their content in value; sections keep their title in
    name. Quantities stay as text here.
    """

    kind: ComponentKind
    name: str = ""
    value: str = ""
    quantity: str = ""
    unit: str = ""
    fixed: bool = False
    optional: bool = False

    @property
    def annotation(self) -> str:
        return self.value if self.kind in REFERENCE_KINDS else ""

    def render_display(self) -> str:
        """Plain-text form of the component as it reads inside a step."""
        if self.kind == ComponentKind.TIMER:
            duration = "" if self.quantity == SOME else self.quantity
            if duration and self.unit:
                return f"{duration} {self.unit}"
            return duration or self.name
        if self.kind in (
            ComponentKind.INGREDIENT,
            ComponentKind.COOKWARE,
            ComponentKind.SECTION,
        ):
            return self.name
        return self.value


@dataclasses.dataclass
class Step:
    components: List[Component] = dataclasses.field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(component.render_display() for component in self.components)

    def __iter__(self):
        return iter(self.components)

    def __len__(self) -> int:
        return len(self.components)


def split_list(value: str) -> List[str]:
    """Split a comma-separated metadata value into trimmed, non-empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]
