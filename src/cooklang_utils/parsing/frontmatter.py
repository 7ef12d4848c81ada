"""Reading and writing the restricted YAML used in recipe front matter.

Only the subset recipes need is supported: flat `key: value` pairs,
bullet lists and inline `[a, b]` arrays (both flattened to "a, b"), and
literal (`|`) or folded (`>`) block scalars with `-`/`+` chomping.
"""

import datetime
import logging
import re
from typing import Dict, List, Optional, Tuple

from cooklang_utils.parsing.lexer import Lexer
from cooklang_utils.parsing.tokens import TokenType
from cooklang_utils.recipes.models import split_list

logger = logging.getLogger(__name__)

# --- Constants ---

_BLOCK_SCALAR = re.compile(r"([|>])([+-]?)")
_LEADING_LINE_BREAK = re.compile(r"[ \t]*(?:\r\n|\r|\n)")

# Fields written first, in this order, when front matter is rendered.
STANDARD_FIELDS = [
    "title",
    "cuisine",
    "description",
    "difficulty",
    "prep_time",
    "total_time",
    "author",
    "servings",
    "date",
    "tags",
    "images",
]
ARRAY_FIELDS = {"tags", "images"}

# --- Reading ---


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _indentation(line: str) -> int:
    return len(line) - len(line.lstrip(" \t"))


def _fold(lines: List[str]) -> str:
    """Join folded block lines with spaces, keeping paragraph and indent breaks."""
    folded = lines[0]
    for previous, line in zip(lines, lines[1:]):
        if not line:
            folded += "\n"
        elif not previous:
            folded += line
        elif line[0] in " \t" or previous[0] in " \t":
            folded += "\n" + line
        else:
            folded += " " + line
    return folded


def _read_block_scalar(
    lines: List[str], index: int, style: str, chomping: str
) -> Tuple[str, int]:
    """Read the indented lines of a block scalar starting at lines[index].

    Returns:
        The scalar value and the index of the first line after the block.
    """
    block = []
    indent = None
    while index < len(lines):
        line = lines[index]
        if not line.strip():
            block.append("")
            index += 1
            continue
        current = _indentation(line)
        if indent is None:
            if current == 0:
                break
            indent = current
        if current < indent:
            if current > 0:
                logger.warning(
                    f"Block scalar ended by a line indented {current} instead of "
                    f"{indent}: {line.strip()!r}"
                )
            break
        block.append(line[indent:])
        index += 1

    trailing = 0
    while block and not block[-1]:
        block.pop()
        trailing += 1
    if not block:
        return "", index

    value = "\n".join(block) if style == "|" else _fold(block)
    if chomping == "-":
        return value, index
    if chomping == "+":
        return value + "\n" * (trailing + 1), index
    return value + "\n", index


def parse_yaml_metadata(text: str) -> Dict[str, str]:
    """Parse front matter text into a flat metadata mapping.

    Args:
        text: The raw text between the `---` delimiters.

    Returns:
        A dict of string values. Lists are joined with ", ".

    Examples:
        >>> parse_yaml_metadata("title: Pancakes\\ntags: [breakfast, sweet]")
        {'title': 'Pancakes', 'tags': 'breakfast, sweet'}
        >>> parse_yaml_metadata("description: |-\\n  line1\\n  line2")
        {'description': 'line1\\nline2'}
    """
    metadata: Dict[str, str] = {}
    lines = text.splitlines()
    list_key: Optional[str] = None
    list_items: List[str] = []

    index = 0
    while index < len(lines):
        line = lines[index].strip()
        index += 1
        if not line or line.startswith("#"):
            continue

        if list_key is not None:
            if line.startswith("-"):
                list_items.append(_unquote(line[1:].strip()))
                continue
            metadata[list_key] = ", ".join(list_items)
            list_key = None
            list_items = []

        if ":" not in line:
            logger.debug(f"Skipping front matter line without a key: {line!r}")
            continue

        key, value = (part.strip() for part in line.split(":", 1))
        block = _BLOCK_SCALAR.fullmatch(value)
        if block:
            metadata[key], index = _read_block_scalar(
                lines, index, block.group(1), block.group(2)
            )
        elif value.startswith("[") and value.endswith("]"):
            items = [_unquote(item.strip()) for item in value[1:-1].split(",")]
            metadata[key] = ", ".join(item for item in items if item)
        elif not value:
            list_key = key
        else:
            metadata[key] = _unquote(value)

    if list_key is not None:
        metadata[list_key] = ", ".join(list_items)
    return metadata


# --- Writing ---


def render_yaml_value(key: str, value: str) -> str:
    """Render one key, using a literal block scalar for multi-line values.

    The chomping indicator is chosen so that parse_yaml_metadata reads the
    value back unchanged, trailing newlines included.
    """
    if "\n" not in value:
        return f"{key}: {value}"

    body = value.rstrip("\n")
    trailing = len(value) - len(body)
    if trailing == 0:
        indicator = "|-"
    elif trailing == 1:
        indicator = "|"
    else:
        indicator = "|+"

    lines = [f"{key}: {indicator}"]
    lines.extend(f"  {line}" if line else "" for line in body.split("\n"))
    # Kept trailing blank lines are indented so they survive line splitting.
    lines.extend("  " for _ in range(trailing - 1))
    return "\n".join(lines)


def render_frontmatter(metadata: Dict[str, str]) -> str:
    """Render metadata as a `---` delimited front matter block.

    Standard fields come first in a fixed order, the rest alphabetically.
    """
    keys = [key for key in STANDARD_FIELDS if key in metadata]
    keys.extend(sorted(key for key in metadata if key not in STANDARD_FIELDS))

    lines = ["---"]
    for key in keys:
        if key in ARRAY_FIELDS:
            items = split_list(metadata[key])
            if items:
                lines.append(f"{key}:")
                lines.extend(f"  - {item}" for item in items)
            else:
                lines.append(f"{key}: []")
        else:
            lines.append(render_yaml_value(key, metadata[key]))
    lines.append("---")
    return "\n".join(lines) + "\n"


def split_frontmatter(content: str) -> Tuple[Dict[str, str], str]:
    """Separate a document into its metadata and the recipe body."""
    lexer = Lexer(content)
    token = lexer.next_token()
    if token.type != TokenType.FRONTMATTER:
        return {}, content
    body = content[lexer.position :]
    return parse_yaml_metadata(token.literal), _LEADING_LINE_BREAK.sub("", body, count=1)


class FrontmatterEditor:
    """Edit a recipe's front matter in memory.

    Examples:
        >>> editor = FrontmatterEditor("---\\ntitle: Soup\\n---\\nBoil @water{1%l}.")
        >>> editor.set("servings", "4")
        >>> editor.updated_content()
        '---\\ntitle: Soup\\nservings: 4\\n---\\nBoil @water{1%l}.'
    """

    def __init__(self, content: str):
        self.metadata, self.body = split_frontmatter(content)

    def get(self, key: str) -> Optional[str]:
        return self.metadata.get(key)

    def get_all(self) -> Dict[str, str]:
        return dict(self.metadata)

    def set(self, key: str, value: str) -> None:
        """Set a field, validating servings and date values.

        Raises:
            ValueError: If servings is not a number or date is not YYYY-MM-DD.
        """
        if key == "servings":
            try:
                float(value)
            except ValueError:
                raise ValueError(f"Servings must be a number, got {value!r}") from None
        elif key == "date":
            try:
                datetime.datetime.strptime(value, "%Y-%m-%d")
            except ValueError:
                raise ValueError(f"Date must be YYYY-MM-DD, got {value!r}") from None
        self.metadata[key] = value

    def delete(self, key: str) -> None:
        self.metadata.pop(key, None)

    def _array(self, key: str) -> List[str]:
        if key not in ARRAY_FIELDS:
            raise ValueError(f"{key} is not an array field; expected one of {sorted(ARRAY_FIELDS)}")
        return split_list(self.metadata.get(key, ""))

    def append_to_array(self, key: str, item: str) -> None:
        items = self._array(key)
        items.append(item.strip())
        self.metadata[key] = ", ".join(items)

    def remove_from_array(self, key: str, item: str) -> None:
        items = self._array(key)
        if item not in items:
            raise ValueError(f"{item!r} not found in {key}")
        items.remove(item)
        self.metadata[key] = ", ".join(items)

    def updated_content(self) -> str:
        if not self.metadata:
            return self.body
        return render_frontmatter(self.metadata) + self.body
