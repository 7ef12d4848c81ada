"""Turn a Cooklang token stream into a Recipe."""

import dataclasses
import logging
from typing import List, Tuple

from cooklang_utils.parsing.frontmatter import parse_yaml_metadata
from cooklang_utils.parsing.lexer import Lexer, ParseError
from cooklang_utils.parsing.tokens import Token, TokenType
from cooklang_utils.quantities.number_utils import evaluate_fraction
from cooklang_utils.recipes.models import (
    INLINE_KINDS,
    SOME,
    Component,
    ComponentKind,
    Step,
)
from cooklang_utils.recipes.recipe import Recipe

logger = logging.getLogger(__name__)

# Tokens that can make up a multi-word ingredient or cookware name.
_NAME_TOKENS = frozenset(
    {TokenType.IDENT, TokenType.INT, TokenType.DASH, TokenType.WHITESPACE}
)
_TIMER_NAME_TOKENS = frozenset({TokenType.IDENT, TokenType.INT, TokenType.WHITESPACE})
_WORD_TOKENS = frozenset({TokenType.IDENT, TokenType.INT})

# Tokens after a line break that must not be joined to the previous line.
_NO_JOIN_TOKENS = frozenset(
    {
        TokenType.EOF,
        TokenType.SECTION_HEADER,
        TokenType.NOTE,
        TokenType.METADATA,
        TokenType.BLOCK_COMMENT,
        TokenType.WHITESPACE,
    }
)


def _join(tokens: List[Token]) -> str:
    return "".join(token.literal for token in tokens)


def _merge_text(components: List[Component]) -> List[Component]:
    """Concatenate runs of adjacent text components."""
    merged: List[Component] = []
    for component in components:
        if (
            component.kind == ComponentKind.TEXT
            and merged
            and merged[-1].kind == ComponentKind.TEXT
        ):
            merged[-1] = dataclasses.replace(
                merged[-1], value=merged[-1].value + component.value
            )
        else:
            merged.append(component)
    return merged


class _DocumentParser:
    """State for parsing one document. Not reused across documents."""

    def __init__(self, text: str, extended: bool):
        self.lexer = Lexer(text)
        self.extended = extended
        self.metadata = {}
        self.legacy_metadata = {}
        self.steps: List[Step] = []
        self.current: List[Component] = []

    def run(self) -> Recipe:
        while True:
            token = self.lexer.next_token()
            if token.type == TokenType.EOF:
                break
            self._handle(token)
        self._flush()
        # Front matter wins over ">>" lines.
        metadata = {**self.legacy_metadata, **self.metadata}
        return Recipe(metadata=metadata, steps=self.steps)

    # --- Step bookkeeping ---

    def _flush(self) -> None:
        if not self.current:
            return
        blank = all(
            c.kind == ComponentKind.TEXT and not c.value.strip() for c in self.current
        )
        if not blank:
            self.steps.append(Step(_merge_text(self.current)))
        self.current = []

    def _append_text(self, literal: str) -> None:
        if literal:
            self.current.append(Component(ComponentKind.TEXT, value=literal))

    # --- Dispatch ---

    def _handle(self, token: Token) -> None:
        kind = token.type
        if kind == TokenType.NEWLINE:
            self._handle_newline()
        elif kind == TokenType.FRONTMATTER:
            self.metadata.update(parse_yaml_metadata(token.literal))
        elif kind == TokenType.METADATA:
            key, separator, value = token.literal.partition(":")
            if separator:
                self.legacy_metadata[key.strip()] = value.strip()
        elif kind in (TokenType.INGREDIENT, TokenType.OPTIONAL_INGREDIENT):
            optional = kind == TokenType.OPTIONAL_INGREDIENT
            self.current.append(self._parse_ingredient(optional))
        elif kind == TokenType.COOKWARE:
            self.current.append(self._parse_cookware())
        elif kind == TokenType.TIMER:
            self.current.append(self._parse_timer())
        elif kind == TokenType.SECTION_HEADER:
            self._flush()
            self.current.append(Component(ComponentKind.SECTION, name=token.literal))
        elif kind == TokenType.NOTE:
            self._flush()
            self.current.append(Component(ComponentKind.NOTE, value=token.literal))
            self._flush()
        elif kind in (TokenType.COMMENT, TokenType.BLOCK_COMMENT):
            self._handle_comment(token)
        else:
            self._append_text(token.literal)

    def _handle_newline(self) -> None:
        token = self.lexer.next_token()
        indentation: List[Token] = []
        # A full-line comment takes its own line break with it, and a line
        # holding only spaces or tabs counts as blank.
        while token.type in (TokenType.COMMENT, TokenType.WHITESPACE):
            if token.type == TokenType.COMMENT:
                self._handle_comment(token)
                indentation = []
            else:
                indentation.append(token)
            token = self.lexer.next_token()

        if token.type == TokenType.NEWLINE:
            self._flush()
            return
        if token.type == TokenType.EOF:
            self.lexer.put_back_token(token)
            return
        if indentation:
            self.lexer.put_back_token(token)
            self._put_back(indentation)
            token = self.lexer.next_token()
        if (
            self.current
            and self.current[-1].kind in INLINE_KINDS
            and token.type not in _NO_JOIN_TOKENS
        ):
            self._append_text(" ")
        self._handle(token)

    def _handle_comment(self, token: Token) -> None:
        if not self.extended:
            logger.debug(f"Dropping comment: {token.literal!r}")
            return
        kind = (
            ComponentKind.COMMENT
            if token.type == TokenType.COMMENT
            else ComponentKind.BLOCK_COMMENT
        )
        self._flush()
        self.current.append(Component(kind, value=token.literal))

    # --- References ---

    def _collect(self, allowed: frozenset) -> List[Token]:
        tokens = []
        while True:
            token = self.lexer.next_token()
            if token.type not in allowed:
                self.lexer.put_back_token(token)
                return tokens
            tokens.append(token)

    def _put_back(self, tokens: List[Token]) -> None:
        for token in reversed(tokens):
            self.lexer.put_back_token(token)

    def _read_braced_name(self, keep_without_braces: int = 0) -> Tuple[str, bool]:
        """Read a reference name, returning (name, whether braces follow).

        Without braces only the first keep_without_braces tokens are the
        name (0 keeps the leading run of words); the rest is put back.
        """
        tokens = self._collect(_NAME_TOKENS)
        if self.lexer.peek_token().type == TokenType.LBRACE:
            self.lexer.next_token()
            return _join(tokens).strip(), True

        if keep_without_braces:
            count = keep_without_braces
        else:
            count = 0
            while count < len(tokens) and tokens[count].type in _WORD_TOKENS:
                count += 1
        self._put_back(tokens[count:])
        return _join(tokens[:count]), False

    def _parse_ingredient(self, optional: bool) -> Component:
        name, braced = self._read_braced_name()
        component = Component(
            ComponentKind.INGREDIENT, name=name, quantity=SOME, optional=optional
        )
        if braced:
            component.quantity, component.unit, component.fixed = self._read_quantity()
            component.value = self._read_annotation()
        return component

    def _parse_cookware(self) -> Component:
        name, braced = self._read_braced_name(keep_without_braces=1)
        component = Component(ComponentKind.COOKWARE, name=name, quantity="1")
        if braced:
            quantity, component.unit, component.fixed = self._read_quantity()
            if quantity != SOME:
                component.quantity = quantity
            component.value = self._read_annotation()
        return component

    def _parse_timer(self) -> Component:
        component = Component(ComponentKind.TIMER)
        token = self.lexer.next_token()
        if token.type != TokenType.LBRACE:
            tokens = [token]
            if self.extended:
                tokens.extend(self._collect(_TIMER_NAME_TOKENS))
            brace = self.lexer.next_token()
            if brace.type != TokenType.LBRACE:
                self.lexer.put_back_token(brace)
                self._put_back(tokens[1:])
                component.name = token.literal
                return component
            component.name = _join(tokens).strip()

        component.quantity, component.unit, component.fixed = self._read_quantity()
        component.value = self._read_annotation()
        return component

    def _read_quantity(self) -> Tuple[str, str, bool]:
        """Read `{quantity%unit}` contents after the opening brace.

        Returns:
            A tuple of (quantity text, unit, fixed). An empty quantity
            becomes SOME and fractions are evaluated to decimals.

        Raises:
            ParseError: If the input ends before the closing brace.
        """
        quantity_parts: List[str] = []
        unit_parts: List[str] = []
        fixed = False
        in_unit = False
        while True:
            token = self.lexer.next_token()
            if token.type == TokenType.EOF:
                raise ParseError("Unexpected end of input inside '{...}' quantity")
            if token.type == TokenType.RBRACE:
                break
            if token.type == TokenType.PERCENT and not in_unit:
                in_unit = True
            elif (
                token.type == TokenType.SECTION
                and not in_unit
                and not "".join(quantity_parts).strip()
            ):
                fixed = True
            elif in_unit:
                unit_parts.append(token.literal)
            else:
                quantity_parts.append(token.literal)

        quantity = "".join(quantity_parts).strip()
        unit = "".join(unit_parts).strip()
        if not quantity:
            return SOME, unit, fixed
        return evaluate_fraction(quantity), unit, fixed

    def _read_annotation(self) -> str:
        """Read a `(...)` annotation directly after a reference, if present.

        An unclosed parenthesis on the same line is not an annotation; its
        tokens are put back and read as text.
        """
        if self.lexer.peek_token().type != TokenType.LPAREN:
            return ""
        consumed = [self.lexer.next_token()]
        while True:
            token = self.lexer.next_token()
            consumed.append(token)
            if token.type == TokenType.RPAREN:
                return _join(consumed[1:-1]).strip()
            if token.type in (TokenType.EOF, TokenType.NEWLINE):
                self._put_back(consumed)
                return ""


class CooklangParser:
    """Parse Cooklang documents into Recipe objects.

    Args:
        extended: Keep comments and block comments as components, and let
            timers take multi-word names before their braces.

    Examples:
        >>> recipe = CooklangParser().parse("Add @flour{500%g}.")
        >>> recipe.steps[0].components[1].quantity
        '500'
    """

    def __init__(self, extended: bool = False):
        self.extended = extended

    def parse(self, text: str) -> Recipe:
        """Parse a whole document.

        Raises:
            ParseError: On unterminated front matter or an unclosed quantity.
        """
        recipe = _DocumentParser(text, self.extended).run()
        logger.info(
            f"Parsed recipe '{recipe.title}' with {len(recipe.steps)} steps"
        )
        return recipe


def parse_string(text: str, extended: bool = False) -> Recipe:
    return CooklangParser(extended=extended).parse(text)


def parse_bytes(data: bytes, extended: bool = False) -> Recipe:
    """Parse UTF-8 encoded recipe bytes; a leading byte order mark is ignored."""
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(f"Recipe is not valid UTF-8: {e}") from e
    return parse_string(text, extended=extended)
