"""Character-level scanner that turns Cooklang source into tokens."""

import logging
import re
from typing import Callable, List, Optional

from cooklang_utils.parsing.tokens import PUNCTUATION, Token, TokenType

logger = logging.getLogger(__name__)

# A closing front matter delimiter must start a line.
_CLOSING_DELIMITER = re.compile(r"(?:^|(?<=\r))---", re.MULTILINE)


class ParseError(ValueError):
    """Raised when a document cannot be turned into a recipe."""


def _is_identifier_char(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def _starts_name(ch: str) -> bool:
    """Check whether a sigil followed by ch introduces a reference."""
    return ch.isalpha() or ch.isdecimal() or ch == "_"


class Lexer:
    """Scan Cooklang text one character at a time.

    Tokens handed back through put_back_token are replayed, front first,
    before any new input is scanned. Callers that un-consume several
    tokens push them back in reverse so they come out in source order.

    Examples:
        >>> lexer = Lexer("Add @salt{}")
        >>> lexer.next_token()
        Token(type=<TokenType.IDENT: 'IDENT'>, literal='Add')
    """

    def __init__(self, text: str):
        self.text = text
        self.position = 0
        self._buffer: List[Token] = []

    def next_token(self) -> Token:
        if self._buffer:
            return self._buffer.pop(0)

        ch = self._peek()
        if not ch:
            return Token(TokenType.EOF, "")

        if ch in " \t":
            return self._read_while(TokenType.WHITESPACE, lambda c: c in " \t")
        if ch == "\n":
            return self._single(TokenType.NEWLINE)
        if ch == "\r":
            self.position += 2 if self._peek(1) == "\n" else 1
            return Token(TokenType.NEWLINE, "\n")
        if ch == "-":
            return self._read_dash()
        if ch == "=":
            if self._at_line_start():
                return self._read_section_header()
            return self._single(TokenType.SECTION)
        if ch == ">" and self._at_line_start():
            if self._peek(1) == ">":
                return self._read_metadata()
            return self._read_note()
        if ch == "[" and self._peek(1) == "-":
            token = self._read_block_comment()
            if token is not None:
                return token
        if ch == "@":
            if self._peek(1) == "?" and _starts_name(self._peek(2)):
                self.position += 2
                return Token(TokenType.OPTIONAL_INGREDIENT, "@?")
            if _starts_name(self._peek(1)):
                return self._single(TokenType.INGREDIENT)
            return self._single(TokenType.ILLEGAL)
        if ch == "#":
            if _starts_name(self._peek(1)):
                return self._single(TokenType.COOKWARE)
            return self._single(TokenType.ILLEGAL)
        if ch == "~":
            if _starts_name(self._peek(1)) or self._peek(1) == "{":
                return self._single(TokenType.TIMER)
            return self._single(TokenType.ILLEGAL)
        if ch in PUNCTUATION:
            return self._single(PUNCTUATION[ch])
        if ch.isdecimal():
            return self._read_while(TokenType.INT, str.isdecimal)
        if _is_identifier_char(ch):
            return self._read_while(TokenType.IDENT, _is_identifier_char)
        return self._single(TokenType.ILLEGAL)

    def peek_token(self) -> Token:
        """Return the next token without consuming it."""
        if self._buffer:
            return self._buffer[0]
        saved = self.position
        token = self.next_token()
        self.position = saved
        return token

    def put_back_token(self, token: Token) -> None:
        self._buffer.insert(0, token)

    # --- Character helpers ---

    def _peek(self, offset: int = 0) -> str:
        index = self.position + offset
        return self.text[index] if index < len(self.text) else ""

    def _at_line_start(self) -> bool:
        return self.position == 0 or self.text[self.position - 1] in "\r\n"

    def _after_whitespace(self) -> bool:
        return self.position > 0 and self.text[self.position - 1] in " \t"

    def _single(self, token_type: TokenType) -> Token:
        ch = self.text[self.position]
        self.position += 1
        return Token(token_type, ch)

    def _read_while(self, token_type: TokenType, predicate: Callable[[str], bool]) -> Token:
        start = self.position
        while self.position < len(self.text) and predicate(self.text[self.position]):
            self.position += 1
        return Token(token_type, self.text[start : self.position])

    def _read_line(self) -> str:
        """Read up to, but not including, the next line terminator."""
        start = self.position
        while self.position < len(self.text) and self.text[self.position] not in "\r\n":
            self.position += 1
        return self.text[start : self.position]

    def _skip_line_terminator(self) -> None:
        if self.text.startswith("\r\n", self.position):
            self.position += 2
        elif self._peek() in ("\r", "\n"):
            self.position += 1

    # --- Multi-character constructs ---

    def _read_dash(self) -> Token:
        if self.position == 0 and self.text.startswith("---"):
            token = self._read_frontmatter()
            if token is not None:
                return token
        if (
            self._peek(1) == "-"
            and self._peek(2) != "-"
            and (self._at_line_start() or self._after_whitespace())
        ):
            self.position += 2
            literal = self._read_line().strip()
            self._skip_line_terminator()
            return Token(TokenType.COMMENT, literal)
        return self._single(TokenType.DASH)

    def _read_frontmatter(self) -> Optional[Token]:
        pos = 3
        while pos < len(self.text) and self.text[pos] in " \t":
            pos += 1
        if pos >= len(self.text) or self.text[pos] not in "\r\n":
            return None
        pos += 2 if self.text.startswith("\r\n", pos) else 1

        match = _CLOSING_DELIMITER.search(self.text, pos)
        if match is None:
            raise ParseError("Unterminated front matter: no closing '---' line found")

        content = self.text[pos : match.start()]
        self.position = match.end()
        logger.debug(f"Read {len(content)} characters of front matter")
        return Token(TokenType.FRONTMATTER, content)

    def _read_section_header(self) -> Token:
        line = self._read_line()
        return Token(TokenType.SECTION_HEADER, line.strip("= \t"))

    def _read_note(self) -> Token:
        parts = []
        while self._peek() == ">" and self._peek(1) != ">":
            self.position += 1
            parts.append(self._read_line().strip())
            self._skip_line_terminator()
        return Token(TokenType.NOTE, " ".join(part for part in parts if part))

    def _read_metadata(self) -> Token:
        self.position += 2
        literal = self._read_line().strip()
        self._skip_line_terminator()
        return Token(TokenType.METADATA, literal)

    def _read_block_comment(self) -> Optional[Token]:
        end = self.text.find("-]", self.position + 2)
        if end == -1:
            return None
        literal = self.text[self.position + 2 : end].strip()
        self.position = end + 2
        return Token(TokenType.BLOCK_COMMENT, literal)


def tokenize(text: str) -> List[Token]:
    """Scan a whole document, excluding the trailing EOF token."""
    lexer = Lexer(text)
    tokens = []
    while True:
        token = lexer.next_token()
        if token.type == TokenType.EOF:
            return tokens
        tokens.append(token)
