"""Token types produced by the Cooklang lexer."""

import dataclasses
import enum


class TokenType(enum.Enum):
    ILLEGAL = "ILLEGAL"
    EOF = "EOF"

    FRONTMATTER = "FRONTMATTER"
    METADATA = "METADATA"
    COMMENT = "COMMENT"
    BLOCK_COMMENT = "BLOCK_COMMENT"
    NOTE = "NOTE"
    SECTION = "="
    SECTION_HEADER = "SECTION_HEADER"
    NEWLINE = "NEWLINE"
    WHITESPACE = "WHITESPACE"

    IDENT = "IDENT"
    INT = "INT"

    INGREDIENT = "@"
    OPTIONAL_INGREDIENT = "@?"
    COOKWARE = "#"
    TIMER = "~"

    COMMA = ","
    SEMICOLON = ";"
    DIVIDE = "/"
    PERCENT = "%"
    DASH = "-"
    PERIOD = "."
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"


# Single characters that always map to a punctuation token.
PUNCTUATION = {
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
    "/": TokenType.DIVIDE,
    "%": TokenType.PERCENT,
    ".": TokenType.PERIOD,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
}


@dataclasses.dataclass(frozen=True)
class Token:
    type: TokenType
    literal: str
