"""Lexing and parsing of Cooklang documents."""

from .frontmatter import (
    FrontmatterEditor,
    parse_yaml_metadata,
    render_frontmatter,
    render_yaml_value,
    split_frontmatter,
)
from .lexer import Lexer, ParseError, tokenize
from .parser import CooklangParser, parse_bytes, parse_string
from .tokens import Token, TokenType

__all__ = [
    "Token",
    "TokenType",
    "Lexer",
    "ParseError",
    "tokenize",
    "CooklangParser",
    "parse_string",
    "parse_bytes",
    "parse_yaml_metadata",
    "render_yaml_value",
    "render_frontmatter",
    "split_frontmatter",
    "FrontmatterEditor",
]
