"""
Token types for the calcviz expression lexer.

Error code ranges:
- E0xx: Lexer errors
- E1xx: Parser errors
- E2xx: Name resolution errors
- E3xx: Evaluation errors
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Optional


class TokenType(Enum):
    """All token types recognized by the expression lexer."""

    # --- Literals ---
    NUMBER = auto()             # 42, 3.14, .5, 1e-9

    # --- Identifiers ---
    IDENTIFIER = auto()         # variable, constant or function name

    # --- Arithmetic operators ---
    PLUS = auto()               # +
    MINUS = auto()              # -
    STAR = auto()               # *
    SLASH = auto()              # /
    CARET = auto()              # ^ (power), ** is lexed to the same type

    # --- Delimiters ---
    LPAREN = auto()             # (
    RPAREN = auto()             # )
    COMMA = auto()              # ,

    # --- Special ---
    EOF = auto()                # end of input


@dataclass(frozen=True)
class SourceLocation:
    """Represents a position in the expression text."""
    column: int         # 1-indexed column number
    offset: int         # 0-indexed character offset from start

    def __str__(self) -> str:
        return f"col {self.column}"


@dataclass(frozen=True)
class SourceSpan:
    """Represents a range in the expression text."""
    start: SourceLocation
    end: SourceLocation

    def __str__(self) -> str:
        return f"{self.start.column}-{self.end.column}"


@dataclass(frozen=True)
class Token:
    """A single token from the lexer."""
    type: TokenType
    value: Any              # float for NUMBER, str otherwise
    lexeme: str             # The original source text
    span: SourceSpan        # Location in source

    def __str__(self) -> str:
        if self.type in (TokenType.NUMBER, TokenType.IDENTIFIER):
            return f"{self.type.name}({self.value!r})"
        return self.type.name


# Human-readable descriptions used in parser diagnostics
TOKEN_DESCRIPTIONS: dict[TokenType, str] = {
    TokenType.NUMBER: "number",
    TokenType.IDENTIFIER: "identifier",
    TokenType.PLUS: "'+'",
    TokenType.MINUS: "'-'",
    TokenType.STAR: "'*'",
    TokenType.SLASH: "'/'",
    TokenType.CARET: "'^'",
    TokenType.LPAREN: "'('",
    TokenType.RPAREN: "')'",
    TokenType.COMMA: "','",
    TokenType.EOF: "end of expression",
}


def describe(token_type: TokenType) -> str:
    """Return the display name of a token type."""
    return TOKEN_DESCRIPTIONS.get(token_type, token_type.name)


def is_binary_operator(token_type: TokenType) -> bool:
    """Check if a token type is one of the arithmetic binary operators."""
    return token_type in (TokenType.PLUS, TokenType.MINUS, TokenType.STAR,
                          TokenType.SLASH, TokenType.CARET)
