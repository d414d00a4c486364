"""
Lexer for calcviz expressions.

Converts formula text into a stream of tokens for the parser.
Supports:
- Decimal literals (``3``, ``2.5``, ``.5``, ``2.``) and scientific notation
- Identifiers (variable, constants, function names)
- Operators ``+ - * / ^`` with ``**`` as an alias of ``^``
- Parentheses and commas
"""

from typing import List, Iterator
from .tokens import Token, TokenType, SourceLocation, SourceSpan
from .errors import (
    LexerError,
    error_unexpected_character,
    error_invalid_number_literal,
)


class Lexer:
    """
    Tokenizer for single-line formulas.

    Usage:
        lexer = Lexer("2*t^2 - 3*t + 10")
        tokens = lexer.tokenize()

    Or for streaming:
        for token in Lexer(text):
            process(token)
    """

    SINGLE_CHAR_TOKENS = {
        '+': TokenType.PLUS,
        '-': TokenType.MINUS,
        '*': TokenType.STAR,
        '/': TokenType.SLASH,
        '^': TokenType.CARET,
        '(': TokenType.LPAREN,
        ')': TokenType.RPAREN,
        ',': TokenType.COMMA,
    }

    def __init__(self, source: str):
        self.source = source
        self.pos = 0            # Current position in source

    def _location(self) -> SourceLocation:
        """Get current source location."""
        return SourceLocation(self.pos + 1, self.pos)

    def _span(self, start: SourceLocation) -> SourceSpan:
        """Create a span from start to current position."""
        return SourceSpan(start, self._location())

    def _peek(self, offset: int = 0) -> str:
        """Look at character at current position + offset without consuming."""
        idx = self.pos + offset
        if idx >= len(self.source):
            return '\0'
        return self.source[idx]

    def _advance(self) -> str:
        """Consume and return current character."""
        if self.pos >= len(self.source):
            return '\0'
        ch = self.source[self.pos]
        self.pos += 1
        return ch

    def _match(self, expected: str) -> bool:
        """Consume character if it matches expected."""
        if self._peek() == expected:
            self._advance()
            return True
        return False

    def _is_at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _skip_whitespace(self) -> None:
        while self._peek() in ' \t\r\n' and not self._is_at_end():
            self._advance()

    def _make_token(self, token_type: TokenType, value, start: SourceLocation) -> Token:
        """Create a token covering ``start`` up to the current position."""
        lexeme = self.source[start.offset:self.pos]
        return Token(token_type, value, lexeme, self._span(start))

    def _scan_number(self) -> Token:
        """Scan a numeric literal."""
        start = self._location()

        while self._peek().isdigit():
            self._advance()

        if self._peek() == '.':
            self._advance()  # consume '.'
            while self._peek().isdigit():
                self._advance()

        # Scientific notation
        if self._peek() in 'eE':
            self._advance()  # consume 'e'
            if self._peek() in '+-':
                self._advance()
            if not self._peek().isdigit():
                lexeme = self.source[start.offset:self.pos]
                raise error_invalid_number_literal(lexeme, self._span(start), self.source)
            while self._peek().isdigit():
                self._advance()

        lexeme = self.source[start.offset:self.pos]
        # A second '.' directly after a literal ("1.2.3") is never valid
        if self._peek() == '.':
            while self._peek().isdigit() or self._peek() == '.':
                self._advance()
            lexeme = self.source[start.offset:self.pos]
            raise error_invalid_number_literal(lexeme, self._span(start), self.source)

        try:
            value = float(lexeme)
        except ValueError:
            raise error_invalid_number_literal(lexeme, self._span(start), self.source)
        return self._make_token(TokenType.NUMBER, value, start)

    def _scan_identifier(self) -> Token:
        """Scan an identifier."""
        start = self._location()
        while self._peek().isalnum() or self._peek() == '_':
            self._advance()
        lexeme = self.source[start.offset:self.pos]
        return self._make_token(TokenType.IDENTIFIER, lexeme, start)

    def _scan_token(self) -> Token:
        """Scan the next token."""
        self._skip_whitespace()

        start = self._location()
        if self._is_at_end():
            return Token(TokenType.EOF, None, "", self._span(start))

        ch = self._peek()

        if ch.isdigit() or (ch == '.' and self._peek(1).isdigit()):
            return self._scan_number()

        if ch.isalpha() or ch == '_':
            return self._scan_identifier()

        self._advance()

        if ch == '*' and self._match('*'):
            return self._make_token(TokenType.CARET, "**", start)

        if ch in self.SINGLE_CHAR_TOKENS:
            return self._make_token(self.SINGLE_CHAR_TOKENS[ch], ch, start)

        raise error_unexpected_character(ch, self._span(start), self.source)

    def tokenize(self) -> List[Token]:
        """Tokenize the entire source, returning a list of tokens."""
        return list(self)

    def __iter__(self) -> Iterator[Token]:
        """Iterate over tokens."""
        while True:
            token = self._scan_token()
            yield token
            if token.type == TokenType.EOF:
                break


def tokenize(source: str) -> List[Token]:
    """
    Convenience function to tokenize formula text.

    Raises:
        LexerError: If tokenization fails
    """
    return Lexer(source).tokenize()
