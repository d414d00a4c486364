"""
Recursive descent parser for calcviz expressions.

Converts a token stream into an expression tree.
"""

from typing import List, Optional
from .tokens import Token, TokenType, SourceSpan, describe
from .ast import Expression, Number, Identifier, BinaryOp, UnaryOp, FunctionCall
from .errors import (
    ParseError,
    error_unexpected_token,
    error_unexpected_end,
    error_unbalanced_parenthesis,
    error_empty_expression,
)
from .lexer import tokenize


class Parser:
    """
    Recursive descent parser for single-variable formulas.

    Usage:
        parser = Parser(tokens, source)
        tree = parser.parse()

    The parser implements precedence climbing for binary operators:
        Lowest:  + -
                 * /
                 ^ (power, right-associative)
        Highest: unary (- +)

    Unary minus binds tighter than ``^``, so ``-x^2`` is ``(-x)^2``.
    """

    # Operator precedence levels (higher = tighter binding)
    PRECEDENCE = {
        TokenType.PLUS: 1,
        TokenType.MINUS: 1,
        TokenType.STAR: 2,
        TokenType.SLASH: 2,
        TokenType.CARET: 3,  # Power (right-associative)
    }

    # Right-associative operators
    RIGHT_ASSOCIATIVE = {TokenType.CARET}

    def __init__(self, tokens: List[Token], source: Optional[str] = None):
        self.tokens = tokens
        self.source = source  # Original text for diagnostics
        self.pos = 0

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        """Get current token."""
        if self.pos >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[self.pos]

    def _is_at_end(self) -> bool:
        return self._current().type == TokenType.EOF

    def _check(self, token_type: TokenType) -> bool:
        return self._current().type == token_type

    def _check_any(self, *token_types: TokenType) -> bool:
        return self._current().type in token_types

    def _advance(self) -> Token:
        """Consume and return current token."""
        token = self._current()
        if not self._is_at_end():
            self.pos += 1
        return token

    def _match(self, *token_types: TokenType) -> Optional[Token]:
        """Consume token if it matches any of the given types."""
        if self._current().type in token_types:
            return self._advance()
        return None

    def _error(self, expected: str) -> ParseError:
        """Build a parser error for the current token."""
        token = self._current()
        if token.type == TokenType.EOF:
            return error_unexpected_end(expected, token.span, self.source)
        if token.type == TokenType.RPAREN:
            return error_unbalanced_parenthesis(token.span, self.source, unclosed=False)
        return error_unexpected_token(expected, describe(token.type), token.span, self.source)

    def _span_from(self, start: Token) -> SourceSpan:
        """Create a span from start token to the previous token's end."""
        end_token = self.tokens[max(0, self.pos - 1)]
        return SourceSpan(start.span.start, end_token.span.end)

    # =========================================================================
    # Expression Parsing (Precedence Climbing)
    # =========================================================================

    def _parse_binary_expr(self, min_precedence: int) -> Expression:
        """Parse binary expressions with precedence climbing."""
        left = self._parse_unary_expr()

        while True:
            op_token = self._current()
            precedence = self.PRECEDENCE.get(op_token.type)

            if precedence is None or precedence < min_precedence:
                break

            self._advance()  # consume operator

            # Right-associative operators use same precedence, others use precedence + 1
            next_precedence = precedence if op_token.type in self.RIGHT_ASSOCIATIVE else precedence + 1
            right = self._parse_binary_expr(next_precedence)

            left = BinaryOp(
                span=SourceSpan(left.span.start, right.span.end),
                left=left,
                operator=op_token.type,
                right=right
            )

        return left

    def _parse_unary_expr(self) -> Expression:
        """Parse unary expressions (-, +)."""
        if self._check_any(TokenType.MINUS, TokenType.PLUS):
            op = self._advance()
            operand = self._parse_unary_expr()
            return UnaryOp(
                span=SourceSpan(op.span.start, operand.span.end),
                operator=op.type,
                operand=operand
            )

        return self._parse_primary_expr()

    def _parse_primary_expr(self) -> Expression:
        """Parse literals, identifiers, calls and grouped expressions."""
        token = self._current()

        if token.type == TokenType.NUMBER:
            self._advance()
            return Number(span=token.span, value=token.value)

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            if self._check(TokenType.LPAREN):
                return self._parse_call(token)
            return Identifier(span=token.span, name=token.value)

        if token.type == TokenType.LPAREN:
            self._advance()
            inner = self._parse_binary_expr(0)
            if not self._match(TokenType.RPAREN):
                if self._is_at_end():
                    raise error_unbalanced_parenthesis(token.span, self.source)
                raise self._error("')'")
            return inner

        raise self._error("expression")

    def _parse_call(self, name_token: Token) -> FunctionCall:
        """Parse a function call argument list."""
        open_paren = self._advance()  # consume '('
        args = []

        if not self._check(TokenType.RPAREN):
            args.append(self._parse_binary_expr(0))
            while self._match(TokenType.COMMA):
                args.append(self._parse_binary_expr(0))

        if not self._match(TokenType.RPAREN):
            if self._is_at_end():
                raise error_unbalanced_parenthesis(open_paren.span, self.source)
            raise self._error("',' or ')'")

        return FunctionCall(
            span=self._span_from(name_token),
            name=name_token.value,
            name_span=name_token.span,
            arguments=tuple(args)
        )

    def parse(self) -> Expression:
        """Parse the whole token stream as one expression."""
        if self._is_at_end():
            raise error_empty_expression(self._current().span, self.source)

        tree = self._parse_binary_expr(0)

        if not self._is_at_end():
            raise self._error("operator or end of expression")
        return tree


def parse(tokens: List[Token], source: Optional[str] = None) -> Expression:
    """
    Convenience function to parse tokens into an expression tree.

    Raises:
        ParseError: If parsing fails
    """
    return Parser(tokens, source).parse()


def parse_text(source: str) -> Expression:
    """Tokenize and parse formula text in one step.

    Raises:
        LexerError: On an invalid character or number literal
        ParseError: On malformed syntax
    """
    return parse(tokenize(source), source)
