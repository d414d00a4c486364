"""
Unit tests for the calcviz expression lexer.
"""

import pytest
from calcviz.expr import tokenize, Lexer, TokenType, LexerError, ParseError


class TestLexerBasics:
    """Test basic lexer functionality."""

    def test_empty_source(self):
        """Empty source produces only EOF."""
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF

    def test_whitespace_only(self):
        """Whitespace-only source produces only EOF."""
        tokens = tokenize("   \t  ")
        assert [t.type for t in tokens] == [TokenType.EOF]

    def test_simple_polynomial(self):
        """Default area formula tokenization."""
        tokens = tokenize("x^2 - 2*x + 3")
        types = [t.type for t in tokens]
        assert types == [
            TokenType.IDENTIFIER,
            TokenType.CARET,
            TokenType.NUMBER,
            TokenType.MINUS,
            TokenType.NUMBER,
            TokenType.STAR,
            TokenType.IDENTIFIER,
            TokenType.PLUS,
            TokenType.NUMBER,
            TokenType.EOF,
        ]

    def test_identifier_value(self):
        """Identifier token has correct value."""
        tokens = tokenize("log10")
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "log10"

    def test_position_tracking(self):
        """Token columns are 1-indexed, offsets 0-indexed."""
        tokens = tokenize("2 * t")
        assert tokens[0].span.start.column == 1
        assert tokens[1].span.start.column == 3
        assert tokens[2].span.start.offset == 4

    def test_lexeme_preserved(self):
        """Tokens keep the exact source text."""
        tokens = tokenize("sqrt( 2.50 )")
        assert [t.lexeme for t in tokens[:-1]] == ["sqrt", "(", "2.50", ")"]

    def test_iteration_matches_tokenize(self):
        """Streaming iteration yields the same tokens as tokenize()."""
        source = "sin(x) / 2"
        assert list(Lexer(source)) == Lexer(source).tokenize()


class TestNumbers:
    """Test numeric literal scanning."""

    @pytest.mark.parametrize("text,value", [
        ("42", 42.0),
        ("3.14", 3.14),
        (".5", 0.5),
        ("2.", 2.0),
        ("1e3", 1000.0),
        ("2.5E-2", 0.025),
        ("1e+2", 100.0),
    ])
    def test_number_values(self, text, value):
        tokens = tokenize(text)
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == pytest.approx(value)

    def test_dangling_exponent(self):
        """An exponent marker needs digits."""
        with pytest.raises(LexerError) as exc_info:
            tokenize("1e")
        assert exc_info.value.code == "E002"

    def test_two_decimal_points(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize("1.2.3")
        assert exc_info.value.code == "E002"
        assert "1.2.3" in exc_info.value.diagnostic.message


class TestOperators:
    """Test operator tokens."""

    def test_double_star_is_power(self):
        """'**' is lexed as the power operator."""
        tokens = tokenize("x**2")
        assert tokens[1].type == TokenType.CARET
        assert tokens[1].lexeme == "**"

    def test_all_single_char_tokens(self):
        tokens = tokenize("+-*/^(),")
        assert [t.type for t in tokens[:-1]] == [
            TokenType.PLUS, TokenType.MINUS, TokenType.STAR, TokenType.SLASH,
            TokenType.CARET, TokenType.LPAREN, TokenType.RPAREN, TokenType.COMMA,
        ]


class TestLexerErrors:
    """Test lexer error reporting."""

    def test_unexpected_character(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize("x $ 2")
        error = exc_info.value
        assert error.code == "E001"
        assert error.diagnostic.span.start.column == 3

    def test_lexer_error_is_parse_error(self):
        """Lexer failures are reported as parse errors to callers."""
        with pytest.raises(ParseError):
            tokenize("x = 2")

    def test_formatted_diagnostic_has_caret(self):
        with pytest.raises(LexerError) as exc_info:
            tokenize("x # 2")
        text = exc_info.value.diagnostic.format()
        assert "error[E001]" in text
        assert "  | x # 2" in text
        assert "  |   ^" in text
