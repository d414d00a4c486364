"""
Tests for formula compilation and evaluation.
"""

import math

import pytest
from calcviz.expr import (
    CompiledExpression,
    Evaluation,
    EvaluationError,
    FALLBACK_VALUE,
    LexerError,
    NameResolutionError,
    ParseError,
    compile_expression,
    evaluate,
    get_registry,
    is_expression,
    parse_expression,
)
from calcviz.expr.ast import BinaryOp, Identifier
from calcviz.expr.tokens import SourceLocation, SourceSpan, TokenType


def value_of(text, at, variable="x"):
    expr = compile_expression(text, variable)
    assert is_expression(expr), expr
    return evaluate(expr, at)


class TestCompile:
    """compile_expression contract."""

    def test_returns_compiled_expression(self):
        expr = compile_expression("x^2 - 2*x + 3")
        assert isinstance(expr, CompiledExpression)
        assert expr.variable == "x"
        assert str(expr) == "x^2 - 2*x + 3"

    def test_returns_parse_error_instead_of_raising(self):
        result = compile_expression("(x + 1")
        assert isinstance(result, ParseError)
        assert not is_expression(result)

    def test_lexer_failure_is_returned(self):
        result = compile_expression("x $ 1")
        assert isinstance(result, LexerError)

    def test_parse_expression_raises(self):
        with pytest.raises(ParseError):
            parse_expression("x +")

    @pytest.mark.parametrize("text", [
        "(" * 400 + "x" + ")" * 400,
        "+".join(["x"] * 1200),
    ])
    def test_deep_nesting_is_a_coded_error(self, text):
        result = compile_expression(text)
        assert isinstance(result, ParseError)
        assert result.code == "E105"
        with pytest.raises(ParseError):
            parse_expression(text)

    def test_time_variable(self):
        expr = compile_expression("2*t^2 - 3*t + 10", variable="t")
        assert evaluate(expr, 1.0).value == pytest.approx(9.0)

    def test_canonical_form(self):
        assert compile_expression("-x^2").canonical == "((-x) ^ 2.0)"

    def test_equal_text_gives_equal_expressions(self):
        assert compile_expression("x + 1") == compile_expression("x + 1")

    @pytest.mark.parametrize("variable", ["2x", "", "sin", "pi"])
    def test_bad_variable_name(self, variable):
        with pytest.raises(ValueError):
            compile_expression("1", variable)


class TestNameResolution:
    """Identifiers are checked at compile time."""

    def test_unknown_identifier(self):
        result = compile_expression("y + 1")
        assert isinstance(result, NameResolutionError)
        assert result.code == "E201"

    def test_other_variable_is_unknown(self):
        """Formulas have exactly one free variable."""
        result = compile_expression("x * t", variable="t")
        assert result.code == "E201"

    def test_unknown_function(self):
        result = compile_expression("foo(x)")
        assert result.code == "E201"

    def test_wrong_arity(self):
        result = compile_expression("sin(x, 2)")
        assert result.code == "E202"
        assert "sin" in result.diagnostic.message

    def test_variable_is_not_callable(self):
        result = compile_expression("x(2)")
        assert result.code == "E203"

    def test_function_used_as_value(self):
        result = compile_expression("sqrt + 1")
        assert result.code == "E204"

    def test_constants(self):
        assert value_of("pi", 0).value == pytest.approx(math.pi)
        assert value_of("e", 0).value == pytest.approx(math.e)
        assert value_of("tau", 0).value == pytest.approx(2 * math.pi)


class TestEvaluate:
    """Values at a point."""

    @pytest.mark.parametrize("text,at,expected", [
        ("x^2 - 2*x + 3", 2.0, 3.0),
        ("0.5*x^2 + 1", -2.0, 3.0),
        ("5 - 0.1*x", 10.0, 4.0),
        ("2^3^2", 0.0, 512.0),
        ("-x^2", 3.0, 9.0),
        ("-(x^2)", 3.0, -9.0),
        ("10 / 4", 0.0, 2.5),
        ("x**3", 2.0, 8.0),
        ("sqrt(x) + 1", 4.0, 3.0),
        ("abs(x)", -2.5, 2.5),
        ("atan2(1, 1)", 0.0, math.pi / 4),
        ("pow(x, 0.5)", 9.0, 3.0),
        ("min(x, 2, 5)", 3.0, 2.0),
        ("max(x, 2, 5)", 7.0, 7.0),
        ("cbrt(x)", -8.0, -2.0),
        ("sign(x)", -0.1, -1.0),
        ("log(e^2)", 0.0, 2.0),
        ("log10(x)", 1000.0, 3.0),
        ("floor(x) + ceil(x)", 1.5, 3.0),
        ("(-2)^3", 0.0, -8.0),
    ])
    def test_values(self, text, at, expected):
        result = value_of(text, at)
        assert result.ok
        assert result.value == pytest.approx(expected)

    @pytest.mark.parametrize("at,expected", [(2.5, 3.0), (-2.5, -3.0), (0.4, 0.0)])
    def test_round_half_away_from_zero(self, at, expected):
        assert value_of("round(x)", at).value == expected

    def test_callable_shorthand(self):
        expr = compile_expression("x + 1")
        assert expr(1.0) == 2.0

    def test_evaluate_does_not_mutate(self):
        expr = compile_expression("x^2")
        before = expr.canonical
        evaluate(expr, 3.0)
        evaluate(expr, -1.0)
        assert expr.canonical == before

    def test_rejects_parse_error(self):
        with pytest.raises(TypeError):
            evaluate(compile_expression("(x"), 1.0)


class TestEvaluationFailures:
    """Domain violations fall back to 0 and carry the error."""

    @pytest.mark.parametrize("text,at,code", [
        ("1/x", 0.0, "E301"),
        ("x^-1", 0.0, "E301"),
        ("sqrt(x)", -1.0, "E302"),
        ("log(x)", 0.0, "E302"),
        ("log(x)", -1.0, "E302"),
        ("asin(x)", 2.0, "E302"),
        ("exp(x)", 1000.0, "E303"),
        ("10^x", 400.0, "E303"),
        ("x^0.5", -4.0, "E304"),
        ("x * 1e308 * 10", 1.0, "E305"),
    ])
    def test_error_codes(self, text, at, code):
        result = value_of(text, at)
        assert not result.ok
        assert result.value == FALLBACK_VALUE
        assert isinstance(result.error, EvaluationError)
        assert result.error.code == code
        assert result.error.at == at

    def test_failure_is_local_to_the_point(self):
        expr = compile_expression("1/x")
        assert not evaluate(expr, 0.0).ok
        assert evaluate(expr, 2.0) == Evaluation(0.5)

    def test_failure_inside_subexpression(self):
        """A failing term zeroes the whole value, not just the term."""
        result = value_of("100 + sqrt(x)", -1.0)
        assert result.value == 0.0
        assert result.error.code == "E302"


    @pytest.mark.parametrize("at", [math.inf, -math.inf, math.nan])
    def test_bare_variable_at_non_finite_point(self, at):
        result = value_of("x", at)
        assert not result.ok
        assert result.value == FALLBACK_VALUE
        assert result.error.code == "E305"

    def test_overly_deep_tree_is_reported(self):
        span = SourceSpan(SourceLocation(1, 0), SourceLocation(2, 1))
        tree = Identifier(span, "x")
        for _ in range(5000):
            tree = BinaryOp(span, tree, TokenType.PLUS, Identifier(span, "x"))
        result = evaluate(CompiledExpression("x + x", "x", tree), 1.0)
        assert not result.ok
        assert result.value == FALLBACK_VALUE
        assert result.error.code == "E306"


class TestRegistry:
    """Built-in function table."""

    def test_shared_registry(self):
        assert get_registry() is get_registry()

    def test_function_names(self):
        names = get_registry().function_names()
        for name in ("sin", "cos", "sqrt", "log", "ln", "atan2", "pow", "min", "max"):
            assert name in names

    def test_arity_text(self):
        registry = get_registry()
        assert registry.get_function("sin").arity_text == "1"
        assert registry.get_function("max").arity_text == "at least 1"
