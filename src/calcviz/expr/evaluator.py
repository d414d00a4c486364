"""
Compilation and tree-walking evaluation of single-variable formulas.

``compile_expression`` turns text into an immutable :class:`CompiledExpression`
(or hands back the :class:`ParseError` describing why it could not), and
``evaluate`` computes its value at one point.  Evaluation never raises for
domain problems: the value falls back to ``0.0`` and the
:class:`EvaluationError` travels alongside it in an :class:`Evaluation`.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Optional, Union

from .ast import AstVisitor, Expression, Number, Identifier, BinaryOp, UnaryOp, FunctionCall, unparse
from .errors import (
    ParseError,
    EvaluationError,
    error_unknown_identifier,
    error_wrong_arity,
    error_not_callable,
    error_missing_call,
    error_division_by_zero,
    error_domain,
    error_overflow,
    error_complex_result,
    error_non_finite,
    error_too_complex,
    error_too_deep,
)
from .functions import FunctionRegistry, get_registry, power
from .parser import parse_text
from .tokens import SourceLocation, SourceSpan, TokenType

logger = logging.getLogger(__name__)

FALLBACK_VALUE = 0.0


class Resolver(AstVisitor):
    """Check every name in a tree against the free variable and registry."""

    def __init__(self, variable: str, registry: FunctionRegistry, source: str):
        self.variable = variable
        self.registry = registry
        self.source = source

    def visit_Number(self, node: Number) -> None:
        pass

    def visit_Identifier(self, node: Identifier) -> None:
        if node.name == self.variable:
            return
        if self.registry.get_constant(node.name) is not None:
            return
        if self.registry.get_function(node.name) is not None:
            raise error_missing_call(node.name, node.span, self.source)
        raise error_unknown_identifier(node.name, self.variable, node.span, self.source)

    def visit_BinaryOp(self, node: BinaryOp) -> None:
        node.left.accept(self)
        node.right.accept(self)

    def visit_UnaryOp(self, node: UnaryOp) -> None:
        node.operand.accept(self)

    def visit_FunctionCall(self, node: FunctionCall) -> None:
        func = self.registry.get_function(node.name)
        if func is None:
            if node.name == self.variable or self.registry.get_constant(node.name) is not None:
                raise error_not_callable(node.name, node.name_span, self.source)
            raise error_unknown_identifier(node.name, self.variable, node.name_span, self.source)
        if not func.accepts(len(node.arguments)):
            raise error_wrong_arity(node.name, func.arity_text, len(node.arguments),
                                    node.span, self.source)
        for arg in node.arguments:
            arg.accept(self)


class Interpreter(AstVisitor):
    """Evaluate a resolved tree with the free variable bound to ``at``."""

    def __init__(self, variable: str, at: float, registry: FunctionRegistry, source: str):
        self.variable = variable
        self.at = at
        self.registry = registry
        self.source = source

    def _finite(self, value: float, node: Expression) -> float:
        if math.isfinite(value):
            return value
        raise error_non_finite(node.span, self.at, self.source)

    def visit_Number(self, node: Number) -> float:
        return node.value

    def visit_Identifier(self, node: Identifier) -> float:
        if node.name == self.variable:
            return self._finite(self.at, node)
        return self.registry.get_constant(node.name)

    def visit_UnaryOp(self, node: UnaryOp) -> float:
        operand = node.operand.accept(self)
        if node.operator == TokenType.MINUS:
            return -operand
        return operand

    def visit_BinaryOp(self, node: BinaryOp) -> float:
        left = node.left.accept(self)
        right = node.right.accept(self)
        op = node.operator

        if op == TokenType.PLUS:
            result = left + right
        elif op == TokenType.MINUS:
            result = left - right
        elif op == TokenType.STAR:
            result = left * right
        elif op == TokenType.SLASH:
            if right == 0.0:
                raise error_division_by_zero(node.span, self.at, self.source)
            result = left / right
        elif op == TokenType.CARET:
            try:
                result = power(left, right)
            except ZeroDivisionError:
                raise error_division_by_zero(node.span, self.at, self.source)
            except ValueError:
                raise error_complex_result(node.span, self.at, self.source)
            except OverflowError:
                raise error_overflow(node.span, self.at, self.source)
        else:
            raise RuntimeError(f"Unknown binary operator: {op}")

        return self._finite(result, node)

    def visit_FunctionCall(self, node: FunctionCall) -> float:
        func = self.registry.get_function(node.name)
        args = [arg.accept(self) for arg in node.arguments]
        try:
            result = float(func.implementation(*args))
        except ZeroDivisionError:
            raise error_division_by_zero(node.span, self.at, self.source)
        except OverflowError:
            raise error_overflow(node.span, self.at, self.source)
        except ValueError:
            raise error_domain(node.name, args[0], node.span, self.at, self.source)
        return self._finite(result, node)


@dataclass(frozen=True)
class CompiledExpression:
    """
    Immutable compiled form of a formula over one free variable.

    Built once from text; evaluating it never mutates it, so instances can
    be shared between builders and used as cache keys.
    """
    source: str
    variable: str
    tree: Expression = field(repr=False)

    def __str__(self) -> str:
        return self.source

    def __call__(self, value: float) -> float:
        """Shorthand for ``evaluate(self, value).value``."""
        return evaluate(self, value).value

    @property
    def canonical(self) -> str:
        """Fully parenthesized text of the parsed tree."""
        return unparse(self.tree)


@dataclass(frozen=True)
class Evaluation:
    """Result of evaluating an expression at one point."""
    value: float
    error: Optional[EvaluationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _check_variable(variable: str, registry: FunctionRegistry) -> None:
    if not variable.isidentifier():
        raise ValueError(f"invalid variable name {variable!r}")
    if registry.get_function(variable) is not None or registry.get_constant(variable) is not None:
        raise ValueError(f"variable name {variable!r} clashes with a built-in name")


def _whole_text(text: str) -> SourceSpan:
    return SourceSpan(SourceLocation(1, 0), SourceLocation(len(text) + 1, len(text)))


def parse_expression(text: str, variable: str = "x",
                     registry: Optional[FunctionRegistry] = None) -> CompiledExpression:
    """Parse and resolve ``text``.

    Raises:
        ParseError: (or its subclasses ``LexerError`` and
            ``NameResolutionError``) when the text is not a valid formula
        ValueError: when ``variable`` is not usable as a variable name
    """
    registry = registry or get_registry()
    _check_variable(variable, registry)
    try:
        tree = parse_text(text)
        tree.accept(Resolver(variable, registry, text))
    except RecursionError:
        raise error_too_complex(_whole_text(text), text) from None
    return CompiledExpression(source=text, variable=variable, tree=tree)


def compile_expression(text: str, variable: str = "x",
                       registry: Optional[FunctionRegistry] = None
                       ) -> Union[CompiledExpression, ParseError]:
    """Compile ``text`` into an expression, or return the ParseError.

    Malformed text never raises out of this function; the caller receives
    the error object and can show its diagnostic.
    """
    try:
        return parse_expression(text, variable, registry)
    except ParseError as exc:
        logger.debug("could not compile %r: %s", text, exc.diagnostic.message)
        return exc


def evaluate(expr: CompiledExpression, value: float,
             registry: Optional[FunctionRegistry] = None) -> Evaluation:
    """Evaluate ``expr`` with its free variable bound to ``value``.

    Domain violations return ``Evaluation(0.0, error)`` instead of raising.
    """
    if not isinstance(expr, CompiledExpression):
        raise TypeError(f"expected a CompiledExpression, got {type(expr).__name__}")
    registry = registry or get_registry()
    at = float(value)
    try:
        result = expr.tree.accept(Interpreter(expr.variable, at, registry, expr.source))
    except RecursionError:
        exc = error_too_deep(_whole_text(expr.source), at, expr.source)
        logger.debug("evaluation of %r failed: %s", expr.source, exc.diagnostic.message)
        return Evaluation(FALLBACK_VALUE, exc)
    except EvaluationError as exc:
        logger.debug("evaluation of %r failed: %s", expr.source, exc.diagnostic.message)
        return Evaluation(FALLBACK_VALUE, exc)
    return Evaluation(float(result))


def is_expression(value) -> bool:
    """Check if ``value`` is a successfully compiled expression."""
    return isinstance(value, CompiledExpression)
