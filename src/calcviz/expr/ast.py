"""
Abstract Syntax Tree (AST) node definitions for calcviz expressions.

The parser produces these nodes; the resolver checks names against the
function table and the evaluator walks the tree.  Nodes are frozen so a
compiled expression can be shared and hashed.
"""

from dataclasses import dataclass
from typing import Any, Tuple
from abc import ABC
from .tokens import SourceSpan, TokenType


# =============================================================================
# Base Classes
# =============================================================================

@dataclass(frozen=True)
class AstNode(ABC):
    """Base class for all AST nodes."""
    span: SourceSpan  # Source location for error reporting

    def accept(self, visitor: "AstVisitor") -> Any:
        """Accept a visitor for traversal."""
        method_name = f"visit_{self.__class__.__name__}"
        method = getattr(visitor, method_name, visitor.generic_visit)
        return method(self)


class AstVisitor(ABC):
    """Base class for AST visitors."""

    def generic_visit(self, node: AstNode) -> Any:
        """Default visit method."""
        raise NotImplementedError(f"No visitor for {node.__class__.__name__}")


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class Expression(AstNode):
    """Base class for all expressions."""
    pass


@dataclass(frozen=True)
class Number(Expression):
    """A numeric literal."""
    value: float


@dataclass(frozen=True)
class Identifier(Expression):
    """A reference to the free variable or a named constant."""
    name: str


@dataclass(frozen=True)
class BinaryOp(Expression):
    """A binary operation (e.g., a + b, x ^ 2)."""
    left: Expression
    operator: TokenType
    right: Expression


@dataclass(frozen=True)
class UnaryOp(Expression):
    """A unary operation (-x, +x)."""
    operator: TokenType
    operand: Expression


@dataclass(frozen=True)
class FunctionCall(Expression):
    """A call to a whitelisted function (e.g., sin(x))."""
    name: str
    name_span: SourceSpan
    arguments: Tuple[Expression, ...]


_OPERATOR_TEXT = {
    TokenType.PLUS: "+",
    TokenType.MINUS: "-",
    TokenType.STAR: "*",
    TokenType.SLASH: "/",
    TokenType.CARET: "^",
}


class Unparser(AstVisitor):
    """Render an AST back to fully parenthesized text (for debugging)."""

    def visit_Number(self, node: Number) -> str:
        return repr(node.value)

    def visit_Identifier(self, node: Identifier) -> str:
        return node.name

    def visit_BinaryOp(self, node: BinaryOp) -> str:
        return (f"({node.left.accept(self)} {_OPERATOR_TEXT[node.operator]} "
                f"{node.right.accept(self)})")

    def visit_UnaryOp(self, node: UnaryOp) -> str:
        return f"({_OPERATOR_TEXT[node.operator]}{node.operand.accept(self)})"

    def visit_FunctionCall(self, node: FunctionCall) -> str:
        args = ", ".join(arg.accept(self) for arg in node.arguments)
        return f"{node.name}({args})"


def unparse(node: Expression) -> str:
    """Return the fully parenthesized text of an expression tree."""
    return node.accept(Unparser())
