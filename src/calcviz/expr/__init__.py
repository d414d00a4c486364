"""
Expression language for calcviz.

This module provides:
- Lexer: Tokenizes formula text
- Parser: Builds an expression tree with the usual precedence rules
- Resolver: Checks names against the free variable and function whitelist
- Evaluator: Computes the value at a point, coercing domain errors to 0

Usage:
    from calcviz.expr import compile_expression, evaluate, ParseError

    expr = compile_expression("2*t^2 - 3*t + 10", variable="t")
    if isinstance(expr, ParseError):
        print(expr.diagnostic.format())
    else:
        result = evaluate(expr, 0.0)
        print(result.value, result.ok)
"""

from .tokens import (
    Token,
    TokenType,
    SourceLocation,
    SourceSpan,
)

from .lexer import (
    Lexer,
    tokenize,
)

from .parser import (
    Parser,
    parse,
    parse_text,
)

from .ast import (
    AstNode,
    AstVisitor,
    Expression,
    Number,
    Identifier,
    BinaryOp,
    UnaryOp,
    FunctionCall,
    unparse,
)

from .errors import (
    Diagnostic,
    CalcvizError,
    ExpressionError,
    LexerError,
    ParseError,
    NameResolutionError,
    EvaluationError,
)

from .functions import (
    BuiltinFunction,
    FunctionRegistry,
    get_registry,
)

from .evaluator import (
    CompiledExpression,
    Evaluation,
    FALLBACK_VALUE,
    compile_expression,
    parse_expression,
    evaluate,
    is_expression,
)

__all__ = [
    # Tokens
    "Token",
    "TokenType",
    "SourceLocation",
    "SourceSpan",
    # Lexer / parser
    "Lexer",
    "tokenize",
    "Parser",
    "parse",
    "parse_text",
    # AST
    "AstNode",
    "AstVisitor",
    "Expression",
    "Number",
    "Identifier",
    "BinaryOp",
    "UnaryOp",
    "FunctionCall",
    "unparse",
    # Errors
    "Diagnostic",
    "CalcvizError",
    "ExpressionError",
    "LexerError",
    "ParseError",
    "NameResolutionError",
    "EvaluationError",
    # Functions
    "BuiltinFunction",
    "FunctionRegistry",
    "get_registry",
    # Evaluation
    "CompiledExpression",
    "Evaluation",
    "FALLBACK_VALUE",
    "compile_expression",
    "parse_expression",
    "evaluate",
    "is_expression",
]
