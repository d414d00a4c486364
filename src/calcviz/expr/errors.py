"""
Expression-specific exceptions and diagnostics.

Error code ranges:
- E0xx: Lexer errors
- E1xx: Parser errors
- E2xx: Name resolution errors
- E3xx: Evaluation errors
"""

from dataclasses import dataclass, field
from typing import Optional, List
from .tokens import SourceSpan


@dataclass
class Diagnostic:
    """A single diagnostic message tied to a span of the expression text."""
    code: str                       # E001, E101, etc.
    message: str                    # Human-readable message
    span: Optional[SourceSpan] = None
    source_line: Optional[str] = None   # The expression text
    hints: List[str] = field(default_factory=list)

    def format(self, show_source: bool = True) -> str:
        """Format the diagnostic for display."""
        parts = []

        loc = f"{self.span.start}: " if self.span is not None else ""
        parts.append(f"{loc}error[{self.code}]: {self.message}")

        # Source line with caret
        if show_source and self.source_line is not None and self.span is not None:
            parts.append(f"  | {self.source_line}")
            col = self.span.start.column
            underline_len = max(1, self.span.end.column - col)
            parts.append(f"  | {' ' * (col - 1)}{'^' * underline_len}")

        for hint in self.hints:
            parts.append(f"  = hint: {hint}")

        return "\n".join(parts)

    def to_json(self) -> dict:
        """Convert to JSON-serializable dict for the view layer."""
        data = {
            "code": self.code,
            "message": self.message,
            "hints": list(self.hints),
        }
        if self.span is not None:
            data["range"] = {
                "start": self.span.start.offset,
                "end": self.span.end.offset,
            }
        return data


class CalcvizError(Exception):
    """Base exception for calcviz."""


class ExpressionError(CalcvizError):
    """Base exception for expression errors; wraps a :class:`Diagnostic`."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    @property
    def code(self) -> str:
        return self.diagnostic.code

    def __str__(self) -> str:
        return self.diagnostic.format()


class ParseError(ExpressionError):
    """Malformed expression text (E0xx-E2xx)."""
    pass


class LexerError(ParseError):
    """Error during lexical analysis (E0xx)."""
    pass


class NameResolutionError(ParseError):
    """Unknown identifier or bad function arity (E2xx)."""
    pass


class EvaluationError(ExpressionError):
    """Domain violation at a specific input value (E3xx)."""

    def __init__(self, diagnostic: Diagnostic, at: Optional[float] = None):
        super().__init__(diagnostic)
        self.at = at


# --- Lexer error codes ---

def error_unexpected_character(char: str, span: SourceSpan, source_line: str = None) -> LexerError:
    """E001: Unexpected character."""
    diag = Diagnostic(
        code="E001",
        message=f"unexpected character '{char}'",
        span=span,
        source_line=source_line,
    )
    return LexerError(diag)


def error_invalid_number_literal(text: str, span: SourceSpan, source_line: str = None) -> LexerError:
    """E002: Invalid number literal."""
    diag = Diagnostic(
        code="E002",
        message=f"invalid number literal '{text}'",
        span=span,
        source_line=source_line,
        hints=["numbers look like 3, 2.5, .5 or 1e-3"],
    )
    return LexerError(diag)


# --- Parser error codes ---

def error_unexpected_token(expected: str, found: str, span: SourceSpan,
                           source_line: str = None) -> ParseError:
    """E101: Unexpected token."""
    diag = Diagnostic(
        code="E101",
        message=f"expected {expected}, found {found}",
        span=span,
        source_line=source_line,
    )
    return ParseError(diag)


def error_unexpected_end(expected: str, span: SourceSpan, source_line: str = None) -> ParseError:
    """E102: Unexpected end of expression."""
    diag = Diagnostic(
        code="E102",
        message=f"unexpected end of expression, expected {expected}",
        span=span,
        source_line=source_line,
    )
    return ParseError(diag)


def error_unbalanced_parenthesis(span: SourceSpan, source_line: str = None,
                                 unclosed: bool = True) -> ParseError:
    """E103: Unbalanced parentheses."""
    if unclosed:
        message = "unclosed '('"
        hint = "add a matching ')'"
    else:
        message = "unmatched ')'"
        hint = "remove the ')' or add a matching '('"
    diag = Diagnostic(
        code="E103",
        message=message,
        span=span,
        source_line=source_line,
        hints=[hint],
    )
    return ParseError(diag)


def error_empty_expression(span: SourceSpan, source_line: str = None) -> ParseError:
    """E104: Empty expression."""
    diag = Diagnostic(
        code="E104",
        message="empty expression",
        span=span,
        source_line=source_line,
    )
    return ParseError(diag)


def error_too_complex(span: SourceSpan, source_line: str = None) -> ParseError:
    """E105: Expression nested too deeply to compile."""
    diag = Diagnostic(
        code="E105",
        message="expression is nested too deeply",
        span=span,
        source_line=source_line,
        hints=["split long sums or remove redundant parentheses"],
    )
    return ParseError(diag)



# --- Name resolution error codes ---

def error_unknown_identifier(name: str, variable: str, span: SourceSpan,
                             source_line: str = None) -> NameResolutionError:
    """E201: Unknown identifier."""
    diag = Diagnostic(
        code="E201",
        message=f"unknown identifier '{name}'",
        span=span,
        source_line=source_line,
        hints=[f"the free variable is '{variable}'"],
    )
    return NameResolutionError(diag)


def error_wrong_arity(name: str, expected: str, found: int, span: SourceSpan,
                      source_line: str = None) -> NameResolutionError:
    """E202: Wrong number of function arguments."""
    diag = Diagnostic(
        code="E202",
        message=f"'{name}' takes {expected} argument(s), {found} given",
        span=span,
        source_line=source_line,
    )
    return NameResolutionError(diag)


def error_not_callable(name: str, span: SourceSpan, source_line: str = None) -> NameResolutionError:
    """E203: Call of something that is not a function."""
    diag = Diagnostic(
        code="E203",
        message=f"'{name}' is not a function",
        span=span,
        source_line=source_line,
    )
    return NameResolutionError(diag)


def error_missing_call(name: str, span: SourceSpan, source_line: str = None) -> NameResolutionError:
    """E204: Function name used as a value."""
    diag = Diagnostic(
        code="E204",
        message=f"function '{name}' must be called",
        span=span,
        source_line=source_line,
        hints=[f"write {name}(...)"],
    )
    return NameResolutionError(diag)


# --- Evaluation error codes ---

def error_division_by_zero(span: SourceSpan, at: float, source_line: str = None) -> EvaluationError:
    """E301: Division by zero."""
    diag = Diagnostic(
        code="E301",
        message=f"division by zero at {at!r}",
        span=span,
        source_line=source_line,
    )
    return EvaluationError(diag, at)


def error_domain(name: str, argument: float, span: SourceSpan, at: float,
                 source_line: str = None) -> EvaluationError:
    """E302: Argument outside a function's domain."""
    diag = Diagnostic(
        code="E302",
        message=f"{name}({argument!r}) is undefined at {at!r}",
        span=span,
        source_line=source_line,
    )
    return EvaluationError(diag, at)


def error_overflow(span: SourceSpan, at: float, source_line: str = None) -> EvaluationError:
    """E303: Numeric overflow."""
    diag = Diagnostic(
        code="E303",
        message=f"numeric overflow at {at!r}",
        span=span,
        source_line=source_line,
    )
    return EvaluationError(diag, at)


def error_complex_result(span: SourceSpan, at: float, source_line: str = None) -> EvaluationError:
    """E304: Result is not a real number."""
    diag = Diagnostic(
        code="E304",
        message=f"result is not a real number at {at!r}",
        span=span,
        source_line=source_line,
        hints=["a negative base needs an integer exponent"],
    )
    return EvaluationError(diag, at)


def error_non_finite(span: SourceSpan, at: float, source_line: str = None) -> EvaluationError:
    """E305: Result is infinite or NaN."""
    diag = Diagnostic(
        code="E305",
        message=f"result is not finite at {at!r}",
        span=span,
        source_line=source_line,
    )
    return EvaluationError(diag, at)


def error_too_deep(span: SourceSpan, at: float, source_line: str = None) -> EvaluationError:
    """E306: Expression tree too deep to evaluate."""
    diag = Diagnostic(
        code="E306",
        message=f"expression is nested too deeply to evaluate at {at!r}",
        span=span,
        source_line=source_line,
    )
    return EvaluationError(diag, at)

