"""
Built-in function and constant registry for calcviz expressions.

Maps formula names to ``math`` implementations.  Implementations work on
plain floats and signal domain problems the way ``math`` does, by raising
``ValueError``, ``ZeroDivisionError`` or ``OverflowError``; the evaluator
turns those into :class:`~calcviz.expr.errors.EvaluationError`.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Optional
import math


def power(base: float, exponent: float) -> float:
    """Real-valued power used by both ``^`` and ``pow``.

    Raises ``ZeroDivisionError`` for ``0 ^ negative`` and ``ValueError``
    for a negative base with a non-integer exponent.
    """
    if base == 0.0 and exponent < 0.0:
        raise ZeroDivisionError("zero to a negative power")
    if base < 0.0 and not float(exponent).is_integer():
        raise ValueError("negative base with fractional exponent")
    return math.pow(base, exponent)


def _cbrt(x: float) -> float:
    return math.copysign(abs(x) ** (1.0 / 3.0), x)


def _sign(x: float) -> float:
    if x > 0.0:
        return 1.0
    if x < 0.0:
        return -1.0
    return 0.0


def _round(x: float) -> float:
    # half away from zero, not Python's banker's rounding
    return math.copysign(math.floor(abs(x) + 0.5), x)


def _log(x: float) -> float:
    if x == 0.0:
        raise ValueError("log of zero")
    return math.log(x)


@dataclass(frozen=True)
class BuiltinFunction:
    """A whitelisted function with its arity and implementation."""
    name: str
    min_args: int
    max_args: Optional[int]     # None = variadic
    implementation: Callable[..., float]
    doc: str = ""

    def accepts(self, count: int) -> bool:
        """Check whether ``count`` arguments is a valid call."""
        if count < self.min_args:
            return False
        return self.max_args is None or count <= self.max_args

    @property
    def arity_text(self) -> str:
        if self.max_args is None:
            return f"at least {self.min_args}"
        if self.min_args == self.max_args:
            return str(self.min_args)
        return f"{self.min_args} to {self.max_args}"


class FunctionRegistry:
    """
    Registry of the functions and constants a formula may use.

    The default instance is shared; it is never mutated after construction.
    """

    def __init__(self):
        self._functions: Dict[str, BuiltinFunction] = {}
        self._constants: Dict[str, float] = {}
        self._register_all()

    def get_function(self, name: str) -> Optional[BuiltinFunction]:
        """Look up a function by name."""
        return self._functions.get(name)

    def get_constant(self, name: str) -> Optional[float]:
        """Look up a named constant."""
        return self._constants.get(name)

    def function_names(self) -> list:
        return sorted(self._functions)

    def constant_names(self) -> list:
        return sorted(self._constants)

    def register(self, func: BuiltinFunction) -> None:
        self._functions[func.name] = func

    def register_constant(self, name: str, value: float) -> None:
        self._constants[name] = value

    def _register_all(self) -> None:
        self._register_unary_functions()
        self._register_multi_argument_functions()
        self._register_constants()

    def _register_unary_functions(self) -> None:
        unary = [
            ("sin", math.sin, "sine (radians)"),
            ("cos", math.cos, "cosine (radians)"),
            ("tan", math.tan, "tangent (radians)"),
            ("asin", math.asin, "inverse sine"),
            ("acos", math.acos, "inverse cosine"),
            ("atan", math.atan, "inverse tangent"),
            ("sinh", math.sinh, "hyperbolic sine"),
            ("cosh", math.cosh, "hyperbolic cosine"),
            ("tanh", math.tanh, "hyperbolic tangent"),
            ("sqrt", math.sqrt, "square root"),
            ("cbrt", _cbrt, "cube root"),
            ("abs", abs, "absolute value"),
            ("exp", math.exp, "e to the power"),
            ("log", _log, "natural logarithm"),
            ("ln", _log, "natural logarithm"),
            ("log10", math.log10, "base-10 logarithm"),
            ("log2", math.log2, "base-2 logarithm"),
            ("floor", math.floor, "round down"),
            ("ceil", math.ceil, "round up"),
            ("round", _round, "round half away from zero"),
            ("sign", _sign, "sign (-1, 0 or 1)"),
        ]
        for name, impl, doc in unary:
            self.register(BuiltinFunction(name, 1, 1, impl, doc))

    def _register_multi_argument_functions(self) -> None:
        self.register(BuiltinFunction("atan2", 2, 2, math.atan2, "atan2(y, x)"))
        self.register(BuiltinFunction("pow", 2, 2, power, "pow(base, exponent)"))
        self.register(BuiltinFunction("min", 1, None, min, "smallest argument"))
        self.register(BuiltinFunction("max", 1, None, max, "largest argument"))

    def _register_constants(self) -> None:
        self.register_constant("pi", math.pi)
        self.register_constant("e", math.e)
        self.register_constant("tau", math.tau)


_default_registry: Optional[FunctionRegistry] = None


def get_registry() -> FunctionRegistry:
    """Return the shared default registry."""
    global _default_registry
    if _default_registry is None:
        _default_registry = FunctionRegistry()
    return _default_registry
