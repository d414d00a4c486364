"""Uniform sampling of a compiled expression over an interval."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple, Union

import numpy as np

from calcviz.expr import CompiledExpression, evaluate

logger = logging.getLogger(__name__)

Point2D = Tuple[float, float]


@dataclass(frozen=True)
class Bounds:
    """Closed interval ``[min, max]`` with ``min <= max``."""

    min: float
    max: float

    def __post_init__(self) -> None:
        lo, hi = float(self.min), float(self.max)
        if not (math.isfinite(lo) and math.isfinite(hi)):
            raise ValueError(f"bounds must be finite, got ({lo}, {hi})")
        if lo > hi:
            raise ValueError(f"bounds must satisfy min <= max, got ({lo}, {hi})")
        object.__setattr__(self, "min", lo)
        object.__setattr__(self, "max", hi)

    @classmethod
    def of(cls, value: Union["Bounds", Sequence[float]]) -> "Bounds":
        """Coerce a ``(min, max)`` pair (or an existing ``Bounds``)."""
        if isinstance(value, Bounds):
            return value
        if len(value) != 2:
            raise ValueError("bounds need exactly two values")
        return cls(value[0], value[1])

    @property
    def width(self) -> float:
        return self.max - self.min

    @property
    def degenerate(self) -> bool:
        return self.min == self.max

    def clamp(self, value: float) -> float:
        """Clamp ``value`` into the interval."""
        return min(max(float(value), self.min), self.max)

    def __iter__(self) -> Iterator[float]:
        yield self.min
        yield self.max


@dataclass(frozen=True)
class SampledPoint:
    """One ``(t, value)`` sample."""

    t: float
    value: float
    ok: bool = True


@dataclass(frozen=True)
class SampledCurve:
    """Ordered samples of an expression; ``failures`` lists failed abscissae."""

    points: Tuple[SampledPoint, ...]
    bounds: Bounds

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[SampledPoint]:
        return iter(self.points)

    def __getitem__(self, index: int) -> SampledPoint:
        return self.points[index]

    @property
    def ts(self) -> Tuple[float, ...]:
        return tuple(p.t for p in self.points)

    @property
    def values(self) -> Tuple[float, ...]:
        return tuple(p.value for p in self.points)

    @property
    def failures(self) -> Tuple[float, ...]:
        return tuple(p.t for p in self.points if not p.ok)

    @property
    def ok(self) -> bool:
        return all(p.ok for p in self.points)

    def as_array(self) -> np.ndarray:
        """Return an ``(n, 2)`` array of ``(t, value)`` rows."""
        return np.array([(p.t, p.value) for p in self.points], dtype=float).reshape(-1, 2)

    def line_points(self) -> List[Tuple[float, float, float]]:
        """Return the curve lifted into the z=0 plane for line rendering."""
        return [(p.t, p.value, 0.0) for p in self.points]


def require_expression(expr) -> CompiledExpression:
    """Return ``expr`` if it is compiled, raise ``TypeError`` otherwise."""
    if not isinstance(expr, CompiledExpression):
        raise TypeError(
            f"expected a CompiledExpression, got {type(expr).__name__}; "
            "check the result of compile_expression before building geometry"
        )
    return expr


def require_count(name: str, value: int, minimum: int) -> int:
    """Validate an integer resolution argument."""
    if isinstance(value, bool) or int(value) != value:
        raise ValueError(f"{name} must be an integer, got {value!r}")
    value = int(value)
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def partition(bounds: Bounds, segments: int) -> List[float]:
    """Return the ``segments + 1`` uniform partition points of ``bounds``.

    The first and last entries are exactly ``bounds.min`` and ``bounds.max``.
    """
    lo, hi = bounds.min, bounds.max
    ts = [lo + (hi - lo) * (i / segments) for i in range(segments)]
    ts.append(hi)
    return ts


def sample(expr: CompiledExpression, bounds, segments: int) -> SampledCurve:
    """Evaluate ``expr`` at the ``segments + 1`` partition points of ``bounds``."""
    expr = require_expression(expr)
    bounds = Bounds.of(bounds)
    segments = require_count("segments", segments, 1)

    points = []
    for t in partition(bounds, segments):
        result = evaluate(expr, t)
        points.append(SampledPoint(t, result.value, result.ok))

    curve = SampledCurve(tuple(points), bounds)
    if not curve.ok:
        logger.debug("sampling %r: %d of %d points failed",
                     expr.source, len(curve.failures), len(curve))
    return curve
