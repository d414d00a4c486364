"""Signed-area geometry: the area polygon under a curve and Riemann rectangles.

The area polygon is the sampled curve closed back to the baseline.  It is not
split where the function changes sign, so a curve crossing the axis gives a
single bow-tie shaped loop; that is the intended signed-area picture.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

from calcviz.expr import CompiledExpression, evaluate
from calcviz.sampling import Bounds, Point2D, SampledCurve, require_count, require_expression

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Polygon:
    """Closed loop of 2D points; the last point connects back to the first."""

    points: Tuple[Point2D, ...]
    failures: Tuple[float, ...] = ()

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    @property
    def ok(self) -> bool:
        return not self.failures

    def signed_area(self) -> float:
        """Shoelace area of the loop (positive when counter-clockwise)."""
        return signed_area(self.points)


@dataclass(frozen=True)
class RectangleDescriptor:
    """One Riemann rectangle.

    ``center`` is ``(midpoint, height / 2)`` so the rectangle spans from the
    baseline to ``height``; ``height`` keeps the sign of the function.
    ``width`` is the full sub-interval width and ``display_width`` the width
    after the cosmetic margin.
    """

    center: Point2D
    width: float
    height: float
    display_width: float
    failed: bool = False

    @property
    def area(self) -> float:
        """Signed area ``width * height``."""
        return self.width * self.height

    def corners(self) -> Tuple[Point2D, Point2D, Point2D, Point2D]:
        """Corners of the drawn rectangle, counter-clockwise from bottom left."""
        cx = self.center[0]
        half = self.display_width / 2.0
        return ((cx - half, 0.0), (cx + half, 0.0),
                (cx + half, self.height), (cx - half, self.height))


def signed_area(loop: Sequence[Point2D]) -> float:
    total = 0.0
    for i, (x0, y0) in enumerate(loop):
        x1, y1 = loop[(i + 1) % len(loop)]
        total += x0 * y1 - x1 * y0
    return total / 2.0


def build_area(curve: SampledCurve) -> Polygon:
    """Close ``curve`` against the baseline.

    The roof is the sampled points in order, followed by ``(t_max, 0)`` and
    ``(t_min, 0)``.
    """
    if not isinstance(curve, SampledCurve):
        raise TypeError(f"expected a SampledCurve, got {type(curve).__name__}")
    if len(curve) == 0:
        raise ValueError("cannot build an area from an empty curve")

    roof = [(p.t, p.value) for p in curve]
    t_min = curve[0].t
    t_max = curve[-1].t
    roof.append((t_max, 0.0))
    roof.append((t_min, 0.0))
    return Polygon(tuple(roof), curve.failures)


def build_riemann(expr: CompiledExpression, bounds, partitions: int,
                  margin: float = 1.0) -> Tuple[RectangleDescriptor, ...]:
    """Midpoint-rule rectangles, one per equal sub-interval of ``bounds``.

    ``margin`` scales only ``display_width`` (``0.9`` leaves visible gaps
    between neighbours); it never changes ``width`` or ``area``.
    """
    expr = require_expression(expr)
    bounds = Bounds.of(bounds)
    partitions = require_count("partitions", partitions, 1)
    if not 0.0 < margin <= 1.0:
        raise ValueError(f"margin must be in (0, 1], got {margin}")

    delta = bounds.width / partitions
    rects = []
    for i in range(partitions):
        mid = bounds.min + i * delta + delta / 2.0
        result = evaluate(expr, mid)
        rects.append(RectangleDescriptor(
            center=(mid, result.value / 2.0),
            width=delta,
            height=result.value,
            display_width=delta * margin,
            failed=not result.ok,
        ))

    failed = sum(1 for r in rects if r.failed)
    if failed:
        logger.debug("riemann %r: %d of %d midpoints failed", expr.source, failed, partitions)
    return tuple(rects)


def riemann_total(rects: Iterable[RectangleDescriptor]) -> float:
    """Sum of the signed rectangle areas."""
    return sum(r.area for r in rects)


def riemann_failures(rects: Iterable[RectangleDescriptor]) -> Tuple[float, ...]:
    """Midpoints whose evaluation failed."""
    return tuple(r.center[0] for r in rects if r.failed)
