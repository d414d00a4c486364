"""Fixed-step numerical integration.

Everything here uses the left-rectangle rule with a step count chosen by the
caller.  There is no adaptive refinement and no error estimate; accuracy is
a function of ``steps`` alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Tuple

from calcviz.expr import CompiledExpression, Evaluation, evaluate
from calcviz.sampling import Bounds, SampledCurve, SampledPoint, partition, require_count, require_expression

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntegrationResult:
    """Integral value plus the abscissae where the integrand failed."""

    value: float
    steps: int
    failures: Tuple[float, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures

    def __float__(self) -> float:
        return self.value


def left_rectangle_sum(integrand: Callable[[float], Evaluation], lo: float, hi: float,
                       steps: int) -> IntegrationResult:
    """Sum ``f(lo + i*dt) * dt`` for ``i`` in ``[0, steps)``.

    ``integrand`` returns an :class:`Evaluation`; failed points contribute
    their fallback value and are recorded.
    """
    dt = (hi - lo) / steps
    total = 0.0
    failures = []
    for i in range(steps):
        t = lo + i * dt
        result = integrand(t)
        if not result.ok:
            failures.append(t)
        total += result.value * dt
    return IntegrationResult(total, steps, tuple(failures))


def integrate_report(expr: CompiledExpression, bounds, steps: int) -> IntegrationResult:
    """Integrate ``expr`` over ``bounds`` and report failed evaluations."""
    expr = require_expression(expr)
    bounds = Bounds.of(bounds)
    steps = require_count("steps", steps, 1)
    if bounds.degenerate:
        return IntegrationResult(0.0, steps)

    result = left_rectangle_sum(lambda t: evaluate(expr, t), bounds.min, bounds.max, steps)
    if result.failures:
        logger.debug("integral of %r: %d of %d evaluations failed",
                     expr.source, len(result.failures), steps)
    return result


def integrate(expr: CompiledExpression, bounds, steps: int) -> float:
    """Definite integral of ``expr`` over ``bounds`` with ``steps`` rectangles."""
    return integrate_report(expr, bounds, steps).value


def cumulative_curve(expr: CompiledExpression, bounds, samples: int = 100,
                     inner_steps: int = 20) -> SampledCurve:
    """Running integral ``F(t) = integral of expr from bounds.min to t``.

    The outer samples are the ``samples + 1`` partition points of ``bounds``;
    each one is integrated from scratch with ``inner_steps`` rectangles.
    A sample is marked failed if any of its inner evaluations failed.
    """
    expr = require_expression(expr)
    bounds = Bounds.of(bounds)
    samples = require_count("samples", samples, 1)
    inner_steps = require_count("inner_steps", inner_steps, 1)

    points = []
    for t in partition(bounds, samples):
        result = left_rectangle_sum(lambda u: evaluate(expr, u), bounds.min, t, inner_steps)
        points.append(SampledPoint(t, result.value, result.ok))
    return SampledCurve(tuple(points), bounds)
