"""Memoized front ends for the builders.

Every result the builders return is immutable, so identical requests can
share one object.  The wrappers here are keyed on the formula text and the
plain numeric parameters; call :func:`clear_cache` to drop everything.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Tuple, Union

from calcviz.area import RectangleDescriptor, build_riemann
from calcviz.expr import CompiledExpression, ParseError, compile_expression
from calcviz.integrate import IntegrationResult, integrate_report
from calcviz.mesh import Mesh
from calcviz.revolution import AxisMode, build_revolution_mesh
from calcviz.sampling import Bounds, SampledCurve, sample

__all__ = [
    "cached_compile",
    "cached_sample",
    "cached_riemann",
    "cached_revolution_mesh",
    "cached_integral",
    "cache_info",
    "clear_cache",
]

logger = logging.getLogger(__name__)

_MAXSIZE = 128

BoundsKey = Tuple[float, float]


def _bounds_key(bounds) -> BoundsKey:
    b = Bounds.of(bounds)
    return (b.min, b.max)


@lru_cache(maxsize=_MAXSIZE)
def cached_compile(text: str, variable: str = "x") -> Union[CompiledExpression, ParseError]:
    """Memoized :func:`compile_expression`."""
    return compile_expression(text, variable)


def _compiled(text: str, variable: str) -> CompiledExpression:
    result = cached_compile(text, variable)
    if isinstance(result, ParseError):
        raise result
    return result


@lru_cache(maxsize=_MAXSIZE)
def _sample(text: str, variable: str, bounds: BoundsKey, segments: int) -> SampledCurve:
    return sample(_compiled(text, variable), bounds, segments)


def cached_sample(text: str, variable: str, bounds, segments: int) -> SampledCurve:
    """Memoized :func:`calcviz.sampling.sample` for formula text.

    Raises:
        ParseError: if ``text`` does not compile
    """
    return _sample(text, variable, _bounds_key(bounds), segments)


@lru_cache(maxsize=_MAXSIZE)
def _riemann(text: str, variable: str, bounds: BoundsKey, partitions: int,
             margin: float) -> Tuple[RectangleDescriptor, ...]:
    return build_riemann(_compiled(text, variable), bounds, partitions, margin)


def cached_riemann(text: str, variable: str, bounds, partitions: int,
                   margin: float = 1.0) -> Tuple[RectangleDescriptor, ...]:
    """Memoized :func:`calcviz.area.build_riemann` for formula text."""
    return _riemann(text, variable, _bounds_key(bounds), partitions, float(margin))


@lru_cache(maxsize=_MAXSIZE)
def _revolution_mesh(text: str, variable: str, bounds: BoundsKey, axis_mode: AxisMode,
                     axial_segments: int, angular_slices: int, offset: float) -> Mesh:
    return build_revolution_mesh(_compiled(text, variable), bounds, axis_mode,
                                 axial_segments, angular_slices, offset)


def cached_revolution_mesh(text: str, variable: str, bounds, axis_mode,
                           axial_segments: int, angular_slices: int,
                           offset: float = 0.0) -> Mesh:
    """Memoized :func:`calcviz.revolution.build_revolution_mesh` for formula text.

    ``offset`` only takes part in the key for the offset axis, so changing
    it does not rebuild the other two solids.
    """
    mode = AxisMode.parse(axis_mode)
    offset = float(offset) if mode is AxisMode.OFFSET else 0.0
    return _revolution_mesh(text, variable, _bounds_key(bounds), mode,
                            axial_segments, angular_slices, offset)


@lru_cache(maxsize=_MAXSIZE)
def _integral(text: str, variable: str, bounds: BoundsKey, steps: int) -> IntegrationResult:
    return integrate_report(_compiled(text, variable), bounds, steps)


def cached_integral(text: str, variable: str, bounds, steps: int) -> IntegrationResult:
    """Memoized :func:`calcviz.integrate.integrate_report` for formula text."""
    return _integral(text, variable, _bounds_key(bounds), steps)


_CACHED = (cached_compile, _sample, _riemann, _revolution_mesh, _integral)


def cache_info() -> dict:
    """Hit/miss statistics per wrapped function."""
    return {fn.__name__.lstrip("_"): fn.cache_info() for fn in _CACHED}


def clear_cache() -> None:
    """Drop all memoized results."""
    for fn in _CACHED:
        fn.cache_clear()
    logger.debug("builder caches cleared")
