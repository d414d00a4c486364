"""Solids of revolution: procedural mesh, cross sections and volumes.

A sampled curve is swept through a full turn around one of three axes.  Each
axial sample becomes a ring of ``angular_slices + 1`` vertices (the last one
repeats the first angle so texture seams close), and neighbouring rings are
stitched into two triangles per quad.

A sample with zero radius produces a ring whose vertices all coincide rather
than a single pole vertex; the resulting zero-area triangles are kept so the
vertex and index counts stay fixed.

Face normals point away from the axis for the two zero-line modes.  For the
offset axis they point towards +y on both sides of the axis.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Sequence, Tuple, Union

from calcviz.expr import CompiledExpression, Evaluation, evaluate
from calcviz.geometry_utils import Vec3
from calcviz.integrate import IntegrationResult, left_rectangle_sum
from calcviz.mesh import Mesh
from calcviz.sampling import Bounds, require_count, require_expression, sample

logger = logging.getLogger(__name__)

pi2 = 2.0 * math.pi


class AxisMode(Enum):
    """Which line the curve is revolved around.

    ``DEPENDENT`` ("x=0"): the vertical axis.  The independent coordinate
    becomes the height and the function value is the radius.
    ``INDEPENDENT`` ("y=0"): the horizontal axis (disk method).
    ``OFFSET`` ("x=c"): the vertical line at the configured offset.  The
    independent coordinate, measured from the offset, is the radius and the
    function value is the height (shell method).
    """

    DEPENDENT = "x=0"
    INDEPENDENT = "y=0"
    OFFSET = "x=c"

    @classmethod
    def parse(cls, value: Union["AxisMode", str]) -> "AxisMode":
        if isinstance(value, AxisMode):
            return value
        for mode in cls:
            if value in (mode.value, mode.name, mode.name.lower()):
                return mode
        raise ValueError(
            f"unknown axis mode {value!r}; expected one of "
            f"{[m.value for m in cls]}"
        )

    @property
    def method(self) -> str:
        """Name of the volume technique this axis illustrates."""
        return "shell" if self is AxisMode.OFFSET else "disk"


# (t, r, cos, sin, offset) -> xyz
_Placement = Callable[[float, float, float, float, float], Vec3]

_PLACEMENT: dict[AxisMode, _Placement] = {
    AxisMode.DEPENDENT: lambda t, r, c, s, off: (abs(r) * c, t, abs(r) * s),
    AxisMode.INDEPENDENT: lambda t, r, c, s, off: (t, abs(r) * c, abs(r) * s),
    AxisMode.OFFSET: lambda t, r, c, s, off: (off + (t - off) * c, r, (t - off) * s),
}

# DEPENDENT maps (t, r, theta) through a reflection, so its quads are wound
# the other way round to keep face normals pointing away from the axis.
# OFFSET rows left of the axis have a negative shell radius and are flipped
# again per row (see _row_flips) so the whole roof faces +y.
_FLIPPED = {
    AxisMode.DEPENDENT: True,
    AxisMode.INDEPENDENT: False,
    AxisMode.OFFSET: False,
}


def _angle_table(slices: int) -> Tuple[List[float], List[float]]:
    """cos/sin for ``slices + 1`` angles; entries 0 and ``slices`` are exact."""
    cos_t = [1.0]
    sin_t = [0.0]
    for j in range(1, slices):
        angle = pi2 * j / slices
        cos_t.append(math.cos(angle))
        sin_t.append(math.sin(angle))
    cos_t.append(1.0)
    sin_t.append(0.0)
    return cos_t, sin_t


def ring_triangles(axial_segments: int, angular_slices: int,
                   flipped: Union[bool, Sequence[bool]] = False) -> List[Tuple[int, int, int]]:
    """Index triples stitching ``axial_segments + 1`` rings into quads.

    The quad ``(i,j), (i,j+1), (i+1,j+1), (i+1,j)`` becomes two triangles.
    ``flipped`` reverses the winding, either for every row or per row when
    given one flag for each of the ``axial_segments`` rows.
    """
    if isinstance(flipped, bool):
        row_flips = [flipped] * axial_segments
    else:
        row_flips = [bool(f) for f in flipped]
        if len(row_flips) != axial_segments:
            raise ValueError(f"expected {axial_segments} row flags, got {len(row_flips)}")

    stride = angular_slices + 1
    tris = []
    for i in range(axial_segments):
        for j in range(angular_slices):
            a = i * stride + j
            b = i * stride + j + 1
            c = (i + 1) * stride + j + 1
            d = (i + 1) * stride + j
            if row_flips[i]:
                tris.append((a, d, b))
                tris.append((b, d, c))
            else:
                tris.append((a, b, d))
                tris.append((b, c, d))
    return tris


def _row_flips(curve, mode: AxisMode, offset: float) -> List[bool]:
    """Winding flag for each row of quads between consecutive rings."""
    ts = [p.t for p in curve]
    if mode is not AxisMode.OFFSET:
        return [_FLIPPED[mode]] * (len(ts) - 1)
    # the shell radius t - offset changes sign across the axis
    return [(lo + hi) / 2.0 < offset for lo, hi in zip(ts, ts[1:])]


def build_revolution_mesh(expr: CompiledExpression, bounds, axis_mode,
                          axial_segments: int, angular_slices: int,
                          offset: float = 0.0) -> Mesh:
    """Sweep ``expr`` over ``bounds`` through a full turn around ``axis_mode``.

    Returns a mesh with ``(axial_segments + 1) * (angular_slices + 1)``
    vertices and ``axial_segments * angular_slices * 2`` triangles.
    ``offset`` is only used by :attr:`AxisMode.OFFSET`.
    """
    expr = require_expression(expr)
    bounds = Bounds.of(bounds)
    mode = AxisMode.parse(axis_mode)
    axial_segments = require_count("axial_segments", axial_segments, 1)
    angular_slices = require_count("angular_slices", angular_slices, 3)
    offset = float(offset)

    curve = sample(expr, bounds, axial_segments)
    cos_t, sin_t = _angle_table(angular_slices)
    place = _PLACEMENT[mode]

    vertices = []
    for point in curve:
        for j in range(angular_slices + 1):
            vertices.append(place(point.t, point.value, cos_t[j], sin_t[j], offset))

    triangles = ring_triangles(axial_segments, angular_slices, _row_flips(curve, mode, offset))
    mesh = Mesh(vertices, triangles, failures=curve.failures)

    logger.debug("revolution mesh %r about %s: %d vertices, %d triangles, %d failed samples",
                 expr.source, mode.value, mesh.vertex_count, mesh.triangle_count,
                 len(mesh.failures))
    return mesh


@dataclass(frozen=True)
class CrossSection:
    """Circle traced by one curve point during the revolution."""

    center: Vec3
    normal: Vec3
    radius: float
    area: float
    ring: Tuple[Vec3, ...]
    ok: bool = True


def cross_section(expr: CompiledExpression, position: float, axis_mode,
                  offset: float = 0.0, slices: int = 32) -> CrossSection:
    """Cross section of the solid at ``position`` along the independent axis.

    For the two zero-line axes this is the disk of radius ``|f(position)|``
    perpendicular to the axis.  For the offset axis it is the horizontal
    circle of radius ``|position - offset|`` at height ``f(position)``.
    """
    expr = require_expression(expr)
    mode = AxisMode.parse(axis_mode)
    slices = require_count("slices", slices, 3)
    position = float(position)
    offset = float(offset)

    result = evaluate(expr, position)
    r = result.value
    cos_t, sin_t = _angle_table(slices)
    place = _PLACEMENT[mode]
    ring = tuple(place(position, r, cos_t[j], sin_t[j], offset) for j in range(slices + 1))

    if mode is AxisMode.INDEPENDENT:
        center, normal, radius = (position, 0.0, 0.0), (1.0, 0.0, 0.0), abs(r)
    elif mode is AxisMode.DEPENDENT:
        center, normal, radius = (0.0, position, 0.0), (0.0, 1.0, 0.0), abs(r)
    else:
        center, normal, radius = (offset, r, 0.0), (0.0, 1.0, 0.0), abs(position - offset)

    return CrossSection(center, normal, radius, math.pi * radius * radius, ring, result.ok)


def revolution_volume(expr: CompiledExpression, bounds, axis_mode,
                      offset: float = 0.0, steps: int = 1000) -> IntegrationResult:
    """Volume of the solid, by the disk or shell formula for ``axis_mode``.

    Disk (both zero-line axes): ``pi * integral of f(t)^2``.
    Shell (offset axis): ``2*pi * integral of |t - offset| * |f(t)|``.
    """
    expr = require_expression(expr)
    bounds = Bounds.of(bounds)
    mode = AxisMode.parse(axis_mode)
    steps = require_count("steps", steps, 1)
    offset = float(offset)
    if bounds.degenerate:
        return IntegrationResult(0.0, steps)

    if mode is AxisMode.OFFSET:
        def integrand(t: float) -> Evaluation:
            result = evaluate(expr, t)
            return Evaluation(pi2 * abs(t - offset) * abs(result.value), result.error)
    else:
        def integrand(t: float) -> Evaluation:
            result = evaluate(expr, t)
            return Evaluation(math.pi * result.value * result.value, result.error)

    return left_rectangle_sum(integrand, bounds.min, bounds.max, steps)
