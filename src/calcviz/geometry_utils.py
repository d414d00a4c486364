"""Triangle helpers shared by mesh views and the STL writer."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

Vec3 = Tuple[float, float, float]

# cross-product length below which a face counts as collapsed
AREA_EPSILON = 1e-12


@dataclass(frozen=True)
class Triangle:
    """One STL facet: unit normal plus three corners."""

    normal: Vec3
    v0: Vec3
    v1: Vec3
    v2: Vec3


def to_vec3(values: Sequence[float]) -> Vec3:
    """First three components of ``values`` as plain floats (numpy rows included)."""

    if len(values) < 3:
        raise ValueError("value must have at least three components")
    return float(values[0]), float(values[1]), float(values[2])


def _face_cross(v0: Vec3, v1: Vec3, v2: Vec3) -> Vec3:
    ax, ay, az = v1[0] - v0[0], v1[1] - v0[1], v1[2] - v0[2]
    bx, by, bz = v2[0] - v0[0], v2[1] - v0[1], v2[2] - v0[2]
    return ay * bz - az * by, az * bx - ax * bz, ax * by - ay * bx


def triangle_normal(v0: Vec3, v1: Vec3, v2: Vec3) -> Optional[Vec3]:
    """Unit normal following the right-hand rule, or ``None`` for a collapsed face."""

    n = _face_cross(v0, v1, v2)
    length = math.sqrt(n[0] * n[0] + n[1] * n[1] + n[2] * n[2])
    if length <= AREA_EPSILON:
        return None
    return n[0] / length, n[1] / length, n[2] / length


def triangles_from_mesh(view: Iterable[Tuple[Vec3, Vec3, Vec3, Vec3]]) -> Iterable[Triangle]:
    """Wrap ``mesh_view`` tuples as :class:`Triangle` records."""

    for normal, v0, v1, v2 in view:
        yield Triangle(normal, v0, v1, v2)


__all__ = [
    "AREA_EPSILON",
    "Triangle",
    "Vec3",
    "to_vec3",
    "triangle_normal",
    "triangles_from_mesh",
]
