"""Indexed triangle meshes and their triangulated views."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Sequence, Tuple

import numpy as np

from calcviz.geometry_utils import Vec3, to_vec3, triangle_normal

TriTuple = Tuple[Vec3, Vec3, Vec3, Vec3]


def _frozen(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


def compute_vertex_normals(vertices: np.ndarray, triangles: np.ndarray) -> np.ndarray:
    """Area-weighted vertex normals.

    Each face adds its unnormalized cross product (twice its area along the
    face normal) to its three corners; the sums are then normalized.
    Vertices touched only by degenerate faces get a zero normal.
    """
    normals = np.zeros_like(vertices, dtype=float)
    if len(triangles) == 0:
        return normals

    v0 = vertices[triangles[:, 0]]
    v1 = vertices[triangles[:, 1]]
    v2 = vertices[triangles[:, 2]]
    face = np.cross(v1 - v0, v2 - v0)
    for corner in range(3):
        np.add.at(normals, triangles[:, corner], face)

    lengths = np.linalg.norm(normals, axis=1)
    nonzero = lengths > 1e-12
    normals[nonzero] /= lengths[nonzero][:, None]
    return normals


@dataclass(frozen=True, eq=False)
class Mesh:
    """Vertex buffer, triangle index buffer and derived vertex normals.

    ``vertices`` is an ``(n, 3)`` float array, ``triangles`` an ``(m, 3)``
    integer array of indices into it.  All arrays are read-only.
    ``failures`` lists the abscissae whose radius evaluation failed.
    """

    vertices: np.ndarray
    triangles: np.ndarray
    normals: np.ndarray = field(default=None)
    failures: Tuple[float, ...] = ()

    def __post_init__(self) -> None:
        vertices = np.array(self.vertices, dtype=float).reshape(-1, 3)
        triangles = np.array(self.triangles, dtype=np.int64).reshape(-1, 3)
        if len(triangles) and (triangles.min() < 0 or triangles.max() >= len(vertices)):
            raise ValueError("triangle index out of range for vertex buffer")
        if self.normals is None:
            normals = compute_vertex_normals(vertices, triangles)
        else:
            normals = np.array(self.normals, dtype=float).reshape(-1, 3)
            if normals.shape != vertices.shape:
                raise ValueError("normal buffer must match vertex buffer")
        object.__setattr__(self, "vertices", _frozen(vertices))
        object.__setattr__(self, "triangles", _frozen(triangles))
        object.__setattr__(self, "normals", _frozen(normals))
        object.__setattr__(self, "failures", tuple(self.failures))

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles)

    @property
    def ok(self) -> bool:
        return not self.failures

    def bounding_box(self) -> Tuple[Vec3, Vec3]:
        """Return ``(min_corner, max_corner)``."""
        if self.vertex_count == 0:
            raise ValueError("empty mesh has no bounding box")
        lo = self.vertices.min(axis=0)
        hi = self.vertices.max(axis=0)
        return to_vec3(lo), to_vec3(hi)

    def flat_positions(self) -> List[float]:
        """Vertex buffer flattened to ``[x0, y0, z0, x1, ...]``."""
        return self.vertices.ravel().tolist()

    def flat_indices(self) -> List[int]:
        """Index buffer flattened to ``[a0, b0, c0, a1, ...]``."""
        return self.triangles.ravel().tolist()


def mesh_view(mesh: Mesh) -> Iterator[TriTuple]:
    """Yield triangles of ``mesh`` as ``(normal, v0, v1, v2)``.

    Normals are unit face normals. Faces with degenerate geometry (zero
    area, e.g. around a collapsed ring) are skipped silently.
    """

    if not isinstance(mesh, Mesh):
        raise ValueError("mesh_view expects a Mesh")

    verts = mesh.vertices
    for idx0, idx1, idx2 in mesh.triangles:
        v0 = to_vec3(verts[idx0])
        v1 = to_vec3(verts[idx1])
        v2 = to_vec3(verts[idx2])

        calc_normal = triangle_normal(v0, v1, v2)
        if calc_normal is None:
            continue

        yield calc_normal, v0, v1, v2


def index_problems(triangles: Sequence[Sequence[int]], vertex_count: int) -> List[str]:
    """Describe index-buffer entries that do not address a vertex."""
    problems = []
    for n, tri in enumerate(triangles):
        if len(tri) != 3:
            problems.append(f"triangle {n} has {len(tri)} indices")
            continue
        for idx in tri:
            if not 0 <= int(idx) < vertex_count:
                problems.append(f"triangle {n} index {int(idx)} out of range")
    return problems


__all__ = [
    "Mesh",
    "TriTuple",
    "compute_vertex_normals",
    "mesh_view",
    "index_problems",
]
