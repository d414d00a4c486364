"""
Tests for the indexed mesh value type.
"""

import numpy as np
import pytest
from calcviz.mesh import Mesh, compute_vertex_normals, index_problems, mesh_view


def _quad():
    vertices = [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)]
    triangles = [(0, 1, 2), (0, 2, 3)]
    return Mesh(vertices, triangles)


class TestMesh:
    """Buffer normalization and validation."""

    def test_shapes(self):
        mesh = _quad()
        assert mesh.vertices.shape == (4, 3)
        assert mesh.triangles.shape == (2, 3)
        assert mesh.normals.shape == (4, 3)
        assert mesh.triangles.dtype == np.int64

    def test_normals_follow_winding(self):
        mesh = _quad()
        np.testing.assert_allclose(mesh.normals, [[0, 0, 1]] * 4)

    def test_out_of_range_index(self):
        with pytest.raises(ValueError):
            Mesh([(0, 0, 0), (1, 0, 0), (0, 1, 0)], [(0, 1, 3)])

    def test_negative_index(self):
        with pytest.raises(ValueError):
            Mesh([(0, 0, 0), (1, 0, 0), (0, 1, 0)], [(0, 1, -1)])

    def test_explicit_normals_must_match(self):
        with pytest.raises(ValueError):
            Mesh([(0, 0, 0), (1, 0, 0), (0, 1, 0)], [(0, 1, 2)], normals=[(0, 0, 1)])

    def test_flat_buffers(self):
        mesh = _quad()
        assert mesh.flat_positions()[:6] == [0.0, 0.0, 0.0, 1.0, 0.0, 0.0]
        assert mesh.flat_indices() == [0, 1, 2, 0, 2, 3]

    def test_bounding_box(self):
        lo, hi = _quad().bounding_box()
        assert lo == (0.0, 0.0, 0.0)
        assert hi == (1.0, 1.0, 0.0)

    def test_empty_mesh(self):
        mesh = Mesh([], [])
        assert mesh.vertex_count == 0
        assert mesh.triangle_count == 0
        with pytest.raises(ValueError):
            mesh.bounding_box()

    def test_failures_tuple(self):
        mesh = Mesh([(0, 0, 0)], [], failures=[1.0, 2.0])
        assert mesh.failures == (1.0, 2.0)
        assert not mesh.ok


class TestVertexNormals:
    """Area-weighted accumulation."""

    def test_isolated_vertex_gets_zero(self):
        vertices = np.array([(0, 0, 0), (1, 0, 0), (0, 1, 0), (5, 5, 5)], dtype=float)
        normals = compute_vertex_normals(vertices, np.array([(0, 1, 2)]))
        np.testing.assert_array_equal(normals[3], [0, 0, 0])

    def test_weighted_by_area(self):
        """A large face dominates a small one sharing the vertex."""
        vertices = np.array([
            (0, 0, 0), (10, 0, 0), (0, 10, 0),   # big face, +z
            (0, 0, 0.1), (0, 0.1, 0),            # small face, +x
        ], dtype=float)
        triangles = np.array([(0, 1, 2), (0, 4, 3)])
        normals = compute_vertex_normals(vertices, triangles)
        assert normals[0][2] > 0.99


class TestMeshView:
    """Triangle iteration for exporters."""

    def test_yields_unit_normals(self):
        tris = list(mesh_view(_quad()))
        assert len(tris) == 2
        normal, v0, v1, v2 = tris[0]
        assert normal == pytest.approx((0.0, 0.0, 1.0))
        assert v0 == (0.0, 0.0, 0.0)

    def test_skips_degenerate(self):
        mesh = Mesh([(0, 0, 0), (0, 0, 0), (1, 1, 1), (1, 0, 0)], [(0, 1, 2), (0, 3, 2)])
        assert len(list(mesh_view(mesh))) == 1

    def test_rejects_other_types(self):
        with pytest.raises(ValueError):
            list(mesh_view([(0, 0, 0)]))


def test_index_problems():
    assert index_problems([(0, 1, 2)], 3) == []
    problems = index_problems([(0, 1, 5), (0, 1)], 3)
    assert problems == ["triangle 0 index 5 out of range", "triangle 1 has 2 indices"]
