import io
import struct

import pytest

from calcviz.expr import compile_expression
from calcviz.io.stl import facet_count, write_stl
from calcviz.mesh import Mesh
from calcviz.revolution import build_revolution_mesh


def _make_mesh():
    return Mesh([(0, 0, 0), (1, 0, 0), (0, 1, 0)], [(0, 1, 2)])


def test_write_stl_binary(tmp_path):
    path = tmp_path / 'tri.stl'
    written = write_stl(_make_mesh(), path, binary=True, name='test')

    data = path.read_bytes()
    assert written == 1
    assert len(data) == 80 + 4 + 50  # header + count + one triangle
    assert data[0:4] == b'test'
    assert facet_count(data) == 1


def test_write_stl_binary_normal(tmp_path):
    path = tmp_path / 'tri.stl'
    write_stl(_make_mesh(), path)
    values = struct.unpack('<12fH', path.read_bytes()[84:134])
    assert values[:3] == pytest.approx((0.0, 0.0, 1.0))
    assert values[3:6] == pytest.approx((0.0, 0.0, 0.0))


def test_write_stl_ascii():
    buf = io.StringIO()
    write_stl(_make_mesh(), buf, binary=False, name='ascii_test')

    text = buf.getvalue()
    assert 'solid ascii_test' in text
    assert 'facet normal' in text
    assert text.count('vertex') == 3
    assert text.strip().endswith('endsolid ascii_test')


def test_write_stl_to_stream():
    buf = io.BytesIO()
    write_stl(_make_mesh(), buf)
    assert facet_count(buf.getvalue()) == 1


def test_revolution_solid_export(tmp_path):
    mesh = build_revolution_mesh(compile_expression("0.5*x^2 + 1"), (-5, 5), "y=0", 50, 36)
    path = tmp_path / 'solid.stl'
    written = write_stl(mesh, path)
    assert written == mesh.triangle_count
    assert len(path.read_bytes()) == 84 + 50 * written


def test_collapsed_ring_faces_skipped(tmp_path):
    """Triangles on a zero-radius ring have no area and are not written."""
    mesh = build_revolution_mesh(compile_expression("x"), (0, 1), "y=0", 4, 6)
    written = write_stl(mesh, tmp_path / 'cone.stl')
    assert written == mesh.triangle_count - 6


def test_facet_count_rejects_short_data():
    with pytest.raises(ValueError):
        facet_count(b'solid')
