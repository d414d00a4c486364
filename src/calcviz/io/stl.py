"""STL export for revolution meshes."""

from __future__ import annotations

import contextlib
import logging
import struct
from typing import Iterator, List

from calcviz.geometry_utils import Triangle, triangles_from_mesh
from calcviz.mesh import Mesh, mesh_view

logger = logging.getLogger(__name__)

_HEADER_SIZE = 80
_COUNT = struct.Struct('<I')
_FACET = struct.Struct('<12fH')


def write_stl(mesh: Mesh, path_or_file, *, binary: bool = True, name: str = 'calcviz') -> int:
    """Write ``mesh`` to STL and return the number of facets written.

    ``path_or_file`` is a filesystem path or an open stream (bytes for
    binary output, text for ASCII).  Zero-area triangles from collapsed
    rings have no normal and are left out.
    """

    facets = list(triangles_from_mesh(mesh_view(mesh)))
    with _output(path_or_file, 'wb' if binary else 'w') as stream:
        if binary:
            stream.write(_binary_header(name, len(facets)))
            for tri in facets:
                stream.write(_FACET.pack(*tri.normal, *tri.v0, *tri.v1, *tri.v2, 0))
        else:
            stream.writelines(_ascii_lines(facets, name))

    skipped = mesh.triangle_count - len(facets)
    if skipped:
        logger.debug("stl export skipped %d degenerate triangles", skipped)
    logger.debug("wrote %d stl facets (%s)", len(facets), 'binary' if binary else 'ascii')
    return len(facets)


@contextlib.contextmanager
def _output(path_or_file, mode: str) -> Iterator:
    if hasattr(path_or_file, 'write'):
        yield path_or_file
        return
    encoding = None if 'b' in mode else 'ascii'
    with open(path_or_file, mode, encoding=encoding) as stream:
        yield stream


def _binary_header(name: str, count: int) -> bytes:
    label = name[:_HEADER_SIZE].encode('ascii', errors='replace')
    return label.ljust(_HEADER_SIZE, b' ') + _COUNT.pack(count)


def _fmt(vec) -> str:
    return ' '.join(f"{c:.6e}" for c in vec)


def _ascii_lines(facets: List[Triangle], name: str) -> Iterator[str]:
    yield f"solid {name}\n"
    for tri in facets:
        yield f"  facet normal {_fmt(tri.normal)}\n"
        yield "    outer loop\n"
        for corner in (tri.v0, tri.v1, tri.v2):
            yield f"      vertex {_fmt(corner)}\n"
        yield "    endloop\n"
        yield "  endfacet\n"
    yield f"endsolid {name}\n"


def facet_count(data: bytes) -> int:
    """Facet count stored in a binary STL header."""
    if len(data) < _HEADER_SIZE + _COUNT.size:
        raise ValueError("Invalid binary STL: file too small")
    return _COUNT.unpack_from(data, _HEADER_SIZE)[0]


__all__ = ['write_stl', 'facet_count']
