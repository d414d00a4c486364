"""I/O utilities for calcviz."""

from .stl import write_stl
from .geometry_json import geometry_to_json, to_json

__all__ = ['write_stl', 'geometry_to_json', 'to_json']
