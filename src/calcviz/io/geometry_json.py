"""Plain-JSON serialization of builder outputs for a browser view layer.

Every ``dump_*`` function returns a dict of lists, floats and strings;
:func:`to_json` wraps any supported object (or scene) in a versioned
document and renders it with :mod:`json`.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional

from calcviz.area import Polygon, RectangleDescriptor
from calcviz.expr import ExpressionError
from calcviz.integrate import IntegrationResult
from calcviz.mesh import Mesh
from calcviz.physics import PhysicsFrame, WaterBody
from calcviz.revolution import CrossSection
from calcviz.sampling import SampledCurve
from calcviz.scene import AreaScene, PhysicsScene, VolumeScene

SCHEMA_ID = "calcviz-geometry-json-v1"


def _float_vec(vec: Iterable[float]) -> List[float]:
    return [float(c) for c in vec]


def _optional(value, dump) -> Optional[Dict[str, Any]]:
    return None if value is None else dump(value)


def dump_error(error: ExpressionError) -> Dict[str, Any]:
    doc = error.diagnostic.to_json()
    doc["type"] = "error"
    return doc


def dump_curve(curve: SampledCurve) -> Dict[str, Any]:
    return {
        "type": "curve",
        "bounds": [curve.bounds.min, curve.bounds.max],
        "points": [[p.t, p.value] for p in curve],
        "failures": list(curve.failures),
    }


def dump_polygon(polygon: Polygon) -> Dict[str, Any]:
    return {
        "type": "polygon",
        "points": [_float_vec(p) for p in polygon],
        "failures": list(polygon.failures),
    }


def dump_rectangles(rects: Iterable[RectangleDescriptor]) -> Dict[str, Any]:
    return {
        "type": "rectangles",
        "rectangles": [
            {
                "center": _float_vec(r.center),
                "width": r.width,
                "displayWidth": r.display_width,
                "height": r.height,
                "failed": r.failed,
            }
            for r in rects
        ],
    }


def dump_mesh(mesh: Mesh) -> Dict[str, Any]:
    """Flat position/normal/index buffers, ready for an indexed draw call."""
    doc: Dict[str, Any] = {
        "type": "mesh",
        "positions": mesh.flat_positions(),
        "normals": mesh.normals.ravel().tolist(),
        "indices": mesh.flat_indices(),
        "failures": list(mesh.failures),
        "triangulation": {
            "winding": "ccw",
            "topology": "triangle",
        },
    }
    if mesh.vertex_count:
        lo, hi = mesh.bounding_box()
        doc["boundingBox"] = [*lo, *hi]
    return doc


def dump_cross_section(section: CrossSection) -> Dict[str, Any]:
    return {
        "type": "crossSection",
        "center": _float_vec(section.center),
        "normal": _float_vec(section.normal),
        "radius": section.radius,
        "area": section.area,
        "ring": [_float_vec(p) for p in section.ring],
        "ok": section.ok,
    }


def dump_integration(result: IntegrationResult) -> Dict[str, Any]:
    return {
        "value": result.value,
        "steps": result.steps,
        "failures": list(result.failures),
    }


def dump_water(body: WaterBody) -> Dict[str, Any]:
    return {
        "shape": body.shape.value,
        "width": body.width,
        "depth": body.depth,
        "height": body.height,
        "centerY": body.center_y,
    }


def dump_frame(frame: PhysicsFrame) -> Dict[str, Any]:
    return {
        "time": frame.time,
        "velocity": frame.velocity,
        "distance": dump_integration(frame.distance),
        "volume": dump_integration(frame.volume),
        "ratio": frame.ratio,
        "water": dump_water(frame.water),
    }


def dump_scene(scene) -> Dict[str, Any]:
    """Serialize an area, volume or physics scene."""
    error = _optional(scene.error, dump_error)
    if isinstance(scene, AreaScene):
        return {
            "type": "areaScene",
            "function": scene.function,
            "bounds": list(scene.bounds),
            "error": error,
            "curve": _optional(scene.curve, dump_curve),
            "area": _optional(scene.area, dump_polygon),
            "rectangles": dump_rectangles(scene.rectangles)["rectangles"],
            "riemannTotal": scene.riemann_total,
        }
    if isinstance(scene, VolumeScene):
        return {
            "type": "volumeScene",
            "function": scene.function,
            "bounds": list(scene.bounds),
            "axis": scene.axis.value,
            "offset": scene.offset,
            "method": scene.method,
            "error": error,
            "curve": _optional(scene.curve, dump_curve),
            "mesh": _optional(scene.mesh, dump_mesh),
            "crossSection": _optional(scene.cross_section, dump_cross_section),
            "volume": _optional(scene.volume, dump_integration),
        }
    if isinstance(scene, PhysicsScene):
        return {
            "type": "physicsScene",
            "velocityFunction": scene.velocity_function,
            "flowFunction": scene.flow_function,
            "bounds": list(scene.bounds),
            "shape": scene.shape.value,
            "error": error,
            "velocityCurve": _optional(scene.velocity_curve, dump_curve),
            "distanceArea": _optional(scene.distance_area, dump_polygon),
            "flowCurve": _optional(scene.flow_curve, dump_curve),
            "heightCurves": {s.value: dump_curve(c) for s, c in scene.height_curves.items()},
            "frame": _optional(scene.frame, dump_frame),
        }
    raise ValueError(f"unsupported scene type {type(scene).__name__}")


_DUMPERS = (
    (SampledCurve, dump_curve),
    (Polygon, dump_polygon),
    (Mesh, dump_mesh),
    (CrossSection, dump_cross_section),
    (IntegrationResult, dump_integration),
    (PhysicsFrame, dump_frame),
    (ExpressionError, dump_error),
    ((AreaScene, VolumeScene, PhysicsScene), dump_scene),
)


def dump(obj) -> Dict[str, Any]:
    """Serialize any supported builder output."""
    if isinstance(obj, tuple) and all(isinstance(r, RectangleDescriptor) for r in obj):
        return dump_rectangles(obj)
    for kind, dumper in _DUMPERS:
        if isinstance(obj, kind):
            return dumper(obj)
    raise ValueError(f"unsupported entity type for serialization: {type(obj).__name__}")


def geometry_to_json(entities: Iterable[Any], *,
                     generator: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Wrap serialized entities in a versioned document."""
    doc: Dict[str, Any] = {
        "schema": SCHEMA_ID,
        "entities": [dump(e) for e in entities],
    }
    if generator:
        doc["generator"] = generator
    return doc


def to_json(obj, *, indent: Optional[int] = None) -> str:
    """Render one object as a geometry JSON document string."""
    return json.dumps(geometry_to_json([obj]), indent=indent)


__all__ = [
    "SCHEMA_ID",
    "dump",
    "dump_curve",
    "dump_polygon",
    "dump_rectangles",
    "dump_mesh",
    "dump_cross_section",
    "dump_integration",
    "dump_water",
    "dump_frame",
    "dump_error",
    "dump_scene",
    "geometry_to_json",
    "to_json",
]
