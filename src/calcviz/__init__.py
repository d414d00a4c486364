# -*- coding: utf-8 -*-
"""Geometry and numeric results for calculus visualizations.

Formulas in one variable are compiled once, then sampled, closed into area
polygons, split into Riemann rectangles, swept into solids of revolution or
integrated over time.
"""
from importlib.metadata import PackageNotFoundError, version

from calcviz.area import Polygon, RectangleDescriptor, build_area, build_riemann
from calcviz.expr import (
    CompiledExpression,
    Evaluation,
    EvaluationError,
    ParseError,
    compile_expression,
    evaluate,
)
from calcviz.integrate import IntegrationResult, integrate, integrate_report
from calcviz.mesh import Mesh
from calcviz.revolution import AxisMode, build_revolution_mesh
from calcviz.sampling import Bounds, SampledCurve, SampledPoint, sample

try:
    __version__ = version("calcviz")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

__all__ = [
    "AxisMode",
    "Bounds",
    "CompiledExpression",
    "Evaluation",
    "EvaluationError",
    "IntegrationResult",
    "Mesh",
    "ParseError",
    "Polygon",
    "RectangleDescriptor",
    "SampledCurve",
    "SampledPoint",
    "build_area",
    "build_revolution_mesh",
    "build_riemann",
    "compile_expression",
    "evaluate",
    "integrate",
    "integrate_report",
    "sample",
]
