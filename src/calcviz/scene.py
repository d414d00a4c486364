"""One-shot recomputation of everything a view mode draws.

Each ``*_scene`` function takes formula text plus the current parameters,
fills unspecified parameters from :class:`calcviz.config.Settings`, and
returns an immutable bundle of geometry and scalar results.  A formula that
does not compile produces a scene with ``error`` set and no geometry, so a
view can keep drawing its axes and show the diagnostic.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from calcviz import cache
from calcviz.area import Polygon, RectangleDescriptor, build_area, riemann_total
from calcviz.config import Settings, load_settings
from calcviz.expr import ParseError
from calcviz.integrate import IntegrationResult
from calcviz.mesh import Mesh
from calcviz.physics import (
    PhysicsFrame,
    TankShape,
    distance_area,
    height_curve,
    physics_frame,
)
from calcviz.revolution import AxisMode, CrossSection, cross_section, revolution_volume
from calcviz.sampling import Bounds, SampledCurve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AreaScene:
    function: str
    bounds: Bounds
    error: Optional[ParseError] = None
    curve: Optional[SampledCurve] = None
    area: Optional[Polygon] = None
    rectangles: Tuple[RectangleDescriptor, ...] = ()
    riemann_total: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class VolumeScene:
    function: str
    bounds: Bounds
    axis: AxisMode
    offset: float
    error: Optional[ParseError] = None
    curve: Optional[SampledCurve] = None
    mesh: Optional[Mesh] = None
    cross_section: Optional[CrossSection] = None
    volume: Optional[IntegrationResult] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def method(self) -> str:
        return self.axis.method


@dataclass(frozen=True)
class PhysicsScene:
    velocity_function: str
    flow_function: str
    bounds: Bounds
    shape: TankShape
    error: Optional[ParseError] = None
    velocity_curve: Optional[SampledCurve] = None
    distance_area: Optional[Polygon] = None
    flow_curve: Optional[SampledCurve] = None
    height_curves: Dict[TankShape, SampledCurve] = field(default_factory=dict)
    frame: Optional[PhysicsFrame] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _compile(text: str, variable: str):
    expr = cache.cached_compile(text, variable)
    if isinstance(expr, ParseError):
        logger.info("formula %r rejected: %s", text, expr.diagnostic.message)
    return expr


def area_scene(function: Optional[str] = None, bounds=None, partitions: Optional[int] = None,
               settings: Optional[Settings] = None) -> AreaScene:
    """Curve, area polygon and Riemann rectangles for the area view."""
    cfg = (settings or load_settings()).area
    function = cfg.function if function is None else function
    bounds = Bounds.of(cfg.bounds if bounds is None else bounds)
    partitions = cfg.partitions if partitions is None else partitions

    expr = _compile(function, "x")
    if isinstance(expr, ParseError):
        return AreaScene(function, bounds, error=expr)

    curve = cache.cached_sample(function, "x", bounds, cfg.curve_segments)
    rects = cache.cached_riemann(function, "x", bounds, partitions, cfg.riemann_margin)
    return AreaScene(
        function=function,
        bounds=bounds,
        curve=curve,
        area=build_area(curve),
        rectangles=rects,
        riemann_total=riemann_total(rects),
    )


def volume_scene(function: Optional[str] = None, bounds=None, axis_mode=None,
                 offset: Optional[float] = None, position: Optional[float] = None,
                 settings: Optional[Settings] = None) -> VolumeScene:
    """Profile curve, solid mesh, cross section and volume for the volume view.

    ``position`` places the cross section; it defaults to the middle of
    ``bounds`` and is clamped into it.
    """
    cfg = (settings or load_settings()).volume
    function = cfg.function if function is None else function
    bounds = Bounds.of(cfg.bounds if bounds is None else bounds)
    mode = AxisMode.parse(cfg.axis if axis_mode is None else axis_mode)
    offset = float(cfg.axis_offset if offset is None else offset)

    expr = _compile(function, "x")
    if isinstance(expr, ParseError):
        return VolumeScene(function, bounds, mode, offset, error=expr)

    if position is None:
        position = (bounds.min + bounds.max) / 2.0
    position = bounds.clamp(position)

    return VolumeScene(
        function=function,
        bounds=bounds,
        axis=mode,
        offset=offset,
        curve=cache.cached_sample(function, "x", bounds, cfg.axial_segments),
        mesh=cache.cached_revolution_mesh(function, "x", bounds, mode, cfg.axial_segments,
                                          cfg.angular_slices, offset),
        cross_section=cross_section(expr, position, mode, offset, cfg.cross_section_slices),
        volume=revolution_volume(expr, bounds, mode, offset, cfg.volume_steps),
    )


def physics_scene(velocity: Optional[str] = None, flow_rate: Optional[str] = None,
                  bounds=None, current_time: Optional[float] = None, shape=TankShape.RECTANGULAR,
                  settings: Optional[Settings] = None) -> PhysicsScene:
    """Motion and tank-filling results at ``current_time``.

    Both formulas use the variable ``t``.  ``current_time`` defaults to the
    start of ``bounds``.
    """
    cfg = (settings or load_settings()).physics
    velocity = cfg.velocity if velocity is None else velocity
    flow_rate = cfg.flow_rate if flow_rate is None else flow_rate
    bounds = Bounds.of(cfg.bounds if bounds is None else bounds)
    shape = TankShape.parse(shape)
    current_time = bounds.min if current_time is None else current_time

    compiled = []
    for text in (velocity, flow_rate):
        expr = _compile(text, "t")
        if isinstance(expr, ParseError):
            return PhysicsScene(velocity, flow_rate, bounds, shape, error=expr)
        compiled.append(expr)
    v_expr, q_expr = compiled

    heights = {
        s: height_curve(q_expr, bounds, s, cfg.height_samples, cfg.cumulative_inner_steps,
                        cfg.tank_max_volume, cfg.tank_height)
        for s in TankShape
    }
    return PhysicsScene(
        velocity_function=velocity,
        flow_function=flow_rate,
        bounds=bounds,
        shape=shape,
        velocity_curve=cache.cached_sample(velocity, "t", bounds, cfg.integration_steps),
        distance_area=distance_area(v_expr, bounds, current_time, cfg.integration_steps),
        flow_curve=cache.cached_sample(flow_rate, "t", bounds, cfg.integration_steps),
        height_curves=heights,
        frame=physics_frame(v_expr, q_expr, bounds, current_time, shape,
                            cfg.integration_steps, cfg.tank_max_volume, cfg.tank_height),
    )
