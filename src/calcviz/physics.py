"""Time-integrated physical quantities for the physics view.

Velocity and flow-rate formulas use the free variable ``t``.  Distance is the
integral of velocity, filled volume the integral of flow rate; the water
height in the two demo tanks is derived from the filled volume.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Union

from calcviz.area import Polygon, build_area
from calcviz.expr import CompiledExpression, evaluate
from calcviz.integrate import IntegrationResult, cumulative_curve, integrate_report
from calcviz.sampling import Bounds, SampledCurve, SampledPoint, require_count, require_expression, sample

logger = logging.getLogger(__name__)

DEFAULT_MAX_VOLUME = 10.0
DEFAULT_TANK_HEIGHT = 5.0
CONICAL_EXPONENT = 0.7


class TankShape(Enum):
    RECTANGULAR = "rectangular"
    CONICAL = "conical"

    @classmethod
    def parse(cls, value: Union["TankShape", str]) -> "TankShape":
        if isinstance(value, TankShape):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"unknown tank shape {value!r}; expected one of {[s.value for s in cls]}"
            ) from None


def clamp_time(bounds, current_time: float) -> float:
    """Clamp ``current_time`` into ``bounds``."""
    return Bounds.of(bounds).clamp(current_time)


def velocity_at(velocity: CompiledExpression, bounds, current_time: float) -> float:
    """Velocity at the clamped current time (0 if evaluation fails)."""
    velocity = require_expression(velocity)
    return evaluate(velocity, clamp_time(bounds, current_time)).value


def distance_at(velocity: CompiledExpression, bounds, current_time: float,
                steps: int = 100) -> IntegrationResult:
    """Distance travelled from ``bounds.min`` up to the clamped current time."""
    bounds = Bounds.of(bounds)
    t_now = bounds.clamp(current_time)
    return integrate_report(velocity, (bounds.min, t_now), steps)


def distance_area(velocity: CompiledExpression, bounds, current_time: float,
                  segments: int = 100) -> Polygon:
    """Area polygon under the velocity curve from the start to the current time."""
    bounds = Bounds.of(bounds)
    t_now = bounds.clamp(current_time)
    return build_area(sample(velocity, (bounds.min, t_now), segments))


def filled_volume(flow_rate: CompiledExpression, bounds, current_time: float,
                  steps: int = 100) -> IntegrationResult:
    """Volume delivered by ``flow_rate`` from the start to the current time."""
    bounds = Bounds.of(bounds)
    return integrate_report(flow_rate, (bounds.min, bounds.clamp(current_time)), steps)


def fill_ratio(volume: float, max_volume: float = DEFAULT_MAX_VOLUME) -> float:
    """Fraction of the tank that is full, clamped to ``[0, 1]``."""
    if max_volume <= 0:
        raise ValueError("max_volume must be positive")
    return min(max(volume / max_volume, 0.0), 1.0)


def height_for_volume(volume: float, shape, max_volume: float = DEFAULT_MAX_VOLUME,
                      tank_height: float = DEFAULT_TANK_HEIGHT) -> float:
    """Water height for a filled volume.

    Rectangular tanks rise linearly.  The conical tank narrows towards the
    top, so height grows like ``(V / Vmax) ** 0.7``.  Negative volumes (a
    draining flow) give height 0 in the conical tank, where the power is
    undefined, and a negative height in the rectangular one.
    """
    shape = TankShape.parse(shape)
    if max_volume <= 0:
        raise ValueError("max_volume must be positive")
    ratio = volume / max_volume
    if shape is TankShape.RECTANGULAR:
        return ratio * tank_height
    if ratio <= 0.0:
        return 0.0
    return math.pow(ratio, CONICAL_EXPONENT) * tank_height


def height_curve(flow_rate: CompiledExpression, bounds, shape, samples: int = 100,
                 inner_steps: int = 20, max_volume: float = DEFAULT_MAX_VOLUME,
                 tank_height: float = DEFAULT_TANK_HEIGHT) -> SampledCurve:
    """Water height against time for one tank shape."""
    shape = TankShape.parse(shape)
    volumes = cumulative_curve(flow_rate, bounds, samples, inner_steps)
    points = tuple(
        SampledPoint(p.t, height_for_volume(p.value, shape, max_volume, tank_height), p.ok)
        for p in volumes
    )
    return SampledCurve(points, volumes.bounds)


@dataclass(frozen=True)
class WaterBody:
    """Dimensions of the water solid drawn inside a tank.

    For the rectangular tank ``width``/``depth`` are box sides; for the
    conical tank they are the top and bottom radii of the frustum.
    ``center_y`` places the body so it rests on the tank floor.
    """

    shape: TankShape
    width: float
    depth: float
    height: float
    center_y: float


def water_body(shape, ratio: float, tank_height: float = DEFAULT_TANK_HEIGHT,
               tank_width: float = 3.0, tank_depth: float = 1.0,
               tank_radius: float = 2.0) -> WaterBody:
    """Water solid for a tank filled to ``ratio`` (clamped to ``[0, 1]``)."""
    shape = TankShape.parse(shape)
    ratio = min(max(float(ratio), 0.0), 1.0)
    height = tank_height * ratio
    center_y = -tank_height / 2.0 + height / 2.0
    if shape is TankShape.RECTANGULAR:
        return WaterBody(shape, tank_width - 0.1, tank_depth - 0.1, height, center_y)
    top = tank_radius * 0.5 * (0.9 - 0.1 * ratio)
    bottom = tank_radius * 0.9
    return WaterBody(shape, top, bottom, height, center_y)


@dataclass(frozen=True)
class PhysicsFrame:
    """Everything the physics view needs for one animation frame."""

    time: float
    velocity: float
    distance: IntegrationResult
    volume: IntegrationResult
    ratio: float
    water: WaterBody


def physics_frame(velocity: CompiledExpression, flow_rate: CompiledExpression, bounds,
                  current_time: float, shape, steps: int = 100,
                  max_volume: float = DEFAULT_MAX_VOLUME,
                  tank_height: float = DEFAULT_TANK_HEIGHT) -> PhysicsFrame:
    """Recompute the scalar quantities for ``current_time``."""
    bounds = Bounds.of(bounds)
    steps = require_count("steps", steps, 1)
    t_now = bounds.clamp(current_time)
    distance = distance_at(velocity, bounds, t_now, steps)
    volume = filled_volume(flow_rate, bounds, t_now, steps)
    ratio = fill_ratio(volume.value, max_volume)
    frame = PhysicsFrame(
        time=t_now,
        velocity=velocity_at(velocity, bounds, t_now),
        distance=distance,
        volume=volume,
        ratio=ratio,
        water=water_body(shape, ratio, tank_height),
    )
    logger.debug("physics frame t=%.3f distance=%.4f volume=%.4f", t_now,
                 distance.value, volume.value)
    return frame
