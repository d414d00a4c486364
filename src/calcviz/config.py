"""Settings loading with bundled defaults and external override support.

Default resolutions, bounds and formulas live in a bundled YAML file.  Any
number of override files may be layered on top of it; each override only
needs the keys it changes.

Search order (later files override earlier ones):
    1. Bundled ``data/defaults.yaml``
    2. User config file (``~/.config/calcviz/config.yaml``)
    3. Files listed in the ``CALCVIZ_CONFIG`` environment variable
    4. An explicit path passed to :func:`load_settings`

Environment Variables:
    CALCVIZ_CONFIG: Colon-separated (or semicolon on Windows) paths to YAML
                    override files.

Example:
    export CALCVIZ_CONFIG="$HOME/calcviz-classroom.yaml"
"""

from __future__ import annotations

import copy
import logging
import math
import os
import sys
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from calcviz.revolution import AxisMode

__all__ = [
    "CALCVIZ_CONFIG",
    "AreaSettings",
    "VolumeSettings",
    "PhysicsSettings",
    "Settings",
    "load_settings",
    "clear_cache",
]

logger = logging.getLogger(__name__)

# Environment variable name for override files
CALCVIZ_CONFIG = "CALCVIZ_CONFIG"

_BUNDLED_DEFAULTS = Path(__file__).parent / "data" / "defaults.yaml"

# section -> key -> kind
_SCHEMA: Dict[str, Dict[str, str]] = {
    "area": {
        "function": "str",
        "bounds": "bounds",
        "curve_segments": "count",
        "partitions": "count",
        "riemann_margin": "fraction",
    },
    "volume": {
        "function": "str",
        "bounds": "bounds",
        "axis": "axis",
        "axis_offset": "float",
        "rotation_angle": "float",
        "axial_segments": "count",
        "angular_slices": "slices",
        "cross_section_slices": "slices",
        "volume_steps": "count",
    },
    "physics": {
        "velocity": "str",
        "flow_rate": "str",
        "bounds": "bounds",
        "integration_steps": "count",
        "height_samples": "count",
        "cumulative_inner_steps": "count",
        "tank_max_volume": "positive",
        "tank_height": "positive",
    },
}


@dataclass(frozen=True)
class AreaSettings:
    function: str
    bounds: Tuple[float, float]
    curve_segments: int
    partitions: int
    riemann_margin: float


@dataclass(frozen=True)
class VolumeSettings:
    function: str
    bounds: Tuple[float, float]
    axis: AxisMode
    axis_offset: float
    rotation_angle: float
    axial_segments: int
    angular_slices: int
    cross_section_slices: int
    volume_steps: int


@dataclass(frozen=True)
class PhysicsSettings:
    velocity: str
    flow_rate: str
    bounds: Tuple[float, float]
    integration_steps: int
    height_samples: int
    cumulative_inner_steps: int
    tank_max_volume: float
    tank_height: float


@dataclass(frozen=True)
class Settings:
    """All view defaults; ``sources`` lists the files they came from."""

    area: AreaSettings
    volume: VolumeSettings
    physics: PhysicsSettings
    sources: Tuple[str, ...] = ()


def clear_cache() -> None:
    """Clear cached settings.

    Call this after editing an override file or changing ``CALCVIZ_CONFIG``.
    """
    _get_override_files.cache_clear()
    _load_settings_cached.cache_clear()


@lru_cache(maxsize=None)
def _get_override_files() -> Tuple[Path, ...]:
    """Return existing override files, lowest priority first."""
    files: List[Path] = []

    # User config file
    if sys.platform == "win32":
        config_base = Path(os.environ.get("APPDATA", "~")).expanduser()
    else:
        config_base = Path.home() / ".config"

    user_config = config_base / "calcviz" / "config.yaml"
    if user_config.is_file():
        files.append(user_config)

    # Environment variable (highest priority of the implicit sources)
    env_path = os.environ.get(CALCVIZ_CONFIG)
    if env_path:
        sep = ";" if sys.platform == "win32" else ":"
        for p in env_path.split(sep):
            p = p.strip()
            if p:
                path = Path(p).expanduser().resolve()
                if path.is_file():
                    files.append(path)
                else:
                    logger.warning("%s entry not found: %s", CALCVIZ_CONFIG, path)

    return tuple(files)


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load a settings file and check its schema version."""
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid settings format in {path}: expected dict at root")

    schema_version = str(data.pop("schema_version", "1.0"))
    if not schema_version.startswith("1."):
        raise ValueError(
            f"Unsupported schema version '{schema_version}' in {path}. "
            f"Expected version 1.x"
        )

    for section, values in data.items():
        if section not in _SCHEMA:
            raise ValueError(f"Unknown section '{section}' in {path}")
        if not isinstance(values, dict):
            raise ValueError(f"Section '{section}' in {path} must be a mapping")
        for key in values:
            if key not in _SCHEMA[section]:
                raise ValueError(f"Unknown key '{section}.{key}' in {path}")
    return data


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for section, values in override.items():
        merged.setdefault(section, {}).update(values)
    return merged


def _coerce(section: str, key: str, kind: str, value: Any) -> Any:
    where = f"{section}.{key}"
    if kind == "str":
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{where} must be a non-empty string")
        return value
    if kind == "axis":
        return AxisMode.parse(str(value))
    if kind == "bounds":
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            raise ValueError(f"{where} must be a [min, max] pair")
        lo, hi = float(value[0]), float(value[1])
        if not (math.isfinite(lo) and math.isfinite(hi)):
            raise ValueError(f"{where} must be finite")
        if lo > hi:
            raise ValueError(f"{where} must satisfy min <= max")
        return (lo, hi)
    if kind in ("count", "slices"):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{where} must be an integer")
        minimum = 3 if kind == "slices" else 1
        if value < minimum:
            raise ValueError(f"{where} must be >= {minimum}")
        return value
    value = float(value)
    if kind == "positive" and value <= 0:
        raise ValueError(f"{where} must be positive")
    if kind == "fraction" and not 0.0 < value <= 1.0:
        raise ValueError(f"{where} must be in (0, 1]")
    return value


def _build_settings(data: Dict[str, Any], sources: Tuple[str, ...]) -> Settings:
    sections = {}
    for section, keys in _SCHEMA.items():
        values = data.get(section, {})
        missing = [k for k in keys if k not in values]
        if missing:
            raise ValueError(f"Settings missing required keys in '{section}': {missing}")
        sections[section] = {k: _coerce(section, k, kind, values[k]) for k, kind in keys.items()}

    return Settings(
        area=AreaSettings(**sections["area"]),
        volume=VolumeSettings(**sections["volume"]),
        physics=PhysicsSettings(**sections["physics"]),
        sources=sources,
    )


@lru_cache(maxsize=32)
def _load_settings_cached(custom_path_str: Optional[str]) -> Settings:
    """Cached settings loading (string path for hashability)."""
    paths = [_BUNDLED_DEFAULTS, *_get_override_files()]
    if custom_path_str:
        custom_path = Path(custom_path_str)
        if not custom_path.exists():
            raise FileNotFoundError(f"Settings file not found: {custom_path}")
        paths.append(custom_path)

    data: Dict[str, Any] = {}
    for path in paths:
        data = _merge(data, _load_yaml(path))
        logger.debug("loaded settings from %s", path)

    return _build_settings(data, tuple(str(p) for p in paths))


def load_settings(custom_path: Optional[Path] = None) -> Settings:
    """Load view settings.

    Args:
        custom_path: Optional YAML file applied after all other sources

    Returns:
        Frozen :class:`Settings`

    Raises:
        FileNotFoundError: If ``custom_path`` does not exist
        ValueError: If a settings file has an invalid format
    """
    custom_str = str(custom_path) if custom_path else None
    return _load_settings_cached(custom_str)
