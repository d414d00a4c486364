"""
Tests for per-view scene assembly.
"""

import pytest

from calcviz import cache
from calcviz.config import clear_cache, load_settings
from calcviz.expr import ParseError
from calcviz.physics import TankShape
from calcviz.revolution import AxisMode
from calcviz.scene import area_scene, physics_scene, volume_scene


@pytest.fixture(autouse=True)
def defaults_only(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("CALCVIZ_CONFIG", raising=False)
    clear_cache()
    cache.clear_cache()
    yield
    clear_cache()


class TestAreaScene:
    """Area view."""

    def test_defaults(self):
        scene = area_scene()
        assert scene.ok
        assert scene.function == "x^2 - 2*x + 3"
        assert len(scene.curve) == 101
        assert len(scene.area) == 103
        assert len(scene.rectangles) == 12
        assert scene.rectangles[0].display_width == pytest.approx(scene.rectangles[0].width * 0.9)

    def test_riemann_total(self):
        scene = area_scene("1", bounds=(0, 4), partitions=8)
        assert scene.riemann_total == pytest.approx(4.0)

    def test_invalid_formula(self):
        scene = area_scene("x^")
        assert not scene.ok
        assert isinstance(scene.error, ParseError)
        assert scene.curve is None
        assert scene.area is None
        assert scene.rectangles == ()


class TestVolumeScene:
    """Volume view."""

    def test_defaults(self):
        scene = volume_scene()
        assert scene.ok
        assert scene.axis is AxisMode.OFFSET
        assert scene.method == "shell"
        assert scene.offset == pytest.approx(3.5)
        assert scene.mesh.vertex_count == 51 * 37
        assert scene.mesh.triangle_count == 50 * 36 * 2
        assert len(scene.curve) == 51

    def test_cross_section_defaults_to_middle(self):
        scene = volume_scene("2", bounds=(0, 4), axis_mode="y=0")
        assert scene.cross_section.center == (2.0, 0.0, 0.0)
        assert scene.cross_section.radius == 2.0

    def test_cross_section_clamped(self):
        scene = volume_scene("2", bounds=(0, 4), axis_mode="y=0", position=10)
        assert scene.cross_section.center[0] == 4.0

    def test_volume(self):
        scene = volume_scene("1", bounds=(0, 2), axis_mode="y=0")
        assert scene.method == "disk"
        assert scene.volume.value == pytest.approx(6.283, rel=1e-3)

    def test_invalid_formula(self):
        scene = volume_scene("foo(x)")
        assert scene.error.code == "E201"
        assert scene.mesh is None
        assert scene.volume is None


class TestPhysicsScene:
    """Physics view."""

    def test_defaults(self):
        scene = physics_scene()
        assert scene.ok
        assert scene.shape is TankShape.RECTANGULAR
        assert scene.frame.time == 0.0
        assert scene.frame.distance.value == 0.0
        assert set(scene.height_curves) == set(TankShape)
        assert len(scene.height_curves[TankShape.CONICAL]) == 101

    def test_current_time(self):
        scene = physics_scene(current_time=5.0, shape="conical")
        assert scene.frame.time == 5.0
        assert scene.frame.water.shape is TankShape.CONICAL
        assert scene.distance_area.points[-2] == (5.0, 0.0)

    def test_invalid_flow_formula(self):
        scene = physics_scene(flow_rate="5 - 0.1*x")
        assert not scene.ok
        assert scene.error.code == "E201"
        assert scene.frame is None
        assert scene.height_curves == {}

    def test_uses_settings(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("physics:\n  tank_max_volume: 100\n", encoding="utf-8")
        scene = physics_scene(current_time=10.0, settings=load_settings(path))
        assert scene.frame.ratio < 1.0
