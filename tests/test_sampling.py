"""
Tests for bounds and uniform sampling.
"""

import numpy as np
import pytest
from calcviz.expr import compile_expression
from calcviz.sampling import Bounds, SampledCurve, partition, require_count, sample


@pytest.fixture
def parabola():
    return compile_expression("x^2 - 2*x + 3")


class TestBounds:
    """Closed interval value type."""

    def test_coerces_pairs(self):
        b = Bounds.of((-5, 5))
        assert b == Bounds(-5.0, 5.0)
        assert isinstance(b.min, float)
        assert Bounds.of(b) is b

    def test_rejects_reversed(self):
        with pytest.raises(ValueError):
            Bounds(2, 1)

    def test_rejects_wrong_length(self):
        with pytest.raises(ValueError):
            Bounds.of([1, 2, 3])

    @pytest.mark.parametrize("pair", [
        (float("nan"), 1.0),
        (0.0, float("inf")),
        (float("-inf"), 0.0),
    ])
    def test_rejects_non_finite(self, pair):
        with pytest.raises(ValueError):
            Bounds.of(pair)
        with pytest.raises(ValueError):
            Bounds(*pair)

    def test_width_and_degenerate(self):
        assert Bounds(-1, 3).width == 4.0
        assert Bounds(2, 2).degenerate
        assert not Bounds(2, 3).degenerate

    def test_clamp(self):
        b = Bounds(0, 10)
        assert b.clamp(-1) == 0.0
        assert b.clamp(11) == 10.0
        assert b.clamp(4.5) == 4.5

    def test_unpacking(self):
        lo, hi = Bounds(1, 2)
        assert (lo, hi) == (1.0, 2.0)


class TestPartition:
    """Uniform partition points."""

    def test_count_and_endpoints(self):
        ts = partition(Bounds(-5, 5), 7)
        assert len(ts) == 8
        assert ts[0] == -5.0
        assert ts[-1] == 5.0

    def test_endpoint_exact_despite_rounding(self):
        """The last point is exactly max even when i/n*width would drift."""
        ts = partition(Bounds(0.1, 0.7), 3)
        assert ts[-1] == 0.7

    def test_strictly_increasing(self):
        ts = partition(Bounds(-1, 1), 100)
        assert all(a < b for a, b in zip(ts, ts[1:]))


class TestSample:
    """sample() contract."""

    def test_length_is_segments_plus_one(self, parabola):
        curve = sample(parabola, (-5, 5), 100)
        assert isinstance(curve, SampledCurve)
        assert len(curve) == 101

    def test_endpoints_and_values(self, parabola):
        curve = sample(parabola, (-5, 5), 10)
        assert curve[0].t == -5.0
        assert curve[-1].t == 5.0
        assert curve[0].value == pytest.approx(38.0)
        assert curve[-1].value == pytest.approx(18.0)
        assert curve[5].t == pytest.approx(0.0)
        assert curve[5].value == pytest.approx(3.0)

    def test_single_segment(self, parabola):
        curve = sample(parabola, (0, 1), 1)
        assert curve.ts == (0.0, 1.0)

    @pytest.mark.parametrize("segments", [0, -1, 2.5])
    def test_rejects_bad_segments(self, parabola, segments):
        with pytest.raises(ValueError):
            sample(parabola, (0, 1), segments)

    def test_rejects_parse_error(self):
        with pytest.raises(TypeError):
            sample(compile_expression("x +"), (0, 1), 10)

    def test_degenerate_bounds(self, parabola):
        """min == max gives identical points."""
        curve = sample(parabola, (2, 2), 4)
        assert len(curve) == 5
        assert set(curve.ts) == {2.0}
        assert set(curve.values) == {3.0}

    def test_failures_recorded(self):
        curve = sample(compile_expression("1/x"), (-1, 1), 2)
        assert curve.values == (-1.0, 0.0, 1.0)
        assert curve.failures == (0.0,)
        assert not curve.ok

    def test_as_array(self, parabola):
        arr = sample(parabola, (0, 2), 2).as_array()
        assert arr.shape == (3, 2)
        np.testing.assert_allclose(arr, [[0, 3], [1, 2], [2, 3]])

    def test_line_points(self, parabola):
        pts = sample(parabola, (0, 2), 2).line_points()
        assert pts[1] == (1.0, 2.0, 0.0)

    def test_repeatable(self, parabola):
        first = sample(parabola, (-5, 5), 100)
        second = sample(parabola, (-5, 5), 100)
        assert first.ts == second.ts
        assert first.values == second.values


def test_require_count():
    assert require_count("n", 3, 1) == 3
    assert require_count("n", 3.0, 1) == 3
    with pytest.raises(ValueError):
        require_count("n", True, 0)
    with pytest.raises(ValueError):
        require_count("n", 2, 3)
