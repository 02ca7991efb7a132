"""
Tests for disk, derivative and curvature evaluation.

Most cases use the four-disk cubic from the design notes,
``(0,0,1), (10,0,2), (20,0,2), (30,0,1)``, whose clamped knot vector
turns the curve into a single cubic Bézier segment so values can be
checked by hand.
"""

from __future__ import annotations

import math
import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from diskspline.api.models import ControlDisk
from diskspline.services.curve import CurveEvaluator
from diskspline.services.diagnostics import CollectingDiagnosticSink


def _disks(*xyr: tuple[float, float, float]) -> list[ControlDisk]:
    return [ControlDisk.from_xyr(x, y, r) for x, y, r in xyr]


SCENARIO_A = _disks((0, 0, 1), (10, 0, 2), (20, 0, 2), (30, 0, 1))
SQUARE = _disks((0, 0, 5), (100, 0, 5), (100, 100, 5), (0, 100, 5))


def test_open_curve_hits_first_and_last_disk() -> None:
    curve = CurveEvaluator.build(SCENARIO_A, degree=3)
    assert curve.start == 0.0
    assert curve.end == 1.0
    assert curve.evaluate_at(curve.start).as_tuple() == pytest.approx((0.0, 0.0, 1.0))
    assert curve.evaluate_at(curve.end).as_tuple() == pytest.approx((30.0, 0.0, 1.0))


def test_open_curve_midpoint() -> None:
    curve = CurveEvaluator.build(SCENARIO_A, degree=3)
    disk = curve.evaluate_at(0.5)
    assert disk.center.x == pytest.approx(15.0)
    assert disk.center.y == pytest.approx(0.0)
    assert disk.radius == pytest.approx(1.75)


def test_open_curve_clamps_out_of_range_parameters() -> None:
    sink = CollectingDiagnosticSink()
    curve = CurveEvaluator.build(SCENARIO_A, degree=3, diagnostics=sink)
    assert curve.evaluate_at(-2.0).as_tuple() == pytest.approx((0.0, 0.0, 1.0))
    assert any("clamped" in m for m in sink.messages)
    # Past the end the last disk is returned directly
    assert curve.evaluate_at(5.0).as_tuple() == pytest.approx((30.0, 0.0, 1.0))


def test_radius_and_center_stay_within_control_bounds() -> None:
    disks = _disks((0, 0, 1), (15, 20, 6), (30, -10, 0.5), (45, 5, 3), (60, 0, 2))
    curve = CurveEvaluator.build(disks, degree=3)
    radii = [d.radius for d in disks]
    xs = [d.center.x for d in disks]
    ys = [d.center.y for d in disks]
    for u in np.linspace(curve.start, curve.end, 50):
        disk = curve.evaluate_at(float(u))
        assert min(radii) - 1e-9 <= disk.radius <= max(radii) + 1e-9
        assert min(xs) - 1e-9 <= disk.center.x <= max(xs) + 1e-9
        assert min(ys) - 1e-9 <= disk.center.y <= max(ys) + 1e-9


def test_too_few_disks_yield_zero_disk() -> None:
    """Three disks and degree 3: evaluation degrades to the zero disk."""
    sink = CollectingDiagnosticSink()
    curve = CurveEvaluator.build(SCENARIO_A[:3], degree=3, diagnostics=sink)
    assert curve.is_valid is False
    assert curve.knots is None
    assert curve.evaluate_at(0.5).as_tuple() == (0.0, 0.0, 0.0)
    assert curve.evaluate_derivative_at(0.5) == (0.0, 0.0, 0.0)
    assert curve.calculate_curvature_at(0.5) == 0.0
    assert all("Not enough control points" in m for m in sink.messages)
    assert len(sink) == 4


def test_start_derivative_matches_bezier() -> None:
    """For a single cubic span the start derivative is 3 * (P1 - P0)."""
    curve = CurveEvaluator.build(SCENARIO_A, degree=3)
    dx, dy, dr = curve.evaluate_derivative_at(0.0)
    assert dx == pytest.approx(30.0)
    assert dy == pytest.approx(0.0)
    assert dr == pytest.approx(3.0)
    dx, dy, dr = curve.evaluate_derivative_at(1.0)
    assert dx == pytest.approx(30.0)
    assert dr == pytest.approx(-3.0)


def test_degenerate_end_tangent_uses_control_direction() -> None:
    """Coincident leading disks give a zero analytic tangent at the start."""
    sink = CollectingDiagnosticSink()
    disks = _disks((0, 0, 1), (0, 0, 1), (0, 10, 1), (0, 20, 1), (5, 30, 1), (5, 30, 1))
    curve = CurveEvaluator.build(disks, degree=3, diagnostics=sink)
    dx, dy, _ = curve.evaluate_derivative_at(curve.start)
    assert (dx, dy) == pytest.approx((0.0, 1.0))
    dx, dy, _ = curve.evaluate_derivative_at(curve.end)
    assert dx == pytest.approx(5.0 / math.hypot(5.0, 10.0))
    assert dy == pytest.approx(10.0 / math.hypot(5.0, 10.0))
    assert any("Degenerate end tangent" in m for m in sink.messages)


def test_short_first_segment_keeps_its_direction() -> None:
    """A tiny but nonzero first segment still defines the start tangent."""
    disks = _disks((0, 0, 1), (1e-5, 0, 1), (0, 10, 1), (0, 20, 1))
    curve = CurveEvaluator.build(disks, degree=3, diagnostics=CollectingDiagnosticSink())
    dx, dy, _ = curve.evaluate_derivative_at(curve.start)
    assert (dx, dy) == pytest.approx((1.0, 0.0))


def test_closed_curve_is_periodic() -> None:
    curve = CurveEvaluator.build(SQUARE, degree=3, closed=True)
    assert curve.period == pytest.approx(4.0)
    assert len(curve.disks) == 7
    for u in (0.0, 0.3, 1.7, 2.2, 3.9):
        a = curve.evaluate_at(u).as_tuple()
        assert curve.evaluate_at(u + curve.period).as_tuple() == pytest.approx(a)
        assert curve.evaluate_at(u - curve.period).as_tuple() == pytest.approx(a)
    # The end of the domain wraps back onto the start
    assert curve.evaluate_at(curve.end).as_tuple() == pytest.approx(curve.evaluate_at(curve.start).as_tuple())


def test_closed_curve_value_at_knot() -> None:
    """At a knot a uniform cubic blends three disks with weights 1/6, 2/3, 1/6."""
    curve = CurveEvaluator.build(SQUARE, degree=3, closed=True)
    disk = curve.evaluate_at(0.0)
    assert disk.center.x == pytest.approx((0.0 + 4 * 100.0 + 100.0) / 6.0)
    assert disk.center.y == pytest.approx((0.0 + 0.0 + 100.0) / 6.0)
    assert disk.radius == pytest.approx(5.0)


def test_straight_line_has_zero_curvature() -> None:
    """A straight disk sequence with growing radius has no curvature."""
    disks = _disks((0, 0, 1), (10, 0, 2), (20, 0, 3), (30, 0, 4), (40, 0, 5))
    curve = CurveEvaluator.build(disks, degree=3)
    for u in np.linspace(curve.start, curve.end, 40):
        assert curve.calculate_curvature_at(float(u)) == pytest.approx(0.0, abs=1e-6)


def test_curved_path_has_positive_curvature() -> None:
    curve = CurveEvaluator.build(SQUARE, degree=3, closed=True)
    kappa = curve.calculate_curvature_at(0.0)
    assert kappa > 0.0
    assert math.isfinite(kappa)
    # Right edge of an open curve uses a backward step and stays finite
    open_curve = CurveEvaluator.build(SQUARE, degree=3)
    assert math.isfinite(open_curve.calculate_curvature_at(open_curve.end))
