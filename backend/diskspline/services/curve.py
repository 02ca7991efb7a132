"""
Curve evaluation for disk B-splines.

A :class:`CurveEvaluator` couples a control-disk sequence with its knot
vector and answers three questions at a parameter value ``u``:

- ``evaluate_at(u)`` – the interpolated disk (center and radius),
- ``evaluate_derivative_at(u)`` – ``(dx/du, dy/du, dr/du)``,
- ``calculate_curvature_at(u)`` – curvature of the centerline.

The center coordinates and the radius are blended independently with
the same basis weights, so the radius is a convex combination of the
control radii and the center stays inside the convex hull of the active
control disks.

Domain handling differs between open and closed curves.  Closed curves
wrap ``u`` into ``[start, end)`` on their period.  Open curves clamp ``u``
into ``[start, end]``; evaluating at or past ``end`` returns the last
control disk directly rather than relying on basis evaluation at the
exact right edge.

An evaluator is immutable once built.  Callers that change the disk
sequence build a new evaluator (see :class:`DiskBSpline`).  When there
are fewer than ``degree + 1`` disks the evaluator is *invalid*: every
query returns a zero result and reports a diagnostic.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, Optional, Tuple

try:
    import numpy as np  # type: ignore  # noqa: N816
except Exception as exc:  # pragma: no cover - dependency guard
    raise RuntimeError("numpy is required for curve evaluation") from exc

from ..api.models import ControlDisk, Point
from .basis import basis_derivatives, basis_values
from .diagnostics import DiagnosticSink, debug_enabled, resolve_sink
from .knots import KnotVector, build_knot_vector, extend_closed_disks

logger = logging.getLogger(__name__)

# Allowed drift of the basis weights from 1 (values) and 0 (derivatives).
PARTITION_TOLERANCE: float = 1e-4
# Tangents shorter than this are considered degenerate.
TANGENT_EPSILON: float = 1e-4
# Forward-difference step used for the second derivative.
CURVATURE_STEP: float = 1e-4
# Curvature is reported as 0 when (x'^2 + y'^2)^1.5 falls below this.
CURVATURE_EPSILON: float = 1e-4

Derivative = Tuple[float, float, float]


def zero_disk() -> ControlDisk:
    return ControlDisk(center=Point(x=0.0, y=0.0), radius=0.0)


class CurveEvaluator:
    """Evaluate interpolated disks along a uniform B-spline.

    Use :meth:`build` rather than the constructor; it takes care of
    extending closed sequences and building the knot vector.
    """

    def __init__(
        self,
        disks: Iterable[ControlDisk],
        degree: int,
        closed: bool,
        knots: Optional[KnotVector],
        disk_count: int,
        diagnostics: DiagnosticSink,
    ) -> None:
        self._disks: Tuple[ControlDisk, ...] = tuple(disks)
        self._degree = degree
        self._closed = closed
        self._knots = knots
        self._disk_count = disk_count
        self._diagnostics = diagnostics
        # (m, 3) array of x, y, radius so blending is a single dot product
        self._coords = np.array([d.as_tuple() for d in self._disks], dtype=float).reshape(-1, 3)

    @classmethod
    def build(
        cls,
        disks: Iterable[ControlDisk],
        degree: int = 3,
        closed: bool = False,
        diagnostics: Optional[DiagnosticSink] = None,
    ) -> "CurveEvaluator":
        """Build an evaluator for ``disks``.

        Closed curves are extended with their first ``degree`` disks before
        the periodic knot vector is computed.
        """
        sink = resolve_sink(diagnostics)
        source = list(disks)
        knots = build_knot_vector(len(source), degree, closed, sink)
        if knots is not None and closed:
            source = extend_closed_disks(source, degree)
        if debug_enabled():
            logger.debug(
                "CurveEvaluator built: disks=%s degree=%s closed=%s knots=%s",
                len(source),
                degree,
                closed,
                knots.as_list() if knots is not None else None,
            )
        return cls(
            disks=source,
            degree=degree,
            closed=closed,
            knots=knots,
            disk_count=knots.disk_count if knots is not None else len(source),
            diagnostics=sink,
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def disks(self) -> Tuple[ControlDisk, ...]:
        """Disks used for evaluation (extended for closed curves)."""
        return self._disks

    @property
    def degree(self) -> int:
        return self._degree

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def knots(self) -> Optional[KnotVector]:
        return self._knots

    @property
    def disk_count(self) -> int:
        """Number of caller-supplied control disks."""
        return self._disk_count

    @property
    def diagnostics(self) -> DiagnosticSink:
        return self._diagnostics

    @property
    def is_valid(self) -> bool:
        return self._knots is not None

    @property
    def start(self) -> float:
        return self._knots.start if self._knots is not None else 0.0

    @property
    def end(self) -> float:
        return self._knots.end if self._knots is not None else 0.0

    @property
    def period(self) -> float:
        return self.end - self.start

    # ------------------------------------------------------------------
    # Domain handling
    # ------------------------------------------------------------------

    def _wrap(self, u: float) -> float:
        start, period = self.start, self.period
        if period <= 0.0:
            return start
        wrapped = start + (u - start) % period
        # Rounding can land exactly on the excluded right edge
        if wrapped >= self.end:
            wrapped = start
        return wrapped

    def _clamp(self, u: float) -> float:
        clamped = max(self.start, min(u, self.end))
        if clamped != u:
            self._diagnostics.report(f"Parameter u={u} clamped to u={clamped}")
        return clamped

    def normalize_parameter(self, u: float) -> float:
        """Map ``u`` into the valid domain (wrap for closed, clamp for open)."""
        if self._closed:
            return self._wrap(u)
        return self._clamp(u)

    def _report_too_few(self) -> None:
        self._diagnostics.report(
            f"Not enough control points ({self._disk_count}) for the specified degree ({self._degree})"
        )

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate_at(self, u: float) -> ControlDisk:
        """Return the interpolated disk at parameter ``u``."""
        if self._knots is None:
            self._report_too_few()
            return zero_disk()

        if not self._closed and u >= self.end:
            last = self._disks[-1]
            return ControlDisk(center=Point(x=last.center.x, y=last.center.y), radius=last.radius)

        u_eff = self.normalize_parameter(u)
        weights = basis_values(self._degree, u_eff, self._knots.values)
        total = float(weights.sum())
        if abs(total - 1.0) > PARTITION_TOLERANCE:
            self._diagnostics.report(f"Basis functions sum to {total} at u={u_eff}, should be 1")

        x, y, r = weights @ self._coords
        return ControlDisk(center=Point(x=float(x), y=float(y)), radius=float(r))

    def evaluate_derivative_at(self, u: float) -> Derivative:
        """Return ``(dx/du, dy/du, dr/du)`` at parameter ``u``.

        At the start and end of an open curve a vanishing analytic tangent
        is replaced by the normalised direction from the end disk to the
        nearest control disk with a distinct center.
        """
        if self._knots is None:
            self._report_too_few()
            return (0.0, 0.0, 0.0)

        u_eff = self.normalize_parameter(u)
        rates = basis_derivatives(self._degree, u_eff, self._knots.values)
        total = float(rates.sum())
        if abs(total) > PARTITION_TOLERANCE:
            self._diagnostics.report(f"Basis derivatives sum to {total} at u={u_eff}, should be 0")

        dx, dy, dr = (float(v) for v in rates @ self._coords)

        if not self._closed and math.hypot(dx, dy) < TANGENT_EPSILON:
            last = len(self._disks) - 1
            if u_eff <= self.start:
                dx, dy = self._boundary_direction(0, range(1, last + 1), 1.0, dx, dy)
            elif u_eff >= self.end:
                dx, dy = self._boundary_direction(last, range(last - 1, -1, -1), -1.0, dx, dy)
        return (dx, dy, dr)

    def _boundary_direction(
        self,
        anchor: int,
        neighbours: Iterable[int],
        sign: float,
        dx: float,
        dy: float,
    ) -> Tuple[float, float]:
        """Unit direction from the end disk to the nearest distinct neighbour.

        ``sign`` orients the result along the direction of travel.  When all
        disks share the end center the analytic ``(dx, dy)`` is returned.
        """
        p = self._disks[anchor].center
        for j in neighbours:
            q = self._disks[j].center
            fx, fy = sign * (q.x - p.x), sign * (q.y - p.y)
            length = math.hypot(fx, fy)
            if length > 0.0:
                self._diagnostics.report(
                    f"Degenerate end tangent; using control disk direction ({fx / length}, {fy / length})"
                )
                return fx / length, fy / length
        return dx, dy

    def calculate_curvature_at(self, u: float) -> float:
        """Curvature ``|x'y'' - y'x''| / (x'^2 + y'^2)^1.5`` of the centerline.

        The second derivative is a forward difference of the first with
        step :data:`CURVATURE_STEP`; on an open curve a backward step is
        used when the forward one would leave the domain.  Returns 0 when
        the denominator is below :data:`CURVATURE_EPSILON`.
        """
        if self._knots is None:
            self._report_too_few()
            return 0.0

        u_eff = self.normalize_parameter(u)
        dx, dy, _ = self.evaluate_derivative_at(u_eff)
        if not self._closed and u_eff + CURVATURE_STEP > self.end:
            bx, by, _ = self.evaluate_derivative_at(u_eff - CURVATURE_STEP)
            ddx = (dx - bx) / CURVATURE_STEP
            ddy = (dy - by) / CURVATURE_STEP
        else:
            fx, fy, _ = self.evaluate_derivative_at(u_eff + CURVATURE_STEP)
            ddx = (fx - dx) / CURVATURE_STEP
            ddy = (fy - dy) / CURVATURE_STEP

        denom = (dx * dx + dy * dy) ** 1.5
        if denom < CURVATURE_EPSILON:
            self._diagnostics.report(f"Near-zero curvature denominator at u={u_eff}; treating curvature as 0")
            return 0.0
        return abs(dx * ddy - dy * ddx) / denom


__all__ = [
    "CurveEvaluator",
    "zero_disk",
    "PARTITION_TOLERANCE",
    "TANGENT_EPSILON",
    "CURVATURE_STEP",
    "CURVATURE_EPSILON",
]
