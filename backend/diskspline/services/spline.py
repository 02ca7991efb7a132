"""
High level disk B-spline object.

:class:`DiskBSpline` is the entry point used by rendering code.  It owns
the ordered control-disk sequence and the construction options, and
delegates the numerical work to the service modules:

- :mod:`.knots` builds the knot vector,
- :mod:`.curve` evaluates disks, derivatives and curvature,
- :mod:`.sampling` places samples along the curve,
- :mod:`.outline` turns samples into SVG path data.

Every mutation (``add_disk``) builds a fresh :class:`CurveEvaluator` from
scratch and swaps it in, so a reader holding ``spline.curve`` keeps a
consistent snapshot.  Mutating and evaluating from several threads at
once still has to be serialised by the caller.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from ..api.models import ControlDisk, Sample, SplineOptions, SVGPathData
from .curve import CurveEvaluator
from .diagnostics import DiagnosticSink, LoggingDiagnosticSink, debug_enabled
from .knots import KnotVector
from .outline import build_outline
from .sampling import sample_parameters, sample_uniform

logger = logging.getLogger(__name__)

DEFAULT_NUM_SAMPLES: int = 100


class DiskBSpline:
    """Variable-width curve defined by B-spline interpolation of disks.

    Args:
        control_disks: Ordered control disks.  Dictionaries with ``center``
            and ``radius`` keys are accepted as well.
        options: Degree, closedness and output settings.  Defaults to
            :class:`SplineOptions` defaults (cubic, open).
        diagnostics: Sink for soft failures.  Defaults to a logging sink
            that honours ``options.debug`` and ``DISKSPLINE_DEBUG``.
    """

    def __init__(
        self,
        control_disks: Iterable[ControlDisk | dict] = (),
        options: SplineOptions | None = None,
        *,
        diagnostics: Optional[DiagnosticSink] = None,
    ) -> None:
        self.options = options or SplineOptions()
        self.debug = self.options.debug or debug_enabled()
        if diagnostics is None:
            diagnostics = LoggingDiagnosticSink(debug=self.debug)
        self.diagnostics: DiagnosticSink = diagnostics
        self._disks: Tuple[ControlDisk, ...] = tuple(
            d if isinstance(d, ControlDisk) else ControlDisk.model_validate(d) for d in control_disks
        )
        self._curve = self._rebuild()

        if self.debug:
            logger.debug(
                "[DiskBSpline] created with %s control disks and degree %s (closed=%s)",
                len(self._disks),
                self.degree,
                self.closed,
            )
            if self._disks:
                first, last = self._disks[0], self._disks[-1]
                logger.debug(
                    "[DiskBSpline] first control disk: (%s, %s), r=%s",
                    first.center.x,
                    first.center.y,
                    first.radius,
                )
                logger.debug(
                    "[DiskBSpline] last control disk: (%s, %s), r=%s",
                    last.center.x,
                    last.center.y,
                    last.radius,
                )

    def _rebuild(self) -> CurveEvaluator:
        return CurveEvaluator.build(
            self._disks,
            degree=self.options.degree,
            closed=self.options.closed,
            diagnostics=self.diagnostics,
        )

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def degree(self) -> int:
        return self.options.degree

    @property
    def closed(self) -> bool:
        return self.options.closed

    @property
    def control_disks(self) -> Tuple[ControlDisk, ...]:
        return self._disks

    @property
    def curve(self) -> CurveEvaluator:
        """Current evaluator snapshot."""
        return self._curve

    @property
    def knots(self) -> List[float]:
        """Current knot values; empty when there are too few control disks."""
        kv: Optional[KnotVector] = self._curve.knots
        return kv.as_list() if kv is not None else []

    @property
    def is_valid(self) -> bool:
        return self._curve.is_valid

    def add_disk(self, disk: ControlDisk | dict) -> None:
        """Append a control disk and rebuild the knot vector from scratch."""
        if not isinstance(disk, ControlDisk):
            disk = ControlDisk.model_validate(disk)
        self._disks = self._disks + (disk,)
        self._curve = self._rebuild()
        if self.debug:
            logger.debug(
                "[DiskBSpline] added disk at (%s, %s) with radius %s",
                disk.center.x,
                disk.center.y,
                disk.radius,
            )
            logger.debug("[DiskBSpline] new knot vector: %s", self.knots)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate_at(self, u: float) -> ControlDisk:
        return self._curve.evaluate_at(u)

    def evaluate_derivative_at(self, u: float) -> Tuple[float, float, float]:
        return self._curve.evaluate_derivative_at(u)

    def calculate_curvature_at(self, u: float) -> float:
        return self._curve.calculate_curvature_at(u)

    def sample_curve(self, num_samples: int) -> List[ControlDisk]:
        """Uniformly spaced disks from the start to the end of the curve."""
        return sample_uniform(self._curve, num_samples)

    def sample_adaptive(self, base_count: int, max_count: int) -> List[Sample]:
        """Curvature-adaptive samples (parameter and disk)."""
        return sample_parameters(self._curve, base_count, max_count)

    def to_svg_path(
        self,
        num_samples: int = DEFAULT_NUM_SAMPLES,
        max_samples: Optional[int] = None,
    ) -> SVGPathData:
        """Sample the curve adaptively and build its outline.

        Args:
            num_samples: Requested number of uniform samples.
            max_samples: Upper bound on the total number of samples;
                defaults to ``options.maxSamples``.

        Returns:
            :class:`SVGPathData` with fill and skeleton paths, sample disks
            and unit normals.  Empty when the spline has too few disks.
        """
        curve = self._curve
        if not curve.is_valid:
            self.diagnostics.report(
                f"Not enough control points ({len(self._disks)}) for degree {self.degree}; "
                "returning an empty path"
            )
            return SVGPathData()

        limit = max_samples if max_samples is not None else self.options.maxSamples
        samples = sample_parameters(curve, num_samples, limit)
        derivatives = [curve.evaluate_derivative_at(s.u) for s in samples]
        result = build_outline(
            [s.disk for s in samples],
            derivatives,
            closed=self.closed,
            diagnostics=self.diagnostics,
            precision=self.options.precision,
        )
        if self.debug:
            logger.debug(
                "[DiskBSpline] generated SVG path with %s points using normals%s",
                len(result.disks),
                "" if self.closed else " and rounded end caps",
            )
        return result


__all__ = ["DiskBSpline", "DEFAULT_NUM_SAMPLES"]
