"""
Curvature-adaptive sampling of disk B-splines.

Sampling runs in two passes over a :class:`CurveEvaluator`:

1. A uniform pass evaluates the curve at evenly spaced parameters across
   its whole domain (endpoints included) and records the curvature at
   each point.  The number of uniform samples grows with the number of
   control disks, up to :data:`MAX_BASE_SAMPLES`, but never drops below
   the caller's ``base_count``.
2. A refinement pass walks consecutive pairs of uniform samples and
   inserts up to :data:`MAX_EXTRA_SAMPLES` extra samples between pairs
   whose normalised curvature and length are both large enough.  The
   total never exceeds ``max_count``.

The functions here hold no state, so repeated calls with the same curve
and counts return identical samples.
"""

from __future__ import annotations

import logging
import math
from typing import List, Tuple

try:
    import numpy as np  # type: ignore  # noqa: N816
except Exception as exc:  # pragma: no cover - dependency guard
    raise RuntimeError("numpy is required for curve sampling") from exc

from ..api.models import ControlDisk, Sample
from .curve import CurveEvaluator

logger = logging.getLogger(__name__)

BASE_SAMPLES_PER_DISK: int = 20
MAX_BASE_SAMPLES: int = 200
# Pairs below this normalised curvature are never refined.
CURVATURE_THRESHOLD: float = 0.15
# Pairs whose centers are closer than this are never refined.
MIN_REFINE_LENGTH: float = 0.5
MAX_EXTRA_SAMPLES: int = 4
REFINE_LENGTH_SCALE: float = 10.0


def effective_base_count(base_count: int, disk_count: int) -> int:
    """Number of samples taken by the uniform pass."""
    per_disk = min(MAX_BASE_SAMPLES, int(round(disk_count * BASE_SAMPLES_PER_DISK)))
    return max(2, base_count, per_disk)


def _extra_sample_count(normalized_curvature: float, length: float) -> int:
    if normalized_curvature <= CURVATURE_THRESHOLD or length <= MIN_REFINE_LENGTH:
        return 0
    wanted = math.floor(normalized_curvature * MAX_EXTRA_SAMPLES * length / REFINE_LENGTH_SCALE)
    return max(0, min(MAX_EXTRA_SAMPLES, wanted))


def sample_parameters(curve: CurveEvaluator, base_count: int, max_count: int) -> List[Sample]:
    """Return adaptively placed samples ordered by parameter.

    Args:
        curve: Evaluator to sample.
        base_count: Requested number of uniform samples; raised to
            :func:`effective_base_count` when smaller.
        max_count: Upper bound on the number of returned samples.  When it
            is below the effective base count the base count wins.

    Returns:
        A list of :class:`Sample` objects, or an empty list when the curve
        has too few control disks.
    """
    if not curve.is_valid:
        curve.diagnostics.report(
            f"Not enough control points ({curve.disk_count}) to sample a curve of degree {curve.degree}; "
            f"need at least {curve.degree + 1}"
        )
        return []

    base = effective_base_count(base_count, curve.disk_count)
    limit = max(max_count, base)

    uniform: List[Tuple[float, ControlDisk, float]] = []
    for u in np.linspace(curve.start, curve.end, base):
        u = float(u)
        uniform.append((u, curve.evaluate_at(u), curve.calculate_curvature_at(u)))
    max_curvature = max(k for _, _, k in uniform)

    samples: List[Sample] = [Sample(u=uniform[0][0], disk=uniform[0][1])]
    count = base
    for (ua, da, ka), (ub, db, kb) in zip(uniform, uniform[1:]):
        extra = 0
        if count < limit:
            normalized = max(ka, kb) / max_curvature if max_curvature > 0.0 else 0.0
            length = math.hypot(db.center.x - da.center.x, db.center.y - da.center.y)
            extra = min(_extra_sample_count(normalized, length), limit - count)
        for j in range(1, extra + 1):
            u = ua + (ub - ua) * j / (extra + 1)
            samples.append(Sample(u=u, disk=curve.evaluate_at(u)))
        count += extra
        samples.append(Sample(u=ub, disk=db))

    logger.debug(
        "[Sampler] %s uniform samples, %s after refinement (limit %s, max curvature %.6g)",
        base,
        len(samples),
        limit,
        max_curvature,
    )
    return samples


def sample(curve: CurveEvaluator, base_count: int, max_count: int) -> List[ControlDisk]:
    """Adaptive sampling returning only the disks; see :func:`sample_parameters`."""
    return [s.disk for s in sample_parameters(curve, base_count, max_count)]


def sample_uniform(curve: CurveEvaluator, num_samples: int) -> List[ControlDisk]:
    """Evaluate ``num_samples`` evenly spaced disks from start to end inclusive."""
    if not curve.is_valid:
        curve.diagnostics.report(
            f"Not enough control points ({curve.disk_count}) to sample a curve of degree {curve.degree}; "
            f"need at least {curve.degree + 1}"
        )
        return []
    num_samples = max(2, num_samples)
    logger.debug("[Sampler] sampling u=%s..%s with %s samples", curve.start, curve.end, num_samples)
    return [curve.evaluate_at(float(u)) for u in np.linspace(curve.start, curve.end, num_samples)]


__all__ = [
    "effective_base_count",
    "sample",
    "sample_parameters",
    "sample_uniform",
]
