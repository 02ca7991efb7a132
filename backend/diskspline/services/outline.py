"""
Outline generation for variable-width strokes.

Given disks sampled along a curve and the curve derivative at each
sample, the outline is built by offsetting every sample center along its
unit normal by the sample radius.  This yields two boundaries:

    upper[i] = center[i] + normal[i] * radius[i]
    lower[i] = center[i] - normal[i] * radius[i]

For open curves the fill path runs along the lower boundary and back
along the upper one, joined by semicircular end caps (``A`` commands)
wherever the end radius is positive.  For closed curves no caps are
drawn; the lower and upper boundaries form two closed sub-paths with
opposite winding, i.e. the outer and inner edge of a band.

The skeleton path is the plain polyline through the sample centers.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple

from ..api.models import ControlDisk, Normal, SVGPathData
from .diagnostics import DiagnosticSink, resolve_sink

logger = logging.getLogger(__name__)

# Derivatives shorter than this do not define a direction.
NORMAL_EPSILON: float = 1e-4

Vec = Tuple[float, float]


def format_number(value: float, precision: int = 4) -> str:
    """Format a coordinate for SVG path data.

    At most ``precision`` decimals are written, trailing zeros are dropped
    and negative zero is written as ``0``.
    """
    text = f"{value:.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in {"-0", ""}:
        text = "0"
    return text


def _pt(p: Vec, precision: int) -> str:
    return f"{format_number(p[0], precision)} {format_number(p[1], precision)}"


def compute_normals(
    derivatives: Sequence[Sequence[float]],
    diagnostics: Optional[DiagnosticSink] = None,
) -> List[Normal]:
    """Unit normals ``(-ty, tx)`` of the normalised derivatives.

    A derivative shorter than :data:`NORMAL_EPSILON` reuses the previous
    normal, or ``(1, 0)`` for the first sample.
    """
    sink = resolve_sink(diagnostics)
    normals: List[Normal] = []
    previous: Vec = (1.0, 0.0)
    for idx, d in enumerate(derivatives):
        dx, dy = float(d[0]), float(d[1])
        length = math.hypot(dx, dy)
        if length < NORMAL_EPSILON:
            sink.report(f"Zero-length tangent at sample {idx}; reusing previous normal")
            nx, ny = previous
        else:
            tx, ty = dx / length, dy / length
            nx, ny = -ty, tx
        previous = (nx, ny)
        normals.append(Normal(x=nx, y=ny))
    return normals


def _offset_boundaries(
    disks: Sequence[ControlDisk],
    normals: Sequence[Normal],
) -> Tuple[List[Vec], List[Vec]]:
    upper: List[Vec] = []
    lower: List[Vec] = []
    for disk, n in zip(disks, normals):
        cx, cy, r = disk.center.x, disk.center.y, disk.radius
        upper.append((cx + n.x * r, cy + n.y * r))
        lower.append((cx - n.x * r, cy - n.y * r))
    return upper, lower


def _cross(a: Vec, b: Vec) -> float:
    return a[0] * b[1] - a[1] * b[0]


def skeleton_path(disks: Sequence[ControlDisk], precision: int = 4) -> str:
    """``M``/``L`` polyline through the disk centers; empty for fewer than 2 disks."""
    if len(disks) < 2:
        return ""
    parts = [f"M {_pt((disks[0].center.x, disks[0].center.y), precision)}"]
    for disk in disks[1:]:
        parts.append(f"L {_pt((disk.center.x, disk.center.y), precision)}")
    return " ".join(parts)


def _open_fill_path(
    disks: Sequence[ControlDisk],
    normals: Sequence[Normal],
    upper: List[Vec],
    lower: List[Vec],
    precision: int,
) -> str:
    first, last = disks[0], disks[-1]
    # Tangent recovered from the normal: n = (-ty, tx)  ->  t = (ny, -nx)
    first_tangent = (normals[0].y, -normals[0].x)
    last_tangent = (normals[-1].y, -normals[-1].x)

    parts = [f"M {_pt(upper[0], precision)}"]

    # Start cap: upper[0] -> lower[0], bowing against the direction of travel
    if first.radius > 0:
        chord = (upper[0][0] - lower[0][0], upper[0][1] - lower[0][1])
        sweep = 1 if _cross(first_tangent, chord) > 0 else 0
        r = format_number(first.radius, precision)
        parts.append(f"A {r} {r} 0 0 {sweep} {_pt(lower[0], precision)}")
    else:
        parts.append(f"L {_pt(lower[0], precision)}")

    for p in lower[1:]:
        parts.append(f"L {_pt(p, precision)}")

    # End cap: lower[-1] -> upper[-1], bowing along the direction of travel
    if last.radius > 0:
        chord = (lower[-1][0] - upper[-1][0], lower[-1][1] - upper[-1][1])
        sweep = 0 if _cross(last_tangent, chord) > 0 else 1
        r = format_number(last.radius, precision)
        parts.append(f"A {r} {r} 0 0 {sweep} {_pt(upper[-1], precision)}")
    else:
        parts.append(f"L {_pt(upper[-1], precision)}")

    for p in reversed(upper[1:-1]):
        parts.append(f"L {_pt(p, precision)}")

    parts.append("Z")
    return " ".join(parts)


def _closed_fill_path(upper: List[Vec], lower: List[Vec], precision: int) -> str:
    parts = [f"M {_pt(lower[0], precision)}"]
    parts.extend(f"L {_pt(p, precision)}" for p in lower[1:])
    parts.append("Z")
    # Inner boundary in reverse so the band keeps a hole under either fill rule
    parts.append(f"M {_pt(upper[-1], precision)}")
    parts.extend(f"L {_pt(p, precision)}" for p in reversed(upper[:-1]))
    parts.append("Z")
    return " ".join(parts)


def build_outline(
    samples: Sequence[ControlDisk],
    derivatives: Sequence[Sequence[float]],
    closed: bool = False,
    diagnostics: Optional[DiagnosticSink] = None,
    precision: int = 4,
) -> SVGPathData:
    """Build the fill outline and skeleton for sampled disks.

    Args:
        samples: Disks along the curve, in traversal order.
        derivatives: Curve derivative at each sample; only the first two
            components (``dx``, ``dy``) are used.
        closed: Whether the samples describe a closed curve.
        diagnostics: Sink for degenerate input.
        precision: Maximum number of decimals in the path strings.

    Returns:
        :class:`SVGPathData`.  An empty result is returned (with a
        diagnostic) for fewer than two samples or when the number of
        derivatives does not match the number of samples.
    """
    sink = resolve_sink(diagnostics)
    if len(samples) < 2:
        sink.report("Not enough sample points to create a path")
        return SVGPathData()
    if len(derivatives) != len(samples):
        sink.report(
            f"Got {len(derivatives)} derivatives for {len(samples)} samples; cannot create a path"
        )
        return SVGPathData()

    disks = list(samples)
    normals = compute_normals(derivatives, sink)
    upper, lower = _offset_boundaries(disks, normals)

    if closed:
        fill = _closed_fill_path(upper, lower, precision)
    else:
        fill = _open_fill_path(disks, normals, upper, lower, precision)

    logger.debug(
        "[Outline] generated %s path with %s samples (closed=%s)",
        "band" if closed else "capped",
        len(disks),
        closed,
    )
    return SVGPathData(
        fillPath=fill,
        skeletonPath=skeleton_path(disks, precision),
        disks=disks,
        normals=normals,
    )


__all__ = [
    "NORMAL_EPSILON",
    "build_outline",
    "compute_normals",
    "format_number",
    "skeleton_path",
]
