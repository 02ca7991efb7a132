"""
Knot vector construction for disk B-splines.

Two knot layouts are supported, both uniform:

- *open* (clamped): the first ``degree + 1`` knots are 0 and the knots
  past index ``n`` repeat the final value ``n - degree + 1``.  Repeating
  the boundary knots anchors the curve on its first and last control
  disks.
- *closed* (periodic): the control disks are extended by repeating the
  first ``degree`` of them at the end, and the knot vector is the plain
  progression ``knot[i] = i - degree`` over the extended length.  The
  duplicated disks give wraparound continuity without any circular
  indexing in the evaluator.

A knot vector depends only on the disk count, degree and closedness, so
it is always rebuilt from scratch after the disk sequence changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, TypeVar

from .diagnostics import DiagnosticSink

T = TypeVar("T")


@dataclass(frozen=True)
class KnotVector:
    """Immutable knot vector together with the parameters it was built for.

    Attributes:
        values: Non-decreasing knot values.
        degree: Degree of the spline.
        closed: Whether the knots describe a periodic curve.
        disk_count: Number of caller-supplied control disks.  For closed
            curves this excludes the ``degree`` duplicated disks.
    """

    values: Tuple[float, ...]
    degree: int
    closed: bool
    disk_count: int

    @property
    def last_index(self) -> int:
        """Index ``n`` of the last control disk actually evaluated."""
        return len(self.values) - self.degree - 2

    @property
    def start(self) -> float:
        return self.values[self.degree]

    @property
    def end(self) -> float:
        return self.values[self.last_index + 1]

    @property
    def period(self) -> float:
        return self.end - self.start

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, index: int) -> float:
        return self.values[index]

    def as_list(self) -> List[float]:
        return list(self.values)


def _open_knots(n: int, k: int) -> List[float]:
    knots: List[float] = []
    for i in range(n + k + 2):
        if i < k + 1:
            knots.append(0.0)
        elif i > n:
            knots.append(float(n - k + 1))
        else:
            knots.append(float(i - k))
    return knots


def _closed_knots(extended_count: int, k: int) -> List[float]:
    # extended_count disks -> n = extended_count - 1 -> n + k + 2 knots
    return [float(i - k) for i in range(extended_count + k + 1)]


def build_knot_vector(
    disk_count: int,
    degree: int,
    closed: bool = False,
    diagnostics: Optional[DiagnosticSink] = None,
) -> Optional[KnotVector]:
    """Build the uniform knot vector for ``disk_count`` control disks.

    Args:
        disk_count: Number of control disks supplied by the caller.
        degree: Degree of the spline (``k``).
        closed: Build a periodic knot vector over the disk sequence
            extended by its first ``degree`` disks.
        diagnostics: Optional sink told about invalid requests.

    Returns:
        The :class:`KnotVector`, or ``None`` when ``disk_count - 1 < degree``
        (not enough control disks to support the degree).
    """
    n = disk_count - 1
    k = degree
    if n < k:
        if diagnostics is not None:
            diagnostics.report(
                f"Not enough control points ({disk_count}) for the specified degree ({k})"
            )
        return None

    if closed:
        values = _closed_knots(disk_count + k, k)
    else:
        values = _open_knots(n, k)
    return KnotVector(values=tuple(values), degree=k, closed=closed, disk_count=disk_count)


def extend_closed_disks(disks: Sequence[T], degree: int) -> List[T]:
    """Append the first ``degree`` disks to the end of ``disks``.

    Sequences shorter than ``degree`` are cycled so the result always
    holds ``len(disks) + degree`` entries.
    """
    items = list(disks)
    if not items:
        return items
    extra = [items[i % len(items)] for i in range(degree)]
    return items + extra


__all__ = ["KnotVector", "build_knot_vector", "extend_closed_disks"]
