"""
Cox–de Boor basis functions evaluated with a dynamic-programming table.

The textbook recursion

    N(i, 0, u) = 1 if knots[i] <= u < knots[i+1] else 0
    N(i, k, u) = c1 * N(i, k-1, u) + c2 * N(i+1, k-1, u)

re-derives the same lower-degree values many times.  Here every level of
the recursion is computed once per parameter value, vectorised across
``i`` with numpy, and stored in a ``(degree + 1, len(knots) - 1)`` table.
Row ``p`` holds ``N(i, p, u)`` for every valid ``i``.

Conventions:

- A coefficient whose denominator (knot span) is exactly zero is treated
  as zero, so repeated knots simply drop the corresponding term.
- Degree-0 intervals are half-open.  When ``u`` equals the final knot
  value, the last non-empty interval is closed on the right instead, so
  the right end of a clamped curve evaluates to its last control disk.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

try:
    import numpy as np  # type: ignore  # noqa: N816
except Exception as exc:  # pragma: no cover - dependency guard
    raise RuntimeError("numpy is required for basis evaluation") from exc

if TYPE_CHECKING:  # pragma: no cover - for type checkers only
    from numpy.typing import NDArray


def _as_knot_array(knots: Sequence[float]) -> 'NDArray[np.float64]':
    return np.asarray(knots, dtype=float)


def _guarded_ratio(numer: 'NDArray[np.float64]', denom: 'NDArray[np.float64]') -> 'NDArray[np.float64]':
    """Elementwise ``numer / denom`` with 0 wherever ``denom == 0``."""
    out = np.zeros_like(numer)
    np.divide(numer, denom, out=out, where=denom != 0.0)
    return out


def basis_table(degree: int, u: float, knots: Sequence[float]) -> 'NDArray[np.float64]':
    """Return every basis value up to ``degree`` at parameter ``u``.

    Args:
        degree: Highest degree to evaluate.
        u: Parameter value.
        knots: Non-decreasing knot vector.

    Returns:
        Array of shape ``(degree + 1, len(knots) - 1)``.  Entry ``[p, i]``
        is ``N(i, p, u)``; entries with ``i >= len(knots) - p - 1`` are 0.
    """
    t = _as_knot_array(knots)
    spans = len(t) - 1
    table = np.zeros((degree + 1, max(spans, 0)), dtype=float)
    if spans <= 0:
        return table

    table[0] = (t[:-1] <= u) & (u < t[1:])
    if u == t[-1]:
        non_empty = np.nonzero(t[:-1] < t[1:])[0]
        if non_empty.size:
            table[0, non_empty[-1]] = 1.0

    for p in range(1, degree + 1):
        count = spans - p
        if count <= 0:
            break
        left = t[:count]
        right = t[p + 1:p + 1 + count]
        c1 = _guarded_ratio(u - left, t[p:p + count] - left)
        c2 = _guarded_ratio(right - u, right - t[1:1 + count])
        table[p, :count] = c1 * table[p - 1, :count] + c2 * table[p - 1, 1:count + 1]
    return table


def basis_values(degree: int, u: float, knots: Sequence[float]) -> 'NDArray[np.float64]':
    """Return ``N(i, degree, u)`` for ``i = 0 .. len(knots) - degree - 2``."""
    count = max(len(knots) - degree - 1, 0)
    return basis_table(degree, u, knots)[degree, :count]


def basis_derivatives(degree: int, u: float, knots: Sequence[float]) -> 'NDArray[np.float64]':
    """Return ``dN(i, degree, u)/du`` for every basis function of ``degree``.

    Uses the standard derivative formula

        k / (knots[i+k] - knots[i]) * N(i, k-1, u)
            - k / (knots[i+k+1] - knots[i+1]) * N(i+1, k-1, u)

    with zero-span terms dropped.  Degree-0 basis functions are piecewise
    constant, so their derivatives are all zero.
    """
    count = max(len(knots) - degree - 1, 0)
    if degree == 0 or count == 0:
        return np.zeros(count, dtype=float)
    t = _as_knot_array(knots)
    lower = basis_table(degree - 1, u, t)[degree - 1]
    k = float(degree)
    ones = np.full(count, k)
    d1 = _guarded_ratio(ones, t[degree:degree + count] - t[:count])
    d2 = _guarded_ratio(ones, t[degree + 1:degree + 1 + count] - t[1:1 + count])
    return d1 * lower[:count] - d2 * lower[1:count + 1]


def basis(i: int, k: int, u: float, knots: Sequence[float]) -> float:
    """Value of the single basis function ``N(i, k, u)``; 0 for out-of-range ``i``."""
    values = basis_values(k, u, knots)
    if i < 0 or i >= values.shape[0]:
        return 0.0
    return float(values[i])


def basis_derivative(i: int, k: int, u: float, knots: Sequence[float]) -> float:
    """Derivative of ``N(i, k, u)`` with respect to ``u``; 0 for out-of-range ``i``."""
    values = basis_derivatives(k, u, knots)
    if i < 0 or i >= values.shape[0]:
        return 0.0
    return float(values[i])


__all__ = [
    "basis",
    "basis_derivative",
    "basis_table",
    "basis_values",
    "basis_derivatives",
]
