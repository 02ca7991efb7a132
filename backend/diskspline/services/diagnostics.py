"""
Diagnostic sinks for soft failures.

The spline engine never raises for expected degenerate input (too few
control disks, zero-length tangents, basis weights drifting from their
partition-of-unity sums).  Instead it computes a structurally valid
fallback and reports a short message to a *diagnostic sink*.  A sink is
any object with a ``report(message)`` method; the engine never inspects
the result, so a sink cannot change control flow.

Three implementations are provided:

- :class:`LoggingDiagnosticSink` – forwards messages to :mod:`logging`.
  Messages are emitted at ``WARNING`` when debugging is enabled (either
  explicitly or through the ``DISKSPLINE_DEBUG`` environment variable)
  and at ``DEBUG`` otherwise, so a normal run stays quiet.
- :class:`CollectingDiagnosticSink` – keeps messages in memory.
- :class:`NullDiagnosticSink` – discards everything.
"""

from __future__ import annotations

import logging
import os
from typing import List, Optional, Protocol


def debug_enabled() -> bool:
    """Return True when the ``DISKSPLINE_DEBUG`` environment variable is truthy."""
    value = os.getenv("DISKSPLINE_DEBUG", "")
    return value.strip().lower() not in {"", "0", "false", "no", "off"}


class DiagnosticSink(Protocol):
    def report(self, message: str) -> None:
        ...


class LoggingDiagnosticSink:
    """Send diagnostics to a standard library logger."""

    def __init__(self, debug: Optional[bool] = None, name: str = "diskspline") -> None:
        if debug is None:
            debug = debug_enabled()
        self.level = logging.WARNING if debug else logging.DEBUG
        self._logger = logging.getLogger(name)

    def report(self, message: str) -> None:
        self._logger.log(self.level, "[DiskBSpline] %s", message)


class CollectingDiagnosticSink:
    """Record diagnostics in order of arrival."""

    def __init__(self) -> None:
        self.messages: List[str] = []

    def report(self, message: str) -> None:
        self.messages.append(message)

    def clear(self) -> None:
        self.messages.clear()

    def __len__(self) -> int:
        return len(self.messages)


class NullDiagnosticSink:
    def report(self, message: str) -> None:
        return None


def resolve_sink(sink: Optional[DiagnosticSink]) -> DiagnosticSink:
    """Return *sink*, or a logging sink when none was supplied."""
    if sink is None:
        return LoggingDiagnosticSink()
    return sink


__all__ = [
    "DiagnosticSink",
    "LoggingDiagnosticSink",
    "CollectingDiagnosticSink",
    "NullDiagnosticSink",
    "debug_enabled",
    "resolve_sink",
]
