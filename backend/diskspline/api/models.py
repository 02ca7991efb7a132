"""
Pydantic data models for the disk B-spline call contract.

These models define the shapes of the values passed into and returned
from the spline engine.  The rendering layer that consumes the output
is not part of this package; keeping the schemas separate makes the
contract explicit and lets callers build inputs from plain dictionaries
(for example ``ControlDisk.model_validate({"center": {...}, "radius": 3})``).
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class Point(BaseModel):
    """Single 2D point."""

    x: float
    y: float


class ControlDisk(BaseModel):
    """A center point plus a radius; the unit of input shape control.

    Radii are expected to be non-negative but are not validated here.
    Disks are also used for evaluated points along the curve.
    """

    center: Point = Field(..., description="Center of the disk")
    radius: float = Field(..., description="Radius of the disk (expected to be >= 0)")

    @classmethod
    def from_xyr(cls, x: float, y: float, radius: float) -> "ControlDisk":
        """Build a disk from bare coordinates."""
        return cls(center=Point(x=x, y=y), radius=radius)

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.center.x, self.center.y, self.radius)


class Normal(BaseModel):
    """Unit normal to the centerline at a sample."""

    x: float
    y: float


class Sample(BaseModel):
    """An evaluated disk together with the parameter it was taken at."""

    u: float = Field(..., description="Curve parameter of the sample")
    disk: ControlDisk = Field(..., description="Interpolated disk at ``u``")


class SplineOptions(BaseModel):
    """Construction options for :class:`DiskBSpline`.

    ``degree`` and ``closed`` are fixed for the lifetime of a spline;
    changing them requires building a new one.
    """

    degree: int = Field(default=3, ge=1, description="Degree of the B-spline")
    closed: bool = Field(
        default=False,
        description="Whether the curve wraps around (periodic knot vector)",
    )
    # When enabled, lifecycle messages are logged and soft-failure
    # diagnostics are raised to WARNING level.  The DISKSPLINE_DEBUG
    # environment variable has the same effect.
    debug: bool = Field(default=False, description="Enable debug logging")
    maxSamples: int = Field(
        default=1000,
        ge=2,
        description="Upper bound on the number of adaptive samples used for outlines",
    )
    precision: int = Field(
        default=4,
        ge=0,
        description="Maximum number of decimals written to SVG path coordinates",
    )


class SVGPathData(BaseModel):
    """Path geometry produced for a spline.

    ``fillPath`` uses the SVG path commands ``M``, ``L``, ``A`` and ``Z``;
    ``skeletonPath`` only uses ``M`` and ``L``.  ``disks`` and ``normals``
    are aligned: ``normals[i]`` is the unit normal at ``disks[i]``.
    """

    fillPath: str = Field(default="", description="Closed outline of the variable-width stroke")
    skeletonPath: str = Field(default="", description="Polyline through the sample centers")
    disks: List[ControlDisk] = Field(default_factory=list, description="Sampled disks along the curve")
    normals: List[Normal] = Field(default_factory=list, description="Unit normal at each sampled disk")
