"""Immutable 2D primitives and shapes for the EuclidCAD construction board.

Every constructor validates its inputs and raises :class:`GeometryError` on
non-finite coordinates, zero-length segments and non-positive radii. Values are
never mutated; transforms return new instances. Comparisons go through an
explicit tolerance instead of exact float equality.
"""
from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Any, Dict, Tuple

import numpy as np

ZERO_TOLERANCE = 1e-9

Bounds = Tuple[float, float, float, float]


class GeometryError(ValueError):
    """Raised when a primitive or shape cannot be constructed."""


def _require_finite(**values: float) -> None:
    for name, value in values.items():
        if not isinstance(value, numbers.Real) or isinstance(value, bool):
            raise GeometryError(f"{name} must be a number, got {value!r}")
        if not math.isfinite(value):
            raise GeometryError(f"{name} must be finite, got {value!r}")


# ---------------------------------------------------------------------------
# Primitives


@dataclass(frozen=True, eq=False)
class Point2D:
    x: float
    y: float

    def __post_init__(self) -> None:
        _require_finite(x=self.x, y=self.y)
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))

    @classmethod
    def origin(cls) -> "Point2D":
        return cls(0.0, 0.0)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Point2D):
            return NotImplemented
        return self.is_close(other)

    # unhashable: equality is tolerance based
    __hash__ = None  # type: ignore[assignment]

    def __add__(self, other: "Vector2D") -> "Point2D":
        if not isinstance(other, Vector2D):
            return NotImplemented
        return Point2D(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point2D") -> "Vector2D":
        if not isinstance(other, Point2D):
            return NotImplemented
        return Vector2D(self.x - other.x, self.y - other.y)

    def is_close(self, other: "Point2D", tolerance: float = ZERO_TOLERANCE) -> bool:
        return abs(self.x - other.x) <= tolerance and abs(self.y - other.y) <= tolerance

    def distance_to(self, other: "Point2D") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def vector_to(self, other: "Point2D") -> "Vector2D":
        return other - self

    def midpoint(self, other: "Point2D") -> "Point2D":
        return Point2D((self.x + other.x) / 2.0, (self.y + other.y) / 2.0)

    def translate(self, dx: float, dy: float) -> "Point2D":
        return Point2D(self.x + dx, self.y + dy)

    def rotate_about(self, center: "Point2D", angle: float) -> "Point2D":
        """Rotate counter-clockwise by ``angle`` radians around ``center``."""
        return center + (self - center).rotate(angle)

    def mirror_across(self, axis: "Line2D") -> "Point2D":
        """Reflect across the infinite line through ``axis``."""
        foot = axis.project_onto_line(self)
        return Point2D(2.0 * foot.x - self.x, 2.0 * foot.y - self.y)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def to_json(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Point2D":
        return cls(float(data["x"]), float(data["y"]))

    def __repr__(self) -> str:
        return f"Point2D({self.x:.4f}, {self.y:.4f})"


@dataclass(frozen=True, eq=False)
class Vector2D:
    x: float
    y: float

    def __post_init__(self) -> None:
        _require_finite(x=self.x, y=self.y)
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector2D):
            return NotImplemented
        return abs(self.x - other.x) <= ZERO_TOLERANCE and abs(self.y - other.y) <= ZERO_TOLERANCE

    __hash__ = None  # type: ignore[assignment]

    def __add__(self, other: "Vector2D") -> "Vector2D":
        if not isinstance(other, Vector2D):
            return NotImplemented
        return Vector2D(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2D") -> "Vector2D":
        if not isinstance(other, Vector2D):
            return NotImplemented
        return Vector2D(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> "Vector2D":
        return Vector2D(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def __neg__(self) -> "Vector2D":
        return Vector2D(-self.x, -self.y)

    @property
    def magnitude(self) -> float:
        return math.hypot(self.x, self.y)

    def is_zero(self, tolerance: float = ZERO_TOLERANCE) -> bool:
        return self.magnitude < tolerance

    def dot(self, other: "Vector2D") -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: "Vector2D") -> float:
        """Z component of the 3D cross product."""
        return self.x * other.y - self.y * other.x

    def perpendicular(self) -> "Vector2D":
        return Vector2D(-self.y, self.x)

    def rotate(self, angle: float) -> "Vector2D":
        c, s = math.cos(angle), math.sin(angle)
        return Vector2D(self.x * c - self.y * s, self.x * s + self.y * c)

    def normalize(self) -> "UnitVector2D":
        length = self.magnitude
        if length < ZERO_TOLERANCE:
            raise GeometryError("Cannot normalize a zero-length vector")
        return UnitVector2D(self.x / length, self.y / length)

    def angle(self) -> float:
        """Polar angle in radians, in ``(-pi, pi]``."""
        if self.is_zero():
            raise GeometryError("Zero-length vector has no direction")
        return math.atan2(self.y, self.x)

    def angle_to(self, other: "Vector2D") -> float:
        """Unsigned angle between both vectors in ``[0, pi]``."""
        return abs(self.signed_angle_to(other))

    def signed_angle_to(self, other: "Vector2D") -> float:
        """Counter-clockwise angle from ``self`` to ``other`` via atan2(cross, dot)."""
        if self.is_zero() or other.is_zero():
            raise GeometryError("Cannot measure an angle against a zero-length vector")
        return math.atan2(self.cross(other), self.dot(other))

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.x:.4f}, {self.y:.4f})"


@dataclass(frozen=True, eq=False)
class UnitVector2D(Vector2D):
    """Vector of magnitude one. Build it with :meth:`Vector2D.normalize` or :meth:`from_angle`."""

    def __post_init__(self) -> None:
        super().__post_init__()
        if abs(math.hypot(self.x, self.y) - 1.0) > 1e-6:
            raise GeometryError(
                f"UnitVector2D requires magnitude 1, got {math.hypot(self.x, self.y):.6g}; use normalize()"
            )

    @classmethod
    def from_angle(cls, angle: float) -> "UnitVector2D":
        _require_finite(angle=angle)
        return cls(math.cos(angle), math.sin(angle))

    def perpendicular(self) -> "UnitVector2D":
        return UnitVector2D(-self.y, self.x)

    def rotate(self, angle: float) -> "UnitVector2D":
        rotated = Vector2D.rotate(self, angle)
        return UnitVector2D(rotated.x, rotated.y)

    def normalize(self) -> "UnitVector2D":
        return self


# ---------------------------------------------------------------------------
# Shapes


@dataclass(frozen=True, eq=False)
class Line2D:
    """Finite segment from ``start`` to ``end``."""

    start: Point2D
    end: Point2D

    def __post_init__(self) -> None:
        if self.start.is_close(self.end):
            raise GeometryError(f"Line endpoints coincide at {self.start!r}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Line2D):
            return NotImplemented
        return self.start == other.start and self.end == other.end

    __hash__ = None  # type: ignore[assignment]

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def direction(self) -> Vector2D:
        return self.end - self.start

    @property
    def unit_direction(self) -> UnitVector2D:
        return self.direction.normalize()

    @property
    def midpoint(self) -> Point2D:
        return self.start.midpoint(self.end)

    def point_at(self, t: float) -> Point2D:
        """Parametric evaluation, ``t=0`` at start and ``t=1`` at end."""
        return self.start + self.direction * t

    def parameter_of(self, point: Point2D) -> float:
        """Unclamped parameter of the projection of ``point`` onto the supporting line."""
        d = self.direction
        return (point - self.start).dot(d) / d.dot(d)

    def project_onto_line(self, point: Point2D) -> Point2D:
        return self.point_at(self.parameter_of(point))

    def closest_point_to(self, point: Point2D) -> Point2D:
        t = min(1.0, max(0.0, self.parameter_of(point)))
        return self.point_at(t)

    def distance_to_point(self, point: Point2D) -> float:
        return point.distance_to(self.closest_point_to(point))

    def distance_to_infinite_line(self, point: Point2D) -> float:
        return abs(self.direction.cross(point - self.start)) / self.length

    def contains_point(self, point: Point2D, tolerance: float = ZERO_TOLERANCE) -> bool:
        return self.distance_to_point(point) <= tolerance

    def reversed(self) -> "Line2D":
        return Line2D(self.end, self.start)

    def translate(self, dx: float, dy: float) -> "Line2D":
        return Line2D(self.start.translate(dx, dy), self.end.translate(dx, dy))

    def mirror_across(self, axis: "Line2D") -> "Line2D":
        return Line2D(self.start.mirror_across(axis), self.end.mirror_across(axis))

    def bounds(self) -> Bounds:
        return (
            min(self.start.x, self.end.x),
            min(self.start.y, self.end.y),
            max(self.start.x, self.end.x),
            max(self.start.y, self.end.y),
        )

    def to_json(self) -> Dict[str, Any]:
        return {"start": self.start.to_json(), "end": self.end.to_json()}

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Line2D":
        return cls(Point2D.from_json(data["start"]), Point2D.from_json(data["end"]))


@dataclass(frozen=True, eq=False)
class Circle2D:
    center: Point2D
    radius: float

    def __post_init__(self) -> None:
        _require_finite(radius=self.radius)
        if self.radius <= 0.0:
            raise GeometryError(f"Circle radius must be positive, got {self.radius!r}")
        object.__setattr__(self, "radius", float(self.radius))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Circle2D):
            return NotImplemented
        return self.center == other.center and abs(self.radius - other.radius) <= ZERO_TOLERANCE

    __hash__ = None  # type: ignore[assignment]

    @property
    def diameter(self) -> float:
        return 2.0 * self.radius

    @property
    def area(self) -> float:
        return math.pi * self.radius * self.radius

    @property
    def circumference(self) -> float:
        return 2.0 * math.pi * self.radius

    def contains_point(self, point: Point2D, tolerance: float = ZERO_TOLERANCE) -> bool:
        return self.center.distance_to(point) <= self.radius + tolerance

    def point_at_angle(self, angle: float) -> Point2D:
        return Point2D(self.center.x + self.radius * math.cos(angle), self.center.y + self.radius * math.sin(angle))

    def distance_to_circumference(self, point: Point2D) -> float:
        return abs(self.center.distance_to(point) - self.radius)

    def translate(self, dx: float, dy: float) -> "Circle2D":
        return Circle2D(self.center.translate(dx, dy), self.radius)

    def mirror_across(self, axis: Line2D) -> "Circle2D":
        return Circle2D(self.center.mirror_across(axis), self.radius)

    def bounds(self) -> Bounds:
        r = self.radius
        return (self.center.x - r, self.center.y - r, self.center.x + r, self.center.y + r)

    def to_json(self) -> Dict[str, Any]:
        return {"center": self.center.to_json(), "radius": self.radius}

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "Circle2D":
        return cls(Point2D.from_json(data["center"]), float(data["radius"]))


COG_INNER_RATIO = 0.6
COG_DEFAULT_TEETH = 12
COG_HOLE_RATIO = 0.3


@dataclass(frozen=True, eq=False)
class CogWheel:
    """Toothed wheel described by its outer tip radius and inner valley radius."""

    center: Point2D
    outer_radius: float
    inner_radius: float
    teeth_count: int = COG_DEFAULT_TEETH

    def __post_init__(self) -> None:
        _require_finite(outer_radius=self.outer_radius, inner_radius=self.inner_radius)
        if self.outer_radius <= 0.0 or self.inner_radius <= 0.0:
            raise GeometryError("Cog wheel radii must be positive")
        if self.inner_radius >= self.outer_radius:
            raise GeometryError(
                f"Cog wheel inner radius {self.inner_radius:g} must be smaller than outer radius {self.outer_radius:g}"
            )
        if int(self.teeth_count) != self.teeth_count or self.teeth_count < 3:
            raise GeometryError(f"Cog wheel needs at least 3 whole teeth, got {self.teeth_count!r}")
        object.__setattr__(self, "outer_radius", float(self.outer_radius))
        object.__setattr__(self, "inner_radius", float(self.inner_radius))
        object.__setattr__(self, "teeth_count", int(self.teeth_count))

    @classmethod
    def from_outer_radius(cls, center: Point2D, outer_radius: float, teeth_count: int = COG_DEFAULT_TEETH) -> "CogWheel":
        return cls(center, outer_radius, outer_radius * COG_INNER_RATIO, teeth_count)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CogWheel):
            return NotImplemented
        return (
            self.center == other.center
            and abs(self.outer_radius - other.outer_radius) <= ZERO_TOLERANCE
            and abs(self.inner_radius - other.inner_radius) <= ZERO_TOLERANCE
            and self.teeth_count == other.teeth_count
        )

    __hash__ = None  # type: ignore[assignment]

    def profile(self) -> np.ndarray:
        """Closed outline as an ``(N, 2)`` array, six vertices per tooth.

        Each tooth climbs from 0.9R to the tip radius R over +-0.2 of the
        angular pitch and then drops into two valley vertices on the inner
        radius.
        """
        step = 2.0 * math.pi / self.teeth_count
        base = np.arange(self.teeth_count, dtype=float)[:, None] * step
        offsets = np.array([-0.2, -0.1, 0.1, 0.2, 0.2, 0.8]) * step
        radii = np.array(
            [
                0.9 * self.outer_radius,
                self.outer_radius,
                self.outer_radius,
                0.9 * self.outer_radius,
                self.inner_radius,
                self.inner_radius,
            ]
        )
        angles = (base + offsets[None, :]).ravel()
        r = np.tile(radii, self.teeth_count)
        x = self.center.x + r * np.cos(angles)
        y = self.center.y + r * np.sin(angles)
        return np.column_stack((x, y))

    def outline(self) -> np.ndarray:
        """Closed tooth outline, the first vertex repeated at the end."""
        return closed_ring(self.profile())

    def distance_to_outline(self, point: Point2D) -> float:
        return outline_distance(point, self.outline())

    def center_hole(self) -> Circle2D:
        return Circle2D(self.center, self.inner_radius * COG_HOLE_RATIO)

    def area(self) -> float:
        """Outline area minus the center hole."""
        return polygon_area(self.profile()) - self.center_hole().area

    def bounds(self) -> Bounds:
        r = self.outer_radius
        return (self.center.x - r, self.center.y - r, self.center.x + r, self.center.y + r)

    def translate(self, dx: float, dy: float) -> "CogWheel":
        return CogWheel(self.center.translate(dx, dy), self.outer_radius, self.inner_radius, self.teeth_count)

    def mirror_across(self, axis: Line2D) -> "CogWheel":
        return CogWheel(self.center.mirror_across(axis), self.outer_radius, self.inner_radius, self.teeth_count)

    def to_json(self) -> Dict[str, Any]:
        return {
            "center": self.center.to_json(),
            "outer_radius": self.outer_radius,
            "inner_radius": self.inner_radius,
            "teeth_count": self.teeth_count,
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "CogWheel":
        return cls(
            Point2D.from_json(data["center"]),
            float(data["outer_radius"]),
            float(data["inner_radius"]),
            int(data.get("teeth_count", COG_DEFAULT_TEETH)),
        )


# ---------------------------------------------------------------------------
# Polygon helpers


def polygon_area(points: np.ndarray) -> float:
    """Return the absolute area spanned by a closed polygon."""
    if points.size == 0:
        return 0.0
    x = points[:, 0]
    y = points[:, 1]
    return float(0.5 * abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))))


def closed_ring(vertices: np.ndarray) -> np.ndarray:
    """Append the first row of an ``(N, 2)`` vertex array so the outline closes."""
    vertices = np.asarray(vertices, dtype=float).reshape(-1, 2)
    if vertices.shape[0] == 0:
        return vertices
    return np.vstack((vertices, vertices[:1]))


def outline_distance(point: Point2D, ring: np.ndarray) -> float:
    """Shortest distance from ``point`` to the edges of a closed ``ring``.

    Every consecutive row pair of ``ring`` is one edge, projected onto with a
    clamped parameter in a single vectorised pass.
    """
    if ring.shape[0] < 2:
        raise GeometryError("An outline needs at least two vertices")
    starts = ring[:-1]
    edges = ring[1:] - starts
    lengths_sq = np.einsum("ij,ij->i", edges, edges)
    offsets = np.array(point.as_tuple()) - starts
    t = np.divide(
        np.einsum("ij,ij->i", offsets, edges),
        lengths_sq,
        out=np.zeros_like(lengths_sq),
        where=lengths_sq > 0.0,
    )
    feet = starts + edges * np.clip(t, 0.0, 1.0)[:, None]
    return float(np.min(np.hypot(point.x - feet[:, 0], point.y - feet[:, 1])))


__all__ = [
    "ZERO_TOLERANCE",
    "GeometryError",
    "Point2D",
    "Vector2D",
    "UnitVector2D",
    "Line2D",
    "Circle2D",
    "CogWheel",
    "COG_INNER_RATIO",
    "COG_DEFAULT_TEETH",
    "polygon_area",
    "closed_ring",
    "outline_distance",
]
