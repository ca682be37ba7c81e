"""Closed-form 2D intersections and the all-pairs intersection aggregator."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .geometry import ZERO_TOLERANCE, Circle2D, GeometryError, Line2D, Point2D
from .elements import ElementType, GeometricElement, intersection_shapes

EPS = ZERO_TOLERANCE
DEDUPE_TOLERANCE = 10 * ZERO_TOLERANCE

Shape = Union[Line2D, Circle2D]


def _in_unit_range(t: float) -> bool:
    return -EPS <= t <= 1.0 + EPS


def line_intersection(a: Line2D, b: Line2D) -> Optional[Point2D]:
    """Intersection of the infinite lines through ``a`` and ``b``."""
    d1, d2 = a.direction, b.direction
    den = d1.cross(d2)
    if abs(den) < EPS:
        return None
    t = (b.start - a.start).cross(d2) / den
    return a.point_at(t)


def segment_intersection(a: Line2D, b: Line2D) -> Optional[Point2D]:
    """Intersection of two finite segments, ``None`` when parallel or disjoint."""
    d1, d2 = a.direction, b.direction
    den = d1.cross(d2)
    if abs(den) < EPS:
        return None
    offset = b.start - a.start
    t = offset.cross(d2) / den
    u = offset.cross(d1) / den
    if _in_unit_range(t) and _in_unit_range(u):
        return a.point_at(t)
    return None


def line_circle_intersections(line: Line2D, circle: Circle2D) -> List[Point2D]:
    """Points where the segment ``line`` meets the circumference of ``circle``.

    A tangent contact yields exactly one point. Chord points are filtered
    independently against the segment bounds.
    """
    t_foot = line.parameter_of(circle.center)
    foot = line.point_at(t_foot)
    distance = foot.distance_to(circle.center)
    if distance > circle.radius + EPS:
        return []
    if abs(distance - circle.radius) < EPS:
        return [foot] if _in_unit_range(t_foot) else []
    half_chord = math.sqrt(circle.radius * circle.radius - distance * distance)
    dt = half_chord / line.length
    points: List[Point2D] = []
    for t in (t_foot - dt, t_foot + dt):
        if _in_unit_range(t):
            points.append(line.point_at(t))
    return points


def circle_circle_intersections(c1: Circle2D, c2: Circle2D) -> List[Point2D]:
    """Intersection points of two circumferences.

    Coincident circles report no points rather than an infinite set.
    """
    d = c1.center.distance_to(c2.center)
    r1, r2 = c1.radius, c2.radius
    if d < EPS:
        return []
    if d > r1 + r2 + EPS or d < abs(r1 - r2) - EPS:
        return []
    axis = (c2.center - c1.center).normalize()
    if abs(d - (r1 + r2)) < EPS:
        return [c1.center + axis * r1]
    if abs(d - abs(r1 - r2)) < EPS:
        # internal tangency; the contact lies on the larger circle's side
        sign = 1.0 if r1 > r2 else -1.0
        return [c1.center + axis * (sign * r1)]
    a = (r1 * r1 - r2 * r2 + d * d) / (2.0 * d)
    h = math.sqrt(max(0.0, r1 * r1 - a * a))
    base = c1.center + axis * a
    offset = axis.perpendicular() * h
    return [base + offset, base + (-offset)]


def perpendicular_bisector(segment: Line2D, length: float) -> Line2D:
    """Segment of total ``length`` crossing ``segment`` at right angles through its midpoint."""
    if length <= 0.0:
        raise GeometryError(f"Bisector length must be positive, got {length!r}")
    normal = segment.unit_direction.perpendicular()
    half = normal * (length / 2.0)
    mid = segment.midpoint
    return Line2D(mid + (-half), mid + half)


def circle_through_3_points(p1: Point2D, p2: Point2D, p3: Point2D) -> Optional[Circle2D]:
    """Circumcircle of three points, ``None`` for collinear or repeated points."""
    if p1.is_close(p2) or p2.is_close(p3) or p1.is_close(p3):
        return None
    b1 = perpendicular_bisector(Line2D(p1, p2), 2.0)
    b2 = perpendicular_bisector(Line2D(p2, p3), 2.0)
    center = line_intersection(b1, b2)
    if center is None:
        return None
    return Circle2D(center, center.distance_to(p1))


def intersect_shapes(a: Shape, b: Shape) -> List[Point2D]:
    if isinstance(a, Line2D) and isinstance(b, Line2D):
        hit = segment_intersection(a, b)
        return [hit] if hit is not None else []
    if isinstance(a, Line2D) and isinstance(b, Circle2D):
        return line_circle_intersections(a, b)
    if isinstance(a, Circle2D) and isinstance(b, Line2D):
        return line_circle_intersections(b, a)
    if isinstance(a, Circle2D) and isinstance(b, Circle2D):
        return circle_circle_intersections(a, b)
    raise TypeError(f"Cannot intersect {type(a).__name__} with {type(b).__name__}")


@dataclass
class IntersectionInfo:
    point: Point2D
    elements: List[str] = field(default_factory=list)
    type: str = ""

    def to_json(self) -> dict:
        return {"point": self.point.to_json(), "elements": list(self.elements), "type": self.type}


def _merge(found: List[IntersectionInfo], point: Point2D, ids: Sequence[str], kind: str) -> None:
    for info in found:
        if info.point.is_close(point, DEDUPE_TOLERANCE):
            for element_id in ids:
                if element_id not in info.elements:
                    info.elements.append(element_id)
            return
    found.append(IntersectionInfo(point=point, elements=list(dict.fromkeys(ids)), type=kind))


def element_intersections(a: GeometricElement, b: GeometricElement) -> List[Point2D]:
    points: List[Point2D] = []
    for shape_a in intersection_shapes(a):
        for shape_b in intersection_shapes(b):
            points.extend(intersect_shapes(shape_a, shape_b))
    return points


def find_all_intersections(elements: Iterable[GeometricElement]) -> List[IntersectionInfo]:
    """Pairwise intersections across ``elements``, deduplicated by location.

    Point-point pairs are skipped. A location reached by several pairs is
    reported once with the union of contributing element ids.
    """
    items = list(elements)
    found: List[IntersectionInfo] = []
    for i in range(len(items)):
        for j in range(i + 1, len(items)):
            a, b = items[i], items[j]
            if a.type is ElementType.POINT and b.type is ElementType.POINT:
                continue
            kind = f"{a.type.value}-{b.type.value}"
            for point in element_intersections(a, b):
                _merge(found, point, (a.id, b.id), kind)
    return found


def intersections_on(element_id: str, intersections: Iterable[IntersectionInfo]) -> List[Point2D]:
    return [info.point for info in intersections if element_id in info.elements]


__all__ = [
    "DEDUPE_TOLERANCE",
    "IntersectionInfo",
    "circle_circle_intersections",
    "circle_through_3_points",
    "element_intersections",
    "find_all_intersections",
    "intersect_shapes",
    "intersections_on",
    "line_circle_intersections",
    "line_intersection",
    "perpendicular_bisector",
    "segment_intersection",
]
