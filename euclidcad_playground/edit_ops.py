"""Core edit operations for EuclidCAD (trim / mirror / window and crossing tests)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .elements import (
    ElementData,
    ElementType,
    PAYLOAD_TYPES,
    GeometricElement,
    RectangleData,
    element_bounds,
    intersection_shapes,
    snap_points,
)
from .geometry import ZERO_TOLERANCE, Line2D, Point2D
from .intersect2d import segment_intersection

Mirrored = List[Tuple[ElementType, ElementData]]


@dataclass(frozen=True)
class SelectionBox:
    """Axis-aligned selection rectangle built from the two clicks that span it."""

    left: float
    top: float
    right: float
    bottom: float
    window: bool

    @classmethod
    def from_clicks(cls, start: Point2D, end: Point2D) -> "SelectionBox":
        # dragging toward +x is a window selection, toward -x a crossing one
        return cls(
            left=min(start.x, end.x),
            top=min(start.y, end.y),
            right=max(start.x, end.x),
            bottom=max(start.y, end.y),
            window=end.x > start.x,
        )

    def contains(self, point: Point2D) -> bool:
        return self.left <= point.x <= self.right and self.top <= point.y <= self.bottom

    def encloses(self, bounds: Tuple[float, float, float, float]) -> bool:
        min_x, min_y, max_x, max_y = bounds
        return self.left <= min_x and max_x <= self.right and self.top <= min_y and max_y <= self.bottom

    def edges(self) -> List[Line2D]:
        corners = [
            Point2D(self.left, self.top),
            Point2D(self.right, self.top),
            Point2D(self.right, self.bottom),
            Point2D(self.left, self.bottom),
        ]
        edges: List[Line2D] = []
        for i in range(4):
            a, b = corners[i], corners[(i + 1) % 4]
            if not a.is_close(b):
                edges.append(Line2D(a, b))
        return edges

    def distance_to(self, point: Point2D) -> float:
        closest = Point2D(min(max(point.x, self.left), self.right), min(max(point.y, self.top), self.bottom))
        return point.distance_to(closest)


def _segment_crosses(segment: Line2D, box: SelectionBox) -> bool:
    if box.contains(segment.start) or box.contains(segment.end):
        return True
    return any(segment_intersection(segment, edge) is not None for edge in box.edges())


def _round_crosses(center: Point2D, radius: float, box: SelectionBox) -> bool:
    return box.contains(center) or box.distance_to(center) <= radius


def element_in_window(element: GeometricElement, box: SelectionBox) -> bool:
    """True when the element lies entirely inside ``box``."""
    if element.type not in (
        ElementType.POINT,
        ElementType.LINE,
        ElementType.PERPENDICULAR,
        ElementType.CIRCLE,
        ElementType.TRIANGLE,
        ElementType.RECTANGLE,
        ElementType.COGWHEEL,
    ):
        raise TypeError(f"Unhandled element type {element.type!r}")
    return box.encloses(element_bounds(element))


def element_crosses(element: GeometricElement, box: SelectionBox) -> bool:
    """True when any part of the element overlaps ``box``."""
    data = element.data
    if element.type is ElementType.POINT:
        return box.contains(data)
    if element.type in (ElementType.LINE, ElementType.PERPENDICULAR, ElementType.TRIANGLE, ElementType.RECTANGLE):
        if any(box.contains(vertex) for vertex in snap_points(element)):
            return True
        return any(_segment_crosses(edge, box) for edge in intersection_shapes(element))
    if element.type is ElementType.CIRCLE:
        return _round_crosses(data.center, data.radius, box)
    if element.type is ElementType.COGWHEEL:
        return _round_crosses(data.center, data.outer_radius, box)
    raise TypeError(f"Unhandled element type {element.type!r}")


def select_in_box(elements: Iterable[GeometricElement], start: Point2D, end: Point2D) -> List[str]:
    """Ids picked by a selection rectangle, in store order."""
    box = SelectionBox.from_clicks(start, end)
    test = element_in_window if box.window else element_crosses
    return [element.id for element in elements if test(element, box)]


def trim_segment(
    segment: Line2D,
    click: Point2D,
    cut_points: Sequence[Point2D],
    min_length: float,
) -> Optional[List[Line2D]]:
    """Remove the piece of ``segment`` between the two cut points nearest ``click``.

    Returns ``None`` when fewer than two cut points are known, otherwise the
    surviving outer pieces longer than ``min_length`` (possibly none).
    """
    if len(cut_points) < 2:
        return None
    nearest = sorted(cut_points, key=lambda p: click.distance_to(p))[:2]
    near, far = sorted(nearest, key=segment.parameter_of)
    pieces: List[Line2D] = []
    if segment.start.distance_to(near) > min_length:
        pieces.append(Line2D(segment.start, near))
    if far.distance_to(segment.end) > min_length:
        pieces.append(Line2D(far, segment.end))
    return pieces


def _axis_aligned(axis: Line2D) -> bool:
    d = axis.unit_direction
    return abs(d.x) < ZERO_TOLERANCE or abs(d.y) < ZERO_TOLERANCE


def mirror_element(element: GeometricElement, axis: Line2D) -> Mirrored:
    """Reflected copy of ``element`` as ``(type, data)`` pairs.

    A rectangle reflected across an oblique axis is no longer axis-aligned, so
    it comes back as its four edges.
    """
    data = element.data
    if element.type is ElementType.RECTANGLE:
        if _axis_aligned(axis):
            return [
                (
                    ElementType.RECTANGLE,
                    RectangleData(data.top_left.mirror_across(axis), data.bottom_right.mirror_across(axis)),
                )
            ]
        return [(ElementType.LINE, edge.mirror_across(axis)) for edge in data.edges()]
    if element.type in PAYLOAD_TYPES:
        return [(element.type, data.mirror_across(axis))]
    raise TypeError(f"Unhandled element type {element.type!r}")


__all__ = [
    "SelectionBox",
    "element_crosses",
    "element_in_window",
    "mirror_element",
    "select_in_box",
    "trim_segment",
]
