"""Tagged geometric elements and the insertion-ordered element store."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .geometry import (
    Bounds,
    Circle2D,
    CogWheel,
    GeometryError,
    Line2D,
    Point2D,
)
from .settings import COLORS

logger = logging.getLogger(__name__)


class ElementType(str, Enum):
    POINT = "point"
    LINE = "line"
    CIRCLE = "circle"
    PERPENDICULAR = "perpendicular"
    TRIANGLE = "triangle"
    RECTANGLE = "rectangle"
    COGWHEEL = "cogwheel"


MIN_TRIANGLE_AREA = 1e-3


@dataclass(frozen=True)
class RectangleData:
    """Axis-aligned rectangle stored as two opposite corners.

    The corners are normalized so ``top_left`` holds the minimum coordinates.
    """

    top_left: Point2D
    bottom_right: Point2D

    def __post_init__(self) -> None:
        a, b = self.top_left, self.bottom_right
        object.__setattr__(self, "top_left", Point2D(min(a.x, b.x), min(a.y, b.y)))
        object.__setattr__(self, "bottom_right", Point2D(max(a.x, b.x), max(a.y, b.y)))
        if self.width <= 0.0 or self.height <= 0.0:
            raise GeometryError(f"Rectangle needs a positive width and height, got {self.width:g}x{self.height:g}")

    @property
    def width(self) -> float:
        return self.bottom_right.x - self.top_left.x

    @property
    def height(self) -> float:
        return self.bottom_right.y - self.top_left.y

    @property
    def area(self) -> float:
        return self.width * self.height

    def corners(self) -> List[Point2D]:
        tl, br = self.top_left, self.bottom_right
        return [tl, Point2D(br.x, tl.y), br, Point2D(tl.x, br.y)]

    def edges(self) -> List[Line2D]:
        c = self.corners()
        return [Line2D(c[i], c[(i + 1) % 4]) for i in range(4)]

    def contains_point(self, point: Point2D, tolerance: float = 0.0) -> bool:
        return (
            self.top_left.x - tolerance <= point.x <= self.bottom_right.x + tolerance
            and self.top_left.y - tolerance <= point.y <= self.bottom_right.y + tolerance
        )

    def translate(self, dx: float, dy: float) -> "RectangleData":
        return RectangleData(self.top_left.translate(dx, dy), self.bottom_right.translate(dx, dy))

    def bounds(self) -> Bounds:
        return (self.top_left.x, self.top_left.y, self.bottom_right.x, self.bottom_right.y)

    def to_json(self) -> Dict[str, Any]:
        return {
            "top_left": self.top_left.to_json(),
            "bottom_right": self.bottom_right.to_json(),
            "width": self.width,
            "height": self.height,
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "RectangleData":
        return cls(Point2D.from_json(data["top_left"]), Point2D.from_json(data["bottom_right"]))


@dataclass(frozen=True)
class TriangleData:
    a: Point2D
    b: Point2D
    c: Point2D

    def __post_init__(self) -> None:
        if self.area <= MIN_TRIANGLE_AREA:
            raise GeometryError(f"Triangle is degenerate (area {self.area:.3g})")

    @property
    def area(self) -> float:
        return abs((self.b - self.a).cross(self.c - self.a)) / 2.0

    def vertices(self) -> List[Point2D]:
        return [self.a, self.b, self.c]

    def edges(self) -> List[Line2D]:
        return [Line2D(self.a, self.b), Line2D(self.b, self.c), Line2D(self.c, self.a)]

    def contains_point(self, point: Point2D) -> bool:
        d1 = (self.b - self.a).cross(point - self.a)
        d2 = (self.c - self.b).cross(point - self.b)
        d3 = (self.a - self.c).cross(point - self.c)
        has_neg = d1 < 0 or d2 < 0 or d3 < 0
        has_pos = d1 > 0 or d2 > 0 or d3 > 0
        return not (has_neg and has_pos)

    def translate(self, dx: float, dy: float) -> "TriangleData":
        return TriangleData(self.a.translate(dx, dy), self.b.translate(dx, dy), self.c.translate(dx, dy))

    def mirror_across(self, axis: Line2D) -> "TriangleData":
        return TriangleData(self.a.mirror_across(axis), self.b.mirror_across(axis), self.c.mirror_across(axis))

    def bounds(self) -> Bounds:
        xs = [p.x for p in self.vertices()]
        ys = [p.y for p in self.vertices()]
        return (min(xs), min(ys), max(xs), max(ys))

    def to_json(self) -> Dict[str, Any]:
        return {"a": self.a.to_json(), "b": self.b.to_json(), "c": self.c.to_json()}

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "TriangleData":
        return cls(Point2D.from_json(data["a"]), Point2D.from_json(data["b"]), Point2D.from_json(data["c"]))


ElementData = Union[Point2D, Line2D, Circle2D, TriangleData, RectangleData, CogWheel]

PAYLOAD_TYPES: Dict[ElementType, type] = {
    ElementType.POINT: Point2D,
    ElementType.LINE: Line2D,
    ElementType.PERPENDICULAR: Line2D,
    ElementType.CIRCLE: Circle2D,
    ElementType.TRIANGLE: TriangleData,
    ElementType.RECTANGLE: RectangleData,
    ElementType.COGWHEEL: CogWheel,
}


@dataclass(frozen=True)
class GeometricElement:
    """One committed element. ``type`` always agrees with the class of ``data``.

    Selection is tracked by :class:`~euclidcad_playground.selection.SelectionState`,
    not on the element itself.
    """

    id: str
    type: ElementType
    data: ElementData
    color: str
    hidden: bool = False

    def __post_init__(self) -> None:
        kind = ElementType(self.type)
        object.__setattr__(self, "type", kind)
        expected = PAYLOAD_TYPES[kind]
        if not isinstance(self.data, expected):
            raise TypeError(f"{kind.value} element needs {expected.__name__} data, got {type(self.data).__name__}")

    def with_data(self, data: ElementData) -> "GeometricElement":
        return replace(self, data=data)

    def with_id(self, element_id: str) -> "GeometricElement":
        return replace(self, id=element_id)

    def with_hidden(self, hidden: bool = True) -> "GeometricElement":
        return replace(self, hidden=hidden)

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "color": self.color,
            "hidden": self.hidden,
            "data": self.data.to_json(),
        }

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "GeometricElement":
        kind = ElementType(payload["type"])
        data = PAYLOAD_TYPES[kind].from_json(payload["data"])
        return cls(
            id=str(payload["id"]),
            type=kind,
            data=data,
            color=str(payload.get("color", COLORS[kind.value])),
            hidden=bool(payload.get("hidden", False)),
        )


# ---------------------------------------------------------------------------
# Per-kind helpers


def snap_points(element: GeometricElement) -> List[Point2D]:
    """Vertices offered to the snap resolver for ``element``."""
    data = element.data
    if element.type is ElementType.POINT:
        return [data]
    if element.type in (ElementType.LINE, ElementType.PERPENDICULAR):
        return [data.start, data.end]
    if element.type in (ElementType.CIRCLE, ElementType.COGWHEEL):
        return [data.center]
    if element.type is ElementType.RECTANGLE:
        return data.corners()
    if element.type is ElementType.TRIANGLE:
        return data.vertices()
    raise TypeError(f"Unhandled element type {element.type!r}")


def intersection_shapes(element: GeometricElement) -> List[Union[Line2D, Circle2D]]:
    """Segments and circles that take part in intersection computation."""
    data = element.data
    if element.type in (ElementType.POINT, ElementType.COGWHEEL):
        return []
    if element.type in (ElementType.LINE, ElementType.PERPENDICULAR):
        return [data]
    if element.type is ElementType.CIRCLE:
        return [data]
    if element.type in (ElementType.RECTANGLE, ElementType.TRIANGLE):
        return data.edges()
    raise TypeError(f"Unhandled element type {element.type!r}")


def hit_test(element: GeometricElement, point: Point2D, tolerance: float) -> bool:
    """True when ``point`` lies within ``tolerance`` of the element's outline."""
    data = element.data
    if element.type is ElementType.POINT:
        return point.distance_to(data) <= tolerance
    if element.type in (ElementType.LINE, ElementType.PERPENDICULAR):
        return data.distance_to_point(point) <= tolerance
    if element.type is ElementType.CIRCLE:
        return data.distance_to_circumference(point) <= tolerance or point.distance_to(data.center) <= tolerance
    if element.type in (ElementType.RECTANGLE, ElementType.TRIANGLE):
        return any(edge.distance_to_point(point) <= tolerance for edge in data.edges())
    if element.type is ElementType.COGWHEEL:
        return (
            data.distance_to_outline(point) <= tolerance
            or data.center_hole().distance_to_circumference(point) <= tolerance
            or point.distance_to(data.center) <= tolerance
        )
    raise TypeError(f"Unhandled element type {element.type!r}")


def translate_data(element: GeometricElement, dx: float, dy: float) -> ElementData:
    if element.type not in PAYLOAD_TYPES:
        raise TypeError(f"Unhandled element type {element.type!r}")
    return element.data.translate(dx, dy)


def element_bounds(element: GeometricElement) -> Bounds:
    if element.type is ElementType.POINT:
        p = element.data
        return (p.x, p.y, p.x, p.y)
    if element.type not in PAYLOAD_TYPES:
        raise TypeError(f"Unhandled element type {element.type!r}")
    return element.data.bounds()


def find_element_at(
    elements: Iterable[GeometricElement],
    point: Point2D,
    tolerance: float,
    *,
    include_hidden: bool = False,
) -> Optional[GeometricElement]:
    """First element in store order whose outline passes within ``tolerance``."""
    for element in elements:
        if element.hidden and not include_hidden:
            continue
        if hit_test(element, point, tolerance):
            return element
    return None


def elements_to_json(elements: Iterable[GeometricElement]) -> List[Dict[str, Any]]:
    return [element.to_json() for element in elements]


def elements_from_json(items: Iterable[Dict[str, Any]]) -> List[GeometricElement]:
    return [GeometricElement.from_json(item) for item in items]


def snapshot_key(elements: Sequence[GeometricElement]) -> str:
    """Canonical JSON text used to compare two store states."""
    return json.dumps(elements_to_json(elements), sort_keys=True)


# ---------------------------------------------------------------------------
# Store


class ElementStore:
    """Flat, insertion-ordered element collection with unique ids."""

    def __init__(self, elements: Iterable[GeometricElement] = ()) -> None:
        self._elements: List[GeometricElement] = []
        self._counter = 1
        self.restore(tuple(elements))

    def __iter__(self) -> Iterator[GeometricElement]:
        return iter(list(self._elements))

    def __len__(self) -> int:
        return len(self._elements)

    def __contains__(self, element_id: object) -> bool:
        return any(element.id == element_id for element in self._elements)

    def ids(self) -> List[str]:
        return [element.id for element in self._elements]

    def get(self, element_id: str) -> Optional[GeometricElement]:
        for element in self._elements:
            if element.id == element_id:
                return element
        return None

    def visible(self, show_hidden: bool = False) -> List[GeometricElement]:
        return [element for element in self._elements if show_hidden or not element.hidden]

    def next_id(self) -> str:
        element_id = f"E{self._counter:04d}"
        self._counter += 1
        return element_id

    def create(self, kind: ElementType, data: ElementData, color: Optional[str] = None) -> GeometricElement:
        """Build an element with a fresh id without inserting it."""
        kind = ElementType(kind)
        return GeometricElement(id=self.next_id(), type=kind, data=data, color=color or COLORS[kind.value])

    def add(self, kind: ElementType, data: ElementData, color: Optional[str] = None) -> GeometricElement:
        element = self.create(kind, data, color)
        self._elements.append(element)
        logger.debug("Added %s %s", element.type.value, element.id)
        return element

    def insert(self, element: GeometricElement) -> None:
        if element.id in self:
            raise ValueError(f"Duplicate element id '{element.id}'")
        self._elements.append(element)

    def replace(self, element: GeometricElement) -> None:
        for index, current in enumerate(self._elements):
            if current.id == element.id:
                self._elements[index] = element
                return
        raise KeyError(element.id)

    def remove(self, ids: Iterable[str]) -> int:
        doomed = set(ids)
        before = len(self._elements)
        self._elements = [element for element in self._elements if element.id not in doomed]
        return before - len(self._elements)

    def clear(self) -> None:
        self._elements = []

    def snapshot(self) -> Tuple[GeometricElement, ...]:
        return tuple(self._elements)

    def restore(self, elements: Sequence[GeometricElement]) -> None:
        seen = set()
        for element in elements:
            if element.id in seen:
                raise ValueError(f"Duplicate element id '{element.id}'")
            seen.add(element.id)
        self._elements = list(elements)
        self._reseed_counter()

    def _reseed_counter(self) -> None:
        max_seen = self._counter - 1
        for element in self._elements:
            if element.id.startswith("E"):
                try:
                    max_seen = max(max_seen, int(element.id[1:]))
                except ValueError:
                    continue
        self._counter = max_seen + 1


__all__ = [
    "ElementData",
    "ElementStore",
    "ElementType",
    "GeometricElement",
    "PAYLOAD_TYPES",
    "RectangleData",
    "TriangleData",
    "element_bounds",
    "elements_from_json",
    "elements_to_json",
    "find_element_at",
    "hit_test",
    "intersection_shapes",
    "snap_points",
    "snapshot_key",
    "translate_data",
]
