"""Classical compass-and-straightedge constructions that can be dropped onto a board."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List

from .elements import ElementType, RectangleData
from .geometry import Circle2D, Line2D, Point2D
from .intersect2d import circle_circle_intersections, circle_through_3_points, perpendicular_bisector
from .settings import COLORS
from .tools import Draft

DEFAULT_CANVAS_WIDTH = 700.0
DEFAULT_CANVAS_HEIGHT = 500.0
GOLDEN_RATIO = (1.0 + math.sqrt(5.0)) / 2.0

ACCENT = COLORS["perpendicular"]
SIDE = COLORS["triangle"]


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


@dataclass(frozen=True)
class Frame:
    """Canvas centre and the working size derived from the canvas extent."""

    cx: float
    cy: float
    scale: float

    @classmethod
    def for_canvas(cls, width: float, height: float) -> "Frame":
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas size must be positive, got {width}x{height}")
        return cls(width / 2.0, height / 2.0, min(width, height) * 0.3)


Builder = Callable[[Frame], List[Draft]]


@dataclass(frozen=True)
class Construction:
    id: str
    name: str
    description: str
    difficulty: Difficulty
    steps: List[str] = field(default_factory=list)
    builder: Builder = field(default=lambda frame: [], repr=False, compare=False)

    def build(self, width: float = DEFAULT_CANVAS_WIDTH, height: float = DEFAULT_CANVAS_HEIGHT) -> List[Draft]:
        return self.builder(Frame.for_canvas(width, height))

    def summary(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "difficulty": self.difficulty.value,
            "steps": list(self.steps),
        }


def _point(p: Point2D, color: str = COLORS["point"]) -> Draft:
    return Draft(ElementType.POINT, p, color)


def _line(a: Point2D, b: Point2D, color: str = COLORS["line"]) -> Draft:
    return Draft(ElementType.LINE, Line2D(a, b), color)


def _circle(center: Point2D, radius: float) -> Draft:
    return Draft(ElementType.CIRCLE, Circle2D(center, radius), COLORS["circle"])


def _equilateral_triangle(f: Frame) -> List[Draft]:
    a = Point2D(f.cx - f.scale / 2, f.cy + f.scale / 4)
    b = Point2D(f.cx + f.scale / 2, f.cy + f.scale / 4)
    side = a.distance_to(b)
    c = Point2D(f.cx, f.cy + f.scale / 4 - side * math.sqrt(3.0) / 2)
    return [
        _line(a, b),
        _circle(a, side),
        _circle(b, side),
        _line(a, c, SIDE),
        _line(b, c, SIDE),
        _point(a),
        _point(b),
        _point(c),
    ]


def _perpendicular_bisector(f: Frame) -> List[Draft]:
    a = Point2D(f.cx - f.scale / 2, f.cy)
    b = Point2D(f.cx + f.scale / 2, f.cy)
    base = Line2D(a, b)
    return [
        Draft(ElementType.LINE, base, COLORS["line"]),
        Draft(ElementType.PERPENDICULAR, perpendicular_bisector(base, f.scale), ACCENT),
        _point(a),
        _point(b),
    ]


def _angle_bisector(f: Frame) -> List[Draft]:
    vertex = Point2D(f.cx - f.scale / 2, f.cy + f.scale / 4)
    opening = math.pi / 3
    radius = f.scale / 2
    ray_a = Point2D(vertex.x + f.scale, vertex.y)
    ray_b = Point2D(vertex.x + f.scale * math.cos(opening), vertex.y - f.scale * math.sin(opening))
    a = Point2D(vertex.x + radius, vertex.y)
    b = Point2D(vertex.x + radius * math.cos(opening), vertex.y - radius * math.sin(opening))
    arcs = circle_circle_intersections(Circle2D(a, radius), Circle2D(b, radius))
    c = max(arcs, key=vertex.distance_to)
    tip = vertex + (c - vertex).normalize() * f.scale
    return [
        _line(vertex, ray_a),
        _line(vertex, ray_b),
        _circle(vertex, radius),
        _circle(a, radius),
        _circle(b, radius),
        _line(vertex, tip, ACCENT),
        _point(vertex),
        _point(a),
        _point(b),
        _point(c),
    ]


def _circle_through_3_points(f: Frame) -> List[Draft]:
    a = Point2D(f.cx - f.scale / 3, f.cy + f.scale / 4)
    b = Point2D(f.cx + f.scale / 3, f.cy + f.scale / 4)
    c = Point2D(f.cx, f.cy - f.scale / 3)
    circle = circle_through_3_points(a, b, c)
    if circle is None:
        return []
    return [
        Draft(ElementType.CIRCLE, circle, COLORS["circle"]),
        _point(a),
        _point(b),
        _point(c),
        _point(circle.center, ACCENT),
    ]


def _regular_hexagon(f: Frame) -> List[Draft]:
    center = Point2D(f.cx, f.cy)
    radius = f.scale / 2
    ring = Circle2D(center, radius)
    vertices = [ring.point_at_angle(i * math.pi / 3) for i in range(6)]
    drafts = [_circle(center, radius)]
    drafts.extend(_line(vertices[i], vertices[(i + 1) % 6], SIDE) for i in range(6))
    drafts.extend(_point(v) for v in vertices)
    drafts.append(_point(center, ACCENT))
    return drafts


def _golden_rectangle(f: Frame) -> List[Draft]:
    side = f.scale
    left = f.cx - side * GOLDEN_RATIO / 2
    top = f.cy - side / 2
    a = Point2D(left, top)
    c = Point2D(left + side, top + side)
    e = Point2D(left + side / 2, top)
    reach = e.distance_to(c)
    far = Point2D(e.x + reach, top)
    return [
        Draft(ElementType.RECTANGLE, RectangleData(a, c), COLORS["rectangle"]),
        _circle(e, reach),
        Draft(ElementType.RECTANGLE, RectangleData(a, Point2D(far.x, top + side)), ACCENT),
        _point(e),
        _point(far),
    ]


CONSTRUCTIONS: Dict[str, Construction] = {
    item.id: item
    for item in (
        Construction(
            id="equilateral-triangle",
            name="Equilateral Triangle",
            description="Construct an equilateral triangle using compass and straightedge",
            difficulty=Difficulty.BEGINNER,
            steps=[
                "Draw a line segment AB of any length",
                "Place compass point at A, set width to length AB",
                "Draw an arc above the line segment",
                "Keep same compass width, place point at B",
                "Draw an arc intersecting the first arc at point C",
                "Connect A to C and B to C to complete the triangle",
            ],
            builder=_equilateral_triangle,
        ),
        Construction(
            id="perpendicular-bisector",
            name="Perpendicular Bisector",
            description="Find the perpendicular bisector of a line segment",
            difficulty=Difficulty.BEGINNER,
            steps=[
                "Draw line segment AB",
                "Place compass at A, draw arc above and below the line",
                "Keep same radius, place compass at B",
                "Draw arcs intersecting the previous arcs",
                "Connect the two intersection points with a straight line",
            ],
            builder=_perpendicular_bisector,
        ),
        Construction(
            id="angle-bisector",
            name="Angle Bisector",
            description="Bisect an angle using compass and straightedge",
            difficulty=Difficulty.INTERMEDIATE,
            steps=[
                "Place compass at angle vertex O",
                "Draw arc intersecting both rays at points A and B",
                "Place compass at A, draw arc inside the angle",
                "Keep same radius, place compass at B",
                "Draw arc intersecting previous arc at point C",
                "Draw line from O through C to bisect the angle",
            ],
            builder=_angle_bisector,
        ),
        Construction(
            id="circle-through-3-points",
            name="Circle Through 3 Points",
            description="Construct a circle passing through three given points",
            difficulty=Difficulty.INTERMEDIATE,
            steps=[
                "Given three points A, B, and C",
                "Draw line segments AB and BC",
                "Construct perpendicular bisector of AB",
                "Construct perpendicular bisector of BC",
                "Mark intersection O of the two perpendicular bisectors",
                "Use O as center, draw circle with radius OA",
            ],
            builder=_circle_through_3_points,
        ),
        Construction(
            id="regular-hexagon",
            name="Regular Hexagon",
            description="Construct a regular hexagon inscribed in a circle",
            difficulty=Difficulty.ADVANCED,
            steps=[
                "Draw circle with center O and any radius",
                "Mark point A anywhere on the circle",
                "Keep compass at same radius as circle",
                "Place compass at A, mark intersection B on circle",
                "Continue around circle marking points C, D, E, F",
                "Connect consecutive points to form hexagon",
            ],
            builder=_regular_hexagon,
        ),
        Construction(
            id="golden-rectangle",
            name="Golden Rectangle",
            description="Construct a rectangle with golden ratio proportions",
            difficulty=Difficulty.ADVANCED,
            steps=[
                "Draw square ABCD with side length 1",
                "Find midpoint E of side AB",
                "Draw arc from E through C to extend beyond AB",
                "Mark point F where arc intersects AB extended",
                "Complete rectangle AFGD using F as corner",
                "The ratio AF:AB equals the golden ratio",
            ],
            builder=_golden_rectangle,
        ),
    )
}


def get_construction(construction_id: str) -> Construction:
    try:
        return CONSTRUCTIONS[construction_id]
    except KeyError as exc:
        raise KeyError(f"Unknown construction '{construction_id}'") from exc


def list_constructions() -> List[Construction]:
    return list(CONSTRUCTIONS.values())


__all__ = [
    "CONSTRUCTIONS",
    "Construction",
    "Difficulty",
    "GOLDEN_RATIO",
    "get_construction",
    "list_constructions",
]
