"""Click handlers for the EuclidCAD construction tools.

Every tool is a plain function ``handler(point, points, ctx) -> ToolResult``.
``point`` is the committed click (already snapped for drawing tools),
``points`` the clicks accumulated so far and ``ctx`` a read-only view of the
board. Handlers never touch the element store; they describe what to add,
remove or update and the :class:`~euclidcad_playground.board.Board` applies it.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple

from .edit_ops import mirror_element, select_in_box, trim_segment
from .elements import (
    ElementData,
    ElementType,
    GeometricElement,
    RectangleData,
    TriangleData,
    find_element_at,
)
from .geometry import Circle2D, CogWheel, Line2D, Point2D, UnitVector2D
from .intersect2d import IntersectionInfo, intersections_on, perpendicular_bisector
from .settings import (
    BISECTOR_LENGTH,
    COLORS,
    TRIM_MIN_LENGTH,
    CanvasSettings,
    DynamicInputState,
)


class ToolKind(str, Enum):
    SELECT = "select"
    POINT = "point"
    LINE = "line"
    CIRCLE = "circle"
    RECTANGLE = "rectangle"
    TRIANGLE = "triangle"
    PERPENDICULAR = "perpendicular"
    MIRROR = "mirror"
    MOVE = "move"
    COPY = "copy"
    TRIM = "trim"
    FILLET = "fillet"
    COGWHEEL = "cogwheel"
    MEASURE = "measure"
    DELETE = "delete"
    ARRAY = "array"
    EXTEND = "extend"


UNIMPLEMENTED_TOOLS: FrozenSet[ToolKind] = frozenset({ToolKind.ARRAY, ToolKind.EXTEND})

# Tools whose clicks go through the snap resolver before reaching the handler.
SNAPPING_TOOLS: FrozenSet[ToolKind] = frozenset(
    {
        ToolKind.POINT,
        ToolKind.LINE,
        ToolKind.CIRCLE,
        ToolKind.RECTANGLE,
        ToolKind.TRIANGLE,
        ToolKind.PERPENDICULAR,
        ToolKind.MIRROR,
        ToolKind.FILLET,
        ToolKind.COGWHEEL,
        ToolKind.MEASURE,
    }
)


@dataclass(frozen=True)
class Modifiers:
    """Keyboard state at click time. ``toggle`` is Ctrl or Cmd."""

    toggle: bool = False

    @classmethod
    def coerce(cls, value: object) -> "Modifiers":
        if value is None:
            return cls()
        if isinstance(value, Modifiers):
            return value
        if isinstance(value, dict):
            return cls(toggle=bool(value.get("toggle") or value.get("ctrl") or value.get("meta")))
        if isinstance(value, str):
            value = [value]
        flags = {str(item).lower() for item in value}  # type: ignore[union-attr]
        return cls(toggle=bool(flags & {"toggle", "ctrl", "control", "meta", "cmd"}))


@dataclass(frozen=True)
class ToolContext:
    """Read-only board state handed to a tool handler.

    ``elements`` are the elements the user can currently interact with, in
    store order (hidden ones are already filtered out unless shown).
    """

    raw_point: Point2D
    elements: Tuple[GeometricElement, ...]
    intersections: Tuple[IntersectionInfo, ...]
    selection: Tuple[str, ...]
    settings: CanvasSettings
    dynamic_input: DynamicInputState
    modifiers: Modifiers = field(default_factory=Modifiers)

    def element_at(self, point: Optional[Point2D] = None) -> Optional[GeometricElement]:
        return find_element_at(self.elements, point or self.raw_point, self.settings.tolerance, include_hidden=True)

    def element(self, element_id: str) -> Optional[GeometricElement]:
        for element in self.elements:
            if element.id == element_id:
                return element
        return None

    def selected_elements(self) -> List[GeometricElement]:
        chosen = set(self.selection)
        return [element for element in self.elements if element.id in chosen]


@dataclass(frozen=True)
class Draft:
    """An element to be created; the board assigns its id."""

    type: ElementType
    data: ElementData
    color: str


@dataclass(frozen=True)
class ToolResult:
    points: Tuple[Point2D, ...] = ()
    awaiting_input: bool = False
    added: Tuple[Draft, ...] = ()
    removed: Tuple[str, ...] = ()
    updated: Tuple[GeometricElement, ...] = ()
    selection: Optional[Tuple[str, ...]] = None
    measurement: Optional[float] = None

    @property
    def changes_store(self) -> bool:
        return bool(self.added or self.removed or self.updated)


Handler = Callable[[Point2D, Tuple[Point2D, ...], ToolContext], ToolResult]


def _await(points: Sequence[Point2D], **extra) -> ToolResult:
    return ToolResult(points=tuple(points), awaiting_input=True, **extra)


def _draft(kind: ElementType, data: ElementData, color: Optional[str] = None) -> Draft:
    return Draft(kind, data, color or COLORS[kind.value])


def _point_drafts(points: Sequence[Point2D], ctx: ToolContext) -> List[Draft]:
    """Point elements for ``points`` that do not already exist within tolerance."""
    tol = ctx.settings.tolerance
    known = [element.data for element in ctx.elements if element.type is ElementType.POINT]
    drafts: List[Draft] = []
    for point in points:
        if any(point.is_close(existing, tol) for existing in known):
            continue
        known.append(point)
        drafts.append(_draft(ElementType.POINT, point))
    return drafts


def _dynamic(ctx: ToolContext) -> bool:
    return ctx.dynamic_input.show_dynamic_input


# ---------------------------------------------------------------------------
# Drawing tools


def point_tool(point: Point2D, points: Tuple[Point2D, ...], ctx: ToolContext) -> ToolResult:
    return ToolResult(added=tuple(_point_drafts([point], ctx)))


def line_tool(point: Point2D, points: Tuple[Point2D, ...], ctx: ToolContext) -> ToolResult:
    clicks = points + (point,)
    if len(clicks) == 1 and _dynamic(ctx):
        direction = UnitVector2D.from_angle(math.radians(ctx.dynamic_input.dynamic_angle))
        end = point + direction * ctx.dynamic_input.dynamic_distance
        clicks = (point, end)
    if len(clicks) < 2:
        return _await(clicks)
    start, end = clicks[0], clicks[1]
    line = Line2D(start, end)
    return ToolResult(added=(_draft(ElementType.LINE, line), *_point_drafts([start, end], ctx)))


def circle_tool(point: Point2D, points: Tuple[Point2D, ...], ctx: ToolContext) -> ToolResult:
    clicks = points + (point,)
    if len(clicks) == 1 and _dynamic(ctx):
        circle = Circle2D(point, ctx.dynamic_input.dynamic_distance)
    elif len(clicks) == 2:
        circle = Circle2D(clicks[0], clicks[0].distance_to(clicks[1]))
    else:
        return _await(clicks)
    return ToolResult(added=(_draft(ElementType.CIRCLE, circle), *_point_drafts([circle.center], ctx)))


def rectangle_tool(point: Point2D, points: Tuple[Point2D, ...], ctx: ToolContext) -> ToolResult:
    clicks = points + (point,)
    if len(clicks) < 2:
        return _await(clicks)
    return ToolResult(added=(_draft(ElementType.RECTANGLE, RectangleData(clicks[0], clicks[1])),))


def triangle_tool(point: Point2D, points: Tuple[Point2D, ...], ctx: ToolContext) -> ToolResult:
    clicks = points + (point,)
    if len(clicks) < 3:
        return _await(clicks)
    return ToolResult(added=(_draft(ElementType.TRIANGLE, TriangleData(*clicks[:3])),))


def perpendicular_tool(point: Point2D, points: Tuple[Point2D, ...], ctx: ToolContext) -> ToolResult:
    clicks = points + (point,)
    if len(clicks) < 2:
        return _await(clicks)
    base = Line2D(clicks[0], clicks[1])
    bisector = perpendicular_bisector(base, BISECTOR_LENGTH)
    return ToolResult(
        added=(
            _draft(ElementType.LINE, base),
            _draft(ElementType.PERPENDICULAR, bisector),
            *_point_drafts([base.start, base.end], ctx),
        )
    )


def fillet_tool(point: Point2D, points: Tuple[Point2D, ...], ctx: ToolContext) -> ToolResult:
    """Auxiliary circle centred between the two clicks.

    This stands in for a tangent-arc fillet. The radius is always the
    configured dynamic distance, whether or not dynamic input is shown.
    """
    clicks = points + (point,)
    if len(clicks) < 2:
        return _await(clicks)
    radius = ctx.dynamic_input.dynamic_distance
    circle = Circle2D(clicks[0].midpoint(clicks[1]), radius)
    return ToolResult(added=(_draft(ElementType.CIRCLE, circle),))


def cogwheel_tool(point: Point2D, points: Tuple[Point2D, ...], ctx: ToolContext) -> ToolResult:
    clicks = points + (point,)
    if len(clicks) < 2:
        return _await(clicks)
    center = clicks[0]
    wheel = CogWheel.from_outer_radius(center, center.distance_to(clicks[1]))
    return ToolResult(added=(_draft(ElementType.COGWHEEL, wheel), *_point_drafts([center], ctx)))


def measure_tool(point: Point2D, points: Tuple[Point2D, ...], ctx: ToolContext) -> ToolResult:
    clicks = points + (point,)
    if len(clicks) < 2:
        return _await(clicks)
    return ToolResult(measurement=clicks[0].distance_to(clicks[1]))


# ---------------------------------------------------------------------------
# Editing tools


def select_tool(point: Point2D, points: Tuple[Point2D, ...], ctx: ToolContext) -> ToolResult:
    if points:
        hits = select_in_box(ctx.elements, points[0], point)
        if ctx.modifiers.toggle:
            hits = list(ctx.selection) + hits
        return ToolResult(selection=tuple(hits))
    hit = ctx.element_at()
    if hit is None:
        return _await((point,))
    if ctx.modifiers.toggle:
        if hit.id in ctx.selection:
            return ToolResult(selection=tuple(sid for sid in ctx.selection if sid != hit.id))
        return ToolResult(selection=ctx.selection + (hit.id,))
    return ToolResult(selection=(hit.id,))


def _anchor(point: Point2D, ctx: ToolContext) -> ToolResult:
    if ctx.selection:
        return _await((point,))
    hit = ctx.element_at()
    if hit is None:
        return ToolResult()
    return _await((point,), selection=(hit.id,))


def move_tool(point: Point2D, points: Tuple[Point2D, ...], ctx: ToolContext) -> ToolResult:
    if not points:
        return _anchor(point, ctx)
    offset = point - points[0]
    moved = tuple(element.with_data(element.data.translate(offset.x, offset.y)) for element in ctx.selected_elements())
    return ToolResult(updated=moved)


def copy_tool(point: Point2D, points: Tuple[Point2D, ...], ctx: ToolContext) -> ToolResult:
    if not points:
        return _anchor(point, ctx)
    offset = point - points[0]
    copies = tuple(
        _draft(element.type, element.data.translate(offset.x, offset.y), element.color)
        for element in ctx.selected_elements()
    )
    return ToolResult(added=copies)


def mirror_tool(point: Point2D, points: Tuple[Point2D, ...], ctx: ToolContext) -> ToolResult:
    if not ctx.selection:
        hit = ctx.element_at()
        return ToolResult(selection=(hit.id,)) if hit is not None else ToolResult()
    clicks = points + (point,)
    if len(clicks) < 2:
        return _await(clicks)
    axis = Line2D(clicks[0], clicks[1])
    drafts: List[Draft] = []
    for element in ctx.selected_elements():
        for kind, data in mirror_element(element, axis):
            drafts.append(_draft(kind, data, element.color))
    drafts.append(_draft(ElementType.LINE, axis, COLORS["perpendicular"]))
    return ToolResult(added=tuple(drafts))


def trim_tool(point: Point2D, points: Tuple[Point2D, ...], ctx: ToolContext) -> ToolResult:
    hit = ctx.element_at()
    if hit is None or hit.type not in (ElementType.LINE, ElementType.PERPENDICULAR):
        return ToolResult()
    pieces = trim_segment(hit.data, ctx.raw_point, intersections_on(hit.id, ctx.intersections), TRIM_MIN_LENGTH)
    if pieces is None:
        return ToolResult()
    return ToolResult(removed=(hit.id,), added=tuple(_draft(hit.type, piece, hit.color) for piece in pieces))


def delete_tool(point: Point2D, points: Tuple[Point2D, ...], ctx: ToolContext) -> ToolResult:
    hit = ctx.element_at()
    return ToolResult(removed=(hit.id,)) if hit is not None else ToolResult()


TOOL_HANDLERS: Dict[ToolKind, Handler] = {
    ToolKind.SELECT: select_tool,
    ToolKind.POINT: point_tool,
    ToolKind.LINE: line_tool,
    ToolKind.CIRCLE: circle_tool,
    ToolKind.RECTANGLE: rectangle_tool,
    ToolKind.TRIANGLE: triangle_tool,
    ToolKind.PERPENDICULAR: perpendicular_tool,
    ToolKind.MIRROR: mirror_tool,
    ToolKind.MOVE: move_tool,
    ToolKind.COPY: copy_tool,
    ToolKind.TRIM: trim_tool,
    ToolKind.FILLET: fillet_tool,
    ToolKind.COGWHEEL: cogwheel_tool,
    ToolKind.MEASURE: measure_tool,
    ToolKind.DELETE: delete_tool,
}


def resolve_tool(tool_id: str | ToolKind) -> ToolKind:
    """Validate a tool id, rejecting unknown and unimplemented tools."""
    try:
        kind = ToolKind(tool_id)
    except ValueError as exc:
        raise ValueError(f"Unknown tool '{tool_id}'") from exc
    if kind in UNIMPLEMENTED_TOOLS:
        raise NotImplementedError(f"The {kind.value} tool is not implemented")
    return kind


def handle_click(tool: ToolKind, point: Point2D, points: Tuple[Point2D, ...], ctx: ToolContext) -> ToolResult:
    handler = TOOL_HANDLERS.get(resolve_tool(tool))
    if handler is None:
        raise TypeError(f"No handler registered for {tool!r}")
    return handler(point, points, ctx)


__all__ = [
    "Draft",
    "Modifiers",
    "SNAPPING_TOOLS",
    "TOOL_HANDLERS",
    "ToolContext",
    "ToolKind",
    "ToolResult",
    "UNIMPLEMENTED_TOOLS",
    "handle_click",
    "resolve_tool",
]
