import pytest

from euclidcad_playground.elements import ElementStore, ElementType
from euclidcad_playground.geometry import GeometryError, Line2D, Point2D
from euclidcad_playground.intersect2d import find_all_intersections
from euclidcad_playground.settings import CanvasSettings, DynamicInputState
from euclidcad_playground.tools import (
    Modifiers,
    ToolContext,
    ToolKind,
    handle_click,
    resolve_tool,
)


def _context(store=None, selection=(), dynamic=None, modifiers=None, raw=Point2D(0, 0)):
    store = store or ElementStore()
    elements = tuple(store.visible())
    return ToolContext(
        raw_point=raw,
        elements=elements,
        intersections=tuple(find_all_intersections(elements)),
        selection=tuple(selection),
        settings=CanvasSettings(),
        dynamic_input=dynamic or DynamicInputState(),
        modifiers=modifiers or Modifiers(),
    )


def test_resolve_tool_rejects_unknown_and_unimplemented():
    assert resolve_tool("line") is ToolKind.LINE
    with pytest.raises(ValueError):
        resolve_tool("spline")
    with pytest.raises(NotImplementedError):
        resolve_tool("array")
    with pytest.raises(NotImplementedError):
        resolve_tool(ToolKind.EXTEND)


def test_modifiers_coerce():
    assert Modifiers.coerce(None) == Modifiers(False)
    assert Modifiers.coerce(["Ctrl"]).toggle
    assert Modifiers.coerce({"meta": True}).toggle
    assert not Modifiers.coerce(["shift"]).toggle
    assert Modifiers.coerce("ctrl").toggle
    assert Modifiers.coerce("Meta").toggle
    assert not Modifiers.coerce("shift").toggle


def test_line_tool_waits_for_second_click():
    result = handle_click(ToolKind.LINE, Point2D(0, 0), (), _context())
    assert result.awaiting_input
    assert result.points == (Point2D(0, 0),)
    assert not result.changes_store


def test_line_tool_commits_line_then_endpoints():
    result = handle_click(ToolKind.LINE, Point2D(100, 0), (Point2D(0, 0),), _context())
    kinds = [draft.type for draft in result.added]
    assert kinds == [ElementType.LINE, ElementType.POINT, ElementType.POINT]
    assert result.added[0].data == Line2D(Point2D(0, 0), Point2D(100, 0))


def test_line_tool_dynamic_input_single_click():
    dynamic = DynamicInputState(show_dynamic_input=True, dynamic_distance=50, dynamic_angle=90)
    result = handle_click(ToolKind.LINE, Point2D(10, 10), (), _context(dynamic=dynamic))
    line = result.added[0].data
    assert line.start == Point2D(10, 10)
    assert line.end.x == pytest.approx(10)
    assert line.end.y == pytest.approx(60)


def test_line_tool_degenerate_raises():
    with pytest.raises(GeometryError):
        handle_click(ToolKind.LINE, Point2D(0, 0), (Point2D(0, 0),), _context())


def test_endpoint_points_are_not_duplicated():
    store = ElementStore()
    store.add(ElementType.POINT, Point2D(0, 0))
    result = handle_click(ToolKind.LINE, Point2D(100, 0), (Point2D(2, 1),), _context(store))
    points = [draft.data for draft in result.added if draft.type is ElementType.POINT]
    assert points == [Point2D(100, 0)]


def test_circle_tool_dynamic_radius():
    dynamic = DynamicInputState(show_dynamic_input=True, dynamic_distance=35)
    result = handle_click(ToolKind.CIRCLE, Point2D(5, 5), (), _context(dynamic=dynamic))
    circle = result.added[0].data
    assert circle.radius == pytest.approx(35)
    assert result.added[1].type is ElementType.POINT


def test_perpendicular_tool_adds_base_and_bisector():
    result = handle_click(ToolKind.PERPENDICULAR, Point2D(100, 0), (Point2D(0, 0),), _context())
    base, bisector = result.added[0], result.added[1]
    assert base.type is ElementType.LINE
    assert bisector.type is ElementType.PERPENDICULAR
    assert bisector.data.length == pytest.approx(150)
    assert bisector.data.midpoint == Point2D(50, 0)


def test_fillet_tool_uses_dynamic_distance():
    result = handle_click(ToolKind.FILLET, Point2D(40, 0), (Point2D(0, 0),), _context())
    [draft] = result.added
    assert draft.type is ElementType.CIRCLE
    assert draft.data.center == Point2D(20, 0)
    assert draft.data.radius == pytest.approx(100)
    hidden_input = DynamicInputState(show_dynamic_input=False, dynamic_distance=35)
    result = handle_click(ToolKind.FILLET, Point2D(40, 0), (Point2D(0, 0),), _context(dynamic=hidden_input))
    assert result.added[0].data.radius == pytest.approx(35)


def test_cogwheel_tool_uses_inner_ratio():
    result = handle_click(ToolKind.COGWHEEL, Point2D(50, 0), (Point2D(0, 0),), _context())
    wheel = result.added[0].data
    assert wheel.outer_radius == pytest.approx(50)
    assert wheel.inner_radius == pytest.approx(30)
    assert wheel.teeth_count == 12


def test_measure_tool_reports_distance():
    result = handle_click(ToolKind.MEASURE, Point2D(30, 40), (Point2D(0, 0),), _context())
    assert result.measurement == pytest.approx(50)
    assert not result.changes_store


def test_select_tool_toggle_modifier():
    store = ElementStore()
    a = store.add(ElementType.LINE, Line2D(Point2D(0, 0), Point2D(100, 0)))
    b = store.add(ElementType.LINE, Line2D(Point2D(0, 100), Point2D(100, 100)))
    ctx = _context(store, selection=[a.id], modifiers=Modifiers(True), raw=Point2D(50, 100))
    assert handle_click(ToolKind.SELECT, Point2D(50, 100), (), ctx).selection == (a.id, b.id)
    ctx = _context(store, selection=[a.id, b.id], modifiers=Modifiers(True), raw=Point2D(50, 0))
    assert handle_click(ToolKind.SELECT, Point2D(50, 0), (), ctx).selection == (b.id,)
    ctx = _context(store, selection=[a.id], raw=Point2D(50, 100))
    assert handle_click(ToolKind.SELECT, Point2D(50, 100), (), ctx).selection == (b.id,)


def test_select_tool_empty_click_starts_window():
    result = handle_click(ToolKind.SELECT, Point2D(500, 500), (), _context(raw=Point2D(500, 500)))
    assert result.awaiting_input
    assert result.selection is None


def test_trim_tool_replaces_line_with_pieces():
    store = ElementStore()
    target = store.add(ElementType.LINE, Line2D(Point2D(0, 50), Point2D(200, 50)))
    store.add(ElementType.LINE, Line2D(Point2D(50, 0), Point2D(50, 100)))
    store.add(ElementType.LINE, Line2D(Point2D(150, 0), Point2D(150, 100)))
    result = handle_click(ToolKind.TRIM, Point2D(100, 50), (), _context(store, raw=Point2D(100, 50)))
    assert result.removed == (target.id,)
    assert [draft.data for draft in result.added] == [
        Line2D(Point2D(0, 50), Point2D(50, 50)),
        Line2D(Point2D(150, 50), Point2D(200, 50)),
    ]


def test_trim_tool_ignores_line_without_two_cuts():
    store = ElementStore()
    store.add(ElementType.LINE, Line2D(Point2D(0, 50), Point2D(200, 50)))
    result = handle_click(ToolKind.TRIM, Point2D(100, 50), (), _context(store, raw=Point2D(100, 50)))
    assert not result.changes_store
