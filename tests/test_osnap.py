from euclidcad_playground.elements import ElementStore, ElementType
from euclidcad_playground.geometry import Line2D, Point2D
from euclidcad_playground.intersect2d import find_all_intersections
from euclidcad_playground.osnap import grid_snap, resolve_snap
from euclidcad_playground.settings import CanvasSettings


def _crossing_store():
    store = ElementStore()
    store.add(ElementType.LINE, Line2D(Point2D(0, 0), Point2D(200, 200)))
    store.add(ElementType.LINE, Line2D(Point2D(0, 200), Point2D(200, 0)))
    return store


def test_grid_snap_rounds_to_nearest_node():
    assert grid_snap(Point2D(29, 51), 20) == Point2D(20, 60)


def test_grid_snap_takes_priority_when_enabled():
    settings = CanvasSettings(snap_to_grid=True)
    store = _crossing_store()
    point, kind = resolve_snap(Point2D(96, 103), settings, store, find_all_intersections(store))
    assert kind == "grid"
    assert point == Point2D(100, 100)


def test_intersection_snap_within_radius():
    settings = CanvasSettings()
    store = _crossing_store()
    point, kind = resolve_snap(Point2D(108, 95), settings, store, find_all_intersections(store))
    assert kind == "intersection"
    assert point == Point2D(100, 100)


def test_vertex_snap_and_raw_fallback():
    settings = CanvasSettings()
    store = _crossing_store()
    infos = find_all_intersections(store)
    point, kind = resolve_snap(Point2D(4, 6), settings, store, infos)
    assert (point, kind) == (Point2D(0, 0), "vertex")
    raw = Point2D(150, 40)
    assert resolve_snap(raw, settings, store, infos) == (raw, None)


def test_snap_radius_scales_with_zoom():
    store = _crossing_store()
    infos = find_all_intersections(store)
    zoomed = CanvasSettings(scale=4.0)
    # 15 screen units at 4x zoom is under 4 world units
    assert resolve_snap(Point2D(108, 95), zoomed, store, infos)[1] is None
    assert resolve_snap(Point2D(102, 101), zoomed, store, infos)[0] == Point2D(100, 100)


def test_resolve_snap_is_idempotent():
    settings = CanvasSettings()
    store = _crossing_store()
    infos = find_all_intersections(store)
    first = resolve_snap(Point2D(108, 95), settings, store, infos)
    assert resolve_snap(Point2D(108, 95), settings, store, infos) == first
