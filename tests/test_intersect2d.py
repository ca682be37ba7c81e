import pytest

from euclidcad_playground.elements import ElementStore, ElementType, RectangleData
from euclidcad_playground.geometry import Circle2D, GeometryError, Line2D, Point2D
from euclidcad_playground.intersect2d import (
    circle_circle_intersections,
    circle_through_3_points,
    find_all_intersections,
    intersections_on,
    line_circle_intersections,
    line_intersection,
    perpendicular_bisector,
    segment_intersection,
)


def _line(x1, y1, x2, y2):
    return Line2D(Point2D(x1, y1), Point2D(x2, y2))


def test_segment_intersection_crossing():
    hit = segment_intersection(_line(0, 0, 10, 10), _line(0, 10, 10, 0))
    assert hit == Point2D(5, 5)


def test_segment_intersection_parallel_and_disjoint():
    assert segment_intersection(_line(0, 0, 10, 0), _line(0, 5, 10, 5)) is None
    # supporting lines cross at (20, 0), outside the first segment
    assert segment_intersection(_line(0, 0, 10, 0), _line(20, -5, 20, 5)) is None
    assert line_intersection(_line(0, 0, 10, 0), _line(20, -5, 20, 5)) == Point2D(20, 0)


def test_segment_intersection_touching_endpoints():
    assert segment_intersection(_line(0, 0, 10, 0), _line(10, 0, 10, 10)) == Point2D(10, 0)


def test_line_circle_two_points():
    points = line_circle_intersections(_line(-10, 0, 10, 0), Circle2D(Point2D(0, 0), 5))
    assert sorted(p.x for p in points) == pytest.approx([-5, 5])


def test_line_circle_tangent_yields_one_exact_point():
    points = line_circle_intersections(_line(0, 0, 10, 0), Circle2D(Point2D(5, 5), 5))
    assert points == [Point2D(5, 0)]


def test_line_circle_filters_points_outside_segment():
    points = line_circle_intersections(_line(0, 0, 10, 0), Circle2D(Point2D(0, 0), 5))
    assert points == [Point2D(5, 0)]
    assert line_circle_intersections(_line(0, 20, 10, 20), Circle2D(Point2D(0, 0), 5)) == []


def test_circle_circle_two_points():
    points = circle_circle_intersections(Circle2D(Point2D(0, 0), 5), Circle2D(Point2D(8, 0), 5))
    assert len(points) == 2
    assert {(round(p.x, 9), round(p.y, 9)) for p in points} == {(4.0, 3.0), (4.0, -3.0)}


def test_circle_circle_tangency():
    external = circle_circle_intersections(Circle2D(Point2D(0, 0), 5), Circle2D(Point2D(10, 0), 5))
    assert external == [Point2D(5, 0)]
    internal = circle_circle_intersections(Circle2D(Point2D(0, 0), 10), Circle2D(Point2D(5, 0), 5))
    assert internal == [Point2D(10, 0)]
    reverse = circle_circle_intersections(Circle2D(Point2D(5, 0), 5), Circle2D(Point2D(0, 0), 10))
    assert reverse == [Point2D(10, 0)]


def test_circle_circle_no_contact():
    assert circle_circle_intersections(Circle2D(Point2D(0, 0), 5), Circle2D(Point2D(20, 0), 5)) == []
    assert circle_circle_intersections(Circle2D(Point2D(0, 0), 10), Circle2D(Point2D(1, 0), 2)) == []
    assert circle_circle_intersections(Circle2D(Point2D(0, 0), 5), Circle2D(Point2D(0, 0), 5)) == []


def test_perpendicular_bisector():
    bisector = perpendicular_bisector(_line(0, 0, 10, 0), 150)
    assert bisector.midpoint == Point2D(5, 0)
    assert bisector.length == pytest.approx(150)
    assert bisector.direction.dot(_line(0, 0, 10, 0).direction) == pytest.approx(0)
    with pytest.raises(GeometryError):
        perpendicular_bisector(_line(0, 0, 10, 0), 0)


def test_circle_through_three_points():
    circle = circle_through_3_points(Point2D(0, 5), Point2D(5, 0), Point2D(-5, 0))
    assert circle is not None
    assert circle.center == Point2D(0, 0)
    assert circle.radius == pytest.approx(5)
    assert circle_through_3_points(Point2D(0, 0), Point2D(1, 1), Point2D(2, 2)) is None
    assert circle_through_3_points(Point2D(0, 0), Point2D(0, 0), Point2D(2, 5)) is None


def test_find_all_intersections_dedupes_shared_points():
    store = ElementStore()
    a = store.add(ElementType.LINE, _line(-10, 0, 10, 0))
    b = store.add(ElementType.LINE, _line(0, -10, 0, 10))
    c = store.add(ElementType.LINE, _line(-10, -10, 10, 10))
    infos = find_all_intersections(store)
    assert len(infos) == 1
    assert infos[0].point == Point2D(0, 0)
    assert set(infos[0].elements) == {a.id, b.id, c.id}
    assert infos[0].type == "line-line"


def test_find_all_intersections_skips_point_pairs():
    store = ElementStore()
    store.add(ElementType.POINT, Point2D(0, 0))
    store.add(ElementType.POINT, Point2D(0, 0.5))
    assert find_all_intersections(store) == []


def test_rectangle_edges_take_part_in_intersections():
    store = ElementStore()
    rect = store.add(ElementType.RECTANGLE, RectangleData(Point2D(0, 0), Point2D(100, 50)))
    line = store.add(ElementType.LINE, _line(50, -20, 50, 80))
    infos = find_all_intersections(store)
    points = sorted((p.x, p.y) for p in intersections_on(line.id, infos))
    assert points == [(50, 0), (50, 50)]
    assert all(info.type == "rectangle-line" for info in infos)
    assert all(rect.id in info.elements for info in infos)


def test_circle_line_intersection_kind():
    store = ElementStore()
    store.add(ElementType.CIRCLE, Circle2D(Point2D(0, 0), 5))
    store.add(ElementType.LINE, _line(-10, 0, 10, 0))
    infos = find_all_intersections(store)
    assert [info.type for info in infos] == ["circle-line", "circle-line"]
    assert sorted(info.point.x for info in infos) == pytest.approx([-5, 5])
