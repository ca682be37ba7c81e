"""
Snap resolution for committed clicks.

``resolve_snap`` turns a raw world-space point into the point a tool should
actually use. Candidates are tried in priority order: the nearest grid node
(when grid snapping is on), then the nearest element vertex or intersection,
and finally the raw point itself. Each stage only accepts a candidate that
falls within the snap radius converted to world units.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from .elements import GeometricElement, snap_points
from .geometry import Point2D
from .intersect2d import IntersectionInfo
from .settings import CanvasSettings

logger = logging.getLogger(__name__)

SnapKind = Optional[str]


def grid_snap(point: Point2D, grid_size: float) -> Point2D:
    return Point2D(round(point.x / grid_size) * grid_size, round(point.y / grid_size) * grid_size)


def snap_targets(
    elements: Iterable[GeometricElement],
    intersections: Iterable[IntersectionInfo],
) -> List[Tuple[str, Point2D]]:
    """Collect ``(kind, point)`` candidates from vertices and intersections."""
    targets: List[Tuple[str, Point2D]] = []
    for element in elements:
        for vertex in snap_points(element):
            targets.append(("vertex", vertex))
    for info in intersections:
        targets.append(("intersection", info.point))
    return targets


def nearest_target(point: Point2D, targets: Sequence[Tuple[str, Point2D]], tol: float) -> Tuple[Optional[Point2D], SnapKind]:
    best_point: Optional[Point2D] = None
    best_kind: SnapKind = None
    best_dist = float(tol)
    for kind, candidate in targets:
        dist = point.distance_to(candidate)
        if dist < best_dist:
            best_point, best_kind, best_dist = candidate, kind, dist
    return best_point, best_kind


def resolve_snap(
    point: Point2D,
    settings: CanvasSettings,
    elements: Iterable[GeometricElement],
    intersections: Iterable[IntersectionInfo],
) -> Tuple[Point2D, SnapKind]:
    """
    Return the snapped point and the kind of snap applied.

    ``elements`` should already exclude hidden elements. Intersections are
    eligible regardless of ``settings.show_intersections``.
    """
    tol = settings.world_snap_distance
    if settings.snap_to_grid:
        candidate = grid_snap(point, settings.grid_size)
        if point.distance_to(candidate) <= tol:
            logger.debug("Grid snap %r -> %r", point, candidate)
            return candidate, "grid"
    best, kind = nearest_target(point, snap_targets(elements, intersections), tol)
    if best is not None:
        logger.debug("%s snap %r -> %r", kind, point, best)
        return best, kind
    return point, None


__all__ = ["grid_snap", "nearest_target", "resolve_snap", "snap_targets"]
