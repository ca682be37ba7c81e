"""Canvas settings, dynamic input state and board-wide constants."""
from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

# Interaction thresholds
DRAG_THRESHOLD = 5.0
PASTE_OFFSET = 20.0
TRIM_MIN_LENGTH = 1.0
BISECTOR_LENGTH = 150.0
HISTORY_LIMIT = 50

COLORS: Dict[str, str] = {
    "point": "#ef4444",
    "line": "#2563eb",
    "circle": "#10b981",
    "rectangle": "#8b5cf6",
    "triangle": "#8b5cf6",
    "perpendicular": "#f59e0b",
    "cogwheel": "#6b7280",
    "intersection": "#ff6b6b",
    "selection": "#fbbf24",
}


class CanvasSettings(BaseModel):
    """Grid, snapping and hit-test configuration for one board."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    grid_size: float = Field(default=20.0, gt=0, description="Grid spacing in world units")
    snap_distance: float = Field(default=15.0, gt=0, description="Snap radius in screen units")
    tolerance: float = Field(default=10.0, gt=0, description="Hit-test and point dedupe radius")
    scale: float = Field(default=1.0, gt=0, description="Current zoom factor of the rendering layer")
    snap_to_grid: bool = Field(default=False, description="Round committed points to the grid")
    show_grid: bool = True
    show_scale: bool = True
    show_intersections: bool = Field(default=True, description="Display toggle only; snapping ignores it")

    @property
    def world_snap_distance(self) -> float:
        return self.snap_distance / self.scale

    def merged(self, partial: Dict[str, Any]) -> "CanvasSettings":
        """Return a validated copy with ``partial`` applied."""
        return CanvasSettings.model_validate({**self.model_dump(), **partial})


class DynamicInputState(BaseModel):
    """Out-of-band numeric input for single-click line and circle placement."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    show_dynamic_input: bool = False
    dynamic_distance: float = Field(default=100.0, gt=0, description="Line length or circle radius")
    dynamic_angle: float = Field(default=0.0, description="Line direction in degrees, counter-clockwise from +x")

    def merged(self, partial: Dict[str, Any]) -> "DynamicInputState":
        return DynamicInputState.model_validate({**self.model_dump(), **partial})


__all__ = [
    "BISECTOR_LENGTH",
    "COLORS",
    "CanvasSettings",
    "DRAG_THRESHOLD",
    "DynamicInputState",
    "HISTORY_LIMIT",
    "PASTE_OFFSET",
    "TRIM_MIN_LENGTH",
]
