"""Central construction board state and its input/output surface.

A :class:`Board` owns the element store, the selection, the undo history and
the transient tool state. A rendering layer drives it through the ``on_*``
methods and reads back :meth:`Board.snapshot` after each input.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .constructions import get_construction
from .elements import ElementStore, GeometricElement, find_element_at, elements_to_json
from .geometry import GeometryError, Point2D
from .history import History
from .intersect2d import IntersectionInfo, find_all_intersections
from .osnap import resolve_snap
from .selection import (
    DragState,
    SelectionState,
    copy_selected,
    delete_selected,
    hide_selected,
    move_selected,
    paste_clipboard,
)
from .settings import HISTORY_LIMIT, CanvasSettings, DynamicInputState
from .tools import (
    SNAPPING_TOOLS,
    Draft,
    Modifiers,
    ToolContext,
    ToolKind,
    ToolResult,
    handle_click,
    resolve_tool,
)

logger = logging.getLogger(__name__)

PointLike = Union[Point2D, Sequence[float]]


def _as_point(value: PointLike) -> Point2D:
    if isinstance(value, Point2D):
        return value
    x, y = value
    return Point2D(float(x), float(y))


@dataclass
class BoardSnapshot:
    """Read-only view handed to the rendering layer."""

    elements: List[GeometricElement]
    selected: List[str]
    intersections: List[IntersectionInfo]
    can_undo: bool
    can_redo: bool
    tool: ToolKind
    pending_points: List[Point2D] = field(default_factory=list)
    window_start: Optional[Point2D] = None
    measurement: Optional[float] = None
    clipboard_size: int = 0
    show_hidden: bool = False
    settings: Optional[CanvasSettings] = None
    dynamic_input: Optional[DynamicInputState] = None

    def to_json(self) -> Dict[str, Any]:
        chosen = set(self.selected)
        elements = []
        for item in elements_to_json(self.elements):
            item["selected"] = item["id"] in chosen
            elements.append(item)
        return {
            "elements": elements,
            "selection": list(self.selected),
            "intersections": [info.to_json() for info in self.intersections],
            "can_undo": self.can_undo,
            "can_redo": self.can_redo,
            "tool": self.tool.value,
            "pending_points": [p.to_json() for p in self.pending_points],
            "window_start": self.window_start.to_json() if self.window_start else None,
            "measurement": self.measurement,
            "clipboard_size": self.clipboard_size,
            "show_hidden": self.show_hidden,
            "settings": self.settings.model_dump() if self.settings else None,
            "dynamic_input": self.dynamic_input.model_dump() if self.dynamic_input else None,
        }


class Board:
    """Single-threaded construction session."""

    def __init__(
        self,
        settings: Optional[CanvasSettings] = None,
        dynamic_input: Optional[DynamicInputState] = None,
        history_limit: int = HISTORY_LIMIT,
    ) -> None:
        self.store = ElementStore()
        self.selection = SelectionState()
        self.settings = settings or CanvasSettings()
        self.dynamic_input = dynamic_input or DynamicInputState()
        self.history = History(limit=history_limit)
        self.drag = DragState()
        self.tool = ToolKind.SELECT
        self._points: Tuple[Point2D, ...] = ()
        self._measurement: Optional[float] = None
        self._intersections: Optional[List[IntersectionInfo]] = None

    # ------------------------------------------------------------------
    # Derived state

    def interactive_elements(self) -> List[GeometricElement]:
        """Elements that take part in hit-testing, snapping and intersections."""
        return self.store.visible(self.selection.show_hidden)

    @property
    def intersections(self) -> List[IntersectionInfo]:
        if self._intersections is None:
            self._intersections = find_all_intersections(self.interactive_elements())
        return self._intersections

    @property
    def pending_points(self) -> Tuple[Point2D, ...]:
        return self._points

    def element_at(self, point: PointLike) -> Optional[GeometricElement]:
        return find_element_at(
            self.interactive_elements(), _as_point(point), self.settings.tolerance, include_hidden=True
        )

    def snap(self, point: PointLike) -> Tuple[Point2D, Optional[str]]:
        return resolve_snap(_as_point(point), self.settings, self.interactive_elements(), self.intersections)

    def snapshot(self) -> BoardSnapshot:
        return BoardSnapshot(
            elements=list(self.store),
            selected=list(self.selection.selected),
            intersections=list(self.intersections),
            can_undo=self.history.can_undo(),
            can_redo=self.history.can_redo(),
            tool=self.tool,
            pending_points=list(self._points),
            window_start=self._points[0] if self.tool is ToolKind.SELECT and self._points else None,
            measurement=self._measurement,
            clipboard_size=len(self.selection.clipboard),
            show_hidden=self.selection.show_hidden,
            settings=self.settings,
            dynamic_input=self.dynamic_input,
        )

    # ------------------------------------------------------------------
    # Input surface

    def on_pointer_commit(self, point: PointLike, modifiers: object = None) -> None:
        raw = _as_point(point)
        target = raw
        if self.tool in SNAPPING_TOOLS:
            target, _ = self.snap(raw)
        ctx = ToolContext(
            raw_point=raw,
            elements=tuple(self.interactive_elements()),
            intersections=tuple(self.intersections),
            selection=tuple(self.selection.selected),
            settings=self.settings,
            dynamic_input=self.dynamic_input,
            modifiers=Modifiers.coerce(modifiers),
        )
        try:
            result = handle_click(self.tool, target, self._points, ctx)
        except GeometryError as exc:
            logger.warning("%s tool aborted: %s", self.tool.value, exc)
            self._points = ()
            return
        self._apply(result)

    def on_tool_select(self, tool_id: Union[str, ToolKind]) -> None:
        kind = resolve_tool(tool_id)
        self._reset_transient()
        self.tool = kind
        logger.debug("Tool set to %s", kind.value)

    def on_cancel(self) -> None:
        if self._points or self.drag.active:
            self._reset_transient()
            return
        self._measurement = None
        self.selection.clear()

    def on_undo(self) -> None:
        snapshot = self.history.undo()
        if snapshot is None:
            return
        self._replay(snapshot)

    def on_redo(self) -> None:
        snapshot = self.history.redo()
        if snapshot is None:
            return
        self._replay(snapshot)

    def on_copy(self) -> int:
        return copy_selected(self.selection, self.store)

    def on_paste(self) -> List[str]:
        pasted = paste_clipboard(self.selection, self.store)
        if pasted:
            self._store_changed()
        return [element.id for element in pasted]

    def on_delete_selected(self) -> int:
        removed = delete_selected(self.selection, self.store)
        if removed:
            self._store_changed()
        return removed

    def on_hide_selected(self) -> int:
        hidden = hide_selected(self.selection, self.store)
        if hidden:
            self._store_changed()
        return hidden

    def on_settings_change(self, partial: Dict[str, Any]) -> None:
        self.settings = self.settings.merged(partial)

    def on_dynamic_input_change(self, partial: Dict[str, Any]) -> None:
        self.dynamic_input = self.dynamic_input.merged(partial)

    def on_toggle_show_hidden(self) -> None:
        self.selection.show_hidden = not self.selection.show_hidden
        self._intersections = None
        if not self.selection.show_hidden:
            visible = {element.id for element in self.interactive_elements()}
            self.selection.set([sid for sid in self.selection.selected if sid in visible], self.store)

    def on_clear(self) -> None:
        self._reset_transient()
        self.selection.clear()
        if len(self.store):
            self.store.clear()
            self._store_changed()

    def on_drag_start(self, point: PointLike) -> bool:
        """Begin dragging when the press lands on a selected element."""
        hit = self.element_at(point)
        if hit is None or not self.selection.is_selected(hit.id):
            return False
        self.drag.begin(_as_point(point), self.selection.selected)
        return True

    def on_drag_end(self, point: PointLike) -> bool:
        offset = self.drag.finish(_as_point(point))
        if offset is None:
            return False
        if move_selected(self.selection, self.store, offset):
            self._store_changed()
        return True

    def load_construction(self, construction_id: str, width: Optional[float] = None, height: Optional[float] = None) -> List[str]:
        construction = get_construction(construction_id)
        kwargs = {k: v for k, v in (("width", width), ("height", height)) if v is not None}
        drafts = construction.build(**kwargs)
        ids = self._add_drafts(drafts)
        if ids:
            self._store_changed()
        return ids

    # ------------------------------------------------------------------
    # Internals

    def _add_drafts(self, drafts: Sequence[Draft]) -> List[str]:
        return [self.store.add(d.type, d.data, d.color).id for d in drafts]

    def _apply(self, result: ToolResult) -> None:
        self._points = result.points if result.awaiting_input else ()
        self._measurement = result.measurement
        if result.removed:
            self.store.remove(result.removed)
        for element in result.updated:
            self.store.replace(element)
        added = self._add_drafts(result.added)
        if added:
            logger.debug("%s tool committed %s", self.tool.value, ", ".join(added))
        if result.selection is not None:
            self.selection.set(result.selection, self.store)
        if result.changes_store:
            self._store_changed()

    def _store_changed(self) -> None:
        self._intersections = None
        self.selection.prune(self.store)
        self.history.record(self.store.snapshot())

    def _replay(self, snapshot: Sequence[GeometricElement]) -> None:
        self._reset_transient()
        self.store.restore(snapshot)
        self._intersections = None
        self.selection.prune(self.store)

    def _reset_transient(self) -> None:
        self._points = ()
        self._measurement = None
        self.drag.reset()


__all__ = ["Board", "BoardSnapshot"]
