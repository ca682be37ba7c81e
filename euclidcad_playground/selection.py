"""Selection, clipboard and batch transforms over selected elements."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

from .elements import ElementStore, GeometricElement
from .geometry import Point2D, Vector2D
from .settings import DRAG_THRESHOLD, PASTE_OFFSET

logger = logging.getLogger(__name__)


@dataclass
class SelectionState:
    selected: List[str] = field(default_factory=list)
    clipboard: Tuple[GeometricElement, ...] = ()
    show_hidden: bool = False

    def is_selected(self, element_id: str) -> bool:
        return element_id in self.selected

    def set(self, ids: Sequence[Optional[str]], store: ElementStore) -> None:
        """Replace the selection, dropping unknown ids and keeping store order."""
        wanted = {sid for sid in ids if sid}
        self.selected = [sid for sid in store.ids() if sid in wanted]

    def clear(self) -> None:
        self.selected = []

    def prune(self, store: ElementStore) -> None:
        self.set(self.selected, store)


def copy_selected(state: SelectionState, store: ElementStore) -> int:
    """Snapshot the selected elements into the clipboard."""
    chosen = set(state.selected)
    state.clipboard = tuple(element for element in store if element.id in chosen)
    return len(state.clipboard)


def paste_clipboard(state: SelectionState, store: ElementStore, offset: float = PASTE_OFFSET) -> List[GeometricElement]:
    """Insert offset clones of the clipboard with fresh ids."""
    pasted: List[GeometricElement] = []
    for element in state.clipboard:
        clone = element.with_data(element.data.translate(offset, offset)).with_id(store.next_id())
        store.insert(clone)
        pasted.append(clone)
    logger.debug("Pasted %d element(s)", len(pasted))
    return pasted


def hide_selected(state: SelectionState, store: ElementStore) -> int:
    hidden = 0
    for element_id in state.selected:
        element = store.get(element_id)
        if element is None or element.hidden:
            continue
        store.replace(element.with_hidden(True))
        hidden += 1
    state.clear()
    return hidden


def delete_selected(state: SelectionState, store: ElementStore) -> int:
    removed = store.remove(state.selected)
    state.clear()
    return removed


def move_selected(state: SelectionState, store: ElementStore, offset: Vector2D) -> int:
    """Translate every selected element in place by ``offset``."""
    moved = 0
    for element_id in state.selected:
        element = store.get(element_id)
        if element is None:
            continue
        store.replace(element.with_data(element.data.translate(offset.x, offset.y)))
        moved += 1
    return moved


@dataclass
class DragState:
    """Press point of a drag over the current selection."""

    start: Optional[Point2D] = None
    element_ids: Tuple[str, ...] = ()

    @property
    def active(self) -> bool:
        return self.start is not None

    def begin(self, point: Point2D, element_ids: Sequence[str]) -> None:
        self.start = point
        self.element_ids = tuple(element_ids)

    def finish(self, point: Point2D, threshold: float = DRAG_THRESHOLD) -> Optional[Vector2D]:
        """End the drag; return the offset only when it clears ``threshold``."""
        start = self.start
        self.reset()
        if start is None:
            return None
        offset = point - start
        if offset.magnitude <= threshold:
            return None
        return offset

    def reset(self) -> None:
        self.start = None
        self.element_ids = ()


__all__ = [
    "DragState",
    "SelectionState",
    "copy_selected",
    "delete_selected",
    "hide_selected",
    "move_selected",
    "paste_clipboard",
]
