"""Bounded undo/redo over full element store snapshots."""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from .elements import GeometricElement, snapshot_key
from .settings import HISTORY_LIMIT

logger = logging.getLogger(__name__)

Snapshot = Tuple[GeometricElement, ...]


class History:
    """Snapshot stack with a cursor.

    The stack starts with the empty store. :meth:`record` appends a snapshot
    whenever the observed state differs from the one under the cursor.
    :meth:`undo` and :meth:`redo` only move the cursor. The restored snapshot
    is the entry under the cursor, so observing it again records nothing.
    """

    def __init__(self, limit: int = HISTORY_LIMIT, initial: Sequence[GeometricElement] = ()) -> None:
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self.limit = limit
        self._snapshots: List[Snapshot] = [tuple(initial)]
        self._keys: List[str] = [snapshot_key(self._snapshots[0])]
        self._index = 0

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> Snapshot:
        return self._snapshots[self._index]

    def can_undo(self) -> bool:
        return self._index > 0

    def can_redo(self) -> bool:
        return self._index < len(self._snapshots) - 1

    def record(self, snapshot: Sequence[GeometricElement]) -> bool:
        """Observe a store state; return True when a new entry was appended."""
        snapshot = tuple(snapshot)
        key = snapshot_key(snapshot)
        if key == self._keys[self._index]:
            return False
        del self._snapshots[self._index + 1 :]
        del self._keys[self._index + 1 :]
        self._snapshots.append(snapshot)
        self._keys.append(key)
        overflow = len(self._snapshots) - self.limit
        if overflow > 0:
            del self._snapshots[:overflow]
            del self._keys[:overflow]
        self._index = len(self._snapshots) - 1
        logger.debug("History recorded entry %d of %d", self._index, len(self._snapshots))
        return True

    def undo(self) -> Optional[Snapshot]:
        if not self.can_undo():
            return None
        self._index -= 1
        return self.current

    def redo(self) -> Optional[Snapshot]:
        if not self.can_redo():
            return None
        self._index += 1
        return self.current

    def reset(self, initial: Sequence[GeometricElement] = ()) -> None:
        self._snapshots = [tuple(initial)]
        self._keys = [snapshot_key(self._snapshots[0])]
        self._index = 0


__all__ = ["History", "Snapshot"]
