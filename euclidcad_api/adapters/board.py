"""In-memory board store backing the board routes."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from euclidcad_playground.board import Board
from euclidcad_playground.constructions import list_constructions
from euclidcad_playground.settings import CanvasSettings, DynamicInputState


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class BoardSession:
    """Stored board with metadata."""

    id: str
    name: str
    board: Board
    created_at: datetime
    updated_at: datetime = field(default_factory=_now)


class BoardStore:
    """Simple store keyed by session id."""

    def __init__(self) -> None:
        self._items: Dict[str, BoardSession] = {}

    def create(self, name: str, settings: Optional[Dict[str, Any]] = None, dynamic_input: Optional[Dict[str, Any]] = None) -> BoardSession:
        board = Board(
            settings=CanvasSettings.model_validate(settings or {}),
            dynamic_input=DynamicInputState.model_validate(dynamic_input or {}),
        )
        now = _now()
        session = BoardSession(id=str(uuid4()), name=name, board=board, created_at=now, updated_at=now)
        self._items[session.id] = session
        return session

    def list(self) -> List[BoardSession]:
        return list(self._items.values())

    def get(self, board_id: str) -> BoardSession:
        session = self._items.get(board_id)
        if session is None:
            raise KeyError(board_id)
        return session

    def delete(self, board_id: str) -> bool:
        return self._items.pop(board_id, None) is not None

    def touch(self, board_id: str) -> BoardSession:
        session = self.get(board_id)
        session.updated_at = _now()
        return session


_store = BoardStore()

ACTIONS = {
    "cancel": lambda board: board.on_cancel(),
    "undo": lambda board: board.on_undo(),
    "redo": lambda board: board.on_redo(),
    "copy": lambda board: board.on_copy(),
    "paste": lambda board: board.on_paste(),
    "delete": lambda board: board.on_delete_selected(),
    "hide": lambda board: board.on_hide_selected(),
    "clear": lambda board: board.on_clear(),
    "toggle-hidden": lambda board: board.on_toggle_show_hidden(),
}


def create_board(payload: Dict[str, Any]) -> Dict[str, Any]:
    session = _store.create(
        name=payload.get("name", "Untitled"),
        settings=payload.get("settings"),
        dynamic_input=payload.get("dynamic_input"),
    )
    return serialize_session(session)


def list_boards() -> List[Dict[str, Any]]:
    return [serialize_summary(item) for item in _store.list()]


def get_board(board_id: str) -> Dict[str, Any]:
    return serialize_session(_store.get(board_id))


def delete_board(board_id: str) -> None:
    if not _store.delete(board_id):
        raise KeyError(board_id)


def pointer(board_id: str, x: float, y: float, modifiers: List[str]) -> Dict[str, Any]:
    session = _store.touch(board_id)
    session.board.on_pointer_commit((x, y), modifiers)
    return serialize_session(session)


def select_tool(board_id: str, tool: str) -> Dict[str, Any]:
    session = _store.touch(board_id)
    session.board.on_tool_select(tool)
    return serialize_session(session)


def run_action(board_id: str, action: str) -> Dict[str, Any]:
    handler = ACTIONS.get(action)
    if handler is None:
        raise ValueError(f"Unsupported board action '{action}'")
    session = _store.touch(board_id)
    handler(session.board)
    return serialize_session(session)


def drag(board_id: str, phase: str, x: float, y: float) -> Dict[str, Any]:
    session = _store.touch(board_id)
    if phase == "start":
        session.board.on_drag_start((x, y))
    elif phase == "end":
        session.board.on_drag_end((x, y))
    else:
        raise ValueError(f"Unsupported drag phase '{phase}'")
    return serialize_session(session)


def update_settings(board_id: str, partial: Dict[str, Any]) -> Dict[str, Any]:
    session = _store.touch(board_id)
    session.board.on_settings_change(partial)
    return serialize_session(session)


def update_dynamic_input(board_id: str, partial: Dict[str, Any]) -> Dict[str, Any]:
    session = _store.touch(board_id)
    session.board.on_dynamic_input_change(partial)
    return serialize_session(session)


def load_construction(board_id: str, name: str, width: Optional[float], height: Optional[float]) -> Dict[str, Any]:
    session = _store.touch(board_id)
    session.board.load_construction(name, width=width, height=height)
    return serialize_session(session)


def constructions() -> List[Dict[str, Any]]:
    return [item.summary() for item in list_constructions()]


def serialize_summary(session: BoardSession) -> Dict[str, Any]:
    return {
        "id": session.id,
        "name": session.name,
        "created_at": session.created_at.isoformat(),
        "updated_at": session.updated_at.isoformat(),
        "element_count": len(session.board.store),
    }


def serialize_session(session: BoardSession) -> Dict[str, Any]:
    data = serialize_summary(session)
    data["state"] = session.board.snapshot().to_json()
    return data
