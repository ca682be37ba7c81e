from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field, ValidationError

from euclidcad_playground.geometry import GeometryError

from ..adapters import board as board_adapter


class BoardCreate(BaseModel):
    name: str = Field(default="Untitled", description="Board name")
    settings: Dict[str, Any] = Field(default_factory=dict, description="Initial canvas settings")
    dynamic_input: Dict[str, Any] = Field(default_factory=dict, description="Initial dynamic input state")


class BoardSummary(BaseModel):
    id: str
    name: str
    created_at: str
    updated_at: str
    element_count: int


class BoardResponse(BoardSummary):
    state: Dict[str, Any]


class PointerEvent(BaseModel):
    x: float
    y: float
    modifiers: List[str] = Field(default_factory=list, description="Held keys, e.g. ['ctrl']")


class DragEvent(BaseModel):
    phase: str = Field(..., description="'start' or 'end'")
    x: float
    y: float


class ToolSelect(BaseModel):
    tool: str = Field(..., description="Tool id such as 'line' or 'select'")


class ConstructionRequest(BaseModel):
    width: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)


router = APIRouter(prefix="/boards", tags=["boards"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Board not found")


@router.get("/", response_model=List[BoardSummary])
async def list_boards() -> List[BoardSummary]:
    return [BoardSummary(**item) for item in board_adapter.list_boards()]


@router.post("/", response_model=BoardResponse, status_code=status.HTTP_201_CREATED)
async def create_board(body: BoardCreate) -> BoardResponse:
    try:
        item = board_adapter.create_board(body.model_dump())
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.errors(include_url=False, include_context=False)) from exc
    return BoardResponse(**item)


@router.get("/{board_id}", response_model=BoardResponse)
async def get_board(board_id: str) -> BoardResponse:
    try:
        data = board_adapter.get_board(board_id)
    except KeyError as exc:
        raise _not_found() from exc
    return BoardResponse(**data)


@router.delete("/{board_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_board(board_id: str) -> None:
    try:
        board_adapter.delete_board(board_id)
    except KeyError as exc:
        raise _not_found() from exc


@router.post("/{board_id}/pointer", response_model=BoardResponse)
async def pointer(board_id: str, body: PointerEvent) -> BoardResponse:
    try:
        return BoardResponse(**board_adapter.pointer(board_id, body.x, body.y, body.modifiers))
    except KeyError as exc:
        raise _not_found() from exc
    except GeometryError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post("/{board_id}/drag", response_model=BoardResponse)
async def drag(board_id: str, body: DragEvent) -> BoardResponse:
    try:
        return BoardResponse(**board_adapter.drag(board_id, body.phase, body.x, body.y))
    except KeyError as exc:
        raise _not_found() from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post("/{board_id}/tool", response_model=BoardResponse)
async def select_tool(board_id: str, body: ToolSelect) -> BoardResponse:
    try:
        return BoardResponse(**board_adapter.select_tool(board_id, body.tool))
    except KeyError as exc:
        raise _not_found() from exc
    except NotImplementedError as exc:
        raise HTTPException(status_code=status.HTTP_501_NOT_IMPLEMENTED, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.patch("/{board_id}/settings", response_model=BoardResponse)
async def update_settings(board_id: str, body: Dict[str, Any]) -> BoardResponse:
    try:
        return BoardResponse(**board_adapter.update_settings(board_id, body))
    except KeyError as exc:
        raise _not_found() from exc
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.errors(include_url=False, include_context=False)) from exc


@router.patch("/{board_id}/dynamic-input", response_model=BoardResponse)
async def update_dynamic_input(board_id: str, body: Dict[str, Any]) -> BoardResponse:
    try:
        return BoardResponse(**board_adapter.update_dynamic_input(board_id, body))
    except KeyError as exc:
        raise _not_found() from exc
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.errors(include_url=False, include_context=False)) from exc


@router.post("/{board_id}/constructions/{name}", response_model=BoardResponse)
async def load_construction(board_id: str, name: str, body: Optional[ConstructionRequest] = None) -> BoardResponse:
    body = body or ConstructionRequest()
    try:
        board_adapter.get_board(board_id)
    except KeyError as exc:
        raise _not_found() from exc
    try:
        return BoardResponse(**board_adapter.load_construction(board_id, name, body.width, body.height))
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown construction '{name}'") from exc


@router.post("/{board_id}/{action}", response_model=BoardResponse)
async def run_action(board_id: str, action: str) -> BoardResponse:
    try:
        return BoardResponse(**board_adapter.run_action(board_id, action))
    except KeyError as exc:
        raise _not_found() from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
