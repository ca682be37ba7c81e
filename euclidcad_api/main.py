from __future__ import annotations

from typing import Any, Dict, List

from fastapi import FastAPI

from .adapters import board as board_adapter
from .routers import boards as boards_router

app = FastAPI(title="EuclidCAD API", version="0.1.0", description="Session API for EuclidCAD construction boards")

app.include_router(boards_router.router)


@app.get("/")
async def index() -> Dict[str, Any]:
    return {
        "name": "euclidcad-api",
        "version": app.version,
        "routes": [
            {"path": "/boards", "methods": ["GET", "POST"]},
            {"path": "/constructions", "methods": ["GET"]},
        ],
        "board_count": len(board_adapter.list_boards()),
    }


@app.get("/constructions")
async def constructions() -> List[Dict[str, Any]]:
    return board_adapter.constructions()
