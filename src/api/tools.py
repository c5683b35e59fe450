"""Saved tool state API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from src.api.schemas import ToolStateRequest, ToolStateResponse
from src.core.logging import get_logger
from src.db.database import get_db
from src.services.tool_state_service import ToolStateService

logger = get_logger(__name__)

router = APIRouter(prefix="/tools", tags=["tools"])


def get_tool_state_service(
    request: Request, db: Session = Depends(get_db)
) -> ToolStateService:
    """ToolStateService bound to the request's DB session (dependency injection)"""
    return ToolStateService(db, request.app.state.event_bus)


@router.put("/{tool}/state/{session_id}", response_model=ToolStateResponse)
def save_tool_state(
    tool: str,
    session_id: str,
    body: ToolStateRequest,
    service: ToolStateService = Depends(get_tool_state_service),
) -> ToolStateResponse:
    """Store the state unless a newer sequence is already stored."""
    try:
        saved = service.save(tool, session_id, body.state, body.sequence)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ToolStateResponse.model_validate(saved)


@router.get("/{tool}/state/{session_id}", response_model=ToolStateResponse)
def load_tool_state(
    tool: str,
    session_id: str,
    service: ToolStateService = Depends(get_tool_state_service),
) -> ToolStateResponse:
    try:
        saved = service.load(tool, session_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    if saved is None:
        raise HTTPException(
            status_code=404, detail=f"No saved {tool} state for session {session_id}"
        )
    return ToolStateResponse.model_validate(saved)
