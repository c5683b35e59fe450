"""Health check endpoint."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.db.database import get_db

router = APIRouter()


@router.get("/health")
def health_check(request: Request, db: Session = Depends(get_db)) -> dict[str, str]:
    """Database connectivity plus whether the item catalog is loaded."""
    registry = getattr(request.app.state, "registry", None)
    catalog = "loaded" if registry is not None and registry.get_all_armor() else "empty"
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        return {"status": "error", "database": "disconnected", "catalog": catalog}
    return {"status": "ok", "database": "connected", "catalog": catalog}
