"""Database engine and session configuration."""

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from src.config import settings

_connect_args = (
    {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}
)

engine = create_engine(
    settings.DATABASE_URL,
    connect_args=_connect_args,
    echo=settings.DEBUG,
)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def init_db(bind: Engine = engine) -> None:
    """Create every table registered on ``Base``."""
    from src.db.models import Base

    Base.metadata.create_all(bind=bind)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session and close it after the request.

    Usage as a FastAPI dependency::

        @router.get("/tools/{tool}/state/{session_id}")
        def load_state(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
