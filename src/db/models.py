"""SQLAlchemy declarative base and ORM models."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import JSON


class Base(DeclarativeBase):
    """Base class for all database models."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ToolStateModel(Base):
    """Latest applied state of one tool (optimizer, build, upgrade) per session."""

    __tablename__ = "tool_states"
    __table_args__ = (UniqueConstraint("tool", "session_id", name="uq_tool_session"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tool: Mapped[str] = mapped_column(String, nullable=False)
    session_id: Mapped[str] = mapped_column(String, nullable=False)
    state: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    # request sequence of the stored state; older writes are discarded
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
