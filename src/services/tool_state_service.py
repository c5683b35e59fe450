"""Tool State Service - persists the latest applied state of each planner tool.

Clients number their requests per session. A write is applied only when its
sequence is newer than the stored one, so a slow, stale request can never
overwrite the result of a later one.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.orm import Session

from src.core.event_bus import EventBus, PlannerEvent
from src.core.event_types import EventTypes
from src.core.logging import get_logger
from src.db.models import ToolStateModel

logger = get_logger(__name__)

KNOWN_TOOLS = ("armor_optimizer", "character_builder", "upgrade_planner")


@dataclass(frozen=True)
class SavedToolState:
    tool: str
    session_id: str
    state: dict[str, Any]
    sequence: int
    updated_at: datetime
    applied: bool = True


def _to_saved(row: ToolStateModel, applied: bool = True) -> SavedToolState:
    return SavedToolState(
        tool=row.tool,
        session_id=row.session_id,
        state=dict(row.state or {}),
        sequence=row.sequence,
        updated_at=row.updated_at,
        applied=applied,
    )


class ToolStateService:
    """Sequence-guarded save/load of tool state."""

    def __init__(self, db: Session, event_bus: EventBus):
        self._db = db
        self._bus = event_bus

    @staticmethod
    def check_tool(tool: str) -> None:
        if tool not in KNOWN_TOOLS:
            raise ValueError(f"Unknown tool: {tool}")

    def _get_row(self, tool: str, session_id: str) -> Optional[ToolStateModel]:
        return (
            self._db.query(ToolStateModel)
            .filter(ToolStateModel.tool == tool, ToolStateModel.session_id == session_id)
            .first()
        )

    def load(self, tool: str, session_id: str) -> Optional[SavedToolState]:
        self.check_tool(tool)
        row = self._get_row(tool, session_id)
        return _to_saved(row) if row is not None else None

    def next_sequence(self, tool: str, session_id: str) -> int:
        """Sequence number a new request in this session should carry."""
        self.check_tool(tool)
        row = self._get_row(tool, session_id)
        return (row.sequence if row is not None else 0) + 1

    def save(
        self, tool: str, session_id: str, state: dict[str, Any], sequence: int
    ) -> SavedToolState:
        """Store ``state`` unless a newer sequence is already stored.

        The returned state has ``applied=False`` when the write was discarded;
        it then carries the stored (newer) state.
        """
        self.check_tool(tool)
        row = self._get_row(tool, session_id)
        if row is not None and sequence <= row.sequence:
            logger.info(
                "Stale %s state discarded for %s: seq %d <= %d",
                tool,
                session_id,
                sequence,
                row.sequence,
            )
            return _to_saved(row, applied=False)

        now = datetime.now(timezone.utc)
        if row is None:
            row = ToolStateModel(tool=tool, session_id=session_id)
            self._db.add(row)
        row.state = state
        row.sequence = sequence
        row.updated_at = now
        self._db.commit()
        self._db.refresh(row)

        self._bus.emit(
            PlannerEvent(
                event_type=EventTypes.TOOL_STATE_SAVED,
                data={"tool": tool, "session_id": session_id, "sequence": sequence},
                source="tool_state_service",
            )
        )
        self._bus.reset_chain()
        return _to_saved(row)
