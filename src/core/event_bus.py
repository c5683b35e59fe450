"""Synchronous EventBus between the catalog and the caching services.

Events carry identifiers only. A chain of nested emits stops at MAX_DEPTH,
and a (source, event type) pair fires at most once per chain until
``reset_chain`` is called by the top-level operation.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable

from src.core.logging import get_logger

logger = get_logger(__name__)

MAX_DEPTH = 5


@dataclass
class PlannerEvent:
    event_type: str
    data: dict[str, Any]
    source: str

    _depth: int = field(default=0, repr=False)

    @property
    def chain_key(self) -> str:
        return f"{self.source}:{self.event_type}"


EventHandler = Callable[[PlannerEvent], None]


class EventBus:
    """Dispatches each event to its subscribers in subscription order."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)
        self._depth = 0
        self._fired: set[str] = set()

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)
        logger.debug("Subscribed %s to %s", handler.__qualname__, event_type)

    def _accepts(self, event: PlannerEvent) -> bool:
        if self._depth >= MAX_DEPTH:
            logger.warning("Event chain deeper than %d, dropped %s", MAX_DEPTH, event.chain_key)
            return False
        if event.chain_key in self._fired:
            logger.warning("Repeated event in chain, dropped %s", event.chain_key)
            return False
        return True

    def emit(self, event: PlannerEvent) -> None:
        """Run every handler for ``event``; a failing handler is logged and skipped."""
        if not self._accepts(event):
            return
        self._fired.add(event.chain_key)
        event._depth = self._depth

        handlers = list(self._handlers.get(event.event_type, ()))
        logger.info(
            "Dispatching %s from %s to %d handler(s)",
            event.event_type,
            event.source,
            len(handlers),
        )
        self._depth += 1
        try:
            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    logger.exception("Handler %s failed on %s", handler.__qualname__, event.event_type)
        finally:
            self._depth -= 1

    def reset_chain(self) -> None:
        self._fired.clear()
        self._depth = 0

    def clear(self) -> None:
        """Drop all subscriptions. Called on application shutdown."""
        self._handlers.clear()
        self.reset_chain()
