"""Catalog Service - loads the JSON catalogs and announces reloads.

Services never import each other; caches built on catalog data listen for
``catalog_reloaded`` on the EventBus instead.
"""

from pathlib import Path

from src.core.catalog.registry import GameDataRegistry
from src.core.event_bus import EventBus, PlannerEvent
from src.core.event_types import EventTypes
from src.core.logging import get_logger

logger = get_logger(__name__)


class CatalogService:
    """Owner of the shared GameDataRegistry."""

    def __init__(self, registry: GameDataRegistry, event_bus: EventBus, data_dir: str | Path):
        self._registry = registry
        self._bus = event_bus
        self._data_dir = Path(data_dir)

    @property
    def registry(self) -> GameDataRegistry:
        return self._registry

    def load(self) -> dict[str, int]:
        """Initial load. No event is emitted since nothing is cached yet."""
        counts = self._registry.load_from_dir(self._data_dir)
        logger.info("Catalog loaded from %s: %s", self._data_dir, counts)
        return counts

    def reload(self) -> dict[str, int]:
        """Load a fresh registry, swap it in, then tell subscribers to drop caches."""
        fresh = GameDataRegistry()
        counts = fresh.load_from_dir(self._data_dir)
        self._registry.replace_with(fresh)
        logger.info("Catalog reloaded from %s: %s", self._data_dir, counts)

        self._bus.emit(
            PlannerEvent(
                event_type=EventTypes.CATALOG_RELOADED,
                data={"data_dir": str(self._data_dir)},
                source="catalog_service",
            )
        )
        self._bus.reset_chain()
        return counts
