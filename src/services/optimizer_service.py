"""Armor Optimizer Service - memoized optimizer passes over the shared catalog."""

import json
from dataclasses import asdict, replace
from datetime import datetime, timezone

from src.core.cache import BoundedCache
from src.core.catalog.registry import GameDataRegistry
from src.core.event_bus import EventBus, PlannerEvent
from src.core.event_types import EventTypes
from src.core.logging import get_logger
from src.core.optimizer.armor import ArmorOptimizer, ArmorOptimizerResult, ArmorOptimizerState
from src.core.optimizer.mix_match import (
    DEFAULT_TOP_N,
    MixMatchState,
    full_combination_count,
    restricted_combination_count,
)

logger = get_logger(__name__)


def state_fingerprint(state: ArmorOptimizerState) -> str:
    """Stable cache key for an optimizer state."""
    return json.dumps(asdict(state), sort_keys=True, default=str)


class ArmorOptimizerService:
    """Runs ArmorOptimizer and keeps the last results in a bounded cache."""

    def __init__(
        self,
        registry: GameDataRegistry,
        event_bus: EventBus,
        cache: BoundedCache[str, ArmorOptimizerResult],
    ):
        self._registry = registry
        self._optimizer = ArmorOptimizer(registry)
        self._cache = cache
        self._bus = event_bus
        self._register_event_handlers()

    def _register_event_handlers(self) -> None:
        self._bus.subscribe(EventTypes.CATALOG_RELOADED, self._on_catalog_reloaded)

    def _on_catalog_reloaded(self, event: PlannerEvent) -> None:
        logger.info("Dropping %d cached optimizer results", len(self._cache))
        self._cache.clear()

    def calculate(self, state: ArmorOptimizerState) -> ArmorOptimizerResult:
        key = state_fingerprint(state)
        cached = self._cache.get(key)
        if cached is not None:
            # fresh timestamp per response
            return replace(cached, timestamp=datetime.now(timezone.utc))
        generation = self._cache.generation
        result = self._optimizer.calculate_results(state)
        if not self._cache.set(key, result, generation):
            logger.info("Optimizer result computed across a catalog reload; not cached")
        return result

    def search_space(
        self, mask_of_the_father: bool = False, top_n: int = DEFAULT_TOP_N
    ) -> dict[str, int]:
        """Unrestricted and pruned combination counts for the whole catalog."""
        armor = [p for pieces in self._registry.get_all_armor().values() for p in pieces]
        state = MixMatchState(mask_of_the_father=mask_of_the_father)
        return {
            "full": full_combination_count(armor, mask_of_the_father),
            "restricted": restricted_combination_count(
                armor, state, self._registry.get_armor_categories(), top_n
            ),
        }
