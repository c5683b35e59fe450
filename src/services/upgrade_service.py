"""Upgrade Service - upgrade plans with grouping, pricing and merchant comparisons."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional

from src.core.cache import BoundedCache
from src.core.catalog.models import Merchant, UpgradePath
from src.core.catalog.registry import GameDataRegistry
from src.core.errors import UpgradeInputError, UpgradePathError
from src.core.event_bus import EventBus, PlannerEvent
from src.core.event_types import EventTypes
from src.core.logging import get_logger
from src.core.upgrade.planner import UpgradePlanner, UpgradeResult
from src.core.upgrade.summary import (
    CategorizedMaterials,
    GroupedStep,
    categorize_materials,
    group_steps,
    purchaseable_cost,
    total_potential_savings,
)

logger = get_logger(__name__)


@dataclass
class UpgradePlan:
    result: UpgradeResult
    grouped_steps: list[GroupedStep]
    categorized: CategorizedMaterials
    purchaseable_cost: int = 0
    potential_savings: int = 0
    merchant_id: Optional[str] = None


@dataclass(frozen=True)
class PathOption:
    id: str
    name: str
    max_level: int
    has_ascension: bool


@dataclass
class PathOptions:
    current: list[PathOption] = field(default_factory=list)
    target: list[PathOption] = field(default_factory=list)


def _option(path: UpgradePath) -> PathOption:
    return PathOption(
        id=path.id, name=path.name, max_level=path.max_level, has_ascension=path.has_ascension
    )


class UpgradeService:
    """Planner calls over the registry's upgrade paths, memoized per request."""

    def __init__(
        self,
        registry: GameDataRegistry,
        event_bus: EventBus,
        cache: BoundedCache[tuple, UpgradePlan],
    ):
        self._registry = registry
        self._cache = cache
        self._bus = event_bus
        self._planner = UpgradePlanner(registry.upgrade_paths)
        self._register_event_handlers()

    def _register_event_handlers(self) -> None:
        self._bus.subscribe(EventTypes.CATALOG_RELOADED, self._on_catalog_reloaded)

    def _on_catalog_reloaded(self, event: PlannerEvent) -> None:
        self._planner = UpgradePlanner(self._registry.upgrade_paths)
        self._cache.clear()
        logger.info("Upgrade planner rebuilt with %d paths", len(self._planner.paths))

    @property
    def planner(self) -> UpgradePlanner:
        return self._planner

    def merchants(self) -> list[Merchant]:
        return self._registry.merchants

    def _merchant(self, merchant_id: Optional[str]) -> Optional[Merchant]:
        if not merchant_id:
            return None
        merchant = self._registry.get_merchant(merchant_id)
        if merchant is None:
            raise UpgradeInputError(f"Unknown merchant: {merchant_id}")
        return merchant

    def plan(
        self,
        current_path_id: str,
        current_level: int,
        target_path_id: str,
        desired_level: int,
        merchant_id: Optional[str] = None,
        include_ascension: bool = True,
    ) -> UpgradePlan:
        """Full upgrade plan.

        Raises:
            UpgradeInputError: invalid levels or unknown merchant.
            UpgradePathError: unknown path or broken ascension data.
        """
        key = (
            current_path_id,
            current_level,
            target_path_id,
            desired_level,
            merchant_id,
            include_ascension,
        )
        cached = self._cache.get(key)
        if cached is not None:
            result = replace(cached.result, timestamp=datetime.now(timezone.utc))
            return replace(cached, result=result)

        generation = self._cache.generation
        merchant = self._merchant(merchant_id)
        try:
            result = self._planner.calculate(
                current_path_id,
                current_level,
                target_path_id,
                desired_level,
                merchant=merchant,
                include_ascension=include_ascension,
            )
        except UpgradePathError as e:
            logger.warning(
                "Upgrade plan failed %s+%d -> %s+%d: %s",
                current_path_id,
                current_level,
                target_path_id,
                desired_level,
                e,
            )
            raise

        merchants = self._registry.merchants
        plan = UpgradePlan(
            result=result,
            grouped_steps=group_steps(result.steps),
            categorized=categorize_materials(result.materials, merchants),
            purchaseable_cost=purchaseable_cost(result.materials, merchants, merchant),
            potential_savings=total_potential_savings(result.materials, merchants, merchant),
            merchant_id=merchant.id if merchant else None,
        )
        if not self._cache.set(key, plan, generation):
            logger.info("Upgrade plan computed across a catalog reload; not cached")
        return plan

    def path_options(
        self, current_path_id: Optional[str] = None, target_path_id: Optional[str] = None
    ) -> PathOptions:
        """Selectable current and target paths given the other side's choice."""
        planner = self._planner
        if current_path_id:
            planner.get_path(current_path_id)
            targets = planner.valid_target_paths(current_path_id)
        else:
            targets = planner.paths
        if target_path_id:
            planner.get_path(target_path_id)
            sources = planner.valid_source_paths(target_path_id)
        else:
            sources = planner.paths
        return PathOptions(
            current=[_option(p) for p in sources],
            target=[_option(p) for p in targets],
        )
