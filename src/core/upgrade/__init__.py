"""Weapon upgrade planning over the upgrade path DAG."""

from .planner import (
    JourneyStep,
    UpgradeJourney,
    UpgradePlanner,
    UpgradeResult,
    calculate_purchase_cost,
    merge_materials,
)
from .summary import (
    CategorizedMaterials,
    GroupedStep,
    categorize_materials,
    group_steps,
    total_potential_savings,
)

__all__ = [
    "JourneyStep",
    "UpgradeJourney",
    "UpgradePlanner",
    "UpgradeResult",
    "calculate_purchase_cost",
    "merge_materials",
    "CategorizedMaterials",
    "GroupedStep",
    "categorize_materials",
    "group_steps",
    "total_potential_savings",
]
