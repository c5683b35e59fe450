"""Armor optimizer: shared comparator, mix-match engine and display modes."""

from .armor import (
    ArmorOptimizer,
    ArmorOptimizerResult,
    ArmorOptimizerState,
    DisplayMode,
    calculate_armor_with_upgrades,
)
from .mix_match import (
    Combination,
    CustomFilter,
    MixMatchState,
    calculate_mix_match,
    full_combination_count,
    restricted_combination_count,
)
from .rings import RingBonuses, get_ring_stat_bonuses
from .sorting import compare, get_sort_key, sort_entities, sort_value

__all__ = [
    "ArmorOptimizer",
    "ArmorOptimizerResult",
    "ArmorOptimizerState",
    "DisplayMode",
    "calculate_armor_with_upgrades",
    "Combination",
    "CustomFilter",
    "MixMatchState",
    "calculate_mix_match",
    "full_combination_count",
    "restricted_combination_count",
    "RingBonuses",
    "get_ring_stat_bonuses",
    "compare",
    "get_sort_key",
    "sort_entities",
    "sort_value",
]
