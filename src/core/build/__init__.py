"""Build planning: minimum requirements, two-handing rules and class ranking."""

from .ranking import (
    StartingClassResult,
    StartingClassResults,
    calculate_starting_class_results,
    find_optimal_starting_class,
    rank_starting_classes,
)
from .requirements import (
    EquipmentSelection,
    MinimumRequirements,
    SelectedItem,
    add_item,
    calculate_minimum_requirements,
    remove_item,
    toggle_two_handed,
    validate_character_stats,
)

__all__ = [
    "StartingClassResult",
    "StartingClassResults",
    "calculate_starting_class_results",
    "find_optimal_starting_class",
    "rank_starting_classes",
    "EquipmentSelection",
    "MinimumRequirements",
    "SelectedItem",
    "add_item",
    "calculate_minimum_requirements",
    "remove_item",
    "toggle_two_handed",
    "validate_character_stats",
]
