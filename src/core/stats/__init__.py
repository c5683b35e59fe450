"""Character stat aggregation."""

from .attunement import (
    get_attunement_level_for_slots,
    get_attunement_slots,
    get_next_attunement_slot_level,
)
from .derived import DerivedStats, calculate_all_derived_stats, calculate_equip_load

__all__ = [
    "DerivedStats",
    "calculate_all_derived_stats",
    "calculate_equip_load",
    "get_attunement_level_for_slots",
    "get_attunement_slots",
    "get_next_attunement_slot_level",
]
