"""Attunement slot lookups over the (level, slots) table in GameRules."""

from __future__ import annotations

from typing import Optional, Sequence

from src.core.catalog.models import GameRules

SlotTable = Sequence[tuple[int, int]]

DEFAULT_SLOT_TABLE: SlotTable = GameRules().attunement_slot_table


def get_attunement_slots(level: int, table: SlotTable = DEFAULT_SLOT_TABLE) -> int:
    """Number of slots granted at an attunement level."""
    slots = 0
    for required_level, granted in table:
        if level >= required_level:
            slots = granted
    return slots


def get_next_attunement_slot_level(
    level: int, table: SlotTable = DEFAULT_SLOT_TABLE
) -> Optional[int]:
    """Next level that grants an extra slot, or None at the last breakpoint."""
    for required_level, _ in table:
        if required_level > level:
            return required_level
    return None


def get_attunement_level_for_slots(
    slots: int, table: SlotTable = DEFAULT_SLOT_TABLE
) -> Optional[int]:
    """Lowest attunement level that grants exactly ``slots`` slots."""
    for required_level, granted in table:
        if granted == slots:
            return required_level
    return None
