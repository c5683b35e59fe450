"""Armor upgrade scaling.

Regular armor goes +0..+10, special (twinkling) armor +0..+5. Physical and
elemental defenses share one multiplier; bleed and poison scale slowly and
curse never scales.
"""

from __future__ import annotations

import math
from dataclasses import replace

from .models import DEFENSE_FIELDS, Armor, DefenseBlock

REGULAR_MAX_LEVEL = 10
SPECIAL_MAX_LEVEL = 5


def _multiplier_row(defense: float, resistance: float) -> dict[str, float]:
    row = {name: defense for name in DEFENSE_FIELDS}
    row.update(bleed=resistance, poison=resistance, curse=1.0)
    return row


ARMOR_REGULAR_UPGRADE_MULTIPLIERS: tuple[dict[str, float], ...] = tuple(
    _multiplier_row(round(1 + 0.142 * level, 3), round(1 + 0.04 * level, 2))
    for level in range(REGULAR_MAX_LEVEL + 1)
)

ARMOR_SPECIAL_UPGRADE_MULTIPLIERS: tuple[dict[str, float], ...] = tuple(
    _multiplier_row(round(1 + 0.2 * level, 1), round(1 + 0.08 * level, 2))
    for level in range(SPECIAL_MAX_LEVEL + 1)
)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def get_armor_upgrade_multipliers(upgrade_path: str | None, level: int) -> dict[str, float]:
    """Multipliers for a path/level; unknown paths or levels map to +0."""
    if upgrade_path == "regular" and 0 <= level <= REGULAR_MAX_LEVEL:
        return ARMOR_REGULAR_UPGRADE_MULTIPLIERS[level]
    if upgrade_path == "special" and 0 <= level <= SPECIAL_MAX_LEVEL:
        return ARMOR_SPECIAL_UPGRADE_MULTIPLIERS[level]
    return ARMOR_REGULAR_UPGRADE_MULTIPLIERS[0]


def get_armor_upgrade_levels(upgrade_path: str | None) -> list[int]:
    if upgrade_path == "regular":
        return list(range(REGULAR_MAX_LEVEL + 1))
    if upgrade_path == "special":
        return list(range(SPECIAL_MAX_LEVEL + 1))
    return [0]


def calculate_upgraded_armor_defense(
    base_defense: DefenseBlock, upgrade_path: str | None, level: int
) -> DefenseBlock:
    multipliers = get_armor_upgrade_multipliers(upgrade_path, level)
    return DefenseBlock(
        **{
            name: round_half_up(base_defense.get(name) * multipliers[name])
            for name in DEFENSE_FIELDS
        }
    )


def upgrade_armor_piece(piece: Armor, level: int) -> Armor:
    """Return ``piece`` at ``level``, capped at its path's maximum.

    Pieces without an upgrade path, or at level 0, are returned unchanged.
    """
    if not piece.upgrade_path or level <= 0:
        return piece
    cap = SPECIAL_MAX_LEVEL if piece.upgrade_path == "special" else REGULAR_MAX_LEVEL
    effective = min(level, cap)
    return replace(
        piece,
        defense=calculate_upgraded_armor_defense(
            piece.defense, piece.upgrade_path, effective
        ),
        upgrade_level=effective,
    )
