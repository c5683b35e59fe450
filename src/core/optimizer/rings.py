"""Ring stat bonuses folded into armor defense and poise."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable

from src.core.catalog.models import Armor, DefenseBlock, Ring

_DIRECT_BONUSES = {
    "magicDefense": "magic",
    "fireDefense": "fire",
    "lightningDefense": "lightning",
    "strikeDefense": "strike",
    "slashDefense": "slash",
    "thrustDefense": "thrust",
}
# both spellings occur in ring data; each adds to all four physical fields
_PHYSICAL_BONUSES = ("physicalDefense", "phsyicalDefense")


@dataclass(frozen=True)
class RingBonuses:
    defense: DefenseBlock = DefenseBlock()
    poise: float = 0

    @property
    def is_empty(self) -> bool:
        return self.poise == 0 and self.defense == DefenseBlock()


def get_ring_stat_bonuses(rings: Iterable[Ring]) -> RingBonuses:
    totals = dict.fromkeys(("normal", "strike", "slash", "thrust", "magic", "fire", "lightning"), 0.0)
    poise = 0.0
    for ring in rings:
        bonus = ring.stat_bonus
        for key, field_name in _DIRECT_BONUSES.items():
            totals[field_name] += bonus.get(key, 0)
        for key in _PHYSICAL_BONUSES:
            value = bonus.get(key, 0)
            for field_name in ("normal", "strike", "slash", "thrust"):
                totals[field_name] += value
        poise += bonus.get("poise", 0)
    return RingBonuses(defense=DefenseBlock(**totals), poise=poise)


def apply_ring_bonuses_to_piece(piece: Armor, bonuses: RingBonuses) -> Armor:
    if bonuses.is_empty:
        return piece
    return replace(
        piece,
        defense=piece.defense + bonuses.defense,
        poise=piece.poise + bonuses.poise,
    )
