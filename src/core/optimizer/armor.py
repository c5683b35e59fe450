"""Armor optimizer: upgrade application, ring bonuses and display modes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional, Sequence

from src.core.catalog.models import ARMOR_SLOTS, Armor, ArmorSet, Attributes
from src.core.catalog.registry import GameDataRegistry
from src.core.catalog.scaling import upgrade_armor_piece
from src.core.optimizer.mix_match import (
    Combination,
    MixMatchState,
    calculate_mix_match,
    within_equip_load,
)
from src.core.optimizer.rings import (
    RingBonuses,
    apply_ring_bonuses_to_piece,
    get_ring_stat_bonuses,
)
from src.core.optimizer.sorting import sort_entities
from src.core.stats.derived import DerivedStats, calculate_all_derived_stats

logger = logging.getLogger(__name__)

DEFAULT_ENDURANCE = 20

# stat block the optimizer derives HP and stamina from; endurance comes from the state
BASELINE_ATTRIBUTES = Attributes(
    vitality=20,
    attunement=10,
    endurance=DEFAULT_ENDURANCE,
    strength=20,
    dexterity=20,
    resistance=10,
    intelligence=10,
    faith=10,
)


class DisplayMode(str, Enum):
    INDIVIDUAL = "individual"
    SETS = "sets"
    MIXMATCH = "mixmatch"

    @classmethod
    def parse(cls, value: str | DisplayMode | None) -> DisplayMode:
        try:
            return cls(value)
        except ValueError:
            return cls.INDIVIDUAL


@dataclass
class ArmorOptimizerState(MixMatchState):
    endurance: int = DEFAULT_ENDURANCE
    weapons: list[str] = field(default_factory=list)
    shields: list[str] = field(default_factory=list)
    catalysts: list[str] = field(default_factory=list)
    talismans: list[str] = field(default_factory=list)
    rings: list[str] = field(default_factory=list)
    armor_upgrade_level: int = 0
    display_mode: DisplayMode = DisplayMode.INDIVIDUAL


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ArmorOptimizerResult:
    calculated_armor: list[Armor] = field(default_factory=list)
    armor_sets: list[ArmorSet] = field(default_factory=list)
    mix_match_results: list[Combination] = field(default_factory=list)
    character_stats: Optional[DerivedStats] = None
    timestamp: datetime = field(default_factory=_utcnow)


def calculate_armor_with_upgrades(armor: Iterable[Armor], upgrade_level: int) -> list[Armor]:
    """Flat list of pieces at ``upgrade_level``; the catalog is left untouched."""
    return [upgrade_armor_piece(piece, upgrade_level) for piece in armor]


def calculate_individual_armor(
    armor: Sequence[Armor],
    state: MixMatchState,
    ring_bonuses: RingBonuses = RingBonuses(),
) -> list[Armor]:
    """Single pieces matching the search, with locked slots narrowed to their piece."""
    query = state.search_query.strip().lower()
    kept = []
    for piece in armor:
        if query and query not in piece.name.lower():
            continue
        locked = state.locked_name(piece.slot)
        if locked and locked != piece.name:
            continue
        kept.append(apply_ring_bonuses_to_piece(piece, ring_bonuses))
    return sort_entities(kept, state.sort_primary, state.sort_secondary, state.sort_descending)


def _rebuild_set(
    armor_set: ArmorSet,
    pieces: dict[str, Armor],
    ring_bonuses: RingBonuses,
    upgrade_level: int,
) -> ArmorSet:
    total = ring_bonuses.defense
    for piece in pieces.values():
        total = total + piece.defense
    return replace(
        armor_set,
        pieces=pieces,
        total_defense=total,
        total_poise=sum(p.poise for p in pieces.values()) + ring_bonuses.poise,
        total_weight=sum(p.weight for p in pieces.values()),
        upgrade_level=upgrade_level,
    )


def calculate_armor_sets(
    armor_sets: Sequence[ArmorSet],
    derived_stats: Optional[DerivedStats],
    state: ArmorOptimizerState,
    ring_bonuses: RingBonuses = RingBonuses(),
    armor_lookup: Optional[dict[str, Armor]] = None,
) -> list[ArmorSet]:
    """Sets with locked pieces swapped in, upgrades and ring bonuses applied,
    then filtered by name and dodge-roll equip load and sorted.
    """
    armor_lookup = armor_lookup or {}
    query = state.search_query.strip().lower()
    result = []
    for armor_set in armor_sets:
        pieces = dict(armor_set.pieces)
        for slot in ARMOR_SLOTS:
            locked = state.locked_name(slot)
            if locked and locked in armor_lookup:
                pieces[slot] = armor_lookup[locked]
        pieces = {
            slot: upgrade_armor_piece(piece, state.armor_upgrade_level)
            for slot, piece in pieces.items()
        }
        rebuilt = _rebuild_set(armor_set, pieces, ring_bonuses, state.armor_upgrade_level)

        if query and query not in rebuilt.name.lower():
            continue
        if not within_equip_load(rebuilt.total_weight, derived_stats, state.max_dodge_roll_percent):
            continue
        result.append(rebuilt)
    return sort_entities(result, state.sort_primary, state.sort_secondary, state.sort_descending)


class ArmorOptimizer:
    """Runs one optimizer pass over the registry's catalog."""

    def __init__(self, registry: GameDataRegistry) -> None:
        self._registry = registry

    def _resolve(self, names: Iterable[str], lookup) -> list:
        items = []
        for name in names:
            item = lookup(name)
            if item is None:
                logger.warning("Unknown item ignored: %s", name)
                continue
            items.append(item)
        return items

    def character_stats(self, state: ArmorOptimizerState) -> DerivedStats:
        registry = self._registry
        weapon_like = (
            self._resolve(state.weapons, registry.get_weapon_by_name)
            + self._resolve(state.catalysts, registry.get_weapon_by_name)
            + self._resolve(state.talismans, registry.get_weapon_by_name)
        )
        return calculate_all_derived_stats(
            replace(BASELINE_ATTRIBUTES, endurance=state.endurance),
            weapon_like_items=weapon_like,
            shields=self._resolve(state.shields, registry.get_shield_by_name),
            rings=self._resolve(state.rings, registry.get_ring_by_name),
        )

    def calculate_results(self, state: ArmorOptimizerState) -> ArmorOptimizerResult:
        """Compute the view for ``state.display_mode``.

        Only the active mode's list is filled. Any unexpected failure is
        logged and collapses to an empty result.
        """
        try:
            return self._calculate(state)
        except Exception:
            logger.exception("Armor optimizer calculation failed")
            return ArmorOptimizerResult()

    def _calculate(self, state: ArmorOptimizerState) -> ArmorOptimizerResult:
        registry = self._registry
        all_armor = [p for pieces in registry.get_all_armor().values() for p in pieces]
        if not all_armor:
            return ArmorOptimizerResult()

        stats = self.character_stats(state)
        ring_bonuses = get_ring_stat_bonuses(
            self._resolve(state.rings, registry.get_ring_by_name)
        )
        mode = DisplayMode.parse(state.display_mode)
        result = ArmorOptimizerResult(character_stats=stats)

        if mode == DisplayMode.SETS:
            lookup = {piece.name: piece for piece in all_armor}
            result.armor_sets = calculate_armor_sets(
                registry.get_all_armor_sets(), stats, state, ring_bonuses, lookup
            )
        elif mode == DisplayMode.MIXMATCH:
            upgraded = calculate_armor_with_upgrades(all_armor, state.armor_upgrade_level)
            result.mix_match_results = calculate_mix_match(
                upgraded,
                stats,
                state,
                ring_bonuses,
                categories=registry.get_armor_categories(),
            )
        else:
            upgraded = calculate_armor_with_upgrades(all_armor, state.armor_upgrade_level)
            result.calculated_armor = calculate_individual_armor(upgraded, state, ring_bonuses)
        return result