"""Armor mix-match engine.

Finds the best four-slot armor combinations by pruning each slot to a small
candidate pool (top N per armor category plus an empty slot), enumerating
the Cartesian product of the pools, filtering by search text and dodge-roll
equip load, then ranking with the shared comparator.

Pool size per slot is bounded by ``1 + N * categories``, so the product
stays small enough to enumerate exhaustively.
"""

from __future__ import annotations

import itertools
import logging
import math
from dataclasses import dataclass, field, replace
from typing import Iterable, Iterator, Optional, Sequence

from src.core.catalog.models import ARMOR_SLOTS, Armor, DefenseBlock
from src.core.optimizer.rings import RingBonuses
from src.core.optimizer.sorting import (
    CUSTOM_SORT,
    DEFAULT_SORT,
    SORT_KEYS,
    SortOption,
    get_sort_key,
    sort_entities,
    sort_value,
)
from src.core.stats.derived import DerivedStats

logger = logging.getLogger(__name__)

MIX_MATCH_SLOTS = ARMOR_SLOTS
DEFAULT_TOP_N = 3
MIX_MATCH_RESULT_LIMIT = 25
MASK_OF_THE_FATHER = "Mask of the Father"

Candidate = Optional[Armor]


def custom_stat_value(entity: object, stat: str) -> float:
    """Value of a custom-filter stat; raw defense field names are accepted too."""
    if stat in SORT_KEYS:
        return sort_value(entity, stat)
    defense = getattr(entity, "total_defense", None) or getattr(entity, "defense", None)
    return defense.get(stat) if defense is not None else 0


@dataclass(frozen=True)
class CustomFilter:
    """User-weighted stat selection with per-stat minimums."""

    selected_stats: tuple[str, ...] = ()
    min_values: dict[str, float] = field(default_factory=dict)
    weights: dict[str, float] = field(default_factory=dict)

    @property
    def active(self) -> bool:
        return bool(self.selected_stats)

    def score(self, entity: object) -> float:
        # a zero or missing weight counts as 1
        return sum(
            (self.weights.get(stat) or 1) * custom_stat_value(entity, stat)
            for stat in self.selected_stats
        )

    def accepts(self, entity: object) -> bool:
        return all(
            custom_stat_value(entity, stat) >= (self.min_values.get(stat) or 0)
            for stat in self.selected_stats
        )


@dataclass
class MixMatchState:
    search_query: str = ""
    sort_primary: SortOption = DEFAULT_SORT
    sort_secondary: SortOption = None
    sort_descending: bool = True
    max_dodge_roll_percent: Optional[float] = None
    mask_of_the_father: bool = False
    locked_armor: dict[str, str] = field(default_factory=dict)
    custom_filter: CustomFilter = field(default_factory=CustomFilter)

    def locked_name(self, slot: str) -> Optional[str]:
        if slot == "head" and self.mask_of_the_father:
            return MASK_OF_THE_FATHER
        return self.locked_armor.get(slot) or None

    @property
    def pool_sort_key(self) -> str:
        key = get_sort_key(self.sort_primary)
        return DEFAULT_SORT if not key or key == CUSTOM_SORT else key


@dataclass(frozen=True)
class Combination:
    id: str  # "mixmatch-<n>"
    name: str  # "Mix <n+1>"
    pieces: dict[str, Optional[Armor]]
    total_weight: float
    total_poise: float
    total_defense: DefenseBlock
    slots_filled: int
    total_stamina_regen_reduction: float = 0
    custom_score: float = 0

    @property
    def piece_names(self) -> list[str]:
        return [p.name for p in self.pieces.values() if p is not None]


def _categories_of(armor: Sequence[Armor], categories: Optional[Sequence[str]]) -> list[str]:
    if categories is not None:
        return list(categories)
    return list(dict.fromkeys(piece.armor_type for piece in armor))


def build_slot_candidates(
    armor: Sequence[Armor],
    slot: str,
    state: MixMatchState,
    categories: Optional[Sequence[str]] = None,
    top_n: int = DEFAULT_TOP_N,
) -> list[Candidate]:
    """Candidate list for one slot.

    A locked slot yields exactly the locked piece (or the empty slot when the
    name is not in the catalog). Otherwise the empty slot comes first,
    followed by the top ``top_n`` pieces of every category, deduplicated by
    name. Pieces in categories outside ``categories`` are never considered.
    """
    locked = state.locked_name(slot)
    if locked:
        piece = next((p for p in armor if p.slot == slot and p.name == locked), None)
        return [piece]

    custom = state.custom_filter
    pool: list[Armor] = []
    seen: set[str] = set()
    for category in _categories_of(armor, categories):
        in_category = [p for p in armor if p.slot == slot and p.armor_type == category]
        if custom.active:
            ranked = sorted(in_category, key=custom.score, reverse=True)
        else:
            ranked = sort_entities(
                in_category,
                state.pool_sort_key,
                state.sort_secondary,
                state.sort_descending,
            )
        for piece in ranked[:top_n]:
            if piece.name not in seen:
                seen.add(piece.name)
                pool.append(piece)
    return [None, *pool]


def build_candidate_pools(
    armor: Sequence[Armor],
    state: MixMatchState,
    categories: Optional[Sequence[str]] = None,
    top_n: int = DEFAULT_TOP_N,
) -> dict[str, list[Candidate]]:
    return {
        slot: build_slot_candidates(armor, slot, state, categories, top_n)
        for slot in MIX_MATCH_SLOTS
    }


def aggregate_combination(
    index: int,
    pieces: Sequence[Candidate],
    ring_bonuses: RingBonuses = RingBonuses(),
    custom_filter: Optional[CustomFilter] = None,
) -> Combination:
    by_slot = dict(zip(MIX_MATCH_SLOTS, pieces))
    worn = [p for p in pieces if p is not None]

    total_defense = ring_bonuses.defense
    for piece in worn:
        total_defense = total_defense + piece.defense

    combo = Combination(
        id=f"mixmatch-{index}",
        name=f"Mix {index + 1}",
        pieces=by_slot,
        total_weight=sum(p.weight for p in worn),
        total_poise=sum(p.poise for p in worn) + ring_bonuses.poise,
        total_defense=total_defense,
        slots_filled=len(worn),
        total_stamina_regen_reduction=sum(p.stamina_regen_reduction for p in worn),
    )
    if custom_filter is not None and custom_filter.active:
        return replace(combo, custom_score=custom_filter.score(combo))
    return combo


def enumerate_combinations(
    pools: dict[str, list[Candidate]],
    ring_bonuses: RingBonuses = RingBonuses(),
    custom_filter: Optional[CustomFilter] = None,
) -> Iterator[Combination]:
    """Every non-empty combination of the pools, numbered in product order."""
    index = 0
    for pieces in itertools.product(*(pools[slot] for slot in MIX_MATCH_SLOTS)):
        if not any(pieces):
            continue
        yield aggregate_combination(index, pieces, ring_bonuses, custom_filter)
        index += 1


def within_equip_load(
    total_weight: float,
    derived_stats: Optional[DerivedStats],
    max_percent: Optional[float],
) -> bool:
    """Whether adding ``total_weight`` keeps equip load at or under ``max_percent``.

    Always true when no limit is set or the equip load is unknown.
    """
    if max_percent is None or derived_stats is None or not derived_stats.equip_load:
        return True
    if isinstance(max_percent, float) and math.isnan(max_percent):
        return True
    percent = (derived_stats.equipped_weight + total_weight) / derived_stats.equip_load * 100
    return percent <= max_percent


def filter_combinations(
    combinations: Iterable[Combination],
    state: MixMatchState,
    derived_stats: Optional[DerivedStats],
) -> list[Combination]:
    query = state.search_query.strip().lower()
    custom = state.custom_filter
    kept = []
    for combo in combinations:
        if query and query not in combo.name.lower() and not any(
            query in name.lower() for name in combo.piece_names
        ):
            continue
        if not within_equip_load(combo.total_weight, derived_stats, state.max_dodge_roll_percent):
            continue
        if custom.active and not custom.accepts(combo):
            continue
        kept.append(combo)
    return kept


def rank_combinations(combinations: Sequence[Combination], state: MixMatchState) -> list[Combination]:
    if state.custom_filter.active:
        return sorted(combinations, key=lambda c: c.custom_score, reverse=True)
    return sort_entities(
        combinations, state.pool_sort_key, state.sort_secondary, state.sort_descending
    )


def calculate_mix_match(
    armor: Sequence[Armor],
    derived_stats: Optional[DerivedStats],
    state: MixMatchState,
    ring_bonuses: RingBonuses = RingBonuses(),
    categories: Optional[Sequence[str]] = None,
    top_n: int = DEFAULT_TOP_N,
    limit: int = MIX_MATCH_RESULT_LIMIT,
) -> list[Combination]:
    """Top ``limit`` combinations for the given state. Empty armor yields []."""
    if not armor:
        return []

    pools = build_candidate_pools(armor, state, categories, top_n)
    combinations = filter_combinations(
        enumerate_combinations(pools, ring_bonuses, state.custom_filter),
        state,
        derived_stats,
    )
    logger.debug(
        "Mix-match pools=%s kept=%d",
        {slot: len(pool) for slot, pool in pools.items()},
        len(combinations),
    )
    return rank_combinations(combinations, state)[:limit]


def full_combination_count(armor: Iterable[Armor], mask_of_the_father: bool = False) -> int:
    """Size of the unrestricted search space, empty slots included."""
    per_slot = dict.fromkeys(MIX_MATCH_SLOTS, 0)
    for piece in armor:
        if piece.slot in per_slot:
            per_slot[piece.slot] += 1
    total = 1
    for slot, count in per_slot.items():
        total *= 1 if slot == "head" and mask_of_the_father else count + 1
    return total


def restricted_combination_count(
    armor: Sequence[Armor],
    state: Optional[MixMatchState] = None,
    categories: Optional[Sequence[str]] = None,
    top_n: int = DEFAULT_TOP_N,
) -> int:
    """Size of the pruned search space actually enumerated, all-empty included."""
    pools = build_candidate_pools(armor, state or MixMatchState(), categories, top_n)
    return math.prod(len(pool) for pool in pools.values())
