"""Derived character stats: HP, stamina, equip load and dodge roll."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional

from src.core.catalog.models import Armor, Attributes, Ring, Weapon

logger = logging.getLogger(__name__)

BASE_HP = 300
HP_PER_VITALITY = 30
HP_SOFT_CAP_1 = 30
HP_SOFT_CAP_2 = 50
HP_REDUCTION_AFTER_CAP_1 = 0.5
HP_REDUCTION_AFTER_CAP_2 = 0.25

BASE_STAMINA = 80
STAMINA_PER_ENDURANCE = 2
STAMINA_SOFT_CAP = 40
STAMINA_REDUCTION_AFTER_CAP = 0.5

BASE_EQUIP_LOAD = 50
EQUIP_LOAD_PER_ENDURANCE = 1
EQUIP_LOAD_START_LEVEL = 10

BASE_STAMINA_REGEN = 45
STAMINA_REGEN_PER_ENDURANCE = 0.5

NINJA_FLIP = "Ninja Flip"
# (name, highest equip load percentage), best first
DODGE_ROLLS: tuple[tuple[str, float], ...] = (
    ("Fast Roll", 25.0),
    ("Mid Roll", 50.0),
    ("Fat Roll", 100.0),
)
NINJA_FLIP_THRESHOLD = 25.0


@dataclass(frozen=True)
class DerivedStats:
    hp: int
    stamina: int
    equip_load: float
    equipped_weight: float
    equip_load_percentage: float
    dodge_roll: str
    stamina_regen: float
    poise: float


def calculate_hp(vitality: int) -> int:
    if vitality <= 0:
        return BASE_HP
    hp = float(BASE_HP)
    if vitality <= HP_SOFT_CAP_1:
        hp += vitality * HP_PER_VITALITY
    elif vitality <= HP_SOFT_CAP_2:
        hp += HP_SOFT_CAP_1 * HP_PER_VITALITY
        hp += (vitality - HP_SOFT_CAP_1) * HP_PER_VITALITY * HP_REDUCTION_AFTER_CAP_1
    else:
        hp += HP_SOFT_CAP_1 * HP_PER_VITALITY
        hp += (HP_SOFT_CAP_2 - HP_SOFT_CAP_1) * HP_PER_VITALITY * HP_REDUCTION_AFTER_CAP_1
        hp += (vitality - HP_SOFT_CAP_2) * HP_PER_VITALITY * HP_REDUCTION_AFTER_CAP_2
    return math.floor(hp)


def calculate_stamina(endurance: int) -> int:
    if endurance <= 0:
        return BASE_STAMINA
    stamina = float(BASE_STAMINA)
    if endurance <= STAMINA_SOFT_CAP:
        stamina += endurance * STAMINA_PER_ENDURANCE
    else:
        stamina += STAMINA_SOFT_CAP * STAMINA_PER_ENDURANCE
        stamina += (
            (endurance - STAMINA_SOFT_CAP)
            * STAMINA_PER_ENDURANCE
            * STAMINA_REDUCTION_AFTER_CAP
        )
    return math.floor(stamina)


def calculate_equip_load(endurance: int) -> float:
    if endurance < EQUIP_LOAD_START_LEVEL:
        return BASE_EQUIP_LOAD
    return BASE_EQUIP_LOAD + (endurance - EQUIP_LOAD_START_LEVEL) * EQUIP_LOAD_PER_ENDURANCE


def calculate_equip_load_percentage(equipped_weight: float, equip_load: float) -> float:
    if equip_load <= 0:
        return 100.0
    return min(equipped_weight / equip_load * 100, 100.0)


def calculate_stamina_regen(endurance: int, equipment_bonus: float = 0) -> float:
    return BASE_STAMINA_REGEN + endurance * STAMINA_REGEN_PER_ENDURANCE + equipment_bonus


def get_dodge_roll(equip_load_percentage: float, ninja_flip: bool = False) -> str:
    if ninja_flip and equip_load_percentage <= NINJA_FLIP_THRESHOLD:
        return NINJA_FLIP
    for name, threshold in DODGE_ROLLS:
        if equip_load_percentage <= threshold:
            return name
    return DODGE_ROLLS[-1][0]


def calculate_all_derived_stats(
    base_stats: Attributes,
    weapon_like_items: Iterable[Weapon] = (),
    shields: Iterable[Weapon] = (),
    armor: Iterable[Optional[Armor]] = (),
    rings: Iterable[Ring] = (),
) -> DerivedStats:
    """Aggregate the derived stats of a character and its equipment.

    Ring ``equip_load_multiplier`` values compound (Havel's Ring, Ring of
    Favor and Protection); the ``poise`` ring bonus adds to armor poise.
    """
    rings = list(rings)
    pieces = [p for p in armor if p is not None]

    equip_load = calculate_equip_load(base_stats.endurance)
    for ring in rings:
        equip_load *= ring.equip_load_multiplier

    equipped_weight = (
        sum(item.weight for item in weapon_like_items)
        + sum(item.weight for item in shields)
        + sum(piece.weight for piece in pieces)
        + sum(ring.weight for ring in rings)
    )
    percentage = calculate_equip_load_percentage(equipped_weight, equip_load)
    ninja_flip = any(ring.ninja_flip for ring in rings)

    regen_penalty = sum(piece.stamina_regen_reduction for piece in pieces)
    regen_bonus = sum(ring.stat_bonus.get("stamina_regen", 0) for ring in rings)

    stats = DerivedStats(
        hp=calculate_hp(base_stats.vitality),
        stamina=calculate_stamina(base_stats.endurance),
        equip_load=equip_load,
        equipped_weight=equipped_weight,
        equip_load_percentage=percentage,
        dodge_roll=get_dodge_roll(percentage, ninja_flip),
        stamina_regen=calculate_stamina_regen(
            base_stats.endurance, regen_bonus - regen_penalty
        ),
        poise=sum(piece.poise for piece in pieces)
        + sum(ring.stat_bonus.get("poise", 0) for ring in rings),
    )
    logger.debug(
        "Derived stats: load=%.1f weight=%.1f (%.1f%%) roll=%s",
        stats.equip_load,
        stats.equipped_weight,
        stats.equip_load_percentage,
        stats.dodge_roll,
    )
    return stats
