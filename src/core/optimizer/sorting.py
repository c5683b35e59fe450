"""Shared ratio-based comparator for armor pieces, sets and combinations.

Single pieces expose ``defense``/``poise``/``weight``; aggregates expose
``total_defense``/``total_poise``/``total_weight``. Both are read through
``sort_value`` so every engine ranks with the same keys.
"""

from __future__ import annotations

from functools import cmp_to_key
from typing import Any, Callable, Iterable, Mapping, Optional, TypeVar, Union

from src.core.catalog.models import DefenseBlock

T = TypeVar("T")

SortOption = Union[str, Mapping[str, Any], None]

NO_SECONDARY = ("", "none")
CUSTOM_SORT = "custom"
DEFAULT_SORT = "totalDefense"

_DEFENSE_ACCESSORS: dict[str, Callable[[DefenseBlock], float]] = {
    "totalDefense": lambda d: d.physical,
    "physical": lambda d: d.physical,
    "regularDefense": lambda d: d.normal,
    "physicalDefense": lambda d: d.normal,
    "strikeDefense": lambda d: d.strike,
    "slashDefense": lambda d: d.slash,
    "thrustDefense": lambda d: d.thrust,
    "magicDefense": lambda d: d.magic,
    "fireDefense": lambda d: d.fire,
    "lightningDefense": lambda d: d.lightning,
    "elemental": lambda d: d.elemental,
    "elementalDefense": lambda d: d.elemental,
    "bleedResistance": lambda d: d.bleed,
    "poisonResistance": lambda d: d.poison,
    "curseResistance": lambda d: d.curse,
    "status": lambda d: d.status,
    "statusResistance": lambda d: d.status,
}

SORT_KEYS: tuple[str, ...] = ("poise", "weight", *_DEFENSE_ACCESSORS)


def get_sort_key(option: SortOption) -> Optional[str]:
    """Normalize a sort option; ``{"label": ..., "value": ...}`` yields its value."""
    if option is None:
        return None
    if isinstance(option, Mapping):
        value = option.get("value")
        return str(value) if value is not None else None
    return str(option)


def _defense_of(entity: Any) -> DefenseBlock:
    defense = getattr(entity, "total_defense", None)
    if defense is None:
        defense = getattr(entity, "defense", None)
    return defense if defense is not None else DefenseBlock()


def sort_value(entity: Any, sort_key: Optional[str]) -> float:
    """Numeric value of ``entity`` for ``sort_key``; unknown keys read as 0."""
    if sort_key == "poise":
        return getattr(entity, "total_poise", getattr(entity, "poise", 0)) or 0
    if sort_key == "weight":
        return getattr(entity, "total_weight", getattr(entity, "weight", 0)) or 0
    accessor = _DEFENSE_ACCESSORS.get(sort_key or "")
    if accessor is None:
        return 0
    return accessor(_defense_of(entity))


def _ratio(entity: Any, primary: str, secondary: str) -> float:
    denominator = sort_value(entity, secondary)
    if denominator == 0:
        return 0
    return sort_value(entity, primary) / denominator


def compare(
    a: Any,
    b: Any,
    primary: SortOption,
    secondary: SortOption = None,
    descending: bool = True,
) -> float:
    """Three-way comparison; negative when ``a`` ranks before ``b``.

    With a secondary key the ratio primary/secondary is compared (a zero
    secondary counts as ratio 0) and equal ratios fall back to the primary
    value.
    """
    primary_key = get_sort_key(primary)
    secondary_key = get_sort_key(secondary)
    sign = -1 if descending else 1

    if secondary_key is None or secondary_key in NO_SECONDARY:
        return sign * (sort_value(a, primary_key) - sort_value(b, primary_key))

    diff = _ratio(a, primary_key, secondary_key) - _ratio(b, primary_key, secondary_key)
    if diff != 0:
        return sign * diff
    return sign * (sort_value(a, primary_key) - sort_value(b, primary_key))


def sort_entities(
    items: Iterable[T],
    primary: SortOption,
    secondary: SortOption = None,
    descending: bool = True,
) -> list[T]:
    """Stable sort into a new list."""
    return sorted(
        items,
        key=cmp_to_key(lambda a, b: compare(a, b, primary, secondary, descending)),
    )
