"""Minimum attribute requirements for a set of equipment.

Weapon-like items (weapons, shields, catalysts, talismans) carry a per-item
two-handed flag; two-handing divides the strength requirement by the rules'
multiplier and rounds up. Spells only contribute intelligence and faith, plus
attunement slots.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Union

from src.core.catalog.models import (
    ATTRIBUTES,
    SPELL_KINDS,
    WEAPON_LIKE_KINDS,
    Attributes,
    GameRules,
    ItemKind,
    Ring,
    Spell,
    Weapon,
)
from src.core.errors import BuildValidationError
from src.core.stats.attunement import (
    get_attunement_level_for_slots,
    get_attunement_slots,
    get_next_attunement_slot_level,
)

logger = logging.getLogger(__name__)

MinimumRequirements = Attributes

_WEAPON_STATS = ("strength", "dexterity", "intelligence", "faith")
_SPELL_STATS = ("intelligence", "faith")


@dataclass(frozen=True)
class SelectedItem:
    item: Weapon
    two_handed: bool = False


@dataclass(frozen=True)
class EquipmentSelection:
    """Immutable selection; every transition returns a new instance."""

    weapons: tuple[SelectedItem, ...] = ()
    shields: tuple[SelectedItem, ...] = ()
    catalysts: tuple[SelectedItem, ...] = ()
    talismans: tuple[SelectedItem, ...] = ()
    sorceries: tuple[Spell, ...] = ()
    miracles: tuple[Spell, ...] = ()
    pyromancies: tuple[Spell, ...] = ()
    rings: tuple[Ring, ...] = ()

    def weapon_like(self) -> list[SelectedItem]:
        return [*self.weapons, *self.shields, *self.catalysts, *self.talismans]

    def spells(self) -> list[Spell]:
        return [*self.sorceries, *self.miracles, *self.pyromancies]

    @property
    def is_two_handed(self) -> bool:
        return any(selected.two_handed for selected in self.weapon_like())


_GROUP_BY_KIND = {
    ItemKind.WEAPON: "weapons",
    ItemKind.SHIELD: "shields",
    ItemKind.CATALYST: "catalysts",
    ItemKind.TALISMAN: "talismans",
    ItemKind.SORCERY: "sorceries",
    ItemKind.MIRACLE: "miracles",
    ItemKind.PYROMANCY: "pyromancies",
}


@dataclass(frozen=True)
class AttributeCheck:
    is_valid: bool
    required: int
    current: int
    error: Optional[str] = None


@dataclass(frozen=True)
class CharacterValidation:
    is_valid: bool
    checks: dict[str, AttributeCheck] = field(default_factory=dict)

    @property
    def errors(self) -> dict[str, str]:
        return {k: c.error for k, c in self.checks.items() if c.error}


@dataclass(frozen=True)
class AttunementInfo:
    required_slots: int
    ring_slots: int
    current_slots: int
    next_slot_level: Optional[int]


def two_handed_strength(strength: int, rules: GameRules) -> int:
    return math.ceil(strength / rules.two_handed_strength_multiplier)


def calculate_item_requirements(
    item: Union[SelectedItem, Spell], rules: GameRules = GameRules()
) -> dict[str, int]:
    """Attribute demands of a single selected item."""
    if isinstance(item, Spell):
        return {stat: getattr(item.requirements, stat) for stat in _SPELL_STATS}

    req = item.item.requirements
    strength = req.strength
    if item.two_handed and item.item.two_handed:
        strength = two_handed_strength(strength, rules)
    return {
        "strength": strength,
        "dexterity": req.dexterity,
        "intelligence": req.intelligence,
        "faith": req.faith,
    }


def total_spell_slots(spells: Iterable[Spell]) -> int:
    return sum(spell.attunement_slots for spell in spells)


def calculate_required_attunement_slots(
    spells: Iterable[Spell], rules: GameRules = GameRules()
) -> int:
    """Slot total for display, capped at the maximum slot count."""
    return min(total_spell_slots(spells), rules.max_attunement_slots)


def calculate_minimum_requirements(
    selection: EquipmentSelection, rules: GameRules = GameRules()
) -> MinimumRequirements:
    """Per attribute, the maximum any selected item demands, floored at ``stat_min``."""
    minimums = dict.fromkeys(ATTRIBUTES, rules.stat_min)

    for selected in selection.weapon_like():
        for stat, value in calculate_item_requirements(selected, rules).items():
            minimums[stat] = max(minimums[stat], value)

    for spell in selection.spells():
        for stat, value in calculate_item_requirements(spell, rules).items():
            minimums[stat] = max(minimums[stat], value)

    # cap applies after ring slots
    slots = total_spell_slots(selection.spells())
    slots -= sum(ring.attunement_slots for ring in selection.rings)
    slots = min(slots, rules.max_attunement_slots)
    if slots > 0:
        table = rules.attunement_slot_table
        level = get_attunement_level_for_slots(slots, table)
        if level is None:
            level = table[-1][0]
        minimums["attunement"] = max(minimums["attunement"], level)

    return MinimumRequirements(**minimums)


def attunement_info(
    selection: EquipmentSelection, attunement: int, rules: GameRules = GameRules()
) -> AttunementInfo:
    table = rules.attunement_slot_table
    ring_slots = sum(ring.attunement_slots for ring in selection.rings)
    return AttunementInfo(
        required_slots=calculate_required_attunement_slots(selection.spells(), rules),
        ring_slots=ring_slots,
        current_slots=get_attunement_slots(attunement, table) + ring_slots,
        next_slot_level=get_next_attunement_slot_level(attunement, table),
    )


def validate_character_stats(
    stats: Attributes, requirements: MinimumRequirements
) -> CharacterValidation:
    checks = {}
    for stat in ATTRIBUTES:
        required = requirements.get(stat)
        current = stats.get(stat)
        ok = current >= required
        checks[stat] = AttributeCheck(
            is_valid=ok,
            required=required,
            current=current,
            error=None if ok else f"{stat.capitalize()} must be at least {required}",
        )
    return CharacterValidation(
        is_valid=all(c.is_valid for c in checks.values()), checks=checks
    )


def check_stat_ranges(stats: Attributes, rules: GameRules = GameRules()) -> dict[str, str]:
    """Attributes outside ``[stat_min, stat_max]``, keyed by name."""
    errors = {}
    for stat in ATTRIBUTES:
        value = stats.get(stat)
        if not rules.stat_min <= value <= rules.stat_max:
            errors[stat] = (
                f"{stat.capitalize()} must be between {rules.stat_min} and {rules.stat_max}"
            )
    return errors


def check_soul_level(level: int, rules: GameRules = GameRules()) -> None:
    if not rules.soul_level_min <= level <= rules.soul_level_max:
        raise BuildValidationError(
            f"Soul level must be between {rules.soul_level_min} and {rules.soul_level_max}"
        )


def update_stats_from_requirements(
    stats: Attributes, requirements: MinimumRequirements
) -> Attributes:
    """Raise every attribute below its minimum; higher values are kept."""
    return Attributes(
        **{stat: max(stats.get(stat), requirements.get(stat)) for stat in ATTRIBUTES}
    )


def reset_stats_to_requirements(requirements: MinimumRequirements) -> Attributes:
    return Attributes(**requirements.to_dict())


def reset_stats_for_removed_item(
    stats: Attributes,
    removed: Union[SelectedItem, Spell],
    remaining: EquipmentSelection,
    rules: GameRules = GameRules(),
) -> Attributes:
    """Lower the attributes that were pinned at the removed item's demand.

    An attribute drops back to what the remaining equipment needs only when
    the current value equals the removed item's requirement; values the user
    raised beyond it are left alone.
    """
    new_minimums = calculate_minimum_requirements(remaining, rules)
    updated = stats.to_dict()
    for stat, value in calculate_item_requirements(removed, rules).items():
        if value > 0 and updated[stat] == value:
            updated[stat] = new_minimums.get(stat)
    return Attributes(**updated)


# === Two-handed transitions ===


def two_handed_toggle_blocked_reason(selection: EquipmentSelection) -> Optional[str]:
    """Why toggling two-handed mode is a no-op, or None when it is allowed."""
    items = selection.weapon_like()
    if not items:
        return "no_weapon"
    groups = [g for g in (selection.weapons, selection.shields, selection.catalysts, selection.talismans) if g]
    if len(groups) > 1:
        return "mixed_types"
    if len(items) > 1:
        return "multiple_items"
    if items[0].item.required_two_handed:
        return "locked"
    return None


def is_two_handed_toggle_disabled(selection: EquipmentSelection) -> bool:
    return two_handed_toggle_blocked_reason(selection) is not None


def _replace_group(
    selection: EquipmentSelection, kind: ItemKind, items: tuple
) -> EquipmentSelection:
    return replace(selection, **{_GROUP_BY_KIND[kind]: items})


def toggle_two_handed(selection: EquipmentSelection) -> EquipmentSelection:
    reason = two_handed_toggle_blocked_reason(selection)
    if reason is not None:
        logger.debug("Two-handed toggle ignored: %s", reason)
        return selection
    selected = selection.weapon_like()[0]
    flipped = replace(selected, two_handed=not selected.two_handed)
    return _replace_group(selection, selected.item.kind, (flipped,))


def add_item(
    selection: EquipmentSelection,
    item: Union[Weapon, Spell, Ring],
    rules: GameRules = GameRules(),
) -> EquipmentSelection:
    """Add an item, enforcing selection limits.

    A weapon-like item that must be two-handed arrives with its flag set.
    """
    if isinstance(item, Ring):
        return replace(selection, rings=(*selection.rings, item))

    group_name = _GROUP_BY_KIND[item.kind]
    current = getattr(selection, group_name)
    if item.kind in SPELL_KINDS:
        if len(current) >= rules.max_spells_per_school:
            raise BuildValidationError(
                f"Cannot select more than {rules.max_spells_per_school} {group_name}"
            )
        return _replace_group(selection, item.kind, (*current, item))

    if item.kind not in WEAPON_LIKE_KINDS:
        raise BuildValidationError(f"Unsupported item kind: {item.kind}")
    if len(current) >= rules.max_weapon_like_per_group:
        raise BuildValidationError(
            f"Cannot select more than {rules.max_weapon_like_per_group} {group_name}"
        )
    entry = SelectedItem(item=item, two_handed=item.required_two_handed)
    return _replace_group(selection, item.kind, (*current, entry))


def remove_item(
    selection: EquipmentSelection, kind: ItemKind, index: int
) -> EquipmentSelection:
    """Remove by position. Two-handed mode switches off with the last item requiring it."""
    group = getattr(selection, _GROUP_BY_KIND[kind])
    if not 0 <= index < len(group):
        raise BuildValidationError(f"No {kind.value} at position {index}")
    removed = group[index]
    updated = _replace_group(selection, kind, group[:index] + group[index + 1:])

    if isinstance(removed, SelectedItem) and removed.item.required_two_handed:
        still_required = any(s.item.required_two_handed for s in updated.weapon_like())
        if not still_required:
            updated = _clear_two_handed(updated)
    return updated


def _clear_two_handed(selection: EquipmentSelection) -> EquipmentSelection:
    return replace(
        selection,
        **{
            _GROUP_BY_KIND[kind]: tuple(
                replace(s, two_handed=False)
                for s in getattr(selection, _GROUP_BY_KIND[kind])
            )
            for kind in WEAPON_LIKE_KINDS
        },
    )
