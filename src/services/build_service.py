"""Build Service - resolves item names and runs the requirement engine."""

from dataclasses import dataclass, replace
from typing import Iterable, Mapping, Optional

from src.core.build.ranking import StartingClassResults, calculate_starting_class_results
from src.core.build.requirements import (
    AttunementInfo,
    CharacterValidation,
    EquipmentSelection,
    MinimumRequirements,
    add_item,
    attunement_info,
    calculate_minimum_requirements,
    check_stat_ranges,
    update_stats_from_requirements,
    validate_character_stats,
)
from src.core.catalog.models import Attributes, ItemKind
from src.core.catalog.registry import GameDataRegistry
from src.core.errors import BuildValidationError
from src.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RequirementReport:
    minimum: MinimumRequirements
    attunement: AttunementInfo
    validation: Optional[CharacterValidation] = None
    suggested_stats: Optional[Attributes] = None


class BuildService:
    """Name resolution plus requirement and class ranking calls."""

    def __init__(self, registry: GameDataRegistry):
        self._registry = registry

    def _lookup(self, kind: ItemKind, name: str):
        registry = self._registry
        lookups = {
            ItemKind.WEAPON: registry.get_weapon_by_name,
            ItemKind.SHIELD: registry.get_shield_by_name,
            ItemKind.CATALYST: registry.get_catalyst_by_name,
            ItemKind.TALISMAN: registry.get_talisman_by_name,
        }
        if kind in lookups:
            item = lookups[kind](name)
        else:
            item = registry.get_spell_by_name(kind, name)
        if item is None:
            raise BuildValidationError(f"Unknown {kind.value}: {name}")
        return item

    def build_selection(
        self,
        weapons: Iterable[Mapping] = (),
        shields: Iterable[Mapping] = (),
        catalysts: Iterable[Mapping] = (),
        talismans: Iterable[Mapping] = (),
        sorceries: Iterable[str] = (),
        miracles: Iterable[str] = (),
        pyromancies: Iterable[str] = (),
        rings: Iterable[str] = (),
    ) -> EquipmentSelection:
        """Selection from item names.

        Weapon-like entries are ``{"name": ..., "two_handed": bool}``. Items
        that must be two-handed are flagged regardless of the request.

        Raises:
            BuildValidationError: unknown item name or selection limit exceeded.
        """
        rules = self._registry.rules
        selection = EquipmentSelection()

        groups = (
            (ItemKind.WEAPON, "weapons", weapons),
            (ItemKind.SHIELD, "shields", shields),
            (ItemKind.CATALYST, "catalysts", catalysts),
            (ItemKind.TALISMAN, "talismans", talismans),
        )
        for kind, group_name, entries in groups:
            for entry in entries:
                item = self._lookup(kind, entry["name"])
                selection = add_item(selection, item, rules)
                if entry.get("two_handed"):
                    group = getattr(selection, group_name)
                    flagged = replace(group[-1], two_handed=True)
                    selection = replace(selection, **{group_name: (*group[:-1], flagged)})

        for kind, names in (
            (ItemKind.SORCERY, sorceries),
            (ItemKind.MIRACLE, miracles),
            (ItemKind.PYROMANCY, pyromancies),
        ):
            for name in names:
                selection = add_item(selection, self._lookup(kind, name), rules)

        for name in rings:
            ring = self._registry.get_ring_by_name(name)
            if ring is None:
                raise BuildValidationError(f"Unknown ring: {name}")
            selection = add_item(selection, ring, rules)
        return selection

    def requirements(
        self, selection: EquipmentSelection, stats: Optional[Attributes] = None
    ) -> RequirementReport:
        rules = self._registry.rules
        minimum = calculate_minimum_requirements(selection, rules)
        if stats is None:
            return RequirementReport(
                minimum=minimum,
                attunement=attunement_info(selection, minimum.attunement, rules),
            )

        range_errors = check_stat_ranges(stats, rules)
        if range_errors:
            raise BuildValidationError("Stats out of range", range_errors)
        return RequirementReport(
            minimum=minimum,
            attunement=attunement_info(selection, stats.attunement, rules),
            validation=validate_character_stats(stats, minimum),
            suggested_stats=update_stats_from_requirements(stats, minimum),
        )

    def rank_starting_classes(
        self, selection: EquipmentSelection, stats: Optional[Attributes] = None
    ) -> StartingClassResults:
        try:
            return calculate_starting_class_results(
                self._registry.starting_classes, selection, stats, self._registry.rules
            )
        except BuildValidationError as e:
            logger.warning("Starting class ranking rejected: %s %s", e, e.errors)
            raise
