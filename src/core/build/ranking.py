"""Starting-class ranking by soul-level investment."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Sequence

from src.core.build.requirements import (
    EquipmentSelection,
    calculate_minimum_requirements,
    check_stat_ranges,
    validate_character_stats,
)
from src.core.catalog.models import ATTRIBUTES, Attributes, GameRules, StartingClass
from src.core.errors import BuildValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartingClassResult:
    character: StartingClass
    soul_level_needed: int
    stat_differences: dict[str, int]


@dataclass
class StartingClassResults:
    results: list[StartingClassResult]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def evaluate_starting_class(
    character: StartingClass, target: Attributes, rules: GameRules = GameRules()
) -> StartingClassResult:
    differences = {
        stat: target.get(stat) - character.stats.get(stat) for stat in ATTRIBUTES
    }
    points = sum(diff for diff in differences.values() if diff > 0)
    return StartingClassResult(
        character=character,
        soul_level_needed=character.starting_level
        + points * rules.soul_levels_per_attribute_point,
        stat_differences=differences,
    )


def rank_starting_classes(
    classes: Sequence[StartingClass],
    target: Attributes,
    rules: GameRules = GameRules(),
) -> list[StartingClassResult]:
    """Classes ordered by soul level needed; ties keep catalog order."""
    results = [evaluate_starting_class(c, target, rules) for c in classes]
    return sorted(results, key=lambda r: r.soul_level_needed)


def calculate_starting_class_results(
    classes: Sequence[StartingClass],
    selection: EquipmentSelection,
    stats: Optional[Attributes] = None,
    rules: GameRules = GameRules(),
) -> StartingClassResults:
    """Rank classes against the planned stats, or the bare minimum when none are given.

    Raises:
        BuildValidationError: planned stats are out of range or below the
            equipment's minimum requirements.
    """
    minimum = calculate_minimum_requirements(selection, rules)
    target = minimum
    if stats is not None:
        range_errors = check_stat_ranges(stats, rules)
        if range_errors:
            raise BuildValidationError("Stats out of range", range_errors)
        validation = validate_character_stats(stats, minimum)
        if not validation.is_valid:
            raise BuildValidationError(
                "Stats do not meet equipment requirements", validation.errors
            )
        target = stats

    results = rank_starting_classes(classes, target, rules)
    if results:
        logger.debug(
            "Best starting class: %s (SL %d)",
            results[0].character.name,
            results[0].soul_level_needed,
        )
    return StartingClassResults(results=results)


def find_optimal_starting_class(
    classes: Sequence[StartingClass],
    target: Attributes,
    rules: GameRules = GameRules(),
) -> Optional[StartingClassResult]:
    ranked = rank_starting_classes(classes, target, rules)
    return ranked[0] if ranked else None
