"""Starting-class ranking."""

import pytest

from src.core.build.ranking import (
    calculate_starting_class_results,
    evaluate_starting_class,
    find_optimal_starting_class,
    rank_starting_classes,
)
from src.core.build.requirements import EquipmentSelection, SelectedItem
from src.core.catalog.models import Attributes, ItemKind, Requirements, StartingClass, Weapon
from src.core.errors import BuildValidationError


def _make_class(id: str, level: int, **stats) -> StartingClass:
    return StartingClass(id=id, name=id.title(), starting_level=level, stats=Attributes(**stats))


def _greatsword_selection() -> EquipmentSelection:
    weapon = Weapon("Greatsword", ItemKind.WEAPON, "greatswords", 6.0, Requirements(strength=24))
    return EquipmentSelection(weapons=(SelectedItem(weapon),))


class TestEvaluate:
    def test_soul_level_counts_positive_deltas_only(self):
        knight = _make_class("knight", 5, strength=11, dexterity=11)
        result = evaluate_starting_class(knight, Attributes(strength=24, dexterity=5))
        assert result.soul_level_needed == 5 + 13
        assert result.stat_differences["strength"] == 13
        assert result.stat_differences["dexterity"] == -6


class TestRanking:
    def test_ascending_by_soul_level(self):
        classes = [
            _make_class("weakling", 1, strength=8),
            _make_class("brute", 4, strength=20),
        ]
        ranked = rank_starting_classes(classes, Attributes(strength=24))
        assert [r.character.id for r in ranked] == ["brute", "weakling"]
        assert [r.soul_level_needed for r in ranked] == [8, 17]

    def test_ties_keep_catalog_order(self):
        classes = [_make_class(f"c{i}", 3) for i in range(4)]
        ranked = rank_starting_classes(classes, Attributes())
        assert [r.character.id for r in ranked] == ["c0", "c1", "c2", "c3"]

    def test_bundled_classes_empty_build(self, registry):
        results = calculate_starting_class_results(
            registry.starting_classes, EquipmentSelection()
        ).results
        assert [r.character.id for r in results[:3]] == ["pyromancer", "cleric", "wanderer"]
        assert results[3].character.id == "sorcerer"

    def test_find_optimal(self, registry):
        best = find_optimal_starting_class(
            registry.starting_classes, Attributes(strength=40, endurance=40)
        )
        assert best.character.id == "bandit"
        assert find_optimal_starting_class([], Attributes()) is None


class TestValidation:
    def test_stats_below_minimum_rejected(self):
        with pytest.raises(BuildValidationError) as exc:
            calculate_starting_class_results(
                [_make_class("knight", 5)], _greatsword_selection(), Attributes(strength=20)
            )
        assert "strength" in exc.value.errors

    def test_stats_out_of_range_rejected(self):
        with pytest.raises(BuildValidationError):
            calculate_starting_class_results(
                [_make_class("knight", 5)], EquipmentSelection(), Attributes(vitality=120)
            )

    def test_planned_stats_used_as_target(self):
        classes = [_make_class("knight", 5, strength=11)]
        results = calculate_starting_class_results(
            classes, _greatsword_selection(), Attributes(strength=30)
        ).results
        assert results[0].soul_level_needed == 5 + 19

    def test_minimum_used_without_stats(self):
        classes = [_make_class("knight", 5, strength=11)]
        results = calculate_starting_class_results(classes, _greatsword_selection()).results
        assert results[0].soul_level_needed == 5 + 13
