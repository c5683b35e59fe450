"""Minimum requirements, validation and two-handed transitions."""

import pytest

from src.core.build.requirements import (
    EquipmentSelection,
    SelectedItem,
    add_item,
    attunement_info,
    calculate_item_requirements,
    calculate_minimum_requirements,
    calculate_required_attunement_slots,
    check_soul_level,
    check_stat_ranges,
    is_two_handed_toggle_disabled,
    remove_item,
    reset_stats_for_removed_item,
    reset_stats_to_requirements,
    toggle_two_handed,
    two_handed_toggle_blocked_reason,
    update_stats_from_requirements,
    validate_character_stats,
)
from src.core.catalog.models import (
    ATTRIBUTES,
    Attributes,
    GameRules,
    ItemKind,
    Requirements,
    Ring,
    Spell,
    Weapon,
)
from src.core.errors import BuildValidationError


def _make_weapon(
    name: str = "Greatsword",
    strength: int = 24,
    dexterity: int = 10,
    kind: ItemKind = ItemKind.WEAPON,
    two_handed: bool = True,
    required_two_handed: bool = False,
    **requirements,
) -> Weapon:
    return Weapon(
        name=name,
        kind=kind,
        category="greatswords",
        weight=6.0,
        requirements=Requirements(strength=strength, dexterity=dexterity, **requirements),
        two_handed=two_handed,
        required_two_handed=required_two_handed,
    )


def _make_bow() -> Weapon:
    return _make_weapon("Bow", strength=9, dexterity=12, two_handed=False, required_two_handed=True)


def _make_spell(
    name: str = "Soul Arrow",
    kind: ItemKind = ItemKind.SORCERY,
    slots: int = 1,
    **requirements,
) -> Spell:
    return Spell(
        name=name,
        kind=kind,
        category="test",
        requirements=Requirements(**requirements),
        attunement_slots=slots,
    )


class TestMinimumRequirements:
    def test_two_handed_greatsword(self):
        selection = EquipmentSelection(
            weapons=(SelectedItem(_make_weapon(strength=24, dexterity=0), two_handed=True),)
        )
        minimum = calculate_minimum_requirements(selection)
        assert minimum.strength == 16
        for stat in ATTRIBUTES:
            if stat != "strength":
                assert minimum.get(stat) == 1

    def test_one_handed_keeps_full_strength(self):
        selection = EquipmentSelection(weapons=(SelectedItem(_make_weapon(strength=24)),))
        assert calculate_minimum_requirements(selection).strength == 24

    def test_bow_never_gets_the_reduction(self):
        item = SelectedItem(_make_bow(), two_handed=True)
        assert calculate_item_requirements(item)["strength"] == 9

    def test_maximum_across_items(self):
        selection = EquipmentSelection(
            weapons=(SelectedItem(_make_weapon(strength=10, dexterity=20)),),
            shields=(SelectedItem(_make_weapon("Shield", strength=16, dexterity=0, kind=ItemKind.SHIELD)),),
            sorceries=(_make_spell(intelligence=24),),
            miracles=(_make_spell("Heal", ItemKind.MIRACLE, faith=12),),
        )
        minimum = calculate_minimum_requirements(selection)
        assert (minimum.strength, minimum.dexterity) == (16, 20)
        assert (minimum.intelligence, minimum.faith) == (24, 12)

    def test_spells_only_contribute_int_and_faith(self):
        spell = _make_spell(strength=40, intelligence=10)
        assert calculate_item_requirements(spell) == {"intelligence": 10, "faith": 0}

    def test_attunement_from_spell_slots(self):
        spells = tuple(_make_spell(f"S{i}", intelligence=10) for i in range(3))
        minimum = calculate_minimum_requirements(EquipmentSelection(sorceries=spells))
        assert minimum.attunement == 14

    def test_ring_slots_lower_attunement(self):
        spells = tuple(_make_spell(f"S{i}") for i in range(3))
        selection = EquipmentSelection(
            sorceries=spells, rings=(Ring("White Seance Ring", "magic", attunement_slots=1),)
        )
        assert calculate_minimum_requirements(selection).attunement == 12

    def test_required_slots_capped(self):
        spells = [_make_spell(f"S{i}", slots=2) for i in range(8)]
        assert calculate_required_attunement_slots(spells) == 10

    def test_ring_slots_subtracted_before_cap(self):
        selection = EquipmentSelection(
            sorceries=tuple(_make_spell(f"S{i}") for i in range(6)),
            miracles=tuple(_make_spell(f"M{i}", ItemKind.MIRACLE) for i in range(5)),
            rings=(Ring("White Seance Ring", "magic", attunement_slots=1),),
        )
        assert calculate_minimum_requirements(selection).attunement == 50
        assert attunement_info(selection, 50).required_slots == 10

    def test_custom_multiplier(self):
        rules = GameRules(two_handed_strength_multiplier=2.0)
        item = SelectedItem(_make_weapon(strength=25), two_handed=True)
        assert calculate_item_requirements(item, rules)["strength"] == 13

    def test_empty_selection_is_all_floor(self):
        minimum = calculate_minimum_requirements(EquipmentSelection())
        assert all(minimum.get(stat) == 1 for stat in ATTRIBUTES)

    @pytest.mark.parametrize(
        "extra",
        [
            _make_weapon("Pike", strength=30, dexterity=8),
            _make_weapon("Rapier", strength=5, dexterity=30),
            _make_spell("Crystal Soul Spear", intelligence=44, slots=2),
            _make_spell("Sunlight Spear", ItemKind.MIRACLE, faith=50),
        ],
    )
    def test_adding_items_never_lowers_minimums(self, extra):
        base = add_item(EquipmentSelection(), _make_weapon(strength=20, dexterity=14))
        base = add_item(base, _make_spell(intelligence=20))
        before = calculate_minimum_requirements(base)
        after = calculate_minimum_requirements(add_item(base, extra))
        for stat in ATTRIBUTES:
            assert after.get(stat) >= before.get(stat)


class TestValidation:
    def test_valid_and_invalid(self):
        minimum = Attributes(strength=16, dexterity=10)
        ok = validate_character_stats(Attributes(strength=16, dexterity=12), minimum)
        assert ok.is_valid
        assert ok.errors == {}

        bad = validate_character_stats(Attributes(strength=12, dexterity=12), minimum)
        assert not bad.is_valid
        assert bad.checks["strength"].required == 16
        assert bad.errors == {"strength": "Strength must be at least 16"}

    def test_stat_ranges(self):
        assert check_stat_ranges(Attributes()) == {}
        errors = check_stat_ranges(Attributes(vitality=0, faith=100))
        assert set(errors) == {"vitality", "faith"}

    def test_soul_level_range(self):
        check_soul_level(713)
        with pytest.raises(BuildValidationError):
            check_soul_level(714)
        with pytest.raises(BuildValidationError):
            check_soul_level(0)


class TestStatUpdates:
    def test_update_raises_only_low_stats(self):
        stats = Attributes(strength=10, dexterity=30)
        updated = update_stats_from_requirements(stats, Attributes(strength=16, dexterity=10))
        assert (updated.strength, updated.dexterity) == (16, 30)

    def test_reset_to_requirements(self):
        minimum = Attributes(strength=16)
        assert reset_stats_to_requirements(minimum) == minimum

    def test_reset_for_removed_item_lowers_pinned_stats_only(self):
        pike = SelectedItem(_make_weapon("Pike", strength=30, dexterity=8))
        sword = SelectedItem(_make_weapon("Sword", strength=12, dexterity=12))
        remaining = EquipmentSelection(weapons=(sword,))
        stats = Attributes(strength=30, dexterity=20)
        reset = reset_stats_for_removed_item(stats, pike, remaining)
        assert reset.strength == 12
        assert reset.dexterity == 20


class TestSelectionLimits:
    def test_weapon_limit(self):
        selection = EquipmentSelection()
        for name in ("A", "B"):
            selection = add_item(selection, _make_weapon(name))
        with pytest.raises(BuildValidationError):
            add_item(selection, _make_weapon("C"))

    def test_spell_limit(self):
        selection = EquipmentSelection()
        for i in range(10):
            selection = add_item(selection, _make_spell(f"S{i}"))
        with pytest.raises(BuildValidationError):
            add_item(selection, _make_spell("S10"))

    def test_remove_out_of_range(self):
        with pytest.raises(BuildValidationError):
            remove_item(EquipmentSelection(), ItemKind.WEAPON, 0)


class TestTwoHanded:
    def test_blocked_reasons(self):
        assert two_handed_toggle_blocked_reason(EquipmentSelection()) == "no_weapon"

        mixed = add_item(add_item(EquipmentSelection(), _make_weapon()), _make_weapon("S", kind=ItemKind.SHIELD))
        assert two_handed_toggle_blocked_reason(mixed) == "mixed_types"

        pair = add_item(add_item(EquipmentSelection(), _make_weapon("A")), _make_weapon("B"))
        assert two_handed_toggle_blocked_reason(pair) == "multiple_items"

        bow = add_item(EquipmentSelection(), _make_bow())
        assert two_handed_toggle_blocked_reason(bow) == "locked"
        assert is_two_handed_toggle_disabled(bow)

    def test_toggle_single_weapon(self):
        selection = add_item(EquipmentSelection(), _make_weapon())
        toggled = toggle_two_handed(selection)
        assert toggled.is_two_handed
        assert calculate_minimum_requirements(toggled).strength == 16

    def test_toggle_twice_is_identity(self):
        selection = add_item(EquipmentSelection(), _make_weapon())
        assert toggle_two_handed(toggle_two_handed(selection)) == selection

    def test_blocked_toggle_is_noop(self):
        pair = add_item(add_item(EquipmentSelection(), _make_weapon("A")), _make_weapon("B"))
        assert toggle_two_handed(pair) is pair

    def test_required_item_auto_enables_and_disables(self):
        selection = add_item(EquipmentSelection(), _make_bow())
        assert selection.is_two_handed

        selection = add_item(selection, _make_weapon("Sword"))
        selection = remove_item(selection, ItemKind.WEAPON, 0)
        assert [s.item.name for s in selection.weapons] == ["Sword"]
        assert not selection.is_two_handed

    def test_attunement_info(self):
        selection = EquipmentSelection(
            sorceries=(_make_spell(),), rings=(Ring("Darkmoon Seance Ring", "magic", attunement_slots=1),)
        )
        info = attunement_info(selection, attunement=12)
        assert info.required_slots == 1
        assert info.ring_slots == 1
        assert info.current_slots == 3
        assert info.next_slot_level == 14
