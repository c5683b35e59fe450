"""Upgrade path planner."""

import pytest

from src.core.catalog.models import AscendStep, StepType, UpgradePath, UpgradeStep
from src.core.errors import UpgradeInputError, UpgradePathError
from src.core.upgrade.planner import (
    ASCEND_STEP_NOT_FOUND,
    INVALID_ASCENSION_CONFIG,
    NO_ASCENSION_PATH,
    UpgradeJourney,
    UpgradePlanner,
    calculate_purchase_cost,
    merge_materials,
)


def _make_path(path_id: str, levels: int = 5, material: str = "shard", ascends=()) -> UpgradePath:
    return UpgradePath(
        id=path_id,
        name=path_id.title(),
        steps=tuple(
            UpgradeStep(from_level=i, to_level=i + 1, souls=100 * (i + 1), materials={material: 1})
            for i in range(levels)
        ),
        ascend_steps=tuple(ascends),
    )


def _ascend(base: str, required: int, souls: int = 50, material: str = "ember") -> AscendStep:
    return AscendStep(
        from_level=required,
        to_level=0,
        souls=souls,
        materials={material: 1},
        base_path_id=base,
        required_level=required,
    )


@pytest.fixture()
def planner(registry) -> UpgradePlanner:
    return UpgradePlanner(registry.upgrade_paths)


def _kinds(journey: UpgradeJourney) -> list[tuple]:
    return [
        (s.type, s.path_id or f"{s.from_path_id}->{s.to_path_id}", s.from_level, s.to_level)
        for s in journey.steps
    ]


class TestSamePath:
    def test_no_op(self, planner):
        result = planner.calculate("regular", 5, "regular", 5)
        assert result.souls == 0
        assert result.materials == {}
        assert result.steps == []

    def test_reinforcement_window(self, planner):
        journey = planner.plan("regular", 3, "regular", 7)
        assert [(s.from_level, s.to_level) for s in journey.steps] == [(3, 4), (4, 5), (5, 6), (6, 7)]
        assert journey.souls == 800
        assert journey.materials == {"titanite_shard": 5, "large_titanite_shard": 2}

    def test_additive(self, planner):
        whole = planner.plan("regular", 0, "regular", 15)
        first = planner.plan("regular", 0, "regular", 6)
        second = planner.plan("regular", 6, "regular", 15)
        combined = first + second
        assert combined.souls == whole.souls
        assert combined.materials == whole.materials
        assert combined.steps == whole.steps

    def test_idempotent(self, planner):
        assert planner.plan("regular", 2, "crystal", 4) == planner.plan("regular", 2, "crystal", 4)

    def test_without_ascension_stays_on_current_path(self, planner):
        journey = planner.plan("regular", 0, "crystal", 3, include_ascension=False)
        assert {s.path_id for s in journey.steps} == {"regular"}
        assert len(journey.steps) == 3


class TestAscension:
    def test_regular_ten_to_crystal_three(self, planner):
        result = planner.calculate("regular", 10, "crystal", 3)
        assert [s.type for s in result.steps] == [
            StepType.ASCEND,
            StepType.REINFORCE,
            StepType.REINFORCE,
            StepType.REINFORCE,
        ]
        ascend = result.steps[0]
        assert (ascend.from_path_id, ascend.to_path_id) == ("regular", "crystal")
        assert result.souls == 200 + 200 * 3
        assert result.materials == {"titanite_chunk": 5}

    def test_base_reinforced_up_to_required_level(self, planner):
        journey = planner.plan("regular", 0, "magic", 2)
        assert _kinds(journey) == [
            *[(StepType.REINFORCE, "regular", i, i + 1) for i in range(5)],
            (StepType.ASCEND, "regular->magic", 5, 0),
            (StepType.REINFORCE, "magic", 0, 1),
            (StepType.REINFORCE, "magic", 1, 2),
        ]

    def test_preferred_edge_from_current_path(self, planner):
        journey = planner.plan("magic", 5, "enchanted", 2)
        assert _kinds(journey) == [
            (StepType.ASCEND, "magic->enchanted", 5, 0),
            (StepType.REINFORCE, "enchanted", 0, 1),
            (StepType.REINFORCE, "enchanted", 1, 2),
        ]

    def test_cross_path_uses_longest_chain(self, planner):
        journey = planner.plan("regular", 0, "chaos", 5)
        ascends = [(s.from_path_id, s.to_path_id) for s in journey.steps if s.type == StepType.ASCEND]
        assert ascends == [("regular", "fire"), ("fire", "chaos")]
        assert len(journey.steps) == 17

    def test_boss_ascension(self, planner):
        result = planner.calculate("regular", 5, "boss", 3)
        assert result.steps[0].type == StepType.ASCEND
        assert result.materials["boss_soul"] == 1
        assert result.souls == 5000 + 3 * 5000
        assert result.materials["demon_titanite"] == 4

    def test_highest_required_level_wins(self):
        paths = [
            _make_path("a", 10),
            _make_path("b", 10),
            _make_path("t", 3, ascends=[_ascend("a", 3), _ascend("b", 7)]),
        ]
        planner = UpgradePlanner(paths)
        assert planner.select_ascend_step(paths[2]).base_path_id == "b"

    def test_tie_prefers_base_with_ascensions(self):
        paths = [
            _make_path("root", 10),
            _make_path("mid", 5, ascends=[_ascend("root", 5)]),
            _make_path("top", 5, ascends=[_ascend("root", 5), _ascend("mid", 5)]),
        ]
        planner = UpgradePlanner(paths)
        assert planner.select_ascend_step(paths[2]).base_path_id == "mid"

    def test_chain_search_is_acyclic(self):
        paths = [
            _make_path("a", ascends=[_ascend("c", 2)]),
            _make_path("b", ascends=[_ascend("a", 2)]),
            _make_path("c", ascends=[_ascend("b", 2)]),
        ]
        planner = UpgradePlanner(paths)
        chains = planner.find_ascension_chains("a", "c")
        assert chains == [["a", "b", "c"]]
        for chain in chains:
            assert len(chain) == len(set(chain))


class TestErrors:
    def test_no_ascension_into_root_path(self, planner):
        with pytest.raises(UpgradePathError, match=NO_ASCENSION_PATH):
            planner.plan("regular", 0, "special", 3)

    def test_unreachable_target(self, planner):
        with pytest.raises(UpgradePathError, match=NO_ASCENSION_PATH):
            planner.plan("magic", 5, "crystal", 1)

    def test_unknown_path(self, planner):
        with pytest.raises(UpgradePathError, match="Unknown upgrade path"):
            planner.plan("mythril", 0, "regular", 3)

    def test_invalid_configuration(self):
        planner = UpgradePlanner([_make_path("broken", ascends=[_ascend("ghost", 3)])])
        with pytest.raises(UpgradePathError, match=INVALID_ASCENSION_CONFIG):
            planner.build_journey("broken", 0, 2)

    def test_ascend_step_not_found(self, planner):
        with pytest.raises(UpgradePathError, match=ASCEND_STEP_NOT_FOUND):
            planner.find_ascend_step(planner.get_path("crystal"), "magic")

    @pytest.mark.parametrize(
        "args",
        [
            ("regular", -1, "regular", 3),
            ("regular", 5, "regular", 3),
            ("regular", 0, "regular", 16),
            ("regular", 16, "crystal", 1),
            ("regular", 10, "crystal", 6),
        ],
    )
    def test_invalid_levels(self, planner, args):
        with pytest.raises(UpgradeInputError):
            planner.plan(*args)


class TestHelpers:
    def test_merge_materials_is_pure(self):
        base = {"shard": 1}
        merged = merge_materials(base, {"shard": 2, "chunk": 1})
        assert merged == {"shard": 3, "chunk": 1}
        assert base == {"shard": 1}

    def test_steps_keep_their_own_materials(self, planner):
        journey = planner.plan("regular", 0, "regular", 2)
        assert [s.materials for s in journey.steps] == [{"titanite_shard": 1}, {"titanite_shard": 1}]
        assert journey.materials == {"titanite_shard": 2}

    def test_purchase_cost(self, registry, planner):
        result = planner.calculate(
            "regular", 0, "regular", 5, merchant=registry.get_merchant("blacksmith_andre")
        )
        assert result.materials == {"titanite_shard": 9}
        assert result.purchase_cost == 9 * 800
        assert calculate_purchase_cost(result.materials, None) == 0

    def test_max_level(self, planner):
        assert planner.max_level_for_path("regular") == 15
        assert planner.max_level_for_path("magic") == 10

    def test_valid_targets_and_sources(self, planner):
        targets = {p.id for p in planner.valid_target_paths("regular")}
        assert "chaos" in targets and "regular" in targets
        assert "special" not in targets
        assert {p.id for p in planner.valid_source_paths("chaos")} == {"regular", "fire", "chaos"}
