"""BuildService name resolution and validation."""

import pytest

from src.core.catalog.models import Attributes
from src.core.errors import BuildValidationError
from src.services.build_service import BuildService


@pytest.fixture()
def service(registry) -> BuildService:
    return BuildService(registry)


def test_two_handed_flag_lowers_strength(service):
    one_handed = service.build_selection(weapons=[{"name": "Zweihander", "two_handed": False}])
    two_handed = service.build_selection(weapons=[{"name": "Zweihander", "two_handed": True}])
    assert service.requirements(one_handed).minimum.strength == 24
    assert service.requirements(two_handed).minimum.strength == 16


def test_unknown_item(service):
    with pytest.raises(BuildValidationError, match="Unknown weapon: Excalibur"):
        service.build_selection(weapons=[{"name": "Excalibur"}])
    with pytest.raises(BuildValidationError, match="Unknown ring"):
        service.build_selection(rings=["Ring of Sacrifice Deluxe"])


def test_requirements_with_stats(service):
    selection = service.build_selection(weapons=[{"name": "Claymore"}])
    report = service.requirements(selection, Attributes(strength=10, dexterity=10))
    assert report.validation is not None
    assert not report.validation.is_valid
    assert report.suggested_stats.strength == 16


def test_requirements_rejects_out_of_range_stats(service):
    selection = service.build_selection()
    with pytest.raises(BuildValidationError) as exc:
        service.requirements(selection, Attributes(strength=120))
    assert "strength" in exc.value.errors


def test_rank_starting_classes(service):
    selection = service.build_selection(weapons=[{"name": "Zweihander"}])
    ranking = service.rank_starting_classes(selection)
    assert len(ranking.results) == 10
    levels = [r.soul_level_needed for r in ranking.results]
    assert levels == sorted(levels)
