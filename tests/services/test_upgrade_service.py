"""UpgradeService plans, merchants and path options."""

import pytest

from src.core.cache import BoundedCache
from src.core.errors import UpgradeInputError, UpgradePathError
from src.services.upgrade_service import UpgradeService


@pytest.fixture()
def service(registry, event_bus) -> UpgradeService:
    return UpgradeService(registry, event_bus, BoundedCache(4))


def test_plan_with_merchant(service):
    plan = service.plan("regular", 0, "regular", 5, merchant_id="crestfallen_merchant")
    assert plan.result.materials == {"titanite_shard": 9}
    assert plan.result.purchase_cost == 9 * 1000
    assert plan.purchaseable_cost == 9 * 1000
    assert plan.potential_savings == 9 * 200
    assert plan.merchant_id == "crestfallen_merchant"
    assert len(plan.grouped_steps) == 1


def test_plan_is_memoized(service):
    first = service.plan("regular", 10, "crystal", 3)
    second = service.plan("regular", 10, "crystal", 3)
    assert second.grouped_steps is first.grouped_steps
    assert second.result.timestamp >= first.result.timestamp


def test_findable_materials(service):
    plan = service.plan("regular", 10, "crystal", 3)
    assert plan.categorized.findable == {"titanite_chunk": 5}
    assert plan.purchaseable_cost == 0


def test_unknown_merchant(service):
    with pytest.raises(UpgradeInputError, match="Unknown merchant"):
        service.plan("regular", 0, "regular", 5, merchant_id="patches")


def test_path_error_propagates(service):
    with pytest.raises(UpgradePathError):
        service.plan("regular", 0, "dragon", 1)


def test_path_options(service):
    options = service.path_options(current_path_id="magic")
    assert {o.id for o in options.target} == {"magic", "enchanted"}
    assert len(options.current) == len(service.planner.paths)

    narrowed = service.path_options(target_path_id="occult")
    assert {o.id for o in narrowed.current} == {"regular", "divine", "occult"}


def test_path_options_unknown(service):
    with pytest.raises(UpgradePathError):
        service.path_options(current_path_id="mythril")


def test_merchants(service):
    assert {m.id for m in service.merchants()} >= {"crestfallen_merchant", "blacksmith_andre"}
