"""Upgrade summary: step grouping, material categories and merchant prices."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Sequence

from src.core.catalog.models import Merchant, StepType
from src.core.upgrade.planner import JourneyStep, merge_materials


@dataclass
class GroupedStep:
    type: StepType
    from_level: int
    to_level: int
    souls: int
    materials: dict[str, int]
    path_id: Optional[str] = None
    path_name: Optional[str] = None
    from_path_name: Optional[str] = None
    to_path_name: Optional[str] = None
    count: int = 1


@dataclass(frozen=True)
class CategorizedMaterials:
    purchaseable: dict[str, int] = field(default_factory=dict)
    findable: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class MerchantPrice:
    merchant: Merchant
    price: int
    savings: int = 0


def group_steps(steps: Iterable[JourneyStep]) -> list[GroupedStep]:
    """Merge consecutive reinforcements on one path with contiguous levels.

    An ascension always starts its own group.
    """
    groups: list[GroupedStep] = []
    current: Optional[GroupedStep] = None
    for step in steps:
        if (
            step.type == StepType.REINFORCE
            and current is not None
            and current.type == StepType.REINFORCE
            and current.path_id == step.path_id
            and current.to_level == step.from_level
        ):
            current.to_level = step.to_level
            current.souls += step.souls
            current.materials = merge_materials(current.materials, step.materials)
            current.count += 1
            continue
        if current is not None:
            groups.append(current)
        current = GroupedStep(
            type=step.type,
            from_level=step.from_level,
            to_level=step.to_level,
            souls=step.souls,
            materials=dict(step.materials),
            path_id=step.path_id,
            path_name=step.path_name,
            from_path_name=step.from_path_name,
            to_path_name=step.to_path_name,
        )
    if current is not None:
        groups.append(current)
    return groups


def categorize_materials(
    materials: Mapping[str, int], merchants: Sequence[Merchant]
) -> CategorizedMaterials:
    """Purchaseable when any merchant prices the material above zero."""
    purchaseable: dict[str, int] = {}
    findable: dict[str, int] = {}
    for material, qty in materials.items():
        if any(m.price_of(material) > 0 for m in merchants):
            purchaseable[material] = qty
        else:
            findable[material] = qty
    return CategorizedMaterials(purchaseable=purchaseable, findable=findable)


def purchaseable_cost(
    materials: Mapping[str, int],
    merchants: Sequence[Merchant],
    merchant: Optional[Merchant],
) -> int:
    if merchant is None:
        return 0
    categorized = categorize_materials(materials, merchants)
    return sum(merchant.price_of(m) * qty for m, qty in categorized.purchaseable.items())


def find_merchants_for_material(
    material_id: str, merchants: Sequence[Merchant]
) -> list[MerchantPrice]:
    offers = [
        MerchantPrice(merchant=m, price=m.price_of(material_id))
        for m in merchants
        if m.price_of(material_id) > 0
    ]
    return sorted(offers, key=lambda o: o.price)


def find_better_prices(
    material_id: str, merchants: Sequence[Merchant], selected: Optional[Merchant]
) -> list[MerchantPrice]:
    """Merchants selling cheaper than ``selected``, cheapest first."""
    if selected is None:
        return []
    current = selected.price_of(material_id)
    return [
        MerchantPrice(merchant=o.merchant, price=o.price, savings=current - o.price)
        for o in find_merchants_for_material(material_id, merchants)
        if o.price < current
    ]


def material_savings(
    material_id: str,
    qty: int,
    merchants: Sequence[Merchant],
    selected: Optional[Merchant],
) -> int:
    """Souls saved buying ``qty`` from the cheapest merchant instead of ``selected``."""
    better = find_better_prices(material_id, merchants, selected)
    if not better:
        return 0
    return better[0].savings * qty


def total_potential_savings(
    materials: Mapping[str, int],
    merchants: Sequence[Merchant],
    selected: Optional[Merchant],
) -> int:
    categorized = categorize_materials(materials, merchants)
    return sum(
        material_savings(material, qty, merchants, selected)
        for material, qty in categorized.purchaseable.items()
    )
