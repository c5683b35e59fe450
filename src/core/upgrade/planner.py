"""Upgrade path planner.

Upgrade paths form a DAG: every path has ordered reinforcement steps and
optional ascension edges from a base path at a required level. A journey
from (current path, level) to (target path, level) is a sequence of
reinforce and ascend steps with summed souls and merged materials.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Mapping, Optional

from src.core.catalog.models import AscendStep, Merchant, StepType, UpgradePath
from src.core.errors import UpgradeInputError, UpgradePathError

logger = logging.getLogger(__name__)

NO_ASCENSION_PATH = "No valid ascension path found"
INVALID_ASCENSION_CONFIG = "Invalid ascension path configuration"
ASCEND_STEP_NOT_FOUND = "Ascension step not found"


def merge_materials(base: Mapping[str, int], addition: Mapping[str, int]) -> dict[str, int]:
    """Additive merge into a new dict; neither input is modified."""
    merged = dict(base)
    for material, qty in addition.items():
        merged[material] = merged.get(material, 0) + qty
    return merged


@dataclass(frozen=True)
class JourneyStep:
    type: StepType
    from_level: int
    to_level: int
    souls: int
    materials: dict[str, int]
    path_id: Optional[str] = None
    path_name: Optional[str] = None
    from_path_id: Optional[str] = None
    from_path_name: Optional[str] = None
    to_path_id: Optional[str] = None
    to_path_name: Optional[str] = None


@dataclass(frozen=True)
class UpgradeJourney:
    steps: tuple[JourneyStep, ...] = ()
    materials: dict[str, int] = field(default_factory=dict)
    souls: int = 0

    @classmethod
    def from_steps(cls, steps: Iterable[JourneyStep]) -> UpgradeJourney:
        steps = tuple(steps)
        materials: dict[str, int] = {}
        for step in steps:
            materials = merge_materials(materials, step.materials)
        return cls(steps=steps, materials=materials, souls=sum(s.souls for s in steps))

    def __add__(self, other: UpgradeJourney) -> UpgradeJourney:
        return UpgradeJourney(
            steps=self.steps + other.steps,
            materials=merge_materials(self.materials, other.materials),
            souls=self.souls + other.souls,
        )


@dataclass
class UpgradeResult:
    souls: int
    materials: dict[str, int]
    steps: list[JourneyStep]
    purchase_cost: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def calculate_purchase_cost(materials: Mapping[str, int], merchant: Optional[Merchant]) -> int:
    if merchant is None:
        return 0
    return sum(merchant.price_of(material) * qty for material, qty in materials.items())


class UpgradePlanner:
    """Journey building over a fixed set of upgrade paths."""

    def __init__(self, paths: Iterable[UpgradePath]) -> None:
        self._paths: dict[str, UpgradePath] = {path.id: path for path in paths}

    @property
    def paths(self) -> list[UpgradePath]:
        return list(self._paths.values())

    def get_path(self, path_id: str) -> UpgradePath:
        path = self._paths.get(path_id)
        if path is None:
            raise UpgradePathError(f"Unknown upgrade path: {path_id}")
        return path

    def max_level_for_path(self, path_id: str) -> int:
        return self.get_path(path_id).max_level

    # --- step builders ---

    def reinforcement_steps(
        self, path: UpgradePath, from_level: int, to_level: int
    ) -> list[JourneyStep]:
        return [
            JourneyStep(
                type=StepType.REINFORCE,
                from_level=step.from_level,
                to_level=step.to_level,
                souls=step.souls,
                materials=dict(step.materials),
                path_id=path.id,
                path_name=path.name,
            )
            for step in path.steps
            if from_level <= step.from_level < to_level
        ]

    def _ascension(
        self, base: UpgradePath, target: UpgradePath, ascend: AscendStep
    ) -> JourneyStep:
        return JourneyStep(
            type=StepType.ASCEND,
            from_level=ascend.from_level,
            to_level=ascend.to_level,
            souls=ascend.souls,
            materials=dict(ascend.materials),
            from_path_id=base.id,
            from_path_name=base.name,
            to_path_id=target.id,
            to_path_name=target.name,
        )

    def _base_of(self, ascend: AscendStep) -> tuple[UpgradePath, int]:
        if ascend.base_path_id is None or ascend.required_level is None:
            raise UpgradePathError(INVALID_ASCENSION_CONFIG)
        base = self._paths.get(ascend.base_path_id)
        if base is None:
            raise UpgradePathError(INVALID_ASCENSION_CONFIG)
        return base, ascend.required_level

    def select_ascend_step(self, path: UpgradePath) -> AscendStep:
        """Preferred edge into ``path``.

        The edge with the highest required base level wins; on a tie, a base
        path that itself has ascension edges is preferred over a root path.
        Remaining ties keep data order.
        """
        if not path.has_ascension:
            raise UpgradePathError(NO_ASCENSION_PATH)

        def rank(step: AscendStep) -> tuple[int, int]:
            base = self._paths.get(step.base_path_id or "")
            return (step.required_level or 0, 1 if base and base.has_ascension else 0)

        best = path.ascend_steps[0]
        for step in path.ascend_steps[1:]:
            if rank(step) > rank(best):
                best = step
        return best

    def find_ascend_step(self, target: UpgradePath, from_path_id: str) -> AscendStep:
        for step in target.ascend_steps:
            if step.base_path_id == from_path_id:
                return step
        raise UpgradePathError(ASCEND_STEP_NOT_FOUND)

    # --- journeys ---

    def build_journey(
        self,
        path_id: str,
        from_level: int,
        to_level: int,
        include_ascension: bool = True,
        skip_base_path: bool = False,
    ) -> UpgradeJourney:
        """Journey onto ``path_id`` through its preferred ascension edge.

        The base path is reinforced from ``from_level`` up to the edge's
        required level without expanding its own ascension edges, then the
        target path is reinforced from 0.
        """
        path = self.get_path(path_id)
        journey = UpgradeJourney()
        start = from_level

        if include_ascension and not skip_base_path and path.has_ascension:
            ascend = self.select_ascend_step(path)
            base, required_level = self._base_of(ascend)
            journey = journey + self.build_journey(
                base.id, from_level, required_level, include_ascension, skip_base_path=True
            )
            journey = journey + UpgradeJourney.from_steps([self._ascension(base, path, ascend)])
            start = 0

        return journey + UpgradeJourney.from_steps(
            self.reinforcement_steps(path, start, to_level)
        )

    def successors(self, path_id: str) -> list[str]:
        """Paths reachable from ``path_id`` by a single ascension."""
        return [
            path.id
            for path in self._paths.values()
            if any(step.base_path_id == path_id for step in path.ascend_steps)
        ]

    def find_ascension_chains(self, start_id: str, target_id: str) -> list[list[str]]:
        """All simple chains of path ids from ``start_id`` to ``target_id``.

        Depth-first with an explicit stack; a path already on the current
        chain is never revisited, so cycles in the data cannot loop.
        """
        chains: list[list[str]] = []
        stack: list[list[str]] = [[start_id]]
        while stack:
            chain = stack.pop()
            node = chain[-1]
            if node == target_id and len(chain) > 1:
                chains.append(chain)
                continue
            for successor in reversed(self.successors(node)):
                if successor not in chain:
                    stack.append(chain + [successor])
        return chains

    def find_ascension_chain(self, start_id: str, target_id: str) -> list[str]:
        """Longest chain, first found on ties."""
        chains = self.find_ascension_chains(start_id, target_id)
        if not chains:
            raise UpgradePathError(NO_ASCENSION_PATH)
        best = chains[0]
        for chain in chains[1:]:
            if len(chain) > len(best):
                best = chain
        logger.debug("Ascension chain %s -> %s: %s", start_id, target_id, best)
        return best

    def _chain_journey(
        self, chain: list[str], current_level: int, desired_level: int
    ) -> UpgradeJourney:
        journey = UpgradeJourney()
        level = current_level
        for base_id, target_id in zip(chain, chain[1:]):
            base = self.get_path(base_id)
            target = self.get_path(target_id)
            ascend = self.find_ascend_step(target, base_id)
            _, required_level = self._base_of(ascend)
            journey = journey + UpgradeJourney.from_steps(
                [
                    *self.reinforcement_steps(base, level, required_level),
                    self._ascension(base, target, ascend),
                ]
            )
            level = 0
        final = self.get_path(chain[-1])
        return journey + UpgradeJourney.from_steps(
            self.reinforcement_steps(final, level, desired_level)
        )

    def validate_levels(
        self,
        current_path_id: str,
        current_level: int,
        target_path_id: str,
        desired_level: int,
    ) -> None:
        if current_level < 0 or desired_level < 0:
            raise UpgradeInputError("Upgrade levels cannot be negative")
        current_max = self.max_level_for_path(current_path_id)
        if current_level > current_max:
            raise UpgradeInputError(
                f"Current level {current_level} exceeds the maximum of {current_max}"
            )
        target_max = self.max_level_for_path(target_path_id)
        if desired_level > target_max:
            raise UpgradeInputError(
                f"Desired level {desired_level} exceeds the maximum of {target_max}"
            )
        if current_path_id == target_path_id and desired_level < current_level:
            raise UpgradeInputError(
                "Desired level must be greater than or equal to current level"
            )

    def plan(
        self,
        current_path_id: str,
        current_level: int,
        target_path_id: str,
        desired_level: int,
        include_ascension: bool = True,
    ) -> UpgradeJourney:
        """Journey from (current path, level) to (target path, level).

        Without ascension, or on the same path, only the current path is
        reinforced. When the preferred edge into the target starts at the
        current path the journey is built directly; otherwise the longest
        ascension chain from the current path is followed.
        """
        if current_path_id == target_path_id or not include_ascension:
            self.validate_levels(current_path_id, current_level, current_path_id, desired_level)
            path = self.get_path(current_path_id)
            return UpgradeJourney.from_steps(
                self.reinforcement_steps(path, current_level, desired_level)
            )

        self.validate_levels(current_path_id, current_level, target_path_id, desired_level)
        target = self.get_path(target_path_id)
        if not target.has_ascension:
            raise UpgradePathError(NO_ASCENSION_PATH)

        preferred = self.select_ascend_step(target)
        if preferred.base_path_id == current_path_id:
            return self.build_journey(target_path_id, current_level, desired_level)

        chain = self.find_ascension_chain(current_path_id, target_path_id)
        return self._chain_journey(chain, current_level, desired_level)

    def calculate(
        self,
        current_path_id: str,
        current_level: int,
        target_path_id: str,
        desired_level: int,
        merchant: Optional[Merchant] = None,
        include_ascension: bool = True,
    ) -> UpgradeResult:
        journey = self.plan(
            current_path_id, current_level, target_path_id, desired_level, include_ascension
        )
        return UpgradeResult(
            souls=journey.souls,
            materials=dict(journey.materials),
            steps=list(journey.steps),
            purchase_cost=calculate_purchase_cost(journey.materials, merchant),
        )

    # --- option helpers ---

    def valid_target_paths(self, current_path_id: str) -> list[UpgradePath]:
        """The current path plus every path reachable through ascensions."""
        reachable = [current_path_id]
        stack = [current_path_id]
        while stack:
            for successor in self.successors(stack.pop()):
                if successor not in reachable:
                    reachable.append(successor)
                    stack.append(successor)
        return [p for p in self._paths.values() if p.id in reachable]

    def valid_source_paths(self, target_path_id: str) -> list[UpgradePath]:
        """Paths from which ``target_path_id`` can be reached."""
        return [
            p for p in self._paths.values()
            if p.id == target_path_id or self.find_ascension_chains(p.id, target_path_id)
        ]
