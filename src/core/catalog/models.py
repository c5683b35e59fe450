"""Catalog domain models (DB independent).

Every record is a frozen dataclass; upgraded or ring-adjusted variants are
built with ``dataclasses.replace`` and never mutate the catalog.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Mapping, Optional

DEFENSE_FIELDS: tuple[str, ...] = (
    "normal",
    "strike",
    "slash",
    "thrust",
    "magic",
    "fire",
    "lightning",
    "bleed",
    "poison",
    "curse",
)
PHYSICAL_FIELDS: tuple[str, ...] = ("normal", "strike", "slash", "thrust")
ELEMENTAL_FIELDS: tuple[str, ...] = ("magic", "fire", "lightning")
STATUS_FIELDS: tuple[str, ...] = ("bleed", "poison", "curse")

ARMOR_SLOTS: tuple[str, ...] = ("head", "chest", "hands", "legs")

ATTRIBUTES: tuple[str, ...] = (
    "vitality",
    "attunement",
    "endurance",
    "strength",
    "dexterity",
    "resistance",
    "intelligence",
    "faith",
)


class ItemKind(str, Enum):
    WEAPON = "weapon"
    SHIELD = "shield"
    CATALYST = "catalyst"
    TALISMAN = "talisman"
    SORCERY = "sorcery"
    MIRACLE = "miracle"
    PYROMANCY = "pyromancy"


WEAPON_LIKE_KINDS: tuple[ItemKind, ...] = (
    ItemKind.WEAPON,
    ItemKind.SHIELD,
    ItemKind.CATALYST,
    ItemKind.TALISMAN,
)
SPELL_KINDS: tuple[ItemKind, ...] = (
    ItemKind.SORCERY,
    ItemKind.MIRACLE,
    ItemKind.PYROMANCY,
)


class StepType(str, Enum):
    REINFORCE = "reinforce"
    ASCEND = "ascend"


@dataclass(frozen=True)
class DefenseBlock:
    """Ten defense/resistance values of a piece or an aggregate."""

    normal: float = 0
    strike: float = 0
    slash: float = 0
    thrust: float = 0
    magic: float = 0
    fire: float = 0
    lightning: float = 0
    bleed: float = 0
    poison: float = 0
    curse: float = 0

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, Any]]) -> DefenseBlock:
        raw = raw or {}
        return cls(**{name: raw.get(name, 0) or 0 for name in DEFENSE_FIELDS})

    def get(self, name: str) -> float:
        return getattr(self, name, 0) if name in DEFENSE_FIELDS else 0

    @property
    def physical(self) -> float:
        return sum(getattr(self, name) for name in PHYSICAL_FIELDS)

    @property
    def elemental(self) -> float:
        return sum(getattr(self, name) for name in ELEMENTAL_FIELDS)

    @property
    def status(self) -> float:
        return sum(getattr(self, name) for name in STATUS_FIELDS)

    def __add__(self, other: DefenseBlock) -> DefenseBlock:
        return DefenseBlock(
            **{name: getattr(self, name) + getattr(other, name) for name in DEFENSE_FIELDS}
        )

    def to_dict(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in DEFENSE_FIELDS}


@dataclass(frozen=True)
class Requirements:
    strength: int = 0
    dexterity: int = 0
    intelligence: int = 0
    faith: int = 0

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, Any]]) -> Requirements:
        raw = raw or {}
        return cls(**{f.name: int(raw.get(f.name, 0) or 0) for f in fields(cls)})


@dataclass(frozen=True)
class Attributes:
    """The eight leveling attributes of a character."""

    vitality: int = 1
    attunement: int = 1
    endurance: int = 1
    strength: int = 1
    dexterity: int = 1
    resistance: int = 1
    intelligence: int = 1
    faith: int = 1

    @classmethod
    def uniform(cls, value: int) -> Attributes:
        return cls(**{name: value for name in ATTRIBUTES})

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any], default: int = 1) -> Attributes:
        return cls(**{name: int(raw.get(name, default)) for name in ATTRIBUTES})

    def get(self, name: str) -> int:
        return getattr(self, name)

    def to_dict(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in ATTRIBUTES}


@dataclass(frozen=True)
class Armor:
    name: str
    armor_type: str  # "light-armor", "heavy-armor", ...
    slot: str  # one of ARMOR_SLOTS
    weight: float
    defense: DefenseBlock
    poise: float = 0
    stamina_regen_reduction: float = 0
    upgrade_path: Optional[str] = None  # "regular" | "special"
    upgrade_level: int = 0
    armor_set: Optional[str] = None


@dataclass(frozen=True)
class ArmorSet:
    id: str
    name: str
    armor_type: str
    pieces: dict[str, Armor]  # slot -> piece
    total_defense: DefenseBlock
    total_poise: float
    total_weight: float
    upgrade_level: int = 0


@dataclass(frozen=True)
class Weapon:
    """Weapon-like item: weapons, shields, catalysts and talismans."""

    name: str
    kind: ItemKind
    category: str  # "greatswords", "catalysts", "small-shields", ...
    weight: float
    requirements: Requirements
    two_handed: bool = True  # False: never benefits from two-handing (bows)
    required_two_handed: bool = False
    upgrade_paths: tuple[str, ...] = ()
    damage: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class Spell:
    name: str
    kind: ItemKind
    category: str
    requirements: Requirements
    attunement_slots: int = 1
    uses: int = 1


@dataclass(frozen=True)
class Ring:
    name: str
    category: str
    weight: float = 0
    stat_bonus: dict[str, float] = field(default_factory=dict)
    attunement_slots: int = 0
    equip_load_multiplier: float = 1.0
    ninja_flip: bool = False
    description: str = ""


@dataclass(frozen=True)
class UpgradeStep:
    from_level: int
    to_level: int
    souls: int
    materials: dict[str, int]


@dataclass(frozen=True)
class AscendStep:
    """Edge into a path from ``base_path_id`` once it reaches ``required_level``."""

    from_level: int
    to_level: int
    souls: int
    materials: dict[str, int]
    base_path_id: Optional[str] = None
    required_level: Optional[int] = None


@dataclass(frozen=True)
class UpgradePath:
    id: str
    name: str
    steps: tuple[UpgradeStep, ...] = ()
    ascend_steps: tuple[AscendStep, ...] = ()

    @property
    def has_ascension(self) -> bool:
        return bool(self.ascend_steps)

    @property
    def max_level(self) -> int:
        return max((step.to_level for step in self.steps), default=0)


@dataclass(frozen=True)
class Material:
    id: str
    name: str
    category: str


@dataclass(frozen=True)
class Merchant:
    id: str
    name: str
    material_prices: dict[str, int]

    def price_of(self, material_id: str) -> int:
        return self.material_prices.get(material_id, 0)


@dataclass(frozen=True)
class StartingClass:
    id: str
    name: str
    starting_level: int
    stats: Attributes


@dataclass(frozen=True)
class GameRules:
    two_handed_strength_multiplier: float = 1.5
    stat_min: int = 1
    stat_max: int = 99
    soul_level_min: int = 1
    soul_level_max: int = 713
    max_attunement_slots: int = 10
    max_weapon_like_per_group: int = 2
    max_spells_per_school: int = 10
    soul_levels_per_attribute_point: int = 1
    # (attunement level, slots) ascending by level
    attunement_slot_table: tuple[tuple[int, int], ...] = (
        (10, 1),
        (12, 2),
        (14, 3),
        (16, 4),
        (19, 5),
        (23, 6),
        (28, 7),
        (34, 8),
        (41, 9),
        (50, 10),
    )
