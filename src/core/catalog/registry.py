"""Game data registry: JSON catalogs loaded into immutable records."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, TypeVar

from .models import (
    ARMOR_SLOTS,
    Armor,
    ArmorSet,
    AscendStep,
    Attributes,
    DefenseBlock,
    GameRules,
    ItemKind,
    Material,
    Merchant,
    Requirements,
    Ring,
    Spell,
    StartingClass,
    UpgradePath,
    UpgradeStep,
    Weapon,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_WEAPON_KIND_BY_CATEGORY = {
    "catalysts": ItemKind.CATALYST,
    "talismans": ItemKind.TALISMAN,
}

_SPELL_FILES = {
    ItemKind.SORCERY: "sorceries.json",
    ItemKind.MIRACLE: "miracles.json",
    ItemKind.PYROMANCY: "pyromancies.json",
}


def _parse_upgrade_paths(raw: Any) -> tuple[str, ...]:
    """Accept either a comma-joined string or a list of path ids."""
    if not raw:
        return ()
    if isinstance(raw, str):
        raw = raw.split(",")
    return tuple(p.strip() for p in raw if p and p.strip())


def _build_armor(raw: dict) -> Armor:
    slot = raw["slot"]
    if slot not in ARMOR_SLOTS:
        raise ValueError(f"unknown slot {slot!r}")
    return Armor(
        name=raw["name"],
        armor_type=raw["armor_type"],
        slot=slot,
        weight=float(raw["weight"]),
        defense=DefenseBlock.from_dict(raw.get("defense")),
        poise=float(raw.get("poise", 0)),
        stamina_regen_reduction=float(raw.get("stamina_regen_reduction", 0)),
        upgrade_path=raw.get("upgrade_path"),
        armor_set=raw.get("armor_set"),
    )


def _build_weapon(raw: dict, kind: Optional[ItemKind] = None) -> Weapon:
    category = raw["category"]
    return Weapon(
        name=raw["name"],
        kind=kind or _WEAPON_KIND_BY_CATEGORY.get(category, ItemKind.WEAPON),
        category=category,
        weight=float(raw["weight"]),
        requirements=Requirements.from_dict(raw.get("requirements")),
        two_handed=bool(raw.get("two_handed", True)),
        required_two_handed=bool(raw.get("required_two_handed", False)),
        upgrade_paths=_parse_upgrade_paths(raw.get("upgrade_path")),
        damage=dict(raw.get("damage", {})),
    )


def _build_spell(raw: dict, kind: ItemKind) -> Spell:
    return Spell(
        name=raw["name"],
        kind=kind,
        category=raw.get("category", kind.value),
        requirements=Requirements.from_dict(raw.get("requirements")),
        attunement_slots=int(raw.get("attunement_slots", 1)),
        uses=int(raw.get("uses", 1)),
    )


def _build_ring(raw: dict) -> Ring:
    return Ring(
        name=raw["name"],
        category=raw.get("category", "rings"),
        weight=float(raw.get("weight", 0)),
        stat_bonus={k: float(v) for k, v in raw.get("stat_bonus", {}).items()},
        attunement_slots=int(raw.get("attunement_slots", 0)),
        equip_load_multiplier=float(raw.get("equip_load_multiplier", 1.0)),
        ninja_flip=bool(raw.get("ninja_flip", False)),
        description=raw.get("description", ""),
    )


def _build_upgrade_path(raw: dict) -> UpgradePath:
    steps = tuple(
        UpgradeStep(
            from_level=int(s["from"]),
            to_level=int(s["to"]),
            souls=int(s["souls"]),
            materials={k: int(v) for k, v in s.get("materials", {}).items()},
        )
        for s in raw.get("steps", [])
    )
    ascend_steps = []
    for s in raw.get("ascend_steps", []):
        base = s.get("base_path") or {}
        required = base.get("required_level")
        ascend_steps.append(
            AscendStep(
                from_level=int(s.get("from", 0)),
                to_level=int(s.get("to", 0)),
                souls=int(s.get("souls", 0)),
                materials={k: int(v) for k, v in s.get("materials", {}).items()},
                base_path_id=base.get("path_id"),
                required_level=int(required) if required is not None else None,
            )
        )
    return UpgradePath(
        id=raw["id"],
        name=raw["name"],
        steps=steps,
        ascend_steps=tuple(ascend_steps),
    )


def _build_merchant(raw: dict) -> Merchant:
    return Merchant(
        id=raw["id"],
        name=raw["name"],
        material_prices={k: int(v) for k, v in raw.get("material_prices", {}).items()},
    )


def _build_material(raw: dict) -> Material:
    return Material(id=raw["id"], name=raw["name"], category=raw["category"])


def _build_starting_class(raw: dict) -> StartingClass:
    return StartingClass(
        id=raw["id"],
        name=raw["name"],
        starting_level=int(raw["starting_level"]),
        stats=Attributes.from_dict(raw["stats"]),
    )


def _build_rules(raw: dict) -> GameRules:
    table = raw.get("attunement_slot_table")
    kwargs = {k: v for k, v in raw.items() if k != "attunement_slot_table"}
    if table is not None:
        kwargs["attunement_slot_table"] = tuple(
            (int(row["level"]), int(row["slots"])) for row in table
        )
    return GameRules(**kwargs)


def _set_id(name: str) -> str:
    return name.lower().replace("'", "").replace(" ", "-")


class GameDataRegistry:
    """
    Catalog of armor, weapons, shields, rings, spells, upgrade paths,
    merchants, materials and starting classes.

    Collections are category-keyed and keep file order, which is also the
    tie-break order of every ranking built on top of them.
    """

    def __init__(self) -> None:
        self._armor: dict[str, list[Armor]] = {}
        self._weapons: dict[str, list[Weapon]] = {}
        self._shields: dict[str, list[Weapon]] = {}
        self._rings: dict[str, list[Ring]] = {}
        self._spells: dict[ItemKind, dict[str, list[Spell]]] = {
            kind: {} for kind in _SPELL_FILES
        }
        self._upgrade_paths: dict[str, UpgradePath] = {}
        self._merchants: dict[str, Merchant] = {}
        self._materials: dict[str, Material] = {}
        self._starting_classes: list[StartingClass] = []
        self.rules: GameRules = GameRules()

    # --- loading ---

    def load_from_dir(self, data_dir: str | Path) -> dict[str, int]:
        """Load every known catalog file in ``data_dir``. Returns per-file counts.

        Missing files leave that catalog empty; engines treat an empty
        catalog as a degenerate but valid input.
        """
        data_dir = Path(data_dir)
        counts = {
            "armor": self._load(data_dir / "armor.json", _build_armor),
            "weapons": self._load(data_dir / "weapons.json", _build_weapon),
            "shields": self._load(
                data_dir / "shields.json",
                lambda raw: _build_weapon(raw, ItemKind.SHIELD),
            ),
            "rings": self._load(data_dir / "rings.json", _build_ring),
            "upgrade_paths": self._load(
                data_dir / "upgrade_paths.json", _build_upgrade_path
            ),
            "materials": self._load(data_dir / "materials.json", _build_material),
            "merchants": self._load(data_dir / "merchants.json", _build_merchant),
            "starting_classes": self._load(
                data_dir / "starting_classes.json", _build_starting_class
            ),
        }
        for kind, filename in _SPELL_FILES.items():
            counts[filename.removesuffix(".json")] = self._load(
                data_dir / filename,
                lambda raw, kind=kind: _build_spell(raw, kind),
            )

        rules_path = data_dir / "rules.json"
        if rules_path.exists():
            with rules_path.open("r", encoding="utf-8") as f:
                self.rules = _build_rules(json.load(f))
        return counts

    def _load(self, path: Path, build: Callable[[dict], T]) -> int:
        if not path.exists():
            logger.warning("Catalog file not found: %s", path)
            return 0
        with path.open("r", encoding="utf-8") as f:
            raw_list: list[dict] = json.load(f)

        count = 0
        for raw in raw_list:
            try:
                self.register(build(raw))
                count += 1
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(
                    "Failed to load record: %s - %s",
                    raw.get("name", raw.get("id", "?")),
                    e,
                )

        logger.info("Loaded %d records from %s", count, path)
        return count

    def register(self, record: Any) -> None:
        """Add one record to the matching collection."""
        if isinstance(record, Armor):
            self._armor.setdefault(record.armor_type, []).append(record)
        elif isinstance(record, Weapon):
            target = self._shields if record.kind == ItemKind.SHIELD else self._weapons
            target.setdefault(record.category, []).append(record)
        elif isinstance(record, Spell):
            self._spells[record.kind].setdefault(record.category, []).append(record)
        elif isinstance(record, Ring):
            self._rings.setdefault(record.category, []).append(record)
        elif isinstance(record, UpgradePath):
            if record.id in self._upgrade_paths:
                logger.warning("Overwriting existing upgrade path: %s", record.id)
            self._upgrade_paths[record.id] = record
        elif isinstance(record, Merchant):
            self._merchants[record.id] = record
        elif isinstance(record, Material):
            self._materials[record.id] = record
        elif isinstance(record, StartingClass):
            self._starting_classes.append(record)
        elif isinstance(record, GameRules):
            self.rules = record
        else:
            raise TypeError(f"unsupported record type: {type(record).__name__}")

    def register_all(self, records: Iterable[Any]) -> None:
        for record in records:
            self.register(record)

    def clear(self) -> None:
        self._armor = {}
        self._weapons = {}
        self._shields = {}
        self._rings = {}
        self._spells = {kind: {} for kind in _SPELL_FILES}
        self._upgrade_paths = {}
        self._merchants = {}
        self._materials = {}
        self._starting_classes = []
        self.rules = GameRules()

    def replace_with(self, other: GameDataRegistry) -> None:
        """Take over every collection of a fully loaded registry.

        Each collection is rebound, never emptied in place, so a reader
        always sees a loaded catalog.
        """
        self._armor = other._armor
        self._weapons = other._weapons
        self._shields = other._shields
        self._rings = other._rings
        self._spells = other._spells
        self._upgrade_paths = other._upgrade_paths
        self._merchants = other._merchants
        self._materials = other._materials
        self._starting_classes = other._starting_classes
        self.rules = other.rules

    # --- armor ---

    def get_all_armor(self) -> dict[str, list[Armor]]:
        return {k: list(v) for k, v in self._armor.items()}

    def get_armor_categories(self) -> list[str]:
        return list(self._armor)

    def get_armor_by_name(self, name: str) -> Optional[Armor]:
        return _find_by_name(self._armor, name)

    def get_all_armor_sets(self) -> list[ArmorSet]:
        """Armor sets assembled from pieces sharing an ``armor_set`` name."""
        grouped: dict[str, list[Armor]] = {}
        for pieces in self._armor.values():
            for piece in pieces:
                if piece.armor_set:
                    grouped.setdefault(piece.armor_set, []).append(piece)

        sets = []
        for name, pieces in grouped.items():
            by_slot: dict[str, Armor] = {}
            for piece in pieces:
                by_slot.setdefault(piece.slot, piece)
            total = DefenseBlock()
            for piece in by_slot.values():
                total = total + piece.defense
            sets.append(
                ArmorSet(
                    id=_set_id(name),
                    name=name,
                    armor_type=pieces[0].armor_type,
                    pieces=by_slot,
                    total_defense=total,
                    total_poise=sum(p.poise for p in by_slot.values()),
                    total_weight=sum(p.weight for p in by_slot.values()),
                )
            )
        return sets

    # --- weapons / shields / rings / spells ---

    def get_all_weapons(self) -> dict[str, list[Weapon]]:
        return {k: list(v) for k, v in self._weapons.items()}

    def get_weapon_categories(self) -> list[str]:
        return list(self._weapons)

    def get_weapon_by_name(self, name: str) -> Optional[Weapon]:
        return _find_by_name(self._weapons, name)

    def get_catalyst_by_name(self, name: str) -> Optional[Weapon]:
        weapon = self.get_weapon_by_name(name)
        return weapon if weapon and weapon.kind == ItemKind.CATALYST else None

    def get_talisman_by_name(self, name: str) -> Optional[Weapon]:
        weapon = self.get_weapon_by_name(name)
        return weapon if weapon and weapon.kind == ItemKind.TALISMAN else None

    def get_all_shields(self) -> dict[str, list[Weapon]]:
        return {k: list(v) for k, v in self._shields.items()}

    def get_shield_by_name(self, name: str) -> Optional[Weapon]:
        return _find_by_name(self._shields, name)

    def get_all_rings(self) -> dict[str, list[Ring]]:
        return {k: list(v) for k, v in self._rings.items()}

    def get_ring_by_name(self, name: str) -> Optional[Ring]:
        return _find_by_name(self._rings, name)

    def get_all_sorceries(self) -> dict[str, list[Spell]]:
        return {k: list(v) for k, v in self._spells[ItemKind.SORCERY].items()}

    def get_all_miracles(self) -> dict[str, list[Spell]]:
        return {k: list(v) for k, v in self._spells[ItemKind.MIRACLE].items()}

    def get_all_pyromancies(self) -> dict[str, list[Spell]]:
        return {k: list(v) for k, v in self._spells[ItemKind.PYROMANCY].items()}

    def get_spell_by_name(self, kind: ItemKind, name: str) -> Optional[Spell]:
        return _find_by_name(self._spells[kind], name)

    def get_sorcery_by_name(self, name: str) -> Optional[Spell]:
        return self.get_spell_by_name(ItemKind.SORCERY, name)

    def get_miracle_by_name(self, name: str) -> Optional[Spell]:
        return self.get_spell_by_name(ItemKind.MIRACLE, name)

    def get_pyromancy_by_name(self, name: str) -> Optional[Spell]:
        return self.get_spell_by_name(ItemKind.PYROMANCY, name)

    # --- upgrades / merchants / classes ---

    @property
    def upgrade_paths(self) -> list[UpgradePath]:
        return list(self._upgrade_paths.values())

    def get_upgrade_path(self, path_id: str) -> Optional[UpgradePath]:
        return self._upgrade_paths.get(path_id)

    @property
    def merchants(self) -> list[Merchant]:
        return list(self._merchants.values())

    def get_merchant(self, merchant_id: str) -> Optional[Merchant]:
        return self._merchants.get(merchant_id)

    @property
    def materials(self) -> list[Material]:
        return list(self._materials.values())

    def get_material(self, material_id: str) -> Optional[Material]:
        return self._materials.get(material_id)

    @property
    def starting_classes(self) -> list[StartingClass]:
        return list(self._starting_classes)


def _find_by_name(collection: dict[str, list[T]], name: str) -> Optional[T]:
    for items in collection.values():
        for item in items:
            if item.name == name:  # type: ignore[attr-defined]
                return item
    return None
