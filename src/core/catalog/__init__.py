"""Catalog: immutable game records and the JSON-backed registry."""

from .models import (
    ARMOR_SLOTS,
    ATTRIBUTES,
    DEFENSE_FIELDS,
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
    StepType,
    UpgradePath,
    UpgradeStep,
    Weapon,
)
from .registry import GameDataRegistry
from .scaling import calculate_upgraded_armor_defense, upgrade_armor_piece

__all__ = [
    "ARMOR_SLOTS",
    "ATTRIBUTES",
    "DEFENSE_FIELDS",
    "Armor",
    "ArmorSet",
    "AscendStep",
    "Attributes",
    "DefenseBlock",
    "GameRules",
    "ItemKind",
    "Material",
    "Merchant",
    "Requirements",
    "Ring",
    "Spell",
    "StartingClass",
    "StepType",
    "UpgradePath",
    "UpgradeStep",
    "Weapon",
    "GameDataRegistry",
    "calculate_upgraded_armor_defense",
    "upgrade_armor_piece",
]
