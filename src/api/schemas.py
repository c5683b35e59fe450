"""API request/response schemas."""

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from src.config import settings
from src.core.catalog.models import StepType

SortOptionSchema = Union[str, dict[str, Any], None]


# === Request Schemas ===


class CustomFilterSchema(BaseModel):
    """Weighted stat selection with per-stat minimums"""

    selected_stats: list[str] = []
    min_values: dict[str, float] = {}
    weights: dict[str, float] = {}


class ArmorOptimizerRequest(BaseModel):
    """Armor optimizer state"""

    search_query: str = ""
    sort_primary: SortOptionSchema = "totalDefense"
    sort_secondary: SortOptionSchema = None
    sort_descending: bool = True
    max_dodge_roll_percent: Optional[float] = Field(None, ge=0)
    mask_of_the_father: bool = False
    locked_armor: dict[str, str] = {}
    custom_filter: CustomFilterSchema = Field(default_factory=CustomFilterSchema)
    endurance: int = Field(settings.DEFAULT_ENDURANCE, ge=1, le=99)
    weapons: list[str] = []
    shields: list[str] = []
    catalysts: list[str] = []
    talismans: list[str] = []
    rings: list[str] = []
    armor_upgrade_level: int = Field(0, ge=0, le=10)
    display_mode: str = Field("individual", description="individual, sets or mixmatch")


class WeaponSelection(BaseModel):
    """A weapon-like item and its two-handed flag"""

    name: str = Field(..., min_length=1)
    two_handed: bool = False


class StatBlock(BaseModel):
    """The eight leveling attributes"""

    model_config = ConfigDict(from_attributes=True)

    vitality: int = 1
    attunement: int = 1
    endurance: int = 1
    strength: int = 1
    dexterity: int = 1
    resistance: int = 1
    intelligence: int = 1
    faith: int = 1


class BuildRequest(BaseModel):
    """Equipment selection plus optional planned stats"""

    weapons: list[WeaponSelection] = []
    shields: list[WeaponSelection] = []
    catalysts: list[WeaponSelection] = []
    talismans: list[WeaponSelection] = []
    sorceries: list[str] = []
    miracles: list[str] = []
    pyromancies: list[str] = []
    rings: list[str] = []
    stats: Optional[StatBlock] = None


class UpgradePlanRequest(BaseModel):
    """Upgrade plan from (current path, level) to (target path, level)"""

    current_path_id: str = Field(..., min_length=1)
    current_level: int = 0
    target_path_id: str = Field(..., min_length=1)
    desired_level: int
    merchant_id: Optional[str] = None
    include_ascension: bool = True


class ToolStateRequest(BaseModel):
    """Tool state write carrying the client's request sequence"""

    state: dict[str, Any] = {}
    sequence: int = Field(..., ge=0)


# === Response Schemas ===


class DefenseInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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


class ArmorPieceInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    armor_type: str
    slot: str
    weight: float
    poise: float
    defense: DefenseInfo
    stamina_regen_reduction: float = 0
    upgrade_path: Optional[str] = None
    upgrade_level: int = 0
    armor_set: Optional[str] = None


class ArmorSetInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    armor_type: str
    pieces: dict[str, ArmorPieceInfo]
    total_defense: DefenseInfo
    total_poise: float
    total_weight: float
    upgrade_level: int = 0


class CombinationInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    pieces: dict[str, Optional[ArmorPieceInfo]]
    total_weight: float
    total_poise: float
    total_defense: DefenseInfo
    slots_filled: int
    total_stamina_regen_reduction: float = 0
    custom_score: float = 0


class DerivedStatsInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    hp: int
    stamina: int
    equip_load: float
    equipped_weight: float
    equip_load_percentage: float
    dodge_roll: str
    stamina_regen: float
    poise: float


class ArmorOptimizerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    calculated_armor: list[ArmorPieceInfo] = []
    armor_sets: list[ArmorSetInfo] = []
    mix_match_results: list[CombinationInfo] = []
    character_stats: Optional[DerivedStatsInfo] = None
    timestamp: datetime


class SearchSpaceResponse(BaseModel):
    full: int
    restricted: int


class AttributeCheckInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    is_valid: bool
    required: int
    current: int
    error: Optional[str] = None


class AttunementInfoSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    required_slots: int
    ring_slots: int
    current_slots: int
    next_slot_level: Optional[int] = None


class RequirementsResponse(BaseModel):
    minimum: StatBlock
    attunement: AttunementInfoSchema
    is_valid: Optional[bool] = None
    checks: dict[str, AttributeCheckInfo] = {}
    suggested_stats: Optional[StatBlock] = None


class StartingClassInfo(BaseModel):
    id: str
    name: str
    starting_level: int
    soul_level_needed: int
    stat_differences: dict[str, int]


class StartingClassesResponse(BaseModel):
    results: list[StartingClassInfo]
    timestamp: datetime


class UpgradeStepInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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


class GroupedStepInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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


class UpgradePlanResponse(BaseModel):
    souls: int
    materials: dict[str, int]
    steps: list[UpgradeStepInfo]
    purchase_cost: int
    timestamp: datetime
    grouped_steps: list[GroupedStepInfo] = []
    purchaseable_materials: dict[str, int] = {}
    findable_materials: dict[str, int] = {}
    purchaseable_cost: int = 0
    potential_savings: int = 0
    merchant_id: Optional[str] = None


class PathOptionInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    max_level: int
    has_ascension: bool


class PathOptionsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    current: list[PathOptionInfo]
    target: list[PathOptionInfo]


class MerchantInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    material_prices: dict[str, int]


class ToolStateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tool: str
    session_id: str
    state: dict[str, Any]
    sequence: int
    updated_at: datetime
    applied: bool = True
