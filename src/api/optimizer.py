"""Armor optimizer API endpoints."""

from fastapi import APIRouter, Depends, Query, Request

from src.api.schemas import ArmorOptimizerRequest, ArmorOptimizerResponse, SearchSpaceResponse
from src.core.logging import get_logger
from src.core.optimizer.armor import ArmorOptimizerState, DisplayMode
from src.core.optimizer.mix_match import DEFAULT_TOP_N, CustomFilter
from src.services.optimizer_service import ArmorOptimizerService

logger = get_logger(__name__)

router = APIRouter(prefix="/optimizer", tags=["optimizer"])


def get_optimizer_service(request: Request) -> ArmorOptimizerService:
    """ArmorOptimizerService instance (dependency injection)"""
    service: ArmorOptimizerService = request.app.state.optimizer_service
    return service


def _build_state(body: ArmorOptimizerRequest) -> ArmorOptimizerState:
    return ArmorOptimizerState(
        search_query=body.search_query,
        sort_primary=body.sort_primary,
        sort_secondary=body.sort_secondary,
        sort_descending=body.sort_descending,
        max_dodge_roll_percent=body.max_dodge_roll_percent,
        mask_of_the_father=body.mask_of_the_father,
        locked_armor=dict(body.locked_armor),
        custom_filter=CustomFilter(
            selected_stats=tuple(body.custom_filter.selected_stats),
            min_values=dict(body.custom_filter.min_values),
            weights=dict(body.custom_filter.weights),
        ),
        endurance=body.endurance,
        weapons=list(body.weapons),
        shields=list(body.shields),
        catalysts=list(body.catalysts),
        talismans=list(body.talismans),
        rings=list(body.rings),
        armor_upgrade_level=body.armor_upgrade_level,
        display_mode=DisplayMode.parse(body.display_mode),
    )


@router.post("/armor", response_model=ArmorOptimizerResponse)
def optimize_armor(
    body: ArmorOptimizerRequest,
    service: ArmorOptimizerService = Depends(get_optimizer_service),
) -> ArmorOptimizerResponse:
    """Armor pieces, sets or mix-match combinations for the given state."""
    result = service.calculate(_build_state(body))
    return ArmorOptimizerResponse.model_validate(result)


@router.get("/armor/search-space", response_model=SearchSpaceResponse)
def armor_search_space(
    mask_of_the_father: bool = False,
    top_n: int = Query(DEFAULT_TOP_N, ge=1, le=10),
    service: ArmorOptimizerService = Depends(get_optimizer_service),
) -> SearchSpaceResponse:
    """Full and pruned mix-match combination counts."""
    return SearchSpaceResponse(**service.search_space(mask_of_the_father, top_n))
