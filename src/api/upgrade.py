"""Weapon upgrade planner API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.schemas import (
    GroupedStepInfo,
    MerchantInfo,
    PathOptionsResponse,
    UpgradePlanRequest,
    UpgradePlanResponse,
    UpgradeStepInfo,
)
from src.core.errors import UpgradeInputError, UpgradePathError
from src.core.logging import get_logger
from src.services.upgrade_service import UpgradeService

logger = get_logger(__name__)

router = APIRouter(prefix="/upgrade", tags=["upgrade"])


def get_upgrade_service(request: Request) -> UpgradeService:
    """UpgradeService instance (dependency injection)"""
    service: UpgradeService = request.app.state.upgrade_service
    return service


@router.post("/plan", response_model=UpgradePlanResponse)
def plan_upgrade(
    body: UpgradePlanRequest,
    service: UpgradeService = Depends(get_upgrade_service),
) -> UpgradePlanResponse:
    """Souls, materials and steps for an upgrade journey."""
    try:
        plan = service.plan(
            body.current_path_id,
            body.current_level,
            body.target_path_id,
            body.desired_level,
            merchant_id=body.merchant_id,
            include_ascension=body.include_ascension,
        )
    except UpgradeInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except UpgradePathError as e:
        raise HTTPException(status_code=404, detail=str(e))

    result = plan.result
    return UpgradePlanResponse(
        souls=result.souls,
        materials=result.materials,
        steps=[UpgradeStepInfo.model_validate(s) for s in result.steps],
        purchase_cost=result.purchase_cost,
        timestamp=result.timestamp,
        grouped_steps=[GroupedStepInfo.model_validate(g) for g in plan.grouped_steps],
        purchaseable_materials=plan.categorized.purchaseable,
        findable_materials=plan.categorized.findable,
        purchaseable_cost=plan.purchaseable_cost,
        potential_savings=plan.potential_savings,
        merchant_id=plan.merchant_id,
    )


@router.get("/paths", response_model=PathOptionsResponse)
def upgrade_paths(
    current_path_id: Optional[str] = None,
    target_path_id: Optional[str] = None,
    service: UpgradeService = Depends(get_upgrade_service),
) -> PathOptionsResponse:
    """Selectable paths, narrowed by the other side's choice."""
    try:
        options = service.path_options(current_path_id, target_path_id)
    except UpgradePathError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return PathOptionsResponse.model_validate(options)


@router.get("/merchants", response_model=list[MerchantInfo])
def upgrade_merchants(
    service: UpgradeService = Depends(get_upgrade_service),
) -> list[MerchantInfo]:
    return [MerchantInfo.model_validate(m) for m in service.merchants()]
