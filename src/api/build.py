"""Character build API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.schemas import (
    AttributeCheckInfo,
    AttunementInfoSchema,
    BuildRequest,
    RequirementsResponse,
    StartingClassesResponse,
    StartingClassInfo,
    StatBlock,
)
from src.core.build.requirements import EquipmentSelection
from src.core.catalog.models import Attributes
from src.core.errors import BuildValidationError
from src.core.logging import get_logger
from src.services.build_service import BuildService

logger = get_logger(__name__)

router = APIRouter(prefix="/build", tags=["build"])


def get_build_service(request: Request) -> BuildService:
    """BuildService instance (dependency injection)"""
    service: BuildService = request.app.state.build_service
    return service


def _validation_error(e: BuildValidationError) -> HTTPException:
    detail = {"message": str(e), "errors": e.errors} if e.errors else str(e)
    return HTTPException(status_code=422, detail=detail)


def _selection(body: BuildRequest, service: BuildService) -> EquipmentSelection:
    return service.build_selection(
        weapons=[w.model_dump() for w in body.weapons],
        shields=[s.model_dump() for s in body.shields],
        catalysts=[c.model_dump() for c in body.catalysts],
        talismans=[t.model_dump() for t in body.talismans],
        sorceries=body.sorceries,
        miracles=body.miracles,
        pyromancies=body.pyromancies,
        rings=body.rings,
    )


def _stats(body: BuildRequest) -> Attributes | None:
    if body.stats is None:
        return None
    return Attributes.from_dict(body.stats.model_dump())


@router.post("/requirements", response_model=RequirementsResponse)
def build_requirements(
    body: BuildRequest,
    service: BuildService = Depends(get_build_service),
) -> RequirementsResponse:
    """Minimum stats for the selection, validated against planned stats if given."""
    try:
        report = service.requirements(_selection(body, service), _stats(body))
    except BuildValidationError as e:
        raise _validation_error(e)

    validation = report.validation
    return RequirementsResponse(
        minimum=StatBlock.model_validate(report.minimum),
        attunement=AttunementInfoSchema.model_validate(report.attunement),
        is_valid=validation.is_valid if validation else None,
        checks=(
            {k: AttributeCheckInfo.model_validate(c) for k, c in validation.checks.items()}
            if validation
            else {}
        ),
        suggested_stats=(
            StatBlock.model_validate(report.suggested_stats)
            if report.suggested_stats
            else None
        ),
    )


@router.post("/starting-classes", response_model=StartingClassesResponse)
def rank_starting_classes(
    body: BuildRequest,
    service: BuildService = Depends(get_build_service),
) -> StartingClassesResponse:
    """Starting classes ordered by soul level needed."""
    try:
        ranking = service.rank_starting_classes(_selection(body, service), _stats(body))
    except BuildValidationError as e:
        raise _validation_error(e)

    return StartingClassesResponse(
        results=[
            StartingClassInfo(
                id=r.character.id,
                name=r.character.name,
                starting_level=r.character.starting_level,
                soul_level_needed=r.soul_level_needed,
                stat_differences=r.stat_differences,
            )
            for r in ranking.results
        ],
        timestamp=ranking.timestamp,
    )
