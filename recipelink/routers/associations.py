import logging

from fastapi import APIRouter, Depends, Request, Response

from ..deps import get_association_service
from ..rate_limit import limiter
from ..schemas import (
    AssociationsResult,
    CheckAssociationsRequest,
    FindAssociationsRequest,
    MappingOut,
    MappingRequest,
    SaveAssociationsRequest,
)
from ..services.association_service import AssociationService
from ..settings import settings

router = APIRouter()
logger = logging.getLogger("recipelink.associations")


@router.post("/recipes/{recipe_id}/associations/check", response_model=AssociationsResult)
def check_associations(
    recipe_id: str,
    body: CheckAssociationsRequest,
    service: AssociationService = Depends(get_association_service),
):
    """Report whether stored associations match the recipe as sent. Never generates."""
    return service.check(recipe_id, body.ingredients, body.steps, include_stale=body.include_stale)


@router.post("/recipes/{recipe_id}/associations", response_model=AssociationsResult)
@limiter.limit(settings.generation_rate_limit)
async def find_associations(
    request: Request,
    recipe_id: str,
    body: FindAssociationsRequest,
    service: AssociationService = Depends(get_association_service),
):
    """Return cached associations, generating (and storing) new ones when needed."""
    return await service.ensure(
        recipe_id, body.ingredients, body.steps, force_regenerate=body.force_regenerate
    )


@router.put("/recipes/{recipe_id}/associations", response_model=AssociationsResult)
def save_associations(
    recipe_id: str,
    body: SaveAssociationsRequest,
    service: AssociationService = Depends(get_association_service),
):
    """Store a hand-edited association list for the recipe's current content."""
    return service.save(recipe_id, body.ingredients, body.steps, body.associations)


@router.delete("/recipes/{recipe_id}/associations", status_code=204)
def clear_associations(
    recipe_id: str,
    service: AssociationService = Depends(get_association_service),
):
    service.clear(recipe_id)
    return Response(status_code=204)


@router.post("/recipes/{recipe_id}/associations/mapping", response_model=MappingOut)
def build_mapping(
    recipe_id: str,
    body: MappingRequest,
    service: AssociationService = Depends(get_association_service),
):
    """Step -> ingredient ids and ingredient id -> steps for highlighting."""
    return service.mapping(body.ingredients, body.associations).to_schema()
