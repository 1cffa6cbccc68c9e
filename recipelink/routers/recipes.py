import logging

from fastapi import APIRouter, Depends, Query, Request

from ..deps import get_association_service, get_recipe_source
from ..rate_limit import limiter
from ..schemas import (
    GenerateForRecipeRequest,
    RecipeAssociationsOut,
    RecipeDetailOut,
    RecipeSummaryOut,
)
from ..services.association_service import AssociationService
from ..services.recipe_source import RecipeSourceClient
from ..settings import settings

router = APIRouter()
logger = logging.getLogger("recipelink.source")


@router.get("/source/recipes", response_model=list[RecipeSummaryOut])
async def list_source_recipes(
    page: int = Query(1, ge=1),
    per_page: int = Query(100, ge=1, le=500),
    source: RecipeSourceClient = Depends(get_recipe_source),
):
    return await source.list_recipes(page=page, per_page=per_page)


@router.get("/source/recipes/{slug}", response_model=RecipeDetailOut)
async def get_source_recipe(
    slug: str,
    source: RecipeSourceClient = Depends(get_recipe_source),
):
    return await source.get_recipe(slug)


@router.post("/source/recipes/{slug}/associations", response_model=RecipeAssociationsOut)
@limiter.limit(settings.generation_rate_limit)
async def associate_source_recipe(
    request: Request,
    slug: str,
    body: GenerateForRecipeRequest,
    source: RecipeSourceClient = Depends(get_recipe_source),
    service: AssociationService = Depends(get_association_service),
):
    """Fetch a recipe from the source, ensure associations, and return them with the mapping."""
    recipe = await source.get_recipe(slug)
    recipe_id = recipe.id or recipe.slug

    result = await service.ensure(
        recipe_id, recipe.ingredients, recipe.steps, force_regenerate=body.force_regenerate
    )
    mapping = service.mapping(recipe.ingredients, result.associations)

    return RecipeAssociationsOut(
        recipe=recipe,
        status=result.status,
        associations=result.associations,
        mapping=mapping.to_schema(),
    )
