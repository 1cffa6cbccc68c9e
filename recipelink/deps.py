"""FastAPI dependencies.

Provides the process-wide objects built in the app lifespan:
- Association store
- Association service (orchestrator)
- Recipe source client
"""

from fastapi import Request

from .services.association_service import AssociationService
from .services.association_store import AssociationStore
from .services.recipe_source import RecipeSourceClient


def get_store(request: Request) -> AssociationStore:
    return request.app.state.store


def get_association_service(request: Request) -> AssociationService:
    return request.app.state.association_service


def get_recipe_source(request: Request) -> RecipeSourceClient:
    return request.app.state.recipe_source
