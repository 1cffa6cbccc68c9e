import asyncio
import os

import pytest
from fastapi.testclient import TestClient

os.environ["AI_MODE"] = "mock"

from recipelink.deps import get_association_service, get_recipe_source, get_store
from recipelink.errors import GenerationError
from recipelink.main import app
from recipelink.rate_limit import limiter
from recipelink.schemas import Association, IngredientIn, StepIn
from recipelink.services.association_service import AssociationService
from recipelink.services.association_store import AssociationStore


class FakeGenerator:
    """Stands in for AssociationGenerator: returns canned associations or raises."""

    def __init__(self, associations=None, error: Exception | None = None, gate: asyncio.Event | None = None):
        self.associations = associations or []
        self.error = error
        self.gate = gate
        self.calls = 0
        self.mode = "fake"

    async def generate(self, ingredients, steps):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.associations)


@pytest.fixture
def store():
    """Fresh in-memory store per test."""
    s = AssociationStore("sqlite:///:memory:").open()
    yield s
    s.close()


@pytest.fixture
def soy_ingredients():
    return [IngredientIn(display="soy sauce", quantity=2, unit="tbsp")]


@pytest.fixture
def soy_steps():
    return [StepIn(text="whisk in the soy sauce")]


@pytest.fixture
def soy_associations():
    return [Association(ingredient="soy sauce", amount="2 tbsp", step=1, text="the soy sauce")]


@pytest.fixture
def generator(soy_associations):
    return FakeGenerator(associations=soy_associations)


@pytest.fixture
def service(store, generator):
    return AssociationService(store, generator)


@pytest.fixture
def client(store, service):
    """Test client with the store and service overridden."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_association_service] = lambda: service
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
def failing_generator():
    return FakeGenerator(error=GenerationError("boom"))
