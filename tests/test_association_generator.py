import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from recipelink.core.ai_client import AIClient
from recipelink.errors import ConfigurationError, GenerationError
from recipelink.schemas import (
    GeneratedAssociation,
    GeneratedAssociations,
    IngredientIn,
    StepIn,
)
from recipelink.services.association_generator import AssociationGenerator


def _gemini_client(result=None, last_error=None):
    client = MagicMock()
    client.mode = "gemini"
    client.api_key = "test-key"
    client.is_available.return_value = True
    client.generate_structured = AsyncMock(return_value=result)
    client.last_error = last_error
    return client


@pytest.mark.asyncio
async def test_mock_mode_quotes_step_text(soy_ingredients):
    generator = AssociationGenerator(AIClient(mode="mock"))
    steps = [StepIn(text="Whisk in the Soy Sauce."), StepIn(text="Serve.")]

    result = await generator.generate(soy_ingredients, steps)

    assert len(result) == 1
    assert result[0].ingredient == "soy sauce"
    assert result[0].amount == "2 tbsp"
    assert result[0].step == 1
    assert result[0].text == "Soy Sauce"


@pytest.mark.asyncio
async def test_mock_mode_quotes_the_span_the_scanner_claimed():
    generator = AssociationGenerator(AIClient(mode="mock"))
    ingredients = [
        IngredientIn(display="sugar"),
        IngredientIn(display="brown sugar"),
        IngredientIn(display="all-purpose flour"),
    ]
    steps = [StepIn(text="Fold the brown sugar into the All-Purpose flour, then the sugar")]

    result = await generator.generate(ingredients, steps)

    assert [(a.ingredient, a.text) for a in result] == [
        ("sugar", "sugar"),
        ("brown sugar", "brown sugar"),
        ("all-purpose flour", "All-Purpose flour"),
    ]


@pytest.mark.asyncio
async def test_missing_api_key_is_configuration_error(soy_ingredients, soy_steps):
    generator = AssociationGenerator(AIClient(mode="gemini", api_key=""))
    with pytest.raises(ConfigurationError):
        await generator.generate(soy_ingredients, soy_steps)


@pytest.mark.asyncio
async def test_empty_or_unparseable_response_is_generation_error(soy_ingredients, soy_steps):
    client = _gemini_client(result=None, last_error="Unparseable response")
    generator = AssociationGenerator(client)

    with pytest.raises(GenerationError, match="Unparseable"):
        await generator.generate(soy_ingredients, soy_steps)


@pytest.mark.asyncio
async def test_valid_response_is_filtered(soy_ingredients, soy_steps):
    payload = GeneratedAssociations(associations=[
        GeneratedAssociation(ingredient="soy sauce", amount="2 tbsp", step=1, text="the soy sauce"),
        GeneratedAssociation(ingredient="soy sauce", step=4, text="soy sauce"),  # no step 4
        GeneratedAssociation(ingredient="soy sauce", step=1, text=""),
        GeneratedAssociation(ingredient=None, step=1, text="sauce"),
        GeneratedAssociation(ingredient="soy sauce", step=0, text="sauce"),
    ])
    client = _gemini_client(result=payload)
    generator = AssociationGenerator(client)

    result = await generator.generate(soy_ingredients, soy_steps)

    assert [(a.ingredient, a.step, a.text) for a in result] == [("soy sauce", 1, "the soy sauce")]
    kwargs = client.generate_structured.await_args.kwargs
    assert kwargs["response_model"] is GeneratedAssociations
    assert "whisk in the soy sauce" in kwargs["prompt"]
    assert '"amount": "2 tbsp"' in kwargs["prompt"]


@pytest.mark.asyncio
async def test_ai_client_parses_raw_json_when_sdk_does_not():
    client = AIClient(mode="mock")
    client.mode = "gemini"
    body = {"associations": [{"ingredient": "garlic", "step": 1, "text": "garlic"}]}
    client._client = MagicMock()
    client._client.aio.models.generate_content = AsyncMock(
        return_value=SimpleNamespace(text=json.dumps(body), parsed=None)
    )

    result = await client.generate_structured("prompt", GeneratedAssociations)
    assert result.associations[0].ingredient == "garlic"


@pytest.mark.asyncio
async def test_ai_client_unparseable_response_returns_none():
    client = AIClient(mode="mock")
    client.mode = "gemini"
    client._client = MagicMock()
    client._client.aio.models.generate_content = AsyncMock(
        return_value=SimpleNamespace(text="I think garlic goes in step 1", parsed=None)
    )

    assert await client.generate_structured("prompt", GeneratedAssociations) is None
    assert client.last_error.startswith("Unparseable")


@pytest.mark.asyncio
async def test_ai_client_service_error_returns_none():
    client = AIClient(mode="mock")
    client.mode = "gemini"
    client._client = MagicMock()
    client._client.aio.models.generate_content = AsyncMock(side_effect=RuntimeError("503 unavailable"))

    assert await client.generate_structured("prompt", GeneratedAssociations) is None
    assert "RuntimeError" in client.last_error
    assert client.last_error_at is not None


def test_ai_client_unavailable_in_mock_mode():
    assert not AIClient(mode="mock").is_available()


def test_amount_numbers_become_strings():
    assert GeneratedAssociation(ingredient="eggs", amount=2, step=1, text="eggs").amount == "2"
    assert IngredientIn(display="eggs", quantity=2).amount == "2"
    assert IngredientIn(display="salt").amount is None


def test_whitespace_only_text_is_dropped():
    payload = GeneratedAssociations(associations=[
        GeneratedAssociation(ingredient="soy sauce", step=1, text="   "),
        GeneratedAssociation(ingredient="  ", step=1, text="soy sauce"),
        GeneratedAssociation(ingredient=" soy sauce ", step=1, text=" the soy sauce\n"),
    ])

    result = AssociationGenerator.validate(payload, step_count=1)

    assert [(a.ingredient, a.text) for a in result] == [("soy sauce", "the soy sauce")]
