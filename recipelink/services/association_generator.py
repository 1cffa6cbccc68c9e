import json
import logging
from typing import Optional, Sequence

from pydantic import ValidationError

from ..core.ai_client import AIClient
from ..errors import ConfigurationError, GenerationError
from ..schemas import (
    Association,
    GeneratedAssociations,
    IngredientIn,
    StepIn,
)
from .ingredient_matching import find_ingredient_mentions

logger = logging.getLogger("recipelink.ai")

SYSTEM_INSTRUCTION = (
    "You are a helpful assistant that analyzes recipe ingredients and steps to create "
    "ingredient associations. You MUST return a JSON object with an 'associations' array."
)


class AssociationGenerator:
    """Ask the completion service which ingredient is used in which step."""

    def __init__(self, client: Optional[AIClient] = None):
        self.client = client or AIClient.get_instance()

    @property
    def mode(self) -> str:
        return self.client.mode

    async def generate(
        self,
        ingredients: Sequence[IngredientIn],
        steps: Sequence[StepIn],
    ) -> list[Association]:
        """
        Returns validated associations.

        Raises:
            ConfigurationError: AI is not configured (no key / disabled)
            GenerationError: service failure or unusable payload
        """
        if self.mode == "mock":
            return self._mock_associations(ingredients, steps)

        if not self.client.is_available():
            raise ConfigurationError(
                f"Association generator unavailable (mode={self.mode}, api key configured={bool(self.client.api_key)})"
            )

        prompt = self._build_prompt(ingredients, steps)
        result = await self.client.generate_structured(
            prompt=prompt,
            response_model=GeneratedAssociations,
            system_instruction=SYSTEM_INSTRUCTION,
            temperature=0.7,
        )
        if result is None:
            raise GenerationError(self.client.last_error or "Generator returned no associations")

        return self.validate(result, step_count=len(steps))

    @staticmethod
    def validate(result: GeneratedAssociations, step_count: int) -> list[Association]:
        """Keep only syntactically complete items that point at an existing step."""
        accepted = []
        for item in result.associations:
            try:
                assoc = Association.model_validate(item.model_dump())
            except ValidationError:
                logger.debug("Dropping incomplete association %s", item)
                continue
            if assoc.step > step_count:
                logger.debug("Dropping association for unknown step %d", assoc.step)
                continue
            accepted.append(assoc)

        dropped = len(result.associations) - len(accepted)
        if dropped:
            logger.warning("Dropped %d malformed associations from generator output", dropped)
        return accepted

    def _mock_associations(
        self,
        ingredients: Sequence[IngredientIn],
        steps: Sequence[StepIn],
    ) -> list[Association]:
        """Deterministic local associations: quote each ingredient's first claimed mention per step."""
        associations = []
        for number, step in enumerate(steps, start=1):
            for mention in find_ingredient_mentions(step.text, ingredients):
                associations.append(Association(
                    ingredient=mention.ingredient.name,
                    amount=mention.ingredient.amount,
                    step=number,
                    text=step.text[mention.start:mention.end],
                ))
        return associations

    def _build_prompt(self, ingredients: Sequence[IngredientIn], steps: Sequence[StepIn]) -> str:
        ingredients_data = []
        for ing in ingredients:
            entry = {"name": ing.name, "description": ing.description}
            if ing.amount:
                entry["amount"] = ing.amount
            ingredients_data.append(entry)
        steps_data = [{"description": step.text or ""} for step in steps]

        return f"""
You will be given two JSON lists.

Ingredients: each has a name (e.g. "canola oil" or "salt and pepper"), an optional
amount (e.g. "1/4 cup") and a description (e.g. "oil").

Steps: each has a description that may mention ingredients from the list.

Associate each ingredient with the steps it is used in, the amount used (if available),
and the minimal text from the step that mentions it.

Ingredients: {json.dumps(ingredients_data, indent=2)}
Steps: {json.dumps(steps_data, indent=2)}

Return a JSON object with a single "associations" array of objects:
- ingredient: the ingredient name exactly as listed in the ingredients list
- amount: the amount of the ingredient, only if it is in the ingredients list
- step: the 1-based step number where the ingredient is used
- text: the minimal EXACT text from the step that mentions the ingredient

Rules:
- "text" is copied from the step, never paraphrased, and names only this ingredient
  (for "mix the sliced steak and cornstarch" use "steak" or "the sliced steak")
- If an ingredient appears multiple times in a step, create one association per occurrence
- "text" must be a complete word or phrase that makes sense when highlighted
"""
