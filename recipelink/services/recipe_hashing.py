import hashlib
import json
from typing import Sequence

from ..schemas import IngredientIn, StepIn


def recipe_fingerprint(ingredients: Sequence[IngredientIn], steps: Sequence[StepIn]) -> dict:
    """The fields that decide whether cached associations still apply. Order is significant."""
    return {
        "ingredients": [
            {
                "name": ing.name,
                "amount": ing.quantity,
                "unit": ing.unit,
            }
            for ing in ingredients
        ],
        "steps": [{"text": step.text or ""} for step in steps],
    }


def hash_recipe(ingredients: Sequence[IngredientIn], steps: Sequence[StepIn]) -> str:
    """SHA-256 hex digest of the recipe fingerprint; reference ids and titles do not contribute."""
    s = json.dumps(recipe_fingerprint(ingredients, steps), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(s.encode("utf-8")).hexdigest()
