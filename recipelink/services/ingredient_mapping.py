from dataclasses import dataclass, field
from typing import Sequence

from ..schemas import Association, IngredientIn, MappingOut
from .ingredient_matching import match_ingredient


@dataclass
class IngredientStepMapping:
    # step number -> reference ids of ingredients used in that step
    step_to_ingredients: dict[int, set[str]] = field(default_factory=dict)
    # reference id -> step numbers where the ingredient is used
    ingredient_to_steps: dict[str, set[int]] = field(default_factory=dict)

    def add(self, step: int, reference_id: str) -> None:
        self.step_to_ingredients.setdefault(step, set()).add(reference_id)
        self.ingredient_to_steps.setdefault(reference_id, set()).add(step)

    def to_schema(self) -> MappingOut:
        return MappingOut(
            step_to_ingredients={s: sorted(ids) for s, ids in sorted(self.step_to_ingredients.items())},
            ingredient_to_steps={i: sorted(steps) for i, steps in sorted(self.ingredient_to_steps.items())},
        )


def build_ingredient_step_mapping(
    ingredients: Sequence[IngredientIn],
    associations: Sequence[Association],
) -> IngredientStepMapping:
    """Bidirectional step/ingredient index. Associations naming no known ingredient are skipped."""
    mapping = IngredientStepMapping()
    for assoc in associations:
        ingredient = match_ingredient(assoc.ingredient, ingredients)
        if ingredient is not None and ingredient.reference_id:
            mapping.add(assoc.step, ingredient.reference_id)
    return mapping


def get_ingredients_for_step(step_number: int, mapping: IngredientStepMapping) -> list[str]:
    return sorted(mapping.step_to_ingredients.get(step_number, set()))


def get_steps_for_ingredient(reference_id: str, mapping: IngredientStepMapping) -> list[int]:
    return sorted(mapping.ingredient_to_steps.get(reference_id, set()))
