"""Pydantic schemas for the association API.

Request/response models for:
- Recipe content (ingredients, steps) as sent by the UI or the recipe source
- Associations (ingredient ↔ step links) and their validity status
- The derived step/ingredient mapping
"""

from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, Field


class ValidityStatus(str, Enum):
    valid = "valid"
    outdated = "outdated"
    none = "none"


# --- Recipe content ---

class IngredientIn(BaseModel):
    reference_id: Optional[str] = None
    display: str = ""
    note: Optional[str] = None
    quantity: Optional[float] = None
    unit: Optional[str] = None

    @property
    def name(self) -> str:
        """Matching name: the note wins over the display text when present."""
        return self.note or self.display or ""

    @property
    def description(self) -> str:
        return self.display or self.note or ""

    @property
    def amount(self) -> Optional[str]:
        if not self.quantity:
            return None
        quantity = f"{self.quantity:g}"
        return f"{quantity} {self.unit or ''}".strip()


class StepIn(BaseModel):
    title: Optional[str] = None
    text: str = ""


def with_reference_ids(ingredients: list[IngredientIn]) -> list[IngredientIn]:
    """Fill missing reference ids with the positional `ingredient-{index}` form."""
    return [
        ing if ing.reference_id else ing.model_copy(update={"reference_id": f"ingredient-{index}"})
        for index, ing in enumerate(ingredients)
    ]


# --- Associations ---

def _amount_to_str(v):
    # generators sometimes send the amount as a bare number
    if v is None or isinstance(v, str):
        return v
    return str(v)


AmountText = Annotated[Optional[str], BeforeValidator(_amount_to_str)]


def _strip(v):
    return v.strip() if isinstance(v, str) else v


StrippedText = Annotated[str, BeforeValidator(_strip)]


class Association(BaseModel):
    ingredient: StrippedText = Field(..., min_length=1)
    amount: AmountText = None
    step: int = Field(..., ge=1)
    text: StrippedText = Field(..., min_length=1)
    usage: Optional[str] = None  # free-text usage description, not always populated

    class Config:
        from_attributes = True


class GeneratedAssociation(BaseModel):
    """Loose shape of one generator item; validated into Association afterwards."""
    ingredient: Optional[str] = None
    amount: AmountText = None
    step: Optional[int] = None
    text: Optional[str] = None


class GeneratedAssociations(BaseModel):
    associations: list[GeneratedAssociation]


class AssociationsResult(BaseModel):
    status: ValidityStatus
    associations: list[Association] = []
    stale_associations: Optional[list[Association]] = None


# --- Requests ---

class RecipeContentRequest(BaseModel):
    ingredients: list[IngredientIn] = []
    steps: list[StepIn] = []


class CheckAssociationsRequest(RecipeContentRequest):
    include_stale: bool = False


class FindAssociationsRequest(RecipeContentRequest):
    force_regenerate: bool = False


class SaveAssociationsRequest(RecipeContentRequest):
    associations: list[Association]


class MappingRequest(BaseModel):
    ingredients: list[IngredientIn]
    associations: list[Association]


class GenerateForRecipeRequest(BaseModel):
    force_regenerate: bool = False


# --- Responses ---

class MappingOut(BaseModel):
    step_to_ingredients: dict[int, list[str]]
    ingredient_to_steps: dict[str, list[int]]


class RecipeSummaryOut(BaseModel):
    id: str
    slug: str
    name: str


class RecipeDetailOut(RecipeSummaryOut):
    ingredients: list[IngredientIn]
    steps: list[StepIn]


class RecipeAssociationsOut(BaseModel):
    recipe: RecipeDetailOut
    status: ValidityStatus
    associations: list[Association]
    mapping: MappingOut
