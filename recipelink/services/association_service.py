"""Association orchestration: cache check, generation, persistence.

States per recipe:
    none -> generating -> valid
    valid -> outdated            (recipe content changed, hash differs)
    outdated -> generating -> valid
    any -> none                  (explicit clear)

Generation is single-flight per recipe inside one process: a second ensure()
for a recipe that is already generating waits for the running generation and
gets its result instead of calling the generator again.
"""

import asyncio
import logging
from typing import Optional, Sequence

from ..errors import ConfigurationError, GenerationError
from ..schemas import (
    Association,
    AssociationsResult,
    IngredientIn,
    StepIn,
    ValidityStatus,
    with_reference_ids,
)
from .association_generator import AssociationGenerator
from .association_store import AssociationStore
from .ingredient_mapping import IngredientStepMapping, build_ingredient_step_mapping
from .ingredient_matching import match_ingredient
from .recipe_hashing import hash_recipe

logger = logging.getLogger("recipelink.associations")


class AssociationService:
    def __init__(self, store: AssociationStore, generator: AssociationGenerator):
        self.store = store
        self.generator = generator
        # recipe_id -> (recipe_hash, generation task)
        self._inflight: dict[str, tuple[str, asyncio.Task]] = {}

    def check(
        self,
        recipe_id: str,
        ingredients: Sequence[IngredientIn],
        steps: Sequence[StepIn],
        include_stale: bool = False,
    ) -> AssociationsResult:
        """Validity of the cached associations for the current content. Never generates."""
        recipe_hash = hash_recipe(ingredients, steps)
        result = self.store.get(recipe_id, recipe_hash)

        if include_stale and result.status == ValidityStatus.outdated:
            entry = self.store.get_entry(recipe_id)
            result.stale_associations = entry.associations if entry else []
        return result

    async def ensure(
        self,
        recipe_id: str,
        ingredients: Sequence[IngredientIn],
        steps: Sequence[StepIn],
        force_regenerate: bool = False,
    ) -> AssociationsResult:
        """
        Cached associations when valid, otherwise generate and persist new ones.

        Generator problems degrade to status "none" with no associations and
        leave any stored entry untouched. StoreError propagates.
        """
        recipe_hash = hash_recipe(ingredients, steps)

        if not force_regenerate:
            cached = self.store.get(recipe_id, recipe_hash)
            if cached.status == ValidityStatus.valid:
                logger.info("Serving associations for recipe %s from cache", recipe_id)
                return cached

        while recipe_id in self._inflight:
            inflight_hash, task = self._inflight[recipe_id]
            logger.info("Generation already running for recipe %s, waiting for it", recipe_id)
            result = await asyncio.shield(task)
            if inflight_hash == recipe_hash:
                return result

        task = asyncio.create_task(
            self._generate_and_save(recipe_id, recipe_hash, list(ingredients), list(steps))
        )
        self._inflight[recipe_id] = (recipe_hash, task)
        return await asyncio.shield(task)

    def is_generating(self, recipe_id: str) -> bool:
        return recipe_id in self._inflight

    async def _generate_and_save(
        self,
        recipe_id: str,
        recipe_hash: str,
        ingredients: list[IngredientIn],
        steps: list[StepIn],
    ) -> AssociationsResult:
        try:
            try:
                associations = await self.generator.generate(ingredients, steps)
            except ConfigurationError as e:
                logger.error(f"Association generator not configured: {e}")
                return AssociationsResult(status=ValidityStatus.none, associations=[])
            except GenerationError as e:
                logger.error(f"Association generation failed for recipe {recipe_id}: {e}")
                return AssociationsResult(status=ValidityStatus.none, associations=[])

            unresolved = [a.ingredient for a in associations if match_ingredient(a.ingredient, ingredients) is None]
            if unresolved:
                logger.info(
                    "Recipe %s: %d associations name no known ingredient (%s); kept but not mapped",
                    recipe_id, len(unresolved), ", ".join(sorted(set(unresolved))),
                )

            self.store.save(recipe_id, recipe_hash, associations)
            return AssociationsResult(status=ValidityStatus.valid, associations=associations)
        finally:
            current = self._inflight.get(recipe_id)
            if current is not None and current[1] is asyncio.current_task():
                del self._inflight[recipe_id]

    def save(
        self,
        recipe_id: str,
        ingredients: Sequence[IngredientIn],
        steps: Sequence[StepIn],
        associations: Sequence[Association],
    ) -> AssociationsResult:
        """Persist a hand-edited association list against the current content."""
        recipe_hash = hash_recipe(ingredients, steps)
        self.store.save(recipe_id, recipe_hash, associations, description="manual")
        return AssociationsResult(status=ValidityStatus.valid, associations=list(associations))

    def clear(self, recipe_id: str) -> None:
        self.store.clear(recipe_id)

    def mapping(
        self,
        ingredients: Sequence[IngredientIn],
        associations: Sequence[Association],
    ) -> IngredientStepMapping:
        return build_ingredient_step_mapping(with_reference_ids(list(ingredients)), associations)
