"""Per-recipe association cache backed by SQLAlchemy.

The store is an explicit object: build it once at startup, hand it to the
service layer, close it on shutdown. The engine is created lazily on first use.

Contract:
- get(recipe_id, hash): none / outdated (no rows returned) / valid (rows returned)
- save(recipe_id, hash, associations): replace the whole entry in one transaction
- clear(recipe_id): delete the entry in one transaction, no-op if absent
- Any database failure surfaces as StoreError
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy import select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..db import Base, build_engine
from ..errors import StoreError
from ..models import RecipeAssociation, IngredientAssociation
from ..schemas import Association, AssociationsResult, ValidityStatus

logger = logging.getLogger("recipelink.store")


@dataclass
class CacheEntry:
    recipe_id: str
    recipe_hash: str
    associations: list[Association]


def _to_association(row: IngredientAssociation) -> Association:
    return Association(
        ingredient=row.ingredient,
        amount=row.amount,
        step=row.step,
        text=row.text,
        usage=row.usage,
    )


class AssociationStore:
    def __init__(self, database_url: Optional[str] = None, engine: Optional[Engine] = None):
        if database_url is None and engine is None:
            raise ValueError("AssociationStore needs a database_url or an engine")
        self.database_url = database_url
        self._engine = engine
        self._SessionLocal: Optional[sessionmaker] = None

    # --- Lifecycle ---

    def open(self) -> "AssociationStore":
        if self._SessionLocal is not None:
            return self
        try:
            if self._engine is None:
                self._engine = build_engine(self.database_url)
            Base.metadata.create_all(bind=self._engine)
        except (SQLAlchemyError, OSError) as e:
            raise StoreError(f"Could not open association store: {e}") from e
        self._SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self._engine)
        logger.info("Association store opened (%s)", self._engine.url.render_as_string(hide_password=True))
        return self

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
        self._SessionLocal = None
        logger.info("Association store closed")

    @property
    def engine(self) -> Engine:
        self.open()
        return self._engine

    def _session(self) -> Session:
        self.open()
        return self._SessionLocal()

    def ping(self) -> bool:
        try:
            with self._session() as db:
                db.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError, StoreError):
            return False

    # --- Reads ---

    def get_entry(self, recipe_id: str) -> Optional[CacheEntry]:
        """Raw cache entry for a recipe regardless of its hash."""
        try:
            with self._session() as db:
                parent = db.execute(
                    select(RecipeAssociation).where(RecipeAssociation.recipe_id == recipe_id)
                ).scalar_one_or_none()
                if parent is None:
                    return None
                return CacheEntry(
                    recipe_id=parent.recipe_id,
                    recipe_hash=parent.recipe_hash,
                    associations=[_to_association(r) for r in parent.ingredient_associations],
                )
        except SQLAlchemyError as e:
            logger.error(f"Reading associations for recipe {recipe_id} failed: {e}")
            raise StoreError(f"Failed to read associations for recipe {recipe_id}") from e

    def get(self, recipe_id: str, current_hash: str) -> AssociationsResult:
        entry = self.get_entry(recipe_id)
        if entry is None:
            logger.debug("No associations stored for recipe %s", recipe_id)
            return AssociationsResult(status=ValidityStatus.none, associations=[])

        if entry.recipe_hash != current_hash:
            logger.info(
                "Associations for recipe %s are outdated (stored=%s current=%s)",
                recipe_id, entry.recipe_hash[:12], current_hash[:12],
            )
            return AssociationsResult(status=ValidityStatus.outdated, associations=[])

        return AssociationsResult(status=ValidityStatus.valid, associations=entry.associations)

    # --- Writes ---

    def _delete_entry(self, db: Session, recipe_id: str) -> bool:
        parent_ids = db.execute(
            select(RecipeAssociation.id).where(RecipeAssociation.recipe_id == recipe_id)
        ).scalars().all()
        if not parent_ids:
            return False
        # Children before parent (FK)
        db.query(IngredientAssociation).filter(
            IngredientAssociation.recipe_association_id.in_(parent_ids)
        ).delete(synchronize_session=False)
        db.query(RecipeAssociation).filter(
            RecipeAssociation.id.in_(parent_ids)
        ).delete(synchronize_session=False)
        return True

    def save(
        self,
        recipe_id: str,
        recipe_hash: str,
        associations: Sequence[Association],
        description: Optional[str] = None,
    ) -> None:
        """Atomically replace the cache entry for `recipe_id`."""
        try:
            with self._session() as db:
                with db.begin():
                    replaced = self._delete_entry(db, recipe_id)

                    parent = RecipeAssociation(
                        recipe_id=recipe_id,
                        recipe_hash=recipe_hash,
                        description=description,
                    )
                    db.add(parent)
                    db.flush()

                    db.add_all([
                        IngredientAssociation(
                            recipe_association_id=parent.id,
                            ingredient=a.ingredient,
                            amount=a.amount,
                            step=a.step,
                            text=a.text,
                            usage=a.usage,
                        )
                        for a in associations
                    ])
        except SQLAlchemyError as e:
            logger.error(f"Saving associations for recipe {recipe_id} failed: {e}")
            raise StoreError(f"Failed to save associations for recipe {recipe_id}") from e

        logger.info(
            "Saved %d associations for recipe %s (hash=%s, replaced=%s)",
            len(associations), recipe_id, recipe_hash[:12], replaced,
        )

    def clear(self, recipe_id: str) -> None:
        try:
            with self._session() as db:
                with db.begin():
                    removed = self._delete_entry(db, recipe_id)
        except SQLAlchemyError as e:
            logger.error(f"Clearing associations for recipe {recipe_id} failed: {e}")
            raise StoreError(f"Failed to clear associations for recipe {recipe_id}") from e

        if removed:
            logger.info("Cleared associations for recipe %s", recipe_id)
