"""SQLAlchemy ORM models for the association cache.

Tables:
- recipe_associations: One cache entry per recipe, keyed by the recipe content hash
- ingredient_associations: The association rows belonging to a cache entry
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    String,
    DateTime,
    Text,
    Integer,
    ForeignKey,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from .db import Base


class RecipeAssociation(Base):
    """Cache entry header: which recipe, and the hash its associations were built from."""
    __tablename__ = "recipe_associations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    recipe_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    recipe_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # No ORM cascade: the store deletes children explicitly before the parent
    ingredient_associations: Mapped[list["IngredientAssociation"]] = relationship(
        "IngredientAssociation", back_populates="recipe_association",
        order_by="IngredientAssociation.id"
    )


class IngredientAssociation(Base):
    """One ingredient ↔ step link with the snippet that evidences it."""
    __tablename__ = "ingredient_associations"
    __table_args__ = (
        Index("ix_ingredient_associations_recipe_association_id", "recipe_association_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    recipe_association_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("recipe_associations.id"), nullable=False
    )
    ingredient: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    step: Mapped[int] = mapped_column(Integer, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    usage: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    recipe_association: Mapped["RecipeAssociation"] = relationship(
        "RecipeAssociation", back_populates="ingredient_associations"
    )
