"""Association cache: recipe_associations, ingredient_associations

Revision ID: 001_association_cache
Revises: 
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_association_cache"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # One cache entry per recipe
    op.create_table(
        "recipe_associations",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("recipe_id", sa.String(255), nullable=False, unique=True),
        sa.Column("recipe_hash", sa.String(64), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Association rows, children of a cache entry
    op.create_table(
        "ingredient_associations",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "recipe_association_id", sa.Integer,
            sa.ForeignKey("recipe_associations.id"), nullable=False
        ),
        sa.Column("ingredient", sa.Text, nullable=False),
        sa.Column("amount", sa.Text, nullable=True),
        sa.Column("step", sa.Integer, nullable=False),
        sa.Column("text", sa.Text, nullable=False),
        sa.Column("usage", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index(
        "ix_ingredient_associations_recipe_association_id",
        "ingredient_associations",
        ["recipe_association_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_ingredient_associations_recipe_association_id", table_name="ingredient_associations")
    op.drop_table("ingredient_associations")
    op.drop_table("recipe_associations")
