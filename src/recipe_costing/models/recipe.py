"""
Recipe models.

This module contains:
- Recipe: a preparation yielding yield_qty of yield_unit
- RecipeLine: one ingredient or sub-recipe line of a Recipe
"""

from sqlalchemy import CheckConstraint, Column, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from recipe_costing.services.costing.records import Recipe as RecipeRecord
from recipe_costing.utils.constants import (
    ID_PREFIX_RECIPE,
    MAX_ID_LENGTH,
    MAX_NAME_LENGTH,
    RECIPE_CATEGORY_BASE,
    TABLE_RECIPE_LINE,
    TABLE_RECIPE,
)
from recipe_costing.utils.datetime_utils import iso_timestamp

from .base import BaseModel
from .enums import RecipeCategory, Unit
from .line import CatalogLine


class Recipe(BaseModel):
    """
    Recipe model.

    Attributes:
        name: Recipe name (required)
        category: "Base" or "SubRecipe" (descriptive only)
        yield_qty: Quantity one batch produces
        yield_unit: Unit of the yield ("g", "ml" or "pc")
        notes: Optional notes
        lines: Ordered RecipeLine rows
    """

    __tablename__ = TABLE_RECIPE

    ID_PREFIX = ID_PREFIX_RECIPE

    name = Column(String(MAX_NAME_LENGTH), nullable=False)
    category = Column(String(20), nullable=False, default=RECIPE_CATEGORY_BASE)
    yield_qty = Column(Float, nullable=False)
    yield_unit = Column(String(10), nullable=False)
    notes = Column(Text, nullable=True)

    lines = relationship(
        "RecipeLine",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeLine.position",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_recipe_name", "name"),
        Index("idx_recipe_category", "category"),
    )

    def __repr__(self) -> str:
        """String representation of recipe."""
        return f"Recipe(id='{self.id}', name='{self.name}', category='{self.category}')"

    def to_record(self) -> RecipeRecord:
        """Snapshot this recipe and its lines as an engine record."""
        return RecipeRecord(
            id=self.id,
            name=self.name,
            category=RecipeCategory(self.category),
            yield_qty=self.yield_qty,
            yield_unit=Unit(self.yield_unit),
            lines=[line.to_record() for line in self.lines],
            notes=self.notes,
            updated_at=iso_timestamp(self.updated_at) if self.updated_at else None,
        )


class RecipeLine(CatalogLine):
    """
    One line of a recipe.

    Attributes:
        recipe_id: Foreign key to the owning Recipe
    """

    __tablename__ = TABLE_RECIPE_LINE

    recipe_id = Column(
        String(MAX_ID_LENGTH), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )

    recipe = relationship("Recipe", back_populates="lines")

    __table_args__ = (
        CheckConstraint("qty >= 0", name="ck_recipe_line_qty_non_negative"),
        Index("idx_recipe_line_recipe", "recipe_id", "position"),
    )
