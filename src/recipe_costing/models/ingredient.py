"""
Ingredient model.

An ingredient is bought in packs: pack_size units (g, ml or pc) for
pack_cost. Its unit cost is pack_cost / pack_size.
"""

from sqlalchemy import CheckConstraint, Column, Float, Index, String, Text

from recipe_costing.services.costing.records import Ingredient as IngredientRecord
from recipe_costing.utils.constants import (
    ID_PREFIX_INGREDIENT,
    MAX_NAME_LENGTH,
    MAX_SUPPLIER_LENGTH,
    TABLE_INGREDIENT,
)
from recipe_costing.utils.datetime_utils import iso_timestamp

from .base import BaseModel
from .enums import Unit


class Ingredient(BaseModel):
    """
    Ingredient model.

    Attributes:
        name: Display name (required)
        unit: Unit the pack is measured in ("g", "ml" or "pc")
        pack_size: Quantity per pack (in unit)
        pack_cost: Cost of one pack
        supplier: Optional supplier name
        notes: Optional notes
    """

    __tablename__ = TABLE_INGREDIENT

    ID_PREFIX = ID_PREFIX_INGREDIENT

    name = Column(String(MAX_NAME_LENGTH), nullable=False)
    unit = Column(String(10), nullable=False)
    pack_size = Column(Float, nullable=False)
    pack_cost = Column(Float, nullable=False, default=0.0)
    supplier = Column(String(MAX_SUPPLIER_LENGTH), nullable=True)
    notes = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("pack_cost >= 0", name="ck_ingredient_pack_cost_non_negative"),
        Index("idx_ingredient_name", "name"),
    )

    def to_record(self) -> IngredientRecord:
        """Snapshot this row as an engine record."""
        return IngredientRecord(
            id=self.id,
            name=self.name,
            unit=Unit(self.unit),
            pack_size=self.pack_size,
            pack_cost=self.pack_cost,
            supplier=self.supplier,
            notes=self.notes,
            updated_at=iso_timestamp(self.updated_at) if self.updated_at else None,
        )
