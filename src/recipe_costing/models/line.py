"""
Shared columns for recipe and menu item lines.

A line points at an ingredient or a recipe through (ref_kind, ref_id).
ref_id carries no foreign key: deleting an ingredient or
recipe leaves the reference dangling, and the costing engine reports it
as "Missing ingredient" / "Missing recipe".
"""

from sqlalchemy import Column, Float, Integer, String

from recipe_costing.services.costing.records import RecipeLine as LineRecord
from recipe_costing.services.costing.records import make_ref
from recipe_costing.utils.constants import ID_PREFIX_LINE, MAX_ID_LENGTH

from .base import BaseModel
from .enums import Unit


class CatalogLine(BaseModel):
    """
    Abstract line: a component reference, a quantity and its unit.

    Attributes:
        ref_kind: "ingredient" or "recipe"
        ref_id: Id of the referenced ingredient or recipe
        qty: Quantity used
        unit: Unit of qty ("g", "ml" or "pc")
        position: Display order within the owner (0-based)
    """

    __abstract__ = True

    ID_PREFIX = ID_PREFIX_LINE

    ref_kind = Column(String(20), nullable=False)
    ref_id = Column(String(MAX_ID_LENGTH), nullable=False, index=True)
    qty = Column(Float, nullable=False, default=0.0)
    unit = Column(String(10), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    def to_record(self) -> LineRecord:
        """Snapshot this row as an engine line record."""
        return LineRecord(
            ref=make_ref(self.ref_kind, self.ref_id),
            qty=self.qty,
            unit=Unit(self.unit),
            id=self.id,
        )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(id='{self.id}', {self.ref_kind}='{self.ref_id}', "
            f"qty={self.qty}, unit='{self.unit}')"
        )
