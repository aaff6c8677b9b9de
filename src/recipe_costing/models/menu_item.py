"""
Menu item models.

This module contains:
- MenuItem: a sellable dish with a price and a number of servings
- MenuItemLine: one ingredient (or recipe) line of a MenuItem
"""

from sqlalchemy import CheckConstraint, Column, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from recipe_costing.services.costing.records import MenuItem as MenuItemRecord
from recipe_costing.utils.constants import (
    ID_PREFIX_MENU_ITEM,
    MAX_ID_LENGTH,
    MAX_NAME_LENGTH,
    TABLE_MENU_ITEM_LINE,
    TABLE_MENU_ITEM,
)
from recipe_costing.utils.datetime_utils import iso_timestamp

from .base import BaseModel
from .line import CatalogLine


class MenuItem(BaseModel):
    """
    Menu item model.

    Attributes:
        name: Dish name (required)
        servings: Number of servings the lines make
        price: Selling price of one serving
        notes: Optional notes
        lines: Ordered MenuItemLine rows
    """

    __tablename__ = TABLE_MENU_ITEM

    ID_PREFIX = ID_PREFIX_MENU_ITEM

    name = Column(String(MAX_NAME_LENGTH), nullable=False)
    servings = Column(Float, nullable=False, default=1.0)
    price = Column(Float, nullable=False, default=0.0)
    notes = Column(Text, nullable=True)

    lines = relationship(
        "MenuItemLine",
        back_populates="menu_item",
        cascade="all, delete-orphan",
        order_by="MenuItemLine.position",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_menu_item_price_non_negative"),
        Index("idx_menu_item_name", "name"),
    )

    def to_record(self) -> MenuItemRecord:
        """Snapshot this menu item and its lines as an engine record."""
        return MenuItemRecord(
            id=self.id,
            name=self.name,
            servings=self.servings,
            price=self.price,
            lines=[line.to_record() for line in self.lines],
            notes=self.notes,
            updated_at=iso_timestamp(self.updated_at) if self.updated_at else None,
        )


class MenuItemLine(CatalogLine):
    """
    One line of a menu item.

    Attributes:
        menu_item_id: Foreign key to the owning MenuItem
    """

    __tablename__ = TABLE_MENU_ITEM_LINE

    menu_item_id = Column(
        String(MAX_ID_LENGTH), ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False
    )

    menu_item = relationship("MenuItem", back_populates="lines")

    __table_args__ = (
        CheckConstraint("qty >= 0", name="ck_menu_item_line_qty_non_negative"),
        Index("idx_menu_item_line_menu_item", "menu_item_id", "position"),
    )
