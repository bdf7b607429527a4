"""
SQLAlchemy catalog models
"""
from sqlalchemy import Column, Integer, String, Numeric, Boolean, DateTime, Text, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from veggie_shop.database import Base


class Category(Base):
    """Category database model"""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    image_url = Column(String(500), nullable=True)

    vegetables = relationship("Vegetable", back_populates="category")

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}')>"


class Vegetable(Base):
    """
    Vegetable database model

    stock_quantity and in_stock form the inventory ledger; only the order
    workflow changes them and keeps in_stock == (stock_quantity > 0).
    """

    __tablename__ = "vegetables"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(200), nullable=False, index=True)
    description = Column(String(1000), nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    image_url = Column(String(500), nullable=False, default="")
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True)
    in_stock = Column(Boolean, nullable=False, default=True)
    stock_quantity = Column(Integer, nullable=False, default=0)
    unit = Column(String(50), nullable=False)
    nutrition_info = Column(Text, nullable=True)
    origin = Column(String(200), nullable=True)
    is_organic = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    category = relationship("Category", back_populates="vegetables")

    # Constraints
    __table_args__ = (
        CheckConstraint('price > 0', name='check_vegetable_price_positive'),
        CheckConstraint('stock_quantity >= 0', name='check_vegetable_stock_non_negative'),
    )

    @property
    def category_name(self) -> str:
        return self.category.name if self.category else ""

    def __repr__(self):
        return (
            f"<Vegetable(id={self.id}, name='{self.name}', price={self.price}, "
            f"stock_quantity={self.stock_quantity}, in_stock={self.in_stock})>"
        )
