"""
Catalog Repository - Data Access Layer
"""
from typing import Iterable, List, Optional
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_

from veggie_shop.models.catalog import Category, Vegetable


class VegetableRepository:
    """Repository for vegetable reads and inventory adjustments"""

    def __init__(self, db: Session):
        self.db = db

    def _with_category(self):
        return self.db.query(Vegetable).options(joinedload(Vegetable.category))

    def get_all(self) -> List[Vegetable]:
        """Get all vegetables"""
        return self._with_category().order_by(Vegetable.id).all()

    def get_by_id(self, vegetable_id: int) -> Optional[Vegetable]:
        """Get vegetable by ID"""
        return self._with_category().filter(Vegetable.id == vegetable_id).first()

    def get_by_category(self, category_id: int) -> List[Vegetable]:
        """Get vegetables in a category"""
        return self._with_category().filter(
            Vegetable.category_id == category_id
        ).order_by(Vegetable.id).all()

    def search(self, query: str) -> List[Vegetable]:
        """Case-insensitive substring search over name and description"""
        pattern = f"%{query}%"
        return self._with_category().filter(
            or_(Vegetable.name.ilike(pattern), Vegetable.description.ilike(pattern))
        ).order_by(Vegetable.id).all()

    def get_many_for_update(self, vegetable_ids: Iterable[int]) -> List[Vegetable]:
        """
        Load several vegetables in one query and lock their rows

        Rows are locked in ID order so concurrent orders over the same
        vegetables cannot deadlock. Copies already in the session are
        refreshed with the locked values.
        """
        ids = sorted(set(vegetable_ids))
        if not ids:
            return []
        return self.db.query(Vegetable).filter(
            Vegetable.id.in_(ids)
        ).order_by(Vegetable.id).with_for_update().populate_existing().all()

    def decrement_stock(self, vegetable: Vegetable, quantity: int) -> Vegetable:
        """
        Take ordered quantity out of stock

        A result at or below zero is clamped to zero and flags the
        vegetable out of stock.
        """
        new_stock = vegetable.stock_quantity - quantity
        if new_stock <= 0:
            vegetable.stock_quantity = 0
            vegetable.in_stock = False
        else:
            vegetable.stock_quantity = new_stock
        self.db.flush()
        return vegetable

    def restore_stock(self, vegetable: Vegetable, quantity: int) -> Vegetable:
        """Put quantity back into stock; no upper bound is applied"""
        vegetable.stock_quantity += quantity
        vegetable.in_stock = True
        self.db.flush()
        return vegetable


class CategoryRepository:
    """Repository for category reads"""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self) -> List[Category]:
        """Get all categories"""
        return self.db.query(Category).order_by(Category.id).all()

    def get_by_id(self, category_id: int) -> Optional[Category]:
        """Get category by ID"""
        return self.db.query(Category).filter(Category.id == category_id).first()

    def count(self) -> int:
        """Get total count of categories"""
        return self.db.query(Category).count()
