"""
Catalog Service - read-only category and vegetable queries
"""
from typing import List, Optional
from sqlalchemy.orm import Session

from veggie_shop.repositories.vegetable_repository import CategoryRepository, VegetableRepository
from veggie_shop.schemas.catalog import CategoryResponse, VegetableResponse


class CatalogService:
    """Service layer for browsing the catalog"""

    def __init__(self, db: Session):
        self.vegetables = VegetableRepository(db)
        self.categories = CategoryRepository(db)

    def get_all_categories(self) -> List[CategoryResponse]:
        return [CategoryResponse.model_validate(c) for c in self.categories.get_all()]

    def get_category_by_id(self, category_id: int) -> Optional[CategoryResponse]:
        category = self.categories.get_by_id(category_id)
        if not category:
            return None
        return CategoryResponse.model_validate(category)

    def get_all_vegetables(self) -> List[VegetableResponse]:
        return [VegetableResponse.model_validate(v) for v in self.vegetables.get_all()]

    def get_vegetable_by_id(self, vegetable_id: int) -> Optional[VegetableResponse]:
        vegetable = self.vegetables.get_by_id(vegetable_id)
        if not vegetable:
            return None
        return VegetableResponse.model_validate(vegetable)

    def get_vegetables_by_category(self, category_id: int) -> List[VegetableResponse]:
        return [VegetableResponse.model_validate(v) for v in self.vegetables.get_by_category(category_id)]

    def search_vegetables(self, query: str) -> List[VegetableResponse]:
        """Vegetables whose name or description contains query; blank query matches nothing"""
        query = (query or "").strip()
        if not query:
            return []
        return [VegetableResponse.model_validate(v) for v in self.vegetables.search(query)]
