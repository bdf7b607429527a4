"""
Repositories package
"""
from veggie_shop.repositories.order_repository import OrderRepository
from veggie_shop.repositories.user_repository import UserRepository
from veggie_shop.repositories.vegetable_repository import CategoryRepository, VegetableRepository

__all__ = ["OrderRepository", "UserRepository", "CategoryRepository", "VegetableRepository"]
