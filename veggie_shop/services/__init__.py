"""
Services package
"""
from veggie_shop.services.catalog_service import CatalogService
from veggie_shop.services.order_service import OrderService
from veggie_shop.services.user_service import UserService

__all__ = ["CatalogService", "OrderService", "UserService"]
