"""
Catalog seed data
"""
from decimal import Decimal

import structlog
from sqlalchemy.orm import Session

from veggie_shop.database import unit_of_work
from veggie_shop.models import Category, User, Vegetable
from veggie_shop.repositories.user_repository import UserRepository
from veggie_shop.repositories.vegetable_repository import CategoryRepository

logger = structlog.get_logger(__name__)

CATEGORIES = [
    {"id": 1, "name": "Leafy Greens", "description": "Fresh leafy vegetables"},
    {"id": 2, "name": "Root Vegetables", "description": "Nutritious root vegetables"},
    {"id": 3, "name": "Fruits", "description": "Fresh vegetables that are technically fruits"},
    {"id": 4, "name": "Herbs", "description": "Fresh aromatic herbs"},
]

VEGETABLES = [
    {
        "id": 1,
        "name": "Fresh Spinach",
        "description": "Organic fresh spinach leaves, perfect for salads and cooking",
        "price": Decimal("45.99"),
        "image_url": "https://images.pexels.com/photos/2255925/pexels-photo-2255925.jpeg",
        "category_id": 1,
        "stock_quantity": 50,
        "unit": "bunch",
        "is_organic": True,
        "origin": "Local Farm",
    },
    {
        "id": 2,
        "name": "Organic Carrots",
        "description": "Sweet and crunchy organic carrots, great for snacking and cooking",
        "price": Decimal("35.49"),
        "image_url": "https://images.pexels.com/photos/143133/pexels-photo-143133.jpeg",
        "category_id": 2,
        "stock_quantity": 75,
        "unit": "kg",
        "is_organic": True,
        "origin": "Punjab",
    },
    {
        "id": 3,
        "name": "Fresh Tomatoes",
        "description": "Juicy red tomatoes, perfect for salads and sauces",
        "price": Decimal("55.99"),
        "image_url": "https://images.pexels.com/photos/533280/pexels-photo-533280.jpeg",
        "category_id": 3,
        "stock_quantity": 30,
        "unit": "kg",
        "is_organic": False,
        "origin": "Maharashtra",
    },
    {
        "id": 4,
        "name": "Fresh Basil",
        "description": "Aromatic fresh basil leaves, perfect for Italian dishes",
        "price": Decimal("25.99"),
        "image_url": "https://images.pexels.com/photos/4198021/pexels-photo-4198021.jpeg",
        "category_id": 4,
        "stock_quantity": 25,
        "unit": "pack",
        "is_organic": True,
        "origin": "Local Greenhouse",
    },
    {
        "id": 5,
        "name": "Broccoli",
        "description": "Fresh green broccoli crowns, packed with nutrients",
        "price": Decimal("65.49"),
        "image_url": "https://images.pexels.com/photos/47347/broccoli-vegetable-food-healthy-47347.jpeg",
        "category_id": 1,
        "stock_quantity": 40,
        "unit": "head",
        "is_organic": False,
        "origin": "Himachal Pradesh",
    },
    {
        "id": 6,
        "name": "Sweet Potatoes",
        "description": "Orange sweet potatoes, naturally sweet and nutritious",
        "price": Decimal("42.99"),
        "image_url": "https://images.pexels.com/photos/89247/pexels-photo-89247.jpeg",
        "category_id": 2,
        "stock_quantity": 60,
        "unit": "kg",
        "is_organic": True,
        "origin": "Tamil Nadu",
    },
]

DEMO_USER = {
    "email": "demo@veggieshop.local",
    "first_name": "Demo",
    "last_name": "Customer",
}


def seed_catalog(db: Session) -> bool:
    """
    Insert the starter catalog and a demo customer

    Does nothing when categories already exist.

    Returns:
        True if data was inserted
    """
    if CategoryRepository(db).count() > 0:
        logger.info("Catalog already seeded")
        return False

    with unit_of_work(db, "seed_catalog"):
        db.add_all(Category(**category) for category in CATEGORIES)
        db.flush()
        db.add_all(
            Vegetable(in_stock=vegetable["stock_quantity"] > 0, **vegetable)
            for vegetable in VEGETABLES
        )
        if UserRepository(db).get_by_email(DEMO_USER["email"]) is None:
            db.add(User(**DEMO_USER))

    logger.info("Catalog seeded", categories=len(CATEGORIES), vegetables=len(VEGETABLES))
    return True
