"""
Pydantic schemas for catalog responses
"""
from pydantic import BaseModel, ConfigDict
from typing import Optional
from decimal import Decimal
from datetime import datetime


class CategoryResponse(BaseModel):
    """Schema for category response"""
    id: int
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class VegetableResponse(BaseModel):
    """Schema for vegetable response"""
    id: int
    name: str
    description: str
    price: Decimal
    image_url: str
    category_id: int
    category_name: str
    in_stock: bool
    stock_quantity: int
    unit: str
    nutrition_info: Optional[str] = None
    origin: Optional[str] = None
    is_organic: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
