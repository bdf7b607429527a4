"""
Catalog API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List

from veggie_shop.database import get_db
from veggie_shop.services.catalog_service import CatalogService
from veggie_shop.schemas.catalog import CategoryResponse, VegetableResponse

categories_router = APIRouter(prefix="/categories", tags=["catalog"])
vegetables_router = APIRouter(prefix="/vegetables", tags=["catalog"])


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    """Dependency to get CatalogService instance"""
    return CatalogService(db)


@categories_router.get("", response_model=List[CategoryResponse], summary="Get all categories")
def get_categories(service: CatalogService = Depends(get_catalog_service)):
    return service.get_all_categories()


@categories_router.get("/{category_id}", response_model=CategoryResponse, summary="Get category by ID")
def get_category(category_id: int, service: CatalogService = Depends(get_catalog_service)):
    category = service.get_category_by_id(category_id)
    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Category with id={category_id} not found"
        )
    return category


@vegetables_router.get("", response_model=List[VegetableResponse], summary="Get all vegetables")
def get_vegetables(service: CatalogService = Depends(get_catalog_service)):
    return service.get_all_vegetables()


@vegetables_router.get("/search", response_model=List[VegetableResponse], summary="Search vegetables")
def search_vegetables(
    query: str = Query(..., description="Text to look for in name or description"),
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Search vegetables by name or description (case-insensitive)

    - **query**: Search text
    """
    return service.search_vegetables(query)


@vegetables_router.get("/category/{category_id}", response_model=List[VegetableResponse], summary="Get vegetables by category")
def get_vegetables_by_category(category_id: int, service: CatalogService = Depends(get_catalog_service)):
    return service.get_vegetables_by_category(category_id)


@vegetables_router.get("/{vegetable_id}", response_model=VegetableResponse, summary="Get vegetable by ID")
def get_vegetable(vegetable_id: int, service: CatalogService = Depends(get_catalog_service)):
    """
    Retrieve a specific vegetable by ID

    - **vegetable_id**: Vegetable ID
    """
    vegetable = service.get_vegetable_by_id(vegetable_id)
    if not vegetable:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Vegetable with id={vegetable_id} not found"
        )
    return vegetable
