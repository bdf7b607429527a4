"""
User API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from veggie_shop.api.orders import get_current_user_id, to_http_error
from veggie_shop.database import get_db
from veggie_shop.exceptions import ShopError
from veggie_shop.schemas.user import UserCreate, UserResponse
from veggie_shop.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Dependency to get UserService instance"""
    return UserService(db)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED, summary="Register customer")
def register_user(user_data: UserCreate, service: UserService = Depends(get_user_service)):
    """
    Register a customer account

    - **email**: Unique email address
    - **first_name** / **last_name**: Required, max 100 characters
    - **phone**: Optional contact number
    """
    try:
        return service.register_user(user_data)
    except ShopError as e:
        raise to_http_error(e)


@router.get("/me", response_model=UserResponse, summary="Get acting user")
def get_me(
    user_id: int = Depends(get_current_user_id),
    service: UserService = Depends(get_user_service)
):
    user = service.get_user_by_id(user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with id={user_id} not found"
        )
    return user
