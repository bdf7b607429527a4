"""
User Service - customer registration and lookup
"""
from typing import Optional

import structlog
from sqlalchemy.orm import Session

from veggie_shop.database import unit_of_work
from veggie_shop.exceptions import EmailAlreadyRegisteredError
from veggie_shop.models.user import User
from veggie_shop.repositories.user_repository import UserRepository
from veggie_shop.schemas.user import UserCreate, UserResponse

logger = structlog.get_logger(__name__)


class UserService:
    """Service layer for customer accounts"""

    def __init__(self, db: Session):
        self.db = db
        self.repository = UserRepository(db)

    def get_user_by_id(self, user_id: int) -> Optional[UserResponse]:
        user = self.repository.get_by_id(user_id)
        if not user:
            return None
        return UserResponse.model_validate(user)

    def register_user(self, user_data: UserCreate) -> UserResponse:
        """
        Create a customer account

        Emails are compared case-insensitively and stored lower-cased.

        Raises:
            EmailAlreadyRegisteredError: If the email is taken
            TransactionError: If the store fails while saving
        """
        email = user_data.email.lower()

        with unit_of_work(self.db, "register_user", email=email):
            if self.repository.get_by_email(email) is not None:
                raise EmailAlreadyRegisteredError(email)

            user = self.repository.add(User(
                email=email,
                first_name=user_data.first_name,
                last_name=user_data.last_name,
                phone=user_data.phone or None
            ))

        logger.info("User registered", user_id=user.id)
        return UserResponse.model_validate(user)
