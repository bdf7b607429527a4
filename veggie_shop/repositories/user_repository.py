"""
User Repository - Data Access Layer
"""
from typing import Optional
from sqlalchemy.orm import Session

from veggie_shop.models.user import User


class UserRepository:
    """Repository for User persistence"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID"""
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email"""
        return self.db.query(User).filter(User.email == email).first()

    def add(self, user: User) -> User:
        """Stage a new user and flush it so it receives its ID"""
        self.db.add(user)
        self.db.flush()
        return user
