"""
SQLAlchemy Implementation of User Repository.
"""

from typing import Optional

from sqlalchemy.orm import Session

from app.domain.models.user import User
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.user import UserRead
from app.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyUserRepository(SQLAlchemyRepository[User, UserRead], UserRepository):
    """User repository implementation using SQLAlchemy.

    Values of encrypted columns pass through untouched; wrap the
    repository in EncryptedRepository to see plaintext.
    """

    def __init__(self, db: Session):
        super().__init__(db, User, UserRead)

    def find_by_email(self, email: str) -> Optional[UserRead]:
        with self._translate_errors():
            user = self.db.query(User).filter(User.email == email).first()
        return self._to_schema(user) if user else None
