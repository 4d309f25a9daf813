"""
User Repository Interface.
Defines specific data access operations for Users.
"""

from typing import Optional

from app.domain.repositories.base import BaseRepository
from app.domain.schemas.user import UserRead


class UserRepository(BaseRepository[UserRead]):
    """Interface for User-specific operations."""

    def find_by_email(self, email: str) -> Optional[UserRead]:
        """Get a single user by email."""
        ...
