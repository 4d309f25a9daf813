"""
Repository wrappers applying field encryption around another repository.
"""

from typing import Any, Generic, List, Optional, TypeVar

from app.domain.repositories.base import BaseRepository
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.user import UserRead
from app.infrastructure.field_encryption import FieldEncryptionMiddleware
from app.infrastructure.repositories.base_repository import to_data

T = TypeVar("T")


class EncryptedRepository(BaseRepository[T], Generic[T]):
    """Same interface as the wrapped repository; callers only see plaintext.

    Writes are sealed before they reach *inner*, and every record *inner*
    returns is opened before it reaches the caller.
    """

    def __init__(self, inner: BaseRepository[T], middleware: FieldEncryptionMiddleware):
        self.inner = inner
        self.middleware = middleware

    def _open(self, record: Optional[T]) -> Optional[T]:
        return self.middleware.decrypt_on_read(record) if record is not None else None

    def get_by_id(self, id: int) -> Optional[T]:
        return self._open(self.inner.get_by_id(id))

    def find_many(self) -> List[T]:
        return [self._open(record) for record in self.inner.find_many()]

    def create(self, obj_in: Any) -> T:
        return self._open(self.inner.create(self.middleware.encrypt_on_write(to_data(obj_in))))

    def update(self, id: int, obj_in: Any) -> T:
        return self._open(self.inner.update(id, self.middleware.encrypt_on_write(to_data(obj_in))))


class EncryptedUserRepository(EncryptedRepository[UserRead], UserRepository):
    """User repository with id_card_no transparently encrypted."""

    inner: UserRepository

    def find_by_email(self, email: str) -> Optional[UserRead]:
        return self._open(self.inner.find_by_email(email))
