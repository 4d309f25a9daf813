"""User service — business logic over the (encrypted) user repository."""

from typing import List

import structlog

from app.core.crypto import key_fingerprint_of
from app.domain.repositories.user_repository import UserRepository
from app.domain.schemas.user import UserCreate, UserRead, UserUpdate
from app.infrastructure.repositories.encrypted_repository import EncryptedUserRepository

logger = structlog.get_logger(__name__)


def create_user(repo: UserRepository, user_in: UserCreate) -> UserRead:
    user = repo.create(user_in)
    logger.info("User created", user_id=user.id, email=user.email)
    return user


def list_users(repo: UserRepository) -> List[UserRead]:
    """All users with sensitive fields already decrypted, in storage order."""
    return repo.find_many()


def rotate_encryption(repo: EncryptedUserRepository) -> int:
    """Re-encrypt every stored sensitive value with the current key.

    Old keys must still be listed in FIELD_DECRYPTION_KEYS while this runs.
    Returns the number of rows rewritten.
    """
    current = repo.middleware.keyring.encryption_key.fingerprint
    fields = repo.middleware.fields
    rotated = 0

    for stored in repo.inner.find_many():
        stale = [
            name for name in fields
            if getattr(stored, name) is not None
            and key_fingerprint_of(getattr(stored, name)) != current
        ]
        if not stale:
            continue
        opened = repo.middleware.decrypt_on_read(stored)
        repo.update(stored.id, UserUpdate(**{name: getattr(opened, name) for name in stale}))
        rotated += 1

    logger.info("Encryption key rotation finished", rows_rotated=rotated, key_fingerprint=current)
    return rotated
