"""Shared fixtures: settings from env, an in-memory database, keyed repositories."""

from collections.abc import Generator

import pytest
from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.crypto import Keyring, generate_key
from app.domain.models.user import User
from app.infrastructure.database import DatabaseClient, reset_client
from app.infrastructure.field_encryption import FieldEncryptionMiddleware, encrypted_fields
from app.infrastructure.repositories.encrypted_repository import EncryptedUserRepository
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository

_ENCRYPTION_KEY = generate_key()


@pytest.fixture
def encryption_key() -> str:
    return _ENCRYPTION_KEY


@pytest.fixture(autouse=True)
def settings_env(monkeypatch, tmp_path, encryption_key) -> Generator[None, None, None]:
    """Point settings at a temp database and a test key; drop cached handles."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("FIELD_ENCRYPTION_KEY", encryption_key)
    monkeypatch.setenv("FIELD_DECRYPTION_KEYS", "")
    monkeypatch.setenv("ENVIRONMENT", "development")
    get_settings.cache_clear()
    reset_client()
    yield
    reset_client()
    get_settings.cache_clear()


@pytest.fixture
def db_client() -> Generator[DatabaseClient, None, None]:
    client = DatabaseClient("sqlite://")
    client.create_all()
    yield client
    client.dispose()


@pytest.fixture
def db(db_client: DatabaseClient) -> Generator[Session, None, None]:
    session = db_client.session()
    yield session
    session.close()


@pytest.fixture
def keyring(encryption_key: str) -> Keyring:
    return Keyring.from_strings(encryption_key)


@pytest.fixture
def middleware(keyring: Keyring) -> FieldEncryptionMiddleware:
    return FieldEncryptionMiddleware(keyring, encrypted_fields(User))


@pytest.fixture
def raw_repo(db: Session) -> SQLAlchemyUserRepository:
    return SQLAlchemyUserRepository(db)


@pytest.fixture
def repo(raw_repo: SQLAlchemyUserRepository, middleware: FieldEncryptionMiddleware) -> EncryptedUserRepository:
    return EncryptedUserRepository(raw_repo, middleware)
