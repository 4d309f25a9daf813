"""
API Dependencies.

The database client and encryption middleware are created once in the
application lifespan and read from ``app.state`` here.
"""

from typing import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.domain.repositories.user_repository import UserRepository
from app.infrastructure.database import DatabaseClient
from app.infrastructure.field_encryption import FieldEncryptionMiddleware
from app.infrastructure.repositories.encrypted_repository import EncryptedUserRepository
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository


def get_db_client(request: Request) -> DatabaseClient:
    return request.app.state.db_client


def get_field_encryption(request: Request) -> FieldEncryptionMiddleware:
    return request.app.state.field_encryption


def get_db(client: DatabaseClient = Depends(get_db_client)) -> Generator[Session, None, None]:
    """Provide a DB session for the duration of a request."""
    db = client.session()
    try:
        yield db
    finally:
        db.close()


def get_user_repository(
    db: Session = Depends(get_db),
    middleware: FieldEncryptionMiddleware = Depends(get_field_encryption),
) -> UserRepository:
    """Get the user repository, wrapped once with field encryption."""
    return EncryptedUserRepository(SQLAlchemyUserRepository(db), middleware)
