"""Seed CLI — insert the demo users.

Usage: ``seed-users`` (or ``python -m app.seed``). Exits 0 on success and
1 on any error, e.g. duplicate emails when run twice.
"""

import sys

import structlog

from app.application.services.seed_service import seed_users
from app.config import get_settings
from app.core.logging import configure_logging
from app.domain.models.user import User
from app.infrastructure.database import get_client
from app.infrastructure.field_encryption import FieldEncryptionMiddleware
from app.infrastructure.repositories.encrypted_repository import EncryptedUserRepository
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository

logger = structlog.get_logger(__name__)


def run() -> None:
    client = get_client()
    client.create_all()
    middleware = FieldEncryptionMiddleware.from_settings(get_settings(), User)

    db = client.session()
    try:
        seed_users(EncryptedUserRepository(SQLAlchemyUserRepository(db), middleware))
    finally:
        db.close()


def main() -> None:
    configure_logging()
    try:
        run()
    except Exception as exc:
        logger.error("Unhandled error", error=str(exc), error_type=exc.__class__.__name__)
        sys.exit(1)
    logger.info("Seed process finished.")
    sys.exit(0)


if __name__ == "__main__":
    main()
