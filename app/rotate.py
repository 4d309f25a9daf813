"""Key rotation CLI — re-encrypt stored fields with the current key.

Set the new key as FIELD_ENCRYPTION_KEY and list the previous one in
FIELD_DECRYPTION_KEYS before running ``rotate-field-keys``.
"""

import sys

import structlog

from app.application.services.user_service import rotate_encryption
from app.config import get_settings
from app.core.logging import configure_logging
from app.domain.models.user import User
from app.infrastructure.database import get_client
from app.infrastructure.field_encryption import FieldEncryptionMiddleware
from app.infrastructure.repositories.encrypted_repository import EncryptedUserRepository
from app.infrastructure.repositories.user_repository import SQLAlchemyUserRepository

logger = structlog.get_logger(__name__)


def main() -> None:
    configure_logging()
    try:
        middleware = FieldEncryptionMiddleware.from_settings(get_settings(), User)
        db = get_client().session()
        try:
            rotate_encryption(EncryptedUserRepository(SQLAlchemyUserRepository(db), middleware))
        finally:
            db.close()
    except Exception as exc:
        logger.error("Unhandled error", error=str(exc), error_type=exc.__class__.__name__)
        sys.exit(1)
    sys.exit(0)


if __name__ == "__main__":
    main()
