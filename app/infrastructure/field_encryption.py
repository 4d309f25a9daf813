"""
Field encryption middleware.

Encrypts designated fields of a record on the way into storage and
decrypts them on the way out. Which fields are sensitive is declared on
the SQLAlchemy model with ``info={"encrypted": True}``.
"""

from typing import Any, Dict, Iterable, Tuple, TypeVar

import structlog
from pydantic import BaseModel
from sqlalchemy import inspect

from app.config import Settings
from app.core.crypto import Keyring, decrypt_value, encrypt_value

logger = structlog.get_logger(__name__)

RecordType = TypeVar("RecordType", bound=BaseModel)


def encrypted_fields(model: type) -> Tuple[str, ...]:
    """Attribute names of the model's columns flagged as encrypted."""
    return tuple(
        attr.key
        for attr in inspect(model).column_attrs
        if any(col.info.get("encrypted") for col in attr.columns)
    )


class FieldEncryptionMiddleware:
    """Transforms sensitive fields between plaintext and ciphertext."""

    def __init__(self, keyring: Keyring, fields: Iterable[str]):
        self.keyring = keyring
        self.fields = tuple(fields)

    @classmethod
    def from_settings(cls, settings: Settings, model: type) -> "FieldEncryptionMiddleware":
        keyring = Keyring.from_strings(settings.FIELD_ENCRYPTION_KEY, settings.decryption_keys)
        fields = encrypted_fields(model)
        logger.info(
            "Field encryption configured",
            model=model.__name__,
            fields=list(fields),
            key_fingerprints=keyring.fingerprints,
        )
        return cls(keyring, fields)

    def encrypt_on_write(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Return a copy of *data* with sensitive values sealed."""
        sealed = dict(data)
        for name in self.fields:
            if sealed.get(name) is not None:
                sealed[name] = encrypt_value(self.keyring, sealed[name])
        return sealed

    def decrypt_on_read(self, record: RecordType) -> RecordType:
        """Return a copy of *record* with sensitive values opened.

        Raises DecryptionError if any stored value cannot be opened.
        """
        opened = {
            name: decrypt_value(self.keyring, getattr(record, name))
            for name in self.fields
            if getattr(record, name, None) is not None
        }
        return record.model_copy(update=opened) if opened else record
