"""
AES-256-GCM helpers for field-level encryption.

Keys and ciphertexts are self-describing strings so that any process
holding the same key material can read what another one wrote:

    key:        k1.aesgcm256.<base64 key>
    ciphertext: v1.aesgcm256.<fingerprint>.<base64 nonce>.<base64 ciphertext+tag>

The fingerprint identifies which key sealed a value, which lets a keyring
hold retired keys for decryption while new writes use the current key.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from app.core.exceptions import DecryptionError, EncryptionConfigError

KEY_PREFIX = "k1"
CIPHERTEXT_PREFIX = "v1"
ALGORITHM = "aesgcm256"
KEY_SIZE = 32  # 256-bit
NONCE_SIZE = 12
FINGERPRINT_LENGTH = 8


def _b64decode(value: str) -> bytes:
    return base64.b64decode(value.encode("ascii"), validate=True)


def _b64encode(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


def fingerprint(raw_key: bytes) -> str:
    """Short, stable identifier of a raw key."""
    return hashlib.sha512(raw_key).hexdigest()[:FINGERPRINT_LENGTH]


@dataclass(frozen=True)
class EncryptionKey:
    """A parsed AES-256 key and its fingerprint."""
    raw: bytes = field(repr=False)
    fingerprint: str


def generate_key() -> str:
    """Return a new random key in serialized form."""
    return f"{KEY_PREFIX}.{ALGORITHM}.{_b64encode(os.urandom(KEY_SIZE))}"


def parse_key(text: str) -> EncryptionKey:
    """Parse a serialized key, raising EncryptionConfigError if malformed."""
    parts = text.strip().split(".")
    if len(parts) != 3 or parts[0] != KEY_PREFIX or parts[1] != ALGORITHM:
        raise EncryptionConfigError(
            "Unrecognized key format",
            details={"expected": f"{KEY_PREFIX}.{ALGORITHM}.<base64>"},
        )
    try:
        raw = _b64decode(parts[2])
    except (binascii.Error, ValueError) as exc:
        raise EncryptionConfigError("Key material is not valid base64") from exc
    if len(raw) != KEY_SIZE:
        raise EncryptionConfigError(
            "Key material has the wrong length",
            details={"expected_bytes": KEY_SIZE, "actual_bytes": len(raw)},
        )
    return EncryptionKey(raw=raw, fingerprint=fingerprint(raw))


class Keyring:
    """Current encryption key plus any keys still accepted for decryption."""

    def __init__(self, encryption_key: EncryptionKey, decryption_keys: Iterable[EncryptionKey] = ()):
        self.encryption_key = encryption_key
        self._by_fingerprint: Dict[str, EncryptionKey] = {
            k.fingerprint: k for k in decryption_keys
        }
        self._by_fingerprint[encryption_key.fingerprint] = encryption_key

    @classmethod
    def from_strings(cls, encryption_key: str, decryption_keys: Iterable[str] = ()) -> "Keyring":
        if not encryption_key:
            raise EncryptionConfigError("FIELD_ENCRYPTION_KEY is not set")
        return cls(parse_key(encryption_key), [parse_key(k) for k in decryption_keys])

    @property
    def fingerprints(self) -> list[str]:
        return sorted(self._by_fingerprint)

    def lookup(self, key_fingerprint: str) -> Optional[EncryptionKey]:
        return self._by_fingerprint.get(key_fingerprint)


def is_ciphertext(value: object) -> bool:
    """True if *value* has the shape of a sealed string."""
    if not isinstance(value, str):
        return False
    parts = value.split(".")
    return len(parts) == 5 and parts[0] == CIPHERTEXT_PREFIX and parts[1] == ALGORITHM


def encrypt_value(keyring: Keyring, plaintext: str) -> str:
    """Seal *plaintext* with the keyring's current key."""
    key = keyring.encryption_key
    nonce = os.urandom(NONCE_SIZE)
    sealed = AESGCM(key.raw).encrypt(nonce, plaintext.encode("utf-8"), None)
    return ".".join(
        [CIPHERTEXT_PREFIX, ALGORITHM, key.fingerprint, _b64encode(nonce), _b64encode(sealed)]
    )


def key_fingerprint_of(ciphertext: str) -> str:
    """Fingerprint of the key that sealed *ciphertext*."""
    if not is_ciphertext(ciphertext):
        raise DecryptionError("Value is not a recognized ciphertext")
    return ciphertext.split(".")[2]


def decrypt_value(keyring: Keyring, ciphertext: str) -> str:
    """Open *ciphertext*, raising DecryptionError instead of returning garbage."""
    if not is_ciphertext(ciphertext):
        raise DecryptionError("Value is not a recognized ciphertext")

    _, _, key_fp, nonce_b64, sealed_b64 = ciphertext.split(".")
    key = keyring.lookup(key_fp)
    if key is None:
        raise DecryptionError(
            "No configured key matches the ciphertext",
            details={"fingerprint": key_fp},
        )

    try:
        nonce = _b64decode(nonce_b64)
        sealed = _b64decode(sealed_b64)
    except (binascii.Error, ValueError) as exc:
        raise DecryptionError("Ciphertext is not valid base64") from exc
    if len(nonce) != NONCE_SIZE:
        raise DecryptionError("Ciphertext nonce has the wrong length")

    try:
        plaintext = AESGCM(key.raw).decrypt(nonce, sealed, None)
    except InvalidTag as exc:
        raise DecryptionError(
            "Ciphertext failed authentication",
            details={"fingerprint": key_fp},
        ) from exc

    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecryptionError("Decrypted value is not valid UTF-8") from exc
