"""AES-256-GCM encryption of per-service signing secrets at rest.

Blob format: ``base64(iv):base64(authTag):base64(ciphertext)``. The key is the
SHA-256 digest of a configured master value, so the master value may be any length.
"""

import base64
import binascii
import hashlib
import logging
import os
from functools import lru_cache

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from authhub.core.config import get_settings
from authhub.core.errors import SecretFormatError, TamperedSecretError

logger = logging.getLogger(__name__)

IV_BYTES = 12
TAG_BYTES = 16


def derive_key(master_value: str) -> bytes:
    """Derive the 256-bit vault key from the configured master value."""
    return hashlib.sha256(master_value.encode("utf-8")).digest()


def _b64decode(part: str) -> bytes:
    try:
        return base64.b64decode(part, validate=True)
    except (binascii.Error, ValueError):
        raise SecretFormatError("Invalid encrypted secret encoding") from None


class SecretVault:
    """Encrypts and decrypts service secrets with a key derived from a master value."""

    def __init__(self, master_value: str) -> None:
        if not master_value:
            raise ValueError("SecretVault requires a non-empty master value")
        self._aesgcm = AESGCM(derive_key(master_value))

    def encrypt(self, plaintext: str) -> str:
        """Encrypt with a fresh random IV; returns ``iv:authTag:ciphertext``."""
        iv = os.urandom(IV_BYTES)
        sealed = self._aesgcm.encrypt(iv, plaintext.encode("utf-8"), None)
        ciphertext, tag = sealed[:-TAG_BYTES], sealed[-TAG_BYTES:]
        return ":".join(
            base64.b64encode(part).decode("ascii") for part in (iv, tag, ciphertext)
        )

    def decrypt(self, blob: str) -> str:
        """
        Decrypt a blob produced by encrypt().

        Raises SecretFormatError when the blob is not three decodable components and
        TamperedSecretError when the integrity check fails.
        """
        parts = blob.split(":")
        if len(parts) != 3:
            raise SecretFormatError("Invalid encrypted secret format")
        iv, tag, ciphertext = (_b64decode(p) for p in parts)
        if not iv or len(tag) != TAG_BYTES:
            raise SecretFormatError("Invalid encrypted secret format")
        try:
            plaintext = self._aesgcm.decrypt(iv, ciphertext + tag, None)
        except InvalidTag:
            logger.error("security: encrypted service secret failed integrity check")
            raise TamperedSecretError("Encrypted secret failed integrity check") from None
        return plaintext.decode("utf-8")


@lru_cache
def get_vault() -> SecretVault:
    """Return the process-wide vault built from settings."""
    return SecretVault(get_settings().encryption_master_key)
