"""API keys for external products.

A key is 'ak_' plus 64 hex characters. It is returned once on creation; the
database keeps its SHA-256 and a short preview.
"""

import hashlib
import logging
import secrets

from authhub.core.errors import InvalidApiKeyError, NotFoundError
from authhub.models import ApiKey
from authhub.services.storage import Storage

logger = logging.getLogger(__name__)

API_KEY_PREFIX = "ak_"


def generate_api_key() -> str:
    return f"{API_KEY_PREFIX}{secrets.token_hex(32)}"


def hash_api_key(plaintext: str) -> str:
    """Keys are long random values, so an unsalted digest is enough for lookup."""
    return hashlib.sha256(plaintext.encode("utf-8")).hexdigest()


def api_key_preview(plaintext: str) -> str:
    return f"{plaintext[:10]}...{plaintext[-4:]}"


def create_api_key(store: Storage, user_id: str, name: str) -> tuple[ApiKey, str]:
    """Create a key for ``user_id``. Returns the row and the plaintext (shown once)."""
    plaintext = generate_api_key()
    api_key = store.add(
        ApiKey(
            user_id=user_id,
            name=name,
            key_hash=hash_api_key(plaintext),
            key_preview=api_key_preview(plaintext),
        )
    )
    logger.info("Created API key %s for user %s", api_key.id, user_id)
    return api_key, plaintext


def delete_api_key(store: Storage, key_id: str, user_id: str) -> None:
    api_key = store.get_api_key_for_owner(key_id, user_id)
    if api_key is None:
        raise NotFoundError("API key not found")
    store.delete_api_key(api_key)


def authenticate_api_key(store: Storage, plaintext: str | None) -> ApiKey:
    """Resolve a presented key. Raises InvalidApiKeyError if it is absent or unknown."""
    if not plaintext:
        raise InvalidApiKeyError("API key is required")
    api_key = store.get_api_key_by_hash(hash_api_key(plaintext))
    if api_key is None:
        logger.info("Rejected unknown API key")
        raise InvalidApiKeyError("Invalid API key")
    return api_key
