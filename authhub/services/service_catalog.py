"""Client service registration, metadata updates and signing-secret rotation.

A service's signing secret is generated here, shown to the caller once, and stored
only as a SecretVault blob plus a short preview. Only rotate_service_secret()
writes a new secret; update_service() always writes back the stored one.
"""

import hmac
import logging
import secrets

from authhub.core.crypto import SecretVault
from authhub.core.errors import (
    ConflictError,
    InvalidSecretError,
    InvalidServiceError,
    NotFoundError,
)
from authhub.models import Service
from authhub.schemas.service import ServiceCreate, ServiceUpdate
from authhub.services.storage import Storage

logger = logging.getLogger(__name__)

SECRET_PREFIX = "sk_"
DEFAULT_COLOR = "hsl(var(--primary))"


def generate_service_secret() -> str:
    """A new plaintext secret: 'sk_' followed by 48 hex characters."""
    return f"{SECRET_PREFIX}{secrets.token_hex(24)}"


def secret_preview(plaintext: str) -> str:
    """Truncated, non-secret form for display, e.g. 'sk_1a2b3c4d5...9f8e7d'."""
    return f"{plaintext[:12]}...{plaintext[-6:]}"


def new_secret_fields(vault: SecretVault) -> tuple[str, dict[str, str]]:
    """Generate a secret; returns (plaintext, column values to store)."""
    plaintext = generate_service_secret()
    return plaintext, {
        "secret": vault.encrypt(plaintext),
        "secret_preview": secret_preview(plaintext),
    }


def create_service(
    store: Storage,
    vault: SecretVault,
    owner_id: str | None,
    data: ServiceCreate,
    service_id: str | None = None,
    is_system: bool = False,
) -> tuple[Service, str]:
    """Register a service. Returns the service and its plaintext secret (shown once)."""
    plaintext, secret_fields = new_secret_fields(vault)
    url = str(data.url)
    service = Service(
        user_id=owner_id,
        name=data.name,
        description=data.description,
        url=url,
        redirect_url=str(data.redirect_url) if data.redirect_url else url,
        icon=data.icon,
        color=data.color,
        login_config_id=data.login_config_id,
        is_system=is_system,
        **secret_fields,
    )
    if service_id:
        service.id = service_id
    store.add_service(service)
    logger.info("Registered service %s (%s) for owner %s", service.id, service.name, owner_id)
    return service, plaintext


def get_owned_service(store: Storage, service_id: str, owner_id: str) -> Service:
    service = store.get_service_for_owner(service_id, owner_id)
    if service is None:
        raise NotFoundError("Service not found")
    return service


def update_service(
    store: Storage, service_id: str, owner_id: str, changes: ServiceUpdate
) -> Service:
    """
    Apply metadata changes. The stored secret and preview are always re-applied,
    whatever the caller sent.
    """
    service = get_owned_service(store, service_id, owner_id)
    values = {
        key: str(value) if key in ("url", "redirect_url") and value is not None else value
        for key, value in changes.model_dump(exclude_unset=True).items()
    }
    if "color" in values and not (values["color"] or "").strip():
        values["color"] = DEFAULT_COLOR
    values["secret"] = service.secret
    values["secret_preview"] = service.secret_preview
    return store.save_service(service, **values)


def rotate_service_secret(
    store: Storage, vault: SecretVault, service_id: str, owner_id: str
) -> tuple[Service, str]:
    """Replace the signing secret. Tokens signed with the old secret stop verifying."""
    service = get_owned_service(store, service_id, owner_id)
    plaintext, secret_fields = new_secret_fields(vault)
    store.save_service(service, **secret_fields)
    logger.info("Rotated secret for service %s", service.id)
    return service, plaintext


def delete_service(store: Storage, service_id: str, owner_id: str) -> None:
    service = get_owned_service(store, service_id, owner_id)
    if service.is_system:
        raise ConflictError("System services cannot be deleted")
    store.delete_service(service)


def decrypt_signing_key(vault: SecretVault, service: Service) -> str:
    """Plaintext signing key of a service; InvalidServiceError if none is configured."""
    if not service.secret:
        raise InvalidServiceError("Service has no secret configured")
    return vault.decrypt(service.secret)


def require_service(store: Storage, service_id: str) -> Service:
    service = store.get_service_by_id(service_id)
    if service is None:
        raise InvalidServiceError("Invalid service")
    return service


def secret_matches(vault: SecretVault, service: Service, secret: str) -> bool:
    """Constant-time comparison with the stored secret; InvalidServiceError if none is set."""
    expected = decrypt_signing_key(vault, service)
    return hmac.compare_digest(expected.encode("utf-8"), secret.encode("utf-8"))


def verify_service_secret(
    store: Storage, vault: SecretVault, service_id: str, secret: str
) -> Service:
    """
    Check a caller-supplied plaintext secret against the stored one.

    Missing service or missing secret raise InvalidServiceError; a wrong secret
    raises InvalidSecretError.
    """
    service = require_service(store, service_id)
    if not secret_matches(vault, service, secret):
        raise InvalidSecretError()
    return service
