"""Service catalog endpoints for owners and admins, plus secret verification."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from authhub.api.v1.auth import get_current_user, get_store, http_error, require_admin
from authhub.core.crypto import SecretVault, get_vault
from authhub.core.errors import AuthHubError
from authhub.schemas.auth import CurrentUser
from authhub.schemas.service import (
    SecretRotated,
    ServiceCreate,
    ServiceCreated,
    ServiceRead,
    ServiceUpdate,
    VerifySecretRequest,
)
from authhub.services import service_catalog
from authhub.services.storage import Storage

router = APIRouter()


@router.post("", response_model=ServiceCreated, status_code=status.HTTP_201_CREATED)
def create_service(
    body: ServiceCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Storage, Depends(get_store)],
    vault: Annotated[SecretVault, Depends(get_vault)],
) -> ServiceCreated:
    """Register a service. The response is the only place the full secret appears."""
    service, plaintext = service_catalog.create_service(store, vault, current_user.id, body)
    store.commit()
    return ServiceCreated(
        **ServiceRead.model_validate(service).model_dump(), plaintext_secret=plaintext
    )


@router.get("", response_model=list[ServiceRead])
def list_services(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Storage, Depends(get_store)],
) -> list[ServiceRead]:
    return [ServiceRead.model_validate(s) for s in store.list_services_for_user(current_user.id)]


@router.get("/admin", response_model=list[ServiceRead])
def list_all_services(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    store: Annotated[Storage, Depends(get_store)],
) -> list[ServiceRead]:
    """Every service across all owners, including global ones (admin only)."""
    return [ServiceRead.model_validate(s) for s in store.list_all_services()]


@router.post("/verify-secret", response_model=ServiceRead)
def verify_secret(
    body: VerifySecretRequest,
    store: Annotated[Storage, Depends(get_store)],
    vault: Annotated[SecretVault, Depends(get_vault)],
) -> ServiceRead:
    """Unauthenticated: the service secret itself proves the caller is the service."""
    try:
        service = service_catalog.verify_service_secret(store, vault, body.service_id, body.secret)
    except AuthHubError as e:
        raise http_error(e)
    return ServiceRead.model_validate(service)


@router.get("/{service_id}", response_model=ServiceRead)
def get_service(
    service_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Storage, Depends(get_store)],
) -> ServiceRead:
    try:
        service = service_catalog.get_owned_service(store, service_id, current_user.id)
    except AuthHubError as e:
        raise http_error(e)
    return ServiceRead.model_validate(service)


@router.patch("/{service_id}", response_model=ServiceRead)
def update_service(
    service_id: str,
    body: ServiceUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Storage, Depends(get_store)],
) -> ServiceRead:
    """Update metadata. Secrets are never changed here; use rotate-secret."""
    try:
        service = service_catalog.update_service(store, service_id, current_user.id, body)
    except AuthHubError as e:
        raise http_error(e)
    store.commit()
    return ServiceRead.model_validate(service)


@router.delete("/{service_id}")
def delete_service(
    service_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Storage, Depends(get_store)],
) -> dict[str, object]:
    try:
        service_catalog.delete_service(store, service_id, current_user.id)
    except AuthHubError as e:
        raise http_error(e)
    store.commit()
    return {"success": True, "message": "Service deleted successfully"}


@router.post("/{service_id}/rotate-secret", response_model=SecretRotated)
def rotate_secret(
    service_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Storage, Depends(get_store)],
    vault: Annotated[SecretVault, Depends(get_vault)],
) -> SecretRotated:
    """Generate a new secret; it is shown once in the response."""
    try:
        service, plaintext = service_catalog.rotate_service_secret(
            store, vault, service_id, current_user.id
        )
    except AuthHubError as e:
        raise http_error(e)
    store.commit()
    return SecretRotated(plaintext_secret=plaintext, secret_preview=service.secret_preview)
