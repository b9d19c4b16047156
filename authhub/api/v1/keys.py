"""API key management for the signed-in user."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from authhub.api.v1.auth import get_current_user, get_store, http_error
from authhub.core.errors import AuthHubError
from authhub.schemas.api_key import ApiKeyCreate, ApiKeyCreated, ApiKeyRead
from authhub.schemas.auth import CurrentUser
from authhub.services import api_keys
from authhub.services.storage import Storage

router = APIRouter()


@router.post("", response_model=ApiKeyCreated, status_code=status.HTTP_201_CREATED)
def create_api_key(
    body: ApiKeyCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Storage, Depends(get_store)],
) -> ApiKeyCreated:
    """Create a key. The response is the only place the full key appears."""
    api_key, plaintext = api_keys.create_api_key(store, current_user.id, body.name)
    store.commit()
    return ApiKeyCreated(**ApiKeyRead.model_validate(api_key).model_dump(), key=plaintext)


@router.get("", response_model=list[ApiKeyRead])
def list_api_keys(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Storage, Depends(get_store)],
) -> list[ApiKeyRead]:
    return [ApiKeyRead.model_validate(k) for k in store.list_api_keys_for_user(current_user.id)]


@router.delete("/{key_id}")
def delete_api_key(
    key_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    store: Annotated[Storage, Depends(get_store)],
) -> dict[str, object]:
    try:
        api_keys.delete_api_key(store, key_id, current_user.id)
    except AuthHubError as e:
        raise http_error(e)
    store.commit()
    return {"success": True}
