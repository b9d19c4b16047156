"""User administration (admin only; single-user reads also accept an API key)."""

from typing import Annotated

from fastapi import APIRouter, Depends

from authhub.api.v1.auth import get_store, http_error, require_admin, require_admin_or_api_key
from authhub.core.errors import AuthHubError
from authhub.schemas.auth import CurrentUser, SanitizedUser
from authhub.schemas.user import UsersListResponse, UserUpdate
from authhub.services import users as user_admin
from authhub.services.storage import Storage

router = APIRouter()


@router.get("", response_model=UsersListResponse)
def list_users(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    store: Annotated[Storage, Depends(get_store)],
) -> UsersListResponse:
    return UsersListResponse(users=[SanitizedUser.model_validate(u) for u in store.list_users()])


@router.get(
    "/{user_id}",
    response_model=SanitizedUser,
    dependencies=[Depends(require_admin_or_api_key)],
)
def get_user(
    user_id: str,
    store: Annotated[Storage, Depends(get_store)],
) -> SanitizedUser:
    try:
        return SanitizedUser.model_validate(user_admin.get_user(store, user_id))
    except AuthHubError as e:
        raise http_error(e)


@router.patch("/{user_id}", response_model=SanitizedUser)
def update_user(
    user_id: str,
    body: UserUpdate,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    store: Annotated[Storage, Depends(get_store)],
) -> SanitizedUser:
    """Change email and/or role. Demoting the last admin is rejected."""
    try:
        user = user_admin.update_user(store, user_id, email=body.email, role=body.role)
    except AuthHubError as e:
        raise http_error(e)
    store.commit()
    return SanitizedUser.model_validate(user)


@router.delete("/{user_id}")
def delete_user(
    user_id: str,
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    store: Annotated[Storage, Depends(get_store)],
) -> dict[str, object]:
    """Delete a user and their services. Deleting the last admin is rejected."""
    try:
        user_admin.delete_user(store, user_id)
    except AuthHubError as e:
        raise http_error(e)
    store.commit()
    return {"success": True}
