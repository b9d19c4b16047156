"""RBAC administration endpoints (admin only) and the role/permission matrix."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from authhub.api.v1.auth import get_store, http_error, require_admin
from authhub.core.errors import AuthHubError
from authhub.schemas.auth import CurrentUser
from authhub.schemas.rbac import (
    AssignRbacModelRequest,
    AssignUserRoleRequest,
    GrantPermissionRequest,
    PermissionCreate,
    PermissionSummary,
    RbacModelCreate,
    RbacModelSummary,
    RoleCreate,
    RolePermissionMapping,
    RoleSummary,
)
from authhub.services import rbac
from authhub.services.storage import Storage

router = APIRouter()

Admin = Annotated[CurrentUser, Depends(require_admin)]
Store = Annotated[Storage, Depends(get_store)]


@router.get("/models", response_model=list[RbacModelSummary])
def list_models(_admin: Admin, store: Store) -> list[RbacModelSummary]:
    return [RbacModelSummary.model_validate(m) for m in store.list_rbac_models()]


@router.post("/models", response_model=RbacModelSummary, status_code=status.HTTP_201_CREATED)
def create_model(body: RbacModelCreate, admin: Admin, store: Store) -> RbacModelSummary:
    model = rbac.create_rbac_model(store, body.name, body.description, admin.id)
    store.commit()
    return RbacModelSummary.model_validate(model)


@router.post(
    "/models/{model_id}/roles", response_model=RoleSummary, status_code=status.HTTP_201_CREATED
)
def create_role(model_id: str, body: RoleCreate, _admin: Admin, store: Store) -> RoleSummary:
    try:
        role = rbac.add_role(store, model_id, body.name, body.description)
    except AuthHubError as e:
        raise http_error(e)
    store.commit()
    return RoleSummary.model_validate(role)


@router.post(
    "/models/{model_id}/permissions",
    response_model=PermissionSummary,
    status_code=status.HTTP_201_CREATED,
)
def create_permission(
    model_id: str, body: PermissionCreate, _admin: Admin, store: Store
) -> PermissionSummary:
    try:
        permission = rbac.add_permission(store, model_id, body.name, body.description)
    except AuthHubError as e:
        raise http_error(e)
    store.commit()
    return PermissionSummary.model_validate(permission)


@router.get("/models/{model_id}/matrix", response_model=list[RolePermissionMapping])
def model_matrix(model_id: str, _admin: Admin, store: Store) -> list[RolePermissionMapping]:
    """Every role of the model with its permissions (empty list when none)."""
    try:
        return rbac.RbacResolver(store).mappings_for_model(model_id)
    except AuthHubError as e:
        raise http_error(e)


@router.post("/roles/{role_id}/permissions", status_code=status.HTTP_204_NO_CONTENT)
def grant_permission(
    role_id: str, body: GrantPermissionRequest, _admin: Admin, store: Store
) -> None:
    try:
        rbac.grant_permission(store, role_id, body.permission_id)
    except AuthHubError as e:
        raise http_error(e)
    store.commit()


@router.delete(
    "/roles/{role_id}/permissions/{permission_id}", status_code=status.HTTP_204_NO_CONTENT
)
def revoke_permission(role_id: str, permission_id: str, _admin: Admin, store: Store) -> None:
    try:
        rbac.revoke_permission(store, role_id, permission_id)
    except AuthHubError as e:
        raise http_error(e)
    store.commit()


@router.put("/services/{service_id}/model", status_code=status.HTTP_204_NO_CONTENT)
def assign_model(
    service_id: str, body: AssignRbacModelRequest, _admin: Admin, store: Store
) -> None:
    """Attach a model to a service, replacing the current one."""
    try:
        rbac.assign_rbac_model(store, service_id, body.rbac_model_id)
    except AuthHubError as e:
        raise http_error(e)
    store.commit()


@router.put("/services/{service_id}/roles", status_code=status.HTTP_204_NO_CONTENT)
def assign_user_role(
    service_id: str, body: AssignUserRoleRequest, _admin: Admin, store: Store
) -> None:
    try:
        rbac.assign_user_role(store, body.user_id, service_id, body.role_id)
    except AuthHubError as e:
        raise http_error(e)
    store.commit()


@router.delete("/services/{service_id}/roles/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def unassign_user_role(service_id: str, user_id: str, _admin: Admin, store: Store) -> None:
    try:
        rbac.unassign_user_role(store, user_id, service_id)
    except AuthHubError as e:
        raise http_error(e)
    store.commit()
