"""RBAC resolution (what a user may do in a service) and RBAC administration.

Storage does not guarantee that a role, its permissions and the model assigned
to a service all belong together, so both resolution and assignment check it.
"""

import logging

from authhub.core.errors import NotFoundError, RbacConsistencyError
from authhub.models import Permission, RbacModel, Role
from authhub.schemas.rbac import (
    PermissionSnapshot,
    PermissionSummary,
    RbacModelSummary,
    RolePermissionMapping,
    RoleSummary,
)
from authhub.services.storage import Storage

logger = logging.getLogger(__name__)


class RbacResolver:
    """Walks Service -> RbacModel -> Role (for user) -> Permissions."""

    def __init__(self, store: Storage) -> None:
        self.store = store

    def resolve(self, user_id: str, service_id: str) -> PermissionSnapshot:
        """
        Compute the user's role and permissions in a service.

        - no model assigned to the service: everything empty
        - model but no (valid) role for the user: only rbac_model is set
        """
        assignment = self.store.get_service_rbac_model(service_id)
        if assignment is None:
            return PermissionSnapshot()
        model = self.store.get_rbac_model(assignment.rbac_model_id)
        if model is None:
            return PermissionSnapshot()
        model_summary = RbacModelSummary.model_validate(model)

        user_role = self.store.get_user_service_role(user_id, service_id)
        if user_role is None:
            return PermissionSnapshot(rbac_model=model_summary)

        role = self.store.get_role(user_role.role_id)
        if role is None or role.rbac_model_id != model.id:
            logger.warning(
                "Ignoring role %s for user %s on service %s: not part of model %s",
                user_role.role_id,
                user_id,
                service_id,
                model.id,
            )
            return PermissionSnapshot(rbac_model=model_summary)

        permissions = self.store.permissions_for_role(role.id, model.id)
        return PermissionSnapshot(
            role=RoleSummary.model_validate(role),
            permissions=_unique_permissions(permissions),
            rbac_model=model_summary,
        )

    def mappings_for_model(self, model_id: str) -> list[RolePermissionMapping]:
        """One entry per role in the model, including roles with no permissions."""
        if self.store.get_rbac_model(model_id) is None:
            raise NotFoundError("RBAC model not found")
        by_role: dict[str, list[Permission]] = {
            role.id: [] for role in self.store.list_roles(model_id)
        }
        for role_id, permission in self.store.role_permission_pairs(model_id):
            by_role.setdefault(role_id, []).append(permission)
        return [
            RolePermissionMapping(role_id=role_id, permissions=_unique_permissions(perms))
            for role_id, perms in by_role.items()
        ]


def _unique_permissions(permissions: list[Permission]) -> list[PermissionSummary]:
    seen: set[str] = set()
    out = []
    for p in permissions:
        if p.id in seen:
            continue
        seen.add(p.id)
        out.append(PermissionSummary.model_validate(p))
    return out


# -- administration -------------------------------------------------------


def create_rbac_model(store: Storage, name: str, description: str, created_by: str) -> RbacModel:
    return store.add(RbacModel(name=name, description=description, created_by=created_by))


def _require_model(store: Storage, model_id: str) -> RbacModel:
    model = store.get_rbac_model(model_id)
    if model is None:
        raise NotFoundError("RBAC model not found")
    return model


def add_role(store: Storage, model_id: str, name: str, description: str) -> Role:
    _require_model(store, model_id)
    return store.add(Role(rbac_model_id=model_id, name=name, description=description))


def add_permission(store: Storage, model_id: str, name: str, description: str) -> Permission:
    _require_model(store, model_id)
    return store.add(Permission(rbac_model_id=model_id, name=name, description=description))


def _role_and_permission(
    store: Storage, role_id: str, permission_id: str
) -> tuple[Role, Permission]:
    role = store.get_role(role_id)
    if role is None:
        raise NotFoundError("Role not found")
    permission = store.get_permission(permission_id)
    if permission is None:
        raise NotFoundError("Permission not found")
    return role, permission


def grant_permission(store: Storage, role_id: str, permission_id: str) -> None:
    """Attach a permission to a role of the same model."""
    role, permission = _role_and_permission(store, role_id, permission_id)
    if role.rbac_model_id != permission.rbac_model_id:
        raise RbacConsistencyError("Role and permission belong to different RBAC models")
    store.link_permission(role.id, permission.id)


def revoke_permission(store: Storage, role_id: str, permission_id: str) -> None:
    _role_and_permission(store, role_id, permission_id)
    store.unlink_permission(role_id, permission_id)


def assign_rbac_model(store: Storage, service_id: str, model_id: str) -> None:
    """
    Attach a model to a service, replacing the previous one.

    User roles on the service that came from another model are removed.
    """
    if store.get_service_by_id(service_id) is None:
        raise NotFoundError("Service not found")
    _require_model(store, model_id)
    store.set_service_rbac_model(service_id, model_id)
    removed = store.delete_role_assignments_outside_model(service_id, model_id)
    if removed:
        logger.info(
            "Removed %s stale role assignments on service %s after model change",
            removed,
            service_id,
        )


def assign_user_role(store: Storage, user_id: str, service_id: str, role_id: str) -> None:
    """
    Give a user a role on a service (one role per user and service).

    The role must belong to the model currently assigned to the service.
    """
    if store.get_user(user_id) is None:
        raise NotFoundError("User not found")
    if store.get_service_by_id(service_id) is None:
        raise NotFoundError("Service not found")
    assignment = store.get_service_rbac_model(service_id)
    if assignment is None:
        raise RbacConsistencyError("Service has no RBAC model assigned")
    role = store.get_role(role_id)
    if role is None:
        raise NotFoundError("Role not found")
    if role.rbac_model_id != assignment.rbac_model_id:
        raise RbacConsistencyError(
            "Role does not belong to the RBAC model assigned to this service"
        )
    store.set_user_service_role(user_id, service_id, role_id)


def unassign_user_role(store: Storage, user_id: str, service_id: str) -> None:
    if not store.delete_user_service_role(user_id, service_id):
        raise NotFoundError("User has no role on this service")
