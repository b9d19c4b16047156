"""Relational store used by the authentication core.

Storage wraps one SQLAlchemy session. Methods flush but never commit; the caller
that owns the unit of work commits.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from authhub.models import (
    AdminBootstrap,
    ApiKey,
    Permission,
    RbacModel,
    Role,
    RolePermission,
    Service,
    ServiceRbacModel,
    User,
    UserServiceRole,
)
from authhub.models.base import new_id

logger = logging.getLogger(__name__)

# Fixed key of the single admin_bootstrap row.
ADMIN_BOOTSTRAP_ID = 1


class Storage:
    """Typed reads and writes over a SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self.session = session

    # -- unit of work -----------------------------------------------------

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @contextmanager
    def savepoint(self) -> Iterator[None]:
        """Run a block in a SAVEPOINT; an exception rolls back only that block."""
        with self.session.begin_nested():
            yield

    # -- users ------------------------------------------------------------

    def get_user(self, user_id: str) -> User | None:
        return self.session.get(User, user_id)

    def get_user_by_email(self, email: str) -> User | None:
        return self.session.query(User).filter(User.email == email).first()

    def list_users(self) -> list[User]:
        return self.session.query(User).order_by(User.created_at, User.id).all()

    def count_users(self) -> int:
        return self.session.query(func.count(User.id)).scalar() or 0

    def count_admins(self) -> int:
        return (
            self.session.query(func.count(User.id)).filter(User.role == "admin").scalar()
            or 0
        )

    def lock_admins(self) -> list[User]:
        """Select admin rows FOR UPDATE so demotions and deletes serialize."""
        return (
            self.session.query(User)
            .filter(User.role == "admin")
            .order_by(User.id)
            .with_for_update()
            .all()
        )

    def create_user(
        self,
        email: str | None = None,
        password_hash: str | None = None,
        user_id: str | None = None,
    ) -> User:
        """
        Insert a user. The first user ever created becomes admin.

        The role is decided by inserting the admin_bootstrap row in a SAVEPOINT;
        only one transaction can insert it, so concurrent first logins cannot both
        produce an admin.
        """
        user = User(
            id=user_id or new_id(),
            email=email,
            password_hash=password_hash,
            role="user",
        )
        self.session.add(user)
        self.session.flush()
        if self._claim_admin_bootstrap(user.id):
            user.role = "admin"
            self.session.flush()
            logger.info("First user %s promoted to admin", user.id)
        return user

    def _claim_admin_bootstrap(self, user_id: str) -> bool:
        if self.session.get(AdminBootstrap, ADMIN_BOOTSTRAP_ID) is not None:
            return False
        try:
            with self.session.begin_nested():
                self.session.add(AdminBootstrap(id=ADMIN_BOOTSTRAP_ID, user_id=user_id))
        except IntegrityError:
            logger.debug("Admin bootstrap already claimed; %s stays a user", user_id)
            return False
        return True

    def update_user(self, user: User, **changes: Any) -> User:
        for key, value in changes.items():
            setattr(user, key, value)
        self.session.flush()
        return user

    def delete_user(self, user: User) -> None:
        self.session.delete(user)
        self.session.flush()

    # -- services ---------------------------------------------------------

    def get_service_by_id(self, service_id: str) -> Service | None:
        return self.session.get(Service, service_id)

    def get_service_for_owner(self, service_id: str, user_id: str) -> Service | None:
        return (
            self.session.query(Service)
            .filter(Service.id == service_id, Service.user_id == user_id)
            .first()
        )

    def list_services_for_user(self, user_id: str) -> list[Service]:
        return (
            self.session.query(Service)
            .filter(Service.user_id == user_id)
            .order_by(Service.created_at, Service.name)
            .all()
        )

    def count_services_for_user(self, user_id: str) -> int:
        return (
            self.session.query(func.count(Service.id))
            .filter(Service.user_id == user_id)
            .scalar()
            or 0
        )

    def list_all_services(self) -> list[Service]:
        return self.session.query(Service).order_by(Service.created_at, Service.name).all()

    def find_service_by_name(self, user_id: str, name: str) -> Service | None:
        return (
            self.session.query(Service)
            .filter(Service.user_id == user_id, Service.name == name)
            .first()
        )

    def add_service(self, service: Service) -> Service:
        self.session.add(service)
        self.session.flush()
        return service

    def save_service(self, service: Service, **changes: Any) -> Service:
        for key, value in changes.items():
            setattr(service, key, value)
        self.session.flush()
        return service

    def delete_service(self, service: Service) -> None:
        self.session.delete(service)
        self.session.flush()

    # -- api keys ---------------------------------------------------------

    def get_api_key_by_hash(self, key_hash: str) -> ApiKey | None:
        return self.session.query(ApiKey).filter(ApiKey.key_hash == key_hash).first()

    def get_api_key_for_owner(self, key_id: str, user_id: str) -> ApiKey | None:
        return (
            self.session.query(ApiKey)
            .filter(ApiKey.id == key_id, ApiKey.user_id == user_id)
            .first()
        )

    def list_api_keys_for_user(self, user_id: str) -> list[ApiKey]:
        return (
            self.session.query(ApiKey)
            .filter(ApiKey.user_id == user_id)
            .order_by(ApiKey.created_at, ApiKey.name)
            .all()
        )

    def delete_api_key(self, api_key: ApiKey) -> None:
        self.session.delete(api_key)
        self.session.flush()

    # -- rbac models, roles, permissions ---------------------------------

    def get_rbac_model(self, model_id: str) -> RbacModel | None:
        return self.session.get(RbacModel, model_id)

    def find_rbac_model_by_name(self, name: str) -> RbacModel | None:
        return self.session.query(RbacModel).filter(RbacModel.name == name).first()

    def list_rbac_models(self) -> list[RbacModel]:
        return self.session.query(RbacModel).order_by(RbacModel.created_at, RbacModel.name).all()

    def add(self, obj: Any) -> Any:
        self.session.add(obj)
        self.session.flush()
        return obj

    def get_role(self, role_id: str) -> Role | None:
        return self.session.get(Role, role_id)

    def get_permission(self, permission_id: str) -> Permission | None:
        return self.session.get(Permission, permission_id)

    def list_roles(self, model_id: str) -> list[Role]:
        return (
            self.session.query(Role)
            .filter(Role.rbac_model_id == model_id)
            .order_by(Role.created_at, Role.name)
            .all()
        )

    def list_permissions(self, model_id: str) -> list[Permission]:
        return (
            self.session.query(Permission)
            .filter(Permission.rbac_model_id == model_id)
            .order_by(Permission.created_at, Permission.name)
            .all()
        )

    def link_permission(self, role_id: str, permission_id: str) -> None:
        """Attach a permission to a role; attaching twice is a no-op."""
        stmt = self._insert(RolePermission).values(
            role_id=role_id, permission_id=permission_id
        )
        self.session.execute(stmt.on_conflict_do_nothing())
        self.session.flush()

    def unlink_permission(self, role_id: str, permission_id: str) -> int:
        deleted = (
            self.session.query(RolePermission)
            .filter(
                RolePermission.role_id == role_id,
                RolePermission.permission_id == permission_id,
            )
            .delete(synchronize_session=False)
        )
        self.session.flush()
        return deleted

    def permissions_for_role(self, role_id: str, model_id: str) -> list[Permission]:
        """Permissions joined to a role, restricted to the given model."""
        return (
            self.session.query(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .filter(
                RolePermission.role_id == role_id,
                Permission.rbac_model_id == model_id,
            )
            .order_by(Permission.name, Permission.id)
            .all()
        )

    def role_permission_pairs(self, model_id: str) -> list[tuple[str, Permission]]:
        """(role_id, permission) for every same-model link in a model."""
        rows = (
            self.session.query(RolePermission.role_id, Permission)
            .join(Permission, RolePermission.permission_id == Permission.id)
            .join(Role, RolePermission.role_id == Role.id)
            .filter(
                Role.rbac_model_id == model_id,
                Permission.rbac_model_id == model_id,
            )
            .order_by(Permission.name, Permission.id)
            .all()
        )
        return [(role_id, permission) for role_id, permission in rows]

    # -- assignments ------------------------------------------------------

    def get_service_rbac_model(self, service_id: str) -> ServiceRbacModel | None:
        return self.session.get(ServiceRbacModel, service_id)

    def set_service_rbac_model(self, service_id: str, model_id: str) -> None:
        """Assign a model to a service, replacing any previous assignment."""
        stmt = self._insert(ServiceRbacModel).values(
            service_id=service_id, rbac_model_id=model_id
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[ServiceRbacModel.service_id],
            set_={"rbac_model_id": stmt.excluded.rbac_model_id, "assigned_at": func.now()},
        )
        self._execute_upsert(stmt)

    def delete_role_assignments_outside_model(self, service_id: str, model_id: str) -> int:
        """Drop user roles on a service whose role is not part of ``model_id``."""
        stale_roles = select(Role.id).where(Role.rbac_model_id != model_id)
        deleted = (
            self.session.query(UserServiceRole)
            .filter(
                UserServiceRole.service_id == service_id,
                UserServiceRole.role_id.in_(stale_roles),
            )
            .delete(synchronize_session=False)
        )
        self.session.flush()
        return deleted

    def get_user_service_role(self, user_id: str, service_id: str) -> UserServiceRole | None:
        return (
            self.session.query(UserServiceRole)
            .filter(
                UserServiceRole.user_id == user_id,
                UserServiceRole.service_id == service_id,
            )
            .first()
        )

    def set_user_service_role(self, user_id: str, service_id: str, role_id: str) -> None:
        """Give a user a role on a service, replacing the role they had there."""
        stmt = self._insert(UserServiceRole).values(
            id=new_id(), user_id=user_id, service_id=service_id, role_id=role_id
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserServiceRole.user_id, UserServiceRole.service_id],
            set_={"role_id": stmt.excluded.role_id, "assigned_at": func.now()},
        )
        self._execute_upsert(stmt)

    def delete_user_service_role(self, user_id: str, service_id: str) -> int:
        deleted = (
            self.session.query(UserServiceRole)
            .filter(
                UserServiceRole.user_id == user_id,
                UserServiceRole.service_id == service_id,
            )
            .delete(synchronize_session=False)
        )
        self.session.flush()
        return deleted

    # -- helpers ----------------------------------------------------------

    def _insert(self, model: Any) -> Any:
        """Dialect-specific INSERT supporting ON CONFLICT."""
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(model)
        if dialect == "sqlite":
            return sqlite.insert(model)
        raise NotImplementedError(f"Upserts are not supported on {dialect}")

    def _execute_upsert(self, stmt: Any) -> None:
        self.session.flush()
        self.session.execute(stmt)
        # Core upserts bypass the identity map; reload anything already loaded.
        self.session.expire_all()

