"""ORM models for RBAC models, roles, permissions and their assignments."""

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint, func

from authhub.models.base import Base, new_id


class RbacModel(Base):
    """A reusable, named taxonomy of roles and permissions."""

    __tablename__ = "rbac_models"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    # Kept when the creating admin is deleted; the model may still be in use.
    created_by = Column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class Role(Base):
    __tablename__ = "roles"

    id = Column(String(36), primary_key=True, default=new_id)
    rbac_model_id = Column(
        String(36),
        ForeignKey("rbac_models.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class Permission(Base):
    """A permission; names follow 'resource:action' by convention only."""

    __tablename__ = "permissions"

    id = Column(String(36), primary_key=True, default=new_id)
    rbac_model_id = Column(
        String(36),
        ForeignKey("rbac_models.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class RolePermission(Base):
    __tablename__ = "role_permissions"

    role_id = Column(
        String(36),
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    permission_id = Column(
        String(36),
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
    )


class ServiceRbacModel(Base):
    """At most one RBAC model per service (service_id is the primary key)."""

    __tablename__ = "service_rbac_models"

    service_id = Column(
        String(36),
        ForeignKey("services.id", ondelete="CASCADE"),
        primary_key=True,
    )
    rbac_model_id = Column(
        String(36),
        ForeignKey("rbac_models.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    assigned_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class UserServiceRole(Base):
    """A user's role on a service; one row per (user, service)."""

    __tablename__ = "user_service_roles"
    __table_args__ = (
        UniqueConstraint("user_id", "service_id", name="uq_user_service_roles_user_service"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    service_id = Column(
        String(36),
        ForeignKey("services.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role_id = Column(
        String(36),
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
    )
    assigned_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
