"""SQLAlchemy ORM models."""

from authhub.models.api_key import ApiKey
from authhub.models.base import Base
from authhub.models.rbac import (
    Permission,
    RbacModel,
    Role,
    RolePermission,
    ServiceRbacModel,
    UserServiceRole,
)
from authhub.models.service import Service
from authhub.models.user import AdminBootstrap, User

__all__ = [
    "AdminBootstrap",
    "ApiKey",
    "Base",
    "Permission",
    "RbacModel",
    "Role",
    "RolePermission",
    "Service",
    "ServiceRbacModel",
    "User",
    "UserServiceRole",
]
