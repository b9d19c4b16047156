"""Schemas for RBAC administration and permission snapshots."""

from pydantic import BaseModel, Field


class RbacModelCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)


class PermissionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="e.g. 'posts:write'")
    description: str = Field(..., min_length=1)


class RbacModelSummary(BaseModel):
    id: str
    name: str
    description: str

    class Config:
        from_attributes = True


class RoleSummary(BaseModel):
    id: str
    name: str
    description: str

    class Config:
        from_attributes = True


class PermissionSummary(BaseModel):
    id: str
    name: str
    description: str

    class Config:
        from_attributes = True


class PermissionSnapshot(BaseModel):
    """
    What a user can do in a service, computed at issuance time.

    rbac_model is None when the service has no model; role is None when the user
    has no (valid) role in that model.
    """

    role: RoleSummary | None = None
    permissions: list[PermissionSummary] = Field(default_factory=list)
    rbac_model: RbacModelSummary | None = None

    def to_claims(self) -> dict:
        """Token claims in wire form (camelCase keys)."""
        return {
            "rbacRole": self.role.model_dump() if self.role else None,
            "permissions": [p.model_dump() for p in self.permissions],
            "rbacModel": self.rbac_model.model_dump() if self.rbac_model else None,
        }


class RolePermissionMapping(BaseModel):
    """One row of the role/permission matrix for a model."""

    role_id: str
    permissions: list[PermissionSummary] = Field(default_factory=list)


class AssignRbacModelRequest(BaseModel):
    rbac_model_id: str = Field(..., min_length=1)


class AssignUserRoleRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    role_id: str = Field(..., min_length=1)


class GrantPermissionRequest(BaseModel):
    permission_id: str = Field(..., min_length=1)
