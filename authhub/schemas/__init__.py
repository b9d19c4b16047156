"""Pydantic request/response schemas."""

from authhub.schemas.api_key import (
    ApiKeyCreate,
    ApiKeyCreated,
    ApiKeyRead,
    CredentialCheckResult,
)
from authhub.schemas.auth import (
    AuthMethodMetadata,
    AuthResponse,
    AuthResult,
    CurrentUser,
    EmailPasswordCredentials,
    LoginRequest,
    RegisterRequest,
    SanitizedUser,
    TokenVerificationResult,
    UuidLoginCredentials,
    VerifyTokenRequest,
)
from authhub.schemas.health import HealthResponse
from authhub.schemas.rbac import (
    PermissionSnapshot,
    PermissionSummary,
    RbacModelSummary,
    RolePermissionMapping,
    RoleSummary,
)
from authhub.schemas.service import (
    SecretRotated,
    ServiceCreate,
    ServiceCreated,
    ServiceRead,
    ServiceUpdate,
)
from authhub.schemas.user import UsersListResponse, UserUpdate

__all__ = [
    "ApiKeyCreate",
    "ApiKeyCreated",
    "ApiKeyRead",
    "AuthMethodMetadata",
    "AuthResponse",
    "AuthResult",
    "CredentialCheckResult",
    "CurrentUser",
    "EmailPasswordCredentials",
    "HealthResponse",
    "LoginRequest",
    "PermissionSnapshot",
    "PermissionSummary",
    "RbacModelSummary",
    "RegisterRequest",
    "RolePermissionMapping",
    "RoleSummary",
    "SanitizedUser",
    "SecretRotated",
    "ServiceCreate",
    "ServiceCreated",
    "ServiceRead",
    "ServiceUpdate",
    "TokenVerificationResult",
    "UserUpdate",
    "UsersListResponse",
    "UuidLoginCredentials",
    "VerifyTokenRequest",
]
