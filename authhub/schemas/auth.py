"""Request/response schemas for authentication, method discovery and token checks."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from authhub.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN

UserRole = Literal["admin", "user"]


@dataclass(frozen=True)
class AuthResult:
    """What every strategy returns, whatever the method."""

    user_id: str
    email: str | None
    role: UserRole
    is_new_user: bool


class AuthMethodMetadata(BaseModel):
    """Display metadata for an authentication method (implemented or placeholder)."""

    model_config = {"frozen": True}

    id: str = Field(..., description="Method identifier, e.g. 'uuid' or 'email'")
    name: str
    description: str
    icon: str = Field(..., description="Lucide icon name")
    button_text: str
    button_variant: Literal["default", "outline", "ghost", "secondary"] = "outline"
    help_text: str | None = None
    category: Literal["standard", "alternative", "enterprise"] = "standard"
    implemented: bool = False


class UuidLoginCredentials(BaseModel):
    """Anonymous login: an existing identifier, or nothing to get a new one."""

    model_config = {"extra": "ignore"}

    uuid: UUID | None = Field(default=None, description="Existing user identifier")


class EmailPasswordCredentials(BaseModel):
    model_config = {"extra": "ignore"}

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)


class RegisterRequest(BaseModel):
    """Email/password registration."""

    email: EmailStr
    password: str = Field(
        ..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN, description="Password"
    )
    service_id: str | None = Field(default=None, description="Service to scope the token to")


class LoginRequest(BaseModel):
    """Method-specific credentials plus an optional target service."""

    credentials: dict[str, Any] = Field(default_factory=dict)
    service_id: str | None = Field(default=None, description="Service to scope the token to")


class SanitizedUser(BaseModel):
    """User view returned to callers; never includes the password hash."""

    id: str
    email: str | None
    role: UserRole
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    token: str = Field(..., description="Signed JWT")
    user: SanitizedUser


class CurrentUser(BaseModel):
    """Authenticated user (from a global token) for dependency injection."""

    id: str
    email: str | None
    role: UserRole


class VerifyTokenRequest(BaseModel):
    token: str = Field(..., min_length=1)
    service_id: str = Field(..., min_length=1)
    secret: str = Field(..., min_length=1, description="The service's plaintext secret")


class TokenVerificationResult(BaseModel):
    valid: bool
    payload: dict[str, Any] | None = None
    error: str | None = None
