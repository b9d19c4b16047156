"""Schemas for user administration."""

from pydantic import BaseModel, EmailStr

from authhub.schemas.auth import SanitizedUser, UserRole


class UserUpdate(BaseModel):
    email: EmailStr | None = None
    role: UserRole | None = None


class UsersListResponse(BaseModel):
    """Response for GET /users (admin only)."""

    users: list[SanitizedUser]
