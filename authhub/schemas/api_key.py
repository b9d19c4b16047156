"""Schemas for API key management and API-key credential checks."""

from datetime import datetime

from pydantic import BaseModel, Field


class ApiKeyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Label for the key")


class ApiKeyRead(BaseModel):
    """Key view; exposes only the preview."""

    id: str
    name: str
    key_preview: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class ApiKeyCreated(ApiKeyRead):
    """Returned once on creation; the only time the plaintext key is shown."""

    key: str


class CredentialCheckResult(BaseModel):
    """Outcome of an email/password check made with an API key."""

    valid: bool
    user_id: str | None = None
    email: str | None = None
