"""Schemas for the service catalog. Secrets are never accepted as input."""

from datetime import datetime

from pydantic import BaseModel, Field, HttpUrl, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ServiceCreate(BaseModel):
    model_config = {"extra": "ignore"}

    name: str = Field(..., min_length=1, max_length=255, description="Service name")
    description: str = Field(..., min_length=1, description="Description")
    url: HttpUrl
    redirect_url: HttpUrl | None = Field(
        default=None, description="Where to send users after login (defaults to url)"
    )
    icon: str = Field(default="Globe", max_length=64)
    color: str | None = Field(default=None, max_length=64)
    login_config_id: str | None = None

    @field_validator("redirect_url", mode="before")
    @classmethod
    def blank_redirect_is_none(cls, v: object) -> object:
        return _blank_to_none(v)


class ServiceUpdate(BaseModel):
    """Metadata-only update. Unknown fields (including any secret) are dropped."""

    model_config = {"extra": "ignore"}

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1)
    url: HttpUrl | None = None
    redirect_url: HttpUrl | None = None
    icon: str | None = Field(default=None, max_length=64)
    color: str | None = Field(default=None, max_length=64)
    login_config_id: str | None = None

    @field_validator("redirect_url", mode="before")
    @classmethod
    def blank_redirect_is_none(cls, v: object) -> object:
        return _blank_to_none(v)


class ServiceRead(BaseModel):
    """Service view; exposes only the secret preview."""

    id: str
    user_id: str | None
    name: str
    description: str
    url: str
    redirect_url: str | None
    icon: str
    color: str | None
    secret_preview: str | None
    is_system: bool
    login_config_id: str | None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class ServiceCreated(ServiceRead):
    """Returned once on creation; the only time the plaintext secret is shown."""

    plaintext_secret: str


class SecretRotated(BaseModel):
    success: bool = True
    message: str = "Secret rotated successfully"
    plaintext_secret: str
    secret_preview: str


class VerifySecretRequest(BaseModel):
    service_id: str = Field(..., min_length=1)
    secret: str = Field(..., min_length=1)
