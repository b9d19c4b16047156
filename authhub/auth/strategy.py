"""Authentication strategy contract shared by every login method."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar

import pydantic
from pydantic import BaseModel

from authhub.core.errors import ValidationError
from authhub.schemas.auth import AuthMethodMetadata, AuthResult
from authhub.services.storage import Storage


class AuthStrategy(ABC):
    """
    One login method.

    validate() turns raw input into typed credentials without side effects;
    authenticate() checks or provisions the user and returns an AuthResult.
    """

    metadata: ClassVar[AuthMethodMetadata]
    credentials_model: ClassVar[type[BaseModel]]

    @property
    def method_id(self) -> str:
        return self.metadata.id

    def validate(self, raw: Mapping[str, Any] | None) -> BaseModel:
        """Parse raw input; raises ValidationError naming the first bad field."""
        try:
            return self.credentials_model.model_validate(dict(raw or {}))
        except pydantic.ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or "credentials"
            raise ValidationError(field, first["msg"]) from None

    @abstractmethod
    def authenticate(self, store: Storage, credentials: BaseModel) -> AuthResult:
        ...
