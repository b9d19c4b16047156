"""Anonymous login by opaque user identifier."""

import logging

from authhub.auth.strategy import AuthStrategy
from authhub.core.errors import NotFoundError
from authhub.schemas.auth import AuthMethodMetadata, AuthResult, UuidLoginCredentials
from authhub.services.storage import Storage

logger = logging.getLogger(__name__)


class UuidStrategy(AuthStrategy):
    """
    Log in with an existing identifier, or with none to get a new anonymous user.

    Unknown identifiers are rejected: callers cannot choose their own identifier.
    """

    metadata = AuthMethodMetadata(
        id="uuid",
        name="UUID Login",
        description="Anonymous authentication with auto-generated UUID4",
        icon="KeyRound",
        button_text="Login with UUID",
        button_variant="outline",
        help_text="Generate a new UUID or login with existing one",
        category="standard",
    )
    credentials_model = UuidLoginCredentials

    def authenticate(self, store: Storage, credentials: UuidLoginCredentials) -> AuthResult:
        if credentials.uuid is not None:
            user = store.get_user(str(credentials.uuid))
            if user is None:
                raise NotFoundError(
                    "User not found. Please generate a new UUID to create an account."
                )
            is_new_user = False
        else:
            user = store.create_user()
            is_new_user = True
            logger.info("Provisioned anonymous user %s (role=%s)", user.id, user.role)

        return AuthResult(
            user_id=user.id,
            email=user.email,
            role=user.role,
            is_new_user=is_new_user,
        )
