"""Email and password login."""

from authhub.auth.strategy import AuthStrategy
from authhub.core.errors import InvalidCredentialsError
from authhub.core.security import dummy_password_hash, verify_password
from authhub.schemas.auth import AuthMethodMetadata, AuthResult, EmailPasswordCredentials
from authhub.services.storage import Storage


class EmailPasswordStrategy(AuthStrategy):
    metadata = AuthMethodMetadata(
        id="email",
        name="Email Login",
        description="Traditional email and password authentication",
        icon="Mail",
        button_text="Login with Email",
        button_variant="outline",
        help_text="Enter your registered email and password",
        category="standard",
    )
    credentials_model = EmailPasswordCredentials

    def authenticate(self, store: Storage, credentials: EmailPasswordCredentials) -> AuthResult:
        user = store.get_user_by_email(credentials.email)
        if user is None or not user.password_hash:
            # Same cost as a real check so unknown emails are not distinguishable by timing.
            verify_password(credentials.password, dummy_password_hash())
            raise InvalidCredentialsError()
        if not verify_password(credentials.password, user.password_hash):
            raise InvalidCredentialsError()
        return AuthResult(
            user_id=user.id,
            email=user.email,
            role=user.role,
            is_new_user=False,
        )
