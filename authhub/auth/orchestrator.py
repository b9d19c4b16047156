"""Single entry point for logging in and registering.

authenticate(): strategy lookup -> validate -> authenticate -> load user ->
post-auth hooks (best effort) -> issue token -> commit.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from authhub.auth.hooks import HookContext, PostAuthHook
from authhub.auth.registry import StrategyRegistry
from authhub.core.crypto import SecretVault
from authhub.core.errors import InternalInconsistencyError, InvalidCredentialsError
from authhub.models import User
from authhub.schemas.api_key import CredentialCheckResult
from authhub.schemas.auth import AuthMethodMetadata, AuthResponse, SanitizedUser
from authhub.services.credentials import CredentialIssuer
from authhub.services.storage import Storage
from authhub.services.users import register_user

logger = logging.getLogger(__name__)


class AuthenticationOrchestrator:
    """Runs one login (or registration) as a unit of work on ``store``."""

    def __init__(
        self,
        store: Storage,
        registry: StrategyRegistry,
        issuer: CredentialIssuer,
        vault: SecretVault,
        hooks: Sequence[PostAuthHook] = (),
    ) -> None:
        self.store = store
        self.registry = registry
        self.issuer = issuer
        self.vault = vault
        self.hooks = list(hooks)

    def list_auth_methods(self) -> list[AuthMethodMetadata]:
        return self.registry.list_metadata()

    def authenticate(
        self,
        method_id: str,
        raw_credentials: Mapping[str, Any] | None,
        service_id: str | None = None,
    ) -> AuthResponse:
        """
        Authenticate with ``method_id`` and return a token plus the sanitized user.

        Raises UnknownMethodError, UnsupportedMethodError, ValidationError, the
        strategy's own errors, InvalidServiceError and InternalInconsistencyError.
        """
        strategy = self.registry.require(method_id)
        credentials = strategy.validate(raw_credentials)
        result = strategy.authenticate(self.store, credentials)

        user = self.store.get_user(result.user_id)
        if user is None:
            logger.error(
                "User %s missing right after %s authentication", result.user_id, method_id
            )
            raise InternalInconsistencyError("User not found after authentication")

        return self._finish(user, result.is_new_user, service_id)

    def register(
        self, email: str, password: str, service_id: str | None = None
    ) -> AuthResponse:
        """Create a password user, then run the same hooks and issuance as a login."""
        user = register_user(self.store, email, password)
        return self._finish(user, True, service_id)

    def check_credentials(self, email: str, password: str) -> CredentialCheckResult:
        """
        Check an email and password without logging in: no hooks, no token, no commit.

        A wrong password and an unknown email both give valid=False.
        """
        strategy = self.registry.require("email")
        credentials = strategy.validate({"email": email, "password": password})
        try:
            result = strategy.authenticate(self.store, credentials)
        except InvalidCredentialsError:
            return CredentialCheckResult(valid=False)
        return CredentialCheckResult(valid=True, user_id=result.user_id, email=result.email)

    def _finish(self, user: User, is_new_user: bool, service_id: str | None) -> AuthResponse:
        self.run_post_auth_hooks(user, is_new_user)
        token = self.issuer.issue(user.id, user.email, user.role, service_id)
        self.store.commit()
        return AuthResponse(token=token, user=SanitizedUser.model_validate(user))

    def run_post_auth_hooks(self, user: User, is_new_user: bool) -> None:
        ctx = HookContext(store=self.store, vault=self.vault, user=user, is_new_user=is_new_user)
        for hook in self.hooks:
            name = getattr(hook, "__name__", repr(hook))
            try:
                with self.store.savepoint():
                    hook(ctx)
            except Exception:
                logger.exception("Post-auth hook %s failed for user %s", name, user.id)
