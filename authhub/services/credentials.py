"""Token issuance and verification with global or per-service signing keys."""

import logging
from typing import Any

from authhub.core.crypto import SecretVault
from authhub.core.errors import InvalidTokenError
from authhub.core.security import decode_token, sign_token
from authhub.schemas.auth import TokenVerificationResult
from authhub.services.rbac import RbacResolver
from authhub.services.service_catalog import decrypt_signing_key, require_service, secret_matches
from authhub.services.storage import Storage

logger = logging.getLogger(__name__)


class CredentialIssuer:
    """
    Mints signed tokens.

    Without a service the token is signed with the global key and carries
    {id, email, role}. With a service it is signed with that service's decrypted
    secret and also carries the RBAC snapshot (rbacRole, permissions, rbacModel).
    """

    def __init__(
        self,
        store: Storage,
        vault: SecretVault,
        resolver: RbacResolver,
        global_secret: str,
        algorithm: str = "HS256",
    ) -> None:
        self.store = store
        self.vault = vault
        self.resolver = resolver
        self._global_secret = global_secret
        self.algorithm = algorithm

    def issue(
        self,
        user_id: str,
        email: str | None,
        role: str,
        service_id: str | None = None,
    ) -> str:
        claims: dict[str, Any] = {"id": user_id, "email": email, "role": role}
        if not service_id:
            return sign_token(claims, self._global_secret, self.algorithm)

        service = require_service(self.store, service_id)
        signing_key = decrypt_signing_key(self.vault, service)
        snapshot = self.resolver.resolve(user_id, service_id)
        claims.update(snapshot.to_claims())
        return sign_token(claims, signing_key, self.algorithm)

    def verify_global(self, token: str) -> dict[str, Any]:
        """Decode a hub token signed with the global key."""
        return decode_token(token, self._global_secret, self.algorithm)

    def verify_for_service(
        self, token: str, service_id: str, caller_secret: str
    ) -> TokenVerificationResult:
        """
        Verify a token on behalf of a service.

        An unknown service or one without a secret raises InvalidServiceError.
        The caller's secret is compared before the token is parsed, and a wrong
        secret raises InvalidTokenError. Token failures come back as valid=False
        with one undifferentiated error.
        """
        service = require_service(self.store, service_id)
        if not secret_matches(self.vault, service, caller_secret):
            logger.info("Secret mismatch while verifying a token for service %s", service.id)
            raise InvalidTokenError()
        try:
            payload = decode_token(token, caller_secret, self.algorithm)
        except InvalidTokenError as e:
            logger.info("Token verification failed for service %s", service.id)
            return TokenVerificationResult(valid=False, error=e.message)
        return TokenVerificationResult(valid=True, payload=payload)
