"""Catalog of authentication methods, built once at startup and read-only afterwards.

Implemented methods map to executable strategies. Placeholder methods are plain
metadata for login-page design and discovery; there is no code path that can run
them.
"""

import logging
from collections.abc import Iterable
from functools import lru_cache
from types import MappingProxyType

from authhub.auth.strategies import EmailPasswordStrategy, UuidStrategy
from authhub.auth.strategy import AuthStrategy
from authhub.core.errors import UnknownMethodError, UnsupportedMethodError
from authhub.schemas.auth import AuthMethodMetadata

logger = logging.getLogger(__name__)

PLACEHOLDER_METHODS: tuple[AuthMethodMetadata, ...] = (
    AuthMethodMetadata(
        id="nostr",
        name="Nostr",
        description="Authenticate using your Nostr public key",
        icon="Zap",
        button_text="Login with Nostr",
        help_text="Requires Nostr browser extension (Alby or nos2x)",
        category="alternative",
    ),
    AuthMethodMetadata(
        id="bluesky",
        name="BlueSky",
        description="Authenticate using BlueSky ATProtocol",
        icon="Cloud",
        button_text="Login with BlueSky",
        help_text="Use your BlueSky DID for authentication",
        category="alternative",
    ),
    AuthMethodMetadata(
        id="webauthn",
        name="WebAuthn",
        description="Authenticate using biometrics or security keys",
        icon="Fingerprint",
        button_text="Login with WebAuthn",
        help_text="Use fingerprint, Face ID, or hardware key",
        category="standard",
    ),
    AuthMethodMetadata(
        id="magic_link",
        name="Magic Link",
        description="Passwordless authentication via email",
        icon="Sparkles",
        button_text="Send Magic Link",
        help_text="Receive a one-time login link via email",
        category="standard",
    ),
)


class StrategyRegistry:
    """Immutable method-id -> strategy table plus placeholder metadata."""

    def __init__(
        self,
        strategies: Iterable[AuthStrategy],
        placeholders: Iterable[AuthMethodMetadata] = (),
    ) -> None:
        table: dict[str, AuthStrategy] = {}
        for strategy in strategies:
            if strategy.method_id in table:
                raise ValueError(f"Duplicate authentication method: {strategy.method_id}")
            table[strategy.method_id] = strategy
            logger.debug("Registered auth method %s", strategy.method_id)
        self._strategies = MappingProxyType(table)
        self._placeholders = MappingProxyType(
            {m.id: m for m in placeholders if m.id not in table}
        )

    def get(self, method_id: str) -> AuthStrategy | None:
        return self._strategies.get(method_id)

    def is_implemented(self, method_id: str) -> bool:
        return method_id in self._strategies

    def is_placeholder(self, method_id: str) -> bool:
        return method_id in self._placeholders

    def implemented_ids(self) -> list[str]:
        return list(self._strategies)

    def require(self, method_id: str) -> AuthStrategy:
        """Return the strategy or raise UnsupportedMethodError / UnknownMethodError."""
        strategy = self._strategies.get(method_id)
        if strategy is not None:
            return strategy
        if method_id in self._placeholders:
            raise UnsupportedMethodError(method_id)
        raise UnknownMethodError(method_id)

    def list_metadata(self) -> list[AuthMethodMetadata]:
        """Implemented methods first, then placeholders, each flagged accordingly."""
        implemented = [
            s.metadata.model_copy(update={"implemented": True})
            for s in self._strategies.values()
        ]
        placeholders = [
            m.model_copy(update={"implemented": False}) for m in self._placeholders.values()
        ]
        return implemented + placeholders


def build_default_registry() -> StrategyRegistry:
    return StrategyRegistry(
        strategies=[EmailPasswordStrategy(), UuidStrategy()],
        placeholders=PLACEHOLDER_METHODS,
    )


@lru_cache
def get_strategy_registry() -> StrategyRegistry:
    """Process-wide registry, built on first use."""
    return build_default_registry()
