"""Post-authentication hooks: provisioning conveniences run after a successful login.

Each hook is independent. The orchestrator runs each one in its own SAVEPOINT and
logs and swallows its failure, so a hook can never fail or undo a login.
"""

from collections.abc import Callable
from dataclasses import dataclass

from authhub.core.crypto import SecretVault
from authhub.models import User
from authhub.services.seed import ensure_hub_service, seed_default_rbac_models, seed_services
from authhub.services.storage import Storage


@dataclass(frozen=True)
class HookContext:
    store: Storage
    vault: SecretVault
    user: User
    is_new_user: bool


PostAuthHook = Callable[[HookContext], None]


def provision_default_services(ctx: HookContext) -> None:
    """Give users who own no services the default bundle."""
    if ctx.store.count_services_for_user(ctx.user.id) == 0:
        seed_services(ctx.store, ctx.vault, ctx.user.id)


def make_hub_service_hook(hub_url: str) -> PostAuthHook:
    def ensure_hub(ctx: HookContext) -> None:
        ensure_hub_service(ctx.store, ctx.vault, hub_url)

    ensure_hub.__name__ = "ensure_hub_service"
    return ensure_hub


def seed_rbac_for_first_admin(ctx: HookContext) -> None:
    """Seed default RBAC models when this login created the first admin."""
    if ctx.is_new_user and ctx.user.role == "admin":
        seed_default_rbac_models(ctx.store, ctx.user)


def default_hooks(hub_url: str, seed_services_enabled: bool = True) -> list[PostAuthHook]:
    hooks: list[PostAuthHook] = []
    if seed_services_enabled:
        hooks.append(provision_default_services)
    hooks.append(make_hub_service_hook(hub_url))
    hooks.append(seed_rbac_for_first_admin)
    return hooks
