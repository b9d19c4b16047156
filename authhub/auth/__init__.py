"""Pluggable authentication: strategies, registry, hooks and orchestration."""

from authhub.auth.orchestrator import AuthenticationOrchestrator
from authhub.auth.registry import StrategyRegistry, build_default_registry, get_strategy_registry
from authhub.auth.strategy import AuthStrategy

__all__ = [
    "AuthStrategy",
    "AuthenticationOrchestrator",
    "StrategyRegistry",
    "build_default_registry",
    "get_strategy_registry",
]
