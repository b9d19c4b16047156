"""Implemented authentication strategies."""

from authhub.auth.strategies.email_password import EmailPasswordStrategy
from authhub.auth.strategies.uuid_login import UuidStrategy

__all__ = ["EmailPasswordStrategy", "UuidStrategy"]
