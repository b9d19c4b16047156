"""Core app configuration, database, errors and crypto."""

from authhub.core.config import get_settings, settings
from authhub.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
