"""Infrastructure module for the application."""

from .config import get_settings
from .database import Database, async_session

__all__ = [
    "Database",
    "async_session",
    "get_settings",
]
