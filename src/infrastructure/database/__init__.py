from .models import TimestampMixin, utc_now
from .session import Base, Database, async_session, get_database

__all__ = [
    "Base",
    "Database",
    "TimestampMixin",
    "async_session",
    "get_database",
    "utc_now",
]
