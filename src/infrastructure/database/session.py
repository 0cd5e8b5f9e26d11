from collections.abc import AsyncGenerator
from typing import Any, Dict

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, MappedAsDataclass
from sqlalchemy.pool import StaticPool

from ..config.settings import DatabaseSettings


class Base(DeclarativeBase, MappedAsDataclass):
    """Base class for all database models.

    Combines SQLAlchemy's DeclarativeBase with MappedAsDataclass so every
    model gets a generated ``__init__``/``__repr__`` from its mapped columns.
    Columns that the database fills in (ids, timestamps) are declared with
    ``init=False``.

    Example:
        ```python
        class Course(Base):
            __tablename__ = "courses"

            id: Mapped[int] = mapped_column(Integer, primary_key=True, init=False)
            title: Mapped[str] = mapped_column(String(100))
        ```
    """

    pass


class Database:
    """Explicit handle on one database: an async engine plus its session factory.

    The application factory builds one of these at startup and stores it on
    ``app.state.database``; request handlers reach it only through the
    :func:`async_session` dependency. Tests build their own handle against a
    throwaway SQLite file and hand it to the factory.

    Args:
        url: SQLAlchemy async URL, e.g. ``postgresql+asyncpg://...`` or
            ``sqlite+aiosqlite:///./campus.db``
        echo: Log every emitted statement
        pool_size: Connection pool size (ignored for SQLite)
        max_overflow: Extra connections above ``pool_size`` (ignored for SQLite)
    """

    def __init__(self, url: str, echo: bool = False, pool_size: int = 20, max_overflow: int = 0) -> None:
        self.url = url

        engine_kwargs: Dict[str, Any] = {"echo": echo, "future": True}
        if url.startswith("sqlite"):
            if ":memory:" in url:
                engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        else:
            engine_kwargs["pool_size"] = pool_size
            engine_kwargs["max_overflow"] = max_overflow

        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.session_factory = async_sessionmaker(bind=self.engine, class_=AsyncSession, expire_on_commit=False)

    @classmethod
    def from_settings(cls, settings: DatabaseSettings) -> "Database":
        """Build a handle from the application's database settings."""
        return cls(
            settings.DATABASE_URL,
            echo=settings.DATABASE_ECHO,
            pool_size=settings.POSTGRES_POOL_SIZE,
            max_overflow=settings.POSTGRES_MAX_OVERFLOW,
        )

    async def create_tables(self) -> None:
        """Create all tables in the database if they don't exist.

        Idempotent: existing tables are left unchanged.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_tables(self) -> None:
        """Drop every table known to the model metadata."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def ping(self) -> bool:
        """Return True when a trivial ``SELECT 1`` round-trip succeeds."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError):
            return False

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    """Return the database handle attached to the running application."""
    return request.app.state.database


async def async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for database session management with proper lifecycle.

    Opens one session per request from the application's :class:`Database`
    handle and closes it when the response has been produced.

    Example:
        ```python
        @router.get("/students")
        async def list_students(db: AsyncSession = Depends(async_session)):
            result = await db.execute(select(Student))
            return result.scalars().all()
        ```
    """
    database = get_database(request)
    async with database.session_factory() as db:
        yield db
