from collections.abc import AsyncGenerator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any, Dict, List, Optional

import anyio
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from ..modules.common.utils.error_handler import register_exception_handlers
from .config.settings import (
    DatabaseSettings,
    EnvironmentOption,
    EnvironmentSettings,
    Settings,
    get_settings,
)
from .database.session import Database
from .logging import get_logger
from .middleware import RequestLoggingMiddleware

logger = get_logger(__name__)


async def set_threadpool_tokens(number_of_tokens: int = 100) -> None:
    """Configure the number of threadpool tokens for anyio."""
    limiter = anyio.to_thread.current_default_thread_limiter()
    limiter.total_tokens = number_of_tokens


def lifespan_factory(
    database: Database,
    create_tables_on_startup: bool = True,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Factory to create a lifespan async context manager for a FastAPI app.

    The lifespan optionally creates missing tables on startup and disposes
    the database pool on shutdown.

    Args:
        database: The handle the application serves requests from
        create_tables_on_startup: Whether to create database tables on startup

    Returns:
        An async context manager for FastAPI's lifespan
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        await set_threadpool_tokens()

        try:
            if create_tables_on_startup:
                await database.create_tables()
                logger.info("Database tables ready")
            yield
        finally:
            await database.dispose()

    return lifespan


def create_application(
    router: APIRouter,
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    lifespan: Optional[Callable[[FastAPI], AbstractAsyncContextManager[None]]] = None,
    create_tables_on_startup: Optional[bool] = None,
    enable_cors: Optional[bool] = None,
    cors_origins: Optional[List[str]] = None,
    enable_gzip: Optional[bool] = None,
    enable_request_logging: Optional[bool] = None,
    enable_docs_in_production: Optional[bool] = None,
    debug: Optional[bool] = None,
    title: Optional[str] = None,
    summary: Optional[str] = None,
    description: Optional[str] = None,
    version: Optional[str] = None,
    **kwargs: Any,
) -> FastAPI:
    """Creates and configures a FastAPI application based on the provided settings.

    Args:
        router: The APIRouter containing the routes for the application
        settings: Application settings (uses get_settings() if None)
        database: Database handle to serve requests from. Built from the
            settings when None; tests pass their own.
        lifespan: Optional lifespan function. If None, uses lifespan_factory.
        create_tables_on_startup: Defaults to settings.CREATE_TABLES_ON_STARTUP.
        enable_cors: Defaults to settings.CORS_ENABLED.
        cors_origins: Defaults to settings.CORS_ORIGINS_LIST.
        enable_gzip: Defaults to settings.GZIP_ENABLED.
        enable_request_logging: Defaults to settings.LOG_REQUESTS.
        enable_docs_in_production: Defaults to settings.ENABLE_DOCS_IN_PRODUCTION.
        debug: Defaults to settings.DEBUG.
        title: The title of the API. Defaults to settings.APP_NAME.
        summary: A short summary of the API.
        description: A detailed description of the API (supports Markdown).
        version: The version of the API. Defaults to settings.VERSION.
        **kwargs: Additional keyword arguments passed to FastAPI constructor

    Returns:
        A configured FastAPI application with ``app.state.database`` set
    """
    if settings is None:
        settings = get_settings()

    if database is None:
        if not isinstance(settings, DatabaseSettings):
            raise ValueError("A database handle or database settings are required")
        database = Database.from_settings(settings)

    _create_tables_on_startup = _pick(create_tables_on_startup, settings, "CREATE_TABLES_ON_STARTUP", True)
    _enable_cors = _pick(enable_cors, settings, "CORS_ENABLED", True)
    _cors_origins = _pick(cors_origins, settings, "CORS_ORIGINS_LIST", ["*"])
    _enable_gzip = _pick(enable_gzip, settings, "GZIP_ENABLED", True)
    _enable_request_logging = _pick(enable_request_logging, settings, "LOG_REQUESTS", True)
    _enable_docs_in_production = _pick(enable_docs_in_production, settings, "ENABLE_DOCS_IN_PRODUCTION", False)

    metadata: Dict[str, Any] = {
        "title": _pick(title, settings, "APP_NAME", "API"),
        "description": _pick(description, settings, "APP_DESCRIPTION", ""),
        "version": _pick(version, settings, "VERSION", "0.1.0"),
        "debug": _pick(debug, settings, "DEBUG", False),
        "docs_url": getattr(settings, "DOCS_URL", "/docs"),
        "redoc_url": getattr(settings, "REDOC_URL", "/redoc"),
        "openapi_url": getattr(settings, "OPENAPI_URL", "/openapi.json"),
    }
    if summary is not None:
        metadata["summary"] = summary

    hide_docs = (
        isinstance(settings, EnvironmentSettings)
        and settings.ENVIRONMENT == EnvironmentOption.PRODUCTION
        and not _enable_docs_in_production
    )
    if hide_docs:
        metadata.update({"docs_url": None, "redoc_url": None, "openapi_url": None})

    kwargs.update(metadata)

    if lifespan is None:
        lifespan = lifespan_factory(database, create_tables_on_startup=_create_tables_on_startup)

    application = FastAPI(lifespan=lifespan, **kwargs)
    application.state.database = database

    application.include_router(router)
    register_exception_handlers(application)

    if _enable_cors:
        cors_settings_dict: Dict[str, Any] = {
            "allow_origins": _cors_origins,
            "allow_credentials": True,
            "allow_methods": ["*"],
            "allow_headers": ["*"],
        }

        if hasattr(settings, "CORS_ALLOW_CREDENTIALS"):
            cors_settings_dict["allow_credentials"] = settings.CORS_ALLOW_CREDENTIALS

        if hasattr(settings, "CORS_ALLOW_METHODS"):
            methods = settings.CORS_ALLOW_METHODS
            cors_settings_dict["allow_methods"] = methods.split(",") if isinstance(methods, str) else methods

        if hasattr(settings, "CORS_ALLOW_HEADERS"):
            headers = settings.CORS_ALLOW_HEADERS
            cors_settings_dict["allow_headers"] = headers.split(",") if isinstance(headers, str) else headers

        application.add_middleware(CORSMiddleware, **cors_settings_dict)

    if _enable_gzip:
        application.add_middleware(GZipMiddleware, minimum_size=getattr(settings, "GZIP_MINIMUM_SIZE", 1000))

    if _enable_request_logging:
        application.add_middleware(RequestLoggingMiddleware)

    return application


def _pick(explicit: Any, settings: Settings, name: str, default: Any) -> Any:
    """Explicit argument first, then the named setting, then ``default``."""
    if explicit is not None:
        return explicit
    return getattr(settings, name, default)
