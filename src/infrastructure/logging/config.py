"""Logging configuration module for environment-aware setup.

Configures the root logger once, based on ``ENVIRONMENT`` and the ``LOG_*``
settings:

- Development/local: coloured console output, detailed format
- Staging: structured key=value console output, optional rotating file
- Production: JSON console output, quieter third-party loggers
- Testing: a null handler, errors only
"""

import contextvars
import logging
import uuid

from ..config.settings import EnvironmentOption, get_settings
from .handlers import (
    create_console_handler,
    create_file_handler,
    create_null_handler,
)


def setup_logging_configuration() -> None:
    """Set up logging configuration based on application settings.

    Clears whatever handlers the root logger had, installs the ones that
    match the current environment and attaches the correlation id filter.
    Call once during startup; :func:`factory.get_logger` does it lazily.
    """
    settings = get_settings()

    logging.getLogger().handlers.clear()

    if settings.ENVIRONMENT == EnvironmentOption.STAGING:
        _configure_staging_logging(settings)
    elif settings.ENVIRONMENT == EnvironmentOption.PRODUCTION:
        _configure_production_logging(settings)
    else:
        _configure_development_logging(settings)

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.LOG_LEVEL_INT)
    add_correlation_id_filter()

    if settings.ENVIRONMENT == EnvironmentOption.PRODUCTION:
        _configure_noisy_loggers()


def _configure_development_logging(settings) -> None:
    handlers = []

    if settings.LOG_CONSOLE_ENABLED:
        console_level = logging.DEBUG if settings.LOG_DEVELOPMENT_VERBOSE else settings.LOG_LEVEL_INT
        handlers.append(create_console_handler(format_type="detailed", level=console_level, use_colors=True))

    if settings.LOG_FILE_ENABLED:
        handlers.append(
            create_file_handler(
                filepath=settings.LOG_FILE_PATH,
                format_type="structured",
                level=logging.DEBUG,
                max_bytes=settings.LOG_FILE_MAX_SIZE,
                backup_count=settings.LOG_FILE_BACKUP_COUNT,
            )
        )

    _attach(handlers)


def _configure_staging_logging(settings) -> None:
    handlers = []

    if settings.LOG_CONSOLE_ENABLED:
        handlers.append(
            create_console_handler(format_type=settings.LOG_FORMAT, level=settings.LOG_LEVEL_INT, use_colors=False)
        )

    if settings.LOG_FILE_ENABLED:
        handlers.append(
            create_file_handler(
                filepath=settings.LOG_FILE_PATH,
                format_type="structured",
                level=logging.DEBUG,
                max_bytes=settings.LOG_FILE_MAX_SIZE,
                backup_count=settings.LOG_FILE_BACKUP_COUNT,
            )
        )

    _attach(handlers)


def _configure_production_logging(settings) -> None:
    handlers = []

    if settings.LOG_CONSOLE_ENABLED:
        console_level = logging.WARNING if settings.LOG_PRODUCTION_OPTIMIZE else settings.LOG_LEVEL_INT
        handlers.append(create_console_handler(format_type="json", level=console_level, use_colors=False))

    if settings.LOG_FILE_ENABLED:
        handlers.append(
            create_file_handler(
                filepath=settings.LOG_FILE_PATH,
                format_type="json",
                level=settings.LOG_LEVEL_INT,
                max_bytes=settings.LOG_FILE_MAX_SIZE,
                backup_count=settings.LOG_FILE_BACKUP_COUNT,
            )
        )

    _attach(handlers)


def _attach(handlers: list[logging.Handler]) -> None:
    root_logger = logging.getLogger()
    for handler in handlers:
        root_logger.addHandler(handler)


def _configure_noisy_loggers() -> None:
    """Quiet down the database driver and server loggers in production."""
    noisy_loggers = {
        "asyncpg": logging.WARNING,
        "aiosqlite": logging.WARNING,
        "sqlalchemy.engine": logging.WARNING,
        "sqlalchemy.pool": logging.WARNING,
        "uvicorn.access": logging.WARNING,
    }

    for logger_name, level in noisy_loggers.items():
        logging.getLogger(logger_name).setLevel(level)


def configure_testing_logging() -> None:
    """Configure minimal logging for test runs.

    Replaces the root handlers with a null handler and raises the level to
    ERROR. Test fixtures call this after the application modules have been
    imported, so it wins over the lazy configuration.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(create_null_handler())
    root_logger.setLevel(logging.ERROR)

    for logger_name in ("sqlalchemy.engine", "aiosqlite", "asyncpg"):
        logging.getLogger(logger_name).setLevel(logging.ERROR)


def get_configured_logger(name: str) -> logging.Logger:
    """Get a logger that inherits from the configured root logger."""
    return logging.getLogger(name)


correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("correlation_id")


def add_correlation_id_filter() -> None:
    """Attach :class:`CorrelationIdFilter` to every root handler.

    Filters on the root logger itself are skipped for records that propagate
    from child loggers, so the filter goes on the handlers instead.
    """
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, CorrelationIdFilter) for f in handler.filters):
            handler.addFilter(CorrelationIdFilter())


class CorrelationIdFilter(logging.Filter):
    """Logging filter that stamps the current request's correlation id on records."""

    def filter(self, record: logging.LogRecord) -> bool:
        setattr(record, "correlation_id", get_correlation_id() or "no-correlation")
        return True


def set_correlation_id(correlation_id: str) -> contextvars.Token[str]:
    """Set correlation ID in context for the current request.

    Returns:
        Token that can be passed to :func:`reset_correlation_id`
    """
    return correlation_id_var.set(correlation_id)


def reset_correlation_id(token: contextvars.Token[str]) -> None:
    """Restore the correlation id that was active before ``set_correlation_id``."""
    correlation_id_var.reset(token)


def get_correlation_id() -> str | None:
    """Get current correlation ID from context, or None outside a request."""
    try:
        return correlation_id_var.get()
    except LookupError:
        return None


def generate_correlation_id() -> str:
    """Generate a new UUID-based correlation ID."""
    return str(uuid.uuid4())
