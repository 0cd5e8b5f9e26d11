"""Logger factory with lazy, settings-driven configuration.

Every module obtains its logger through :func:`get_logger`; the first call
configures the root logger from the application settings.
"""

import inspect
import logging
from threading import Lock
from typing import Optional, Union

from ..config.settings import get_settings
from .config import get_configured_logger, setup_logging_configuration

_logging_configured = False
_configuration_lock = Lock()


def get_logger(name: Optional[str] = None, **extra_context) -> Union[logging.Logger, logging.LoggerAdapter]:
    """Get a properly configured logger with automatic module detection.

    Args:
        name: Logger name. If None, automatically detects from calling module.
        **extra_context: Additional context to include in every log record.

    Returns:
        Configured logger instance ready for use.

    Example:
        ```python
        logger = get_logger(__name__)
        logger.info("Student created", extra={"student_id": 12})

        lending_logger = get_logger(component="lending")
        lending_logger.info("Book borrowed")
        ```
    """
    _ensure_logging_configured()

    if name is None:
        name = _detect_calling_module()

    base_logger = get_configured_logger(name)

    if extra_context:
        return logging.LoggerAdapter(base_logger, extra_context)
    return base_logger


def configure_logging() -> None:
    """Configure logging now instead of on the first ``get_logger`` call."""
    global _logging_configured

    with _configuration_lock:
        if not _logging_configured:
            setup_logging_configuration()
            _logging_configured = True

            settings = get_settings()
            logging.getLogger(__name__).debug(
                f"Logging configured for {settings.ENVIRONMENT.value} environment",
                extra={
                    "log_level": settings.LOG_LEVEL,
                    "log_format": settings.LOG_FORMAT,
                    "file_enabled": settings.LOG_FILE_ENABLED,
                },
            )


def _ensure_logging_configured() -> None:
    if not _logging_configured:
        configure_logging()


def _detect_calling_module() -> str:
    frame = inspect.currentframe()

    try:
        for _ in range(2):
            if frame is None:
                break
            frame = frame.f_back

        if frame is not None:
            return str(frame.f_globals.get("__name__", "unknown"))
        return "unknown"

    finally:
        del frame
