"""Centralized logging infrastructure for the Campus Records API.

Usage:
    ```python
    from src.infrastructure.logging import get_logger

    logger = get_logger(__name__)
    logger.info("Student created", extra={"student_id": 7})
    ```

Records carry the correlation id of the request that produced them; see
:mod:`src.infrastructure.middleware`.
"""

from .config import (
    configure_testing_logging,
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
    setup_logging_configuration,
)
from .factory import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "configure_testing_logging",
    "generate_correlation_id",
    "get_correlation_id",
    "get_logger",
    "reset_correlation_id",
    "set_correlation_id",
    "setup_logging_configuration",
]
