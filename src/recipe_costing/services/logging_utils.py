"""Service layer logging utilities.

Provides structured logging functions for service operations, so catalog
edits, imports and exports log in one consistent format.

Usage:
    from recipe_costing.services.logging_utils import get_service_logger, log_operation

    logger = get_service_logger(__name__)

    log_operation(
        logger,
        operation="create_recipe",
        outcome="success",
        recipe_id="rec_18c2f0a1b3e_4f1c2a9b8d7e",
        line_count=3,
    )
"""

import logging
from typing import Any

SERVICE_LOGGER_PREFIX = "recipe_costing.services"


def get_service_logger(name: str) -> logging.Logger:
    """
    Get a logger configured for service operations.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Logger instance with the 'recipe_costing.services' prefix.

    Example:
        >>> logger = get_service_logger("recipe_costing.services.costing.engine")
        >>> logger.name
        'recipe_costing.services.engine'
    """
    # Keep only the module name if a dotted path is provided
    if "." in name:
        name = name.split(".")[-1]
    return logging.getLogger(f"{SERVICE_LOGGER_PREFIX}.{name}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log a service operation with structured context.

    The message is "<operation>: <outcome>"; context fields are attached via
    'extra' so handlers that format structured records can pick them up.

    Args:
        logger: Logger instance to use
        operation: Operation name (e.g., "import_catalog", "delete_ingredient")
        outcome: Outcome description (e.g., "success", "skipped", "error")
        level: Log level (default: INFO). Use DEBUG for frequent logs.
        **context: Additional context fields (entity ids, counts, error text)
    """
    extra = {
        "operation": operation,
        "outcome": outcome,
        **context,
    }
    logger.log(level, f"{operation}: {outcome}", extra=extra)
