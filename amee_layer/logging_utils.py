# amee_layer/logging_utils.py
"""Structured logging helpers.

    logger = get_logger(__name__)
    log_operation(logger, operation="add_to_amee", outcome="success", profile_item_uid="ABC123")
"""
import logging
from typing import Any


def get_logger(name: str) -> logging.Logger:
    """Logger under the 'amee_layer' namespace, eg 'amee_layer.carbon_store'."""
    if "." in name:
        name = name.split(".")[-1]
    return logging.getLogger(f"amee_layer.{name}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """Log "<operation>: <outcome>" with the context passed as record extras."""
    extra = {
        "operation": operation,
        "outcome": outcome,
        **context,
    }
    logger.log(level, f"{operation}: {outcome}", extra=extra)
