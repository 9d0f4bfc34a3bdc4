"""Observability module for logging."""

from src.observability.logging import configure_logging, get_logger


__all__ = [
    "configure_logging",
    "get_logger",
]
