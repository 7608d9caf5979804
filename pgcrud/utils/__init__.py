"""
Utilities package for pgcrud.

Exports shared helpers for cross-cutting concerns such as logging.
Keep this package lightweight and free of mapping logic.
"""

from pgcrud.utils.logging import JsonFormatter, configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "JsonFormatter",
]
