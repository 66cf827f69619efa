"""Utility exports."""

from .logging import configure_logging, get_logger, is_production
from .text import kebab_case, snake_case

__all__ = [
    "configure_logging",
    "get_logger",
    "is_production",
    "kebab_case",
    "snake_case",
]
