"""Core module initialization."""

from .config import settings
from .logging import bind, get_logger, setup_logging

__all__ = ["bind", "get_logger", "settings", "setup_logging"]
