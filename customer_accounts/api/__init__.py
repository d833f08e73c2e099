"""HTTP routers."""

from . import customers, errors, health, metrics

__all__ = ["customers", "errors", "health", "metrics"]
