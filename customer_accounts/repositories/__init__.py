"""Repository layer for persistence access."""

from .customer_repository import CustomerRepository

__all__ = ["CustomerRepository"]
