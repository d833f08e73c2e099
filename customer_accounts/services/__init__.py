"""Service layer entry points."""

from .customer_service import CustomerService

__all__ = ["CustomerService"]
