"""Domain layer primitives (field rules, exceptions)."""

from . import customer_rules, exceptions
from .customer_rules import CUSTOMER_FIELDS, FieldRule, FieldViolation, Operation

__all__ = [
    "CUSTOMER_FIELDS",
    "FieldRule",
    "FieldViolation",
    "Operation",
    "customer_rules",
    "exceptions",
]
