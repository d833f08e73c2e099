"""Schemas module initialization."""

from .customer import CustomerCreate, CustomerResponse, CustomerUpdate
from .envelope import (
    CustomerEnvelope,
    CustomerListEnvelope,
    CustomerMutationEnvelope,
    ErrorBody,
    ErrorEnvelope,
    FieldErrorDetail,
    HealthResponse,
    MessageEnvelope,
)

__all__ = [
    "CustomerCreate",
    "CustomerEnvelope",
    "CustomerListEnvelope",
    "CustomerMutationEnvelope",
    "CustomerResponse",
    "CustomerUpdate",
    "ErrorBody",
    "ErrorEnvelope",
    "FieldErrorDetail",
    "HealthResponse",
    "MessageEnvelope",
]
