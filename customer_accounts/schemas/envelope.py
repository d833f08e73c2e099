"""Uniform response envelopes."""

from typing import Optional

from pydantic import BaseModel

from .customer import CustomerResponse


class CustomerEnvelope(BaseModel):
    success: bool = True
    data: CustomerResponse


class CustomerMutationEnvelope(CustomerEnvelope):
    message: str


class CustomerListEnvelope(BaseModel):
    success: bool = True
    data: list[CustomerResponse]
    count: int


class MessageEnvelope(BaseModel):
    success: bool = True
    message: str


class FieldErrorDetail(BaseModel):
    field: str
    message: str


class ErrorBody(BaseModel):
    code: str
    message: str
    details: Optional[list[FieldErrorDetail]] = None
    stack: Optional[str] = None


class ErrorEnvelope(BaseModel):
    success: bool = False
    error: ErrorBody


class HealthResponse(BaseModel):
    status: str
    timestamp: str
