"""Shared FastAPI dependency factories."""

from typing import Any

from fastapi import Body, Depends
from sqlalchemy.orm import Session

from customer_accounts.db import get_db
from customer_accounts.domain.customer_rules import Operation, clean_payload
from customer_accounts.schemas.customer import CustomerCreate, CustomerUpdate
from customer_accounts.services import CustomerService


def get_session(db: Session = Depends(get_db)) -> Session:
    """Expose the SQLAlchemy session (alias for clarity)."""
    return db


def get_customer_service(session: Session = Depends(get_session)) -> CustomerService:
    return CustomerService(session)


def get_create_payload(body: dict[str, Any] = Body(...)) -> CustomerCreate:
    """Validate and normalize a create request body against the field rules."""
    return CustomerCreate(**clean_payload(body, Operation.CREATE))


def get_update_payload(body: dict[str, Any] = Body(...)) -> CustomerUpdate:
    """Validate a partial update; only keys present in the body are set."""
    return CustomerUpdate(**clean_payload(body, Operation.UPDATE))
