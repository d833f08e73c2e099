"""Customer account services."""

from __future__ import annotations

import uuid
from typing import Any, Mapping, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from customer_accounts.core.logging import get_logger
from customer_accounts.core.metrics import record_customer_operation
from customer_accounts.db import Customer
from customer_accounts.domain.exceptions import ConflictError, NotFoundError
from customer_accounts.repositories import CustomerRepository

logger = get_logger(__name__)


def _payload_data(payload: Any, *, partial: bool) -> dict[str, Any]:
    if isinstance(payload, Mapping):
        return dict(payload)
    return payload.model_dump(exclude_unset=partial)


class CustomerService:
    """Business rules around customer accounts.

    Enforces email uniqueness and existence on top of the repository.
    The email pre-check is a fast path; the unique constraint on the table
    is authoritative and its violation is reported as a conflict too.
    """

    def __init__(self, session: Session) -> None:
        self.session = session
        self.customers = CustomerRepository(session)

    # ------------------------------------------------------------------
    # Queries

    def list_customers(self) -> Sequence[Customer]:
        return self.customers.list_all()

    def get_customer(self, account_id: uuid.UUID | str) -> Customer:
        customer = self.customers.get_by_id(account_id)
        if not customer:
            raise NotFoundError(_not_found_message(account_id))
        return customer

    # ------------------------------------------------------------------
    # Mutations

    def create_customer(self, payload) -> Customer:
        data = _payload_data(payload, partial=False)
        email = data["email"]

        if self.customers.get_by_email(email):
            record_customer_operation("create", "conflict")
            raise ConflictError(_conflict_message(email))

        account_id = uuid.uuid4()
        try:
            customer = self.customers.create(account_id, data)
        except IntegrityError as exc:
            record_customer_operation("create", "conflict")
            raise ConflictError(_conflict_message(email)) from exc

        record_customer_operation("create", "success")
        logger.info(
            "Created customer %s",
            customer.account_id,
            extra={"account_id": str(customer.account_id)},
        )
        return customer

    def update_customer(self, account_id: uuid.UUID | str, payload) -> Customer:
        changes = _payload_data(payload, partial=True)
        existing = self._require_customer(account_id, operation="update")

        new_email = changes.get("email")
        if new_email and new_email != existing.email:
            other = self.customers.get_by_email(new_email)
            if other and other.account_id != existing.account_id:
                record_customer_operation("update", "conflict")
                raise ConflictError(_conflict_message(new_email))

        try:
            customer = self.customers.update(existing.account_id, changes)
        except IntegrityError as exc:
            record_customer_operation("update", "conflict")
            raise ConflictError(_conflict_message(new_email or existing.email)) from exc

        if customer is None:
            record_customer_operation("update", "not_found")
            raise NotFoundError(_not_found_message(account_id))

        record_customer_operation("update", "success")
        logger.info(
            "Updated customer %s (fields: %s)",
            customer.account_id,
            ", ".join(sorted(changes)) or "none",
            extra={"account_id": str(customer.account_id)},
        )
        return customer

    def delete_customer(self, account_id: uuid.UUID | str) -> None:
        existing = self._require_customer(account_id, operation="delete")

        if not self.customers.delete(existing.account_id):
            record_customer_operation("delete", "not_found")
            raise NotFoundError(_not_found_message(account_id))

        record_customer_operation("delete", "success")
        logger.info("Deleted customer %s", account_id, extra={"account_id": str(account_id)})

    # ------------------------------------------------------------------

    def _require_customer(self, account_id: uuid.UUID | str, *, operation: str) -> Customer:
        customer = self.customers.get_by_id(account_id)
        if not customer:
            record_customer_operation(operation, "not_found")
            raise NotFoundError(_not_found_message(account_id))
        return customer


def _not_found_message(account_id: uuid.UUID | str) -> str:
    return f"Customer with account ID {account_id} not found"


def _conflict_message(email: str) -> str:
    return f"Customer with email {email} already exists"
