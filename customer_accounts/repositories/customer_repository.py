"""Customer persistence helpers."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from customer_accounts.db import Customer
from customer_accounts.domain.customer_rules import OPTIONAL_FIELDS
from customer_accounts.repositories.base import SQLAlchemyRepository

REQUIRED_COLUMNS = ("first_name", "last_name", "email")


def parse_account_id(account_id: uuid.UUID | str) -> Optional[uuid.UUID]:
    """Coerce ``account_id`` to a UUID; malformed ids yield ``None``."""
    if isinstance(account_id, uuid.UUID):
        return account_id
    try:
        return uuid.UUID(str(account_id))
    except (TypeError, ValueError):
        return None


class CustomerRepository(SQLAlchemyRepository[Customer]):
    """Customer data access.

    Lookups return ``None`` when nothing matches. Writes commit their own
    transaction; database errors roll back and propagate.
    """

    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def list_all(self) -> Sequence[Customer]:
        stmt = select(Customer).order_by(Customer.date_created.desc())
        return self.session.scalars(stmt).all()

    def get_by_id(self, account_id: uuid.UUID | str) -> Optional[Customer]:
        key = parse_account_id(account_id)
        if key is None:
            return None
        return self.session.get(Customer, key)

    def get_by_email(self, email: str) -> Optional[Customer]:
        stmt = select(Customer).where(Customer.email == email)
        return self.session.scalars(stmt).first()

    def create(
        self,
        account_id: uuid.UUID,
        data: Mapping[str, Any],
        date_created: datetime | None = None,
    ) -> Customer:
        values = {name: data[name] for name in REQUIRED_COLUMNS}
        for name in OPTIONAL_FIELDS:
            values[name] = data.get(name) or None
        customer = Customer(account_id=account_id, **values)
        if date_created is not None:
            customer.date_created = date_created

        self.add(customer)
        self.commit()
        return self.refresh(customer)

    def update(self, account_id: uuid.UUID | str, changes: Mapping[str, Any]) -> Optional[Customer]:
        customer = self.get_by_id(account_id)
        if customer is None:
            return None

        for name, value in changes.items():
            if name in OPTIONAL_FIELDS:
                setattr(customer, name, value or None)
            elif name in REQUIRED_COLUMNS:
                setattr(customer, name, value)

        self.commit()
        return self.refresh(customer)

    def delete(self, account_id: uuid.UUID | str) -> bool:
        key = parse_account_id(account_id)
        if key is None:
            return False
        result = self.session.execute(delete(Customer).where(Customer.account_id == key))
        self.commit()
        return result.rowcount > 0
