"""Customer management API endpoints."""

from fastapi import APIRouter, Depends, status

from customer_accounts.dependencies import (
    get_create_payload,
    get_customer_service,
    get_update_payload,
)
from customer_accounts.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from customer_accounts.schemas.envelope import (
    CustomerEnvelope,
    CustomerListEnvelope,
    CustomerMutationEnvelope,
    ErrorEnvelope,
    MessageEnvelope,
)
from customer_accounts.services.customer_service import CustomerService

router = APIRouter(prefix="/customers", tags=["customers"])

_NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": ErrorEnvelope}}
_INVALID = {status.HTTP_400_BAD_REQUEST: {"model": ErrorEnvelope}}
_CONFLICT = {status.HTTP_409_CONFLICT: {"model": ErrorEnvelope}}


@router.get("", response_model=CustomerListEnvelope)
def list_customers(
    service: CustomerService = Depends(get_customer_service),
) -> CustomerListEnvelope:
    """List all customers, newest first."""
    customers = [CustomerResponse.model_validate(c) for c in service.list_customers()]
    return CustomerListEnvelope(data=customers, count=len(customers))


@router.get("/{account_id}", response_model=CustomerEnvelope, responses=_NOT_FOUND)
def get_customer(
    account_id: str,
    service: CustomerService = Depends(get_customer_service),
) -> CustomerEnvelope:
    """Get customer details."""
    customer = service.get_customer(account_id)
    return CustomerEnvelope(data=CustomerResponse.model_validate(customer))


@router.post(
    "",
    response_model=CustomerMutationEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={**_INVALID, **_CONFLICT},
)
def create_customer(
    payload: CustomerCreate = Depends(get_create_payload),
    service: CustomerService = Depends(get_customer_service),
) -> CustomerMutationEnvelope:
    """Create a new customer account."""
    customer = service.create_customer(payload)
    return CustomerMutationEnvelope(
        data=CustomerResponse.model_validate(customer),
        message="Customer created successfully",
    )


@router.put(
    "/{account_id}",
    response_model=CustomerMutationEnvelope,
    responses={**_INVALID, **_NOT_FOUND, **_CONFLICT},
)
def update_customer(
    account_id: str,
    payload: CustomerUpdate = Depends(get_update_payload),
    service: CustomerService = Depends(get_customer_service),
) -> CustomerMutationEnvelope:
    """Update the fields present in the body; other fields keep their values."""
    customer = service.update_customer(account_id, payload)
    return CustomerMutationEnvelope(
        data=CustomerResponse.model_validate(customer),
        message="Customer updated successfully",
    )


@router.delete("/{account_id}", response_model=MessageEnvelope, responses=_NOT_FOUND)
def delete_customer(
    account_id: str,
    service: CustomerService = Depends(get_customer_service),
) -> MessageEnvelope:
    """Delete a customer account."""
    service.delete_customer(account_id)
    return MessageEnvelope(message="Customer deleted successfully")
