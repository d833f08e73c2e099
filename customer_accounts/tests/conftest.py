"""Test configuration and fixtures."""

import os
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ["TESTING"] = "true"  # Skip table creation on startup

from customer_accounts.db import Customer, create_tables, drop_tables, get_db  # noqa: E402
from customer_accounts.main import app  # noqa: E402 - must set env vars before importing

# Use in-memory SQLite for tests
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    """Create a fresh database session for each test."""
    create_tables(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        drop_tables(bind=engine)


@pytest.fixture
def override_db(db_session):
    """Route the API's ``get_db`` dependency to the test session."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(override_db):
    """Create a test client with overridden database dependency."""
    with TestClient(override_db) as test_client:
        yield test_client


@pytest.fixture
def customer_payload():
    return {
        "first_name": "John",
        "last_name": "Doe",
        "email": "john.doe@example.com",
        "phone_number": "+1234567890",
        "address": "123 Main St",
        "city": "New York",
        "state": "NY",
        "country": "USA",
    }


@pytest.fixture
def make_customer(db_session):
    """Factory inserting customers directly through the session."""
    created = []

    def _make(email=None, first_name="Jane", last_name="Smith", date_created=None, **extra):
        customer = Customer(
            account_id=uuid.uuid4(),
            first_name=first_name,
            last_name=last_name,
            email=email or f"{uuid.uuid4().hex[:8]}@example.com",
            **extra,
        )
        if date_created is not None:
            customer.date_created = date_created
        db_session.add(customer)
        db_session.commit()
        db_session.refresh(customer)
        created.append(customer)
        return customer

    return _make


@pytest.fixture
def test_customer(make_customer):
    return make_customer(
        email="jane.smith@example.com",
        phone_number="+1987654321",
        city="Boston",
        state="MA",
        country="USA",
    )


@pytest.fixture
def dated_customers(make_customer):
    """Three customers created one hour apart, oldest first."""
    base = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    return [
        make_customer(email=f"customer{i}@example.com", first_name=f"Customer{i}", date_created=base + timedelta(hours=i))
        for i in range(3)
    ]
