"""Database module initialization."""

from .models import Base, Customer
from .session import SessionLocal, engine, get_db
from .utils import create_tables, drop_tables

__all__ = [
    "Base",
    "Customer",
    "SessionLocal",
    "create_tables",
    "drop_tables",
    "engine",
    "get_db",
]
