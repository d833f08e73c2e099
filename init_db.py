"""Database initialization entrypoint."""

from customer_accounts.core import setup_logging
from customer_accounts.db.utils import create_tables


def init_db() -> None:
    """Create the customers table on the configured database."""
    setup_logging()
    create_tables()


if __name__ == "__main__":
    init_db()
