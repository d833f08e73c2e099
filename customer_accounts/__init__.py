"""Customer account management: REST API and portal client."""

__version__ = "1.0.0"
