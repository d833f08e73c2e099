"""Server-rendered customer portal."""
