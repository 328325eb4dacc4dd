"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach a real database
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault(
    "EXECUTOR_ADDRESS", "0x5FbDB2315678afecb367f032d93F642f64180aa3",
)
