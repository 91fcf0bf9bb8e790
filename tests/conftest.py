"""Root conftest — shared test configuration."""

import os

# Ensure tests never sign tokens with a real secret or reach a real database
os.environ.setdefault("ACCESS_KEY", "ezwallet-test-secret")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
