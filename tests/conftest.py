"""Test fixtures for the expense tracker tests."""

import os

# Keep background jobs and rate limiting out of the request tests
os.environ["ENABLE_SUMMARY_SCHEDULER"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient

from models.expense import Expense
from services.expense_store import ExpenseStore


@pytest.fixture
def store() -> ExpenseStore:
    """Create an empty expense store."""
    return ExpenseStore()


@pytest.fixture
def populated_store(store: ExpenseStore) -> ExpenseStore:
    """Create a store with expenses spread over two months."""
    store.add("Food", 10, "2024-01-02")
    store.add("Travel", 120.5, "2024-01-15T09:30:00Z")
    store.add("Food", 25, "2024-01-31T00:00:00Z")
    store.add("Bills", 60, "2024-02-01")
    store.add("Shopping", 45, "2024-02-14T18:00:00Z")
    return store


@pytest.fixture
def expenses(populated_store: ExpenseStore) -> list[Expense]:
    """Snapshot of the populated store."""
    return populated_store.all()


@pytest.fixture
def client():
    """Test client with the app lifespan running (fresh store per test)."""
    from main import app

    with TestClient(app) as test_client:
        yield test_client
