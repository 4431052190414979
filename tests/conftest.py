"""Shared fixtures: an isolated SQLite file per test and a fast hasher."""

import pytest

from fintrack.services.security import PasswordHasher
from fintrack.services.storage import (
    SQLiteClient,
    SQLiteTransactionStorage,
    SQLiteUserStorage,
    ensure_schema,
)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "fintrack.db")


@pytest.fixture
def client(db_path):
    client = SQLiteClient(
        path=db_path,
        timeout_seconds=1.0,
        connect_attempts=1,
        connect_wait_seconds=0,
    )
    ensure_schema(client)
    return client


@pytest.fixture
def hasher():
    # Low cost keeps the suite fast; the format is the same
    return PasswordHasher(iterations=1000)


@pytest.fixture
def user_storage(client, hasher):
    return SQLiteUserStorage(client, hasher)


@pytest.fixture
def transaction_storage(client):
    return SQLiteTransactionStorage(client)

