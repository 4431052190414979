"""
Storage Services Package

Provides abstract interfaces and the SQLite implementation for
users and transactions.
"""

from fintrack.services.storage.interface import (
    CorruptRecordError,
    DuplicateEmailError,
    InvalidAmountError,
    InvalidTransactionError,
    StorageError,
    StorageUnavailableError,
    TransactionStorageInterface,
    UnknownUserError,
    UserStorageInterface,
    parse_amount,
)
from fintrack.services.storage.schema import ensure_schema, table_names
from fintrack.services.storage.sqlite import (
    SQLiteClient,
    SQLiteTransactionStorage,
    SQLiteUserStorage,
)

__all__ = [
    # Interfaces
    "TransactionStorageInterface",
    "UserStorageInterface",
    # Exceptions
    "CorruptRecordError",
    "DuplicateEmailError",
    "InvalidAmountError",
    "InvalidTransactionError",
    "StorageError",
    "StorageUnavailableError",
    "UnknownUserError",
    # Helpers
    "ensure_schema",
    "parse_amount",
    "table_names",
    # SQLite implementation
    "SQLiteClient",
    "SQLiteTransactionStorage",
    "SQLiteUserStorage",
]
