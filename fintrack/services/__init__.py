"""Services package."""

from fintrack.services.security import PasswordHasher
from fintrack.services.storage import (
    CorruptRecordError,
    DuplicateEmailError,
    InvalidAmountError,
    InvalidTransactionError,
    SQLiteClient,
    SQLiteTransactionStorage,
    SQLiteUserStorage,
    StorageError,
    StorageUnavailableError,
    TransactionStorageInterface,
    UnknownUserError,
    UserStorageInterface,
    ensure_schema,
)

__all__ = [
    # Security
    "PasswordHasher",
    # Storage services
    "CorruptRecordError",
    "DuplicateEmailError",
    "InvalidAmountError",
    "InvalidTransactionError",
    "SQLiteClient",
    "SQLiteTransactionStorage",
    "SQLiteUserStorage",
    "StorageError",
    "StorageUnavailableError",
    "TransactionStorageInterface",
    "UnknownUserError",
    "UserStorageInterface",
    "ensure_schema",
]
