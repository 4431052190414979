"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep business logic decoupled from SQLite
2. Use an isolated database per test
3. Swap the backend later without touching the flows

The interface is intentionally small - we're not building an ORM.
Just the operations users and transactions need.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from fintrack.models.transaction import Transaction, TransactionType
from fintrack.models.user import User


AmountInput = Union[Decimal, int, float, str]


def parse_amount(value: AmountInput) -> Decimal:
    """
    Parse a transaction amount.

    Accepts Decimal, int, float or a numeric string. Anything that is not a
    finite, non-negative number raises InvalidAmountError.
    """
    if isinstance(value, bool):
        raise InvalidAmountError(f"Amount must be a number, got {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmountError(f"Amount is not a number: {value!r}")

    if not amount.is_finite():
        raise InvalidAmountError(f"Amount must be finite, got {value!r}")
    if amount < 0:
        raise InvalidAmountError(f"Amount cannot be negative, got {value!r}")
    # Collapse -0 to 0
    return abs(amount) if amount.is_zero() else amount


class UserStorageInterface(ABC):
    """
    Abstract interface for user storage operations.

    Users are created once and never updated or deleted.
    """

    @abstractmethod
    async def create_user(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
    ) -> int:
        """
        Create a user, storing only the hash of the password.

        Args:
            email: Login email (unique, case-sensitive)
            password: Plaintext password, hashed before it is stored
            name: Optional display name

        Returns:
            The new user's id

        Raises:
            DuplicateEmailError: If the email is already registered
            StorageError: If the insert fails for any other reason
        """
        pass

    @abstractmethod
    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """
        Check credentials.

        Returns:
            The user on success. None for an unknown email and for a wrong
            password alike; callers cannot tell the two apart.
        """
        pass

    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[User]:
        """
        Retrieve a user by id.

        Returns:
            The user if found, None otherwise
        """
        pass


class TransactionStorageInterface(ABC):
    """
    Abstract interface for transaction storage operations.

    Transactions are append-only - we never update or delete them.
    """

    @abstractmethod
    async def add_transaction(
        self,
        user_id: int,
        type: Union[TransactionType, str],
        amount: AmountInput,
        category: str,
        description: str,
        date: Union[datetime, date],
    ) -> int:
        """
        Record a transaction for a user.

        Returns:
            The new transaction's id

        Raises:
            InvalidAmountError: If amount is not a finite non-negative number
            UnknownUserError: If user_id does not reference an existing user
            InvalidTransactionError: If type is not 'income' or 'expense',
                category is empty or date is not a date
        """
        pass

    @abstractmethod
    async def list_transactions(self, user_id: int) -> list[Transaction]:
        """
        List all of a user's transactions.

        Returns:
            Transactions ordered by date, most recent first. Transactions
            with the same date keep insertion order (earlier insert first).
            Empty list if the user has none.

        Raises:
            CorruptRecordError: If a stored row cannot be parsed
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageUnavailableError(StorageError):
    """The database could not be opened or written."""
    pass


class DuplicateEmailError(StorageError):
    """Attempted to register an email that already exists."""
    pass


class UnknownUserError(StorageError):
    """Referenced user does not exist."""
    pass


class InvalidAmountError(StorageError, ValueError):
    """Amount is not a finite, non-negative number."""
    pass


class InvalidTransactionError(StorageError, ValueError):
    """Transaction fields other than the amount are unusable (unknown type, empty category, bad date)."""
    pass


class CorruptRecordError(StorageError):
    """A stored row does not match the expected schema."""
    pass
