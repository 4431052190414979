"""
SQLite Storage Implementation

DESIGN DECISION: SQLite is the storage backend because:
1. A personal finance tracker has one user at a keyboard at a time
2. No database server to set up
3. UNIQUE and FOREIGN KEY constraints are enforced by the engine itself,
   so no application-level locking is needed

Every operation opens a short-lived connection, runs one statement,
commits and closes. The connection handle (SQLiteClient) is passed into
each storage class explicitly, so tests can point at their own file.

The implementation follows the abstract interface, so the flows never
import sqlite3.
"""

import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from typing import Iterator, Optional, Union

import structlog
from pydantic import ValidationError
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from fintrack.config import DatabaseSettings, get_settings
from fintrack.models.transaction import Transaction, TransactionCreate, TransactionType
from fintrack.models.user import User
from fintrack.services.security import PasswordHasher
from fintrack.services.storage.interface import (
    AmountInput,
    CorruptRecordError,
    DuplicateEmailError,
    InvalidTransactionError,
    StorageError,
    StorageUnavailableError,
    TransactionStorageInterface,
    UnknownUserError,
    UserStorageInterface,
    parse_amount,
)


logger = structlog.get_logger(__name__)


# Column order used by every SELECT on transactions
TRANSACTION_COLUMNS = [
    "id",
    "user_id",
    "type",
    "amount",
    "category",
    "description",
    "date",
]


def format_timestamp(value: datetime) -> str:
    """Fixed-width ISO text, so SQLite's text ordering is chronological."""
    return value.isoformat(timespec="microseconds")


class SQLiteClient:
    """
    Low-level SQLite connection handle.

    Opens connections with foreign keys enforced and retries transient
    open failures before reporting the database as unavailable.
    """

    def __init__(
        self,
        path: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        connect_attempts: Optional[int] = None,
        connect_wait_seconds: Optional[float] = None,
    ):
        defaults = get_settings().database
        self._path = path if path is not None else defaults.path
        self._timeout = timeout_seconds if timeout_seconds is not None else defaults.timeout_seconds
        self._attempts = connect_attempts if connect_attempts is not None else defaults.connect_attempts
        self._wait = (
            connect_wait_seconds
            if connect_wait_seconds is not None
            else defaults.connect_wait_seconds
        )

    @classmethod
    def from_settings(cls, settings: DatabaseSettings) -> "SQLiteClient":
        return cls(
            path=settings.path,
            timeout_seconds=settings.timeout_seconds,
            connect_attempts=settings.connect_attempts,
            connect_wait_seconds=settings.connect_wait_seconds,
        )

    @property
    def path(self) -> str:
        return self._path

    def connect(self) -> sqlite3.Connection:
        """
        Open a new connection with foreign keys turned on.

        Raises:
            StorageUnavailableError: If the database cannot be opened
                after the configured number of attempts.
        """
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self._attempts),
                wait=wait_fixed(self._wait),
                retry=retry_if_exception_type(sqlite3.OperationalError),
                reraise=True,
            ):
                with attempt:
                    conn = sqlite3.connect(self._path, timeout=self._timeout)
                    try:
                        conn.execute("PRAGMA foreign_keys = ON")
                    except sqlite3.Error:
                        conn.close()
                        raise
        except sqlite3.OperationalError as e:
            logger.error("database_unavailable", database=self._path, error=str(e))
            raise StorageUnavailableError(f"Cannot open database at {self._path}: {e}") from e

        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection and always close it afterwards."""
        conn = self.connect()
        try:
            yield conn
        finally:
            conn.close()


class SQLiteUserStorage(UserStorageInterface):
    """
    SQLite implementation of user storage.

    Passwords are hashed here, on the way in; the hash never leaves
    this class.
    """

    def __init__(
        self,
        client: SQLiteClient,
        hasher: Optional[PasswordHasher] = None,
    ):
        self._client = client
        self._hasher = hasher or PasswordHasher()

    def _row_to_user(self, row: sqlite3.Row) -> User:
        """Strictly parse a users row; the hash column is never read here."""
        try:
            return User(id=row["id"], email=row["email"], name=row["name"])
        except ValidationError as e:
            raise CorruptRecordError(f"Malformed user row {row['id']}: {e}") from e

    async def create_user(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
    ) -> int:
        """Insert a user with a hashed password."""
        password_hash = self._hasher.hash(password)
        try:
            with self._client.connection() as conn:
                cursor = conn.execute(
                    "INSERT INTO users (email, password_hash, name) VALUES (?, ?, ?)",
                    (email, password_hash, name or None),
                )
                conn.commit()
                user_id = cursor.lastrowid
        except sqlite3.IntegrityError as e:
            if "users.email" in str(e):
                raise DuplicateEmailError(f"Email already registered: {email}") from e
            raise StorageError(f"Failed to create user: {e}") from e
        except sqlite3.OperationalError as e:
            raise StorageUnavailableError(f"Failed to create user: {e}") from e
        except sqlite3.Error as e:
            raise StorageError(f"Failed to create user: {e}") from e

        logger.info("user_created", user_id=user_id)
        return user_id

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """Look up by exact email and verify the password."""
        try:
            with self._client.connection() as conn:
                row = conn.execute(
                    "SELECT id, email, password_hash, name FROM users WHERE email = ?",
                    (email,),
                ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to look up user: {e}") from e

        # Both failures look the same to the caller; only the log knows why
        if row is None:
            logger.info("authentication_failed", reason="unknown_email")
            return None

        if not self._hasher.verify(password, row["password_hash"]):
            logger.info("authentication_failed", reason="wrong_password", user_id=row["id"])
            return None

        return self._row_to_user(row)

    async def get_user(self, user_id: int) -> Optional[User]:
        """Retrieve a user by id."""
        try:
            with self._client.connection() as conn:
                row = conn.execute(
                    "SELECT id, email, name FROM users WHERE id = ?",
                    (user_id,),
                ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to get user: {e}") from e

        if row is None:
            return None
        return self._row_to_user(row)


class SQLiteTransactionStorage(TransactionStorageInterface):
    """
    SQLite implementation of transaction storage.

    Rows are parsed strictly on the way out: a row that does not form a
    valid Transaction raises CorruptRecordError rather than being skipped.
    """

    def __init__(self, client: SQLiteClient):
        self._client = client

    def _row_to_transaction(self, row: sqlite3.Row) -> Transaction:
        """Convert a transactions row to a Transaction."""
        try:
            return Transaction.model_validate(
                {column: row[column] for column in TRANSACTION_COLUMNS}
            )
        except ValidationError as e:
            raise CorruptRecordError(
                f"Malformed transaction row {row['id']}: {e}"
            ) from e

    def _user_exists(self, conn: sqlite3.Connection, user_id: int) -> bool:
        row = conn.execute("SELECT 1 FROM users WHERE id = ?", (user_id,)).fetchone()
        return row is not None

    async def add_transaction(
        self,
        user_id: int,
        type: Union[TransactionType, str],
        amount: AmountInput,
        category: str,
        description: str,
        date: Union[datetime, date],
    ) -> int:
        """Validate and insert one transaction."""
        parsed_amount = parse_amount(amount)
        try:
            transaction_type = TransactionType(type)
        except ValueError as e:
            raise InvalidTransactionError(f"Unknown transaction type: {type!r}") from e

        try:
            with self._client.connection() as conn:
                if not self._user_exists(conn, user_id):
                    raise UnknownUserError(f"User does not exist: {user_id}")

                transaction = TransactionCreate(
                    user_id=user_id,
                    type=transaction_type,
                    amount=parsed_amount,
                    category=category,
                    description=description,
                    date=date,
                )

                cursor = conn.execute(
                    """
                    INSERT INTO transactions
                    (user_id, type, amount, category, description, date)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        transaction.user_id,
                        transaction.type.value,
                        str(transaction.amount),
                        transaction.category,
                        transaction.description,
                        format_timestamp(transaction.date),
                    ),
                )
                conn.commit()
                transaction_id = cursor.lastrowid
        except ValidationError as e:
            raise InvalidTransactionError(f"Invalid transaction: {e}") from e
        except sqlite3.IntegrityError as e:
            if "FOREIGN KEY" in str(e):
                raise UnknownUserError(f"User does not exist: {user_id}") from e
            raise StorageError(f"Failed to add transaction: {e}") from e
        except sqlite3.OperationalError as e:
            raise StorageUnavailableError(f"Failed to add transaction: {e}") from e
        except sqlite3.Error as e:
            raise StorageError(f"Failed to add transaction: {e}") from e

        logger.info(
            "transaction_added",
            transaction_id=transaction_id,
            user_id=user_id,
            type=transaction_type.value,
        )
        return transaction_id

    async def list_transactions(self, user_id: int) -> list[Transaction]:
        """All of a user's transactions, newest first, ties in insertion order."""
        try:
            with self._client.connection() as conn:
                rows = conn.execute(
                    f"""
                    SELECT {", ".join(TRANSACTION_COLUMNS)} FROM transactions
                    WHERE user_id = ?
                    ORDER BY date DESC, id ASC
                    """,
                    (user_id,),
                ).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to list transactions: {e}") from e

        return [self._row_to_transaction(row) for row in rows]
