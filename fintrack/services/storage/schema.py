"""
Schema Manager

Creates the two tables fintrack owns. Every statement is
CREATE ... IF NOT EXISTS, so calling ensure_schema repeatedly is harmless.
It must run before any repository call.
"""

import sqlite3
from typing import TYPE_CHECKING

import structlog

from fintrack.services.storage.interface import StorageError, StorageUnavailableError

if TYPE_CHECKING:
    from fintrack.services.storage.sqlite import SQLiteClient


logger = structlog.get_logger(__name__)


USERS_TABLE = """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        email TEXT UNIQUE NOT NULL,
        password_hash TEXT NOT NULL,
        name TEXT
    )
"""

# amount is the Decimal's text form; date is naive UTC ISO-8601 with
# microseconds so that text order is chronological order.
TRANSACTIONS_TABLE = """
    CREATE TABLE IF NOT EXISTS transactions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        type TEXT NOT NULL CHECK(type IN ('income', 'expense')),
        amount TEXT NOT NULL,
        category TEXT NOT NULL,
        description TEXT NOT NULL,
        date TEXT NOT NULL,
        FOREIGN KEY (user_id) REFERENCES users (id)
    )
"""

TRANSACTIONS_INDEX = """
    CREATE INDEX IF NOT EXISTS idx_transactions_user_date
    ON transactions (user_id, date)
"""

SCHEMA_STATEMENTS = (USERS_TABLE, TRANSACTIONS_TABLE, TRANSACTIONS_INDEX)


def ensure_schema(client: "SQLiteClient") -> None:
    """
    Create the users and transactions tables if they are missing.

    Raises:
        StorageUnavailableError: If the database cannot be opened or
            written (missing directory, read-only file). Fatal at startup.
    """
    try:
        with client.connection() as conn:
            for statement in SCHEMA_STATEMENTS:
                conn.execute(statement)
            conn.commit()
    except StorageError:
        raise
    except sqlite3.OperationalError as e:
        logger.error("schema_failed", database=client.path, error=str(e))
        raise StorageUnavailableError(
            f"Cannot initialise database at {client.path}: {e}"
        ) from e
    except sqlite3.Error as e:
        raise StorageError(f"Failed to create schema: {e}") from e

    logger.debug("schema_ensured", database=client.path)


def table_names(client: "SQLiteClient") -> list[str]:
    """Names of the user tables present in the database, sorted."""
    with client.connection() as conn:
        rows = conn.execute(
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        ).fetchall()
    return [row["name"] for row in rows]
