"""
Tests for the SQLite storage layer.

Every test gets its own database file (see conftest.py).
"""

import asyncio
from datetime import date, datetime
from decimal import Decimal

import pytest

from fintrack.models.transaction import TransactionType
from fintrack.services.storage import (
    CorruptRecordError,
    DuplicateEmailError,
    InvalidAmountError,
    InvalidTransactionError,
    SQLiteClient,
    StorageUnavailableError,
    UnknownUserError,
    ensure_schema,
    parse_amount,
    table_names,
)


def add_user(user_storage, email="a@x.com", password="password1", name=None):
    return asyncio.run(user_storage.create_user(email, password, name))


def add_expense(transaction_storage, user_id, amount="10", when=date(2024, 3, 1), **kwargs):
    return asyncio.run(transaction_storage.add_transaction(
        user_id=user_id,
        type=kwargs.get("type", TransactionType.EXPENSE),
        amount=amount,
        category=kwargs.get("category", "food"),
        description=kwargs.get("description", "lunch"),
        date=when,
    ))


class TestSchema:
    """Tests for the schema manager."""

    def test_creates_exactly_two_tables(self, client):
        """Test that only users and transactions exist."""
        assert table_names(client) == ["transactions", "users"]

    def test_ensure_schema_is_idempotent(self, client, user_storage):
        """Test that a second call neither fails nor drops data."""
        add_user(user_storage)
        ensure_schema(client)
        ensure_schema(client)
        assert table_names(client) == ["transactions", "users"]
        assert asyncio.run(user_storage.get_user(1)) is not None

    def test_unreachable_database_is_unavailable(self, tmp_path):
        """Test that a path in a missing directory fails fatally."""
        client = SQLiteClient(
            path=str(tmp_path / "missing" / "fintrack.db"),
            connect_attempts=2,
            connect_wait_seconds=0,
        )
        with pytest.raises(StorageUnavailableError):
            ensure_schema(client)


class TestUserStorage:
    """Tests for SQLiteUserStorage."""

    def test_create_then_authenticate(self, user_storage):
        """Test that the created user can log in."""
        user_id = add_user(user_storage, name="Ann")
        user = asyncio.run(user_storage.authenticate("a@x.com", "password1"))
        assert user is not None
        assert user.id == user_id
        assert user.email == "a@x.com"
        assert user.name == "Ann"

    @pytest.mark.parametrize("email, name", [
        ("a@x.com", "n" * 101),
        ("a@x.com", "Ann " * 500),
        ("a@x.com ", None),
        (" a@x.com", "  Ann  "),
        ("Ünïcode@x.com", "Zoë"),
        ("a" * 300 + "@x.com", None),
    ])
    def test_stored_user_round_trips(self, user_storage, email, name):
        """Test that whatever create_user accepts comes back unchanged and can log in."""
        user_id = add_user(user_storage, email=email, name=name)

        user = asyncio.run(user_storage.authenticate(email, "password1"))
        assert user is not None
        assert user.id == user_id
        assert user.email == email
        assert user.name == name
        assert asyncio.run(user_storage.get_user(user_id)) == user

    def test_first_user_gets_id_one(self, user_storage):
        """Test that ids start at 1."""
        assert add_user(user_storage) == 1

    def test_authenticated_user_has_no_hash(self, user_storage):
        """Test that the hash never leaves storage."""
        add_user(user_storage)
        user = asyncio.run(user_storage.authenticate("a@x.com", "password1"))
        dumped = user.model_dump()
        assert "password_hash" not in dumped
        assert "password" not in dumped

    def test_password_is_stored_hashed(self, client, user_storage):
        """Test that the plaintext never reaches the database."""
        add_user(user_storage)
        with client.connection() as conn:
            stored = conn.execute("SELECT password_hash FROM users").fetchone()[0]
        assert stored != "password1"
        assert "password1" not in stored

    def test_duplicate_email_rejected(self, client, user_storage):
        """Test that the second sign-up with an email fails and adds nothing."""
        add_user(user_storage)
        with pytest.raises(DuplicateEmailError):
            add_user(user_storage, password="different1")
        with client.connection() as conn:
            count = conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]
        assert count == 1

    def test_wrong_password_returns_none(self, user_storage):
        """Test that a wrong password is a plain None."""
        add_user(user_storage)
        assert asyncio.run(user_storage.authenticate("a@x.com", "wrong-pass")) is None

    def test_unknown_email_returns_none(self, user_storage):
        """Test that an unknown email looks the same as a wrong password."""
        add_user(user_storage)
        assert asyncio.run(user_storage.authenticate("b@x.com", "password1")) is None

    def test_email_match_is_exact(self, user_storage):
        """Test that emails are matched as stored."""
        add_user(user_storage)
        assert asyncio.run(user_storage.authenticate("A@x.com", "password1")) is None

    def test_corrupt_user_row_raises(self, client, user_storage, hasher):
        """Test that a user row that cannot form a User is reported on login."""
        with client.connection() as conn:
            conn.execute(
                "INSERT INTO users (id, email, password_hash) VALUES (0, 'a@x.com', ?)",
                (hasher.hash("password1"),),
            )
            conn.commit()

        with pytest.raises(CorruptRecordError):
            asyncio.run(user_storage.authenticate("a@x.com", "password1"))

    def test_get_user(self, user_storage):
        """Test lookup by id."""
        user_id = add_user(user_storage)
        assert asyncio.run(user_storage.get_user(user_id)).email == "a@x.com"
        assert asyncio.run(user_storage.get_user(999)) is None


class TestTransactionStorage:
    """Tests for SQLiteTransactionStorage."""

    def test_add_and_list(self, user_storage, transaction_storage):
        """Test that a recorded transaction comes back intact."""
        user_id = add_user(user_storage)
        tx_id = add_expense(transaction_storage, user_id, amount="42.50")

        [tx] = asyncio.run(transaction_storage.list_transactions(user_id))
        assert tx.id == tx_id
        assert tx.user_id == user_id
        assert tx.type == TransactionType.EXPENSE
        assert tx.amount == Decimal("42.50")
        assert tx.category == "food"
        assert tx.description == "lunch"
        assert tx.date == datetime(2024, 3, 1)

    @pytest.mark.parametrize("category, description", [
        ("food", "x" * 201),
        ("c" * 51, "lunch"),
        ("c" * 500, "d" * 5000),
        ("  food  ", "  padded  "),
        ("café", "Dîner à deux 🍷"),
        ("food", ""),
    ])
    def test_stored_transaction_round_trips(
        self, user_storage, transaction_storage, category, description
    ):
        """Test that any accepted category and description come back unchanged."""
        user_id = add_user(user_storage)
        tx_id = add_expense(
            transaction_storage, user_id, category=category, description=description
        )

        [tx] = asyncio.run(transaction_storage.list_transactions(user_id))
        assert tx.id == tx_id
        assert tx.category == category
        assert tx.description == description

    def test_empty_category_rejected(self, user_storage, transaction_storage):
        """Test that an unusable field is a typed storage error."""
        user_id = add_user(user_storage)
        with pytest.raises(InvalidTransactionError):
            add_expense(transaction_storage, user_id, category="")
        assert asyncio.run(transaction_storage.list_transactions(user_id)) == []

    def test_unparseable_date_rejected(self, user_storage, transaction_storage):
        user_id = add_user(user_storage)
        with pytest.raises(InvalidTransactionError):
            add_expense(transaction_storage, user_id, when="not a date")

    def test_amounts_are_exact(self, user_storage, transaction_storage):
        """Test that amounts survive storage without float drift."""
        user_id = add_user(user_storage)
        for _ in range(3):
            add_expense(transaction_storage, user_id, amount="0.10")
        transactions = asyncio.run(transaction_storage.list_transactions(user_id))
        assert sum(t.amount for t in transactions) == Decimal("0.30")

    def test_empty_list_for_new_user(self, user_storage, transaction_storage):
        """Test that no transactions is an empty list, not an error."""
        user_id = add_user(user_storage)
        assert asyncio.run(transaction_storage.list_transactions(user_id)) == []

    def test_list_is_newest_first(self, user_storage, transaction_storage):
        """Test ordering: date descending, same date in insertion order."""
        user_id = add_user(user_storage)
        first = add_expense(transaction_storage, user_id, when=date(2024, 3, 1))
        older = add_expense(transaction_storage, user_id, when=date(2024, 2, 1))
        same_day = add_expense(transaction_storage, user_id, when=date(2024, 3, 1))
        newest = add_expense(transaction_storage, user_id, when=datetime(2024, 3, 9, 18, 0))

        ids = [t.id for t in asyncio.run(transaction_storage.list_transactions(user_id))]
        assert ids == [newest, first, same_day, older]

    def test_list_is_per_user(self, user_storage, transaction_storage):
        """Test that users only see their own transactions."""
        ann = add_user(user_storage, email="ann@x.com")
        bob = add_user(user_storage, email="bob@x.com")
        add_expense(transaction_storage, ann)
        add_expense(transaction_storage, ann)
        add_expense(transaction_storage, bob)

        assert len(asyncio.run(transaction_storage.list_transactions(ann))) == 2
        assert len(asyncio.run(transaction_storage.list_transactions(bob))) == 1

    def test_unknown_user_rejected(self, transaction_storage):
        """Test that transactions must belong to an existing user."""
        with pytest.raises(UnknownUserError):
            add_expense(transaction_storage, 42)

    @pytest.mark.parametrize("amount", [-5, "-5", "abc", "", "NaN", float("inf"), True, None])
    def test_invalid_amount_rejected(self, user_storage, transaction_storage, amount):
        """Test that only finite, non-negative numbers are accepted."""
        user_id = add_user(user_storage)
        with pytest.raises(InvalidAmountError):
            add_expense(transaction_storage, user_id, amount=amount)
        assert asyncio.run(transaction_storage.list_transactions(user_id)) == []

    def test_zero_amount_accepted(self, user_storage, transaction_storage):
        """Test that zero is a valid amount."""
        user_id = add_user(user_storage)
        add_expense(transaction_storage, user_id, amount=0)
        [tx] = asyncio.run(transaction_storage.list_transactions(user_id))
        assert tx.amount == Decimal("0")

    def test_unknown_type_rejected(self, user_storage, transaction_storage):
        """Test that the type must be income or expense."""
        user_id = add_user(user_storage)
        with pytest.raises(InvalidTransactionError):
            add_expense(transaction_storage, user_id, type="transfer")

    def test_corrupt_amount_raises(self, client, user_storage, transaction_storage):
        """Test that a malformed stored amount is reported, not skipped."""
        user_id = add_user(user_storage)
        add_expense(transaction_storage, user_id)
        with client.connection() as conn:
            conn.execute(
                "INSERT INTO transactions (user_id, type, amount, category, description, date) "
                "VALUES (?, 'expense', 'abc', 'food', 'x', '2024-03-01T00:00:00.000000')",
                (user_id,),
            )
            conn.commit()

        with pytest.raises(CorruptRecordError):
            asyncio.run(transaction_storage.list_transactions(user_id))

    def test_corrupt_date_raises(self, client, user_storage, transaction_storage):
        """Test that a malformed stored date is reported."""
        user_id = add_user(user_storage)
        with client.connection() as conn:
            conn.execute(
                "INSERT INTO transactions (user_id, type, amount, category, description, date) "
                "VALUES (?, 'expense', '1.00', 'food', 'x', 'yesterday')",
                (user_id,),
            )
            conn.commit()

        with pytest.raises(CorruptRecordError):
            asyncio.run(transaction_storage.list_transactions(user_id))


class TestParseAmount:
    """Tests for parse_amount."""

    def test_parses_common_inputs(self):
        """Test strings, ints, floats and Decimals."""
        assert parse_amount("42.50") == Decimal("42.50")
        assert parse_amount(" 7 ") == Decimal("7")
        assert parse_amount(3) == Decimal("3")
        assert parse_amount(0.1) == Decimal("0.1")
        assert parse_amount(Decimal("1.23")) == Decimal("1.23")

    def test_negative_zero_is_zero(self):
        """Test that -0 is accepted and normalized."""
        assert parse_amount("-0") == Decimal("0")
        assert not parse_amount("-0").is_signed()

    def test_invalid_amount_is_value_error(self):
        """Test that callers can catch InvalidAmountError as ValueError."""
        with pytest.raises(ValueError):
            parse_amount("-1")
