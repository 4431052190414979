"""
Main Orchestrator for fintrack

This module ties together all the components and defines the
end-to-end flows for:
1. Accounts (sign up → validate → create user → first login; login)
2. Transactions (form → validate → record → re-fetch list)
3. Reports (list → dashboard / monthly breakdown)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Form input is validated before it reaches storage
- Login failures look identical to the caller
- Every account and transaction action is audited

The view layer only ever talks to these flows.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

from fintrack.audit import AuditLogger, configure_logging, create_correlation_id
from fintrack.config import Settings, get_settings
from fintrack.models.reports import DashboardSummary, MonthlyBreakdown
from fintrack.models.transaction import Transaction, TransactionType
from fintrack.models.user import User
from fintrack.models.validation import ValidationResult
from fintrack.queries import build_dashboard, build_monthly_breakdown, search_transactions
from fintrack.services.security import PasswordHasher
from fintrack.services.storage import (
    DuplicateEmailError,
    InvalidAmountError,
    InvalidTransactionError,
    SQLiteClient,
    SQLiteTransactionStorage,
    SQLiteUserStorage,
    StorageError,
    TransactionStorageInterface,
    UnknownUserError,
    UserStorageInterface,
    ensure_schema,
    parse_amount,
)
from fintrack.validation import SignUpValidator, TransactionValidator, get_user_friendly_summary


class FlowError(Exception):
    """Base exception for flow-level failures."""
    pass


class InputRejectedError(FlowError):
    """Form input failed validation; nothing was stored."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__(get_user_friendly_summary(result))


class AuthenticationFailedError(FlowError):
    """Email or password is wrong. Which one is deliberately not said."""

    def __init__(self):
        super().__init__("Invalid email or password")


def _issues_for_audit(result: ValidationResult) -> list[dict]:
    return [
        {"field": i.field, "type": i.issue_type, "message": i.message}
        for i in result.issues
    ]


class AccountFlow:
    """
    Orchestrates sign-up and login.

    Flow (sign-up):
    1. Validate email format and password length
    2. Create the user (storage rejects duplicate emails)
    3. Return the new user, logged in
    """

    def __init__(
        self,
        user_storage: UserStorageInterface,
        validator: Optional[SignUpValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._user_storage = user_storage
        self._validator = validator or SignUpValidator()
        self._audit_logger = audit_logger

    async def sign_up(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> User:
        """
        Register a new user and return it.

        Raises:
            InputRejectedError: If the email or password fails validation
            DuplicateEmailError: If the email is already registered
        """
        correlation_id = correlation_id or create_correlation_id()
        email = (email or "").strip()
        name = (name or "").strip() or None

        result = self._validator.validate(email, password, name)
        if not result.is_valid:
            if self._audit_logger:
                await self._audit_logger.log_sign_up_rejected(
                    email=email,
                    reason="invalid_input",
                    issues=_issues_for_audit(result),
                    correlation_id=correlation_id,
                )
            raise InputRejectedError(result)

        try:
            user_id = await self._user_storage.create_user(email, password, name)
        except DuplicateEmailError:
            if self._audit_logger:
                await self._audit_logger.log_sign_up_rejected(
                    email=email,
                    reason="duplicate_email",
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_user_created(
                user_id=user_id,
                email=email,
                correlation_id=correlation_id,
            )

        user = await self._user_storage.get_user(user_id)
        if user is None:
            raise StorageError(f"User {user_id} vanished after creation")
        return user

    async def login(
        self,
        email: str,
        password: str,
        raise_on_failure: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[User]:
        """
        Check credentials.

        Returns:
            The user, or None when the credentials are wrong.

        Raises:
            AuthenticationFailedError: Instead of returning None, when
                raise_on_failure is set.
        """
        correlation_id = correlation_id or create_correlation_id()
        email = (email or "").strip()

        user = await self._user_storage.authenticate(email, password)

        if self._audit_logger:
            await self._audit_logger.log_login(
                email=email,
                user_id=user.id if user else None,
                correlation_id=correlation_id,
            )

        if user is None and raise_on_failure:
            raise AuthenticationFailedError()
        return user

    async def get_user(self, user_id: int) -> Optional[User]:
        return await self._user_storage.get_user(user_id)


class TransactionFlow:
    """
    Orchestrates recording and reporting on transactions.

    The view calls list_transactions once per user, keeps the result,
    and re-filters it locally for search. After add_transaction it
    fetches the whole list again; there is no incremental update.
    """

    def __init__(
        self,
        transaction_storage: TransactionStorageInterface,
        validator: Optional[TransactionValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        starting_balance: Optional[Decimal] = None,
        trailing_months: Optional[int] = None,
        recent_limit: Optional[int] = None,
    ):
        app_settings = get_settings().app
        self._transaction_storage = transaction_storage
        self._validator = validator or TransactionValidator()
        self._audit_logger = audit_logger
        self._starting_balance = (
            starting_balance if starting_balance is not None else app_settings.starting_balance
        )
        self._trailing_months = trailing_months or app_settings.trailing_months
        self._recent_limit = (
            recent_limit if recent_limit is not None else app_settings.recent_transactions_limit
        )

    @property
    def starting_balance(self) -> Decimal:
        return self._starting_balance

    async def add_transaction(
        self,
        user_id: int,
        type: Union[TransactionType, str],
        amount,
        category: str,
        description: str,
        date: Union[datetime, date],
        correlation_id: Optional[UUID] = None,
    ) -> int:
        """
        Validate the form and record the transaction.

        Returns:
            The new transaction's id

        Raises:
            InputRejectedError: If the form fails validation
            InvalidAmountError: If the amount is not a finite, non-negative number
            InvalidTransactionError: If storage cannot form a transaction from the fields
            UnknownUserError: If the user does not exist
            StorageError: If the insert fails
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            # A bad amount is reported as InvalidAmountError at every layer
            parsed_amount = parse_amount(amount)

            result = self._validator.validate(type, parsed_amount, category, description, date)
            if not result.is_valid:
                if self._audit_logger:
                    await self._audit_logger.log_transaction_rejected(
                        user_id=user_id,
                        reason="invalid_input",
                        issues=_issues_for_audit(result),
                        correlation_id=correlation_id,
                    )
                raise InputRejectedError(result)

            transaction_id = await self._transaction_storage.add_transaction(
                user_id=user_id,
                type=type,
                amount=parsed_amount,
                category=category.strip(),
                description=description.strip(),
                date=date,
            )
        except (InvalidAmountError, InvalidTransactionError, UnknownUserError) as e:
            if self._audit_logger:
                await self._audit_logger.log_transaction_rejected(
                    user_id=user_id,
                    reason=_rejection_reason(e),
                    correlation_id=correlation_id,
                )
            raise
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_storage_error(
                    operation="add_transaction",
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_transaction_added(
                transaction_id=transaction_id,
                user_id=user_id,
                transaction_type=TransactionType(type).value,
                amount=str(parsed_amount),
                category=category.strip(),
                correlation_id=correlation_id,
            )
        return transaction_id

    async def list_transactions(self, user_id: int) -> list[Transaction]:
        """All of a user's transactions, most recent first."""
        return await self._transaction_storage.list_transactions(user_id)

    def dashboard(
        self,
        transactions: list[Transaction],
        reference_date: Optional[date] = None,
        query: Optional[str] = None,
    ) -> DashboardSummary:
        """Dashboard figures over the (optionally searched) transaction list."""
        return build_dashboard(
            search_transactions(transactions, query),
            reference_date or date.today(),
            starting_balance=self._starting_balance,
            months=self._trailing_months,
            recent_limit=self._recent_limit,
        )

    def monthly_breakdown(
        self,
        transactions: list[Transaction],
        reference_date: Optional[date] = None,
    ) -> MonthlyBreakdown:
        """Spending breakdown for the reference month (default: this month)."""
        return build_monthly_breakdown(transactions, reference_date or date.today())


def _rejection_reason(error: Exception) -> str:
    """Audit reason for a rejected transaction, e.g. 'invalid_amount'."""
    return {
        InvalidAmountError: "invalid_amount",
        InvalidTransactionError: "invalid_transaction",
        UnknownUserError: "unknown_user",
    }.get(type(error), "storage_error")


def create_app_components(
    settings: Optional[Settings] = None,
    database_path: Optional[str] = None,
    hasher: Optional[PasswordHasher] = None,
) -> tuple[AccountFlow, TransactionFlow, SQLiteClient]:
    """
    Factory function to create all application components.

    Ensures the schema before returning, so a database that cannot be
    opened or written stops startup with StorageUnavailableError.

    Args:
        settings: Settings to use (default: get_settings())
        database_path: Overrides the configured database path
        hasher: Password hasher (default: configured iteration count)

    Returns:
        (account_flow, transaction_flow, sqlite_client)
    """
    settings = settings or get_settings()
    app_settings = settings.app
    security_settings = settings.security

    configure_logging(app_settings.log_level, app_settings.json_logs)

    client = SQLiteClient.from_settings(settings.database)
    if database_path is not None:
        client = SQLiteClient(
            path=database_path,
            timeout_seconds=settings.database.timeout_seconds,
            connect_attempts=settings.database.connect_attempts,
            connect_wait_seconds=settings.database.connect_wait_seconds,
        )
    ensure_schema(client)

    audit_logger = AuditLogger()
    hasher = hasher or PasswordHasher(security_settings.hash_iterations)

    account_flow = AccountFlow(
        user_storage=SQLiteUserStorage(client, hasher),
        validator=SignUpValidator(security_settings.password_min_length),
        audit_logger=audit_logger,
    )
    transaction_flow = TransactionFlow(
        transaction_storage=SQLiteTransactionStorage(client),
        audit_logger=audit_logger,
        starting_balance=app_settings.starting_balance,
        trailing_months=app_settings.trailing_months,
        recent_limit=app_settings.recent_transactions_limit,
    )

    return account_flow, transaction_flow, client
