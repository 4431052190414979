"""
Audit Logger

DESIGN DECISION: Every significant account and transaction action is logged.
This provides:
1. Traceability of sign-ups, logins and recorded transactions
2. Debugging capability when storage fails
3. Login failure reasons that are visible to operators but never to users

The audit logger:
- Writes structured events to the local log only; the database holds
  users and transactions and nothing else
- Never receives passwords or password hashes
- Supports correlation IDs to trace related events
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from fintrack.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def configure_logging(level: str = "INFO", json_logs: bool = True) -> None:
    """
    Configure structlog on top of the standard library logger.

    Call once at startup; create_app_components does this from settings.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Events are rendered through structlog at a level matching their severity.
    Recent events are also kept in memory so the view can show them.
    """

    def __init__(self, history_size: int = 100):
        """
        Initialize audit logger.

        Args:
            history_size: How many recent events to keep in memory.
        """
        self._logger = structlog.get_logger("fintrack.audit")
        self._history: list[AuditEvent] = []
        self._history_size = history_size

    @property
    def recent_events(self) -> list[AuditEvent]:
        """Events logged so far, newest first."""
        return list(reversed(self._history))

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True once the event has been written.
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        self._history.append(event)
        if len(self._history) > self._history_size:
            del self._history[: len(self._history) - self._history_size]

        return True

    async def log_user_created(
        self,
        user_id: int,
        email: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a successful sign-up."""
        event = AuditEventBuilder.user_created(
            user_id=user_id,
            email=email,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_sign_up_rejected(
        self,
        email: str,
        reason: str,
        issues: Optional[list[dict]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a sign-up that was turned down."""
        event = AuditEventBuilder.sign_up_rejected(
            email=email,
            reason=reason,
            issues=issues,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_login(
        self,
        email: str,
        user_id: Optional[int],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a login attempt; user_id is None when it failed."""
        if user_id is None:
            event = AuditEventBuilder.login_failed(
                email=email,
                reason="invalid_credentials",
                correlation_id=correlation_id,
            )
        else:
            event = AuditEventBuilder.login_succeeded(
                user_id=user_id,
                correlation_id=correlation_id,
            )
        await self.log(event)

    async def log_transaction_added(
        self,
        transaction_id: int,
        user_id: int,
        transaction_type: str,
        amount: str,
        category: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a recorded transaction."""
        event = AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            user_id=user_id,
            transaction_type=transaction_type,
            amount=amount,
            category=category,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_transaction_rejected(
        self,
        user_id: int,
        reason: str,
        issues: Optional[list[dict]] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a transaction that was not recorded."""
        event = AuditEventBuilder.transaction_rejected(
            user_id=user_id,
            reason=reason,
            issues=issues,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a storage failure."""
        event = AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., sign-up).
    Pass it through all subsequent operations.
    """
    return uuid4()
