"""
Audit Logger

DESIGN DECISION: Every write a user makes is logged.
This provides:
1. Traceability of changes to money records
2. Debugging capability
3. A history the user can be shown

The audit logger:
- Always writes a structured local log line
- Persists to the audit collection when storage is configured
- Never lets an audit failure break the request that caused it
"""

from decimal import Decimal
from typing import Optional

import structlog

from edufin.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from edufin.services.storage import AuditStorageInterface


# Configure structlog for local logging
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
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit collection (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("edufin.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_user_registered(self, user_id: str, email: str) -> None:
        await self.log(AuditEventBuilder.user_registered(user_id, email))

    async def log_user_logged_in(self, user_id: str) -> None:
        await self.log(AuditEventBuilder.user_logged_in(user_id))

    async def log_login_failed(self, email: str, reason: str) -> None:
        await self.log(AuditEventBuilder.login_failed(email, reason))

    async def log_expense_created(
        self,
        expense_id: str,
        user_id: str,
        amount: Decimal,
        category: str,
    ) -> None:
        event = AuditEventBuilder.expense_created(
            expense_id=expense_id,
            user_id=user_id,
            amount=str(amount),
            category=category,
        )
        await self.log(event)

    async def log_expense_updated(
        self,
        expense_id: str,
        user_id: str,
        fields: list[str],
    ) -> None:
        await self.log(AuditEventBuilder.expense_updated(expense_id, user_id, fields))

    async def log_expense_deleted(self, expense_id: str, user_id: str) -> None:
        await self.log(AuditEventBuilder.expense_deleted(expense_id, user_id))

    async def log_summary_computed(
        self,
        user_id: str,
        date_from: Optional[str],
        date_to: Optional[str],
        expense_count: int,
    ) -> None:
        event = AuditEventBuilder.summary_computed(
            user_id=user_id,
            date_from=date_from,
            date_to=date_to,
            expense_count=expense_count,
        )
        await self.log(event)

    async def log_goal_created(self, goal_id: str, user_id: str, item_name: str) -> None:
        await self.log(AuditEventBuilder.goal_created(goal_id, user_id, item_name))

    async def log_goal_updated(self, goal_id: str, user_id: str, fields: list[str]) -> None:
        await self.log(AuditEventBuilder.goal_updated(goal_id, user_id, fields))

    async def log_goal_deleted(self, goal_id: str, user_id: str) -> None:
        await self.log(AuditEventBuilder.goal_deleted(goal_id, user_id))

    async def log_goal_purchased(self, goal_id: str, user_id: str, price: Decimal) -> None:
        await self.log(AuditEventBuilder.goal_purchased(goal_id, user_id, str(price)))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        user_id: Optional[str] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            user_id=user_id,
        )
        await self.log(event)
