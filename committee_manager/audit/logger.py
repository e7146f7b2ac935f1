"""
Audit Logger

DESIGN DECISION: Every mutation in the system is logged.
This provides:
1. Traceability of payments, payouts and membership changes
2. Debugging capability when the store rejects writes
3. History the owner can review after a restore

The audit logger:
- Is async to not block main flow
- Gracefully handles failures (doesn't crash the app if logging fails)
- Never records raw store error messages, only their class names
"""

from collections import deque
from typing import Optional

import structlog

from committee_manager.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
)
from committee_manager.services.storage import DocumentStore, StorageError


AUDIT_COLLECTION = "audit"
RECENT_EVENTS_LIMIT = 200


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


def get_logger(name: Optional[str] = None):
    """Module-level structured logger."""
    return structlog.get_logger(name)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The `audit` collection of the document store (if configured)
    """

    def __init__(
        self,
        storage: Optional[DocumentStore] = None,
        recent_limit: int = RECENT_EVENTS_LIMIT,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Document store for persistence.
                    If None, only logs locally.
            recent_limit: How many events `recent_events` keeps in memory
        """
        self._storage = storage
        self._logger = structlog.get_logger("committee_manager.audit")
        self._events: deque[AuditEvent] = deque(maxlen=recent_limit)

    @property
    def recent_events(self) -> list[AuditEvent]:
        """The latest events logged by this process, oldest first."""
        return list(self._events)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        self._events.append(event)
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                await self._storage.set(
                    AUDIT_COLLECTION, str(event.event_id), event.to_document()
                )
                return True
            except StorageError as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error_type=type(e).__name__,
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_change(
        self,
        event_type: AuditEventType,
        entity_type: str,
        entity_id: str,
        description: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log a successful ledger mutation."""
        event = AuditEventBuilder.ledger_change(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            details=details,
        )
        await self.log(event)

    async def log_persistence_failure(
        self,
        operation: str,
        entity_type: str,
        entity_id: Optional[str],
        error: Exception,
    ) -> None:
        """Log a write the store refused."""
        event = AuditEventBuilder.persistence_failed(
            operation=operation,
            entity_type=entity_type,
            entity_id=entity_id,
            error=error,
        )
        await self.log(event)

    async def log_unlock_failed(self, reason: str) -> None:
        await self.log(AuditEventBuilder.unlock_failed(reason))

    async def log_session_event(
        self,
        event_type: AuditEventType,
        description: str,
        details: Optional[dict] = None,
    ) -> None:
        await self.log(AuditEventBuilder.session_event(event_type, description, details))

    async def log_external_service_error(
        self,
        service: str,
        error: Exception,
    ) -> None:
        """Log external service error."""
        await self.log(AuditEventBuilder.external_service_error(service, error))
