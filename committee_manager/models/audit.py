"""
Audit Models for Committee Manager

Every mutation of committees, members, installments and session state
is logged for audit purposes. This provides:
1. Traceability of who paid what and when payouts happened
2. Debugging information when the store rejects a write
3. A way to reconstruct history after a restore

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Committees
    COMMITTEE_CREATED = "committee_created"
    COMMITTEE_UPDATED = "committee_updated"
    COMMITTEE_DELETED = "committee_deleted"
    MEMBER_ADDED_TO_COMMITTEE = "member_added_to_committee"
    MEMBER_REMOVED_FROM_COMMITTEE = "member_removed_from_committee"
    SHARE_REMOVED = "share_removed"
    PAYMENT_RECORDED = "payment_recorded"
    PAYOUT_TURN_UPDATED = "payout_turn_updated"

    # Members
    MEMBER_CREATED = "member_created"
    MEMBER_UPDATED = "member_updated"
    MEMBER_DELETED = "member_deleted"

    # Installments
    INSTALLMENT_CREATED = "installment_created"
    INSTALLMENT_UPDATED = "installment_updated"
    INSTALLMENT_CLOSED = "installment_closed"
    INSTALLMENT_DELETED = "installment_deleted"

    # Session
    SESSION_UNLOCKED = "session_unlocked"
    UNLOCK_FAILED = "unlock_failed"
    SESSION_LOCKED = "session_locked"
    CREDENTIAL_CHANGED = "credential_changed"
    SETTINGS_UPDATED = "settings_updated"

    # Data management
    BACKUP_EXPORTED = "backup_exported"
    BACKUP_RESTORED = "backup_restored"
    RESTORE_REJECTED = "restore_rejected"
    DATA_RESET = "data_reset"

    # Failures
    PERSISTENCE_FAILED = "persistence_failed"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'committee', 'member', 'installment')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_type: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_type": self.error_type,
            "is_user_action": self.is_user_action,
        }

    def to_document(self) -> dict[str, Any]:
        """Convert to a document for the `audit` collection."""
        return self.model_dump(mode="json")


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.ledger_change(
            AuditEventType.PAYMENT_RECORDED, "committee", committee_id, "..."
        )
        event = AuditEventBuilder.persistence_failed("update_committee", "committee", cid, exc)
    """

    @staticmethod
    def ledger_change(
        event_type: AuditEventType,
        entity_type: str,
        entity_id: str,
        description: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            details=details or {},
            is_user_action=True,
        )

    @staticmethod
    def persistence_failed(
        operation: str,
        entity_type: str,
        entity_id: Optional[str],
        error: Exception,
    ) -> AuditEvent:
        # Only the exception class is recorded; store messages may leak internals
        return AuditEvent(
            event_type=AuditEventType.PERSISTENCE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"Store rejected {operation}",
            details={"operation": operation},
            error_type=type(error).__name__,
        )

    @staticmethod
    def unlock_failed(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.UNLOCK_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="session",
            description="Unlock attempt rejected",
            details={"reason": reason},
            is_user_action=True,
        )

    @staticmethod
    def session_event(
        event_type: AuditEventType,
        description: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            entity_type="session",
            description=description,
            details=details or {},
        )

    @staticmethod
    def external_service_error(
        service: str,
        error: Exception,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_type=type(error).__name__,
            details={"service": service},
        )
