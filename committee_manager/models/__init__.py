"""
Data Models Package

This package contains all Pydantic models used in Committee Manager.
All data flowing through the system must conform to these schemas.
"""

from committee_manager.models.committee import (
    Committee,
    CommitteePayment,
    CommitteeType,
    Member,
    PaymentStatus,
    PayoutMethod,
    PayoutTurn,
)
from committee_manager.models.installment import (
    Installment,
    InstallmentPayment,
    InstallmentStatus,
    derive_installment_status,
)
from committee_manager.models.notification import (
    Notification,
    NotificationType,
)
from committee_manager.models.preferences import (
    AppPreferences,
    AuthMethod,
    Language,
    PinLength,
    Theme,
    UserProfile,
)
from committee_manager.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Committee models
    "Committee",
    "CommitteePayment",
    "CommitteeType",
    "Member",
    "PaymentStatus",
    "PayoutMethod",
    "PayoutTurn",
    # Installment models
    "Installment",
    "InstallmentPayment",
    "InstallmentStatus",
    "derive_installment_status",
    # Notifications
    "Notification",
    "NotificationType",
    # Preferences
    "AppPreferences",
    "AuthMethod",
    "Language",
    "PinLength",
    "Theme",
    "UserProfile",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
