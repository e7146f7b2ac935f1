"""Validation package."""

from committee_manager.validation.validator import (
    BACKUP_KEYS,
    BackupValidator,
    PaymentValidator,
    PinChangeValidator,
)

__all__ = [
    "BACKUP_KEYS",
    "BackupValidator",
    "PaymentValidator",
    "PinChangeValidator",
]
