"""Session locking: auto-lock timer and unlock/credential guard."""

from committee_manager.session.auto_lock import AutoLockScheduler, AutoLockTimer, LockState
from committee_manager.session.guard import SessionGuard

__all__ = [
    "AutoLockScheduler",
    "AutoLockTimer",
    "LockState",
    "SessionGuard",
]
