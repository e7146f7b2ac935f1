"""
Application Wiring for Committee Manager

This module builds every component around one AppState and one document
store, and defines the application lifecycle:
1. start    (load state from the store, lock the session)
2. refresh  (derive overdue / upcoming alerts after ledger changes)
3. shutdown (cancel timers, drop entity state)

DESIGN DECISION: Components never construct their own collaborators
from globals. They all receive the same state, store and audit logger
from `create_app_components`, which is also how tests assemble them.
"""

import random
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from pydantic import ValidationError as SettingsValidationError

from committee_manager.agents import CommitteeSummaryAgent
from committee_manager.audit import AuditLogger, get_logger
from committee_manager.backup import BackupService
from committee_manager.config import AppSettings, get_settings
from committee_manager.ledger import (
    CommitteeLedger,
    InstallmentLedger,
    MemberDirectory,
    NotificationCenter,
    NotificationDeriver,
)
from committee_manager.models import AppPreferences, Notification
from committee_manager.services.storage import (
    DocumentStore,
    GoogleSheetsClient,
    GoogleSheetsDocumentStore,
    InMemoryDocumentStore,
    StorageError,
)
from committee_manager.session import AutoLockScheduler, AutoLockTimer, SessionGuard
from committee_manager.state import AppState


logger = get_logger(__name__)


@dataclass
class AppComponents:
    """Everything one running application needs, sharing one state and store."""

    state: AppState
    store: DocumentStore
    audit_logger: AuditLogger
    notifications: NotificationCenter
    committees: CommitteeLedger
    members: MemberDirectory
    installments: InstallmentLedger
    session: SessionGuard
    timer: AutoLockTimer
    scheduler: AutoLockScheduler
    backup: BackupService
    summary_agent: CommitteeSummaryAgent

    async def start(self) -> None:
        """Load all data and settings; the session starts locked."""
        await self.state.initialize(self.store)
        self.state.is_locked = True
        logger.info(
            "app_started",
            committees=len(self.state.committees),
            members=len(self.state.members),
            installments=len(self.state.installments),
        )

    def refresh_alerts(self, today: Optional[date] = None) -> list[Notification]:
        """Derive overdue and upcoming-payout alerts; returns the newly added ones."""
        return self.notifications.derive_alerts(today)

    def shutdown(self) -> None:
        """End the session: cancel the lock timer and drop entity state."""
        self.scheduler.cancel()
        self.timer.lock()
        self.state.teardown()


def _connect_store(use_storage: bool) -> DocumentStore:
    if not use_storage:
        return InMemoryDocumentStore()
    try:
        return GoogleSheetsDocumentStore(GoogleSheetsClient())
    except (SettingsValidationError, StorageError) as e:
        # Storage not configured - continue without it
        logger.warning("storage_not_configured", error_type=type(e).__name__)
        return InMemoryDocumentStore()


def create_app_components(
    store: Optional[DocumentStore] = None,
    use_storage: bool = True,
    settings: Optional[AppSettings] = None,
    summary_agent: Optional[CommitteeSummaryAgent] = None,
    rng: Optional[random.Random] = None,
    clock: Optional[Callable[[], float]] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        store: Document store to use. When omitted, Google Sheets is tried
               (if use_storage) and the in-memory store is the fallback.
        use_storage: Whether to try the Google Sheets store.
                    Set to False for testing without storage.
        settings: Application settings; loaded from the environment if omitted
        summary_agent: Pre-built AI agent (tests pass an offline one)
        rng: Random source for Random payout order
        clock: Monotonic clock for the auto-lock timer

    Returns:
        AppComponents sharing one AppState and one store
    """
    settings = settings or get_settings().app
    store = store if store is not None else _connect_store(use_storage)
    audit_logger = AuditLogger(store if use_storage else None)

    state = AppState(preferences=AppPreferences(app_pin=settings.default_app_pin))
    notifications = NotificationCenter(
        state,
        NotificationDeriver(
            period_length_days=settings.period_length_days,
            grace_days=settings.overdue_grace_days,
            upcoming_days=settings.upcoming_payout_days,
        ),
    )

    timer_kwargs = {"clock": clock} if clock else {}
    timer = AutoLockTimer(
        window_seconds=settings.auto_lock_window_seconds,
        warning_seconds=settings.auto_lock_warning_seconds,
        **timer_kwargs,
    )
    scheduler = AutoLockScheduler(timer)

    return AppComponents(
        state=state,
        store=store,
        audit_logger=audit_logger,
        notifications=notifications,
        committees=CommitteeLedger(state, store, notifications, audit_logger, settings, rng),
        members=MemberDirectory(state, store, audit_logger, settings),
        installments=InstallmentLedger(state, store, notifications, audit_logger),
        session=SessionGuard(state, store, timer, scheduler, audit_logger),
        timer=timer,
        scheduler=scheduler,
        backup=BackupService(state, store, audit_logger),
        summary_agent=summary_agent or CommitteeSummaryAgent(audit_logger=audit_logger),
    )
