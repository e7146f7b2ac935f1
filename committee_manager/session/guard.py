"""
Session Guard

Unlocking, locking and every change to the credential and app preferences.

DESIGN DECISION: The store is authoritative for the credential.
`unlock_app` re-reads `settings/app` before comparing, so a PIN changed
on another device (or a stale local copy) never locks the owner out.

DESIGN DECISION: Preference setters persist with merge first and update
local state only after the store confirms.
"""

import hmac
from typing import Any, Optional

from pydantic import ValidationError as ModelValidationError

from committee_manager.audit import AuditLogger, get_logger
from committee_manager.i18n import translate
from committee_manager.models import (
    AppPreferences,
    AuditEventType,
    AuthMethod,
    Language,
    PinLength,
    Theme,
    UserProfile,
)
from committee_manager.services.storage import DocumentStore, StorageError
from committee_manager.session.auto_lock import AutoLockScheduler, AutoLockTimer
from committee_manager.state import APP_SETTINGS_DOC, PROFILE_DOC, SETTINGS, AppState
from committee_manager.validation import PinChangeValidator


logger = get_logger(__name__)


class SessionGuard:
    """Owns the locked/unlocked state of the application."""

    def __init__(
        self,
        state: AppState,
        store: DocumentStore,
        timer: AutoLockTimer,
        scheduler: Optional[AutoLockScheduler] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._state = state
        self._store = store
        self._timer = timer
        self._scheduler = scheduler
        self._audit = audit_logger or AuditLogger()

        self._timer.on_lock = self._handle_auto_lock

    @property
    def is_locked(self) -> bool:
        return self._state.is_locked

    # =========================================================================
    # LOCK / UNLOCK
    # =========================================================================

    async def unlock_app(self, pin: str) -> bool:
        """
        Compare `pin` against the credential stored in `settings/app`.

        The stored document is fetched again on every attempt and refreshes
        the local preferences before the comparison.

        Returns:
            True if unlocked; False on mismatch or when the store fails
        """
        if not await self._refresh_credential("unlock_app"):
            await self._audit.log_unlock_failed("settings_unavailable")
            return False

        if not self._matches_credential(pin):
            await self._audit.log_unlock_failed("credential_mismatch")
            return False

        self._state.is_locked = False
        if self._scheduler:
            self._scheduler.start()
        else:
            self._timer.start()

        await self._audit.log_session_event(AuditEventType.SESSION_UNLOCKED, "Session unlocked")
        return True

    async def lock_app(self) -> None:
        self._state.is_locked = True
        self._timer.lock()
        if self._scheduler:
            self._scheduler.cancel()
        await self._audit.log_session_event(AuditEventType.SESSION_LOCKED, "Session locked")

    def record_activity(self) -> None:
        """Forward a user activity event to the timer; ignored while locked."""
        if self._state.is_locked:
            return
        if self._scheduler:
            self._scheduler.record_activity()
        else:
            self._timer.record_activity()

    def _handle_auto_lock(self) -> None:
        self._state.is_locked = True
        logger.info("auto_lock_engaged")

    async def _refresh_credential(self, operation: str) -> bool:
        """Reload `settings/app` into the local preferences. False when the store fails."""
        try:
            doc = await self._store.get(SETTINGS, APP_SETTINGS_DOC)
            if doc:
                self._state.preferences = AppPreferences.model_validate(
                    {**self._state.preferences.to_document(), **{k: v for k, v in doc.items() if k != "id"}}
                )
        except (StorageError, ModelValidationError) as e:
            logger.error("settings_fetch_failed", operation=operation, error_type=type(e).__name__)
            return False
        return True

    def _matches_credential(self, candidate: str) -> bool:
        return hmac.compare_digest(candidate.encode("utf-8"), self._state.preferences.app_pin.encode("utf-8"))

    # =========================================================================
    # CREDENTIAL
    # =========================================================================

    async def update_app_pin(self, current: str, new: str) -> bool:
        """Replace the credential after checking the current one against the store. Never raises."""
        if not await self._refresh_credential("update_app_pin"):
            return False
        if not self._matches_credential(current):
            return False
        try:
            await self.force_update_app_pin(new)
        except StorageError:
            return False
        return True

    async def force_update_app_pin(self, new: str) -> None:
        """
        Replace the credential without checking the current one.

        Raises:
            StorageError: If the store rejects the write
        """
        try:
            await self._store.set(SETTINGS, APP_SETTINGS_DOC, {"app_pin": new}, merge=True)
        except StorageError as e:
            await self._audit.log_persistence_failure("force_update_app_pin", "settings", APP_SETTINGS_DOC, e)
            raise

        self._state.preferences = self._state.preferences.model_copy(update={"app_pin": new})
        await self._audit.log_session_event(AuditEventType.CREDENTIAL_CHANGED, "Credential changed")

    async def change_pin(
        self,
        current: str,
        new: str,
        confirmation: str,
        auth_method: Optional[AuthMethod] = None,
        pin_length: Optional[PinLength] = None,
    ) -> tuple[bool, str]:
        """
        Validate and store a new PIN or password.

        `auth_method` and `pin_length` default to the current preferences;
        when given they are stored together with the new credential.

        Returns:
            (success, localized message)
        """
        if not await self._refresh_credential("change_pin"):
            return False, translate("genericError", self._state.preferences.language)

        language = self._state.preferences.language
        method = auth_method or self._state.preferences.auth_method
        length = pin_length or self._state.preferences.pin_length

        error = PinChangeValidator.validate(new, confirmation, method, length, language)
        if error:
            return False, error

        if not self._matches_credential(current):
            key = "currentPinIncorrect" if self._state.preferences.auth_method == AuthMethod.PIN else "currentPasswordIncorrect"
            return False, translate(key, language)

        fields: dict[str, Any] = {"app_pin": new, "auth_method": method.value}
        if method == AuthMethod.PIN:
            fields["pin_length"] = int(length)

        if not await self._save_preferences("change_pin", **fields):
            return False, translate("genericError", language)

        await self._audit.log_session_event(AuditEventType.CREDENTIAL_CHANGED, "Credential changed")
        key = "pinChangedSuccessfully" if method == AuthMethod.PIN else "passwordChangedSuccessfully"
        return True, translate(key, language)

    # =========================================================================
    # PREFERENCES AND PROFILE
    # =========================================================================

    async def set_auth_method(self, method: AuthMethod) -> bool:
        return await self._save_preferences("set_auth_method", auth_method=method.value)

    async def set_pin_length(self, length: PinLength) -> bool:
        return await self._save_preferences("set_pin_length", pin_length=int(length))

    async def set_language(self, language: Language) -> bool:
        return await self._save_preferences("set_language", language=language.value)

    async def set_theme(self, theme: Theme) -> bool:
        return await self._save_preferences("set_theme", theme=theme.value)

    async def update_user_profile(self, profile: UserProfile) -> bool:
        try:
            await self._store.set(
                SETTINGS, PROFILE_DOC, {"user_profile": profile.to_document()}, merge=True
            )
        except StorageError as e:
            await self._audit.log_persistence_failure("update_user_profile", "settings", PROFILE_DOC, e)
            return False

        self._state.user_profile = profile
        await self._audit.log_session_event(AuditEventType.SETTINGS_UPDATED, "Profile updated")
        return True

    async def _save_preferences(self, operation: str, **fields: Any) -> bool:
        try:
            await self._store.set(SETTINGS, APP_SETTINGS_DOC, fields, merge=True)
        except StorageError as e:
            await self._audit.log_persistence_failure(operation, "settings", APP_SETTINGS_DOC, e)
            return False

        self._state.preferences = AppPreferences.model_validate(
            {**self._state.preferences.to_document(), **fields}
        )
        await self._audit.log_session_event(
            AuditEventType.SETTINGS_UPDATED,
            "App settings updated",
            {"fields": sorted(k for k in fields if k != "app_pin")},
        )
        return True
