"""
Backup, Restore and Reset

A backup is one JSON document with exactly four top-level keys:
`committees`, `members`, `userProfile` and `settings`.

IMPORTANT: Restore validates the whole file (JSON syntax, every key,
every committee and member) before the first destructive step. An invalid
file never deletes anything.

Restore and reset are not transactional: a store failure halfway leaves
the store partially rewritten. The returned message tells the owner to
try again; a successful retry converges.
"""

import json
from typing import Optional

from pydantic import ValidationError as ModelValidationError

from committee_manager.audit import AuditLogger, get_logger
from committee_manager.i18n import translate
from committee_manager.models import (
    AppPreferences,
    AuditEventType,
    Committee,
    Member,
    UserProfile,
)
from committee_manager.services.storage import DocumentStore, StorageError
from committee_manager.state import (
    APP_SETTINGS_DOC,
    COMMITTEES,
    MEMBERS,
    PROFILE_DOC,
    SETTINGS,
    AppState,
)
from committee_manager.validation import BackupValidator


logger = get_logger(__name__)


class BackupService:
    """Snapshot export, restore and full reset of committee data."""

    def __init__(
        self,
        state: AppState,
        store: DocumentStore,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._state = state
        self._store = store
        self._audit = audit_logger or AuditLogger()

    @property
    def _language(self):
        return self._state.preferences.language

    async def export_snapshot(self) -> str:
        """Serialize committees, members, profile and settings to JSON text."""
        snapshot = self._state.snapshot()
        payload = {
            "committees": [c.to_document() for c in snapshot["committees"]],
            "members": [m.to_document() for m in snapshot["members"]],
            "userProfile": snapshot["user_profile"].to_document(),
            "settings": self._state.preferences.to_document(),
        }
        await self._audit.log_change(
            AuditEventType.BACKUP_EXPORTED,
            "backup",
            "snapshot",
            "Backup exported",
            {"committees": len(payload["committees"]), "members": len(payload["members"])},
        )
        return json.dumps(payload, indent=2, ensure_ascii=False)

    async def restore_snapshot(self, text: str) -> tuple[bool, str]:
        """
        Replace all committees and members with the contents of a backup.

        Documents are recreated with their original ids; settings and the
        profile are merged into the existing documents.

        Returns:
            (success, localized message)
        """
        payload, error = BackupValidator.parse(text, self._language)
        if error:
            await self._reject(error)
            return False, error

        try:
            committees = [Committee.model_validate(doc) for doc in payload["committees"]]
            members = [Member.model_validate(doc) for doc in payload["members"]]
            profile = UserProfile.model_validate(payload["userProfile"] or {})
            preferences = AppPreferences.model_validate(
                {**self._state.preferences.to_document(), **payload["settings"]}
            )
        except ModelValidationError:
            message = translate("restoreInvalidFile", self._language)
            await self._reject(message)
            return False, message

        try:
            await self._delete_all(COMMITTEES)
            await self._delete_all(MEMBERS)
            for committee in committees:
                await self._store.set(COMMITTEES, committee.id, committee.to_document())
            for member in members:
                await self._store.set(MEMBERS, member.id, member.to_document())
            await self._store.set(SETTINGS, APP_SETTINGS_DOC, payload["settings"], merge=True)
            await self._store.set(
                SETTINGS, PROFILE_DOC, {"user_profile": profile.to_document()}, merge=True
            )
        except StorageError as e:
            await self._audit.log_persistence_failure("restore_snapshot", "backup", None, e)
            return False, translate("restoreFailed", self._language)

        self._state.committees = committees
        self._state.members = members
        self._state.notifications = []
        self._state.user_profile = profile
        self._state.preferences = preferences

        await self._audit.log_change(
            AuditEventType.BACKUP_RESTORED,
            "backup",
            "snapshot",
            "Backup restored",
            {"committees": len(committees), "members": len(members)},
        )
        return True, translate("restoreSuccess", self._language)

    async def reset(self) -> tuple[bool, str]:
        """
        Delete every committee and member.

        The owner's profile, preferences and credential are kept.
        """
        try:
            removed = await self._delete_all(COMMITTEES) + await self._delete_all(MEMBERS)
        except StorageError as e:
            await self._audit.log_persistence_failure("reset", "backup", None, e)
            return False, translate("resetFailed", self._language)

        self._state.clear_entities()
        await self._audit.log_change(
            AuditEventType.DATA_RESET, "backup", "all", "Committee and member data reset", {"documents": removed}
        )
        return True, translate("resetSuccess", self._language)

    async def _delete_all(self, collection: str) -> int:
        docs = await self._store.get_all(collection)
        for doc in docs:
            await self._store.delete(collection, doc["id"])
        return len(docs)

    async def _reject(self, message: str) -> None:
        logger.warning("restore_rejected")
        await self._audit.log_session_event(
            AuditEventType.RESTORE_REJECTED, "Backup file rejected", {"reason": message}
        )
