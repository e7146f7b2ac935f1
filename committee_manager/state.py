"""
Application State

DESIGN DECISION: One explicit state object instead of process-wide globals.
It is created at process start, loaded from the store once with
`initialize()`, passed to every ledger and session component, and
cleared with `teardown()` when the authenticated session ends.

Every change replaces a whole list (or a whole entity inside a list);
nothing mutates a shared list in place. A snapshot taken by an exporter
therefore never observes a half-applied update.
"""

from typing import Optional, TypeVar

from pydantic import BaseModel, ValidationError

from committee_manager.audit import get_logger
from committee_manager.models import (
    AppPreferences,
    Committee,
    Installment,
    Member,
    Notification,
    UserProfile,
)
from committee_manager.services.storage import DocumentStore, StorageError


# Collection and document names in the store
COMMITTEES = "committees"
MEMBERS = "members"
INSTALLMENTS = "installments"
SETTINGS = "settings"
APP_SETTINGS_DOC = "app"
PROFILE_DOC = "singleton"


logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class AppState:
    """In-memory state of one running application."""

    def __init__(self, preferences: Optional[AppPreferences] = None):
        self.committees: list[Committee] = []
        self.members: list[Member] = []
        self.installments: list[Installment] = []
        self.notifications: list[Notification] = []
        self.user_profile: UserProfile = UserProfile()
        self.preferences: AppPreferences = preferences or AppPreferences()

        self.is_locked: bool = True
        self.is_loading: bool = False
        self.auth_settings_loaded: bool = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def initialize(self, store: DocumentStore) -> None:
        """Load every collection and the settings documents from the store."""
        self.is_loading = True
        try:
            self.committees = await self._load_collection(store, COMMITTEES, Committee)
            self.members = await self._load_collection(store, MEMBERS, Member)
            self.installments = await self._load_collection(store, INSTALLMENTS, Installment)

            profile_doc = await store.get(SETTINGS, PROFILE_DOC)
            if profile_doc and profile_doc.get("user_profile"):
                self.user_profile = UserProfile.model_validate(profile_doc["user_profile"])
        except (StorageError, ValidationError) as e:
            logger.error("state_load_failed", error_type=type(e).__name__)
        finally:
            self.is_loading = False

        await self.load_auth_settings(store)

    async def load_auth_settings(self, store: DocumentStore) -> None:
        """Load language, theme and credentials from `settings/app`."""
        try:
            doc = await store.get(SETTINGS, APP_SETTINGS_DOC)
            if doc:
                self.preferences = AppPreferences.model_validate(
                    {**self.preferences.to_document(), **_without_id(doc)}
                )
        except (StorageError, ValidationError) as e:
            logger.error("auth_settings_load_failed", error_type=type(e).__name__)
        finally:
            self.auth_settings_loaded = True

    def teardown(self) -> None:
        """Drop all entity state; used when the session ends."""
        self.clear_entities()
        self.user_profile = UserProfile()
        self.is_locked = True
        self.auth_settings_loaded = False

    def clear_entities(self) -> None:
        """Forget committees, members and notifications (installments kept)."""
        self.committees = []
        self.members = []
        self.notifications = []

    @staticmethod
    async def _load_collection(
        store: DocumentStore,
        collection: str,
        model: type[ModelT],
    ) -> list[ModelT]:
        items = []
        for doc in await store.get_all(collection):
            try:
                items.append(model.model_validate(doc))
            except ValidationError:
                logger.warning("skipped_malformed_document", collection=collection, doc_id=doc.get("id"))
        return items

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def get_committee(self, committee_id: str) -> Optional[Committee]:
        return next((c for c in self.committees if c.id == committee_id), None)

    def get_member(self, member_id: str) -> Optional[Member]:
        return next((m for m in self.members if m.id == member_id), None)

    def get_installment(self, installment_id: str) -> Optional[Installment]:
        return next((i for i in self.installments if i.id == installment_id), None)

    def member_name(self, member_id: str, fallback: str = "Unknown Member") -> str:
        member = self.get_member(member_id)
        return member.name if member else fallback

    # =========================================================================
    # WHOLE-LIST REPLACEMENT
    # =========================================================================

    def replace_committee(self, committee: Committee) -> None:
        self.committees = _replace_by_id(self.committees, committee)

    def replace_member(self, member: Member) -> None:
        self.members = _replace_by_id(self.members, member)

    def replace_installment(self, installment: Installment) -> None:
        self.installments = _replace_by_id(self.installments, installment)

    def snapshot(self) -> dict:
        """
        Read-only copies of the entity state for exporters.

        Returns deep copies; changing them never affects the live state.
        """
        return {
            "committees": [c.model_copy(deep=True) for c in self.committees],
            "members": [m.model_copy(deep=True) for m in self.members],
            "installments": [i.model_copy(deep=True) for i in self.installments],
            "user_profile": self.user_profile.model_copy(deep=True),
        }


def _replace_by_id(items: list[ModelT], updated: ModelT) -> list[ModelT]:
    return [updated if item.id == updated.id else item for item in items]


def _without_id(doc: dict) -> dict:
    return {k: v for k, v in doc.items() if k != "id"}
