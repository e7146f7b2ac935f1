"""
Member Directory

Members exist independently of committees; committees only hold their ids.
Deleting a member does not touch committees that still reference the id;
those show the member as unknown until the share is removed.
"""

from datetime import date
from typing import Optional

from committee_manager.audit import AuditLogger, get_logger
from committee_manager.config.settings import AppSettings
from committee_manager.i18n import translate
from committee_manager.ledger.errors import LedgerError
from committee_manager.ledger.ids import generate_id
from committee_manager.models import AuditEventType, Member
from committee_manager.services.storage import DocumentStore, StorageError
from committee_manager.state import MEMBERS, AppState


logger = get_logger(__name__)


class MemberDirectory:
    """Create, edit and delete members."""

    def __init__(
        self,
        state: AppState,
        store: DocumentStore,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        self._state = state
        self._store = store
        self._audit = audit_logger or AuditLogger()
        self._settings = settings or AppSettings()

    def get_member(self, member_id: str) -> Optional[Member]:
        return self._state.get_member(member_id)

    def list_members(self) -> list[Member]:
        return list(self._state.members)

    async def add_member(
        self,
        name: str,
        phone: str = "",
        cnic: str = "",
        address: Optional[str] = None,
        joining_date: Optional[date] = None,
        emergency_contact: Optional[str] = None,
        notes: Optional[str] = None,
        profile_picture_url: Optional[str] = None,
    ) -> Member:
        """
        Create and persist a member.

        Raises:
            LedgerError: If the store rejects the write
        """
        member = Member(
            id=generate_id(),
            name=name,
            phone=phone,
            cnic=cnic,
            address=address,
            joining_date=joining_date or date.today(),
            emergency_contact=emergency_contact,
            notes=notes,
            profile_picture_url=profile_picture_url or self._settings.default_profile_picture_url,
        )

        try:
            await self._store.set(MEMBERS, member.id, member.to_document())
        except StorageError as e:
            await self._audit.log_persistence_failure("add_member", "member", member.id, e)
            raise LedgerError(translate("genericError", self._state.preferences.language)) from e

        self._state.members = [*self._state.members, member]
        await self._audit.log_change(
            AuditEventType.MEMBER_CREATED, "member", member.id, f"Member '{member.name}' added"
        )
        return member

    async def update_member(self, member: Member) -> Member:
        """Persist an edited member. Returns the previous member if the write failed."""
        existing = self._state.get_member(member.id)
        if existing is None:
            logger.warning("member_not_found", member_id=member.id, operation="update_member")
            return member

        try:
            await self._store.set(MEMBERS, member.id, member.to_document())
        except StorageError as e:
            await self._audit.log_persistence_failure("update_member", "member", member.id, e)
            return existing

        self._state.replace_member(member)
        await self._audit.log_change(
            AuditEventType.MEMBER_UPDATED, "member", member.id, f"Member '{member.name}' updated"
        )
        return member

    async def delete_member(self, member_id: str) -> bool:
        existing = self._state.get_member(member_id)
        if existing is None:
            logger.warning("member_not_found", member_id=member_id, operation="delete_member")
            return False

        try:
            await self._store.delete(MEMBERS, member_id)
        except StorageError as e:
            await self._audit.log_persistence_failure("delete_member", "member", member_id, e)
            return False

        self._state.members = [m for m in self._state.members if m.id != member_id]
        await self._audit.log_change(
            AuditEventType.MEMBER_DELETED, "member", member_id, f"Member '{existing.name}' deleted"
        )
        return True
