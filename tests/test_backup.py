"""Tests for backup export, restore and reset."""

import asyncio
import json
from decimal import Decimal

from committee_manager.models import Language, UserProfile
from committee_manager.state import APP_SETTINGS_DOC, COMMITTEES, MEMBERS, PROFILE_DOC, SETTINGS


def _seed(app):
    async def seed():
        ahmed = await app.members.add_member("Ahmed", phone="0300")
        bilal = await app.members.add_member("Bilal")
        committee = await app.committees.create_committee("Pool", member_ids=[ahmed.id, bilal.id])
        await app.committees.record_payment(committee.id, ahmed.id, 0, Decimal("1000"))
        await app.session.update_user_profile(UserProfile(name="Owner"))
        return committee

    return asyncio.run(seed())


class TestExport:
    def test_snapshot_has_exactly_four_keys(self, app):
        _seed(app)
        payload = json.loads(asyncio.run(app.backup.export_snapshot()))

        assert set(payload) == {"committees", "members", "userProfile", "settings"}
        assert len(payload["committees"]) == 1
        assert len(payload["members"]) == 2
        assert payload["userProfile"]["name"] == "Owner"
        assert payload["settings"]["language"] == "en"


class TestRestore:
    def test_round_trip_restores_original_ids(self, app, store):
        committee = _seed(app)
        text = asyncio.run(app.backup.export_snapshot())

        asyncio.run(app.backup.reset())
        assert app.state.committees == []

        ok, message = asyncio.run(app.backup.restore_snapshot(text))
        assert ok is True
        assert message == "Data restored successfully."
        assert app.state.get_committee(committee.id) is not None
        assert committee.id in store.dump()[COMMITTEES]
        assert len(store.dump()[MEMBERS]) == 2

    def test_restore_replaces_existing_documents(self, app, store):
        _seed(app)
        backup = {
            "committees": [],
            "members": [{"id": "m-restored", "name": "Restored Member"}],
            "userProfile": {"name": "Restored Owner"},
            "settings": {"language": "ur"},
        }
        ok, _ = asyncio.run(app.backup.restore_snapshot(json.dumps(backup)))

        assert ok is True
        assert store.dump()[COMMITTEES] == {}
        assert list(store.dump()[MEMBERS]) == ["m-restored"]
        assert store.dump()[SETTINGS][APP_SETTINGS_DOC]["language"] == "ur"
        assert store.dump()[SETTINGS][PROFILE_DOC]["user_profile"]["name"] == "Restored Owner"
        assert app.state.preferences.language == Language.UR

    def test_missing_key_deletes_nothing(self, app, store):
        _seed(app)
        before = store.dump()
        ok, message = asyncio.run(app.backup.restore_snapshot(json.dumps({"committees": [], "members": []})))

        assert ok is False
        assert message == 'Invalid backup file: "userProfile" is missing.'
        assert store.dump()[COMMITTEES] == before[COMMITTEES]

    def test_missing_settings_is_rejected_with_message(self, app):
        backup = {"committees": [], "members": [], "userProfile": {}}
        ok, message = asyncio.run(app.backup.restore_snapshot(json.dumps(backup)))
        assert ok is False
        assert message == 'Invalid backup file: "settings" is missing.'

    def test_malformed_committee_deletes_nothing(self, app, store):
        _seed(app)
        backup = {"committees": [{"id": "x"}], "members": [], "userProfile": {}, "settings": {}}
        ok, message = asyncio.run(app.backup.restore_snapshot(json.dumps(backup)))

        assert ok is False
        assert message == "Invalid backup file."
        assert len(store.dump()[MEMBERS]) == 2

    def test_store_failure_reported(self, app, store):
        _seed(app)
        text = asyncio.run(app.backup.export_snapshot())
        store.fail_writes = True
        ok, message = asyncio.run(app.backup.restore_snapshot(text))
        assert ok is False
        assert message == "Restore failed. Please try again."


class TestReset:
    def test_reset_keeps_profile_and_credentials(self, app, store):
        _seed(app)
        asyncio.run(app.session.change_pin("1234", "8642", "8642"))

        ok, message = asyncio.run(app.backup.reset())
        assert ok is True
        assert message == "All committee and member data was deleted."
        assert store.dump()[COMMITTEES] == {}
        assert store.dump()[MEMBERS] == {}
        assert store.dump()[SETTINGS][APP_SETTINGS_DOC]["app_pin"] == "8642"
        assert app.state.user_profile.name == "Owner"
        assert app.state.committees == []
        assert app.state.members == []
        assert app.state.notifications == []

    def test_reset_failure(self, app, store):
        _seed(app)
        store.fail_writes = True
        ok, message = asyncio.run(app.backup.reset())
        assert ok is False
        assert message == "Reset failed. Please try again."
        assert len(app.state.committees) == 1
