"""Tests for AppState lifecycle, the member directory and period queries."""

import asyncio
from datetime import date
from decimal import Decimal

import pytest

from committee_manager.ledger import LedgerError
from committee_manager.models import Committee, CommitteePayment, PaymentStatus, PayoutTurn
from committee_manager.queries import (
    calculate_remaining_collection_for_period,
    calculate_total_collected,
    calculate_total_pool,
    current_period_index,
    dashboard_period_index,
    is_running,
    period_start_date,
    upcoming_payouts,
)
from committee_manager.services.storage import InMemoryDocumentStore
from committee_manager.state import APP_SETTINGS_DOC, COMMITTEES, MEMBERS, PROFILE_DOC, SETTINGS, AppState


def _committee(**kwargs):
    defaults = dict(
        id="c1",
        title="Pool",
        start_date=date(2024, 1, 1),
        duration=3,
        amount_per_member=Decimal("1000"),
        member_ids=["a", "b"],
    )
    defaults.update(kwargs)
    return Committee(**defaults)


class TestAppState:
    def test_initialize_loads_everything(self):
        store = InMemoryDocumentStore({
            COMMITTEES: {"c1": _committee().to_document()},
            MEMBERS: {"m1": {"id": "m1", "name": "Ahmed"}, "bad": {"id": "bad"}},
            SETTINGS: {
                APP_SETTINGS_DOC: {"app_pin": "4321", "language": "ur"},
                PROFILE_DOC: {"user_profile": {"name": "Owner"}},
            },
        })
        state = AppState()
        asyncio.run(state.initialize(store))

        assert [c.id for c in state.committees] == ["c1"]
        assert [m.id for m in state.members] == ["m1"]
        assert state.user_profile.name == "Owner"
        assert state.preferences.app_pin == "4321"
        assert state.auth_settings_loaded is True
        assert state.is_loading is False

    def test_teardown_clears_and_locks(self):
        state = AppState()
        state.committees = [_committee()]
        state.is_locked = False
        state.teardown()
        assert state.committees == []
        assert state.is_locked is True
        assert state.auth_settings_loaded is False

    def test_snapshot_is_detached(self):
        state = AppState()
        state.committees = [_committee()]
        snapshot = state.snapshot()
        snapshot["committees"][0].member_ids.append("z")
        assert state.committees[0].member_ids == ["a", "b"]


class TestMemberDirectory:
    def test_add_member_uses_default_picture(self, app, app_settings):
        member = asyncio.run(app.members.add_member("Ahmed", phone="0300"))
        assert member.profile_picture_url == app_settings.default_profile_picture_url
        assert app.members.get_member(member.id) == member

    def test_add_member_failure_raises(self, app, store):
        store.fail_writes = True
        with pytest.raises(LedgerError):
            asyncio.run(app.members.add_member("Ahmed"))
        assert app.members.list_members() == []

    def test_update_and_delete(self, app):
        member = asyncio.run(app.members.add_member("Ahmed"))
        updated = asyncio.run(app.members.update_member(member.model_copy(update={"notes": "VIP"})))
        assert app.members.get_member(member.id).notes == "VIP"
        assert updated.notes == "VIP"

        assert asyncio.run(app.members.delete_member(member.id)) is True
        assert app.members.list_members() == []


class TestPeriodQueries:
    def test_period_index(self):
        committee = _committee()
        assert current_period_index(committee, date(2024, 1, 30)) == 0
        assert current_period_index(committee, date(2024, 1, 31)) == 1
        assert current_period_index(committee, date(2023, 12, 31)) == -1

    def test_running_and_dashboard_index(self):
        committee = _committee()
        assert is_running(committee, date(2024, 2, 15))
        assert not is_running(committee, date(2024, 6, 1))
        assert dashboard_period_index(committee, date(2024, 6, 1)) == 2
        assert dashboard_period_index(committee, date(2023, 6, 1)) == -1

    def test_period_start_date(self):
        assert period_start_date(_committee(), 2) == date(2024, 3, 1)

    def test_pool_and_collection(self):
        committee = _committee(payments=[
            CommitteePayment(id="p1", member_id="a", month_index=0, amount_paid=Decimal("1000")),
            CommitteePayment(
                id="p2", member_id="b", month_index=0, amount_paid=Decimal("400"), status=PaymentStatus.PENDING
            ),
        ])
        assert calculate_total_pool(committee) == Decimal("6000")
        assert calculate_total_collected(committee) == Decimal("1000")
        assert calculate_remaining_collection_for_period(committee, 0) == Decimal("1000")
        assert calculate_remaining_collection_for_period(committee, 1) == Decimal("2000")

    def test_upcoming_payouts_sorted_and_unpaid(self):
        first = _committee(payout_turns=[
            PayoutTurn(member_id="a", turn_month_index=0, paid_out=True, payout_date=date(2024, 1, 2)),
            PayoutTurn(member_id="b", turn_month_index=1),
        ])
        second = _committee(id="c2", start_date=date(2024, 1, 10), payout_turns=[
            PayoutTurn(member_id="a", turn_month_index=0),
        ])
        rows = upcoming_payouts([first, second])
        assert [(r["committee_id"], r["member_id"]) for r in rows] == [("c2", "a"), ("c1", "b")]
        assert rows[0]["amount"] == Decimal("2000")
