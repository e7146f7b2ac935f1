"""Tests for the AI summary agent. No real Gemini calls are made."""

import asyncio
from datetime import date, timedelta
from decimal import Decimal

from committee_manager.agents import CommitteeSummaryAgent, count_pending_members
from committee_manager.models import Committee, CommitteePayment, Language


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModel:
    def __init__(self, text="Generated text", error=None):
        self.text = text
        self.error = error
        self.prompts = []

    async def generate_content_async(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return FakeResponse(self.text)


def _committee():
    return Committee(
        id="c1",
        title="Bazaar Pool",
        start_date=date.today() - timedelta(days=10),
        amount_per_member=Decimal("1000"),
        member_ids=["a", "b", "c"],
        payments=[CommitteePayment(id="p1", member_id="a", month_index=0, amount_paid=Decimal("1000"))],
    )


class TestPendingMembers:
    def test_counts_members_short_this_period(self):
        assert count_pending_members(_committee()) == 2

    def test_zero_before_start(self):
        committee = _committee().model_copy(update={"start_date": date.today() + timedelta(days=5)})
        assert count_pending_members(committee) == 0


class TestOfflineFallback:
    def test_summary_without_model(self):
        agent = CommitteeSummaryAgent(settings=None)
        assert agent.is_available is False
        text = asyncio.run(agent.summarize_committee(_committee()))
        assert text == 'Committee "Bazaar Pool" has 3 members; 2 have not paid this period.'

    def test_urdu_reminder_without_model(self):
        agent = CommitteeSummaryAgent(settings=None)
        text = asyncio.run(agent.payment_reminder("Ahmed", is_late=True))
        assert text.startswith("محترم Ahmed")


class TestWithModel:
    def test_summary_uses_model_text(self):
        model = FakeModel(" A healthy committee. ")
        agent = CommitteeSummaryAgent(settings=None, model=model)
        text = asyncio.run(agent.summarize_committee(_committee(), Language.EN))
        assert text == "A healthy committee."
        assert "Bazaar Pool" in model.prompts[0]
        assert "pending payments this period: 2" in model.prompts[0]

    def test_model_failure_falls_back(self):
        agent = CommitteeSummaryAgent(settings=None, model=FakeModel(error=RuntimeError("quota")))
        text = asyncio.run(agent.payment_reminder("Ahmed", is_late=False, language=Language.EN))
        assert text == "Dear Ahmed, your committee installment is due soon."

    def test_empty_model_text_falls_back(self):
        agent = CommitteeSummaryAgent(settings=None, model=FakeModel(""))
        text = asyncio.run(agent.payment_reminder("Ahmed", is_late=True, language=Language.EN))
        assert text.startswith("Dear Ahmed")
