"""AI Agents package."""

from committee_manager.agents.summary_agent import CommitteeSummaryAgent, count_pending_members

__all__ = [
    "CommitteeSummaryAgent",
    "count_pending_members",
]
