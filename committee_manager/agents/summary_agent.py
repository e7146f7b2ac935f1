"""
AI Summary Agent

Generates a short committee summary and polite payment reminders with
Gemini, in English or Urdu.

CRITICAL BOUNDARIES:
- CAN: Phrase numbers that were computed from the ledger
- CANNOT: Compute or change any amount, status or turn
- MUST: Return a deterministic localized text when the model is not
  configured or fails, so callers never see an exception

The LLM is a WRITER, not a LEDGER.
"""

from datetime import date
from typing import Any, Optional

import google.generativeai as genai
from pydantic import ValidationError as SettingsValidationError

from committee_manager.audit import AuditLogger, get_logger
from committee_manager.config.settings import GeminiSettings
from committee_manager.i18n import translate
from committee_manager.models import Committee, Language
from committee_manager.queries.periods import (
    DEFAULT_PERIOD_LENGTH_DAYS,
    amount_due,
    cleared_amount,
    dashboard_period_index,
)


logger = get_logger(__name__)


def count_pending_members(
    committee: Committee,
    today: Optional[date] = None,
    period_length_days: int = DEFAULT_PERIOD_LENGTH_DAYS,
) -> int:
    """Distinct members who have not fully paid the current period."""
    period = dashboard_period_index(committee, today, period_length_days)
    if period < 0:
        return 0
    return sum(
        1
        for member_id in committee.unique_member_ids()
        if cleared_amount(committee, member_id, period) < amount_due(committee, member_id)
    )


class CommitteeSummaryAgent:
    """
    Gemini-backed text generation for committees.

    Args:
        settings: Gemini settings; loaded from GEMINI_* variables when omitted.
                  Without an API key the agent works offline.
        model: Pre-built model object exposing `generate_content_async`
               (used by tests instead of a real Gemini model)
        audit_logger: Receives external service errors
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._audit = audit_logger
        self._settings = settings if settings is not None else self._load_settings()
        self._model = model
        if self._model is None and self._settings is not None:
            self._configure_genai()

    @staticmethod
    def _load_settings() -> Optional[GeminiSettings]:
        try:
            return GeminiSettings()
        except SettingsValidationError:
            logger.info("gemini_not_configured")
            return None

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    @property
    def is_available(self) -> bool:
        return self._model is not None

    async def summarize_committee(
        self,
        committee: Committee,
        language: Language = Language.EN,
        today: Optional[date] = None,
        period_length_days: int = DEFAULT_PERIOD_LENGTH_DAYS,
    ) -> str:
        """
        Summarize a committee's current period.

        Falls back to a fixed localized sentence without a model.
        """
        members = len(committee.unique_member_ids())
        pending = count_pending_members(committee, today, period_length_days)
        fallback = translate(
            "summaryUnavailable", language, title=committee.title, members=members, pending=pending
        )

        language_instruction = (
            "براہ کرم کمیٹی کا خلاصہ اردو میں فراہم کریں۔"
            if language == Language.UR
            else "Please provide a summary for the committee in English."
        )
        prompt = f"""{language_instruction}

Committee Title: {committee.title}
Total Members: {members}
Shares: {len(committee.member_ids)}
Amount per share: PKR {committee.amount_per_member:,.2f}
Members with pending payments this period: {pending}

Generate a concise, informative summary. If pending payments are high, express mild concern.
Use ONLY the numbers above."""

        return await self._generate(prompt, fallback)

    async def payment_reminder(
        self,
        member_name: str,
        is_late: bool,
        language: Language = Language.UR,
    ) -> str:
        """Short polite reminder for a member, overdue or due soon."""
        fallback = translate("reminderLate" if is_late else "reminderDue", language, memberName=member_name)

        if language == Language.UR:
            prompt = (
                f"{member_name} کی جانب سے کمیٹی کی قسط میں تاخیر ہوئی ہے۔ ایک مختصر، شائستہ یاد دہانی کا پیغام بنائیں۔"
                if is_late
                else f"{member_name} کی کمیٹی کی قسط جلد واجب الادا ہے۔ ایک مختصر، دوستانہ یاد دہانی کا پیغام بنائیں۔"
            )
        else:
            prompt = (
                f"{member_name}'s committee installment is overdue. Write a short, polite reminder message."
                if is_late
                else f"{member_name}'s committee installment is due soon. Write a short, friendly reminder message."
            )

        return await self._generate(prompt, fallback)

    async def _generate(self, prompt: str, fallback: str) -> str:
        if self._model is None:
            return fallback

        try:
            response = await self._model.generate_content_async(prompt)
            text = (response.text or "").strip()
        except Exception as e:
            logger.warning("gemini_generation_failed", error_type=type(e).__name__)
            if self._audit:
                await self._audit.log_external_service_error("gemini", e)
            return fallback

        return text or fallback
