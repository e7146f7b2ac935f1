"""Localization package."""

from committee_manager.i18n.translations import TRANSLATIONS, translate

__all__ = ["TRANSLATIONS", "translate"]
