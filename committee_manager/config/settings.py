"""
Configuration Management for Committee Manager

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets document store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Each collection lives in its own worksheet named <prefix><collection>
    worksheet_prefix: str = Field(
        default="",
        description="Prefix added to every collection worksheet name"
    )
    rows_per_sheet: int = Field(
        default=1000,
        ge=10,
        description="Rows allocated when a collection worksheet is created"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration (committee summaries and reminders)."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=512,
        ge=64,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Session auto-lock
    auto_lock_window_seconds: int = Field(
        default=600,
        ge=10,
        description="Inactivity window before the session locks"
    )
    auto_lock_warning_seconds: int = Field(
        default=60,
        ge=1,
        description="Length of the visible countdown before locking"
    )

    # Committee periods and alerts
    period_length_days: int = Field(
        default=30,
        ge=1,
        description="Length of one committee period, used for every committee type"
    )
    overdue_grace_days: int = Field(
        default=7,
        ge=0,
        description="Days after a period starts before an unpaid share is overdue"
    )
    upcoming_payout_days: int = Field(
        default=7,
        ge=0,
        description="How far ahead an unpaid payout turn raises an alert"
    )

    # Defaults
    default_app_pin: str = Field(
        default="1234",
        description="PIN used until the owner sets one"
    )
    default_profile_picture_url: str = Field(
        default="https://picsum.photos/seed/defaultuser/100/100",
        description="Placeholder picture for new members"
    )

    # Limits
    max_duration: int = Field(
        default=60,
        ge=1,
        description="Maximum committee duration in periods"
    )
    max_members_per_committee: int = Field(
        default=100,
        ge=1,
        description="Maximum number of shares in one committee"
    )

    @field_validator('auto_lock_warning_seconds')
    @classmethod
    def warning_fits_window(cls, v: int, info) -> int:
        """The countdown must start after the window opens."""
        window = info.data.get("auto_lock_window_seconds")
        if window is not None and v >= window:
            raise ValueError("Warning period must be shorter than the auto-lock window")
        return v


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.google_sheets
        results["google_sheets"] = True
    except Exception as e:
        results["google_sheets"] = False
        results["google_sheets_error"] = str(e)

    try:
        _ = settings.gemini
        results["gemini"] = True
    except Exception as e:
        results["gemini"] = False
        results["gemini_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
