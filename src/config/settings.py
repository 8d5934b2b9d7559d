"""
Configuration Management for Budget Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Secrets (the Gemini API key) are ONLY ever read from the environment or
the .env file. Nothing in the codebase hardcodes a credential.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Empty by default: the proxy reports a configuration error per request
    # instead of refusing to start.
    api_key: str = Field(
        default="",
        repr=False,
        description="Gemini API key (server-side only)"
    )
    model_name: str = Field(
        default="gemini-2.0-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=1000,
        ge=50,
        le=8192,
        description="Maximum tokens in an advisory answer"
    )
    proxy_max_tokens: int = Field(
        default=500,
        ge=50,
        le=8192,
        description="Maximum tokens for prompts relayed through the proxy"
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Model temperature"
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound for a single completion call"
    )

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key and self.api_key.strip())


class ProxySettings(BaseSettings):
    """Settings for routing advisory calls through the server-side proxy."""

    model_config = SettingsConfigDict(
        env_prefix="PROXY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    url: Optional[str] = Field(
        default=None,
        description="Proxy endpoint URL; when set the dashboard never sees the API key"
    )
    include_raw_on_empty: bool = Field(
        default=False,
        description="Attach the raw provider payload to empty-response errors"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets key-value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
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
    state_sheet_name: str = Field(
        default="State",
        description="Worksheet holding key/value rows"
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

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    default_budget: Decimal = Field(
        default=Decimal("30000"),
        description="Budget used when nothing has been persisted yet"
    )
    recent_limit: int = Field(
        default=10,
        ge=1,
        description="How many transactions the history view shows"
    )
    trend_months: int = Field(
        default=6,
        ge=1,
        le=24,
        description="Number of months in the monthly trend"
    )
    danger_threshold_percent: Decimal = Field(
        default=Decimal("90"),
        ge=0,
        le=100,
        description="Spend ratio at which the danger zone starts"
    )


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

    # Note: These are loaded lazily to allow partial configuration

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def proxy(self) -> ProxySettings:
        return ProxySettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

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
    Useful for the settings page and startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        gemini = settings.gemini
        results["gemini"] = gemini.has_api_key
        if not gemini.has_api_key:
            results["gemini_error"] = "GEMINI_API_KEY is not set"
    except Exception as e:
        results["gemini"] = False
        results["gemini_error"] = str(e)

    try:
        proxy = settings.proxy
        results["proxy"] = proxy.url is not None
        if proxy.url is None:
            results["proxy_error"] = "PROXY_URL is not set (calling Gemini directly)"
    except Exception as e:
        results["proxy"] = False
        results["proxy_error"] = str(e)

    try:
        _ = settings.google_sheets
        results["google_sheets"] = True
    except Exception as e:
        results["google_sheets"] = False
        results["google_sheets_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
