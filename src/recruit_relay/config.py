from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, Field


def _env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


class Settings(BaseModel):
    # --- Remote store (spreadsheet web app) ---
    gas_webapp_url: str | None = Field(default_factory=lambda: _env("GAS_WEBAPP_URL"))
    gas_auth_token: str = Field(default_factory=lambda: _env("GAS_AUTH_TOKEN", "") or "")
    # Raw env strings are validated (and coerced) by pydantic, so a bad value fails loudly.
    remote_timeout_seconds: int = Field(
        default_factory=lambda: _env("REMOTE_TIMEOUT_SECONDS", "20"),
        validate_default=True,
        ge=1,
    )

    # --- Twilio ---
    twilio_account_sid: str | None = Field(default_factory=lambda: _env("TWILIO_ACCOUNT_SID"))
    twilio_auth_token: str | None = Field(default_factory=lambda: _env("TWILIO_AUTH_TOKEN"))
    twilio_from_number: str | None = Field(default_factory=lambda: _env("TWILIO_FROM_NUMBER"))
    twilio_messaging_service_sid: str | None = Field(
        default_factory=lambda: _env("TWILIO_MESSAGING_SERVICE_SID")
    )

    # Externally visible base URL, e.g. https://relay.example.com
    # Twilio signs the URL it called, which differs from request.url behind a proxy.
    public_base_url: str | None = Field(default_factory=lambda: _env("PUBLIC_BASE_URL"))

    allowed_origin: str = Field(default_factory=lambda: _env("ALLOWED_ORIGIN", "*") or "*")

    # --- Calendar defaults ---
    default_calendar_id: str = Field(
        default_factory=lambda: _env("TEST_CALENDAR_ID", "primary") or "primary"
    )
    default_tz: str = Field(default_factory=lambda: _env("DEFAULT_TZ", "Asia/Tokyo") or "Asia/Tokyo")
    interviewer_email: str = Field(default_factory=lambda: _env("INTERVIEWER_EMAIL", "") or "")

    # --- Server ---
    log_level: str = Field(default_factory=lambda: (_env("LOG_LEVEL", "INFO") or "INFO").upper())
    host: str = Field(default_factory=lambda: _env("HOST", "127.0.0.1") or "127.0.0.1")
    port: int = Field(default_factory=lambda: _env("PORT", "8787"), validate_default=True)


@lru_cache
def get_settings() -> Settings:
    return Settings()
