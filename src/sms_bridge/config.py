from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field


def _env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


class Settings(BaseModel):
    # Project root (repo root in local dev, /app in Docker)
    project_root: Path = Field(
        default_factory=lambda: Path(
            _env("PROJECT_ROOT") or Path(__file__).resolve().parents[2]
        )
    )

    # --- Vendor credentials ---
    api_key: str | None = Field(default_factory=lambda: _env("VONAGE_API_KEY"))
    api_secret: str | None = Field(default_factory=lambda: _env("VONAGE_API_SECRET"))

    # Sender number shown to recipients; fixed per deployment.
    from_number: str | None = Field(default_factory=lambda: _env("SMS_FROM_NUMBER"))

    # --- Optional HTTP Basic credentials for the webhook endpoints ---
    auth_name: str | None = Field(default_factory=lambda: _env("WEBHOOK_AUTH_NAME"))
    auth_pass: str | None = Field(default_factory=lambda: _env("WEBHOOK_AUTH_PASSWORD"))

    # Which gateway implementation to send through ("vonage" or "twilio").
    # Unknown values are rejected by build_gateway when the app is built.
    provider: str = Field(
        default_factory=lambda: _env("SMS_PROVIDER", "vonage").lower()  # type: ignore[union-attr]
    )

    vonage_base_url: str = Field(
        default_factory=lambda: _env("VONAGE_BASE_URL", "https://rest.nexmo.com")  # type: ignore[arg-type]
    )

    # --- Twilio settings, only used when provider == "twilio" ---
    twilio_account_sid: str | None = Field(default_factory=lambda: _env("TWILIO_ACCOUNT_SID"))
    twilio_auth_token: str | None = Field(default_factory=lambda: _env("TWILIO_AUTH_TOKEN"))

    # Seconds before an outbound vendor call is abandoned.
    request_timeout: float = Field(
        default_factory=lambda: float(_env("SMS_TIMEOUT_SECONDS", "10"))  # type: ignore[arg-type]
    )

    log_level: str = Field(default_factory=lambda: (_env("LOG_LEVEL", "INFO") or "INFO").upper())

    @property
    def webhook_auth_enabled(self) -> bool:
        """Webhook credentials are only enforced when both halves are configured."""
        return bool(self.auth_name) and bool(self.auth_pass)


@lru_cache
def get_settings() -> Settings:
    return Settings()
