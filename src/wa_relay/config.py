from __future__ import annotations

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_REPLY_TEXT = "Thanks for messaging us! We received your message."

REQUIRED_ENV_VARS: tuple[str, ...] = ("VERIFY_TOKEN", "WHATSAPP_TOKEN", "PHONE_NUMBER_ID")


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing at startup."""


def _env(name: str, default: str | None = None) -> str | None:
    # Empty strings count as unset, like a blank line in .env
    value = os.getenv(name)
    return value if value else default


class Settings(BaseModel):
    # --- Webhook handshake ---
    verify_token: str | None = Field(default_factory=lambda: _env("VERIFY_TOKEN"))

    # --- WhatsApp Cloud API (outbound replies) ---
    whatsapp_token: str | None = Field(default_factory=lambda: _env("WHATSAPP_TOKEN"))
    phone_number_id: str | None = Field(default_factory=lambda: _env("PHONE_NUMBER_ID"))
    graph_api_base_url: str = Field(
        default_factory=lambda: _env("GRAPH_API_BASE_URL", "https://graph.facebook.com")
    )
    graph_api_version: str = Field(default_factory=lambda: _env("GRAPH_API_VERSION", "v18.0"))
    whatsapp_timeout_seconds: float = Field(
        default_factory=lambda: float(_env("WHATSAPP_TIMEOUT_SECONDS", "20"))
    )

    # Fixed acknowledgment sent back for every inbound text message
    reply_text: str = Field(default_factory=lambda: _env("REPLY_TEXT", DEFAULT_REPLY_TEXT))

    # --- Server ---
    host: str = Field(default_factory=lambda: _env("HOST", "0.0.0.0"))
    port: int = Field(default_factory=lambda: int(_env("PORT", "3000")))

    # --- Logging ---
    log_level: str = Field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))
    log_format: str = Field(default_factory=lambda: _env("LOG_FORMAT", "text"))

    @property
    def messages_url(self) -> str:
        base = self.graph_api_base_url.rstrip("/")
        return f"{base}/{self.graph_api_version}/{self.phone_number_id}/messages"

    def missing_required(self) -> list[str]:
        values = {
            "VERIFY_TOKEN": self.verify_token,
            "WHATSAPP_TOKEN": self.whatsapp_token,
            "PHONE_NUMBER_ID": self.phone_number_id,
        }
        return [name for name in REQUIRED_ENV_VARS if not values[name]]

    def ensure_complete(self) -> None:
        """
        Refuse to run without the handshake secret and API credentials.

        Raises ConfigurationError listing every missing variable at once.
        """
        missing = self.missing_required()
        if missing:
            raise ConfigurationError(
                f"Critical environment variables are missing: {', '.join(missing)}. "
                "Please ensure your .env file is correctly configured."
            )


@lru_cache
def get_settings() -> Settings:
    # Values already present in the environment win over the .env file
    load_dotenv()
    return Settings()
