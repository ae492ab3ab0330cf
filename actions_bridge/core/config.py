"""
Configuration module for Actions Bridge.

Settings are read from environment variables prefixed with ``ACTIONS_BRIDGE_``
and passed explicitly into each ProtocolAdapter.
"""
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AdapterSettings(BaseSettings):
    """Adapter settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ACTIONS_BRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "pretty"] = "pretty"
    log_payloads: bool = False

    # Error responses
    apology_text: str = "Sorry, I am unable to process your request."
    error_prefix: str = "Action Error: "
    apology_status_code: int = Field(400, ge=200, le=599)

    # Request verification (header name/value pair set in the agent console)
    verification_header: Optional[str] = None
    verification_value: Optional[str] = None

    # Reserved context lifespans
    legacy_context_lifespan: int = Field(100, ge=1)
    current_context_lifespan: int = Field(99, ge=1)

    @property
    def verification_enabled(self) -> bool:
        return bool(self.verification_header and self.verification_value)


@lru_cache
def get_settings() -> AdapterSettings:
    """Get cached settings instance."""
    return AdapterSettings()
