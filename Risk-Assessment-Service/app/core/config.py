"""
Centralized application configuration.

This module uses Pydantic's BaseSettings to load configuration from
environment variables and a .env file, providing a single, type-safe
source of truth for all settings. The oracle credential lives here and
is handed to the oracle client at construction time; no other module
reads it from the environment.
"""

import logging
from typing import Optional

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # --- Core API Settings ---
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Diabetes Risk Assessment API"

    # --- Analysis Oracle (Gemini) Settings ---
    # Leaving the key unset disables the oracle path; every assessment is
    # then served by the rule-based scorer.
    GEMINI_API_KEY: Optional[SecretStr] = None
    GEMINI_API_URL: str = (
        "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.0-flash:generateContent"
    )
    TEMPERATURE: float = 0.3
    TOP_P: float = 0.8
    TOP_K: int = 40
    MAX_OUTPUT_TOKENS: int = 2048
    SAFETY_THRESHOLD: str = "BLOCK_MEDIUM_AND_ABOVE"
    ORACLE_TIMEOUT_SECONDS: float = 30.0

    # --- Environment & System Settings ---
    LOG_LEVEL: str = "INFO"

    @field_validator("GEMINI_API_KEY")
    def warn_on_unexpected_key_format(cls, v: Optional[SecretStr]) -> Optional[SecretStr]:
        """Blank keys count as unset; keys without the Gemini prefix are allowed but flagged."""
        if v is None:
            return None
        raw = v.get_secret_value().strip()
        if not raw:
            return None
        if not raw.startswith("AIza"):
            logger.warning("GEMINI_API_KEY does not look like a Gemini API key (expected 'AIza' prefix).")
        return SecretStr(raw)

    # --- Pydantic Model Configuration ---
    class Config:
        """Loads settings from the specified .env file."""
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = "ignore"


# Create a single, globally accessible settings instance
settings = Settings()
