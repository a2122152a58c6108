"""
Application settings for the OPME validation engine.

Loads settings from environment variables or uses defaults.
Provides centralized configuration management.
"""

import os
from typing import Optional
from dataclasses import dataclass

from .constants import (
    APP_VERSION,
    DEFAULT_EXPIRY_ALERT_DAYS,
    DEFAULT_FUZZY_HEADER_CUTOFF,
)


@dataclass
class Settings:
    """
    Application settings.

    Can be loaded from environment variables or initialized with defaults.
    """

    # Application info
    app_version: str = APP_VERSION

    # Product expiry warnings (days before expiry date)
    expiry_alert_days: int = DEFAULT_EXPIRY_ALERT_DAYS

    # Minimum rapidfuzz score (0-100) for spreadsheet header matching
    fuzzy_header_cutoff: int = DEFAULT_FUZZY_HEADER_CUTOFF

    # Debug settings
    debug_mode: bool = False
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR

    def __post_init__(self):
        """Validate numeric settings after initialization."""
        if self.expiry_alert_days < 0:
            raise ValueError("expiry_alert_days cannot be negative")
        if not 0 <= self.fuzzy_header_cutoff <= 100:
            raise ValueError("fuzzy_header_cutoff must be between 0 and 100")

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Load settings from environment variables.

        Environment variables:
        - OPME_EXPIRY_ALERT_DAYS: Days before expiry that trigger a warning
        - OPME_FUZZY_HEADER_CUTOFF: Minimum fuzzy score for column headers
        - OPME_DEBUG: Enable debug mode (true/false)
        - OPME_LOG_LEVEL: Logging level (DEBUG/INFO/WARNING/ERROR)

        Returns:
            Settings instance with values from environment or defaults
        """
        return cls(
            expiry_alert_days=int(
                os.getenv("OPME_EXPIRY_ALERT_DAYS", str(DEFAULT_EXPIRY_ALERT_DAYS))
            ),
            fuzzy_header_cutoff=int(
                os.getenv("OPME_FUZZY_HEADER_CUTOFF", str(DEFAULT_FUZZY_HEADER_CUTOFF))
            ),
            debug_mode=os.getenv("OPME_DEBUG", "false").lower() == "true",
            log_level=os.getenv("OPME_LOG_LEVEL", "INFO").upper(),
        )

    def to_dict(self) -> dict:
        """Convert settings to dictionary for serialization."""
        return {
            "app_version": self.app_version,
            "expiry_alert_days": self.expiry_alert_days,
            "fuzzy_header_cutoff": self.fuzzy_header_cutoff,
            "debug_mode": self.debug_mode,
            "log_level": self.log_level,
        }


# Global settings instance (lazy-loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get global settings instance.

    Lazy-loaded on first call. Loads from environment variables.

    Returns:
        Settings instance

    Example:
        >>> from config.settings import get_settings
        >>> settings = get_settings()
        >>> print(settings.expiry_alert_days)
    """
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings():
    """
    Reset global settings instance.

    Useful for testing - forces reload from environment on next get_settings() call.
    """
    global _settings
    _settings = None
