"""
Configuration package for the OPME validation engine.

Exports:
- Settings: Application settings
- Constants: Domain vocabularies and messages
"""

from .settings import Settings, get_settings, reset_settings
from .constants import (
    APP_NAME,
    APP_VERSION,
    APP_ORGANIZATION,
    UF_CODES,
    RISK_CLASSES,
    SEX_CODES,
    BLOOD_TYPES,
    ERROR_MESSAGES,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "reset_settings",
    # Constants
    "APP_NAME",
    "APP_VERSION",
    "APP_ORGANIZATION",
    "UF_CODES",
    "RISK_CLASSES",
    "SEX_CODES",
    "BLOOD_TYPES",
    "ERROR_MESSAGES",
]
