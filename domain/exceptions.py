"""
Custom exceptions for the OPME validation engine.

All exceptions inherit from OpmeBaseException for easier catching.
Each exception includes a message and optional details dict.
ValidationError additionally carries a machine-stable FailureReason.
"""

from enum import Enum


class FailureReason(str, Enum):
    """Stable reason codes attached to every validation failure."""

    EMPTY = "empty"
    LENGTH = "length"
    CHARSET = "charset"
    PATTERN = "pattern"
    FILLER = "filler"
    CHECK_DIGIT = "check_digit"
    VOCABULARY = "vocabulary"
    TEMPORAL = "temporal"
    FORMAT = "format"
    NOT_POSITIVE = "not_positive"
    NOT_INTEGER = "not_integer"

    @property
    def category(self) -> str:
        """Coarse failure category used by forms to pick a message style."""
        return _CATEGORIES[self]


_CATEGORIES = {
    FailureReason.EMPTY: "format",
    FailureReason.LENGTH: "format",
    FailureReason.CHARSET: "format",
    FailureReason.PATTERN: "format",
    FailureReason.FORMAT: "format",
    FailureReason.FILLER: "filler",
    FailureReason.CHECK_DIGIT: "checksum",
    FailureReason.VOCABULARY: "vocabulary",
    FailureReason.TEMPORAL: "temporal",
    FailureReason.NOT_POSITIVE: "amount",
    FailureReason.NOT_INTEGER: "amount",
}


class OpmeBaseException(Exception):
    """Base exception for all validation-engine errors."""

    def __init__(self, message: str, details: dict = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            details: Optional dict with additional context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """String representation with details if available."""
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ValidationError(OpmeBaseException):
    """Data validation failed."""

    def __init__(
        self,
        message: str,
        reason: FailureReason = FailureReason.PATTERN,
        details: dict = None,
    ):
        """
        Initialize validation failure.

        Args:
            message: Human-readable message shown next to the field
            reason: Machine-stable reason code
            details: Optional dict with additional context
        """
        super().__init__(message, details)
        self.reason = FailureReason(reason)

    @property
    def category(self) -> str:
        """Failure category of the underlying reason."""
        return self.reason.category


class ImportValidationError(OpmeBaseException):
    """Spreadsheet import failed."""
    pass
