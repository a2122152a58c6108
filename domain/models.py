"""
Domain models for the OPME validation engine.

These dataclasses carry validation outcomes and the few transient records
the engine assembles. They are framework-agnostic and hold no state
between calls.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .exceptions import FailureReason, ValidationError


@dataclass
class FieldError:
    """
    A single rejected field inside a record.

    Mirrors ValidationError so forms can render the message next to the
    field and branch on the reason code.
    """

    field: str
    reason: FailureReason
    message: str
    value: Any = None

    @classmethod
    def from_exception(cls, field_name: str, error: ValidationError, value: Any = None) -> "FieldError":
        """Build a FieldError from a raised ValidationError."""
        return cls(
            field=field_name,
            reason=error.reason,
            message=error.message,
            value=value,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "field": self.field,
            "reason": self.reason.value,
            "message": self.message,
            "value": self.value,
        }


@dataclass
class RecordValidationResult:
    """
    Outcome of validating a whole record.

    values holds canonical values of every accepted field; errors holds one
    FieldError per rejected field. A record is valid only if errors is empty.
    """

    values: Dict[str, Any] = field(default_factory=dict)
    errors: List[FieldError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """True if no field was rejected."""
        return not self.errors

    def error_for(self, field_name: str) -> Optional[FieldError]:
        """Get the first error for a field, or None if the field passed."""
        for error in self.errors:
            if error.field == field_name:
                return error
        return None

    def raise_if_invalid(self) -> Dict[str, Any]:
        """
        Return canonical values or raise.

        Raises:
            ValidationError: If any field was rejected; details lists all errors
        """
        if self.errors:
            first = self.errors[0]
            raise ValidationError(
                f"Registro inválido: {len(self.errors)} campo(s) com erro",
                reason=first.reason,
                details={"errors": [e.to_dict() for e in self.errors]},
            )
        return self.values


@dataclass
class InvoiceItem:
    """
    NF-e line item for OPME products.

    Lines with the same product code, lot and expiry describe the same
    physical batch and are merged by quantity.
    """

    product_code: str
    description: str
    lot: str
    expiry: str
    anvisa_registration: str
    quantity: int
    unit_price_cents: int
    ncm: Optional[str] = None
    gtin: Optional[str] = None

    def __post_init__(self):
        """Validate item data."""
        if not self.product_code:
            raise ValueError("product_code cannot be empty")
        if self.quantity <= 0:
            raise ValueError("quantity must be positive")

    @property
    def merge_key(self) -> tuple:
        """Key identifying the same batch at the same price: (product code, lot, expiry, unit price)."""
        return (self.product_code, self.lot, self.expiry, self.unit_price_cents)

    @property
    def total_cents(self) -> int:
        """Line total in centavos."""
        return self.quantity * self.unit_price_cents


@dataclass
class ImportReport:
    """
    Result of validating a spreadsheet of records.

    Row numbers are 1-based spreadsheet rows (header is row 1).
    """

    record_type: str
    total_rows: int = 0
    valid_rows: List[Dict[str, Any]] = field(default_factory=list)
    row_errors: Dict[int, List[FieldError]] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    @property
    def valid_count(self) -> int:
        return len(self.valid_rows)

    @property
    def invalid_count(self) -> int:
        return len(self.row_errors)

    @property
    def success_rate(self) -> float:
        """Percentage of valid rows."""
        if self.total_rows == 0:
            return 0.0
        return round(self.valid_count / self.total_rows * 100, 1)
