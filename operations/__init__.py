"""
Operations layer for the OPME validation engine.

Record-level validation and spreadsheet import - pure functions with
logging. No persistence; callers store accepted values themselves.
"""

from .record_ops import (
    validate_product,
    validate_invoice,
    validate_physician,
    validate_patient,
    validate_surgery,
    validate_by_type,
    get_validation_summary,
)

from .import_ops import (
    import_records,
    validate_dataframe,
    get_import_summary,
    IMPORTABLE_TYPES,
)

__all__ = [
    # Record operations
    "validate_product",
    "validate_invoice",
    "validate_physician",
    "validate_patient",
    "validate_surgery",
    "validate_by_type",
    "get_validation_summary",
    # Import operations
    "import_records",
    "validate_dataframe",
    "get_import_summary",
    "IMPORTABLE_TYPES",
]
