"""
Domain layer for the OPME validation engine.

This module contains the checksum, structural and business-rule validators,
formatters and record schemas. No dependencies on I/O, logging or
external frameworks.
"""

from .models import (
    FieldError,
    RecordValidationResult,
    InvoiceItem,
    ImportReport,
)

from .exceptions import (
    FailureReason,
    OpmeBaseException,
    ValidationError,
    ImportValidationError,
)

from .checksums import (
    validate_cpf,
    validate_cnpj,
    validate_cpf_or_cnpj,
    validate_ean13,
    validate_cns,
    cpf_check_digits,
    cnpj_check_digits,
    ean13_check_digit,
    cns_from_pis,
)

from .validators import (
    validate_ncm,
    validate_cfop,
    validate_nfe_key,
    validate_uf,
    validate_crm,
    validate_rqe,
    validate_cid10,
    validate_tuss,
    validate_cbhpm,
    validate_lot,
    validate_anvisa_registration,
    validate_cep,
    validate_phone,
    validate_email,
    validate_state_registration,
    validate_invoice_number,
    validate_invoice_series,
)

from .rules import (
    parse_date,
    validate_risk_class,
    is_high_risk,
    validate_sex,
    validate_blood_type,
    validate_birth_date,
    validate_surgery_date,
    validate_expiry_date,
    days_until_expiry,
    is_near_expiry,
    validate_time,
    validate_amount_cents,
    validate_quantity,
)

from .formatters import (
    format_cpf,
    format_cnpj,
    format_cpf_or_cnpj,
    format_cep,
    format_phone,
    format_currency,
    parse_currency_to_cents,
    format_crm,
    extract_crm_uf,
    format_cid10,
    calculate_age,
    format_date_br,
    br_date_to_iso,
    iso_date_to_br,
)

from .canonical import strip_punctuation

from .schemas import (
    FieldRule,
    optional,
    validate_record,
    merge_invoice_items,
    SCHEMAS,
)

__all__ = [
    # Models
    "FieldError",
    "RecordValidationResult",
    "InvoiceItem",
    "ImportReport",
    # Exceptions
    "FailureReason",
    "OpmeBaseException",
    "ValidationError",
    "ImportValidationError",
    # Checksum validators
    "validate_cpf",
    "validate_cnpj",
    "validate_cpf_or_cnpj",
    "validate_ean13",
    "validate_cns",
    "cpf_check_digits",
    "cnpj_check_digits",
    "ean13_check_digit",
    "cns_from_pis",
    # Structural validators
    "validate_ncm",
    "validate_cfop",
    "validate_nfe_key",
    "validate_uf",
    "validate_crm",
    "validate_rqe",
    "validate_cid10",
    "validate_tuss",
    "validate_cbhpm",
    "validate_lot",
    "validate_anvisa_registration",
    "validate_cep",
    "validate_phone",
    "validate_email",
    "validate_state_registration",
    "validate_invoice_number",
    "validate_invoice_series",
    # Business rules
    "parse_date",
    "validate_risk_class",
    "is_high_risk",
    "validate_sex",
    "validate_blood_type",
    "validate_birth_date",
    "validate_surgery_date",
    "validate_expiry_date",
    "days_until_expiry",
    "is_near_expiry",
    "validate_time",
    "validate_amount_cents",
    "validate_quantity",
    # Formatters
    "strip_punctuation",
    "format_cpf",
    "format_cnpj",
    "format_cpf_or_cnpj",
    "format_cep",
    "format_phone",
    "format_currency",
    "parse_currency_to_cents",
    "format_crm",
    "extract_crm_uf",
    "format_cid10",
    "calculate_age",
    "format_date_br",
    "br_date_to_iso",
    "iso_date_to_br",
    # Schemas
    "FieldRule",
    "optional",
    "validate_record",
    "merge_invoice_items",
    "SCHEMAS",
]
