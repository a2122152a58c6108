"""
Record Operations for the OPME validation engine.

Whole-record validation for products, invoices, physicians, patients and
surgeries. Field rules come from domain.schemas; this layer adds the
cross-field checks and logs the outcome.
"""

import logging
from collections import Counter
from datetime import date
from typing import Any, Dict, List, Optional

from domain.exceptions import FailureReason
from domain.formatters import extract_crm_uf
from domain.models import FieldError, InvoiceItem, RecordValidationResult
from domain.schemas import (
    PRODUCT_RULES,
    INVOICE_RULES,
    PHYSICIAN_RULES,
    PATIENT_RULES,
    SURGERY_RULES,
    SCHEMAS,
    validate_record,
    merge_invoice_items,
)

logger = logging.getLogger(__name__)


def _log_result(record_type: str, result: RecordValidationResult) -> RecordValidationResult:
    if result.is_valid:
        logger.debug(f"{record_type} record accepted")
    else:
        fields = ", ".join(e.field for e in result.errors)
        logger.info(f"{record_type} record rejected: {len(result.errors)} error(s) [{fields}]")
    return result


def validate_product(data: Dict[str, Any], today: Optional[date] = None) -> RecordValidationResult:
    """
    Validate an OPME product registration.

    Args:
        data: Raw product fields (registro_anvisa, fabricante_cnpj, classe_risco, ...)
        today: Reference date for the expiry rule

    Returns:
        RecordValidationResult
    """
    return _log_result("product", validate_record(data, PRODUCT_RULES, today))


def _item_from_values(values: Dict[str, Any]) -> InvoiceItem:
    return InvoiceItem(
        product_code=values["codigo_produto"],
        description=values["descricao"],
        lot=values["lote"],
        expiry=values["validade"].isoformat(),
        anvisa_registration=values["registro_anvisa"],
        quantity=values["quantidade"],
        unit_price_cents=values["valor_unitario_cents"],
        ncm=values.get("ncm"),
        gtin=values.get("gtin"),
    )


def validate_invoice(data: Dict[str, Any], today: Optional[date] = None) -> RecordValidationResult:
    """
    Validate an NF-e with its OPME items.

    When every field passes, items sharing product code, lot and expiry are
    merged and values["itens"] holds InvoiceItem objects.

    Args:
        data: Raw invoice fields with an "itens" list
        today: Reference date (unused by invoice rules, kept for symmetry)

    Returns:
        RecordValidationResult
    """
    result = validate_record(data, INVOICE_RULES, today)

    if result.is_valid:
        items = [_item_from_values(values) for values in result.values.get("itens", [])]
        merged = merge_invoice_items(items)
        if len(merged) != len(items):
            logger.info(f"Merged {len(items)} invoice lines into {len(merged)}")
        result.values["itens"] = merged

    return _log_result("invoice", result)


def validate_physician(data: Dict[str, Any], today: Optional[date] = None) -> RecordValidationResult:
    """
    Validate a physician registration.

    Besides field rules, the declared crm_estado must match the UF embedded
    in the CRM.

    Returns:
        RecordValidationResult
    """
    result = validate_record(data, PHYSICIAN_RULES, today)

    crm = result.values.get("crm")
    declared_uf = result.values.get("crm_estado")
    if crm and declared_uf and extract_crm_uf(crm) != declared_uf:
        result.errors.append(FieldError(
            field="crm_estado",
            reason=FailureReason.PATTERN,
            message=f"UF do CRM ({extract_crm_uf(crm)}) difere do estado informado ({declared_uf})",
            value=data.get("crm_estado"),
        ))

    return _log_result("physician", result)


def validate_patient(data: Dict[str, Any], today: Optional[date] = None) -> RecordValidationResult:
    """
    Validate a patient record used for OPME traceability.

    Returns:
        RecordValidationResult
    """
    return _log_result("patient", validate_record(data, PATIENT_RULES, today))


def validate_surgery(data: Dict[str, Any], today: Optional[date] = None) -> RecordValidationResult:
    """
    Validate a surgery/procedure with its OPME materials.

    Besides field rules, hora_fim must be later than hora_inicio when both
    are given.

    Returns:
        RecordValidationResult
    """
    result = validate_record(data, SURGERY_RULES, today)

    start = result.values.get("hora_inicio")
    end = result.values.get("hora_fim")
    # "HH:MM" strings compare chronologically
    if start and end and end <= start:
        result.errors.append(FieldError(
            field="hora_fim",
            reason=FailureReason.TEMPORAL,
            message=f"Hora de término ({end}) deve ser posterior ao início ({start})",
            value=data.get("hora_fim"),
        ))

    return _log_result("surgery", result)


RECORD_VALIDATORS = {
    "product": validate_product,
    "invoice": validate_invoice,
    "physician": validate_physician,
    "patient": validate_patient,
    "surgery": validate_surgery,
}


def validate_by_type(
    record_type: str,
    data: Dict[str, Any],
    today: Optional[date] = None,
) -> RecordValidationResult:
    """
    Validate a record by type name.

    Types without cross-field checks (e.g. "invoice_item") use their schema
    directly.

    Raises:
        ValueError: If record_type is unknown
    """
    if record_type in RECORD_VALIDATORS:
        return RECORD_VALIDATORS[record_type](data, today)
    if record_type in SCHEMAS:
        return _log_result(record_type, validate_record(data, SCHEMAS[record_type], today))
    raise ValueError(
        f"Unknown record type: '{record_type}'. Valid: {sorted(SCHEMAS)}"
    )


def get_validation_summary(results: List[RecordValidationResult]) -> Dict[str, Any]:
    """
    Summarize a batch of validation results.

    Returns:
        Dict with:
        - total: Number of records
        - valid: Records without errors
        - invalid: Records with at least one error
        - by_reason: Error count per reason code
        - by_field: Error count per field
    """
    reasons = Counter()
    fields = Counter()
    for result in results:
        for error in result.errors:
            reasons[error.reason.value] += 1
            fields[error.field] += 1

    valid = sum(1 for r in results if r.is_valid)
    return {
        "total": len(results),
        "valid": valid,
        "invalid": len(results) - valid,
        "by_reason": dict(reasons),
        "by_field": dict(fields),
    }
