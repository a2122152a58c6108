"""
Import Operations for the OPME validation engine.

Bulk validation of registration spreadsheets. Every row goes through the
same record schema a form would use, so records entered by hand and
records imported in bulk pass identical rules.

- import_records() - Read a spreadsheet and validate every row
- validate_dataframe() - Validate rows already loaded in a DataFrame
"""

import logging
from datetime import date
from pathlib import Path
from typing import List, Dict, Any, Optional

import pandas as pd

from config.settings import get_settings
from domain.exceptions import ImportValidationError
from domain.formatters import parse_currency_to_cents
from domain.models import ImportReport
from domain.rules import days_until_expiry, is_high_risk, is_near_expiry
from domain.schemas import SCHEMAS
from services.excel_reader import ExcelReader, cell_value
from .record_ops import validate_by_type

logger = logging.getLogger(__name__)

# Record types with a flat schema (one spreadsheet row per record)
IMPORTABLE_TYPES = ("product", "physician", "patient", "invoice_item")

# Amount columns may hold "R$ 1.234,56" instead of centavos
CENTS_FIELDS = ("preco_tabela_cents", "valor_unitario_cents")


def get_schema_fields(record_type: str) -> List[str]:
    """
    Get field names for an importable record type.

    Raises:
        ImportValidationError: If record type cannot be imported
    """
    if record_type not in IMPORTABLE_TYPES:
        raise ImportValidationError(
            f"Tipo de registro não importável: '{record_type}'",
            details={"allowed": list(IMPORTABLE_TYPES)},
        )
    return [rule.name for rule in SCHEMAS[record_type]]


def get_required_fields(record_type: str) -> List[str]:
    """Get fields whose validators are mandatory (not wrapped with optional())."""
    get_schema_fields(record_type)
    return [
        rule.name
        for rule in SCHEMAS[record_type]
        if not hasattr(rule.validator, "__wrapped__")
    ]


def _prepare_row(row: Dict[str, Any]) -> Dict[str, Any]:
    """Convert spreadsheet currency text into centavos."""
    prepared = dict(row)
    for field_name in CENTS_FIELDS:
        value = prepared.get(field_name)
        if isinstance(value, str) and ("," in value or "R$" in value):
            cents = parse_currency_to_cents(value)
            if cents is not None:
                prepared[field_name] = cents
    return prepared


def _collect_warnings(
    record_type: str,
    row_number: int,
    values: Dict[str, Any],
    today: Optional[date],
    alert_days: int,
) -> List[str]:
    """Non-blocking notices for accepted product rows."""
    warnings = []
    if record_type != "product":
        return warnings

    expiry = values.get("validade")
    if expiry and is_near_expiry(expiry, alert_days, today):
        days = days_until_expiry(expiry, today)
        warnings.append(
            f"Linha {row_number}: produto {values['registro_anvisa']} vence em {days} dia(s)"
        )

    if is_high_risk(values.get("classe_risco")) and not values.get("lote"):
        warnings.append(
            f"Linha {row_number}: produto classe {values['classe_risco']} sem lote informado"
        )

    return warnings


def _validate_rows(
    rows: List[Dict[str, Any]],
    record_type: str,
    today: Optional[date] = None,
) -> ImportReport:
    settings = get_settings()
    report = ImportReport(record_type=record_type, total_rows=len(rows))

    for position, raw_row in enumerate(rows):
        row_number = raw_row.get("_row", position + 2)
        row = _prepare_row({k: v for k, v in raw_row.items() if k != "_row"})

        result = validate_by_type(record_type, row, today)

        if result.is_valid:
            report.valid_rows.append(result.values)
            report.warnings.extend(
                _collect_warnings(record_type, row_number, result.values, today, settings.expiry_alert_days)
            )
        else:
            report.row_errors[row_number] = result.errors
            logger.warning(
                f"Row {row_number} rejected: "
                + "; ".join(f"{e.field}: {e.reason.value}" for e in result.errors)
            )

    logger.info(
        f"Validated {report.total_rows} {record_type} rows: "
        f"{report.valid_count} valid, {report.invalid_count} invalid"
    )
    return report


def validate_dataframe(
    df: pd.DataFrame,
    record_type: str,
    today: Optional[date] = None,
) -> ImportReport:
    """
    Validate every row of a DataFrame.

    This is a PURE FUNCTION - no file access, no side effects.
    Columns must already be named after schema fields; unknown columns are
    ignored and missing optional columns are treated as blank.

    Args:
        df: Rows to validate
        record_type: One of IMPORTABLE_TYPES
        today: Reference date for date rules

    Returns:
        ImportReport

    Raises:
        ImportValidationError: If record type is not importable or
                               required columns are missing
    """
    fields = get_schema_fields(record_type)
    missing = [f for f in get_required_fields(record_type) if f not in df.columns]
    if missing:
        raise ImportValidationError(
            f"Colunas obrigatórias ausentes: {', '.join(missing)}",
            details={"missing": missing, "available": list(df.columns)},
        )

    columns = [f for f in fields if f in df.columns]
    rows = []
    # Row numbers follow position, the index may be anything
    for position, values in enumerate(df[columns].itertuples(index=False, name=None)):
        record = {f: cell_value(v) for f, v in zip(columns, values)}
        record["_row"] = position + 2
        rows.append(record)

    return _validate_rows(rows, record_type, today)


def import_records(
    file_path: Path,
    record_type: str,
    today: Optional[date] = None,
    sheet_name: Optional[str] = None,
) -> ImportReport:
    """
    Import and validate a registration spreadsheet.

    Args:
        file_path: Path to .xlsx, .xls or .csv file
        record_type: One of IMPORTABLE_TYPES
        today: Reference date for date rules
        sheet_name: Sheet to read (None = first sheet)

    Returns:
        ImportReport with accepted rows, per-row errors and warnings

    Raises:
        ImportValidationError: If file is invalid, unreadable or lacks
                               required columns

    Example:
        >>> report = import_records(Path("produtos.xlsx"), "product")
        >>> print(get_import_summary(report))
    """
    logger.info(f"Importing {record_type} records from: {file_path}")

    fields = get_schema_fields(record_type)
    reader = ExcelReader(file_path)
    rows = reader.read_records(
        fields=fields,
        required=get_required_fields(record_type),
        sheet_name=sheet_name,
    )

    if not rows:
        raise ImportValidationError(
            "Nenhuma linha encontrada na planilha",
            details={"file": str(file_path)},
        )

    return _validate_rows(rows, record_type, today)


def get_import_summary(report: ImportReport) -> Dict[str, Any]:
    """
    Get summary statistics for an import.

    Returns:
        Dict with counts, success rate, error count per field and warnings
    """
    errors_by_field: Dict[str, int] = {}
    for errors in report.row_errors.values():
        for error in errors:
            errors_by_field[error.field] = errors_by_field.get(error.field, 0) + 1

    return {
        "record_type": report.record_type,
        "total_rows": report.total_rows,
        "valid_rows": report.valid_count,
        "invalid_rows": report.invalid_count,
        "success_rate": report.success_rate,
        "errors_by_field": errors_by_field,
        "warnings": len(report.warnings),
    }
