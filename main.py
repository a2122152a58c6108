#!/usr/bin/env python3
"""
OPME Validadores
Command-line entry point for checking single values and spreadsheets.

Usage:
    python main.py check cpf 529.982.247-25
    python main.py check crm "mg 123456"
    python main.py import produtos.xlsx --type product
"""

import argparse
import logging
import sys
from pathlib import Path

from config.constants import APP_NAME, APP_VERSION
from config.settings import get_settings
from domain import checksums, formatters, rules, validators
from domain.exceptions import ImportValidationError, ValidationError
from operations import IMPORTABLE_TYPES, import_records, get_import_summary

# kind -> (validator, display formatter or None)
CHECKS = {
    "cpf": (checksums.validate_cpf, formatters.format_cpf),
    "cnpj": (checksums.validate_cnpj, formatters.format_cnpj),
    "ean13": (checksums.validate_ean13, None),
    "cns": (checksums.validate_cns, None),
    "ncm": (validators.validate_ncm, None),
    "cfop": (validators.validate_cfop, None),
    "nfe-key": (validators.validate_nfe_key, None),
    "crm": (validators.validate_crm, formatters.format_crm),
    "rqe": (validators.validate_rqe, None),
    "cid10": (validators.validate_cid10, formatters.format_cid10),
    "tuss": (validators.validate_tuss, None),
    "cbhpm": (validators.validate_cbhpm, None),
    "lot": (validators.validate_lot, None),
    "anvisa": (validators.validate_anvisa_registration, None),
    "cep": (validators.validate_cep, formatters.format_cep),
    "phone": (validators.validate_phone, formatters.format_phone),
    "risk-class": (rules.validate_risk_class, None),
    "birth-date": (rules.validate_birth_date, formatters.format_date_br),
    "surgery-date": (rules.validate_surgery_date, formatters.format_date_br),
    "expiry-date": (rules.validate_expiry_date, formatters.format_date_br),
    "time": (rules.validate_time, None),
    "sex": (rules.validate_sex, None),
    "blood-type": (rules.validate_blood_type, None),
    "amount": (rules.validate_amount_cents, formatters.format_currency),
}

_console_handler = None


def setup_logging(level: str = "INFO"):
    """
    Configure logging for the application.

    Sets up console output with pretty formatting.
    Suppresses noisy third-party loggers.
    """
    # Create formatter with timestamp, level, module name
    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    # Console handler (stderr keeps stdout for results)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Root logger (replace the console handler from a previous call)
    global _console_handler
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    if _console_handler is not None:
        root_logger.removeHandler(_console_handler)
    root_logger.addHandler(console_handler)
    _console_handler = console_handler

    # Suppress noisy third-party loggers
    logging.getLogger('openpyxl').setLevel(logging.WARNING)

    logging.debug(f"{APP_NAME} {APP_VERSION} - logging level: {level}")


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="opme-validate",
        description=f"{APP_NAME} {APP_VERSION}",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Validate a single value")
    check.add_argument("kind", choices=sorted(CHECKS))
    check.add_argument("value")

    imp = subparsers.add_parser("import", help="Validate a registration spreadsheet")
    imp.add_argument("file", type=Path)
    imp.add_argument(
        "--type",
        dest="record_type",
        default="product",
        choices=IMPORTABLE_TYPES,
    )
    imp.add_argument("--sheet", default=None)

    return parser


def run_check(kind: str, value: str) -> int:
    """Validate one value and print canonical/display form or the failure."""
    validator, formatter = CHECKS[kind]
    raw = value
    if kind == "amount":
        raw = int(value) if value.lstrip("+-").isdigit() else value

    try:
        canonical = validator(raw)
    except ValidationError as e:
        print(f"INVÁLIDO [{e.reason.value}] {e.message}")
        return 1

    print(f"OK {canonical}")
    if formatter is not None:
        print(formatter(canonical))
    return 0


def run_import(file_path: Path, record_type: str, sheet_name: str = None) -> int:
    """Validate a spreadsheet and print a summary."""
    try:
        report = import_records(file_path, record_type, sheet_name=sheet_name)
    except ImportValidationError as e:
        print(f"ERRO {e}")
        return 1

    summary = get_import_summary(report)
    print(
        f"{summary['valid_rows']}/{summary['total_rows']} linhas válidas "
        f"({summary['success_rate']}%)"
    )
    for row_number, errors in sorted(report.row_errors.items()):
        for error in errors:
            print(f"  linha {row_number}: {error.field} [{error.reason.value}] {error.message}")
    for warning in report.warnings:
        print(f"  aviso: {warning}")

    return 0 if not report.row_errors else 1


def main(argv=None) -> int:
    """Main application entry point."""
    settings = get_settings()
    setup_logging("DEBUG" if settings.debug_mode else settings.log_level)

    args = build_parser().parse_args(argv)

    if args.command == "check":
        return run_check(args.kind, args.value)
    return run_import(args.file, args.record_type, args.sheet)


if __name__ == "__main__":
    sys.exit(main())
