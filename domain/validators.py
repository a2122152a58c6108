"""
Structural validators for regulatory codes.

These validators check length, charset and sub-patterns; the issuing
authorities publish no check-digit scheme for these codes.
Phone numbers are checked against libphonenumber metadata.
All validators return the canonical value or raise ValidationError.
"""

import re
from typing import Any

import phonenumbers
from phonenumbers import NumberParseException

from config.constants import (
    UF_CODES,
    PHONE_REGION,
    NCM_LENGTH,
    CFOP_LENGTH,
    NFE_KEY_LENGTH,
    TUSS_LENGTH,
    ANVISA_REGISTRATION_LENGTH,
    CEP_LENGTH,
    CRM_MIN_DIGITS,
    CRM_MAX_DIGITS,
    RQE_MIN_DIGITS,
    RQE_MAX_DIGITS,
    LOT_MIN_LENGTH,
    LOT_MAX_LENGTH,
    MAX_EMAIL_LENGTH,
    ERROR_MESSAGES,
)
from .canonical import require_digits, require_text
from .exceptions import FailureReason, ValidationError

CID10_PATTERN = re.compile(r"^[A-Z][0-9]{2}(\.[0-9]{1,2})?$")
CBHPM_PATTERN = re.compile(r"^[0-9]\.[0-9]{2}\.[0-9]{2}\.[0-9]{2}-[0-9]$")
LOT_PATTERN = re.compile(r"^[A-Za-z0-9-]+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
STATE_REGISTRATION_PATTERN = re.compile(r"^[0-9./-]+$")
CRM_LABEL_PREFIX = re.compile(r"^CRM[/ -]?")
CRM_PREFIX_FORM = re.compile(r"^([A-Z]{2})[ /-]?([0-9]+)$")
CRM_SUFFIX_FORM = re.compile(r"^([0-9]+)[ /-]?([A-Z]{2})$")


def validate_ncm(raw: Any) -> str:
    """
    Validate NCM (Nomenclatura Comum do Mercosul) customs code.

    Args:
        raw: NCM code, dots allowed (e.g. "9021.10.10")

    Returns:
        Canonical 8-digit string

    Raises:
        ValidationError: If invalid
    """
    return require_digits(raw, "NCM", length=NCM_LENGTH)


def validate_cfop(raw: Any) -> str:
    """
    Validate CFOP (Código Fiscal de Operações e Prestações).

    Rules:
    - Exactly 4 digits (e.g. "5102" or "5.102")
    - First digit 1-7; 0, 8 and 9 are not valid operation origins

    Returns:
        Canonical 4-digit string

    Raises:
        ValidationError: If invalid
    """
    cfop = require_digits(raw, "CFOP", length=CFOP_LENGTH)

    if cfop[0] not in "1234567":
        raise ValidationError(
            f"CFOP inválido: primeiro dígito deve ser de 1 a 7 (recebido: {cfop[0]})",
            reason=FailureReason.PATTERN,
            details={"value": cfop},
        )

    return cfop


def validate_nfe_key(raw: Any) -> str:
    """
    Validate NF-e access key (chave de acesso).

    Returns:
        Canonical 44-digit string

    Raises:
        ValidationError: If invalid
    """
    return require_digits(raw, "Chave de acesso", length=NFE_KEY_LENGTH)


def validate_uf(raw: Any) -> str:
    """
    Validate Brazilian federative unit abbreviation.

    Returns:
        Uppercase UF (e.g. "SP")

    Raises:
        ValidationError: If not one of the 27 UFs
    """
    uf = require_text(raw, "UF").upper()

    if uf not in UF_CODES:
        raise ValidationError(
            f"UF inválida: '{uf}'",
            reason=FailureReason.VOCABULARY,
            details={"value": uf},
        )

    return uf


def normalize_crm(raw: Any) -> str:
    """
    Bring a CRM into "UF + digits" order without validating it.

    Accepts "sp 123456", "CRM/SP 123456" and the suffix form "123456-SP".
    Anything else is returned uppercased with whitespace removed so the
    validator reports what is wrong with it.
    """
    text = re.sub(r"\s+", " ", str(raw).strip().upper())
    text = CRM_LABEL_PREFIX.sub("", text)

    prefix_form = CRM_PREFIX_FORM.match(text)
    if prefix_form:
        return prefix_form.group(1) + prefix_form.group(2)

    suffix_form = CRM_SUFFIX_FORM.match(text)
    if suffix_form:
        return suffix_form.group(2) + suffix_form.group(1)

    return text.replace(" ", "")


def validate_crm(raw: Any) -> str:
    """
    Validate CRM (Conselho Regional de Medicina) registration.

    Rules:
    - Two-letter UF prefix from the fixed list
    - Followed by 4-8 digits
    - Case-insensitive input, uppercase output

    Args:
        raw: CRM (e.g. "SP123456", "mg 123456", "CRM/RJ 12345678")

    Returns:
        Canonical CRM (e.g. "SP123456")

    Raises:
        ValidationError: If invalid
    """
    crm = normalize_crm(require_text(raw, "CRM"))

    prefix, number = crm[:2], crm[2:]

    if len(prefix) < 2 or not prefix.isalpha():
        raise ValidationError(
            "CRM inválido (formato: UF + 4-8 dígitos, ex: SP123456)",
            reason=FailureReason.PATTERN,
            details={"value": crm},
        )

    if prefix not in UF_CODES:
        raise ValidationError(
            f"CRM inválido: UF '{prefix}' não existe",
            reason=FailureReason.VOCABULARY,
            details={"value": crm, "uf": prefix},
        )

    if number and (not number.isascii() or not number.isdigit()):
        raise ValidationError(
            ERROR_MESSAGES["charset"].format(field="Número do CRM", allowed="números"),
            reason=FailureReason.CHARSET,
            details={"value": crm},
        )

    if not CRM_MIN_DIGITS <= len(number) <= CRM_MAX_DIGITS:
        raise ValidationError(
            f"CRM deve ter entre {CRM_MIN_DIGITS} e {CRM_MAX_DIGITS} dígitos após a UF",
            reason=FailureReason.LENGTH,
            details={"value": crm},
        )

    return crm


def validate_rqe(raw: Any) -> str:
    """
    Validate RQE (Registro de Qualificação de Especialista).

    The field is optional on forms; optionality is applied by the schema
    layer, so an empty value fails here.

    Returns:
        Canonical 4-8 digit string

    Raises:
        ValidationError: If invalid
    """
    return require_digits(
        raw, "RQE", min_length=RQE_MIN_DIGITS, max_length=RQE_MAX_DIGITS, strip=False
    )


def validate_cid10(raw: Any) -> str:
    """
    Validate CID-10 diagnosis code.

    Expected formats:
    - "I21"
    - "I21.0"
    - "I21.01"

    Args:
        raw: Diagnosis code, any case

    Returns:
        Uppercase code

    Raises:
        ValidationError: If invalid format
    """
    cid = re.sub(r"\s", "", require_text(raw, "CID-10")).upper()

    if not cid[0].isalpha():
        raise ValidationError(
            "CID-10 inválido: deve começar com uma letra",
            reason=FailureReason.PATTERN,
            details={"value": cid},
        )

    if not CID10_PATTERN.match(cid):
        raise ValidationError(
            f"CID-10 inválido: '{cid}'. Formato esperado: I21, I21.0 ou I21.01",
            reason=FailureReason.PATTERN,
            details={"value": cid},
        )

    return cid


def validate_tuss(raw: Any) -> str:
    """
    Validate TUSS procedure code (8 digits).

    Raises:
        ValidationError: If invalid
    """
    return require_digits(raw, "Código TUSS", length=TUSS_LENGTH, strip=False)


def validate_cbhpm(raw: Any) -> str:
    """
    Validate CBHPM procedure code.

    The grouping is part of the code: "3.01.01.01-1".

    Returns:
        Trimmed code

    Raises:
        ValidationError: If invalid
    """
    code = require_text(raw, "Código CBHPM")

    if re.search(r"[^0-9.\-]", code):
        raise ValidationError(
            ERROR_MESSAGES["charset"].format(field="Código CBHPM", allowed="números, '.' e '-'"),
            reason=FailureReason.CHARSET,
            details={"value": code},
        )

    if not CBHPM_PATTERN.match(code):
        raise ValidationError(
            "Código CBHPM inválido (formato: X.XX.XX.XX-X)",
            reason=FailureReason.PATTERN,
            details={"value": code},
        )

    return code


def validate_lot(raw: Any) -> str:
    """
    Validate production lot number.

    Rules:
    - 3-30 characters
    - Letters, digits and hyphens only

    Returns:
        Trimmed lot number

    Raises:
        ValidationError: If invalid
    """
    lot = require_text(raw, "Lote")

    if not LOT_MIN_LENGTH <= len(lot) <= LOT_MAX_LENGTH:
        raise ValidationError(
            ERROR_MESSAGES["length_range"].format(
                field="Lote", minimum=LOT_MIN_LENGTH, maximum=LOT_MAX_LENGTH, actual=len(lot)
            ),
            reason=FailureReason.LENGTH,
            details={"value": lot},
        )

    if not lot.isascii() or not LOT_PATTERN.match(lot):
        raise ValidationError(
            ERROR_MESSAGES["charset"].format(field="Lote", allowed="letras, números e '-'"),
            reason=FailureReason.CHARSET,
            details={"value": lot},
        )

    return lot


def validate_anvisa_registration(raw: Any) -> str:
    """
    Validate ANVISA product registration number (13 digits).

    Raises:
        ValidationError: If invalid
    """
    return require_digits(raw, "Registro ANVISA", length=ANVISA_REGISTRATION_LENGTH)


def validate_cep(raw: Any) -> str:
    """
    Validate CEP postal code (8 digits, "01310-100" accepted).

    Raises:
        ValidationError: If invalid
    """
    return require_digits(raw, "CEP", length=CEP_LENGTH)


def validate_phone(raw: Any) -> str:
    """
    Validate Brazilian phone number.

    Rules:
    - 10 digits (landline) or 11 digits (mobile) including area code
    - Must be a valid number for region BR (area code and subscriber
      prefix checked against libphonenumber metadata)

    Args:
        raw: Phone number (e.g. "(11) 98765-4321")

    Returns:
        Canonical digit string (national significant number)

    Raises:
        ValidationError: If invalid
    """
    phone = require_digits(raw, "Telefone", min_length=10, max_length=11)

    try:
        parsed = phonenumbers.parse(phone, PHONE_REGION)
    except NumberParseException as e:
        raise ValidationError(
            f"Telefone inválido: {phone}",
            reason=FailureReason.PATTERN,
            details={"value": phone},
        ) from e

    if not phonenumbers.is_valid_number(parsed):
        raise ValidationError(
            f"Telefone inválido: {phone}",
            reason=FailureReason.PATTERN,
            details={"value": phone},
        )

    return phonenumbers.national_significant_number(parsed)


def validate_email(raw: Any) -> str:
    """
    Validate email address.

    Returns:
        Lowercased, trimmed email

    Raises:
        ValidationError: If invalid
    """
    email = require_text(raw, "Email").lower()

    if len(email) > MAX_EMAIL_LENGTH:
        raise ValidationError(
            f"Email muito longo: {len(email)} caracteres (max {MAX_EMAIL_LENGTH})",
            reason=FailureReason.LENGTH,
            details={"value": email},
        )

    if not EMAIL_PATTERN.match(email):
        raise ValidationError(
            f"Email inválido: '{email}'",
            reason=FailureReason.PATTERN,
            details={"value": email},
        )

    return email


def validate_state_registration(raw: Any) -> str:
    """
    Validate Inscrição Estadual (8-14 characters of digits, '.', '/', '-').

    Raises:
        ValidationError: If invalid
    """
    registration = require_text(raw, "Inscrição Estadual")

    if not 8 <= len(registration) <= 14:
        raise ValidationError(
            ERROR_MESSAGES["length_range"].format(
                field="Inscrição Estadual", minimum=8, maximum=14, actual=len(registration)
            ),
            reason=FailureReason.LENGTH,
            details={"value": registration},
        )

    if not STATE_REGISTRATION_PATTERN.match(registration):
        raise ValidationError(
            ERROR_MESSAGES["charset"].format(
                field="Inscrição Estadual", allowed="números, '.', '/' e '-'"
            ),
            reason=FailureReason.CHARSET,
            details={"value": registration},
        )

    return registration


def validate_invoice_number(raw: Any) -> str:
    """Validate NF-e number (1-9 digits)."""
    return require_digits(raw, "Número da NF-e", min_length=1, max_length=9, strip=False)


def validate_invoice_series(raw: Any) -> str:
    """Validate NF-e series (1-3 digits)."""
    return require_digits(raw, "Série", min_length=1, max_length=3, strip=False)
