"""
Formatting helpers for display values.

Deterministic transforms between canonical values and their conventional
Brazilian presentation. Formatters do not validate: callers validate first,
and formatters never raise on valid canonical input.
"""

import re
from datetime import date
from typing import Any, Optional

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberFormat

from config.constants import (
    UF_CODES,
    PHONE_REGION,
    CPF_LENGTH,
    CRM_LABEL,
    CURRENCY_SYMBOL,
    THOUSANDS_SEPARATOR,
    DECIMAL_SEPARATOR,
    BR_DATE_FORMAT,
)
from .canonical import strip_punctuation
from .rules import parse_date
from .validators import normalize_crm


def format_cpf(cpf: str) -> str:
    """Format CPF as 000.000.000-00 (input returned unchanged if not 11 digits)."""
    digits = strip_punctuation(cpf)
    return re.sub(r"^(\d{3})(\d{3})(\d{3})(\d{2})$", r"\1.\2.\3-\4", digits)


def format_cnpj(cnpj: str) -> str:
    """Format CNPJ as 00.000.000/0000-00 (input returned unchanged if not 14 digits)."""
    digits = strip_punctuation(cnpj)
    return re.sub(r"^(\d{2})(\d{3})(\d{3})(\d{4})(\d{2})$", r"\1.\2.\3/\4-\5", digits)


def format_cpf_or_cnpj(document: str) -> str:
    """Format a CPF or CNPJ depending on its length."""
    digits = strip_punctuation(document)
    if len(digits) == CPF_LENGTH:
        return format_cpf(digits)
    return format_cnpj(digits)


def format_cep(cep: str) -> str:
    """Format CEP as 00000-000."""
    digits = strip_punctuation(cep)
    return re.sub(r"^(\d{5})(\d{3})$", r"\1-\2", digits)


def format_phone(phone: str) -> str:
    """Format phone as (11) 98765-4321 or (11) 3456-7890 (input returned unchanged if unparseable)."""
    try:
        parsed = phonenumbers.parse(phone, PHONE_REGION)
    except NumberParseException:
        return phone
    return phonenumbers.format_number(parsed, PhoneNumberFormat.NATIONAL)


def format_currency(cents: int) -> str:
    """
    Format centavos as Brazilian reais.

    Uses integer arithmetic so no float rounding is involved.

    Args:
        cents: Amount in centavos

    Returns:
        Display string (e.g. 123456 -> "R$ 1.234,56")
    """
    sign = "-" if cents < 0 else ""
    reais, centavos = divmod(abs(int(cents)), 100)
    grouped = f"{reais:,}".replace(",", THOUSANDS_SEPARATOR)
    return f"{sign}{CURRENCY_SYMBOL} {grouped}{DECIMAL_SEPARATOR}{centavos:02d}"


def parse_currency_to_cents(value: Any) -> Optional[int]:
    """
    Parse a Brazilian currency string into centavos.

    Accepts "R$ 1.234,56", "1234,56", "1234" and plain numbers (reais).
    Inverse of format_currency.

    Returns:
        Amount in centavos, or None if nothing numeric can be read
    """
    if value is None:
        return None

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return round(value * 100)

    text = re.sub(r"[^0-9,\-]", "", str(value))
    if not text or not re.search(r"[0-9]", text):
        return None

    negative = text.startswith("-")
    text = text.replace("-", "")

    if DECIMAL_SEPARATOR in text:
        reais, _, fraction = text.rpartition(DECIMAL_SEPARATOR)
        reais = reais.replace(DECIMAL_SEPARATOR, "")
        fraction = (fraction + "00")[:2]
    else:
        reais, fraction = text, "00"

    cents = int(reais or "0") * 100 + int(fraction)
    return -cents if negative else cents


def format_crm(crm: str) -> str:
    """
    Format CRM for display.

    Args:
        crm: Canonical CRM (e.g. "SP123456")

    Returns:
        Display string (e.g. "CRM/SP 123456")
    """
    canonical = normalize_crm(crm)
    return f"{CRM_LABEL}/{canonical[:2]} {canonical[2:]}"


def extract_crm_uf(crm: str) -> Optional[str]:
    """
    Extract the UF embedded in a CRM.

    Returns:
        UF code, or None if the prefix is not a known UF
    """
    uf = normalize_crm(crm)[:2]
    return uf if uf in UF_CODES else None


def format_cid10(cid: str) -> str:
    """
    Format CID-10 for display.

    Inserts the '.' after the third character when it is missing
    ("I210" -> "I21.0") and uppercases the result.
    """
    code = re.sub(r"\s", "", cid).upper()
    if len(code) > 3 and "." not in code:
        return f"{code[:3]}.{code[3:]}"
    return code


def calculate_age(birth_date: Any, today: Optional[date] = None) -> int:
    """
    Calculate age in whole years.

    One year is subtracted when this year's birthday has not happened yet.

    Args:
        birth_date: Birth date (date or ISO/Brazilian string)
        today: Reference date (defaults to the current date)

    Returns:
        Age in years
    """
    born = parse_date(birth_date, "Data de nascimento")
    today = today if today is not None else date.today()

    age = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        age -= 1
    return age


def format_date_br(value: Any) -> str:
    """Format a date as DD/MM/YYYY."""
    return parse_date(value).strftime(BR_DATE_FORMAT)


def br_date_to_iso(date_br: str) -> str:
    """Convert "DD/MM/YYYY" to "YYYY-MM-DD"."""
    day, month, year = date_br.split("/")
    return f"{year}-{month.zfill(2)}-{day.zfill(2)}"


def iso_date_to_br(date_iso: str) -> str:
    """Convert "YYYY-MM-DD" to "DD/MM/YYYY"."""
    year, month, day = date_iso.split("-")
    return f"{day}/{month}/{year}"
