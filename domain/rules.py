"""
Business-rule validators for the OPME validation engine.

These rules need context that structural checks do not: the current date,
closed domain vocabularies and monetary conventions. They are pure
functions of (value, today); "today" is read at call time when not given
and never cached.
"""

import math
import re
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Optional

from config.constants import (
    RISK_CLASSES,
    HIGH_RISK_CLASSES,
    SEX_CODES,
    BLOOD_TYPES,
    ISO_DATE_FORMAT,
    BR_DATE_FORMAT,
    DEFAULT_EXPIRY_ALERT_DAYS,
    ERROR_MESSAGES,
)
from .canonical import require_text
from .exceptions import FailureReason, ValidationError

TIME_PATTERN = re.compile(r"^([01][0-9]|2[0-3]):([0-5][0-9])$")
INTEGER_TEXT_PATTERN = re.compile(r"^[+-]?[0-9]+$")


def _today(today: Optional[date]) -> date:
    return today if today is not None else date.today()


def parse_date(raw: Any, field: str = "Data") -> date:
    """
    Parse a calendar date.

    Accepts date/datetime objects, ISO "YYYY-MM-DD" and Brazilian
    "DD/MM/YYYY" strings.

    Args:
        raw: Date value
        field: Field label used in messages

    Returns:
        date object

    Raises:
        ValidationError: EMPTY or FORMAT
    """
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw

    text = require_text(raw, field)

    for fmt in (ISO_DATE_FORMAT, BR_DATE_FORMAT):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    raise ValidationError(
        ERROR_MESSAGES["format"].format(field=field),
        reason=FailureReason.FORMAT,
        details={"value": text},
    )


def _require_member(raw: Any, field: str, allowed: tuple) -> str:
    """Exact, case-sensitive membership check in a closed vocabulary."""
    if raw is None or raw == "":
        raise ValidationError(
            ERROR_MESSAGES["empty"].format(field=field),
            reason=FailureReason.EMPTY,
        )

    if not isinstance(raw, str) or raw not in allowed:
        raise ValidationError(
            ERROR_MESSAGES["vocabulary"].format(field=field, allowed=", ".join(allowed)),
            reason=FailureReason.VOCABULARY,
            details={"value": raw},
        )

    return raw


# ==================== Vocabularies ====================


def validate_risk_class(raw: Any) -> str:
    """
    Validate ANVISA risk class.

    Only the uppercase Roman numerals I, II, III and IV are accepted.
    Lowercase or Arabic numerals are rejected, not coerced.

    Raises:
        ValidationError: If not an exact match
    """
    return _require_member(raw, "Classe de risco", RISK_CLASSES)


def is_high_risk(risk_class: str) -> bool:
    """Check if a risk class is III or IV (implants, life support)."""
    return risk_class in HIGH_RISK_CLASSES


def validate_sex(raw: Any) -> str:
    """Validate biological sex code (M, F or I), case-sensitive."""
    return _require_member(raw, "Sexo", SEX_CODES)


def validate_blood_type(raw: Any) -> str:
    """Validate ABO/Rh blood type; a type without Rh sign is rejected."""
    return _require_member(raw, "Tipo sanguíneo", BLOOD_TYPES)


# ==================== Dates and times ====================


def validate_birth_date(raw: Any, today: Optional[date] = None) -> date:
    """
    Validate birth date.

    Rule: not later than today (today itself is allowed).

    Args:
        raw: Birth date
        today: Reference date (defaults to the current date)

    Returns:
        Parsed date

    Raises:
        ValidationError: FORMAT or TEMPORAL
    """
    birth_date = parse_date(raw, "Data de nascimento")

    if birth_date > _today(today):
        raise ValidationError(
            ERROR_MESSAGES["future_date"].format(field="Data de nascimento"),
            reason=FailureReason.TEMPORAL,
            details={"value": birth_date.isoformat()},
        )

    return birth_date


def validate_surgery_date(raw: Any, today: Optional[date] = None) -> date:
    """
    Validate surgery/procedure scheduling date.

    Rule: not earlier than today (today itself is allowed).

    Args:
        raw: Surgery date
        today: Reference date (defaults to the current date)

    Returns:
        Parsed date

    Raises:
        ValidationError: FORMAT or TEMPORAL
    """
    surgery_date = parse_date(raw, "Data da cirurgia")

    if surgery_date < _today(today):
        raise ValidationError(
            ERROR_MESSAGES["past_date"].format(field="Data da cirurgia"),
            reason=FailureReason.TEMPORAL,
            details={"value": surgery_date.isoformat()},
        )

    return surgery_date


def validate_expiry_date(raw: Any, today: Optional[date] = None) -> date:
    """
    Validate product expiry date.

    Rule: strictly after today; a product expiring today is already unusable.

    Raises:
        ValidationError: FORMAT or TEMPORAL
    """
    expiry = parse_date(raw, "Data de validade")

    if expiry <= _today(today):
        raise ValidationError(
            ERROR_MESSAGES["past_date"].format(field="Data de validade"),
            reason=FailureReason.TEMPORAL,
            details={"value": expiry.isoformat()},
        )

    return expiry


def days_until_expiry(expiry: Any, today: Optional[date] = None) -> int:
    """
    Calculate days until expiry.

    Returns:
        Positive for future dates, 0 for today, negative when expired
    """
    return (parse_date(expiry, "Data de validade") - _today(today)).days


def is_near_expiry(
    expiry: Any,
    alert_days: int = DEFAULT_EXPIRY_ALERT_DAYS,
    today: Optional[date] = None,
) -> bool:
    """Check if a product expires within the alert window (expired included)."""
    return days_until_expiry(expiry, today) <= alert_days


def validate_time(raw: Any) -> str:
    """
    Validate time of day.

    Expected format: "HH:MM" with 00-23 hours and 00-59 minutes.
    "7:30" is rejected; use "07:30".

    Returns:
        Time string "HH:MM"

    Raises:
        ValidationError: If invalid
    """
    if isinstance(raw, time):
        return raw.strftime("%H:%M")

    text = require_text(raw, "Hora")

    if not TIME_PATTERN.match(text):
        raise ValidationError(
            f"Hora inválida: '{text}'. Formato esperado: HH:MM",
            reason=FailureReason.PATTERN,
            details={"value": text},
        )

    return text


# ==================== Amounts ====================


def _positive_integer(raw: Any, field: str) -> int:
    """Coerce raw to a strictly positive int without rounding."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise ValidationError(
            ERROR_MESSAGES["empty"].format(field=field),
            reason=FailureReason.EMPTY,
        )

    not_integer = ValidationError(
        ERROR_MESSAGES["not_integer"].format(field=field),
        reason=FailureReason.NOT_INTEGER,
        details={"value": raw},
    )

    if isinstance(raw, bool):
        raise not_integer

    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float):
        if not math.isfinite(raw) or not raw.is_integer():
            raise not_integer
        value = int(raw)
    elif isinstance(raw, Decimal):
        if not raw.is_finite() or raw != raw.to_integral_value():
            raise not_integer
        value = int(raw)
    elif isinstance(raw, str) and INTEGER_TEXT_PATTERN.match(raw.strip()):
        value = int(raw.strip())
    else:
        raise not_integer

    if value <= 0:
        raise ValidationError(
            ERROR_MESSAGES["not_positive"].format(field=field),
            reason=FailureReason.NOT_POSITIVE,
            details={"value": value},
        )

    return value


def validate_amount_cents(raw: Any) -> int:
    """
    Validate monetary amount in centavos.

    Rules:
    - Integer number of centavos (fractional centavos rejected)
    - Strictly positive; a zero-value financial line is a data-entry error

    Args:
        raw: Amount in minor units (e.g. 123456 for R$ 1.234,56)

    Returns:
        Amount as int

    Raises:
        ValidationError: NOT_INTEGER or NOT_POSITIVE
    """
    return _positive_integer(raw, "Valor")


def validate_quantity(raw: Any) -> int:
    """
    Validate item quantity (whole units, strictly positive).

    Raises:
        ValidationError: NOT_INTEGER or NOT_POSITIVE
    """
    return _positive_integer(raw, "Quantidade")
