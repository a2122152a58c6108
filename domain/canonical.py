"""
Canonicalization helpers shared by all validator layers.

Turns untrusted raw input into the canonical form that checksum and
structural rules operate on, raising ValidationError for the failures
common to every identifier (empty, charset, length).
"""

import re
from typing import Any, Optional

from config.constants import ERROR_MESSAGES
from .exceptions import FailureReason, ValidationError

# Non-significant punctuation in identifiers: dots, dashes, slashes, parentheses, whitespace
PUNCTUATION_PATTERN = re.compile(r"[.\-/()\s]")


def strip_punctuation(raw: Any) -> str:
    """
    Remove dots, dashes, slashes, parentheses and whitespace from a raw value.

    Args:
        raw: Raw input (None is treated as empty)

    Returns:
        Canonical string (may be empty)
    """
    if raw is None:
        return ""
    return PUNCTUATION_PATTERN.sub("", str(raw))


def require_text(raw: Any, field: str) -> str:
    """
    Return trimmed text or raise an EMPTY failure.

    Args:
        raw: Raw input
        field: Field label used in messages

    Returns:
        Trimmed string

    Raises:
        ValidationError: If input is None or blank
    """
    if raw is None:
        raise ValidationError(
            ERROR_MESSAGES["empty"].format(field=field),
            reason=FailureReason.EMPTY,
        )

    cleaned = str(raw).strip()
    if not cleaned:
        raise ValidationError(
            ERROR_MESSAGES["empty"].format(field=field),
            reason=FailureReason.EMPTY,
        )
    return cleaned


def require_digits(
    raw: Any,
    field: str,
    length: Optional[int] = None,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
    strip: bool = True,
) -> str:
    """
    Canonicalize a numeric identifier and check its length.

    Length is checked before charset so a short value with letters reports
    the length problem first.

    Args:
        raw: Raw input, possibly punctuated
        field: Field label used in messages
        length: Exact number of digits required
        min_length: Minimum number of digits (used with max_length)
        max_length: Maximum number of digits (used with min_length)
        strip: If True, remove punctuation before checking

    Returns:
        Canonical digit string

    Raises:
        ValidationError: EMPTY, LENGTH or CHARSET
    """
    text = require_text(raw, field)
    cleaned = strip_punctuation(text) if strip else text

    if not cleaned:
        raise ValidationError(
            ERROR_MESSAGES["empty"].format(field=field),
            reason=FailureReason.EMPTY,
            details={"value": text},
        )

    if length is not None and len(cleaned) != length:
        raise ValidationError(
            ERROR_MESSAGES["length"].format(field=field, expected=length, actual=len(cleaned)),
            reason=FailureReason.LENGTH,
            details={"value": cleaned},
        )

    if min_length is not None and max_length is not None:
        if not min_length <= len(cleaned) <= max_length:
            raise ValidationError(
                ERROR_MESSAGES["length_range"].format(
                    field=field, minimum=min_length, maximum=max_length, actual=len(cleaned)
                ),
                reason=FailureReason.LENGTH,
                details={"value": cleaned},
            )

    if not cleaned.isascii() or not cleaned.isdigit():
        raise ValidationError(
            ERROR_MESSAGES["charset"].format(field=field, allowed="números"),
            reason=FailureReason.CHARSET,
            details={"value": cleaned},
        )

    return cleaned


def is_filler(digits: str) -> bool:
    """Check if all digits are identical (placeholder values like 111.111.111-11)."""
    return len(set(digits)) == 1
