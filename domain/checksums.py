"""
Checksum validators for self-checking national identifiers.

Covers CPF (individual tax ID), CNPJ (company tax ID), EAN-13/GTIN
barcodes and CNS (Cartão Nacional de Saúde). Every validator returns the
canonical digit string or raises ValidationError with reason LENGTH,
CHARSET, FILLER or CHECK_DIGIT. There is no partial acceptance.

CPF, CNPJ and EAN-13 check digits are verified with python-stdnum. CNS has
no stdnum module and is computed here.
"""

from typing import Any, Sequence

from stdnum import ean
from stdnum.br import cnpj, cpf
from stdnum.exceptions import InvalidChecksum, InvalidFormat, InvalidLength

from config.constants import (
    CPF_LENGTH,
    CPF_WEIGHTS_1,
    CPF_WEIGHTS_2,
    CNPJ_LENGTH,
    EAN13_LENGTH,
    CNS_LENGTH,
    CNS_WEIGHTS,
    CNS_DEFINITIVE_SERIES,
    CNS_PROVISIONAL_SERIES,
    ERROR_MESSAGES,
)
from .canonical import require_digits, require_text, strip_punctuation, is_filler
from .exceptions import FailureReason, ValidationError


def _weighted_sum(digits: str, weights: Sequence[int]) -> int:
    return sum(int(digit) * weight for digit, weight in zip(digits, weights))


def _mod11_digit(digits: str, weights: Sequence[int]) -> int:
    """Weighted mod-11 check digit, where results of 10 or 11 become 0."""
    result = 11 - _weighted_sum(digits, weights) % 11
    return 0 if result >= 10 else result


def _check_digit_error(field: str, value: str) -> ValidationError:
    return ValidationError(
        ERROR_MESSAGES["check_digit"].format(field=field),
        reason=FailureReason.CHECK_DIGIT,
        details={"value": value},
    )


def _filler_error(field: str, value: str) -> ValidationError:
    return ValidationError(
        ERROR_MESSAGES["filler"].format(field=field),
        reason=FailureReason.FILLER,
        details={"value": value},
    )


def _stdnum_validate(module, value: str, field: str, length: int) -> str:
    """
    Run a stdnum validator and translate its exceptions into ValidationError.

    Args:
        module: stdnum module exposing validate()
        value: Canonical digit string
        field: Field label used in messages
        length: Expected number of digits

    Returns:
        Value returned by the stdnum validator
    """
    try:
        return module.validate(value)
    except InvalidChecksum as e:
        raise _check_digit_error(field, value) from e
    except InvalidLength as e:
        raise ValidationError(
            ERROR_MESSAGES["length"].format(field=field, expected=length, actual=len(value)),
            reason=FailureReason.LENGTH,
            details={"value": value},
        ) from e
    except InvalidFormat as e:
        raise ValidationError(
            ERROR_MESSAGES["charset"].format(field=field, allowed="números"),
            reason=FailureReason.CHARSET,
            details={"value": value},
        ) from e


# ==================== CPF ====================


def cpf_check_digits(payload: str) -> str:
    """
    Compute the two CPF check digits.

    Args:
        payload: First 9 digits of a CPF

    Returns:
        Two-character string with both check digits
    """
    first = _mod11_digit(payload, CPF_WEIGHTS_1)
    second = _mod11_digit(payload + str(first), CPF_WEIGHTS_2)
    return f"{first}{second}"


def validate_cpf(raw: Any) -> str:
    """
    Validate CPF (Cadastro de Pessoas Físicas).

    Rules:
    - Exactly 11 digits after removing punctuation
    - Not all digits identical (stdnum accepts 111.111.111-11)
    - Both mod-11 check digits match

    Args:
        raw: CPF with or without punctuation (e.g. "529.982.247-25")

    Returns:
        Canonical 11-digit string

    Raises:
        ValidationError: If invalid
    """
    number = require_digits(raw, "CPF", length=CPF_LENGTH)

    if is_filler(number):
        raise _filler_error("CPF", number)

    return _stdnum_validate(cpf, number, "CPF", CPF_LENGTH)


# ==================== CNPJ ====================


def cnpj_check_digits(payload: str) -> str:
    """
    Compute the two CNPJ check digits.

    Args:
        payload: First 12 digits of a CNPJ

    Returns:
        Two-character string with both check digits
    """
    return cnpj.calc_check_digits(payload)


def validate_cnpj(raw: Any) -> str:
    """
    Validate CNPJ (Cadastro Nacional da Pessoa Jurídica).

    Rules:
    - Exactly 14 digits after removing punctuation
    - Not all digits identical
    - Both mod-11 check digits match

    Args:
        raw: CNPJ with or without punctuation (e.g. "11.222.333/0001-81")

    Returns:
        Canonical 14-digit string

    Raises:
        ValidationError: If invalid
    """
    number = require_digits(raw, "CNPJ", length=CNPJ_LENGTH)

    if is_filler(number):
        raise _filler_error("CNPJ", number)

    return _stdnum_validate(cnpj, number, "CNPJ", CNPJ_LENGTH)


def validate_cpf_or_cnpj(raw: Any) -> str:
    """
    Validate a document that may be either a CPF or a CNPJ.

    The canonical length decides which algorithm applies.

    Args:
        raw: CPF or CNPJ, with or without punctuation

    Returns:
        Canonical 11- or 14-digit string

    Raises:
        ValidationError: If invalid
    """
    cleaned = strip_punctuation(require_text(raw, "CPF/CNPJ"))

    if len(cleaned) == CPF_LENGTH:
        return validate_cpf(cleaned)
    if len(cleaned) == CNPJ_LENGTH:
        return validate_cnpj(cleaned)

    raise ValidationError(
        f"CPF/CNPJ deve ter {CPF_LENGTH} ou {CNPJ_LENGTH} dígitos (recebido: {len(cleaned)})",
        reason=FailureReason.LENGTH,
        details={"value": cleaned},
    )


# ==================== EAN-13 ====================


def ean13_check_digit(payload: str) -> str:
    """
    Compute the EAN-13 check digit.

    Args:
        payload: First 12 digits of the barcode

    Returns:
        Single check digit as string
    """
    return ean.calc_check_digit(payload)


def validate_ean13(raw: Any) -> str:
    """
    Validate EAN-13 / GTIN-13 barcode.

    stdnum also accepts 8, 12 and 14 digit GTINs, so the length is fixed
    here first.

    Args:
        raw: 13-digit barcode

    Returns:
        Canonical 13-digit string

    Raises:
        ValidationError: If invalid
    """
    number = require_digits(raw, "EAN-13", length=EAN13_LENGTH)
    return _stdnum_validate(ean, number, "EAN-13", EAN13_LENGTH)


# ==================== CNS ====================


def cns_from_pis(pis: str) -> str:
    """
    Build a definitive-series CNS (starting with 1 or 2) from its PIS prefix.

    The check digit comes from the weighted sum (weights 15..5) of the
    11-digit prefix. A result of 10 forces the "001" infix and a second
    pass with the sum increased by 2; otherwise the infix is "000".

    Args:
        pis: First 11 digits of the card number

    Returns:
        Full 15-digit CNS
    """
    total = _weighted_sum(pis, CNS_WEIGHTS[:11])
    check = 11 - total % 11

    if check == 11:
        check = 0

    if check == 10:
        total += 2
        check = 11 - total % 11
        return f"{pis}001{check}"

    return f"{pis}000{check}"


def validate_cns(raw: Any) -> str:
    """
    Validate CNS (Cartão Nacional de Saúde / cartão SUS).

    Rules:
    - Exactly 15 digits
    - Series 1/2: number must equal the one derived from its PIS prefix
    - Series 7/8/9: weighted sum (15..1) must be divisible by 11
    - Any other first digit is not an issued series

    Args:
        raw: Card number, with or without spaces

    Returns:
        Canonical 15-digit string

    Raises:
        ValidationError: If invalid
    """
    cns = require_digits(raw, "CNS", length=CNS_LENGTH)

    if cns[0] in CNS_DEFINITIVE_SERIES:
        if cns_from_pis(cns[:11]) != cns:
            raise _check_digit_error("CNS", cns)
        return cns

    if cns[0] in CNS_PROVISIONAL_SERIES:
        if _weighted_sum(cns, CNS_WEIGHTS) % 11 != 0:
            raise _check_digit_error("CNS", cns)
        return cns

    raise ValidationError(
        "CNS inválido (deve começar com 1, 2, 7, 8 ou 9)",
        reason=FailureReason.PATTERN,
        details={"value": cns},
    )
