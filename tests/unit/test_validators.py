"""
Unit tests for domain validators.

Tests cover structural validation of regulatory codes and error handling.
"""

import pytest

from domain.validators import (
    normalize_crm,
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
from domain.exceptions import FailureReason, ValidationError


def _reason(validator, raw):
    with pytest.raises(ValidationError) as exc_info:
        validator(raw)
    return exc_info.value.reason


# ==================== CRM Tests ====================


def test_validate_crm_valid():
    """Test valid CRM variants."""
    assert validate_crm("SP123456") == "SP123456"
    assert validate_crm("mg 123456") == "MG123456"  # Uppercased
    assert validate_crm("CRM/RJ 12345678") == "RJ12345678"
    assert validate_crm("123456-SP") == "SP123456"  # Suffix form
    assert validate_crm("RS1234") == "RS1234"  # 4 digits OK


def test_validate_crm_invalid():
    """Test invalid CRM values and their reasons."""
    assert _reason(validate_crm, "XX123456") == FailureReason.VOCABULARY
    assert _reason(validate_crm, "SP123") == FailureReason.LENGTH
    assert _reason(validate_crm, "SP123456789") == FailureReason.LENGTH
    assert _reason(validate_crm, "SP12A456") == FailureReason.CHARSET
    assert _reason(validate_crm, "123456") == FailureReason.PATTERN
    assert _reason(validate_crm, "SP") == FailureReason.LENGTH
    assert _reason(validate_crm, "") == FailureReason.EMPTY


def test_validate_crm_rejects_punctuation_inside_parts():
    """Test that only the separators around CRM, UF and number are dropped."""
    assert _reason(validate_crm, "S.P-12.34") == FailureReason.PATTERN
    assert _reason(validate_crm, "SP 123.456") == FailureReason.CHARSET
    assert _reason(validate_crm, "CRM/SP 12-3456") == FailureReason.CHARSET


def test_normalize_crm():
    """Test CRM normalization without validation."""
    assert normalize_crm("crm-sp 123456") == "SP123456"
    assert normalize_crm("CRM SP 123456") == "SP123456"
    assert normalize_crm("123456/MG") == "MG123456"


# ==================== CID-10 Tests ====================


def test_validate_cid10_valid():
    """Test valid CID-10 codes."""
    assert validate_cid10("I21") == "I21"
    assert validate_cid10("I21.0") == "I21.0"
    assert validate_cid10("I21.01") == "I21.01"
    assert validate_cid10("i21") == "I21"  # Uppercased
    assert validate_cid10(" m16.1 ") == "M16.1"


def test_validate_cid10_invalid():
    """Test invalid CID-10 codes."""
    for raw in ("21", "I2", "I21.123", "I2A", "I210", "II21"):
        assert _reason(validate_cid10, raw) == FailureReason.PATTERN
    assert _reason(validate_cid10, "I２１") == FailureReason.PATTERN  # Full-width digits
    assert _reason(validate_cid10, None) == FailureReason.EMPTY


# ==================== Fiscal Code Tests ====================


def test_validate_cfop():
    """Test CFOP digits and operation origin."""
    assert validate_cfop("5102") == "5102"
    assert validate_cfop("5.102") == "5102"
    assert validate_cfop("1949") == "1949"

    assert _reason(validate_cfop, "0102") == FailureReason.PATTERN
    assert _reason(validate_cfop, "9102") == FailureReason.PATTERN
    assert _reason(validate_cfop, "510") == FailureReason.LENGTH


def test_validate_ncm():
    """Test NCM canonicalization."""
    assert validate_ncm("9021.10.10") == "90211010"
    assert validate_ncm("90213110") == "90213110"

    assert _reason(validate_ncm, "9021101") == FailureReason.LENGTH
    assert _reason(validate_ncm, "9021101A") == FailureReason.CHARSET


def test_validate_nfe_key():
    """Test 44-digit NF-e access key."""
    key = "3525 0611 2223 3300 0181 5500 1000 0001 2310 0000 1234"
    assert validate_nfe_key(key) == key.replace(" ", "")

    assert _reason(validate_nfe_key, "1" * 43) == FailureReason.LENGTH


def test_validate_invoice_number_and_series():
    """Test NF-e number and series lengths."""
    assert validate_invoice_number("123456") == "123456"
    assert validate_invoice_series("1") == "1"

    assert _reason(validate_invoice_number, "1234567890") == FailureReason.LENGTH
    assert _reason(validate_invoice_series, "1234") == FailureReason.LENGTH
    assert _reason(validate_invoice_series, "A1") == FailureReason.CHARSET


def test_validate_state_registration():
    """Test Inscrição Estadual."""
    assert validate_state_registration("110042490114") == "110042490114"
    assert validate_state_registration("110.042.490") == "110.042.490"

    assert _reason(validate_state_registration, "110.042.490.114") == FailureReason.LENGTH
    assert _reason(validate_state_registration, "ISENTO123") == FailureReason.CHARSET


# ==================== Procedure Code Tests ====================


def test_validate_tuss():
    """Test TUSS codes (punctuation not stripped)."""
    assert validate_tuss("10101012") == "10101012"

    assert _reason(validate_tuss, "1010101") == FailureReason.LENGTH
    assert _reason(validate_tuss, "1010101A") == FailureReason.CHARSET
    assert _reason(validate_tuss, "10101.01") == FailureReason.CHARSET


def test_validate_cbhpm():
    """Test CBHPM grouped format."""
    assert validate_cbhpm("3.01.01.01-1") == "3.01.01.01-1"
    assert validate_cbhpm(" 3.07.15.01-6 ") == "3.07.15.01-6"

    assert _reason(validate_cbhpm, "30101011") == FailureReason.PATTERN
    assert _reason(validate_cbhpm, "3.01.01.0A-1") == FailureReason.CHARSET


# ==================== Product Tests ====================


def test_validate_lot():
    """Test lot numbers."""
    assert validate_lot("ABC-123") == "ABC-123"
    assert validate_lot("  LT2025001  ") == "LT2025001"

    assert _reason(validate_lot, "AB") == FailureReason.LENGTH
    assert _reason(validate_lot, "A" * 31) == FailureReason.LENGTH
    assert _reason(validate_lot, "LOT_001") == FailureReason.CHARSET
    assert _reason(validate_lot, "LOTE 01") == FailureReason.CHARSET


def test_validate_anvisa_registration():
    """Test 13-digit ANVISA registration."""
    assert validate_anvisa_registration("1012345678901") == "1012345678901"
    assert validate_anvisa_registration("10.123.456.7890-1") == "1012345678901"

    assert _reason(validate_anvisa_registration, "101234567890") == FailureReason.LENGTH


# ==================== Professional Tests ====================


def test_validate_rqe():
    """Test RQE digits."""
    assert validate_rqe("12345") == "12345"
    assert validate_rqe("1234") == "1234"

    assert _reason(validate_rqe, "123") == FailureReason.LENGTH
    assert _reason(validate_rqe, "123456789") == FailureReason.LENGTH
    assert _reason(validate_rqe, "12.345") == FailureReason.CHARSET
    assert _reason(validate_rqe, "") == FailureReason.EMPTY


# ==================== Contact Tests ====================


def test_validate_uf():
    """Test UF vocabulary."""
    assert validate_uf("SP") == "SP"
    assert validate_uf("df") == "DF"

    assert _reason(validate_uf, "XX") == FailureReason.VOCABULARY


def test_validate_cep():
    """Test CEP canonicalization."""
    assert validate_cep("01310-100") == "01310100"
    assert _reason(validate_cep, "0131010") == FailureReason.LENGTH


def test_validate_phone():
    """Test Brazilian phone numbers."""
    assert validate_phone("(11) 98765-4321") == "11987654321"
    assert validate_phone("11 3456-7890") == "1134567890"

    assert _reason(validate_phone, "10987654321") == FailureReason.PATTERN  # No area code 10
    assert _reason(validate_phone, "11887654321") == FailureReason.PATTERN  # Mobile without 9
    assert _reason(validate_phone, "119876543") == FailureReason.LENGTH


def test_validate_email():
    """Test email addresses."""
    assert validate_email("Dr.Silva@Hospital.com.br") == "dr.silva@hospital.com.br"

    assert _reason(validate_email, "abc") == FailureReason.PATTERN
    assert _reason(validate_email, "a b@c.com") == FailureReason.PATTERN
    assert _reason(validate_email, "a" * 250 + "@x.com") == FailureReason.LENGTH


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
