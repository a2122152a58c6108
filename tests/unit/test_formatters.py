"""
Unit tests for display formatters.
"""

import pytest
from datetime import date

from domain.checksums import validate_cnpj
from domain.formatters import (
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


# ==================== Document Tests ====================


def test_format_cpf():
    """Test CPF mask and idempotence."""
    assert format_cpf("52998224725") == "529.982.247-25"
    assert format_cpf(format_cpf("52998224725")) == "529.982.247-25"


def test_format_cnpj():
    """Test CNPJ mask and idempotence."""
    assert format_cnpj("11222333000181") == "11.222.333/0001-81"
    assert format_cnpj("11.222.333/0001-81") == "11.222.333/0001-81"

    for cnpj in ("11222333000181", "11444777000161"):
        formatted = format_cnpj(cnpj)
        assert format_cnpj(validate_cnpj(formatted)) == formatted


def test_format_cpf_or_cnpj():
    """Test mask chosen by length."""
    assert format_cpf_or_cnpj("52998224725") == "529.982.247-25"
    assert format_cpf_or_cnpj("11222333000181") == "11.222.333/0001-81"


def test_format_cep_and_phone():
    """Test CEP and phone masks."""
    assert format_cep("01310100") == "01310-100"
    assert format_phone("11987654321") == "(11) 98765-4321"
    assert format_phone("1134567890") == "(11) 3456-7890"
    assert format_phone(format_phone("11987654321")) == "(11) 98765-4321"


# ==================== Currency Tests ====================


def test_format_currency():
    """Test Brazilian currency formatting from centavos."""
    assert format_currency(123456) == "R$ 1.234,56"
    assert format_currency(5) == "R$ 0,05"
    assert format_currency(100000000) == "R$ 1.000.000,00"
    assert format_currency(-150) == "-R$ 1,50"


def test_parse_currency_to_cents():
    """Test parsing currency text into centavos."""
    assert parse_currency_to_cents("R$ 1.234,56") == 123456
    assert parse_currency_to_cents("1234,5") == 123450
    assert parse_currency_to_cents("1234") == 123400
    assert parse_currency_to_cents(12.5) == 1250
    assert parse_currency_to_cents("abc") is None
    assert parse_currency_to_cents(None) is None


def test_parse_currency_inverts_format_currency():
    """Test that parsing a formatted amount gives back the centavos."""
    for cents in (1, 99, 123456, 100000000, -150):
        assert parse_currency_to_cents(format_currency(cents)) == cents


# ==================== CRM Tests ====================


def test_format_crm():
    """Test CRM display form."""
    assert format_crm("SP123456") == "CRM/SP 123456"
    assert format_crm("mg 12345") == "CRM/MG 12345"


def test_extract_crm_uf():
    """Test UF extraction, None when the prefix is not a UF."""
    assert extract_crm_uf("MG123456") == "MG"
    assert extract_crm_uf("CRM/RJ 12345") == "RJ"
    assert extract_crm_uf("XX123456") is None
    assert extract_crm_uf("123456") is None


# ==================== CID-10 Tests ====================


def test_format_cid10():
    """Test dot insertion and uppercasing."""
    assert format_cid10("i210") == "I21.0"
    assert format_cid10("I21") == "I21"
    assert format_cid10("I21.0") == "I21.0"
    assert format_cid10(format_cid10("m1610")) == "M16.10"


# ==================== Date Tests ====================


def test_calculate_age():
    """Test that age drops by one before the birthday."""
    today = date(2025, 6, 15)

    assert calculate_age(date(2000, 6, 15), today=today) == 25
    assert calculate_age(date(2000, 6, 16), today=today) == 24
    assert calculate_age("15/03/1980", today=today) == 45


def test_date_conversions():
    """Test ISO and Brazilian date conversions."""
    assert format_date_br(date(2025, 6, 15)) == "15/06/2025"
    assert format_date_br("2025-06-15") == "15/06/2025"
    assert br_date_to_iso("15/06/2025") == "2025-06-15"
    assert br_date_to_iso("5/6/2025") == "2025-06-05"
    assert iso_date_to_br("2025-06-15") == "15/06/2025"
    assert br_date_to_iso(iso_date_to_br("2024-02-29")) == "2024-02-29"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
