"""
Unit tests for import operations.

Tests cover bulk validation of registration spreadsheets.
"""

import pytest
import pandas as pd
from datetime import date

from config.settings import reset_settings
from domain.exceptions import FailureReason, ImportValidationError
from operations.import_ops import (
    IMPORTABLE_TYPES,
    get_schema_fields,
    get_required_fields,
    validate_dataframe,
    import_records,
    get_import_summary,
)

TODAY = date(2025, 6, 15)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Use default settings in every test."""
    monkeypatch.delenv("OPME_EXPIRY_ALERT_DAYS", raising=False)
    monkeypatch.delenv("OPME_FUZZY_HEADER_CUTOFF", raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def products_df():
    """Product sheet: one valid row, one invalid row, one near expiry."""
    return pd.DataFrame({
        "registro_anvisa": ["1012345678901", "123", "1012345678903"],
        "descricao": [
            "Prótese de quadril cimentada",
            "Placa bloqueada de titânio",
            "Parafuso cortical 3.5mm",
        ],
        "fabricante_cnpj": ["11.222.333/0001-81", "11.222.333/0001-81", "11222333000181"],
        "classe_risco": ["III", "V", "II"],
        "lote": ["LT-001", "LT-002", "LT-003"],
        "validade": ["2026-12-31", "2026-12-31", "2025-07-01"],
        "preco_tabela_cents": ["1250000", "0", "R$ 89,00"],
    })


# ==================== Schema Tests ====================


def test_get_schema_fields():
    """Test field lists for importable types."""
    assert get_schema_fields("product")[0] == "registro_anvisa"
    assert "crm" in get_schema_fields("physician")


def test_get_schema_fields_not_importable():
    """Test that nested record types cannot be imported row by row."""
    with pytest.raises(ImportValidationError):
        get_schema_fields("surgery")
    assert "surgery" not in IMPORTABLE_TYPES


def test_get_required_fields():
    """Test that optional fields are not required columns."""
    required = get_required_fields("product")

    assert "registro_anvisa" in required
    assert "preco_tabela_cents" in required
    assert "lote" not in required
    assert "gtin_ean13" not in required


# ==================== validate_dataframe Tests ====================


def test_validate_dataframe_mixed_rows(products_df):
    """Test valid and invalid rows are separated with row numbers."""
    report = validate_dataframe(products_df, "product", today=TODAY)

    assert report.total_rows == 3
    assert report.valid_count == 2
    assert list(report.row_errors) == [3]

    fields = {e.field: e.reason for e in report.row_errors[3]}
    assert fields == {
        "registro_anvisa": FailureReason.LENGTH,
        "classe_risco": FailureReason.VOCABULARY,
        "preco_tabela_cents": FailureReason.NOT_POSITIVE,
    }


def test_validate_dataframe_parses_currency_text(products_df):
    """Test "R$ 89,00" becomes centavos."""
    report = validate_dataframe(products_df, "product", today=TODAY)

    assert report.valid_rows[1]["preco_tabela_cents"] == 8900


def test_validate_dataframe_near_expiry_warning(products_df):
    """Test warning for products expiring within the alert window."""
    report = validate_dataframe(products_df, "product", today=TODAY)

    assert len(report.warnings) == 1
    assert "Linha 4" in report.warnings[0]
    assert "16 dia(s)" in report.warnings[0]


def test_validate_dataframe_alert_days_from_settings(products_df, monkeypatch):
    """Test that OPME_EXPIRY_ALERT_DAYS narrows the alert window."""
    monkeypatch.setenv("OPME_EXPIRY_ALERT_DAYS", "10")
    reset_settings()

    report = validate_dataframe(products_df, "product", today=TODAY)

    assert report.warnings == []


def test_validate_dataframe_high_risk_without_lot(products_df):
    """Test warning for class III/IV products without lot."""
    products_df["lote"] = [None, "LT-002", "LT-003"]

    report = validate_dataframe(products_df, "product", today=TODAY)

    assert any("classe III sem lote" in w for w in report.warnings)


def test_validate_dataframe_missing_required_column(products_df):
    """Test missing required columns raise before any row is validated."""
    with pytest.raises(ImportValidationError) as exc_info:
        validate_dataframe(products_df.drop(columns=["classe_risco"]), "product", today=TODAY)

    assert exc_info.value.details["missing"] == ["classe_risco"]


def test_validate_dataframe_missing_optional_column(products_df):
    """Test optional columns may be absent."""
    report = validate_dataframe(products_df.drop(columns=["lote"]), "product", today=TODAY)

    assert report.valid_count == 2
    assert report.valid_rows[0]["lote"] is None


@pytest.fixture
def blank_optionals_df():
    """Class IV product with lot, expiry and NCM left blank."""
    return pd.DataFrame({
        "registro_anvisa": ["1012345678901"],
        "descricao": ["Prótese de joelho"],
        "fabricante_cnpj": ["11222333000181"],
        "classe_risco": ["IV"],
        "lote": [None],
        "validade": [None],
        "preco_tabela_cents": ["1250000"],
        "ncm": [None],
    })


def _assert_blank_optionals_accepted(report):
    assert report.row_errors == {}
    assert report.valid_count == 1

    values = report.valid_rows[0]
    assert values["lote"] is None
    assert values["validade"] is None
    assert values["ncm"] is None
    assert any("classe IV sem lote" in w for w in report.warnings)


def test_validate_dataframe_blank_optional_cells(blank_optionals_df):
    """Test that blank optional cells are skipped, not validated as text."""
    report = validate_dataframe(blank_optionals_df, "product", today=TODAY)

    _assert_blank_optionals_accepted(report)


def test_validate_dataframe_non_integer_index(products_df):
    """Test that row numbers follow position whatever the index holds."""
    products_df.index = ["a", "b", "c"]

    report = validate_dataframe(products_df, "product", today=TODAY)

    assert report.valid_count == 2
    assert list(report.row_errors) == [3]


# ==================== import_records Tests ====================


def test_import_records_from_excel(tmp_path, products_df):
    """Test importing an .xlsx product sheet."""
    file_path = tmp_path / "produtos.xlsx"
    products_df.to_excel(file_path, index=False)

    report = import_records(file_path, "product", today=TODAY)

    assert report.valid_count == 2
    assert report.valid_rows[0]["fabricante_cnpj"] == "11222333000181"
    assert list(report.row_errors) == [3]


def test_import_records_physicians_csv(tmp_path):
    """Test importing a physician sheet with header aliases."""
    file_path = tmp_path / "medicos.csv"
    pd.DataFrame({
        "Nome Completo": ["Dra. Ana Souza", "Dr. Carlos Lima"],
        "CRM": ["SP123456", "RJ654321"],
        "CRM_Estado": ["SP", "SP"],
        "Especialidade": ["Ortopedia", "Cardiologia"],
    }).to_csv(file_path, index=False)

    report = import_records(file_path, "physician", today=TODAY)

    assert report.valid_count == 1
    assert report.row_errors[3][0].field == "crm_estado"


@pytest.mark.parametrize("suffix", [".xlsx", ".csv"])
def test_import_records_blank_optional_cells(tmp_path, blank_optionals_df, suffix):
    """Test that blank cells read from a file are treated as missing."""
    file_path = tmp_path / f"produtos{suffix}"
    if suffix == ".csv":
        blank_optionals_df.to_csv(file_path, index=False)
    else:
        blank_optionals_df.to_excel(file_path, index=False)

    report = import_records(file_path, "product", today=TODAY)

    _assert_blank_optionals_accepted(report)


def test_import_records_missing_file(tmp_path):
    """Test that import validates file existence."""
    with pytest.raises(ImportValidationError):
        import_records(tmp_path / "missing.xlsx", "product")


def test_import_records_empty_sheet(tmp_path, products_df):
    """Test that a sheet with headers only is rejected."""
    file_path = tmp_path / "vazio.xlsx"
    products_df.iloc[0:0].to_excel(file_path, index=False)

    with pytest.raises(ImportValidationError) as exc_info:
        import_records(file_path, "product", today=TODAY)

    assert "Nenhuma linha" in str(exc_info.value)


def test_get_import_summary(products_df):
    """Test summary statistics."""
    report = validate_dataframe(products_df, "product", today=TODAY)

    summary = get_import_summary(report)

    assert summary["total_rows"] == 3
    assert summary["valid_rows"] == 2
    assert summary["invalid_rows"] == 1
    assert summary["success_rate"] == 66.7
    assert summary["errors_by_field"]["classe_risco"] == 1
    assert summary["warnings"] == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
