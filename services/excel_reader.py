"""
Spreadsheet Reader Service.

Handles reading registration spreadsheets (products, physicians, patients,
invoice items) exported from suppliers and hospitals.

Uses pandas and openpyxl for Excel processing and rapidfuzz to match
column headers that do not follow the expected names exactly.
"""

import logging
from pathlib import Path
from typing import List, Dict, Any, Optional, Union

import pandas as pd
from rapidfuzz import fuzz, process

from config.constants import SPREADSHEET_EXTENSIONS, ERROR_MESSAGES
from config.settings import get_settings
from domain.exceptions import ImportValidationError

logger = logging.getLogger(__name__)


def cell_value(value: Any) -> Any:
    """Return a cell value with NaN, NaT and pd.NA turned into None."""
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    return value


# Extra header spellings seen in supplier spreadsheets
COLUMN_ALIASES = {
    "registro_anvisa": ["registro anvisa", "reg. anvisa", "anvisa"],
    "descricao": ["descrição", "produto", "description"],
    "fabricante_cnpj": ["cnpj fabricante", "cnpj do fabricante", "cnpj"],
    "classe_risco": ["classe de risco", "classe"],
    "lote": ["lote", "lot", "batch"],
    "validade": ["data de validade", "vencimento", "expiry"],
    "preco_tabela_cents": ["preço tabela (centavos)", "preco centavos", "preço"],
    "gtin_ean13": ["gtin", "ean", "ean-13", "código de barras"],
    "ncm": ["ncm"],
    "nome_completo": ["nome", "nome completo", "name"],
    "crm": ["crm"],
    "crm_estado": ["uf crm", "estado crm", "uf"],
    "rqe": ["rqe"],
    "especialidade": ["especialidade", "specialty"],
    "cpf": ["cpf"],
    "cns": ["cns", "cartão sus", "cartao sus"],
    "data_nascimento": ["data de nascimento", "nascimento"],
    "sexo": ["sexo"],
    "tipo_sanguineo": ["tipo sanguíneo", "tipo sanguineo"],
    "codigo_produto": ["código do produto", "codigo produto", "sku"],
    "quantidade": ["quantidade", "qtd", "qty"],
    "valor_unitario_cents": ["valor unitário (centavos)", "valor unitario"],
}


def _validate_file_path(file_path: Union[Path, str]) -> Path:
    """
    Check that the spreadsheet exists and has a supported extension.

    Raises:
        ImportValidationError: If invalid
    """
    if not file_path:
        raise ImportValidationError("Caminho do arquivo não pode estar vazio")

    path = Path(file_path)

    if not path.exists():
        raise ImportValidationError(
            f"Arquivo não encontrado: {path}",
            details={"file_path": str(path)},
        )

    if path.suffix.lower() not in SPREADSHEET_EXTENSIONS:
        raise ImportValidationError(
            f"Extensão inválida: {path.suffix}. Permitidas: {SPREADSHEET_EXTENSIONS}",
            details={"file_path": str(path), "allowed": SPREADSHEET_EXTENSIONS},
        )

    return path


class ExcelReader:
    """
    Spreadsheet reader for registration records.

    Reads .xlsx/.xls/.csv files into DataFrames and maps their headers onto
    schema field names.
    """

    def __init__(self, file_path: Path, fuzzy_cutoff: Optional[int] = None):
        """
        Initialize spreadsheet reader.

        Args:
            file_path: Path to spreadsheet (.xlsx, .xls or .csv)
            fuzzy_cutoff: Minimum rapidfuzz score for header matching
                          (defaults to settings.fuzzy_header_cutoff)

        Raises:
            ImportValidationError: If file is invalid or doesn't exist
        """
        self.file_path = _validate_file_path(file_path)
        self.fuzzy_cutoff = (
            fuzzy_cutoff if fuzzy_cutoff is not None else get_settings().fuzzy_header_cutoff
        )
        logger.info(f"Initialized spreadsheet reader for: {self.file_path}")

    def _find_column(self, columns: List[str], search_terms: List[str]) -> Optional[str]:
        """
        Find column name using flexible matching.

        Tries exact match first, then partial match (case-insensitive), then
        fuzzy match with rapidfuzz.

        Args:
            columns: Available column names in DataFrame
            search_terms: List of possible column name variations to search for

        Returns:
            Matched column name, or None if not found
        """
        # Try exact matches first
        for term in search_terms:
            for col in columns:
                if term.lower() == str(col).strip().lower():
                    logger.debug(f"Found exact match: '{col}' for search term '{term}'")
                    return col

        # Then try partial matches
        for term in search_terms:
            for col in columns:
                if term.lower() in str(col).lower():
                    logger.debug(f"Found partial match: '{col}' contains '{term}'")
                    return col

        # Finally fuzzy matches (typos, missing accents)
        normalized = {str(col).strip().lower(): col for col in columns}
        for term in search_terms:
            match = process.extractOne(
                term.lower(),
                list(normalized.keys()),
                scorer=fuzz.WRatio,
                score_cutoff=self.fuzzy_cutoff,
            )
            if match:
                col = normalized[match[0]]
                logger.debug(f"Found fuzzy match: '{col}' for '{term}' (score {match[1]:.0f})")
                return col

        return None

    def read_dataframe(
        self,
        sheet_name: Optional[str] = None,
        header_row: int = 0,
    ) -> pd.DataFrame:
        """
        Read spreadsheet into pandas DataFrame.

        All cells are read as text so identifiers keep their leading zeros.

        Args:
            sheet_name: Sheet to read (None = first sheet, ignored for CSV)
            header_row: Row index for column headers (0-indexed)

        Returns:
            DataFrame with cleaned data

        Raises:
            ImportValidationError: If file cannot be read
        """
        try:
            if self.file_path.suffix.lower() == ".csv":
                df = pd.read_csv(self.file_path, header=header_row, dtype=str)
            else:
                df = pd.read_excel(
                    self.file_path,
                    sheet_name=sheet_name or 0,
                    header=header_row,
                    dtype=str,
                )

            df = self._clean_dataframe(df)

            logger.debug(f"Read {len(df)} rows from {self.file_path.name}")
            return df

        except Exception as e:
            raise ImportValidationError(
                ERROR_MESSAGES["import_error"].format(error=e),
                details={"file": str(self.file_path), "error": str(e)},
            )

    def _clean_dataframe(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Clean DataFrame by removing empty rows and standardizing cells.

        Args:
            df: Input DataFrame

        Returns:
            Cleaned DataFrame
        """
        # Remove completely empty rows
        df = df.dropna(how="all")

        # Strip whitespace from string columns
        for col in df.columns:
            if df[col].dtype == "object" or pd.api.types.is_string_dtype(df[col].dtype):
                df[col] = df[col].str.strip()

        # Replace NaN with None for better handling
        df = df.astype(object).where(pd.notnull(df), None)

        return df

    def map_columns(
        self,
        df: pd.DataFrame,
        fields: List[str],
        required: Optional[List[str]] = None,
    ) -> Dict[str, str]:
        """
        Map schema field names to spreadsheet columns.

        Args:
            df: DataFrame read from the spreadsheet
            fields: Field names to look for
            required: Fields that must be present

        Returns:
            Dict mapping field name to column name (missing optional fields omitted)

        Raises:
            ImportValidationError: If required columns cannot be found
        """
        columns = list(df.columns)
        logger.info(f"Available columns: {columns}")

        mapping = {}
        for field_name in fields:
            terms = [field_name, field_name.replace("_", " ")] + COLUMN_ALIASES.get(field_name, [])
            col = self._find_column(columns, terms)
            if col is not None:
                mapping[field_name] = col

        missing = [f for f in (required or []) if f not in mapping]
        if missing:
            for field_name in missing:
                logger.error(f"Required column '{field_name}' not found")
            raise ImportValidationError(
                ERROR_MESSAGES["missing_columns"].format(columns=", ".join(missing)),
                details={
                    "file": str(self.file_path),
                    "missing": missing,
                    "available": columns,
                },
            )

        logger.info(f"Using columns: {mapping}")
        return mapping

    def read_records(
        self,
        fields: List[str],
        required: Optional[List[str]] = None,
        sheet_name: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Read spreadsheet rows as dicts keyed by schema field name.

        Args:
            fields: Field names to extract
            required: Fields whose columns must exist
            sheet_name: Sheet to read (None = first sheet)

        Returns:
            List of row dicts; each has a "_row" key with the 1-based
            spreadsheet row number (header is row 1)

        Raises:
            ImportValidationError: If file cannot be read or columns are missing
        """
        df = self.read_dataframe(sheet_name=sheet_name)
        mapping = self.map_columns(df, fields, required)

        records = []
        for idx, row in df.iterrows():
            # iterrows rebuilds each row as a Series, which turns None back into NaN
            record = {field_name: cell_value(row.get(col)) for field_name, col in mapping.items()}
            # DataFrame index survives dropna, so it still points at the source row
            record["_row"] = int(idx) + 2
            records.append(record)

        logger.info(f"Read {len(records)} records from {self.file_path.name}")
        return records
