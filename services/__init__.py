"""
Services layer for the OPME validation engine.

Infrastructure services that support the operations layer.
"""

from .excel_reader import ExcelReader, COLUMN_ALIASES, cell_value

__all__ = [
    # Spreadsheet Reader
    "ExcelReader",
    "COLUMN_ALIASES",
    "cell_value",
]
