"""
Ingestion services.

Reading the flat input tables into pre-filtered event records.
"""

from .table_reader import IngestionError, InputTables, TableReader

__all__ = [
    "IngestionError",
    "InputTables",
    "TableReader",
]
