"""
Data Processing module for metadata tables.

This package provides utilities for:
- Normalizing single columns (rename, retype, relevel, NA sentinels)
- Correcting single cells with type validation
- Recording both kinds of change in an append-only change log
- Reading and writing CSV tables
"""

from .cells import update_cell_value
from .change_log import ChangeLog
from .column_types import ColumnKind, ColumnType
from .columns import process_column
from .utils import load_csv, read_id_file, save_results

__all__ = [
    'ChangeLog',
    'ColumnKind',
    'ColumnType',
    'load_csv',
    'process_column',
    'read_id_file',
    'save_results',
    'update_cell_value',
]
