"""
Single-cell corrections with type checking and change logging.
"""

import logging
import warnings

import numpy as np
import pandas as pd

from usq_utils.data_processing.column_types import ColumnKind, ColumnType, is_missing
from usq_utils.errors import NotFoundError

logger = logging.getLogger(__name__)


def _make_nullable(series, kind):
    """Switch numpy bool/int columns to their nullable dtype so they can hold NA."""
    if kind is ColumnKind.BOOLEAN and series.dtype == np.bool_:
        return series.astype('boolean')
    if kind is ColumnKind.INTEGER and not isinstance(series.dtype, pd.api.extensions.ExtensionDtype):
        return series.astype('Int64')
    return series


def update_cell_value(data, sample_id, column, new_value, sample_id_col='sample_id',
                      validate_type=True, log_changes=True, reason=None,
                      change_log=None):
    """
    Update one cell (or every row sharing an identifier) in a metadata table.

    Rows are found by matching `sample_id` in `sample_id_col`. With
    `validate_type`, the new value is checked and coerced against the column's
    current type: categorical values must be an existing level, booleans accept
    True/False or 'true'/'false', numeric/integer/date values must convert.
    Missing values are always accepted.

    Returns a copy of `data`; the input table is left untouched. When
    `log_changes` is set and a `change_log` is given, the correction is appended
    to its cell_updates section.
    """
    if sample_id_col not in data.columns:
        raise NotFoundError(f"Column {sample_id_col} does not exist in the data frame.")
    if column not in data.columns:
        raise NotFoundError(f"Column {column} does not exist in the data frame.")

    mask = (data[sample_id_col] == sample_id).fillna(False).astype(bool).to_numpy()
    row_index = np.flatnonzero(mask).tolist()
    if not row_index:
        raise NotFoundError(f"Sample ID {sample_id} does not exist in the {sample_id_col} column.")
    if len(row_index) > 1:
        message = (f"Multiple rows found for sample ID {sample_id} ({len(row_index)} rows). "
                   f"Updating all matching rows.")
        logger.warning(message)
        warnings.warn(message, UserWarning, stacklevel=2)

    series = data[column]
    old_value = series[mask].tolist()

    if validate_type:
        column_type = ColumnType.of(series)
        value = column_type.coerce(new_value, column)
        if is_missing(value):
            series = _make_nullable(series, column_type.kind)
    else:
        value = new_value

    data = data.copy()
    series = series.copy()
    series[mask] = value
    data[column] = series

    if log_changes and change_log is not None:
        change_log.record_cell_update(sample_id, column, {
            'sample_id': sample_id,
            'sample_id_col': sample_id_col,
            'row_index': row_index,
            'column': column,
            'old_value': old_value,
            'new_value': None if is_missing(value) else value,
            'reason': reason,
        })
        lines = [f"Updated {sample_id} - {column}",
                 f"  Old value: {', '.join(str(v) for v in old_value)}",
                 f"  New value: {value}"]
        if reason is not None:
            lines.append(f"  Reason: {reason}")
        logger.info("\n".join(lines))

    return data
