"""
Column normalization: rename, retype, relevel and clean a single metadata column.
"""

import logging

import numpy as np
import pandas as pd

from usq_utils.data_processing.column_types import ColumnKind, parse_kind
from usq_utils.errors import ConfigurationError

logger = logging.getLogger(__name__)

DATE_FORMAT = '%Y-%m-%d'


def _as_list(value):
    """Wrap a scalar (a single string included) in a list; None stays None."""
    if value is None:
        return None
    if isinstance(value, (str, bytes)) or np.ndim(value) == 0:
        return [value]
    return list(value)


def _to_boolean(series, boolean_map):
    """Map values case-insensitively onto True/False; anything else becomes missing."""
    true_values = {str(v).lower() for v in boolean_map.get('true') or []}
    false_values = {str(v).lower() for v in boolean_map.get('false') or []}
    lowered = series.astype('string').str.lower()
    result = pd.Series(pd.NA, index=series.index, dtype='boolean')
    result[lowered.isin(true_values).fillna(False).astype(bool)] = True
    result[lowered.isin(false_values).fillna(False).astype(bool)] = False
    return result


def _to_categorical(series, factor_levels, rename_factors, factor_order):
    if factor_levels is not None:
        values = pd.Categorical(series, categories=factor_levels)
    else:
        values = pd.Categorical(series)

    if rename_factors:
        # Renaming two levels to the same name merges them
        renamed_levels = [rename_factors.get(level, level) for level in values.categories]
        renamed = pd.Series(values, index=series.index).astype(object).replace(rename_factors)
        values = pd.Categorical(renamed, categories=list(dict.fromkeys(renamed_levels)))

    if factor_order is not None:
        values = pd.Categorical(
            pd.Series(values, index=series.index).astype(object),
            categories=factor_order,
            ordered=True,
        )
    return pd.Series(values, index=series.index)


def process_column(data, column, new_name=None, type='string', factor_levels=None,
                   factor_order=None, replace_na=None, rename_factors=None,
                   boolean_map=None, domain=None, print_table=True,
                   log_changes=True, change_log=None):
    """
    Rename, convert and clean one column of a metadata table.

    Parameters
    ----------
    data : pd.DataFrame
        Table to operate on. It is not modified; a copy is returned.
    column : str
        Name of the column to process.
    new_name : str, optional
        New name for the column.
    type : str
        Target type: 'string', 'categorical', 'numeric', 'integer', 'boolean' or
        'date' (aliases 'character', 'factor', 'double' are accepted).
    factor_levels : list or str, optional
        Levels for a categorical column; values outside them become missing.
    factor_order : list, optional
        Final level order (applied after renaming). Marks the column ordered.
    replace_na : list or str, optional
        Sentinel value(s) replaced with a missing marker before conversion.
    rename_factors : dict, optional
        Old level -> new level.
    boolean_map : dict, optional
        {'true': [...], 'false': [...]} matched case-insensitively. Required for
        boolean columns.
    domain : str, optional
        Free-text domain tag stored in the change log.
    print_table : bool
        Log the value counts of the processed column.
    log_changes : bool
        Append an entry to `change_log` (when one is given).
    change_log : ChangeLog, optional
        Log that receives the entry, keyed by the original column name.

    Returns
    -------
    pd.DataFrame
        Copy of `data` with the column replaced.
    """
    if column not in data.columns:
        raise ConfigurationError(f"Column {column} does not exist in the data frame.")

    kind = parse_kind(type)
    if kind is None:
        raise ConfigurationError(
            f"Unsupported type specified: {type!r}. "
            f"Valid types: {', '.join(k.value for k in ColumnKind)}"
        )
    if kind is ColumnKind.BOOLEAN and not boolean_map:
        raise ConfigurationError("For boolean type, a boolean_map must be provided.")

    factor_levels = _as_list(factor_levels)
    factor_order = _as_list(factor_order)
    replace_na = _as_list(replace_na)
    if boolean_map is not None:
        boolean_map = {side: _as_list(values) for side, values in boolean_map.items()}

    original_column = column
    data = data.copy()
    if new_name is not None and new_name != column:
        data = data.rename(columns={column: new_name})
        column = new_name

    series = data[column]
    if replace_na:
        series = series.mask(series.isin(replace_na))

    if kind is ColumnKind.CATEGORICAL:
        series = _to_categorical(series, factor_levels, rename_factors, factor_order)
    elif kind is ColumnKind.STRING:
        series = series.astype('string')
    elif kind is ColumnKind.NUMERIC:
        series = pd.to_numeric(series, errors='coerce').astype('float64')
    elif kind is ColumnKind.INTEGER:
        series = np.trunc(pd.to_numeric(series, errors='coerce')).astype('Int64')
    elif kind is ColumnKind.BOOLEAN:
        series = _to_boolean(series, boolean_map)
    elif kind is ColumnKind.DATE:
        series = pd.to_datetime(series, format=DATE_FORMAT, errors='coerce')

    data[column] = series

    if print_table:
        counts = data[column].value_counts(dropna=False, sort=False)
        logger.info(f"Table of {column}:\n{counts.to_string()}")

    parameters_used = {
        'original_column': original_column,
        'new_name': new_name,
        'type': kind.value,
        'factor_levels': factor_levels,
        'factor_order': factor_order,
        'replace_na': replace_na,
        'rename_factors': dict(rename_factors) if rename_factors is not None else None,
        'boolean_map': boolean_map,
        'domain': domain,
    }
    if log_changes and change_log is not None:
        change_log.record_column(original_column, parameters_used)

    return data
