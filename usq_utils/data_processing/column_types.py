"""
Column types as a closed set of kinds, each with its own validate-and-coerce rule.

A ColumnType is derived once from a column's dtype; writers then ask it to
coerce a candidate value instead of inspecting the column again.
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np
import pandas as pd

from usq_utils.errors import ValidationError


class ColumnKind(Enum):
    STRING = 'string'
    CATEGORICAL = 'categorical'
    BOOLEAN = 'boolean'
    NUMERIC = 'numeric'
    INTEGER = 'integer'
    DATE = 'date'


# Lookup always lowercases the token first
TYPE_ALIASES = {
    'string': ColumnKind.STRING,
    'character': ColumnKind.STRING,
    'str': ColumnKind.STRING,
    'categorical': ColumnKind.CATEGORICAL,
    'category': ColumnKind.CATEGORICAL,
    'factor': ColumnKind.CATEGORICAL,
    'boolean': ColumnKind.BOOLEAN,
    'bool': ColumnKind.BOOLEAN,
    'logical': ColumnKind.BOOLEAN,
    'numeric': ColumnKind.NUMERIC,
    'double': ColumnKind.NUMERIC,
    'float': ColumnKind.NUMERIC,
    'integer': ColumnKind.INTEGER,
    'int': ColumnKind.INTEGER,
    'date': ColumnKind.DATE,
}

_TRUE_STRINGS = {'true'}
_FALSE_STRINGS = {'false'}


def parse_kind(token):
    """Resolve a type token such as 'factor' or 'double'; None if unsupported."""
    if isinstance(token, ColumnKind):
        return token
    if not isinstance(token, str):
        return None
    return TYPE_ALIASES.get(token.strip().lower())


def is_missing(value) -> bool:
    """True for scalar missing markers (None, NaN, NaT, pd.NA)."""
    if value is None:
        return True
    if np.ndim(value) != 0:
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


@dataclass(frozen=True)
class ColumnType:
    kind: ColumnKind
    levels: tuple = ()
    ordered: bool = False

    @classmethod
    def of(cls, series: pd.Series) -> 'ColumnType':
        """Classify a column by its dtype."""
        dtype = series.dtype
        if isinstance(dtype, pd.CategoricalDtype):
            return cls(ColumnKind.CATEGORICAL, tuple(dtype.categories), bool(dtype.ordered))
        if pd.api.types.is_bool_dtype(dtype):
            return cls(ColumnKind.BOOLEAN)
        if pd.api.types.is_integer_dtype(dtype):
            return cls(ColumnKind.INTEGER)
        if pd.api.types.is_numeric_dtype(dtype):
            return cls(ColumnKind.NUMERIC)
        if pd.api.types.is_datetime64_any_dtype(dtype):
            return cls(ColumnKind.DATE)
        return cls(ColumnKind.STRING)

    def coerce(self, value, column):
        """
        Convert `value` to this column type or raise ValidationError.

        Missing values are accepted for every kind.
        """
        if is_missing(value):
            return pd.NA if self.kind in (ColumnKind.BOOLEAN, ColumnKind.INTEGER) else np.nan

        if self.kind is ColumnKind.STRING:
            return str(value)

        if self.kind is ColumnKind.CATEGORICAL:
            text = str(value)
            for level in self.levels:
                if str(level) == text:
                    return level
            raise ValidationError(
                f"Value '{text}' is not a valid level for categorical column '{column}'.\n"
                f"Valid levels: {', '.join(str(level) for level in self.levels)}"
            )

        if self.kind is ColumnKind.BOOLEAN:
            if isinstance(value, (bool, np.bool_)):
                return bool(value)
            if isinstance(value, str):
                lowered = value.strip().lower()
                if lowered in _TRUE_STRINGS:
                    return True
                if lowered in _FALSE_STRINGS:
                    return False
            raise ValidationError(
                f"Column {column} is boolean. New value must be True, False, "
                f"'true'/'false' or missing, got {value!r}."
            )

        if self.kind is ColumnKind.NUMERIC:
            if isinstance(value, (bool, np.bool_)):
                raise ValidationError(f"Column {column} is numeric. Cannot use boolean {value!r}.")
            try:
                return float(value)
            except (TypeError, ValueError):
                raise ValidationError(
                    f"Column {column} is numeric. Cannot convert {value!r} to numeric."
                ) from None

        if self.kind is ColumnKind.INTEGER:
            if isinstance(value, (bool, np.bool_)):
                raise ValidationError(f"Column {column} is integer. Cannot use boolean {value!r}.")
            try:
                number = float(value)
            except (TypeError, ValueError):
                raise ValidationError(
                    f"Column {column} is integer. Cannot convert {value!r} to integer."
                ) from None
            if not number.is_integer():
                raise ValidationError(
                    f"Column {column} is integer. {value!r} is not a whole number."
                )
            return int(number)

        if self.kind is ColumnKind.DATE:
            try:
                return pd.Timestamp(value)
            except (TypeError, ValueError):
                raise ValidationError(
                    f"Column {column} is date. Cannot convert {value!r} to a date."
                ) from None

        raise ValidationError(f"Unhandled column kind {self.kind!r} for column {column}.")
