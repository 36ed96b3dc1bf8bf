"""
Metadata Store
Immutable bundle of the USQ metadata tables, expression matrices and change log
"""

import functools
import logging
import os
from dataclasses import dataclass, field
from types import MappingProxyType

import pandas as pd

from usq_utils.config import CONFIG
from usq_utils.data_processing.change_log import ChangeLog
from usq_utils.data_processing.utils import load_csv
from usq_utils.errors import NotFoundError, ValidationError
from usq_utils.metadata.categories import GeneIdScheme, SampleSet

logger = logging.getLogger(__name__)


def _check_unique(frame, column, table_name):
    if column not in frame.columns:
        raise ValidationError(f"Table {table_name} has no identifier column {column}.")
    duplicated = frame[column][frame[column].duplicated()].unique().tolist()
    if duplicated:
        raise ValidationError(
            f"Identifier column {column} of table {table_name} is not unique: {duplicated[:10]}"
        )


@dataclass(frozen=True, eq=False)
class MetadataStore:
    """
    Versioned bundle loaded once per process.

    Tables are never modified in place: `table()` and every accessor return
    copies. The `metadata_*` attributes (also reachable through
    `return_shape="full_store"`) are the cached frames shared by every caller
    of `load_metadata_store`; copy them before editing.
    `expression` maps (SampleSet, GeneIdScheme) to a genes x samples matrix of
    non-log geTMM values; variants missing from the bundle are simply absent.
    """
    metadata_version: str
    metadata_tidy: pd.DataFrame
    metadata_raw: pd.DataFrame
    metadata_pub: pd.DataFrame
    change_log: ChangeLog = field(default_factory=ChangeLog)
    expression: dict = field(default_factory=dict)
    gene_annotations: pd.DataFrame = None

    def __post_init__(self):
        columns = CONFIG['columns']
        _check_unique(self.metadata_tidy, columns['sample_id'], 'tidy')
        _check_unique(self.metadata_pub, columns['sample_id'], 'pub')
        _check_unique(self.metadata_raw, columns['raw_sample_id'], 'raw')

        expression = {}
        for (sample_set, gene_id), matrix in self.expression.items():
            key = (SampleSet.parse(sample_set), GeneIdScheme.parse(gene_id))
            if (matrix.lt(0)).to_numpy().any():
                raise ValidationError(
                    f"Expression matrix {key[0].value}/{key[1].value} contains negative values."
                )
            expression[key] = matrix
        object.__setattr__(self, 'expression', MappingProxyType(expression))

    def table(self, name) -> pd.DataFrame:
        """Return a copy of the tidy, raw or pub table."""
        tables = {'tidy': self.metadata_tidy, 'raw': self.metadata_raw, 'pub': self.metadata_pub}
        if name not in tables:
            raise NotFoundError(f"No table named {name!r}. Available: {', '.join(tables)}")
        return tables[name].copy()

    def expression_matrix(self, sample_set, gene_id) -> pd.DataFrame:
        key = (SampleSet.parse(sample_set), GeneIdScheme.parse(gene_id))
        if key not in self.expression:
            raise NotFoundError(
                f"Expression set {key[0].value} with {key[1].value} identifiers "
                f"is not part of metadata version {self.metadata_version}."
            )
        return self.expression[key]

    def summary(self) -> dict:
        return {
            'metadata_version': self.metadata_version,
            'tidy': self.metadata_tidy.shape,
            'raw': self.metadata_raw.shape,
            'pub': self.metadata_pub.shape,
            'change_log_entries': len(self.change_log),
            'expression': {
                f"{sample_set.value}/{gene_id.value}": matrix.shape
                for (sample_set, gene_id), matrix in self.expression.items()
            },
            'gene_annotations': None if self.gene_annotations is None else self.gene_annotations.shape,
        }


def _read_store(base_path):
    files = CONFIG['files']
    if not os.path.isdir(base_path):
        raise NotFoundError(f"Metadata store directory not found: {base_path}")

    def path_of(name):
        return os.path.join(base_path, name)

    if not os.path.exists(path_of(files['version'])):
        raise NotFoundError(f"Metadata version file not found in {base_path}")
    with open(path_of(files['version']), 'r', encoding='utf-8') as handle:
        version = handle.read().strip()

    tables = {}
    for name in ('tidy', 'raw', 'pub'):
        table_path = path_of(files[name])
        if not os.path.exists(table_path):
            raise NotFoundError(f"Metadata table not found: {table_path}")
        tables[name] = load_csv(table_path)
        logger.info(f"Loaded {name} metadata from {table_path} with shape {tables[name].shape}")

    change_log_path = path_of(files['change_log'])
    change_log = ChangeLog.from_json(change_log_path) if os.path.exists(change_log_path) else ChangeLog()

    expression = {}
    for key, file_name in files['expression'].items():
        matrix_path = path_of(file_name)
        if os.path.exists(matrix_path):
            expression[key] = load_csv(matrix_path, index_col=0)
            logger.info(f"Loaded expression set {key[0]}/{key[1]} with shape {expression[key].shape}")

    annotations_path = path_of(files['annotations'])
    annotations = load_csv(annotations_path) if os.path.exists(annotations_path) else None

    return MetadataStore(
        metadata_version=version,
        metadata_tidy=tables['tidy'],
        metadata_raw=tables['raw'],
        metadata_pub=tables['pub'],
        change_log=change_log,
        expression=expression,
        gene_annotations=annotations,
    )


@functools.lru_cache(maxsize=None)
def _load_cached(base_path):
    return _read_store(base_path)


def load_metadata_store(base_path=None) -> MetadataStore:
    """
    Load the metadata bundle from a directory, once per directory per process.

    Parameters
    ----------
    base_path : str, optional
        Directory holding the bundle files named in CONFIG['files'].
        Defaults to CONFIG['base_path'].
    """
    base_path = os.path.abspath(base_path or CONFIG['base_path'])
    return _load_cached(base_path)


load_metadata_store.cache_clear = _load_cached.cache_clear
