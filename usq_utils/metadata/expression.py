"""
Expression Loader
Resolves the bundled geTMM expression matrices and related gene annotations
"""

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

from usq_utils.errors import ConfigurationError, NotFoundError
from usq_utils.metadata.categories import GeneIdScheme, SampleSet
from usq_utils.metadata.summary import log_section

logger = logging.getLogger(__name__)

SAMPLE_SET_DESCRIPTIONS = {
    SampleSet.HIGH_QUALITY: 'USQ-HQ dataset (n=533 high-quality samples)',
    SampleSet.ALL: 'USQ-ALL dataset (n=662 all UC samples, HQ + LQ)',
}


def get_expression(store, sample_set='USQ-HQ', gene_id='hgnc_symbol', verbose=True):
    """
    Return one of the bundled expression matrices (genes x samples).

    Parameters
    ----------
    store : MetadataStore
        Loaded metadata bundle.
    sample_set : str
        'USQ-HQ' (high-quality samples only) or 'USQ-ALL' (all UC index samples).
    gene_id : str
        'hgnc_symbol' or 'ensembl_gene_id'. The HGNC variant has fewer rows
        because X/Y PAR genes sharing a symbol were merged.
    verbose : bool
        Log a short description of the matrix.

    Returns
    -------
    pd.DataFrame
        geTMM-normalized values, NOT log-transformed.
    """
    sample_set = SampleSet.parse(sample_set)
    gene_id = GeneIdScheme.parse(gene_id)

    if verbose:
        log_section(logger, 'EXPRESSION DATA SUMMARY')
        logger.info("geTMM (geometric mean TMM) normalized")
        logger.info("Data is not log transformed!")
        logger.info(f"Store version: {store.metadata_version}")

    matrix = store.expression_matrix(sample_set, gene_id)

    if verbose:
        logger.info("HGNC symbols selected" if gene_id is GeneIdScheme.HGNC else "ENSEMBL IDs selected")
        logger.info(f"Loading {SAMPLE_SET_DESCRIPTIONS[sample_set]}")
        logger.info(f"Number of samples: {matrix.shape[1]}")
        logger.info(f"Number of genes: {matrix.shape[0]}")

    return matrix


@dataclass(frozen=True)
class SampleMismatch:
    """Sample ids present on only one side of a metadata/expression pairing."""
    missing_in_expression: tuple
    missing_in_metadata: tuple

    @property
    def is_empty(self) -> bool:
        return not self.missing_in_expression and not self.missing_in_metadata


def compare_sample_ids(metadata_ids, expression_ids) -> SampleMismatch:
    """Report (never fail on) differences between two sample id collections."""
    expression_set = set(expression_ids)
    metadata_set = set(metadata_ids)
    mismatch = SampleMismatch(
        missing_in_expression=tuple(i for i in dict.fromkeys(metadata_ids) if i not in expression_set),
        missing_in_metadata=tuple(i for i in dict.fromkeys(expression_ids) if i not in metadata_set),
    )
    if mismatch.missing_in_expression:
        logger.warning(f"Samples in metadata but not in expression data: {list(mismatch.missing_in_expression)}")
    if mismatch.missing_in_metadata:
        logger.warning(f"Samples in expression data but not in metadata: {list(mismatch.missing_in_metadata)}")
    return mismatch


def subset_expression(matrix, sample_ids):
    """Keep the columns of `matrix` listed in `sample_ids`, in that order; unknown ids are skipped."""
    columns = [s for s in dict.fromkeys(sample_ids) if s in matrix.columns]
    return matrix.loc[:, columns]


def log_transform_expression(matrix):
    """Apply log2(x + 1) to a non-log expression matrix."""
    if (matrix.lt(0)).to_numpy().any():
        raise ConfigurationError("Expression matrix contains negative values; is it already log-transformed?")
    return np.log2(matrix + 1)


def get_gene_annotations(store) -> pd.DataFrame:
    """Gene annotation table (gene_id, gene_name, chr, positions, band, ...) of the store."""
    if store.gene_annotations is None:
        raise NotFoundError(f"Metadata version {store.metadata_version} has no gene annotations.")
    return store.gene_annotations


def map_ensembl_to_symbol(ensembl_ids, annotations, id_col='gene_id', symbol_col='gene_name'):
    """
    Map Ensembl gene ids to HGNC symbols.

    Several Ensembl ids can share one symbol (X/Y PAR genes), so the mapping is
    not invertible. Ids without an annotation map to missing.
    """
    for col in (id_col, symbol_col):
        if col not in annotations.columns:
            raise NotFoundError(f"Column {col} does not exist in the annotation table.")
    ensembl_to_hugo = dict(zip(annotations[id_col], annotations[symbol_col]))
    ensembl_ids = list(ensembl_ids)
    mapped = pd.Series([ensembl_to_hugo.get(i) for i in ensembl_ids], index=ensembl_ids, dtype=object)
    unmapped = int(mapped.isna().sum())
    if unmapped:
        logger.warning(f"{unmapped} Ensembl IDs have no HGNC symbol in the annotation table")
    return mapped
