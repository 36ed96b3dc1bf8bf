"""
Metadata access for the UROSCANSEQ (USQ) cohort.

This package provides:
- The immutable metadata store and its loader
- Category, return-shape and expression-variant enumerations
- The expression loader and gene annotation lookups
- The metadata accessor with optional subtype predictions
- PAD ID to sample ID resolution
"""

from .accessor import FilterSummary, MetadataBundle, filter_metadata, get_metadata, get_usq_metadata
from .categories import CategoryGroup, GeneIdScheme, ReturnShape, SampleSet
from .expression import (
    SampleMismatch,
    compare_sample_ids,
    get_expression,
    get_gene_annotations,
    log_transform_expression,
    map_ensembl_to_symbol,
    subset_expression,
)
from .pad_ids import get_pad_to_sample_id
from .predictions import ClassifierResult, PredictionTables, join_predictions, reshape_predictions
from .store import MetadataStore, load_metadata_store
from .summary import plot_subtype_distribution, summarize_subtypes

__all__ = [
    'CategoryGroup',
    'ClassifierResult',
    'FilterSummary',
    'GeneIdScheme',
    'MetadataBundle',
    'MetadataStore',
    'PredictionTables',
    'ReturnShape',
    'SampleMismatch',
    'SampleSet',
    'compare_sample_ids',
    'filter_metadata',
    'get_expression',
    'get_gene_annotations',
    'get_metadata',
    'get_pad_to_sample_id',
    'get_usq_metadata',
    'join_predictions',
    'load_metadata_store',
    'log_transform_expression',
    'map_ensembl_to_symbol',
    'plot_subtype_distribution',
    'reshape_predictions',
    'subset_expression',
    'summarize_subtypes',
]
