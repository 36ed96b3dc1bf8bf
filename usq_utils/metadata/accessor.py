"""
Metadata Accessor
Filters the USQ metadata store, optionally runs subtype predictions, and returns
the requested shape
"""

import logging
import warnings
from dataclasses import dataclass

import pandas as pd

from usq_utils.config import CONFIG, ClassifierOptions
from usq_utils.metadata.categories import CategoryGroup, ReturnShape, SampleSet
from usq_utils.metadata.expression import compare_sample_ids, get_expression, subset_expression
from usq_utils.metadata.predictions import join_predictions, reshape_predictions
from usq_utils.metadata.summary import log_section, log_subtype_distribution

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterSummary:
    kept: int
    removed: int
    total: int

    def as_dict(self) -> dict:
        return {'kept': self.kept, 'removed': self.removed, 'total': self.total}


@dataclass(frozen=True)
class MetadataBundle:
    """Everything a prediction-backed analysis needs, for return_shape='everything'."""
    metadata: pd.DataFrame
    expression: pd.DataFrame
    prediction_5_class: pd.DataFrame
    prediction_7_class: pd.DataFrame
    subtype_scores: pd.DataFrame
    signature_scores: pd.DataFrame
    parameters_used: dict


# Base table and identifier/category columns per table shape
_TABLE_FOR_SHAPE = {
    ReturnShape.TIDY: 'tidy',
    ReturnShape.EVERYTHING: 'tidy',
    ReturnShape.RAW: 'raw',
    ReturnShape.PUBLICATION: 'pub',
    ReturnShape.EXPRESSIONS_ONLY: 'pub',
}


def _table_columns(table_name):
    columns = CONFIG['columns']
    if table_name == 'raw':
        return columns['raw_sample_id'], columns['raw_category']
    return columns['sample_id'], columns['category']


def filter_metadata(table, category_group=CategoryGroup.NONE, sample_ids=None,
                    id_col='sample_id', category_col='sample_category_group', raw=False):
    """
    Subset a metadata table by explicit sample ids or by category group.

    Explicit ids take precedence: when given, the category group is ignored and
    the result holds exactly the rows whose id is in `sample_ids`. With `raw`,
    the category is compared against the raw-table label.

    Returns the filtered copy and a FilterSummary (kept + removed == total).
    """
    category_group = CategoryGroup.parse(category_group)
    total = len(table)
    if sample_ids is not None:
        filtered = table[table[id_col].isin(list(sample_ids))]
    elif category_group.is_filter:
        label = category_group.raw_label() if raw else category_group.label
        filtered = table[table[category_col] == label]
    else:
        filtered = table
    filtered = filtered.copy()
    return filtered, FilterSummary(kept=len(filtered), removed=total - len(filtered), total=total)


def _predict(store, sample_ids, category_group, classifier, options, verbose):
    sample_set = SampleSet.for_category(category_group)
    if category_group.is_filter and sample_set is SampleSet.ALL and 'high_quality' in category_group.label:
        logger.info(f"category_group {category_group.label} uses the {SampleSet.ALL.value} expression set; "
                    f"only {CategoryGroup.UC_INDEX_HIGH_QUALITY.label} selects {SampleSet.HIGH_QUALITY.value}")
    expression = get_expression(store, sample_set=sample_set, gene_id=options.gene_id, verbose=verbose)

    if verbose:
        log_section(logger, 'PREDICTING SUBTYPES')

    expression = subset_expression(expression, sample_ids)
    compare_sample_ids(sample_ids, expression.columns)

    if classifier is None:
        from usq_utils.classification import LundTaxRClassifier
        classifier = LundTaxRClassifier()

    # The stored data are never log-transformed, so log_transform is always requested
    predicted = classifier(
        expression,
        log_transform=True,
        adjust=options.adjust,
        adj_factor=options.adj_factor,
        gene_id=options.gene_id,
        threshold_progression=options.threshold_progression,
        impute=options.impute,
        impute_reject=options.impute_reject,
        impute_knn=options.impute_knn,
        verbose=False,
    )
    tables = reshape_predictions(predicted)

    if verbose:
        logger.info("Subtype predictions done!")
        log_subtype_distribution(tables.subtypes_5)

    return expression, tables


def get_metadata(store, return_shape='tidy', run_classifier=False,
                 category_group='uc_index_high_quality', sample_ids=None,
                 classifier_options=None, classifier=None, verbose=True):
    """
    Get USQ metadata with optional subtype predictions.

    Parameters
    ----------
    store : MetadataStore
        Loaded metadata bundle (see load_metadata_store).
    return_shape : str
        'tidy' (default), 'raw', 'publication', 'change_log', 'full_store',
        'everything' or 'expressions_only'.
    run_classifier : bool
        Join subtype predictions onto the table. Forced on for 'everything'.
    category_group : str
        Sample category to keep, or 'none' for no filtering.
    sample_ids : list of str, optional
        Explicit sample ids; overrides category_group.
    classifier_options : ClassifierOptions or dict, optional
        Classifier parameters (gene_id, threshold_progression, adjust,
        adj_factor, impute, impute_reject, impute_knn).
    classifier : callable, optional
        Subtype classifier; defaults to LundTaxR through rpy2.
    verbose : bool
        Narrate each phase through the module logger.

    Returns
    -------
    pd.DataFrame, ChangeLog, MetadataStore or MetadataBundle
        Depends on return_shape. Table results carry
        ``attrs['filter_summary']`` with kept/removed/total counts.
    """
    # Validate everything before touching any table
    shape = ReturnShape.parse(return_shape)
    category = CategoryGroup.parse(category_group)
    options = ClassifierOptions.from_mapping(classifier_options)

    if shape is ReturnShape.FULL_STORE:
        logger.info("Returning full metadata store - no filters or sample subset applied")
        return store
    if shape is ReturnShape.CHANGE_LOG:
        logger.info("Returning change log...")
        return store.change_log

    if sample_ids is not None:
        sample_ids = [sample_ids] if isinstance(sample_ids, str) else list(sample_ids)
        logger.info("Sample IDs are provided, the return will be restricted to these samples, "
                    "regardless of any category_group filters...")
        category = CategoryGroup.NONE

    if shape is ReturnShape.EVERYTHING and not run_classifier:
        message = ("'everything' was requested but run_classifier is False; "
                   "running the classifier to honor the requested return shape")
        logger.warning(message)
        warnings.warn(message, UserWarning, stacklevel=2)
        run_classifier = True

    if verbose:
        log_section(logger, 'METADATA VERSION')
        logger.info(f"Metadata Version: {store.metadata_version}")
        log_section(logger, 'SUMMARY')
        logger.info(f"Return Format: {shape.value}")
        logger.info(f"Sample Category Group: {category.label}")

    table_name = _TABLE_FOR_SHAPE[shape]
    id_col, category_col = _table_columns(table_name)
    metadata, summary = filter_metadata(
        store.table(table_name),
        category_group=category,
        sample_ids=sample_ids,
        id_col=id_col,
        category_col=category_col,
        raw=table_name == 'raw',
    )
    ids = metadata[id_col].tolist()

    if verbose:
        logger.info(f"{summary.kept} Samples kept in the metadata")
        logger.info(f"{summary.removed} Samples removed in the filtering process")

    if shape is ReturnShape.EXPRESSIONS_ONLY:
        sample_set = SampleSet.for_category(category)
        expression = subset_expression(
            get_expression(store, sample_set=sample_set, gene_id=options.gene_id, verbose=verbose),
            ids,
        )
        compare_sample_ids(ids, expression.columns)
        return expression

    if run_classifier:
        expression, tables = _predict(store, ids, category, classifier, options, verbose)

        if shape is ReturnShape.EVERYTHING:
            parameters_used = {
                'return_shape': shape.value,
                'run_classifier': run_classifier,
                'category_group': category.label,
                'sample_ids': sample_ids,
                'verbose': verbose,
                'log_transform': True,
                **options.as_dict(),
            }
            metadata.attrs['filter_summary'] = summary.as_dict()
            return MetadataBundle(
                metadata=metadata,
                expression=expression,
                prediction_5_class=tables.subtypes_5,
                prediction_7_class=tables.subtypes_7,
                subtype_scores=tables.subtype_scores,
                signature_scores=tables.signature_scores,
                parameters_used=parameters_used,
            )

        metadata = join_predictions(metadata, tables.combined(), id_col=id_col)

    if verbose:
        log_section(logger, 'PROCESS COMPLETE!')

    metadata.attrs['filter_summary'] = summary.as_dict()
    return metadata


get_usq_metadata = get_metadata
