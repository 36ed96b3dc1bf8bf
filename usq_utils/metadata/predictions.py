"""
Subtype predictions: the classifier contract and reshaping of its output.

The classifier is external. Only the shape of its four result blocks is
interpreted here:
- predictions_5classes: sample -> 5-class label
- predictions_7classes: sample -> 7-class label
- subtype_scores: samples x subtype prediction scores
- scores: samples x signature scores (progression risk, molecular grades, ...)
"""

import logging
from dataclasses import dataclass

import pandas as pd

from usq_utils.errors import ConfigurationError

logger = logging.getLogger(__name__)

SUBTYPE_5_LEVELS = ('Uro', 'GU', 'BaSq', 'Mes', 'ScNE')
SUBTYPE_7_LEVELS = ('UroA', 'UroB', 'UroC', 'GU', 'BaSq', 'Mes', 'ScNE')

SIGNATURE_LEVELS = {
    'progression_risk': ('LR', 'HR'),
    'molecular_grade_who_2022': ('LG', 'HG'),
    'molecular_grade_who_1999': ('G1_G2', 'G3'),
}

SCORE_COLUMNS = {
    'Uro': 'uro_prediction_score',
    'UroA': 'uroa_prediction_score',
    'UroB': 'urob_prediction_score',
    'UroC': 'uroc_prediction_score',
    'GU': 'gu_prediction_score',
    'BaSq': 'basq_prediction_score',
    'Mes': 'mes_prediction_score',
    'ScNE': 'scne_prediction_score',
}

RESULT_BLOCKS = ('predictions_5classes', 'predictions_7classes', 'subtype_scores', 'scores')


def _as_series(labels, block):
    if isinstance(labels, pd.Series):
        return labels
    if isinstance(labels, pd.DataFrame):
        if labels.shape[1] != 1:
            raise ConfigurationError(f"Classifier block {block} must hold one label column, got {labels.shape[1]}")
        return labels.iloc[:, 0]
    if isinstance(labels, dict):
        return pd.Series(labels)
    raise ConfigurationError(f"Classifier block {block} must be a Series, a one-column DataFrame or a dict")


@dataclass(frozen=True)
class ClassifierResult:
    """Raw classifier output, indexed by sample id."""
    predictions_5classes: pd.Series
    predictions_7classes: pd.Series
    subtype_scores: pd.DataFrame
    scores: pd.DataFrame

    @classmethod
    def from_mapping(cls, result):
        if isinstance(result, cls):
            return result
        missing = [block for block in RESULT_BLOCKS if block not in result]
        if missing:
            raise ConfigurationError(f"Classifier result is missing block(s): {', '.join(missing)}")
        return cls(
            predictions_5classes=_as_series(result['predictions_5classes'], 'predictions_5classes'),
            predictions_7classes=_as_series(result['predictions_7classes'], 'predictions_7classes'),
            subtype_scores=pd.DataFrame(result['subtype_scores']),
            scores=pd.DataFrame(result['scores']),
        )


@dataclass(frozen=True)
class PredictionTables:
    """Classifier output reshaped into tables keyed by a `sample_id` column."""
    subtypes_5: pd.DataFrame
    subtypes_7: pd.DataFrame
    subtype_scores: pd.DataFrame
    signature_scores: pd.DataFrame

    def combined(self) -> pd.DataFrame:
        """All four blocks left-joined onto the 5-class table."""
        combined = self.subtypes_5
        for block in (self.subtypes_7, self.subtype_scores, self.signature_scores):
            combined = combined.merge(block, on='sample_id', how='left')
        return combined


def _labels_table(labels, column, levels):
    return pd.DataFrame({
        'sample_id': labels.index.tolist(),
        column: pd.Categorical(labels.astype(object).tolist(), categories=list(levels)),
    })


def _keyed_table(frame):
    """Move the sample index into a leading `sample_id` column."""
    frame = frame.copy()
    frame.index.name = None
    frame = frame.reset_index()
    return frame.rename(columns={frame.columns[0]: 'sample_id'})


def reshape_predictions(result) -> PredictionTables:
    """
    Turn the classifier's four result blocks into sample-keyed tables.

    Labels become categoricals with fixed level orders (5-class:
    Uro, GU, BaSq, Mes, ScNE; 7-class: UroA, UroB, UroC, GU, BaSq, Mes, ScNE;
    progression risk LR < HR; grades LG/HG and G1_G2/G3). Labels outside these
    levels become missing.
    """
    result = ClassifierResult.from_mapping(result)

    subtypes_5 = _labels_table(result.predictions_5classes, 'subtype_5_class', SUBTYPE_5_LEVELS)
    subtypes_7 = _labels_table(result.predictions_7classes, 'subtype_7_class', SUBTYPE_7_LEVELS)

    subtype_scores = _keyed_table(result.subtype_scores).rename(columns=SCORE_COLUMNS)

    signature_scores = _keyed_table(result.scores)
    for column, levels in SIGNATURE_LEVELS.items():
        if column in signature_scores.columns:
            signature_scores[column] = pd.Categorical(
                signature_scores[column].astype(object), categories=list(levels)
            )

    return PredictionTables(
        subtypes_5=subtypes_5,
        subtypes_7=subtypes_7,
        subtype_scores=subtype_scores,
        signature_scores=signature_scores,
    )


def join_predictions(metadata, predictions, id_col='sample_id'):
    """
    Left-join combined predictions onto a metadata table.

    `predictions` is keyed by `sample_id`; for the raw table the key is renamed
    to the raw identifier column first. Samples without predictions keep
    missing prediction columns. Metadata columns that the predictions provide
    are replaced.
    """
    if id_col != 'sample_id':
        predictions = predictions.rename(columns={'sample_id': id_col})
    overlapping = [c for c in predictions.columns if c != id_col and c in metadata.columns]
    if overlapping:
        logger.info(f"Replacing stored prediction columns: {overlapping}")
        metadata = metadata.drop(columns=overlapping)
    return metadata.merge(predictions, on=id_col, how='left')
