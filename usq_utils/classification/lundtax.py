"""
LundTaxR bridge
Runs the LundTaxR subtype classifier on an expression subset through rpy2
"""

import logging

import rpy2.robjects as ro
from rpy2.robjects import pandas2ri
from rpy2.robjects.conversion import localconverter
from rpy2.robjects.packages import importr

from usq_utils.metadata.predictions import RESULT_BLOCKS, ClassifierResult

logger = logging.getLogger(__name__)


def _to_frame(r_object):
    """Convert an R vector, matrix or data.frame to a pandas DataFrame keeping row names."""
    r_frame = ro.r['as.data.frame'](r_object)
    with localconverter(ro.default_converter + pandas2ri.converter):
        return ro.conversion.get_conversion().rpy2py(r_frame)


class LundTaxRClassifier:
    """Callable wrapper around LundTaxR::classify_samples."""

    def __init__(self, package='LundTaxR'):
        self.package = package
        self.lundtax = importr(package)
        logger.info(f"Loaded R package {package}")

    def __call__(self, expression, *, log_transform, adjust, adj_factor, gene_id,
                 threshold_progression, impute, impute_reject, impute_knn, verbose):
        logger.info(f"Running {self.package} on {expression.shape[1]} samples x {expression.shape[0]} genes")
        with localconverter(ro.default_converter + pandas2ri.converter):
            r_data = ro.conversion.get_conversion().py2rpy(expression)

        predicted = self.lundtax.classify_samples(
            this_data=r_data,
            log_transform=log_transform,
            adjust=adjust,
            adj_factor=adj_factor,
            impute=impute,
            impute_reject=impute_reject,
            impute_kNN=impute_knn,
            include_data=False,
            gene_id=gene_id,
            threshold_progression=threshold_progression,
            include_pred_scores=True,
            verbose=verbose,
        )

        blocks = {name: _to_frame(predicted.rx2(name)) for name in RESULT_BLOCKS}
        return ClassifierResult(
            predictions_5classes=blocks['predictions_5classes'].iloc[:, 0],
            predictions_7classes=blocks['predictions_7classes'].iloc[:, 0],
            subtype_scores=blocks['subtype_scores'],
            scores=blocks['scores'],
        )
