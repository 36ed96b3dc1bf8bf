"""
Subtype classification through R.

Importing this package starts rpy2 and an embedded R session, so callers that
may never classify (the metadata accessor) import it inside the function that
needs it.
"""

from .lundtax import LundTaxRClassifier

__all__ = ['LundTaxRClassifier']
