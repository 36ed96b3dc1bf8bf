"""
Metadata and expression access for the UROSCANSEQ (USQ) bladder cancer cohort.

This package contains modules for loading the bundled metadata store, filtering
and reshaping its tables, joining LundTaxR subtype predictions, and recording
curation changes to metadata columns and cells.
"""

# Version information
__version__ = "1.0.0"

from .data_processing import ChangeLog, process_column, update_cell_value
from .errors import ConfigurationError, NotFoundError, USQError, ValidationError
from .metadata import (
    MetadataStore,
    get_expression,
    get_metadata,
    get_pad_to_sample_id,
    get_usq_metadata,
    load_metadata_store,
)
