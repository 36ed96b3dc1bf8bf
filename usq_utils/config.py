"""
Configuration for the USQ metadata utilities.

CONFIG holds file names and column names of the bundled store; ClassifierOptions
holds the parameters forwarded to the LundTaxR subtype classifier.
"""

import os
from dataclasses import asdict, dataclass, fields

from usq_utils.errors import ConfigurationError

# Configuration dictionary for file paths and column names
CONFIG = {
    'base_path': os.environ.get('USQ_BASE_PATH', os.path.join(os.getcwd(), 'data')),
    'files': {
        'version': 'metadata_version.txt',
        'tidy': 'usq_metadata_tidy.csv',
        'raw': 'usq_metadata_raw.csv',
        'pub': 'usq_metadata_pub.csv',
        'change_log': 'usq_change_log.json',
        'annotations': 'expr_annotations.csv',
        'expression': {
            ('USQ-HQ', 'hgnc_symbol'): 'usq_expr_set_533_hgnc.csv',
            ('USQ-HQ', 'ensembl_gene_id'): 'usq_expr_set_533_ensembl.csv',
            ('USQ-ALL', 'hgnc_symbol'): 'usq_expr_set_662_hgnc.csv',
            ('USQ-ALL', 'ensembl_gene_id'): 'usq_expr_set_662_ensembl.csv',
        },
    },
    'columns': {
        'sample_id': 'sample_id',
        'raw_sample_id': 'XRNA_cohort_name',
        'category': 'sample_category_group',
        'raw_category': 'CategoryGroup',
        'pad_id': 'tma_pad_id',
    },
}


@dataclass(frozen=True)
class ClassifierOptions:
    """
    Parameters forwarded to the subtype classifier.

    The stored expression data are never log-transformed, so the classifier is
    always asked to log-transform its input; that flag is not configurable.
    """
    gene_id: str = 'hgnc_symbol'
    threshold_progression: float = 0.58
    adjust: bool = True
    adj_factor: float = 5.1431
    impute: bool = True
    impute_reject: float = 0.67
    impute_knn: int = 5

    def __post_init__(self):
        # Imported here: usq_utils.metadata imports this module at load time
        from usq_utils.metadata.categories import GeneIdScheme

        object.__setattr__(self, 'gene_id', GeneIdScheme.parse(self.gene_id).value)

    @classmethod
    def from_mapping(cls, options):
        """Build options from a dict, rejecting keys that are not known parameters."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown classifier option(s): {', '.join(unknown)}. "
                f"Valid options: {', '.join(sorted(known))}"
            )
        return cls(**options)

    def as_dict(self) -> dict:
        return asdict(self)
