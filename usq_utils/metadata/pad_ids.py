"""
PAD-to-Sample Resolver
Maps pathology (PAD) IDs from TMA slides to USQ sample IDs
"""

import logging

from usq_utils.config import CONFIG
from usq_utils.errors import ConfigurationError, NotFoundError
from usq_utils.metadata.categories import INDEX_TUMOR_GROUPS

logger = logging.getLogger(__name__)


def get_pad_to_sample_id(pad_ids=None, metadata=None, return_all=False):
    """
    Look up sample IDs for PAD (pathology) IDs in a tidy metadata table.

    By default only UC index samples (high and low quality) are returned, so a
    PAD with replicate or recurrence samples resolves to its index tumor. With
    `return_all`, the matched sub-table (sample_id, tma_pad_id,
    sample_category_group) is returned for every category instead.
    """
    if pad_ids is None:
        raise ConfigurationError("No PAD IDs were provided...")
    if metadata is None:
        raise ConfigurationError("No incoming metadata provided, not sure what to convert...")

    columns = CONFIG['columns']
    wanted = [columns['sample_id'], columns['pad_id'], columns['category']]
    missing_cols = [col for col in wanted if col not in metadata.columns]
    if missing_cols:
        raise NotFoundError(f"Missing required columns: {missing_cols}")

    pad_ids = [pad_ids] if isinstance(pad_ids, str) else list(pad_ids)
    meta_sub = metadata.loc[metadata[columns['pad_id']].isin(pad_ids), wanted].copy()

    logger.info(f"Number of samples matching the requested PAD ID(s): {len(meta_sub)}")
    logger.info(f"Number of PADs requested: {len(set(pad_ids))}")

    if return_all:
        return meta_sub.reset_index(drop=True)

    index_labels = [group.label for group in INDEX_TUMOR_GROUPS]
    return meta_sub.loc[meta_sub[columns['category']].isin(index_labels), columns['sample_id']].tolist()
