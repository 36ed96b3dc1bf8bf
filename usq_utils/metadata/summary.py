"""
Narration helpers and subtype distribution summaries.
"""

import logging
import os

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from usq_utils.metadata.predictions import SUBTYPE_5_LEVELS, SUBTYPE_7_LEVELS

logger = logging.getLogger(__name__)

SUBTYPE_LEVELS = {
    'subtype_5_class': SUBTYPE_5_LEVELS,
    'subtype_7_class': SUBTYPE_7_LEVELS,
}


def log_section(log, title):
    """Log a banner separating the phases of a verbose run."""
    log.info("#" * 44)
    log.info(f"{title:^44}")
    log.info("#" * 44)


def summarize_subtypes(predictions, column='subtype_5_class') -> pd.Series:
    """
    Count samples per subtype in the fixed level order.

    `predictions` may be a table holding `column` or a Series of labels.
    Absent subtypes are reported with a count of 0.
    """
    labels = predictions[column] if isinstance(predictions, pd.DataFrame) else predictions
    levels = SUBTYPE_LEVELS.get(column, SUBTYPE_5_LEVELS)
    counts = pd.Series(labels).astype(object).value_counts()
    return pd.Series([int(counts.get(level, 0)) for level in levels], index=levels, name='n')


def log_subtype_distribution(predictions, column='subtype_5_class'):
    counts = summarize_subtypes(predictions, column)
    lines = [f"  {subtype:<6}: {n}" for subtype, n in counts.items() if n > 0]
    logger.info("Subtype distribution (n):\n" + "\n".join(lines))
    return counts


def plot_subtype_distribution(predictions, output_dir, column='subtype_5_class',
                              filename='subtype_distribution'):
    """Save a count plot of predicted subtypes in fixed level order; returns the PNG path."""
    labels = predictions[column] if isinstance(predictions, pd.DataFrame) else predictions
    levels = SUBTYPE_LEVELS.get(column, SUBTYPE_5_LEVELS)
    os.makedirs(output_dir, exist_ok=True)

    plot_df = pd.DataFrame({column: pd.Series(labels).astype(object)})
    fig, ax = plt.subplots(figsize=(8, 6))
    sns.countplot(data=plot_df, x=column, order=list(levels), ax=ax)
    ax.set_title(f"Distribution of {column.replace('_', ' ')}")
    ax.set_xlabel('Subtype')
    ax.set_ylabel('Count')
    fig.tight_layout()

    plot_path = os.path.join(output_dir, f"{filename}.png")
    fig.savefig(plot_path, dpi=300, bbox_inches='tight')
    plt.close(fig)
    logger.info(f"Saved plot: {plot_path}")
    return plot_path
