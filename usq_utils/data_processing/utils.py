import logging
import os

import pandas as pd

logger = logging.getLogger(__name__)


def load_csv(path: str, **kwargs) -> pd.DataFrame:
    """Read a CSV file, handling UTF-8 BOM if present."""
    return pd.read_csv(path, encoding='utf-8-sig', **kwargs)


def read_id_file(path: str) -> list[str]:
    """Read one identifier per line, skipping blank lines and '#' comments."""
    with open(path, 'r', encoding='utf-8-sig') as handle:
        ids = [line.strip() for line in handle]
    return [i for i in ids if i and not i.startswith('#')]


def save_results(df, output_file, index=False, sep=','):
    """Save a DataFrame to CSV, creating the parent directory if needed."""
    output_dir = os.path.dirname(os.path.abspath(output_file))
    os.makedirs(output_dir, exist_ok=True)
    df.to_csv(output_file, index=index, sep=sep)
    logger.info(f"Saved results to {output_file}")
    return output_file
