import numpy as np
import pandas as pd
import pytest

from usq_utils.data_processing import ChangeLog
from usq_utils.metadata import CategoryGroup, MetadataStore
from usq_utils.metadata.predictions import SCORE_COLUMNS, SUBTYPE_5_LEVELS, SUBTYPE_7_LEVELS

# 754 samples, 533 of them UC index high quality
CATEGORY_COUNTS = {
    CategoryGroup.UC_INDEX_HIGH_QUALITY: 533,
    CategoryGroup.UC_INDEX_LOW_QUALITY: 129,
    CategoryGroup.NON_UC_HIGH_QUALITY: 30,
    CategoryGroup.NON_UC_LOW_QUALITY: 10,
    CategoryGroup.RECURRENCE_HIGH_QUALITY: 30,
    CategoryGroup.REPLICATE_HIGH_QUALITY: 15,
    CategoryGroup.REPLICATE_LOW_QUALITY: 7,
}

GENES_HGNC = ['FGFR3', 'KRT5', 'GATA3', 'TP63', 'CDH1']
GENES_ENSEMBL = ['ENSG00000068078', 'ENSG00000186081', 'ENSG00000107485',
                 'ENSG00000073282', 'ENSG00000039068']


def build_tables():
    sample_ids, categories = [], []
    for group, n in CATEGORY_COUNTS.items():
        for _ in range(n):
            sample_ids.append(f"S{len(sample_ids):04d}")
            categories.append(group)
    n = len(sample_ids)
    rng = np.random.default_rng(0)

    tidy = pd.DataFrame({
        'sample_id': sample_ids,
        'sample_category_group': [c.label for c in categories],
        'tma_pad_id': [f"PAD_{i // 2:04d}" for i in range(n)],
        'age': rng.integers(40, 90, size=n),
        'sex': pd.Categorical(rng.choice(['Male', 'Female'], size=n), categories=['Male', 'Female']),
    })
    raw = pd.DataFrame({
        'XRNA_cohort_name': sample_ids,
        'CategoryGroup': [c.raw_label() for c in categories],
        'Age': tidy['age'].to_numpy(),
    })
    pub = tidy[['sample_id', 'sample_category_group', 'sex']].copy()
    return tidy, raw, pub


def build_expression(tidy):
    hq = tidy.loc[tidy['sample_category_group'] == 'uc_index_high_quality', 'sample_id'].tolist()
    lq = tidy.loc[tidy['sample_category_group'] == 'uc_index_low_quality', 'sample_id'].tolist()
    rng = np.random.default_rng(1)

    def matrix(genes, samples):
        return pd.DataFrame(rng.gamma(2.0, 10.0, size=(len(genes), len(samples))),
                            index=genes, columns=samples)

    return {
        ('USQ-HQ', 'hgnc_symbol'): matrix(GENES_HGNC, hq),
        ('USQ-HQ', 'ensembl_gene_id'): matrix(GENES_ENSEMBL, hq),
        ('USQ-ALL', 'hgnc_symbol'): matrix(GENES_HGNC, hq + lq),
        ('USQ-ALL', 'ensembl_gene_id'): matrix(GENES_ENSEMBL, hq + lq),
    }


@pytest.fixture
def store():
    tidy, raw, pub = build_tables()
    annotations = pd.DataFrame({'gene_id': GENES_ENSEMBL, 'gene_name': GENES_HGNC,
                                'chr': ['chr4', 'chr12', 'chr10', 'chr3', 'chr16']})
    change_log = ChangeLog()
    change_log.record_column('Gender', {'original_column': 'Gender', 'new_name': 'sex', 'type': 'categorical'})
    return MetadataStore(
        metadata_version='v2.0.0-test',
        metadata_tidy=tidy,
        metadata_raw=raw,
        metadata_pub=pub,
        change_log=change_log,
        expression=build_expression(tidy),
        gene_annotations=annotations,
    )


class FakeClassifier:
    """Stands in for LundTaxR: deterministic labels by column position."""

    def __init__(self):
        self.calls = []

    def __call__(self, expression, **kwargs):
        samples = list(expression.columns)
        self.calls.append(dict(kwargs, samples=samples))
        n = len(samples)
        five = pd.Series([SUBTYPE_5_LEVELS[i % 5] for i in range(n)], index=samples, dtype=object)
        seven = pd.Series([SUBTYPE_7_LEVELS[i % 7] for i in range(n)], index=samples, dtype=object)
        subtype_scores = pd.DataFrame(
            {name: np.linspace(0, 1, n) for name in SCORE_COLUMNS}, index=samples
        )
        scores = pd.DataFrame({
            'progression_score': np.linspace(0, 1, n),
            'progression_risk': ['HR' if i % 2 else 'LR' for i in range(n)],
            'molecular_grade_who_2022': ['HG' if i % 3 else 'LG' for i in range(n)],
            'molecular_grade_who_1999': ['G3' if i % 3 else 'G1_G2' for i in range(n)],
        }, index=samples)
        return {
            'predictions_5classes': five,
            'predictions_7classes': seven,
            'subtype_scores': subtype_scores,
            'scores': scores,
        }


@pytest.fixture
def fake_classifier():
    return FakeClassifier()


@pytest.fixture
def store_dir(tmp_path, store):
    """The synthetic store written out in the on-disk bundle layout."""
    from usq_utils.config import CONFIG

    files = CONFIG['files']
    base = tmp_path / "usq_store"
    base.mkdir()
    (base / files['version']).write_text(store.metadata_version + "\n", encoding="utf-8")
    store.metadata_tidy.to_csv(base / files['tidy'], index=False)
    store.metadata_raw.to_csv(base / files['raw'], index=False)
    store.metadata_pub.to_csv(base / files['pub'], index=False)
    store.change_log.to_json(base / files['change_log'])
    store.gene_annotations.to_csv(base / files['annotations'], index=False)
    for (sample_set, gene_id), matrix in store.expression.items():
        matrix.to_csv(base / files['expression'][(sample_set.value, gene_id.value)])
    return base
