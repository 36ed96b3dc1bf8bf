import pandas as pd
import pytest

from usq_utils.errors import ConfigurationError, NotFoundError
from usq_utils.metadata import get_pad_to_sample_id


@pytest.fixture
def pad_metadata():
    return pd.DataFrame({
        "sample_id": ["S1", "S2", "S3", "S4", "S5"],
        "tma_pad_id": ["PAD_001", "PAD_001", "PAD_002", "PAD_002", "PAD_003"],
        "sample_category_group": [
            "uc_index_high_quality",
            "replicate_high_quality",
            "uc_index_low_quality",
            "recurrence_high_quality",
            "uc_index_high_quality",
        ],
        "age": [70, 70, 58, 58, 81],
    })


def test_index_tumors_only(pad_metadata):
    assert get_pad_to_sample_id(["PAD_001", "PAD_002"], pad_metadata) == ["S1", "S3"]


def test_return_all(pad_metadata):
    table = get_pad_to_sample_id(["PAD_001", "PAD_002"], pad_metadata, return_all=True)
    assert list(table.columns) == ["sample_id", "tma_pad_id", "sample_category_group"]
    assert table["sample_id"].tolist() == ["S1", "S2", "S3", "S4"]
    assert table.index.tolist() == [0, 1, 2, 3]


def test_single_pad_and_unknown_pad(pad_metadata):
    assert get_pad_to_sample_id("PAD_003", pad_metadata) == ["S5"]
    assert get_pad_to_sample_id(["PAD_999"], pad_metadata) == []


def test_pad_lookup_on_store(store):
    ids = get_pad_to_sample_id(["PAD_0000", "PAD_0266"], store.metadata_tidy)
    # PAD_0266 pairs the last HQ sample with the first LQ sample
    assert ids == ["S0000", "S0001", "S0532", "S0533"]


def test_missing_inputs(pad_metadata):
    with pytest.raises(ConfigurationError, match="No PAD IDs"):
        get_pad_to_sample_id(None, pad_metadata)
    with pytest.raises(ConfigurationError, match="No incoming metadata"):
        get_pad_to_sample_id(["PAD_001"], None)


def test_missing_columns(pad_metadata):
    with pytest.raises(NotFoundError, match="tma_pad_id"):
        get_pad_to_sample_id(["PAD_001"], pad_metadata.drop(columns="tma_pad_id"))
