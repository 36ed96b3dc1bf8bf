import os

import matplotlib
import pandas as pd
import pytest

from usq_utils.errors import ConfigurationError
from usq_utils.metadata import (
    ClassifierResult,
    join_predictions,
    plot_subtype_distribution,
    reshape_predictions,
    summarize_subtypes,
)

matplotlib.use("Agg")


@pytest.fixture
def result():
    samples = ["S1", "S2", "S3"]
    return {
        "predictions_5classes": pd.DataFrame({"prediction": ["BaSq", "Uro", "Unknown"]}, index=samples),
        "predictions_7classes": pd.Series(["BaSq", "UroB", "UroA"], index=samples),
        "subtype_scores": pd.DataFrame({"Uro": [0.1, 0.8, 0.4], "BaSq": [0.9, 0.1, 0.2]}, index=samples),
        "scores": pd.DataFrame({
            "progression_score": [0.7, 0.2, 0.5],
            "progression_risk": ["HR", "LR", "HR"],
            "molecular_grade_who_2022": ["HG", "LG", "HG"],
        }, index=samples),
    }


def test_reshape_predictions(result):
    tables = reshape_predictions(result)
    assert list(tables.subtypes_5.columns) == ["sample_id", "subtype_5_class"]
    # Labels outside the fixed levels become missing
    assert tables.subtypes_5["subtype_5_class"].astype(object).tolist()[:2] == ["BaSq", "Uro"]
    assert pd.isna(tables.subtypes_5["subtype_5_class"].tolist()[2])
    assert list(tables.subtypes_7["subtype_7_class"].cat.categories) == [
        "UroA", "UroB", "UroC", "GU", "BaSq", "Mes", "ScNE"]
    assert list(tables.subtype_scores.columns) == ["sample_id", "uro_prediction_score", "basq_prediction_score"]
    assert list(tables.signature_scores["progression_risk"].cat.categories) == ["LR", "HR"]


def test_combined_predictions(result):
    combined = reshape_predictions(result).combined()
    assert combined["sample_id"].tolist() == ["S1", "S2", "S3"]
    assert combined.loc[1, "subtype_7_class"] == "UroB"
    assert combined.loc[0, "progression_score"] == pytest.approx(0.7)


def test_classifier_result_requires_all_blocks(result):
    del result["scores"]
    with pytest.raises(ConfigurationError, match="scores"):
        ClassifierResult.from_mapping(result)


def test_classifier_result_rejects_wide_labels(result):
    result["predictions_5classes"] = pd.DataFrame({"a": ["Uro"] * 3, "b": ["GU"] * 3})
    with pytest.raises(ConfigurationError, match="one label column"):
        reshape_predictions(result)


def test_join_predictions_left_join(result):
    metadata = pd.DataFrame({"sample_id": ["S3", "S1", "S7"], "age": [60, 70, 80]})
    joined = join_predictions(metadata, reshape_predictions(result).combined())
    assert joined["sample_id"].tolist() == ["S3", "S1", "S7"]
    assert joined["age"].tolist() == [60, 70, 80]
    assert joined.loc[1, "subtype_5_class"] == "BaSq"
    assert pd.isna(joined.loc[2, "subtype_5_class"])


def test_summarize_subtypes_fixed_order():
    labels = pd.Series(["GU", "Uro", "Uro", "ScNE"])
    counts = summarize_subtypes(labels)
    assert counts.index.tolist() == ["Uro", "GU", "BaSq", "Mes", "ScNE"]
    assert counts.tolist() == [2, 1, 0, 0, 1]


def test_plot_subtype_distribution(tmp_path, result):
    combined = reshape_predictions(result).combined()
    path = plot_subtype_distribution(combined, str(tmp_path / "plots"))
    assert path.endswith("subtype_distribution.png")
    assert os.path.getsize(path) > 0
