import numpy as np
import pandas as pd
import pytest

from lda_walkthrough.evaluate import accuracy, confusion_table, misclassified, save_results


def test_confusion_table_counts():
    y_true = ["A", "A", "A", "B", "B", "C"]
    y_pred = ["A", "B", "A", "B", "B", "A"]
    table = confusion_table(y_true, y_pred)

    assert list(table.index) == ["A", "B", "C"]
    assert list(table.columns) == ["A", "B", "C"]
    assert table.loc["A", "A"] == 2
    assert table.loc["A", "B"] == 1
    assert table.loc["C", "A"] == 1
    assert table.loc["C", "C"] == 0
    assert table.to_numpy().sum() == len(y_true)


def test_confusion_table_keeps_unpredicted_labels():
    table = confusion_table(["A", "B"], ["A", "A"], labels=["A", "B", "C"])
    assert table.shape == (3, 3)
    assert table.loc["B", "A"] == 1
    assert table["B"].sum() == 0


def test_confusion_table_length_mismatch():
    with pytest.raises(ValueError):
        confusion_table(["A"], ["A", "B"])


def test_accuracy():
    assert accuracy(["A", "B", "B", "A"], ["A", "B", "A", "A"]) == pytest.approx(0.75)
    assert np.isnan(accuracy([], []))


def test_misclassified_rows():
    df = pd.DataFrame({"x1": [0.0, 1.0, 2.0], "group": ["A", "B", "B"]})
    post = np.array([[0.9, 0.1], [0.6, 0.4], [0.2, 0.8]])
    wrong = misclassified(df, ["A", "A", "B"], post, ["A", "B"])

    assert list(wrong.index) == [1]
    assert wrong.loc[1, "predicted"] == "A"
    assert wrong.loc[1, "p_A"] == pytest.approx(0.6)


def test_save_results(tmp_path):
    table = confusion_table(["A", "B"], ["A", "B"])
    path = save_results(tmp_path / "case" / "results.txt", "Case: demo", {
        "Accuracy": "1.0000",
        "Confusion table": table,
    })

    text = path.read_text()
    assert text.startswith("Case: demo\n==========")
    assert "Accuracy" in text and "1.0000" in text
    assert "predicted" in text
