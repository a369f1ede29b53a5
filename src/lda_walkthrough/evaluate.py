from pathlib import Path
import logging

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


def confusion_table(y_true, y_pred, labels=None) -> pd.DataFrame:
    """
    Count (actual, predicted) pairs.

    Rows = actual group, columns = predicted group. Every label in `labels`
    (default: union of both inputs, sorted) gets a row and a column, even
    when its count is zero.
    """
    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)
    if len(y_true) != len(y_pred):
        raise ValueError(f"{len(y_true)} actual labels but {len(y_pred)} predictions")

    if labels is None:
        labels = sorted(set(y_true.tolist()) | set(y_pred.tolist()))

    table = pd.crosstab(
        pd.Categorical(y_true, categories=labels),
        pd.Categorical(y_pred, categories=labels),
        rownames=["actual"],
        colnames=["predicted"],
        dropna=False,
    )
    return table.reindex(index=labels, columns=labels, fill_value=0)


def accuracy(y_true, y_pred) -> float:
    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)
    if len(y_true) == 0:
        return float("nan")
    return float(np.mean(y_true == y_pred))


def misclassified(df: pd.DataFrame, y_pred, posteriors=None, classes=None, label_col="group") -> pd.DataFrame:
    """
    Rows of df whose predicted group differs from the actual one.

    With `posteriors` (N, G) and `classes`, one `p_<group>` column per group
    is added so boundary-adjacent rows can be inspected.
    """
    out = df.copy()
    out["predicted"] = np.asarray(y_pred)
    if posteriors is not None:
        for k, g in enumerate(classes):
            out[f"p_{g}"] = posteriors[:, k]
    return out[out[label_col].to_numpy() != out["predicted"].to_numpy()]


def save_results(save_path, title: str, sections: dict) -> Path:
    """
    Save a text report.

    sections: {heading: text or DataFrame}
    """
    save_path = Path(save_path)
    save_path.parent.mkdir(parents=True, exist_ok=True)

    with open(save_path, "w") as f:
        f.write(f"{title}\n")
        f.write("=" * len(title) + "\n\n")

        for heading, body in sections.items():
            f.write(f"{heading}\n")
            f.write("-" * len(heading) + "\n")
            if isinstance(body, pd.DataFrame):
                body = body.to_string()
            f.write(f"{body}\n\n")

    logger.info("Saved results to: %s", save_path)
    return save_path
