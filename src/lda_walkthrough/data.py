from pathlib import Path
import logging

import numpy as np
import pandas as pd
import torch
import typer
from scipy.stats import zscore
from torch.utils.data import Dataset

logger = logging.getLogger(__name__)

GROUP_NAMES = ["A", "B", "C", "D", "E", "F"]


class LDA_Dataset(Dataset):
    """
    Synthetic labelled observations for the LDA walkthrough.

    Each item is one observation:
      x: shape (M,)  float32 measurements
      y: scalar long tensor, index of the group in `groups`

    The table form (what the cases and plots use) is available via `frame`.
    """

    def __init__(self, X, y, columns=None, groups=None):
        """
        Args:
            X: (N, M) measurements
            y: (N,) group labels (any hashable values)
            columns: measurement names, default x1..xM
            groups: ordered group names, default sorted unique labels of y
        """
        self.X = np.asarray(X, dtype=np.float64)
        if self.X.ndim == 1:
            self.X = self.X.reshape(-1, 1)
        y = np.asarray(y)
        if len(y) != len(self.X):
            raise ValueError(f"X has {len(self.X)} rows but y has {len(y)} labels")

        self.columns = list(columns) if columns is not None else [
            f"x{i + 1}" for i in range(self.X.shape[1])
        ]
        if len(self.columns) != self.X.shape[1]:
            raise ValueError(f"expected {self.X.shape[1]} column names, got {len(self.columns)}")

        self.groups = list(groups) if groups is not None else sorted(np.unique(y).tolist())
        self.labels = y
        # integer codes for torch
        lookup = {g: i for i, g in enumerate(self.groups)}
        self.y = np.array([lookup[v] for v in y.tolist()], dtype=np.int64)

    @classmethod
    def from_frame(cls, df: pd.DataFrame, label_col: str = "group"):
        columns = [c for c in df.columns if c != label_col]
        return cls(df[columns].to_numpy(dtype=np.float64), df[label_col].to_numpy(), columns=columns)

    @classmethod
    def load(cls, pt_path: Path):
        pt_path = Path(pt_path)
        if not pt_path.exists():
            raise FileNotFoundError(f"could not find dataset file {pt_path}")

        data = torch.load(pt_path, map_location="cpu")
        if not all(k in data for k in ("X", "y", "groups", "columns")):
            raise KeyError(f"{pt_path} must contain keys: 'X', 'y', 'groups', 'columns'")

        X = data["X"]
        y = data["y"]
        X = X.detach().cpu().numpy() if isinstance(X, torch.Tensor) else np.asarray(X)
        y = y.detach().cpu().numpy() if isinstance(y, torch.Tensor) else np.asarray(y)

        groups = list(data["groups"])
        labels = np.array([groups[i] for i in y.astype(np.int64)], dtype=object)
        return cls(X, labels, columns=data["columns"], groups=groups)

    def save(self, pt_path: Path) -> Path:
        pt_path = Path(pt_path)
        pt_path.parent.mkdir(parents=True, exist_ok=True)
        torch.save(
            {
                "X": torch.tensor(self.X, dtype=torch.float64),
                "y": torch.tensor(self.y, dtype=torch.long),
                "groups": list(self.groups),
                "columns": list(self.columns),
            },
            pt_path,
        )
        logger.info("Saved dataset (%d rows) to %s", len(self), pt_path)
        return pt_path

    @property
    def frame(self) -> pd.DataFrame:
        df = pd.DataFrame(self.X, columns=self.columns)
        df["group"] = self.labels
        return df

    def __len__(self) -> int:
        """Return the number of observations."""
        return int(len(self.X))

    def __getitem__(self, index: int):
        """Return one observation and its group code."""
        x = torch.tensor(self.X[index], dtype=torch.float32)
        y = torch.tensor(self.y[index], dtype=torch.long)
        return x, y


def standardize(X):
    """
    Scale each column to zero mean and unit (sample, ddof=1) standard deviation.

    X: (N, M)
    A column with zero variance is only centered (it stays all zeros).
    """
    X = np.asarray(X, dtype=np.float64)
    if len(X) < 2:
        return X - X.mean(axis=0) if len(X) else X.copy()

    # every value identical (exact test, the float sd of such a column can be > 0)
    constant = np.ptp(X, axis=0) == 0
    Z = np.empty_like(X)
    if np.any(~constant):
        Z[:, ~constant] = zscore(X[:, ~constant], axis=0, ddof=1)
    if np.any(constant):
        logger.debug("standardize: %d constant column(s) left centered", int(constant.sum()))
        Z[:, constant] = 0.0
    return Z


def make_groups(n_per_group=50, means=((0.0, 0.0), (2.0, 2.0)), scales=None,
                standardize_columns=True, groups=None, seed=None) -> pd.DataFrame:
    """
    Draw normal samples per group and return them as a table.

    n_per_group: int, or one int per group
    means: (G, M) mean of every measurement in every group
    scales: (M,) standard deviation of each measurement (default 1)
    standardize_columns: z-score every measurement column after drawing
    groups: group names, default A, B, C, ...
    seed: passed to numpy.random.default_rng
    """
    means = np.atleast_2d(np.asarray(means, dtype=np.float64))
    n_groups, n_meas = means.shape

    if np.isscalar(n_per_group):
        sizes = [int(n_per_group)] * n_groups
    else:
        sizes = [int(n) for n in n_per_group]
    if len(sizes) != n_groups:
        raise ValueError(f"got {len(sizes)} group sizes for {n_groups} groups")

    scales = np.ones(n_meas) if scales is None else np.asarray(scales, dtype=np.float64)
    if scales.shape != (n_meas,):
        raise ValueError(f"scales must have {n_meas} entries, got shape {scales.shape}")

    if groups is None:
        groups = GROUP_NAMES[:n_groups]
    if len(groups) != n_groups:
        raise ValueError(f"got {len(groups)} group names for {n_groups} groups")

    rng = np.random.default_rng(seed)
    blocks, labels = [], []
    for g, mu, n in zip(groups, means, sizes):
        blocks.append(rng.normal(loc=mu, scale=scales, size=(n, n_meas)))
        labels.extend([g] * n)

    X = np.concatenate(blocks, axis=0) if blocks else np.empty((0, n_meas))
    if len(X) == 0:
        logger.warning("make_groups: zero samples requested, returning an empty table")

    if standardize_columns:
        X = standardize(X)

    df = pd.DataFrame(X, columns=[f"x{i + 1}" for i in range(n_meas)])
    df["group"] = pd.Series(labels, dtype=object)
    return df


def constant_column(df: pd.DataFrame, column: str, value: float = 0.0) -> pd.DataFrame:
    """Return a copy of df where `column` holds the same value in every row."""
    if column not in df.columns:
        raise KeyError(f"no column named {column!r}")
    out = df.copy()
    out[column] = float(value)
    return out


def with_categorical(df: pd.DataFrame, level_probs: dict, column: str = "colour",
                     seed=None, label_col: str = "group") -> pd.DataFrame:
    """
    Append a categorical measurement whose level frequencies depend on the group.

    level_probs: {group: {level: probability}}
    """
    rng = np.random.default_rng(seed)
    out = df.copy()
    values = np.empty(len(out), dtype=object)
    for g, probs in level_probs.items():
        mask = (out[label_col] == g).to_numpy()
        levels = list(probs.keys())
        p = np.asarray(list(probs.values()), dtype=np.float64)
        values[mask] = rng.choice(levels, size=int(mask.sum()), p=p / p.sum())
    out[column] = values
    return out


def encode_categorical(df: pd.DataFrame, columns, label_col: str = "group") -> pd.DataFrame:
    """
    One-hot encode categorical columns (first level dropped, like a model matrix).

    The label column is moved to the end.
    """
    encoded = pd.get_dummies(df.drop(columns=[label_col]), columns=list(columns),
                             drop_first=True, dtype=float)
    encoded[label_col] = df[label_col].to_numpy()
    return encoded


def split_xy(df: pd.DataFrame, label_col: str = "group"):
    """Return (X, y, columns) from a table."""
    columns = [c for c in df.columns if c != label_col]
    return df[columns].to_numpy(dtype=np.float64), df[label_col].to_numpy(), columns


def generate(
    output: Path = typer.Argument(..., help="Where to write the .pt dataset"),
    n_groups: int = typer.Option(2, "--groups", help="Number of groups"),
    n_per_group: int = 50,
    shift: float = 2.0,
    seed: int = 42,
) -> None:
    """Generate a standardized synthetic dataset and save it."""
    means = [[shift * g, shift * g] for g in range(n_groups)]
    df = make_groups(n_per_group=n_per_group, means=means, seed=seed)
    LDA_Dataset.from_frame(df).save(output)
    print(f"Saved {len(df)} observations ({n_groups} groups) to {output}")


if __name__ == "__main__":
    typer.run(generate)
