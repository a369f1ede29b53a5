from pathlib import Path
import logging

import matplotlib.pyplot as plt
import numpy as np
from sklearn.metrics import ConfusionMatrixDisplay

logger = logging.getLogger(__name__)


def _finish(fig, save_path=None, dpi=200, show=False):
    fig.tight_layout()
    if save_path is not None:
        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(save_path, dpi=dpi)
        logger.info("Saved figure -> %s", save_path)
    if show:
        plt.show()
    plt.close(fig)
    return save_path


def plot_projection_histogram(z, y, title="Projection onto the discriminant axis",
                              threshold=None, bins=20, save_path=None, dpi=200, show=False):
    """
    Overlaid histograms of projection values, one per group.

    z: (N,) projections
    y: (N,) group labels
    threshold: optional decision boundary drawn as a vertical line
    """
    z = np.asarray(z, dtype=np.float64)
    y = np.asarray(y)

    fig, ax = plt.subplots(figsize=(8, 4))
    edges = np.histogram_bin_edges(z, bins=bins) if len(z) else bins
    for g in np.unique(y):
        ax.hist(z[y == g], bins=edges, alpha=0.55, label=str(g), edgecolor="white")

    if threshold is not None:
        ax.axvline(threshold, color="black", linestyle="--", linewidth=1, label="boundary")

    ax.set_title(title)
    ax.set_xlabel("Discriminant value")
    ax.set_ylabel("Count")
    ax.grid(True, alpha=0.2)
    ax.legend(loc="best")
    return _finish(fig, save_path, dpi, show)


def plot_scatter_with_direction(X, y, direction, columns=("x1", "x2"), center=None,
                                title="Observations and discriminant direction",
                                save_path=None, dpi=200, show=False):
    """
    Scatter the first two measurements, coloured by group, with the direction
    vector drawn as an arrow from `center` (default: overall mean).
    """
    X = np.asarray(X, dtype=np.float64)
    y = np.asarray(y)
    direction = np.asarray(direction, dtype=np.float64)
    center = X[:, :2].mean(axis=0) if center is None else np.asarray(center, dtype=np.float64)[:2]

    fig, ax = plt.subplots(figsize=(6, 6))
    for g in np.unique(y):
        mask = y == g
        ax.scatter(X[mask, 0], X[mask, 1], s=18, alpha=0.8, label=str(g))

    # arrow length ~ half the spread of the data
    norm = np.linalg.norm(direction[:2])
    if norm > 0:
        length = 0.5 * np.ptp(X[:, :2], axis=0).max()
        d = direction[:2] / norm * length
        ax.annotate("", xy=center + d, xytext=center,
                    arrowprops=dict(arrowstyle="->", color="black", linewidth=1.5))
        ax.plot(*np.column_stack([center - d, center + d]), color="black", alpha=0.3, linewidth=1)

    ax.set_title(title)
    ax.set_xlabel(columns[0])
    ax.set_ylabel(columns[1])
    ax.set_aspect("equal", adjustable="datalim")
    ax.grid(True, alpha=0.2)
    ax.legend(loc="best")
    return _finish(fig, save_path, dpi, show)


def plot_discriminant_scatter(Z, y, title="LDA projection (LD1 vs LD2)",
                              save_path=None, dpi=200, show=False):
    """Z: (N, 2) projections onto the first two discriminant axes."""
    Z = np.asarray(Z, dtype=np.float64)
    y = np.asarray(y)

    fig, ax = plt.subplots(figsize=(7, 6))
    for g in np.unique(y):
        mask = y == g
        ax.scatter(Z[mask, 0], Z[mask, 1], label=str(g), s=18)

    ax.set_xlabel("LD1")
    ax.set_ylabel("LD2")
    ax.set_title(title)
    ax.grid(True, alpha=0.2)
    ax.legend()
    return _finish(fig, save_path, dpi, show)


def plot_confusion_matrix(table, title="Confusion matrix", save_path=None, dpi=200, show=False):
    """table: square DataFrame, rows actual, columns predicted."""
    disp = ConfusionMatrixDisplay(
        confusion_matrix=table.to_numpy(),
        display_labels=[str(c) for c in table.columns],
    )
    fig, ax = plt.subplots(figsize=(5, 4))
    disp.plot(ax=ax, values_format="d", colorbar=False)
    ax.set_title(title)
    ax.set_xlabel("Predicted group")
    ax.set_ylabel("Actual group")
    return _finish(fig, save_path, dpi, show)
