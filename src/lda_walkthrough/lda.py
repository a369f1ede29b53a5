import logging
import warnings

import numpy as np
from sklearn.discriminant_analysis import LinearDiscriminantAnalysis

from .errors import ConstantVariableError
from .projection import project

logger = logging.getLogger(__name__)

# within-group standard deviation below which a measurement counts as constant
CONSTANT_TOL = 1e-4


def check_constant_variables(X, y, columns=None, tol=CONSTANT_TOL):
    """
    Raise ConstantVariableError if a measurement does not vary inside the groups.

    X: (N, M)
    y: (N,)
    The pooled within-group standard deviation of every column is compared
    with `tol`; such a column makes the within-group covariance singular.
    """
    X = np.asarray(X, dtype=np.float64)
    y = np.asarray(y)
    classes = np.unique(y)
    columns = list(columns) if columns is not None else [f"x{i + 1}" for i in range(X.shape[1])]

    # subtract each group's mean, then look at what is left
    resid = X.copy()
    for g in classes:
        mask = y == g
        resid[mask] -= X[mask].mean(axis=0)
    dof = max(len(X) - 1, 1)
    within_sd = np.sqrt((resid ** 2).sum(axis=0) / dof)

    bad = np.where(within_sd < tol)[0]
    if len(bad) > 0:
        names = [columns[i] for i in bad]
        logger.debug("constant within groups: %s (sd=%s)", names, within_sd[bad])
        raise ConstantVariableError(names, classes.tolist())


class LDAFit:
    """
    Result of fitting the library LDA routine.

    scalings: (M, K) one column per discriminant axis
    priors:   (G,) prior probability of each group
    means:    (G, M) group means of every measurement
    classes:  (G,) group labels in the order used above
    center:   (M,) prior-weighted mean of the group means; observations are
              shifted by it (not rescaled) before being projected
    """

    def __init__(self, model: LinearDiscriminantAnalysis, columns):
        self.model = model
        self.columns = list(columns)
        self.classes = model.classes_
        self.priors = model.priors_
        self.means = model.means_
        n_axes = min(len(self.columns), len(self.classes) - 1)
        self.scalings = model.scalings_[:, :n_axes]
        self.center = self.priors @ self.means

    @property
    def n_axes(self) -> int:
        return self.scalings.shape[1]

    def direction(self, axis: int = 0):
        return self.scalings[:, axis]

    def transform(self, X):
        """
        X: (N, M)
        Return: (N, K) projections onto every discriminant axis
        """
        X = np.asarray(X, dtype=np.float64)
        return np.column_stack([
            project(X, self.scalings[:, k], center=self.center) for k in range(self.n_axes)
        ])

    def predict(self, X):
        return self.model.predict(np.asarray(X, dtype=np.float64))

    def predict_proba(self, X):
        """(N, G) posterior probability of each group, columns in `classes` order"""
        return self.model.predict_proba(np.asarray(X, dtype=np.float64))

    def proportion_of_trace(self):
        """Share of the between-group variance carried by each axis."""
        ratio = self.model.explained_variance_ratio_
        return ratio[:self.n_axes]

    def summary(self) -> str:
        lines = ["Prior probabilities of groups:"]
        lines += [f"  {g}: {p:.4f}" for g, p in zip(self.classes, self.priors)]
        lines.append("")
        lines.append("Group means:")
        lines.append("  " + "  ".join(f"{c:>10}" for c in ["group"] + self.columns))
        for g, mu in zip(self.classes, self.means):
            lines.append("  " + "  ".join([f"{str(g):>10}"] + [f"{v:10.4f}" for v in mu]))
        lines.append("")
        lines.append("Coefficients of linear discriminants:")
        lines.append("  " + "  ".join(f"{c:>10}" for c in [""] + [f"LD{k + 1}" for k in range(self.n_axes)]))
        for name, row in zip(self.columns, self.scalings):
            lines.append("  " + "  ".join([f"{name:>10}"] + [f"{v:10.4f}" for v in row]))
        return "\n".join(lines)


def fit_lda(X, y, columns=None, priors=None) -> LDAFit:
    """
    Fit the library LDA routine on labelled observations.

    X: (N, M)
    y: (N,)
    priors: optional (G,) group priors in sorted label order; default = group proportions

    Raises ConstantVariableError when a measurement is constant within groups,
    instead of letting the routine return a misleading discriminant.
    """
    X = np.asarray(X, dtype=np.float64)
    y = np.asarray(y)
    if X.ndim != 2:
        raise ValueError(f"X must be 2-D (N, M), got shape {X.shape}")
    if len(np.unique(y)) < 2:
        raise ValueError("LDA needs at least two groups")
    columns = list(columns) if columns is not None else [f"x{i + 1}" for i in range(X.shape[1])]

    check_constant_variables(X, y, columns)

    model = LinearDiscriminantAnalysis(solver="svd", priors=priors)
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", message="Variables are collinear")
        model.fit(X, y)

    fit = LDAFit(model, columns)
    logger.debug("fitted LDA: %d groups, %d axes", len(fit.classes), fit.n_axes)
    return fit
