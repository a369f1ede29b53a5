"""
Manual projection

An observation x (M measurements) is reduced to one number along a direction w:
    z = (x - c) . w

- projecting is linear: project(a + b) = project(a) + project(b) when no center is used
- subtracting a center c shifts every z by the same amount c . w, so the gap
  between two group means along w does not change
- w = 0 maps everything to 0: no discriminant at all
"""
import logging

import numpy as np

logger = logging.getLogger(__name__)


def _as_direction(direction, n_meas):
    w = np.asarray(direction, dtype=np.float64).ravel()
    if w.shape[0] != n_meas:
        raise ValueError(f"direction has {w.shape[0]} components but observations have {n_meas} measurements")
    return w


def unit_vector(v):
    """
    Scale v to length 1.
    The zero vector has no direction and is returned unchanged.
    """
    v = np.asarray(v, dtype=np.float64).ravel()
    norm = np.linalg.norm(v)
    if norm == 0:
        return v.copy()
    return v / norm


def project(X, direction, center=None):
    """
    Scalar discriminant value of each observation along `direction`.

    X: (N, M) observations, or a single (M,) observation
    direction: (M,)
    center: optional (M,) subtracted from every observation first
    Return: (N,) or a float for a single observation

    A zero direction gives all zeros.
    """
    X = np.asarray(X, dtype=np.float64)
    single = X.ndim == 1
    X2 = X.reshape(1, -1) if single else X

    w = _as_direction(direction, X2.shape[1])
    if not np.any(w):
        logger.debug("project: zero direction vector, every projection is 0")

    if center is not None:
        X2 = X2 - _as_direction(center, X2.shape[1])

    z = X2 @ w
    return float(z[0]) if single else z


def group_mean_projections(X, y, direction, center=None):
    """
    Mean projection value per group.
    Return: dict {group: mean projection}, groups in sorted order
    """
    z = project(X, direction, center=center)
    y = np.asarray(y)
    return {g: float(np.mean(z[y == g])) for g in np.unique(y)}


def separation(X, y, direction, center=None, groups=None):
    """
    Difference between the mean projections of two groups (second - first).

    groups: the two groups to compare, default the two sorted unique labels
    """
    means = group_mean_projections(X, y, direction, center=center)
    if groups is None:
        if len(means) != 2:
            raise ValueError(f"separation needs exactly two groups, found {len(means)}")
        groups = list(means.keys())
    g0, g1 = groups
    return means[g1] - means[g0]


def midpoint_threshold(X, y, direction, center=None):
    """Projection value halfway between two group means."""
    means = list(group_mean_projections(X, y, direction, center=center).values())
    if len(means) != 2:
        raise ValueError(f"threshold needs exactly two groups, found {len(means)}")
    return 0.5 * (means[0] + means[1])


def classify_by_threshold(z, threshold, low_group, high_group):
    """Assign `high_group` to projections above the threshold, `low_group` otherwise."""
    z = np.asarray(z, dtype=np.float64)
    return np.where(z > threshold, high_group, low_group).astype(object)

