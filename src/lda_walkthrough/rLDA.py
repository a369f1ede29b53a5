import numpy as np

from .lda import check_constant_variables
from .projection import unit_vector


class rLDA:
    """
    Two-group LDA derived by hand, with optional covariance shrinkage:
        S_reg = (1-lam)*S + lam*I

    Labels can be any two values; after fit() `classes` holds them sorted,
    `w` is the discriminant direction and `b` the offset, so that
        score = X @ w + b > 0  ->  classes[1]
    """
    def __init__(self, lam=0.0, priors=None):
        self.lam = lam
        self.priors = priors
        self.w = None
        self.b = None
        self.classes = None
        self.means = None

    def fit(self, X, y, columns=None):
        """
        X: (N, D)
        y: (N,)
        """
        X = np.asarray(X, dtype=np.float64)
        y = np.asarray(y)
        classes = np.unique(y)
        if len(classes) != 2:
            raise ValueError(f"rLDA separates exactly two groups, got {len(classes)}")

        if self.lam == 0:
            check_constant_variables(X, y, columns)

        X0 = X[y == classes[0]]
        X1 = X[y == classes[1]]

        mu0 = X0.mean(axis=0)
        mu1 = X1.mean(axis=0)

        # pooled within-group covariance (unbiased, weighted by group size)
        n0, n1 = len(X0), len(X1)
        S0 = (X0 - mu0).T @ (X0 - mu0)
        S1 = (X1 - mu1).T @ (X1 - mu1)
        S = (S0 + S1) / (n0 + n1 - 2)

        D = S.shape[0]
        S_reg = (1.0 - self.lam) * S + self.lam * np.eye(D)

        invS = np.linalg.pinv(S_reg) if self.lam > 0 else np.linalg.inv(S_reg)
        self.w = invS @ (mu1 - mu0)

        if self.priors is None:
            p0, p1 = n0 / (n0 + n1), n1 / (n0 + n1)
        else:
            p0, p1 = self.priors

        # midpoint of the means, moved towards the smaller group
        self.b = -0.5 * (mu0 + mu1) @ self.w + np.log(p1 / p0)
        self.classes = classes
        self.means = np.vstack([mu0, mu1])
        return self

    def decision_function(self, X):
        if self.w is None:
            raise RuntimeError("rLDA not fitted. Call fit() before predict().")
        return np.asarray(X, dtype=np.float64) @ self.w + self.b

    def predict(self, X):
        scores = self.decision_function(X)
        return np.where(scores > 0, self.classes[1], self.classes[0])

    @property
    def direction(self):
        """Unit-length discriminant direction (zero if w is zero)."""
        return unit_vector(self.w)


if __name__ == "__main__":
    """
    LDA = Linear Discriminant Analysis

    The d-dimensional feature vector x is projected onto a scalar such that the
    projected means of the two groups are far apart while the spread of the
    projected data inside each group is small.

    The mapping maximizes the criterion function:
        J(w) = (w^T SB w) / (w^T SW w)
    with SB the between-group and SW the within-group covariance.
    The maximizer is w = SW^{-1} (mu1 - mu0).

    Steps:
    1. estimate group means
    2. estimate pooled within-group covariance
    3. (optional) shrink covariance towards the identity
    4. compute weight vector w
    5. classify by thresholding the linear score; the threshold sits at the
       midpoint of the means, shifted by log(p1/p0) for unequal priors

    If a measurement is constant inside the groups, SW is singular and step 4
    has no solution unless shrinkage is used.
    """
    pass
