import numpy as np
import pytest

from lda_walkthrough.data import constant_column, make_groups, split_xy
from lda_walkthrough.errors import ConstantVariableError
from lda_walkthrough.lda import check_constant_variables, fit_lda
from lda_walkthrough.projection import project, unit_vector
from lda_walkthrough.rLDA import rLDA


@pytest.fixture
def two_groups():
    df = make_groups(n_per_group=60, means=[[0, 0], [2, 1]], seed=5)
    return split_xy(df)


@pytest.fixture
def three_groups():
    df = make_groups(n_per_group=40, means=[[0, 0, 0], [3, 0, 0], [0, 3, 1]], seed=6)
    return split_xy(df)


def test_fit_lda_contract(three_groups):
    X, y, columns = three_groups
    fit = fit_lda(X, y, columns=columns)

    assert fit.scalings.shape == (3, 2)
    assert fit.n_axes == 2
    assert list(fit.classes) == ["A", "B", "C"]
    np.testing.assert_allclose(fit.priors, [1 / 3, 1 / 3, 1 / 3])
    assert fit.means.shape == (3, 3)

    post = fit.predict_proba(X)
    assert post.shape == (120, 3)
    np.testing.assert_allclose(post.sum(axis=1), 1.0)
    assert set(fit.predict(X)) <= {"A", "B", "C"}
    assert fit.proportion_of_trace().sum() == pytest.approx(1.0)


def test_transform_is_centering_without_rescaling(three_groups):
    X, y, columns = three_groups
    fit = fit_lda(X, y, columns=columns)

    np.testing.assert_allclose(fit.center, fit.priors @ fit.means)
    manual = np.column_stack([project(X, fit.scalings[:, k], center=fit.center) for k in range(2)])
    np.testing.assert_allclose(fit.transform(X), manual)
    np.testing.assert_allclose(fit.transform(X), fit.model.transform(X), atol=1e-10)


def test_constant_measurement_fails(two_groups):
    X, y, columns = two_groups
    X = X.copy()
    X[:, 1] = 4.0

    with pytest.raises(ConstantVariableError) as excinfo:
        fit_lda(X, y, columns=columns)

    err = excinfo.value
    assert isinstance(err, ValueError)
    assert err.columns == ["x2"]
    assert "constant within groups" in str(err)


def test_constant_inside_each_group_fails():
    """Different constants per group still leave zero within-group variance."""
    df = make_groups(n_per_group=20, seed=0)
    df["x2"] = np.where(df["group"] == "A", 0.0, 1.0)
    X, y, columns = split_xy(df)

    with pytest.raises(ConstantVariableError):
        fit_lda(X, y, columns=columns)


def test_constant_in_one_group_only_is_fine():
    df = make_groups(n_per_group=20, seed=0)
    df.loc[df["group"] == "A", "x2"] = 0.0
    X, y, columns = split_xy(df)

    check_constant_variables(X, y, columns)
    fit = fit_lda(X, y, columns=columns)
    assert fit.n_axes == 1


def test_fit_needs_two_groups():
    X = np.random.default_rng(0).normal(size=(10, 2))
    with pytest.raises(ValueError):
        fit_lda(X, np.array(["A"] * 10))


def test_priors_can_be_given(two_groups):
    X, y, columns = two_groups
    fit = fit_lda(X, y, columns=columns, priors=[0.9, 0.1])
    np.testing.assert_allclose(fit.priors, [0.9, 0.1])
    # a strong prior on A pulls predictions towards A
    assert np.sum(fit.predict(X) == "A") > np.sum(fit_lda(X, y).predict(X) == "A")


def test_summary_mentions_every_part(two_groups):
    X, y, columns = two_groups
    text = fit_lda(X, y, columns=columns).summary()
    assert "Prior probabilities" in text
    assert "Group means" in text
    assert "LD1" in text and "x2" in text


def test_rlda_matches_library_direction(two_groups):
    X, y, columns = two_groups
    fit = fit_lda(X, y, columns=columns)
    clf = rLDA().fit(X, y, columns=columns)

    cos = clf.direction @ unit_vector(fit.direction(0))
    assert abs(cos) == pytest.approx(1.0, abs=1e-8)
    assert np.mean(clf.predict(X) == fit.predict(X)) > 0.98


def test_rlda_any_labels():
    df = make_groups(n_per_group=30, means=[[0, 0], [3, 3]], groups=["setosa", "virginica"], seed=2)
    X, y, _ = split_xy(df)
    clf = rLDA().fit(X, y)
    assert list(clf.classes) == ["setosa", "virginica"]
    assert np.mean(clf.predict(X) == y) > 0.9


def test_rlda_constant_measurement(two_groups):
    X, y, columns = two_groups
    X = X.copy()
    X[:, 0] = 0.0

    with pytest.raises(ConstantVariableError):
        rLDA(lam=0.0).fit(X, y, columns=columns)

    # shrinkage keeps the covariance invertible
    clf = rLDA(lam=0.1).fit(X, y, columns=columns)
    assert clf.w[0] == pytest.approx(0.0)


def test_rlda_not_fitted():
    with pytest.raises(RuntimeError):
        rLDA().predict(np.zeros((2, 2)))


def test_rlda_rejects_three_groups(three_groups):
    X, y, _ = three_groups
    with pytest.raises(ValueError):
        rLDA().fit(X, y)


def test_zero_scale_measurement_fails_as_constant():
    df = make_groups(n_per_group=20, means=[[0, 0.1], [2, 0.1]], scales=[1.0, 0.0], seed=0)
    X, y, columns = split_xy(df)

    with pytest.raises(ConstantVariableError) as excinfo:
        fit_lda(X, y, columns=columns)
    assert excinfo.value.columns == ["x2"]


def test_rlda_zero_direction():
    clf = rLDA()
    clf.w = np.zeros(3)
    np.testing.assert_array_equal(clf.direction, np.zeros(3))
