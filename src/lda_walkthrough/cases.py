from dataclasses import dataclass, field
from pathlib import Path
import logging

import numpy as np
import pandas as pd

from .config import WalkthroughConfig
from .data import constant_column, encode_categorical, make_groups, split_xy, with_categorical
from .errors import ConstantVariableError
from .evaluate import accuracy, confusion_table, misclassified, save_results
from .lda import LDAFit, fit_lda
from .projection import group_mean_projections, project, separation, unit_vector
from .rLDA import rLDA
from . import visualize

logger = logging.getLogger(__name__)


@dataclass
class CaseResult:
    name: str
    description: str
    data: pd.DataFrame
    columns: list
    manual_direction: np.ndarray
    manual_projection: np.ndarray
    fit: LDAFit = None
    predictions: np.ndarray = None
    posteriors: np.ndarray = None
    confusion: pd.DataFrame = None
    accuracy: float = float("nan")
    error: str = None
    notes: dict = field(default_factory=dict)
    figures: list = field(default_factory=list)
    report: Path = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def _manual(X, direction):
    """Unit manual direction and the centered projection along it."""
    w = unit_vector(direction)
    return w, project(X, w, center=X.mean(axis=0))


def _fit_and_predict(result: CaseResult, X, y, priors=None):
    fit = fit_lda(X, y, columns=result.columns, priors=priors)
    result.fit = fit
    result.predictions = fit.predict(X)
    result.posteriors = fit.predict_proba(X)
    result.confusion = confusion_table(y, result.predictions, labels=fit.classes.tolist())
    result.accuracy = accuracy(y, result.predictions)
    return fit


def _compare_with_manual(result: CaseResult, X, y):
    """Cosine between the hand-derived rLDA direction and LD1, and manual separation."""
    clf = rLDA().fit(X, y, columns=result.columns)
    ld1 = unit_vector(result.fit.direction(0))
    result.notes["rLDA direction"] = np.round(clf.direction, 4).tolist()
    result.notes["|cos(rLDA, LD1)|"] = round(float(abs(clf.direction @ ld1)), 6)
    result.notes["rLDA agreement with library predictions"] = accuracy(result.predictions, clf.predict(X))
    result.notes["separation along manual direction"] = round(
        separation(X, y, result.manual_direction), 4
    )
    result.notes["separation along LD1"] = round(separation(X, y, ld1), 4)
    return clf


def case_basic(config: WalkthroughConfig) -> CaseResult:
    s = config.shift
    df = make_groups(n_per_group=config.n_per_group, means=[[0.0, 0.0], [s, s]], seed=config.seed)
    X, y, columns = split_xy(df)

    # both measurements move by the same amount -> look along the diagonal
    w, z = _manual(X, [1.0, 1.0])
    result = CaseResult("basic", CASES["basic"]["desc"], df, columns, w, z)

    _fit_and_predict(result, X, y)
    _compare_with_manual(result, X, y)
    return result


def case_rescaled(config: WalkthroughConfig) -> CaseResult:
    s, k = config.shift, config.rescale_factor
    df = make_groups(
        n_per_group=config.n_per_group,
        means=[[0.0, 0.0], [s, s * k]],
        scales=[1.0, k],
        standardize_columns=False,
        seed=config.seed,
    )
    X, y, columns = split_xy(df)

    # the diagonal is no longer the natural axis once x2 is stretched
    w, z = _manual(X, [1.0, 1.0])
    result = CaseResult("rescaled", CASES["rescaled"]["desc"], df, columns, w, z)

    fit = _fit_and_predict(result, X, y)
    _compare_with_manual(result, X, y)

    # same draws, undo the stretch: the axis changes, the predictions do not
    X_std = X.copy()
    X_std[:, 1] = X_std[:, 1] / k
    fit_std = fit_lda(X_std, y, columns=columns)
    result.notes["LD1 coefficients (rescaled)"] = np.round(fit.direction(0), 4).tolist()
    result.notes["LD1 coefficients (unscaled)"] = np.round(fit_std.direction(0), 4).tolist()
    result.notes["same predictions as unscaled fit"] = bool(
        np.array_equal(result.predictions, fit_std.predict(X_std))
    )
    return result


def case_offset_means(config: WalkthroughConfig) -> CaseResult:
    s = config.shift
    df = make_groups(n_per_group=config.n_per_group, means=[[0.0, 0.0], [s, 0.0]], seed=config.seed)
    X, y, columns = split_xy(df)

    # only x1 differs between the groups
    w, z = _manual(X, [1.0, 0.0])
    result = CaseResult("offset_means", CASES["offset_means"]["desc"], df, columns, w, z)

    _fit_and_predict(result, X, y)
    _compare_with_manual(result, X, y)
    return result


def case_constant(config: WalkthroughConfig) -> CaseResult:
    s = config.shift
    df = make_groups(n_per_group=config.n_per_group, means=[[0.0, 0.0], [s, s]], seed=config.seed)
    df = constant_column(df, "x2", value=0.0)
    X, y, columns = split_xy(df)

    # a manual axis along x1 still works
    w, z = _manual(X, [1.0, 0.0])
    result = CaseResult("constant", CASES["constant"]["desc"], df, columns, w, z)
    result.notes["separation along manual direction"] = round(separation(X, y, w), 4)

    try:
        _fit_and_predict(result, X, y)
    except ConstantVariableError as e:
        result.error = str(e)
        logger.warning("constant case: %s", e)

    # shrinkage makes the within-group covariance invertible again
    clf = rLDA(lam=0.1).fit(X, y, columns=columns)
    result.notes["rLDA(lam=0.1) direction"] = np.round(clf.direction, 4).tolist()
    result.notes["rLDA(lam=0.1) accuracy"] = accuracy(y, clf.predict(X))
    return result


def case_offset_boundary(config: WalkthroughConfig) -> CaseResult:
    s = config.shift
    df = make_groups(n_per_group=list(config.boundary_sizes), means=[[0.0, 0.0], [s, s]], seed=config.seed)
    X, y, columns = split_xy(df)

    w, z = _manual(X, [1.0, 1.0])
    result = CaseResult("offset_boundary", CASES["offset_boundary"]["desc"], df, columns, w, z)

    fit = _fit_and_predict(result, X, y)
    _compare_with_manual(result, X, y)

    # equal posteriors on LD1: midpoint moved by log(p1/p0) / (m1 - m0)
    ld = fit.transform(X)[:, 0]
    means = group_mean_projections(X, y, fit.direction(0), center=fit.center)
    m0, m1 = (means[g] for g in fit.classes)
    p0, p1 = fit.priors
    midpoint = 0.5 * (m0 + m1)
    boundary = midpoint - np.log(p1 / p0) / (m1 - m0)
    result.notes["priors"] = np.round(fit.priors, 4).tolist()
    result.notes["LD1 midpoint of group means"] = round(float(midpoint), 4)
    result.notes["LD1 decision boundary"] = round(float(boundary), 4)

    # boundary-adjacent rows that end up on the wrong side
    wrong = misclassified(df, result.predictions, result.posteriors, fit.classes)
    wrong.insert(len(columns), "LD1", ld[wrong.index.to_numpy()])
    result.notes["misclassified"] = wrong.round(4)
    result.notes["misclassified count"] = int(len(wrong))
    return result


def case_categorical(config: WalkthroughConfig) -> CaseResult:
    s = config.shift
    df = make_groups(n_per_group=config.n_per_group, means=[[0.0, 0.0], [s, s]], seed=config.seed)
    df = with_categorical(
        df,
        {
            "A": {"red": 0.6, "green": 0.3, "blue": 0.1},
            "B": {"red": 0.1, "green": 0.3, "blue": 0.6},
        },
        column="colour",
        seed=config.seed + 1,
    )
    encoded = encode_categorical(df, ["colour"])
    X, y, columns = split_xy(encoded)

    # manual axis ignores the colour indicators
    w, z = _manual(X, [1.0, 1.0] + [0.0] * (len(columns) - 2))
    result = CaseResult("categorical", CASES["categorical"]["desc"], encoded, columns, w, z)
    result.notes["colour counts"] = pd.crosstab(df["group"], df["colour"])

    _fit_and_predict(result, X, y)
    _compare_with_manual(result, X, y)
    return result


def case_multi_group(config: WalkthroughConfig) -> CaseResult:
    s = config.shift
    df = make_groups(
        n_per_group=config.n_per_group,
        means=[[0.0, 0.0], [s, 0.0], [0.0, s]],
        seed=config.seed,
    )
    X, y, columns = split_xy(df)

    # the diagonal separates A from B and C, not B from C
    w, z = _manual(X, [1.0, 1.0])
    result = CaseResult("multi_group", CASES["multi_group"]["desc"], df, columns, w, z)
    result.notes["group means along manual direction"] = {
        g: round(v, 4) for g, v in group_mean_projections(X, y, w, center=X.mean(axis=0)).items()
    }

    fit = _fit_and_predict(result, X, y)
    result.notes["proportion of trace"] = np.round(fit.proportion_of_trace(), 4).tolist()
    return result


CASES = {
    "basic":           {"desc": "Two groups shifted in both measurements", "run": case_basic},
    "rescaled":        {"desc": "Second measurement rescaled and not standardized", "run": case_rescaled},
    "offset_means":    {"desc": "Groups differ only in the first measurement", "run": case_offset_means},
    "constant":        {"desc": "One measurement constant (degenerate)", "run": case_constant},
    "offset_boundary": {"desc": "Unequal group sizes shift the decision boundary", "run": case_offset_boundary},
    "categorical":     {"desc": "Numeric measurements plus a categorical predictor", "run": case_categorical},
    "multi_group":     {"desc": "Three groups, two discriminant axes", "run": case_multi_group},
}


def write_outputs(result: CaseResult, config: WalkthroughConfig) -> CaseResult:
    """Figures and a text report under reports/<case>/."""
    out_dir = config.case_dir(result.name)
    X, y, _ = split_xy(result.data)

    if config.save_plots:
        result.figures.append(visualize.plot_projection_histogram(
            result.manual_projection, y,
            title=f"{result.name}: manual projection",
            save_path=out_dir / "manual_projection_hist.png", dpi=config.dpi,
        ))
        result.figures.append(visualize.plot_scatter_with_direction(
            X, y, result.manual_direction, columns=result.columns[:2],
            title=f"{result.name}: manual direction",
            save_path=out_dir / "manual_direction_scatter.png", dpi=config.dpi,
        ))
        if result.fit is not None:
            Z = result.fit.transform(X)
            if result.fit.n_axes >= 2:
                result.figures.append(visualize.plot_discriminant_scatter(
                    Z, y, title=f"{result.name}: LD1 vs LD2",
                    save_path=out_dir / "ld1_ld2_scatter.png", dpi=config.dpi,
                ))
            else:
                result.figures.append(visualize.plot_projection_histogram(
                    Z[:, 0], y, title=f"{result.name}: LD1 (library fit)",
                    save_path=out_dir / "ld1_hist.png", dpi=config.dpi,
                ))
            result.figures.append(visualize.plot_confusion_matrix(
                result.confusion, title=f"{result.name}: acc={result.accuracy:.3f}",
                save_path=out_dir / "confusion_matrix.png", dpi=config.dpi,
            ))

    sections = {
        "Description": result.description,
        "Manual direction": np.round(result.manual_direction, 4).tolist(),
    }
    if result.failed:
        sections["Fit error"] = result.error
    else:
        sections["Library fit"] = result.fit.summary()
        sections["Confusion table"] = result.confusion
        sections["Accuracy"] = f"{result.accuracy:.4f}"
    for key, value in result.notes.items():
        sections[key] = value

    result.report = save_results(out_dir / "results.txt", f"Case: {result.name}", sections)
    return result


def run_case(name: str, config: WalkthroughConfig = None, write: bool = True) -> CaseResult:
    if name not in CASES:
        raise KeyError(f"unknown case {name!r}, choose from: {', '.join(CASES)}")
    config = config or WalkthroughConfig()

    logger.info("Running case %s (%s)", name, CASES[name]["desc"])
    result = CASES[name]["run"](config)
    if result.failed:
        logger.info("[%s] fit failed: %s", name, result.error)
    else:
        logger.info("[%s] accuracy = %.3f", name, result.accuracy)

    if write:
        write_outputs(result, config)
    return result


def run_all(config: WalkthroughConfig = None, write: bool = True) -> dict:
    config = config or WalkthroughConfig()
    return {name: run_case(name, config, write=write) for name in CASES}
