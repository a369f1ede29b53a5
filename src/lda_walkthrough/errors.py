class LDAWalkthroughError(Exception):
    """Base class for errors raised by lda_walkthrough."""


class ConstantVariableError(LDAWalkthroughError, ValueError):
    """
    Raised when a measurement has zero variance inside at least one group.

    The pooled within-group covariance is singular in that case, so no
    discriminant can be computed.
    """

    def __init__(self, columns, groups):
        self.columns = list(columns)
        self.groups = list(groups)
        names = ", ".join(str(c) for c in self.columns)
        verb = "appears" if len(self.columns) == 1 else "appear"
        super().__init__(
            f"variable(s) {names} {verb} to be constant within groups "
            f"({', '.join(str(g) for g in self.groups)})"
        )
