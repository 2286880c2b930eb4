"""
Exceptions raised by the filter bank.

ConfigurationError: a caller precondition is violated (bad covariance,
    dimension mismatch, bad parameter), fatal for that configuration.
NumericalError: a single propagate/update call could not be carried out,
    the filter state is left as it was before the call.
"""


class LieKFError(Exception):
    pass


class ConfigurationError(LieKFError, ValueError):
    pass


class NumericalError(LieKFError, ArithmeticError):
    pass


class InnovationCovarianceError(NumericalError):
    def __init__(self, msg="innovation covariance not invertible"):
        super().__init__(msg)


class FactorizationError(NumericalError):
    def __init__(self, msg="factorization encountered non-positive pivot"):
        super().__init__(msg)


class ConvergenceError(NumericalError):
    def __init__(self, msg="mean iteration did not converge"):
        super().__init__(msg)


class CovarianceError(NumericalError):
    def __init__(self, msg="covariance is not symmetric positive semi-definite"):
        super().__init__(msg)
