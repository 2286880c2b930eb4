"""
Helpers shared by the filter implementations
"""
import logging

import numpy as np
import scipy.linalg

from liekf.errors import ConfigurationError, InnovationCovarianceError
from liekf.state import Pose
from liekf.util import check_covariance, init_params, symmetrize

_LOG = logging.getLogger(__name__)

default_params = {
    "psd_tol": 1e-9,  # relative tolerance of the covariance PSD check
    "max_condition": 1e12,  # innovation covariance condition number limit
}


def init_filter_params(defaults, params):
    p = init_params(defaults, params)
    if not p["psd_tol"] >= 0:
        raise ConfigurationError("psd_tol must be non-negative")
    if not p["max_condition"] > 1:
        raise ConfigurationError("max_condition must be greater than 1")
    return p


def check_initial(x0, P0, n):
    if not isinstance(x0, Pose):
        raise ConfigurationError("initial state must be a Pose, got {:s}".format(type(x0).__name__))
    return x0, check_covariance(P0, n, "initial covariance")


def check_initialized(x):
    if x is None:
        raise RuntimeError("filter used before initialize")


def check_system_model(model, n):
    dim = getattr(model, "dim", None)
    if dim != n:
        raise ConfigurationError(
            "system model dimension {!r} does not match state dimension {:d}".format(dim, n)
        )


def check_measurement(model, y, n):
    """
    Checks the model against the state dimension and returns y as a
    flat array of the model dimension
    """
    state_dim = getattr(model, "state_dim", None)
    if state_dim != n:
        raise ConfigurationError(
            "measurement model state dimension {!r} does not match {:d}".format(state_dim, n)
        )
    y = np.array(y, dtype=float).reshape(-1)
    if y.shape != (model.dim,) or not np.all(np.isfinite(y)):
        raise ConfigurationError(
            "measurement must be {:d} finite values, got {:s}".format(model.dim, str(y))
        )
    return y


def gain(Pxy, S, max_condition):
    """
    Kalman gain K = Pxy S^-1 for a symmetric innovation covariance S

    @raises InnovationCovarianceError: S is singular or ill-conditioned
    """
    S = symmetrize(S)
    if not np.all(np.isfinite(S)) or not np.linalg.cond(S) <= max_condition:
        _LOG.debug("innovation covariance rejected:\n%s", S)
        raise InnovationCovarianceError()
    try:
        c = scipy.linalg.cho_factor(S, lower=True)
    except scipy.linalg.LinAlgError:
        _LOG.debug("innovation covariance not positive definite:\n%s", S)
        raise InnovationCovarianceError() from None
    return scipy.linalg.cho_solve(c, Pxy.T).T


def kalman_gain(P, H, R, max_condition):
    """
    @return:
        K: Kalman gain, P H^T S^-1
        S: innovation covariance, H P H^T + R
    """
    S = symmetrize(H @ P @ H.T + R)
    return gain(P @ H.T, S, max_condition), S


def joseph(P, K, H, R):
    """
    Joseph form covariance correction, symmetric PSD under roundoff
    """
    I_KH = np.eye(P.shape[0]) - K @ H
    return I_KH @ P @ I_KH.T + K @ R @ K.T
