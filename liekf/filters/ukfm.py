"""
Unscented Kalman filter on manifolds, SE(3).

Sigma points are drawn in the right tangent space of the estimate and
retracted onto the group, X_i = X * Exp(delta_i). After propagation the
mean is recovered by the fixed point iteration

    d = sum_i Wm_i Log(X_bar^-1 X_i)
    X_bar <- X_bar * Exp(d)

until |d| < mean_tol. Scaled (Merwe) weights are used.
"""
import logging

import numpy as np

from liekf.errors import ConfigurationError, ConvergenceError
from liekf.state import Pose
from liekf.util import checked_covariance, psd_factor, symmetrize
from . import common
from .base import FilterType, KalmanFilter

_LOG = logging.getLogger(__name__)

default_params = dict(common.default_params)
default_params.update(
    {
        "alpha": 1e-3,  # spread of the sigma points
        "beta": 2.0,  # prior knowledge of the distribution, 2 for gaussian
        "kappa": 0.0,  # secondary scaling
        "mean_tol": 1e-9,  # tangent norm at which the mean iteration stops
        "mean_max_iter": 20,
    }
)


def sigma_weights(n, alpha, beta, kappa):
    """
    @return:
        lam: scaling, alpha^2 (n + kappa) - n
        Wm: mean weights, 2n + 1
        Wc: covariance weights, 2n + 1
    """
    lam = alpha ** 2 * (n + kappa) - n
    if not n + lam > 0:
        raise ConfigurationError("n + lambda must be positive, got {:g}".format(n + lam))
    Wm = np.full(2 * n + 1, 0.5 / (n + lam))
    Wc = np.copy(Wm)
    Wm[0] = lam / (n + lam)
    Wc[0] = lam / (n + lam) + (1 - alpha ** 2 + beta)
    return lam, Wm, Wc


def sigma_points(x: Pose, P, lam, tol=1e-9):
    """
    @return:
        points: [X, X * Exp(+delta_i), X * Exp(-delta_i)]
        deltas: tangent offsets of the points, 2n + 1 x n, first row zero
    """
    n = P.shape[0]
    D = np.sqrt(n + lam) * psd_factor(P, tol)
    deltas = np.vstack([np.zeros(n), D.T, -D.T])
    points = [x] + [x.plus(d) for d in deltas[1:]]
    return points, deltas


def manifold_mean(points, Wm, x_ref: Pose, tol, max_iter):
    """
    Weighted mean of poses, fixed point iteration started at x_ref

    @return:
        x_bar: the mean
        e: Log(x_bar^-1 X_i) for every point, rows
    @raises ConvergenceError: |d| did not fall below tol in max_iter
    """
    # iterate in the frame of x_ref, the weights are large and would
    # amplify the roundoff of large translations
    local = [x_ref.between(p) for p in points]
    m = Pose.identity()
    for i in range(max_iter):
        e = np.array([p.minus(m) for p in local])
        # sum(Wm) = 1, offsets from e[0] keep the large center weight
        # from amplifying its roundoff
        d = e[0] + Wm[1:] @ (e[1:] - e[0])
        m = m.plus(d)
        if np.linalg.norm(d) < tol:
            return x_ref * m, np.array([p.minus(m) for p in local])
    _LOG.debug("mean iteration stopped at |d| = %g after %d steps", np.linalg.norm(d), max_iter)
    raise ConvergenceError()


class UnscentedKalmanFilterOnManifolds(KalmanFilter):

    kind = FilterType.UKFM
    default_params = default_params

    def __init__(self, x0: Pose = None, P0=None, **params):
        self.params = common.init_filter_params(self.default_params, params)
        p = self.params
        if not p["mean_tol"] >= 0 or not int(p["mean_max_iter"]) >= 1:
            raise ConfigurationError("mean_tol must be >= 0 and mean_max_iter >= 1")
        self.lam, self.Wm, self.Wc = sigma_weights(self.dim, p["alpha"], p["beta"], p["kappa"])
        self._x = None
        self._P = None
        if x0 is not None or P0 is not None:
            self.initialize(x0, P0)

    def initialize(self, x0, P0):
        self._x, self._P = common.check_initial(x0, P0, self.dim)

    def propagate(self, system_model, u):
        common.check_initialized(self._x)
        common.check_system_model(system_model, self.dim)
        x, P = self._x, self._P
        tol = self.params["psd_tol"]
        points, _ = sigma_points(x, P, self.lam, tol)
        points = [system_model.predict(p, u) for p in points]
        x1, e = manifold_mean(
            points,
            self.Wm,
            points[0],
            self.params["mean_tol"],
            int(self.params["mean_max_iter"]),
        )
        G = system_model.jacobian_noise(x, u)
        P1 = (self.Wc[:, None] * e).T @ e + G @ system_model.noise_covariance() @ G.T
        P1 = checked_covariance(symmetrize(P1), tol)
        self._x, self._P = x1, P1

    def update(self, measurement_model, y):
        common.check_initialized(self._x)
        y = common.check_measurement(measurement_model, y, self.dim)
        x, P = self._x, self._P
        points, deltas = sigma_points(x, P, self.lam, self.params["psd_tol"])
        Y = np.array([measurement_model.predict(p) for p in points])
        y_bar = Y[0] + self.Wm[1:] @ (Y[1:] - Y[0])
        dY = Y - y_bar
        Pyy = (self.Wc[:, None] * dY).T @ dY + measurement_model.noise_covariance()
        Pxy = (self.Wc[1:, None] * deltas[1:]).T @ dY[1:]
        K = common.gain(Pxy, Pyy, self.params["max_condition"])
        x1 = x.plus(K @ (y - y_bar))
        P1 = checked_covariance(symmetrize(P - K @ symmetrize(Pyy) @ K.T), self.params["psd_tol"])
        _LOG.debug("ukfm update, trace %g -> %g", P.trace(), P1.trace())
        self._x, self._P = x1, P1

    def state(self):
        common.check_initialized(self._x)
        return self._x

    def covariance(self):
        common.check_initialized(self._x)
        return self._P.copy()
