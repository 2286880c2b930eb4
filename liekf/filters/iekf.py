"""
Invariant extended Kalman filter on SE(3).

The error is right invariant, X = Exp(xi) * X_hat, so the covariance is
carried in the left tangent space at the estimate, and covariance()
reports it there. It is related to the right tangent covariance of the
other filters by the adjoint, P_l = Ad(X) P_r Ad(X)^T. initialize takes
P0 in the right tangent space, like the other filters, and maps it.

For a model written with right perturbations, F_r, G_r, H_r:

    F = Ad(X1) F_r Ad(X)^-1
    G = Ad(X1) G_r
    H = H_r Ad(X)^-1

For the constant twist motion model F is the identity, independent of
the estimate, which is what makes the filter consistent.
"""
import logging

from liekf.state import Pose
from liekf.util import checked_covariance
from . import common
from .base import FilterType, KalmanFilter

_LOG = logging.getLogger(__name__)

default_params = dict(common.default_params)


def invariant_jacobians(system_model, x: Pose, u):
    """
    Left tangent jacobians of the motion model at x.

    @return:
        F: error transition
        G: noise jacobian
    """
    x1 = system_model.predict(x, u)
    Ad1 = x1.adjoint()
    F = Ad1 @ system_model.jacobian_state(x, u) @ x.inverse().adjoint()
    G = Ad1 @ system_model.jacobian_noise(x, u)
    return F, G


class InvariantExtendedKalmanFilter(KalmanFilter):

    kind = FilterType.IEKF
    default_params = default_params

    def __init__(self, x0: Pose = None, P0=None, **params):
        self.params = common.init_filter_params(self.default_params, params)
        self._x = None
        self._P = None
        if x0 is not None or P0 is not None:
            self.initialize(x0, P0)

    def initialize(self, x0, P0):
        x0, P0 = common.check_initial(x0, P0, self.dim)
        Ad = x0.adjoint()
        self._P = checked_covariance(Ad @ P0 @ Ad.T, self.params["psd_tol"])
        self._x = x0

    def propagate(self, system_model, u):
        common.check_initialized(self._x)
        common.check_system_model(system_model, self.dim)
        x, P = self._x, self._P
        F, G = invariant_jacobians(system_model, x, u)
        x1 = system_model.predict(x, u)
        P1 = checked_covariance(
            F @ P @ F.T + G @ system_model.noise_covariance() @ G.T,
            self.params["psd_tol"],
        )
        self._x, self._P = x1, P1

    def update(self, measurement_model, y):
        common.check_initialized(self._x)
        y = common.check_measurement(measurement_model, y, self.dim)
        x, P = self._x, self._P
        H = measurement_model.jacobian_state(x) @ x.inverse().adjoint()
        R = measurement_model.noise_covariance()
        K, _ = common.kalman_gain(P, H, R, self.params["max_condition"])
        x1 = x.lplus(K @ (y - measurement_model.predict(x)))
        P1 = checked_covariance(common.joseph(P, K, H, R), self.params["psd_tol"])
        _LOG.debug("iekf update, trace %g -> %g", P.trace(), P1.trace())
        self._x, self._P = x1, P1

    def state(self):
        common.check_initialized(self._x)
        return self._x

    def covariance(self):
        """
        Covariance of the right invariant error, left tangent space
        """
        common.check_initialized(self._x)
        return self._P.copy()


def right_covariance(x: Pose, P):
    """
    Maps a left tangent covariance at x to the right tangent space
    """
    Ad_inv = x.inverse().adjoint()
    return Ad_inv @ P @ Ad_inv.T
