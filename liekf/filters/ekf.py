"""
Extended Kalman filter on SE(3), error state in the right tangent space.

propagate:
    X <- X * Exp(u)
    P <- F P F^T + G Q G^T

update:
    K = P H^T (H P H^T + R)^-1
    X <- X * Exp(K (y - h(X)))
    P <- (I - K H) P (I - K H)^T + K R K^T
"""
import logging

from liekf.state import Pose
from liekf.util import checked_covariance
from . import common
from .base import FilterType, KalmanFilter

_LOG = logging.getLogger(__name__)

default_params = dict(common.default_params)


class ExtendedKalmanFilter(KalmanFilter):

    kind = FilterType.EKF
    default_params = default_params

    def __init__(self, x0: Pose = None, P0=None, **params):
        self.params = common.init_filter_params(self.default_params, params)
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
        F = system_model.jacobian_state(x, u)
        G = system_model.jacobian_noise(x, u)
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
        H = measurement_model.jacobian_state(x)
        R = measurement_model.noise_covariance()
        K, _ = common.kalman_gain(P, H, R, self.params["max_condition"])
        x1 = x.plus(K @ (y - measurement_model.predict(x)))
        P1 = checked_covariance(common.joseph(P, K, H, R), self.params["psd_tol"])
        _LOG.debug("ekf update, trace %g -> %g", P.trace(), P1.trace())
        self._x, self._P = x1, P1

    def state(self):
        common.check_initialized(self._x)
        return self._x

    def covariance(self):
        common.check_initialized(self._x)
        return self._P.copy()
