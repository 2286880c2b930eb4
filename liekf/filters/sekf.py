"""
Square root extended Kalman filter on SE(3).

Same estimator as liekf.filters.ekf, but the covariance is carried as a
lower triangular factor L, P = L L^T, so it stays symmetric positive
semi-definite by construction.

propagate: L <- tria([F L | G sqrt(Q)])
update: QR array algorithm, see liekf.util.sqrt_correct
"""
import logging

import numpy as np

from liekf.errors import InnovationCovarianceError
from liekf.state import Pose
from liekf.util import psd_factor, sqrt_correct, sqrt_predict
from . import common
from .base import FilterType, KalmanFilter

_LOG = logging.getLogger(__name__)

default_params = dict(common.default_params)


class SquareRootExtendedKalmanFilter(KalmanFilter):

    kind = FilterType.SEKF
    default_params = default_params

    def __init__(self, x0: Pose = None, P0=None, **params):
        self.params = common.init_filter_params(self.default_params, params)
        self._x = None
        self._L = None
        if x0 is not None or P0 is not None:
            self.initialize(x0, P0)

    def initialize(self, x0, P0):
        x0, P0 = common.check_initial(x0, P0, self.dim)
        self._L = psd_factor(P0, self.params["psd_tol"])
        self._x = x0

    def propagate(self, system_model, u):
        common.check_initialized(self._x)
        common.check_system_model(system_model, self.dim)
        x, L = self._x, self._L
        F = system_model.jacobian_state(x, u)
        G = system_model.jacobian_noise(x, u)
        x1 = system_model.predict(x, u)
        L1 = sqrt_predict(L, F, G, system_model.sqrt_covariance)
        self._x, self._L = x1, L1

    def update(self, measurement_model, y):
        common.check_initialized(self._x)
        y = common.check_measurement(measurement_model, y, self.dim)
        x, L = self._x, self._L
        H = measurement_model.jacobian_state(x)
        L1, K, Ss = sqrt_correct(measurement_model.sqrt_covariance, H, L)
        if not np.linalg.cond(Ss) <= np.sqrt(self.params["max_condition"]):
            _LOG.debug("sekf innovation factor ill-conditioned:\n%s", Ss)
            raise InnovationCovarianceError()
        x1 = x.plus(K @ (y - measurement_model.predict(x)))
        self._x, self._L = x1, L1

    def state(self):
        common.check_initialized(self._x)
        return self._x

    def covariance(self):
        common.check_initialized(self._x)
        return self._L @ self._L.T

    def factor(self):
        """
        Lower triangular L, with covariance() = L L^T
        """
        common.check_initialized(self._x)
        return self._L.copy()
