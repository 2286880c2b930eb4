import abc

import casadi as ca
import numpy as np

from liekf.errors import ConfigurationError
from liekf.lie.se3 import SE3
from liekf.lie.so3 import Dcm
from liekf.state import Pose
from liekf.util import check_covariance, psd_factor


def eqs():
    x = ca.SX.sym("x", 7)
    b = ca.SX.sym("b", 3)

    # landmark in the body frame, y = x^-1 * b
    # x * exp(eta): y = exp(-eta) * x^-1 * b ~ y - rho - theta x y
    y_lmk = SE3.act(SE3.inv(x), b)
    H_lmk = ca.horzcat(-ca.SX.eye(3), Dcm.wedge(y_lmk))

    # position, y = t
    # x * exp(eta): y ~ t + R rho
    y_gps = SE3.translation(x)
    H_gps = ca.horzcat(SE3.rotation(x), ca.SX.zeros(3, 3))

    return {
        "landmark": ca.Function("landmark", [x, b], [y_lmk, H_lmk], ["x", "b"], ["y", "H"]),
        "gps": ca.Function("gps", [x], [y_gps, H_gps], ["x"], ["y", "H"]),
    }


_eqs = eqs()


class MeasurementModel(abc.ABC):
    """
    y = h(X) + v, v ~ N(0, R)

    Jacobians are taken w.r.t. a right perturbation of the state,
    X * Exp(eta).
    """

    dim = 3
    state_dim = 6

    def __init__(self, covariance):
        self._R = check_covariance(covariance, self.dim, "measurement noise covariance")
        self._R.flags.writeable = False
        self._Rs = psd_factor(self._R)
        self._Rs.flags.writeable = False

    @property
    def covariance(self):
        return self._R

    @property
    def sqrt_covariance(self):
        return self._Rs

    def noise_covariance(self):
        return self._R

    @abc.abstractmethod
    def predict(self, x: Pose):
        ...

    @abc.abstractmethod
    def jacobian_state(self, x: Pose):
        ...

    def __call__(self, x: Pose):
        return self.predict(x)


class Landmark3DMeasurementModel(MeasurementModel):
    """
    Cartesian position of a known landmark in the robot frame,
    y = X^-1 * b
    """

    def __init__(self, landmark, covariance):
        super().__init__(covariance)
        landmark = np.array(landmark, dtype=float).reshape(-1)
        if landmark.shape != (3,) or not np.all(np.isfinite(landmark)):
            raise ConfigurationError("landmark must be 3 finite coordinates")
        landmark.flags.writeable = False
        self._landmark = landmark

    @property
    def landmark(self):
        return self._landmark

    def predict(self, x: Pose):
        return np.array(_eqs["landmark"](x.params, self._landmark)[0]).reshape(-1)

    def jacobian_state(self, x: Pose):
        return np.array(_eqs["landmark"](x.params, self._landmark)[1])

    def __repr__(self):
        return "Landmark3DMeasurementModel(landmark={:s})".format(str(self._landmark))


class GPSMeasurementModel(MeasurementModel):
    """
    Direct read of the robot position in the world frame, y = t
    """

    def predict(self, x: Pose):
        return np.array(_eqs["gps"](x.params)[0]).reshape(-1)

    def jacobian_state(self, x: Pose):
        return np.array(_eqs["gps"](x.params)[1])
