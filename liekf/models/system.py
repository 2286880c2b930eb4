import casadi as ca
import numpy as np

from liekf.errors import ConfigurationError
from liekf.lie.se3 import SE3
from liekf.state import Pose, as_tangent
from liekf.util import check_covariance, psd_factor


def eqs():
    x = ca.SX.sym("x", 7)
    u = ca.SX.sym("u", 6)

    # x1 = x * exp(u), perturbed on the right, x * exp(eta) * exp(u)
    # = x1 * exp(Ad(exp(-u)) eta)
    x1 = SE3.product(x, SE3.exp(u))
    F = SE3.Ad(SE3.inv(SE3.exp(u)))
    return {
        "predict": ca.Function("predict", [x, u], [x1], ["x", "u"], ["x1"]),
        "F": ca.Function("F", [u], [F], ["u"], ["F"]),
    }


_eqs = eqs()


class LieSystemModel:
    """
    Constant twist motion model, X_(t+1) = X_t * Exp(u).

    The control u is the twist integrated over one step. The control
    noise enters as an additional tangent increment, w dt, with w of
    covariance Q (the noise of the twist rate).
    """

    dim = 6

    def __init__(self, covariance, dt=1.0):
        if not dt > 0:
            raise ConfigurationError("dt must be positive, got {!r}".format(dt))
        self.dt = float(dt)
        self._Q = check_covariance(covariance, self.dim, "process noise covariance")
        self._Q.flags.writeable = False
        self._Qs = psd_factor(self._Q)
        self._Qs.flags.writeable = False

    @property
    def covariance(self):
        return self._Q

    @property
    def sqrt_covariance(self):
        return self._Qs

    def noise_covariance(self):
        return self._Q

    def predict(self, x: Pose, u) -> Pose:
        return Pose(_eqs["predict"](x.params, as_tangent(u)))

    def __call__(self, x: Pose, u) -> Pose:
        return self.predict(x, u)

    def jacobian_state(self, x: Pose, u):
        """
        Jacobian of predict w.r.t. a right perturbation of x
        """
        return np.array(_eqs["F"](as_tangent(u)))

    def jacobian_noise(self, x: Pose, u):
        """
        Jacobian of predict w.r.t. the control noise
        """
        return self.dt * np.eye(self.dim)
