import casadi as ca
import numpy as np
import pytest

from liekf.lie.se3 import SE3
from liekf.lie.so3 import Dcm, Quat
from liekf.lie.util import series_dict
from liekf.models import GPSMeasurementModel, Landmark3DMeasurementModel, LieSystemModel
from liekf.state import Pose

eps = 1e-10
tol_jac = 1e-9

x_check = Pose.exp([0.3, -0.2, 0.5, 0.4, -0.7, 0.2])
u_check = np.array([0.1, 0.02, -0.05, 0.03, 0.2, -0.1])


def test_series():
    # closed form and series agree on both sides of the switch
    for x in [5e-4, 5e-3, 2e-2, 0.5, 2.0]:
        x_sq = x**2
        assert abs(float(series_dict["sin(x)/x"](x_sq)) - np.sin(x) / x) < eps
        assert abs(float(series_dict["(1 - cos(x))/x^2"](x_sq)) - (1 - np.cos(x)) / x_sq) < 1e-8
        assert abs(float(series_dict["(x - sin(x))/x^3"](x_sq)) - (x - np.sin(x)) / x**3) < 1e-6
        assert (
            abs(
                float(series_dict["(1 - x/2 cot(x/2))/x^2"](x_sq))
                - (1 - x / 2 / np.tan(x / 2)) / x_sq
            )
            < 1e-6
        )
    assert float(series_dict["sin(x)/x"](0)) == 1
    assert float(series_dict["(1 - cos(x))/x^2"](0)) == 0.5


def test_so3():
    v = ca.SX.sym("v", 3)
    q = ca.SX.sym("q", 4)
    f_exp = ca.Function("exp", [v], [Quat.exp(v)])
    f_log = ca.Function("log", [q], [Quat.log(q)])
    f_dcm = ca.Function("dcm", [v], [Dcm.exp(v)])
    f_dcm_quat = ca.Function("dcm_quat", [q], [Dcm.from_quat(q)])

    for v0 in [[0.1, 0.2, 0.3], [0, 0, 0], [1e-9, 0, -1e-9], [0, 0, np.pi - 1e-6]]:
        v0 = np.array(v0)
        assert np.linalg.norm(np.array(f_log(f_exp(v0))).reshape(-1) - v0) < 1e-9
        assert np.linalg.norm(np.array(f_dcm(v0)) - np.array(f_dcm_quat(f_exp(v0)))) < eps

    # q and -q are the same rotation
    q0 = np.array(f_exp([0.1, 0.2, 0.3])).reshape(-1)
    assert np.linalg.norm(np.array(f_log(-q0)) - np.array(f_log(q0))) < eps


def test_se3_algebra():
    v = ca.SX.sym("v", 6)
    f = ca.Function("f", [v], [SE3.vee(SE3.wedge(v))])
    v0 = np.array([1, 2, 3, 0.1, 0.2, 0.3])
    assert np.linalg.norm(np.array(f(v0)).reshape(-1) - v0) < eps


def test_se3_adjoint():
    # X * Exp(v) = Exp(Ad(X) v) * X
    v = np.array([0.01, -0.02, 0.03, 0.02, 0.01, -0.03])
    assert x_check.plus(v).isclose(x_check.lplus(x_check.adjoint() @ v), eps)

    # ad(v) is the derivative of Ad(Exp(s v)) at s = 0
    s = ca.SX.sym("s")
    a = ca.Function("a", [s], [ca.jacobian(ca.vec(SE3.Ad(SE3.exp(s * ca.DM(v)))), s)])
    w = ca.SX.sym("w", 6)
    ad = ca.Function("ad", [w], [SE3.ad(w)])
    assert np.linalg.norm(np.array(a(0)).reshape(6, 6, order="F") - np.array(ad(v))) < eps


def test_motion_jacobian():
    x = ca.SX.sym("x", 7)
    x1 = ca.SX.sym("x1", 7)
    u = ca.SX.sym("u", 6)
    eta = ca.SX.sym("eta", 6)
    e = SE3.log(SE3.product(SE3.inv(x1), SE3.product(SE3.product(x, SE3.exp(eta)), SE3.exp(u))))
    f_J = ca.Function("J", [x, x1, u, eta], [ca.jacobian(e, eta)])

    model = LieSystemModel(np.eye(6))
    x1_check = model.predict(x_check, u_check)
    J = np.array(f_J(x_check.params, x1_check.params, u_check, np.zeros(6)))
    assert np.linalg.norm(J - model.jacobian_state(x_check, u_check)) < tol_jac


def test_measurement_jacobians():
    x = ca.SX.sym("x", 7)
    b = ca.SX.sym("b", 3)
    eta = ca.SX.sym("eta", 6)
    x_eta = SE3.product(x, SE3.exp(eta))
    f_lmk = ca.Function("J", [x, b, eta], [ca.jacobian(SE3.act(SE3.inv(x_eta), b), eta)])
    f_gps = ca.Function("J", [x, eta], [ca.jacobian(SE3.translation(x_eta), eta)])

    b0 = np.array([2, 1, -1])
    lmk = Landmark3DMeasurementModel(b0, np.eye(3))
    J = np.array(f_lmk(x_check.params, b0, np.zeros(6)))
    assert np.linalg.norm(J - lmk.jacobian_state(x_check)) < tol_jac

    gps = GPSMeasurementModel(np.eye(3))
    J = np.array(f_gps(x_check.params, np.zeros(6)))
    assert np.linalg.norm(J - gps.jacobian_state(x_check)) < tol_jac


@pytest.mark.parametrize("group", [SE3, Quat])
def test_shape_check(group):
    with pytest.raises(AssertionError):
        group.check_group_shape(ca.SX.sym("a", 2))
