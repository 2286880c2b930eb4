import numpy as np
import pytest

from liekf.errors import ConfigurationError, ConvergenceError
from liekf.filters import ExtendedKalmanFilter, UnscentedKalmanFilterOnManifolds
from liekf.filters.ukfm import manifold_mean, sigma_points, sigma_weights
from liekf.models import Landmark3DMeasurementModel, LieSystemModel
from liekf.state import Pose

eps = 1e-10
tol = 1e-8  # relative

u = np.array([0.001, 0, 0.0005, 0, 0, 0.0005])
a = Pose.exp([0.3, -0.2, 0.5, 0.4, -0.7, 0.2])
P0 = np.diag([1, 2, 3, 0.1, 0.2, 0.3])


def test_weights():
    lam, Wm, Wc = sigma_weights(6, 1e-3, 2, 0)
    assert abs(lam - (1e-6 * 6 - 6)) < eps
    assert Wm.shape == (13,) and Wc.shape == (13,)
    assert abs(Wm.sum() - 1) < 1e-6
    assert abs(Wc[0] - Wm[0] - (1 - 1e-6 + 2)) < 1e-6
    assert np.all(Wm[1:] == Wm[1])
    with pytest.raises(ConfigurationError):
        sigma_weights(6, 0, 2, 0)


def test_sigma_points():
    lam, Wm, Wc = sigma_weights(6, 1e-3, 2, 0)
    points, deltas = sigma_points(a, P0, lam)
    assert len(points) == 13
    assert points[0] is a
    assert np.all(deltas[0] == 0)
    for p, d in zip(points[1:], deltas[1:]):
        assert p.isclose(a.plus(d), eps)
    # the weighted spread reproduces the covariance
    assert np.linalg.norm((Wc[1:, None] * deltas[1:]).T @ deltas[1:] - P0) < eps

    # symmetric points average back to the center
    points, deltas = sigma_points(a, 1e-4 * P0, lam)
    x_bar, e = manifold_mean(points, Wm, points[1], 1e-9, 20)
    assert x_bar.isclose(a, 1e-8)
    assert np.linalg.norm(e - deltas) < 1e-8


def test_propagate_matches_ekf():
    # the motion model is linear in the right chart, so the unscented
    # covariance is the exact linear propagation
    model = LieSystemModel(np.diag([1e-3] * 3 + [1e-2] * 3), dt=0.01)
    ukf = UnscentedKalmanFilterOnManifolds(a, P0)
    ekf = ExtendedKalmanFilter(a, P0)
    for i in range(10):
        ukf.propagate(model, u)
        ekf.propagate(model, u)
        P = ekf.covariance()
        assert np.linalg.norm(ukf.covariance() - P) < tol * np.linalg.norm(P)
    assert ukf.state().isclose(ekf.state(), 1e-9)


def test_update_near_linear():
    # small covariance, the unscented update approaches the ekf one
    model = Landmark3DMeasurementModel([2, -1, 1], 1e-2 * np.eye(3))
    ukf = UnscentedKalmanFilterOnManifolds(a, 1e-6 * P0)
    ekf = ExtendedKalmanFilter(a, 1e-6 * P0)
    y = model.predict(a) + np.array([0.01, -0.02, 0.01])
    ukf.update(model, y)
    ekf.update(model, y)
    assert np.linalg.norm(ukf.state().minus(ekf.state())) < 1e-8
    P = ekf.covariance()
    assert np.linalg.norm(ukf.covariance() - P) < 1e-4 * np.linalg.norm(P)


def test_mean_not_converged_is_atomic():
    model = LieSystemModel(np.eye(6), dt=0.01)
    ukf = UnscentedKalmanFilterOnManifolds(a, P0, mean_tol=0)
    with pytest.raises(ConvergenceError):
        ukf.propagate(model, u)
    assert ukf.state().isclose(a, eps)
    assert np.all(ukf.covariance() == P0)


def test_invalid_params():
    with pytest.raises(ConfigurationError):
        UnscentedKalmanFilterOnManifolds(mean_max_iter=0)
    with pytest.raises(ConfigurationError):
        UnscentedKalmanFilterOnManifolds(mean_tol=-1)
    with pytest.raises(KeyError):
        UnscentedKalmanFilterOnManifolds(gamma=1)
