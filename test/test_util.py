import numpy as np
import pytest

from liekf.errors import ConfigurationError, CovarianceError, FactorizationError
from liekf.util import (
    check_covariance,
    checked_covariance,
    init_params,
    is_symmetric_psd,
    psd_factor,
    sqrt_correct,
    sqrt_predict,
    triangularize,
)

eps = 1e-10

rng = np.random.default_rng(1)
A = rng.standard_normal((6, 6))
P = A @ A.T + 0.1 * np.eye(6)
F = np.eye(6) + 0.1 * rng.standard_normal((6, 6))
G = 0.01 * np.eye(6)
Q = np.diag([1, 2, 3, 4, 5, 6]) * 1e-2
H = rng.standard_normal((3, 6))
R = 1e-2 * np.eye(3)


def test_init_params():
    defaults = {"a": 1, "b": 2}
    assert init_params(defaults, {"b": 3}) == {"a": 1, "b": 3}
    assert defaults == {"a": 1, "b": 2}
    with pytest.raises(KeyError):
        init_params(defaults, {"c": 3})


def test_is_symmetric_psd():
    assert is_symmetric_psd(P)
    assert is_symmetric_psd(np.zeros((3, 3)))
    assert not is_symmetric_psd(-P)
    assert not is_symmetric_psd(P + np.triu(np.ones((6, 6)), 1))
    assert not is_symmetric_psd(np.ones((2, 3)))
    assert not is_symmetric_psd(np.full((2, 2), np.nan))


def test_check_covariance():
    assert np.all(check_covariance(P, 6) == P)
    with pytest.raises(ConfigurationError):
        check_covariance(P, 5)
    with pytest.raises(ConfigurationError):
        check_covariance(-P, 6)
    with pytest.raises(CovarianceError):
        checked_covariance(-P)


def test_triangularize():
    B = rng.standard_normal((6, 9))
    L = triangularize(B)
    assert np.linalg.norm(np.triu(L, 1)) == 0
    assert np.all(np.diag(L) >= 0)
    assert np.linalg.norm(L @ L.T - B @ B.T) < eps


def test_psd_factor():
    L = psd_factor(P)
    assert np.linalg.norm(L @ L.T - P) < eps

    # singular, cholesky fails and the eigen factor is used
    P_s = np.diag([1.0, 0, 2.0])
    L = psd_factor(P_s)
    assert np.linalg.norm(np.triu(L, 1)) < eps
    assert np.linalg.norm(L @ L.T - P_s) < eps

    with pytest.raises(FactorizationError):
        psd_factor(np.diag([1.0, -1.0, 1.0]))


def test_sqrt_predict():
    W1 = sqrt_predict(psd_factor(P), F, G, psd_factor(Q))
    assert np.linalg.norm(np.triu(W1, 1)) == 0
    assert np.linalg.norm(W1 @ W1.T - (F @ P @ F.T + G @ Q @ G.T)) < eps


def test_sqrt_correct():
    S = H @ P @ H.T + R
    K = P @ H.T @ np.linalg.inv(S)
    I_KH = np.eye(6) - K @ H
    P1 = I_KH @ P @ I_KH.T + K @ R @ K.T

    W1, K1, Ss = sqrt_correct(psd_factor(R), H, psd_factor(P))
    assert np.linalg.norm(K1 - K) < 1e-8
    assert np.linalg.norm(Ss @ Ss.T - S) < 1e-8
    assert np.linalg.norm(W1 @ W1.T - P1) < 1e-8


def test_sqrt_correct_singular():
    with pytest.raises(FactorizationError):
        sqrt_correct(np.zeros((3, 3)), H, np.zeros((6, 6)))
