import numpy as np
import scipy.linalg

from .errors import ConfigurationError, CovarianceError, FactorizationError


def init_params(default_params, params):
    """
    Overrides the defaults with params, unknown keys are rejected
    """
    p = dict(default_params)
    for k, v in params.items():
        if k not in p.keys():
            raise KeyError(k)
        p[k] = v
    return p


def symmetrize(P):
    return (P + P.T) / 2


def is_symmetric_psd(P, tol=1e-9):
    """
    Checks that P is square, finite, symmetric and positive semi-definite,
    up to a tolerance relative to the magnitude of P.
    """
    P = np.asarray(P, dtype=float)
    if P.ndim != 2 or P.shape[0] != P.shape[1]:
        return False
    if not np.all(np.isfinite(P)):
        return False
    scale = max(1.0, float(np.max(np.abs(P), initial=0.0)))
    if np.max(np.abs(P - P.T), initial=0.0) > tol * scale:
        return False
    return bool(np.linalg.eigvalsh(symmetrize(P))[0] >= -tol * scale)


def check_covariance(P, n, name="covariance"):
    """
    Validates a user supplied covariance, returns it as a symmetric array

    @raises ConfigurationError: wrong shape or not symmetric PSD
    """
    P = np.array(P, dtype=float)
    if P.shape != (n, n):
        raise ConfigurationError(
            "{:s} must be {:d}x{:d}, got {:s}".format(name, n, n, str(P.shape))
        )
    if not is_symmetric_psd(P):
        raise ConfigurationError(
            "{:s} is not symmetric positive semi-definite".format(name)
        )
    return symmetrize(P)


def checked_covariance(P, tol=1e-9):
    """
    Validates a covariance computed by a filter step

    @raises CovarianceError: roundoff pushed P out of the PSD cone
    """
    if not is_symmetric_psd(P, tol):
        raise CovarianceError()
    return symmetrize(P)


def triangularize(A):
    """
    Finds the lower triangular L with L L^T = A A^T from the QR
    decomposition of A^T. A is n x k with k >= n. The diagonal of L
    is made non-negative.
    """
    n = A.shape[0]
    # qr is upper triangular, so we transpose inputs and outputs
    R = np.linalg.qr(A.T, mode="r")
    L = R[:n, :n].T
    s = np.sign(np.diag(L))
    s[s == 0] = 1
    return L * s


def psd_factor(P, tol=1e-9):
    """
    Lower triangular factor of a symmetric PSD matrix. Falls back to an
    eigen decomposition when P is singular, e.g. noise free axes.

    @raises FactorizationError: P is indefinite
    """
    P = symmetrize(np.asarray(P, dtype=float))
    try:
        return scipy.linalg.cholesky(P, lower=True)
    except scipy.linalg.LinAlgError:
        pass
    w, V = np.linalg.eigh(P)
    if not np.all(np.isfinite(w)) or w[0] < -tol * max(1.0, abs(w[-1])):
        raise FactorizationError()
    return triangularize(V * np.sqrt(np.clip(w, 0, None)))


def sqrt_predict(W, F, G, Qs):
    """
    Square root covariance prediction, re-triangularizes [F W | G Qs]

    W: sqrt P, lower triangular
    F: state transition jacobian
    G: noise jacobian
    Qs: sqrt Q

    returns:
    W1: sqrt P1, lower triangular, with W1 W1^T = F P F^T + G Q G^T
    """
    W1 = triangularize(np.hstack([F @ W, G @ Qs]))
    if not np.all(np.isfinite(W1)):
        raise FactorizationError()
    return W1


def sqrt_correct(Rs, H, W, tol=1e-12):
    """
    source: Fast Stable Kalman Filter Algorithms Utilising the Square Root, Steward 98
    Rs: sqrt(R)
    H: measurement matrix
    W: sqrt(P)

    @return:
        Wp: sqrt(P+) = sqrt((I - KH)P)
        K: Kalman gain
        Ss: sqrt of the innovation covariance

    @raises FactorizationError: non-positive pivot in Ss
    """
    n_x = H.shape[1]
    n_y = H.shape[0]
    B = np.block([[Rs, H @ W], [np.zeros((n_x, n_y)), W]])
    B_R = triangularize(B)
    if not np.all(np.isfinite(B_R)):
        raise FactorizationError()
    Wp = B_R[n_y:, n_y:]
    Ss = B_R[:n_y, :n_y]
    P_HT_SsInv = B_R[n_y:, :n_y]
    pivots = np.diag(Ss)
    if np.min(pivots) <= tol * np.max(np.abs(B_R)):
        raise FactorizationError()
    K = scipy.linalg.solve_triangular(Ss, P_HT_SsInv.T, lower=True, trans="T").T
    return Wp, K, Ss
