"""
Kalman filters on SE(3), all sharing the KalmanFilter interface.

ekf: extended Kalman filter, right tangent error
sekf: square root form of ekf, covariance carried as a cholesky factor
iekf: invariant extended Kalman filter, right invariant error
ukfm: unscented Kalman filter on manifolds
"""
from liekf.errors import ConfigurationError
from .base import FilterType, KalmanFilter
from .ekf import ExtendedKalmanFilter
from .sekf import SquareRootExtendedKalmanFilter
from .iekf import InvariantExtendedKalmanFilter
from .ukfm import UnscentedKalmanFilterOnManifolds

filters = {
    FilterType.EKF: ExtendedKalmanFilter,
    FilterType.SEKF: SquareRootExtendedKalmanFilter,
    FilterType.IEKF: InvariantExtendedKalmanFilter,
    FilterType.UKFM: UnscentedKalmanFilterOnManifolds,
}


def make_filter(kind, x0=None, P0=None, **params) -> KalmanFilter:
    """
    Builds a filter of the bank by kind, a FilterType or its name ("ekf", ...)
    """
    if isinstance(kind, str):
        kind = kind.lower()
    try:
        kind = FilterType(kind)
    except ValueError:
        raise ConfigurationError("unknown filter type {!r}".format(kind)) from None
    return filters[kind](x0, P0, **params)
