"""
Kalman filtering on the SE(3) Lie group, with casadi derived group algebra.
"""
from .errors import (
    LieKFError,
    ConfigurationError,
    NumericalError,
    InnovationCovarianceError,
    FactorizationError,
    ConvergenceError,
    CovarianceError,
)
from .state import Pose
from .models import (
    LieSystemModel,
    MeasurementModel,
    Landmark3DMeasurementModel,
    GPSMeasurementModel,
)
from .filters import (
    FilterType,
    KalmanFilter,
    ExtendedKalmanFilter,
    SquareRootExtendedKalmanFilter,
    InvariantExtendedKalmanFilter,
    UnscentedKalmanFilterOnManifolds,
    make_filter,
)

__version__ = "0.1.0"
