import abc
import enum

import numpy as np

from liekf.state import Pose


class FilterType(enum.Enum):
    """
    The closed set of filters in the bank
    """

    EKF = "ekf"
    SEKF = "sekf"
    IEKF = "iekf"
    UKFM = "ukfm"


class KalmanFilter(abc.ABC):
    """
    The contract shared by every filter of the bank. A driver only
    relies on these five operations, so filters can be swapped freely.

    The covariance is always reported in the tangent space of the current
    estimate, w.r.t. a right perturbation, X * Exp(eta).
    """

    kind: FilterType
    dim = Pose.dim

    @abc.abstractmethod
    def initialize(self, x0: Pose, P0: np.ndarray) -> None:
        ...

    @abc.abstractmethod
    def propagate(self, system_model, u) -> None:
        ...

    @abc.abstractmethod
    def update(self, measurement_model, y) -> None:
        ...

    @abc.abstractmethod
    def state(self) -> Pose:
        ...

    @abc.abstractmethod
    def covariance(self) -> np.ndarray:
        ...
