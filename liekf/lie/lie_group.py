import casadi as ca
import abc
from typing import Tuple


class LieGroup(abc.ABC):
    """
    This is a generic Lie Group class. It does NOT assume matrix
    lie groups. Elements are stored by their group parameters, for
    instance SE3 is stored as a translation and a unit quaternion
    (7 parameters) instead of the 16 elements of the homogeneous
    transform, which keeps products cheap and lets the rotation
    be renormalized.
    """

    def __init__(self, group_params: int, algebra_params: int, group_shape: Tuple[int, int]):
        """
        @param group_params: The number of parameters in the group, (e.g. for quaternion this would be 4,
        for DCM this would be 9)
        @param algebra_params: The number of parameters for the Lie algebra (e.g. for SO3 this would be 3, for
        SE3 this would be 6)
        @param group_shape: The shape of the stored group element
        """
        self.group_params = group_params
        self.algebra_params = algebra_params
        self.group_shape = group_shape

    def check_group_shape(self, a):
        """
        Checks the group shape
        """
        assert a.shape == self.group_shape or a.shape == (self.group_shape[0],)

    def check_algebra_shape(self, v):
        """
        Checks the size of the algebra parameters
        """
        assert v.shape == (self.algebra_params, 1) or v.shape == (self.algebra_params,)

    @abc.abstractmethod
    def identity(self) -> ca.SX:
        ...

    @abc.abstractmethod
    def product(self, a, b):
        ...

    @abc.abstractmethod
    def inv(self, a) -> ca.SX:
        ...

    @abc.abstractmethod
    def exp(self, v) -> ca.SX:
        ...

    @abc.abstractmethod
    def log(self, a) -> ca.SX:
        ...

    @abc.abstractmethod
    def vee(self, X) -> ca.SX:
        ...

    @abc.abstractmethod
    def wedge(self, v) -> ca.SX:
        ...

    @abc.abstractmethod
    def ad(self, v) -> ca.SX:
        ...

    @abc.abstractmethod
    def Ad(self, a) -> ca.SX:
        ...
