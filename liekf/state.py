"""
The robot pose, an element of SE(3).

Pose is an immutable value wrapping the SE3 group parameters
[x, y, z, qw, qx, qy, qz]. The group operations are derived symbolically
in liekf.lie.se3 and compiled once into casadi functions, see eqs().
"""

import casadi as ca
import numpy as np

from liekf.errors import ConfigurationError
from liekf.lie.se3 import SE3
from liekf.lie.so3 import Quat


def eqs():
    a = ca.SX.sym("a", 7)
    b = ca.SX.sym("b", 7)
    v = ca.SX.sym("v", 6)
    p = ca.SX.sym("p", 3)
    R = ca.SX.sym("R", 3, 3)
    return {
        "product": ca.Function("product", [a, b], [SE3.product(a, b)], ["a", "b"], ["c"]),
        "inv": ca.Function("inv", [a], [SE3.inv(a)], ["a"], ["a_inv"]),
        "exp": ca.Function("exp", [v], [SE3.exp(v)], ["v"], ["a"]),
        "log": ca.Function("log", [a], [SE3.log(a)], ["a"], ["v"]),
        "act": ca.Function("act", [a, p], [SE3.act(a, p)], ["a", "p"], ["q"]),
        "plus": ca.Function(
            "plus", [a, v], [SE3.product(a, SE3.exp(v))], ["a", "v"], ["b"]
        ),
        "lplus": ca.Function(
            "lplus", [a, v], [SE3.product(SE3.exp(v), a)], ["a", "v"], ["b"]
        ),
        "minus": ca.Function(
            "minus", [a, b], [SE3.log(SE3.product(SE3.inv(b), a))], ["a", "b"], ["v"]
        ),
        "Ad": ca.Function("Ad", [a], [SE3.Ad(a)], ["a"], ["Ad"]),
        "matrix": ca.Function("matrix", [a], [SE3.matrix(a)], ["a"], ["T"]),
        "from_dcm": ca.Function("from_dcm", [R], [Quat.from_dcm(R)], ["R"], ["q"]),
    }


_eqs = eqs()


def _vec(x):
    return np.array(x, dtype=float).reshape(-1)


def as_tangent(v):
    """
    Tangent vector [rho, theta] as a flat float array
    """
    v = _vec(v)
    if v.shape != (6,):
        raise ConfigurationError("tangent vector must have 6 elements, got {:d}".format(v.size))
    return v


class Pose:
    """
    Rigid body transformation, rotation R and translation t,
    acting on points as p -> R p + t.

    Operators: a * b is the composition, a + v the right retraction
    a * Exp(v), and a - b = Log(b^-1 * a).
    """

    __slots__ = ("_x",)

    dim = 6

    def __init__(self, x=None):
        if x is None:
            x = [0, 0, 0, 1, 0, 0, 0]
        x = np.array(x, dtype=float).reshape(-1)
        if x.shape != (7,) or not np.all(np.isfinite(x)):
            raise ConfigurationError("pose parameters must be 7 finite values")
        n = np.linalg.norm(x[3:])
        if n < 0.5:
            raise ConfigurationError("degenerate quaternion, norm {:g}".format(n))
        if abs(n - 1) > Quat.norm_tol:
            x[3:] /= n
        x.flags.writeable = False
        self._x = x

    @classmethod
    def identity(cls):
        return cls()

    @classmethod
    def exp(cls, v):
        return cls(_eqs["exp"](as_tangent(v)))

    @classmethod
    def from_rotation_translation(cls, R, t, tol=1e-6):
        R = np.array(R, dtype=float)
        t = _vec(t)
        if R.shape != (3, 3) or t.shape != (3,):
            raise ConfigurationError("rotation must be 3x3 and translation 3x1")
        if not np.allclose(R.T @ R, np.eye(3), atol=tol) or np.linalg.det(R) < 0:
            raise ConfigurationError("rotation must be orthonormal with determinant +1")
        q = _vec(_eqs["from_dcm"](R))
        return cls(np.hstack([t, q]))

    @classmethod
    def from_matrix(cls, T, tol=1e-6):
        T = np.array(T, dtype=float)
        if T.shape != (4, 4) or not np.allclose(T[3], [0, 0, 0, 1]):
            raise ConfigurationError("homogeneous transform must be 4x4 with last row [0, 0, 0, 1]")
        return cls.from_rotation_translation(T[:3, :3], T[:3, 3], tol=tol)

    @property
    def params(self):
        return self._x

    @property
    def translation(self):
        return self._x[:3].copy()

    @property
    def quaternion(self):
        return self._x[3:].copy()

    @property
    def rotation(self):
        return self.matrix()[:3, :3]

    def matrix(self):
        return np.array(_eqs["matrix"](self._x))

    def compose(self, other):
        return Pose(_eqs["product"](self._x, other.params))

    def inverse(self):
        return Pose(_eqs["inv"](self._x))

    def log(self):
        return _vec(_eqs["log"](self._x))

    def act(self, p):
        return _vec(_eqs["act"](self._x, _vec(p)))

    def plus(self, v):
        """
        Right retraction, X * Exp(v)
        """
        return Pose(_eqs["plus"](self._x, as_tangent(v)))

    def lplus(self, v):
        """
        Left retraction, Exp(v) * X
        """
        return Pose(_eqs["lplus"](self._x, as_tangent(v)))

    def minus(self, other):
        """
        Log(other^-1 * X), the right tangent vector taking other to X
        """
        return _vec(_eqs["minus"](self._x, other.params))

    def between(self, other):
        """
        X^-1 * other
        """
        return self.inverse().compose(other)

    def adjoint(self):
        return np.array(_eqs["Ad"](self._x))

    def isclose(self, other, tol=1e-9):
        return bool(np.linalg.norm(self.minus(other)) < tol)

    def __mul__(self, other):
        if not isinstance(other, Pose):
            return NotImplemented
        return self.compose(other)

    def __add__(self, v):
        if isinstance(v, Pose):
            return NotImplemented
        return self.plus(v)

    def __sub__(self, other):
        if not isinstance(other, Pose):
            return NotImplemented
        return self.minus(other)

    def __repr__(self):
        return "Pose(t={:s}, q={:s})".format(
            np.array2string(self._x[:3], precision=6),
            np.array2string(self._x[3:], precision=6),
        )
