import casadi as ca

from .lie_group import LieGroup
from .so3 import Dcm, Quat
from .util import series_dict


class _SE3(LieGroup):
    """
    SE3 stored as [x, y, z, qw, qx, qy, qz], translation followed by a
    unit quaternion.

    The Lie algebra is ordered as [rho, theta] = [x, y, z, theta0, theta1, theta2],
    translational components first, and perturbations are applied on the
    right, X * exp(v), unless stated otherwise.
    """

    def __init__(self):
        super().__init__(group_params=7, algebra_params=6, group_shape=(7, 1))

    def identity(self):
        return ca.SX([0, 0, 0, 1, 0, 0, 0])

    def translation(self, a):
        return a[:3]

    def quat(self, a):
        return a[3:7]

    def rotation(self, a):
        return Dcm.from_quat(a[3:7])

    def matrix(self, a):
        """
        The homogeneous transform, 4x4
        """
        self.check_group_shape(a)
        horz = ca.horzcat(self.rotation(a), a[:3])
        lastRow = ca.SX([0, 0, 0, 1]).T
        return ca.vertcat(horz, lastRow)

    def product(self, a, b):
        self.check_group_shape(a)
        self.check_group_shape(b)
        t = a[:3] + ca.mtimes(self.rotation(a), b[:3])
        q = Quat.normalize(Quat.product(a[3:7], b[3:7]))
        return ca.vertcat(t, q)

    def inv(self, a):
        self.check_group_shape(a)
        t = -ca.mtimes(self.rotation(a).T, a[:3])
        return ca.vertcat(t, Quat.inv(a[3:7]))

    def act(self, a, p):
        """
        Apply the transform to a point, R p + t
        """
        self.check_group_shape(a)
        return a[:3] + ca.mtimes(self.rotation(a), p)

    def vee(self, X):
        """
        This takes in an element of the se3 Lie Algebra (wedge form) and returns the
        se3 Lie Algebra elements
        """
        v = ca.SX(6, 1)
        v[0, 0] = X[0, 3]  # x
        v[1, 0] = X[1, 3]  # y
        v[2, 0] = X[2, 3]  # z
        v[3, 0] = X[2, 1]  # theta0
        v[4, 0] = X[0, 2]  # theta1
        v[5, 0] = X[1, 0]  # theta2
        return v

    def wedge(self, v):
        """
        This takes in an element of the se3 Lie Algebra and returns the se3 Lie Algebra matrix

        v: [x,y,z,theta0,theta1,theta2]
        """
        X = ca.SX.zeros(4, 4)
        X[0, 3] = v[0]
        X[1, 3] = v[1]
        X[2, 3] = v[2]
        X[:3, :3] = Dcm.wedge(v[3:6])
        return X

    def V(self, theta):
        """
        Couples the translational part of the algebra to the translation
        of the group in exp
        """
        theta_sq = ca.dot(theta, theta)
        X_so3 = Dcm.wedge(theta)
        B = series_dict["(1 - cos(x))/x^2"](theta_sq)
        C = series_dict["(x - sin(x))/x^3"](theta_sq)
        return ca.SX.eye(3) + B * X_so3 + C * X_so3 @ X_so3

    def V_inv(self, theta):
        theta_sq = ca.dot(theta, theta)
        X_so3 = Dcm.wedge(theta)
        D = series_dict["(1 - x/2 cot(x/2))/x^2"](theta_sq)
        return ca.SX.eye(3) - X_so3 / 2 + D * X_so3 @ X_so3

    def exp(self, v):
        self.check_algebra_shape(v)
        rho = v[:3]
        theta = v[3:6]
        t = ca.mtimes(self.V(theta), rho)
        return ca.vertcat(t, Quat.exp(theta))

    def log(self, a):
        self.check_group_shape(a)
        theta = Quat.log(a[3:7])
        rho = ca.mtimes(self.V_inv(theta), a[:3])
        return ca.vertcat(rho, theta)

    def ad(self, v):
        """
        takes 6x1 lie algebra
        input vee operator [x,y,z,theta0,theta1,theta2]
        """
        ad_se3 = ca.SX(6, 6)
        ad_se3[:3, :3] = Dcm.wedge(v[3:6])
        ad_se3[:3, 3:] = Dcm.wedge(v[:3])
        ad_se3[3:, 3:] = Dcm.wedge(v[3:6])
        return ad_se3

    def Ad(self, a):
        """
        Adjoint of a group element, maps right perturbations to left ones,
        X * exp(v) = exp(Ad(X) v) * X
        """
        self.check_group_shape(a)
        R = self.rotation(a)
        Ad_se3 = ca.SX(6, 6)
        Ad_se3[:3, :3] = R
        Ad_se3[:3, 3:] = Dcm.wedge(a[:3]) @ R
        Ad_se3[3:, 3:] = R
        return Ad_se3


SE3 = _SE3()
