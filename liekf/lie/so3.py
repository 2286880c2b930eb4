import casadi as ca

from .lie_group import LieGroup
from .util import series_dict


# see: https://ethaneade.com/lie.pdf


class _SO3Base(LieGroup):
    def vee(self, X):
        v = ca.SX(3, 1)
        v[0, 0] = X[2, 1]
        v[1, 0] = X[0, 2]
        v[2, 0] = X[1, 0]
        return v

    def wedge(self, v):
        X = ca.SX(3, 3)
        theta0 = v[0]
        theta1 = v[1]
        theta2 = v[2]
        X[0, 1] = -theta2
        X[0, 2] = theta1
        X[1, 0] = theta2
        X[1, 2] = -theta0
        X[2, 0] = -theta1
        X[2, 1] = theta0
        return X

    def ad(self, v):
        return self.wedge(v)


class _Dcm(_SO3Base):
    def __init__(self):
        super().__init__(group_params=9, algebra_params=3, group_shape=(3, 3))

    def identity(self) -> ca.SX:
        return ca.SX.eye(3)

    def product(self, a, b):
        self.check_group_shape(a)
        self.check_group_shape(b)
        return a @ b

    def inv(self, a):
        self.check_group_shape(a)
        return ca.transpose(a)

    def exp(self, v):
        theta_sq = ca.dot(v, v)
        X = self.wedge(v)
        A = series_dict["sin(x)/x"]
        B = series_dict["(1 - cos(x))/x^2"]
        return ca.SX.eye(3) + A(theta_sq) * X + B(theta_sq) * X @ X

    def log(self, R):
        return Quat.log(Quat.from_dcm(R))

    def Ad(self, a):
        return a

    def from_quat(self, q):
        assert q.shape == (4, 1) or q.shape == (4,)
        R = ca.SX(3, 3)
        a = q[0]
        b = q[1]
        c = q[2]
        d = q[3]
        aa = a * a
        ab = a * b
        ac = a * c
        ad = a * d
        bb = b * b
        bc = b * c
        bd = b * d
        cc = c * c
        cd = c * d
        dd = d * d
        R[0, 0] = aa + bb - cc - dd
        R[0, 1] = 2 * (bc - ad)
        R[0, 2] = 2 * (bd + ac)
        R[1, 0] = 2 * (bc + ad)
        R[1, 1] = aa + cc - bb - dd
        R[1, 2] = 2 * (cd - ab)
        R[2, 0] = 2 * (bd - ac)
        R[2, 1] = 2 * (cd + ab)
        R[2, 2] = aa + dd - bb - cc
        return R


Dcm = _Dcm()


class _Quat(_SO3Base):
    """
    Unit quaternion, [w, x, y, z], hamilton convention so that
    Dcm.from_quat(a*b) = Dcm.from_quat(a) @ Dcm.from_quat(b).
    """

    # renormalize once the norm drifts this far from one
    norm_tol = 2e-7

    def __init__(self):
        super().__init__(group_params=4, algebra_params=3, group_shape=(4, 1))

    def identity(self) -> ca.SX:
        return ca.SX([1, 0, 0, 0])

    def product(self, a, b):
        assert a.shape == (4, 1) or a.shape == (4,)
        assert b.shape == (4, 1) or b.shape == (4,)
        r1 = a[0]
        v1 = a[1:]
        r2 = b[0]
        v2 = b[1:]
        res = ca.SX(4, 1)
        res[0] = r1 * r2 - ca.dot(v1, v2)
        res[1:] = r1 * v2 + r2 * v1 + ca.cross(v1, v2)
        return res

    def inv(self, q):
        assert q.shape == (4, 1) or q.shape == (4,)
        qi = ca.SX(4, 1)
        n_sq = ca.dot(q, q)
        qi[0] = q[0] / n_sq
        qi[1] = -q[1] / n_sq
        qi[2] = -q[2] / n_sq
        qi[3] = -q[3] / n_sq
        return qi

    def normalize(self, q):
        n = ca.norm_2(q)
        return ca.if_else(ca.fabs(n - 1) > self.norm_tol, q / n, q)

    def exp(self, v):
        assert v.shape == (3, 1) or v.shape == (3,)
        # half angle, written in terms of the squared angle
        half_sq = ca.dot(v, v) / 4
        A = series_dict["sin(x)/x"]
        B = series_dict["(1 - cos(x))/x^2"]
        q = ca.SX(4, 1)
        q[0] = 1 - half_sq * B(half_sq)
        q[1:] = A(half_sq) * v / 2
        return q

    def log(self, q):
        """
        Rotation vector of the shortest rotation, angle in [0, pi]
        """
        assert q.shape == (4, 1) or q.shape == (4,)
        q = ca.if_else(q[0] < 0, -q, q)
        w = q[0]
        v = q[1:]
        n_sq = ca.dot(v, v)
        n = ca.sqrt(n_sq)
        c = ca.if_else(
            n_sq < 1e-12, 2 / w * (1 - n_sq / (3 * w**2)), 2 * ca.atan2(n, w) / n
        )
        return c * v

    def Ad(self, q):
        return Dcm.from_quat(q)

    def from_dcm(self, R):
        assert R.shape == (3, 3)
        b1 = 0.5 * ca.sqrt(1 + R[0, 0] + R[1, 1] + R[2, 2])
        b2 = 0.5 * ca.sqrt(1 + R[0, 0] - R[1, 1] - R[2, 2])
        b3 = 0.5 * ca.sqrt(1 - R[0, 0] + R[1, 1] - R[2, 2])
        b4 = 0.5 * ca.sqrt(1 - R[0, 0] - R[1, 1] + R[2, 2])

        q1 = ca.SX(4, 1)
        q1[0] = b1
        q1[1] = (R[2, 1] - R[1, 2]) / (4 * b1)
        q1[2] = (R[0, 2] - R[2, 0]) / (4 * b1)
        q1[3] = (R[1, 0] - R[0, 1]) / (4 * b1)

        q2 = ca.SX(4, 1)
        q2[0] = (R[2, 1] - R[1, 2]) / (4 * b2)
        q2[1] = b2
        q2[2] = (R[0, 1] + R[1, 0]) / (4 * b2)
        q2[3] = (R[0, 2] + R[2, 0]) / (4 * b2)

        q3 = ca.SX(4, 1)
        q3[0] = (R[0, 2] - R[2, 0]) / (4 * b3)
        q3[1] = (R[0, 1] + R[1, 0]) / (4 * b3)
        q3[2] = b3
        q3[3] = (R[1, 2] + R[2, 1]) / (4 * b3)

        q4 = ca.SX(4, 1)
        q4[0] = (R[1, 0] - R[0, 1]) / (4 * b4)
        q4[1] = (R[0, 2] + R[2, 0]) / (4 * b4)
        q4[2] = (R[1, 2] + R[2, 1]) / (4 * b4)
        q4[3] = b4

        q = ca.if_else(
            ca.trace(R) > 0,
            q1,
            ca.if_else(
                ca.logic_and(R[0, 0] > R[1, 1], R[0, 0] > R[2, 2]),
                q2,
                ca.if_else(R[1, 1] > R[2, 2], q3, q4),
            ),
        )
        return q


Quat = _Quat()
