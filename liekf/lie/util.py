import casadi as ca

# The coefficient functions below take the squared angle x_sq = x**2, so that
# they, and their derivatives, stay finite at the origin. Below the threshold
# a taylor series is used, elsewhere the closed form.

x_sq = ca.SX.sym("x_sq")
x = ca.sqrt(x_sq)

# sin(x)/x
C1 = ca.Function(
    "a",
    [x_sq],
    [ca.if_else(x_sq < 1e-6, 1 - x_sq / 6 + x_sq**2 / 120, ca.sin(x) / x)],
)

# (1 - cos(x))/x^2
C2 = ca.Function(
    "b",
    [x_sq],
    [
        ca.if_else(
            x_sq < 1e-4,
            0.5 - x_sq / 24 + x_sq**2 / 720,
            (1 - ca.cos(x)) / x_sq,
        )
    ],
)

# (x - sin(x))/x^3
C3 = ca.Function(
    "c",
    [x_sq],
    [
        ca.if_else(
            x_sq < 1e-4,
            1 / 6 - x_sq / 120 + x_sq**2 / 5040,
            (x - ca.sin(x)) / (x_sq * x),
        )
    ],
)

# (1 - x/2 cot(x/2))/x^2, the V^-1 coefficient of SE3 log
C4 = ca.Function(
    "d",
    [x_sq],
    [
        ca.if_else(
            x_sq < 1e-4,
            1 / 12 + x_sq / 720 + x_sq**2 / 30240,
            (1 - C1(x_sq) / (2 * C2(x_sq))) / x_sq,
        )
    ],
)

series_dict = {
    "sin(x)/x": C1,
    "(1 - cos(x))/x^2": C2,
    "(x - sin(x))/x^3": C3,
    "(1 - x/2 cot(x/2))/x^2": C4,
}

# delete temp variables used to create functions
del x, x_sq
