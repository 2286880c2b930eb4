import numpy as np

# avoid integer types, they don't work well with plotting,
# no need to be overly cautious with memory here


time_type = "f8"
float_type = "f8"


class Msg:
    def __init__(self, dtype: np.dtype):
        # a scalar assigned to a record sets every field
        self.data = np.full(1, np.nan, dtype=dtype)[0]

    def __repr__(self):
        return repr(self.data)


class Control(Msg):
    dtype = np.dtype(
        [
            ("time", time_type),  # timestamp
            ("u", float_type, 6),  # tangent increment over one step [rho, theta]
        ]
    )

    def __init__(self):
        super().__init__(self.dtype)


class LandmarkFix(Msg):
    dtype = np.dtype(
        [
            ("time", time_type),  # timestamp
            ("index", float_type),  # landmark index
            ("y", float_type, 3),  # landmark position in the body frame
        ]
    )

    def __init__(self):
        super().__init__(self.dtype)


class Gps(Msg):
    dtype = np.dtype(
        [
            ("time", time_type),  # timestamp
            ("y", float_type, 3),  # position in the world frame
        ]
    )

    def __init__(self):
        super().__init__(self.dtype)


class PoseMsg(Msg):
    dtype = np.dtype(
        [
            ("time", time_type),  # timestamp
            ("t", float_type, 3),  # translation
            ("q", float_type, 4),  # quaternion, w first
        ]
    )

    def __init__(self):
        super().__init__(self.dtype)


class EstimatorStatus(Msg):
    dtype = np.dtype(
        [
            ("time", time_type),  # timestamp
            ("cpu_predict", time_type),  # elapsed cpu prediction time
            ("cpu_update", time_type),  # elapsed cpu time of the last update
            ("std", float_type, 6),  # sqrt of the covariance diagonal
            ("n_fail", float_type),  # number of failed calls
        ]
    )

    def __init__(self):
        super().__init__(self.dtype)


class Params(Msg):
    def __init__(self, core):
        dtype = [("time", time_type)]
        for name, p in core._declared_params.items():
            dtype.append((p.name, p.dtype))
        self.dtype = np.dtype(dtype)
        super().__init__(self.dtype)

        for name, p in core._declared_params.items():
            self.data[name] = p.value


class Log(Msg):
    def __init__(self, core):
        dtype = [("time", time_type)]
        for topic, publisher in core._publishers.items():
            if not hasattr(publisher.msg_type, "dtype"):
                msg = publisher.msg_type(core)
                dtype.append((topic, msg.dtype))
            else:
                dtype.append((topic, publisher.msg_type.dtype))
        self.dtype = np.dtype(dtype)
        super().__init__(self.dtype)
