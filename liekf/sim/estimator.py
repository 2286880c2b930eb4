import logging
import time

import numpy as np

from liekf.errors import NumericalError
from liekf.filters import KalmanFilter
from . import msgs
from . import uros

_LOG = logging.getLogger(__name__)


class FilterNode:
    """
    A filter node for uros, propagates on controls and updates on
    landmark and GPS fixes.

    A call that fails numerically is logged and counted, the filter keeps
    its previous state and the node keeps running.
    """

    def __init__(self, core, name, kf: KalmanFilter, system_model, landmark_models, gps_model):
        self.core = core
        self.name = name
        self.kf = kf
        self.system_model = system_model
        self.landmark_models = list(landmark_models)
        self.gps_model = gps_model
        self.n_fail = 0

        # subscriptions
        self.sub_control = uros.Subscriber(core, "control", msgs.Control, self.control_callback)
        self.sub_landmark = uros.Subscriber(
            core, "landmark", msgs.LandmarkFix, self.landmark_callback
        )
        self.sub_gps = uros.Subscriber(core, "gps", msgs.Gps, self.gps_callback)

        # publications
        self.pub_pose = uros.Publisher(core, name + "_pose", msgs.PoseMsg)
        self.pub_status = uros.Publisher(core, name + "_status", msgs.EstimatorStatus)

        self.msg_pose = msgs.PoseMsg()
        self.msg_status = msgs.EstimatorStatus()
        self.msg_status.data["n_fail"] = 0

    def _call(self, label, t, func, model, arg):
        start = time.thread_time()
        try:
            func(model, arg)
        except NumericalError as e:
            self.n_fail += 1
            _LOG.warning("%s %s failed @ %f sec: %s", self.name, label, t, e)
        return time.thread_time() - start

    def control_callback(self, msg):
        t = msg.data["time"]
        self.msg_status.data["cpu_predict"] = self._call(
            "prediction", t, self.kf.propagate, self.system_model, msg.data["u"]
        )
        self.publish(t)

    def landmark_callback(self, msg):
        t = msg.data["time"]
        model = self.landmark_models[int(msg.data["index"])]
        self.msg_status.data["cpu_update"] = self._call(
            "landmark correction", t, self.kf.update, model, msg.data["y"]
        )
        self.publish(t)

    def gps_callback(self, msg):
        t = msg.data["time"]
        self.msg_status.data["cpu_update"] = self._call(
            "gps correction", t, self.kf.update, self.gps_model, msg.data["y"]
        )
        self.publish(t)

    def publish(self, t):
        x = self.kf.state()
        P = self.kf.covariance()
        uros.check_nan(self.name, t, {"x": x.params, "P": P})

        self.msg_pose.data["time"] = t
        self.msg_pose.data["t"] = x.translation
        self.msg_pose.data["q"] = x.quaternion
        self.pub_pose.publish(self.msg_pose)

        self.msg_status.data["time"] = t
        self.msg_status.data["std"] = np.sqrt(np.clip(np.diag(P), 0, None))
        self.msg_status.data["n_fail"] = self.n_fail
        self.pub_status.publish(self.msg_status)
