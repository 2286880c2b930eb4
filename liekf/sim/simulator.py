import numpy as np
import simpy

from liekf.state import Pose
from . import msgs
from . import uros


class Simulator:
    """
    Ground truth for a body moving with a constant twist, X <- X * Exp(v dt).

    Each tick moves the body and publishes the noisy control, then the truth
    and the unfiltered track (the noisy controls integrated without
    correction). Landmark fixes, y = X^-1 * b, follow every landmark_every
    ticks, GPS fixes, y = t, every gps_every ticks.
    """

    def __init__(self, core, x0: Pose, velocity, landmarks, seed=None):
        self.core = core

        # publications
        self.pub_truth = uros.Publisher(core, "truth", msgs.PoseMsg)
        self.pub_unfiltered = uros.Publisher(core, "unfiltered", msgs.PoseMsg)
        self.pub_control = uros.Publisher(core, "control", msgs.Control)
        self.pub_landmark = uros.Publisher(core, "landmark", msgs.LandmarkFix)
        self.pub_gps = uros.Publisher(core, "gps", msgs.Gps)

        # parameters, set through the core as sim/<name>
        def add_param(name, value, type):
            return uros.Param(self.core, "sim/" + name, value, type)

        self.dt = add_param("dt", 0.01, "f8")
        self.std_odom = add_param("std_odom", 3e-3, "f8")
        self.std_gyro = add_param("std_gyro", 1e-2, "f8")
        self.std_landmark = add_param("std_landmark", 1e-2, "f8")
        self.std_gps = add_param("std_gps", np.sqrt(6e-3), "f8")
        self.landmark_every = add_param("landmark_every", 2, "f8")
        self.gps_every = add_param("gps_every", 10, "f8")
        self.enable_noise = add_param("enable_noise", True, "?")

        # msgs
        self.msg_truth = msgs.PoseMsg()
        self.msg_unfiltered = msgs.PoseMsg()
        self.msg_control = msgs.Control()
        self.msg_landmark = msgs.LandmarkFix()
        self.msg_gps = msgs.Gps()

        # misc
        self.x0 = x0
        self.velocity = np.array(velocity, dtype=float).reshape(6)
        self.landmarks = [np.array(b, dtype=float).reshape(3) for b in landmarks]
        self.rng = np.random.default_rng(seed)
        simpy.Process(core, self.run())

    def randn(self, *args):
        return self.rng.standard_normal(*args) * self.enable_noise.get()

    @staticmethod
    def fill_pose(msg, t, x: Pose):
        msg.data["time"] = t
        msg.data["t"] = x.translation
        msg.data["q"] = x.quaternion

    def run(self):
        x = self.x0
        x_unfiltered = self.x0
        i = 0

        while True:
            t = self.core.now
            dt = self.dt.get()

            # move first, so filters propagate before the fixes of the tick,
            # the control noise is a rate noise, so it shrinks as sqrt(dt)
            std_u = np.hstack([[self.std_odom.get()] * 3, [self.std_gyro.get()] * 3])
            u_noisy = (self.velocity + self.randn(6) * std_u / np.sqrt(dt)) * dt
            x = x.plus(self.velocity * dt)
            x_unfiltered = x_unfiltered.plus(u_noisy)

            self.msg_control.data["time"] = t
            self.msg_control.data["u"] = u_noisy
            self.pub_control.publish(self.msg_control)

            self.fill_pose(self.msg_truth, t, x)
            self.pub_truth.publish(self.msg_truth)
            self.fill_pose(self.msg_unfiltered, t, x_unfiltered)
            self.pub_unfiltered.publish(self.msg_unfiltered)

            # measure landmarks
            if i % int(self.landmark_every.get()) == 0:
                x_inv = x.inverse()
                for k, b in enumerate(self.landmarks):
                    y = x_inv.act(b) + self.randn(3) * self.std_landmark.get()
                    self.msg_landmark.data["time"] = t
                    self.msg_landmark.data["index"] = k
                    self.msg_landmark.data["y"] = y
                    self.pub_landmark.publish(self.msg_landmark)

            # measure position
            if i % int(self.gps_every.get()) == 0:
                y = x.translation + self.randn(3) * self.std_gps.get()
                self.msg_gps.data["time"] = t
                self.msg_gps.data["y"] = y
                self.pub_gps.publish(self.msg_gps)

            i += 1
            yield simpy.Timeout(self.core, dt)
