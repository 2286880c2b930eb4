"""
A minimal publish/subscribe layer on a simpy discrete event core.

Callbacks run synchronously inside publish, so every node observing a
topic has handled a message before the publisher continues. Topics and
parameters are fixed once a Logger is attached, since the log record
layout is built from them.
"""
import copy

import numpy as np
import simpy

from . import msgs


class Core(simpy.Environment):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._params = None
        self._publishers = {}
        self._subscribers = {}
        self._declared_params = {}
        self.locked = False
        self.pub_params = Publisher(self, "params", msgs.Params)

    def check_unlocked(self, what):
        if self.locked:
            raise ValueError("cannot add {:s} after the logger is attached".format(what))

    def init_params(self):
        self._params = msgs.Params(self)

    def declare_param(self, param):
        self.check_unlocked("parameter " + param.name)
        if param.name in self._declared_params:
            raise ValueError("{:s} already declared".format(param.name))
        self._declared_params[param.name] = param

    def set_param(self, name, value):
        """
        Sets a declared parameter and publishes the parameter table

        @raises KeyError: name was never declared
        """
        if name not in self._declared_params:
            raise KeyError(name)
        if self._params is None:
            self.init_params()
        self._params.data[name] = value
        # read back, so the node sees the value cast to the declared dtype
        self._declared_params[name].value = self._params.data[name]
        self.pub_params.publish(self._params)

    def run(self, *args, **kwargs):
        if self._params is None:
            self.init_params()
        self.pub_params.publish(self._params)
        super().run(*args, **kwargs)


class Subscriber:
    def __init__(self, core: Core, topic, msg_type, callback):
        core.check_unlocked("subscriber to " + topic)
        self.topic = topic
        self.msg_type = msg_type
        self.callback = callback
        core._subscribers.setdefault(topic, []).append(self)


class Publisher:
    def __init__(self, core: Core, topic: str, msg_type):
        core.check_unlocked("publisher of " + topic)
        if topic in core._publishers:
            raise ValueError("{:s} already has a publisher".format(topic))
        self.core = core
        self.topic = topic
        self.msg_type = msg_type
        core._publishers[topic] = self

    def publish(self, msg: msgs.Msg):
        if not isinstance(msg, self.msg_type):
            raise ValueError(
                "{:s} expects msg {:s}, but got {:s}".format(
                    self.topic, str(self.msg_type), str(type(msg))
                )
            )
        for s in self.core._subscribers.get(self.topic, []):
            s.callback(msg)


class Param:
    """
    A named node parameter, the core keeps its value current
    """

    def __init__(self, core: Core, name, value, dtype):
        self.name = name
        self.value = value
        self.dtype = dtype
        core.declare_param(self)

    def get(self):
        return self.value


class Logger:
    """
    Samples the latest message of every topic every dt seconds into a
    list of records, see get_log_as_array
    """

    def __init__(self, core: Core, dt=0.1):
        self.core = core
        self.dt = dt
        self.subs = [
            Subscriber(core, topic, publisher.msg_type, self.callback(topic))
            for topic, publisher in core._publishers.items()
        ]
        self.data_latest = msgs.Log(core)
        self.data_list = []
        core.locked = True
        simpy.Process(core, self.run())

    def callback(self, topic):
        def store(msg):
            self.data_latest.data[topic] = copy.deepcopy(msg.data)

        return store

    def run(self):
        while True:
            self.data_latest.data["time"] = self.core.now
            self.data_list.append(copy.deepcopy(self.data_latest.data))
            yield simpy.Timeout(self.core, self.dt)

    def get_log_as_array(self):
        return np.array(self.data_list, dtype=self.data_latest.dtype)


def check_nan(label, t, values):
    """
    @param values: dict of name to array like
    @raises ValueError: any value contains a nan
    """
    for name, val in values.items():
        if np.any(np.isnan(np.array(val, dtype=float))):
            s = "nan in {:s} @ {:f} sec {:s} = {:s}".format(label, t, name, str(val))
            raise ValueError(s)
