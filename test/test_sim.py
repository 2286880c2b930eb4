import numpy as np
import pytest

from liekf import metrics
from liekf.sim import launch, msgs, uros
from liekf.sim.simulator import Simulator
from liekf.state import Pose

filters = ["ekf", "sekf", "iekf", "ukfm"]


def test_sim():
    data = launch.launch_sim(
        {"tf": 2, "seed": 0, "enable_init_noise": False, "name": "test"}
    )
    assert data.dtype.names[0] == "time"
    assert len(data) > 10

    # bounded once the initial uncertainty is resolved
    res = metrics.summary(
        data[data["time"] > 1], [name + "_pose" for name in filters] + ["unfiltered"]
    )
    for name in filters:
        assert res[name + "_pose"]["max_position"] < 0.1
        assert res[name + "_pose"]["max_rotation"] < 0.1
        assert data[-1][name + "_status"]["n_fail"] == 0
        assert np.all(np.isfinite(data[-1][name + "_status"]["std"]))
        t, e = metrics.log_errors(data, name + "_pose")
        assert np.all(np.isfinite(e))


def test_sim_init_noise():
    P0 = np.diag([1e-2] * 3 + [1e-2] * 3)
    data = launch.launch_sim({"tf": 2, "seed": 1, "P0": P0})
    for name in filters:
        t, e = metrics.log_errors(data, name + "_pose")
        assert np.all(np.isfinite(e))
        assert metrics.weighted_norm(e[-1]) < 0.05


def test_sim_no_noise():
    data = launch.launch_sim(
        {"tf": 1, "enable_noise": False, "enable_init_noise": False, "filters": ["ekf"]}
    )
    t, e = metrics.log_errors(data, "ekf_pose")
    assert np.max(np.abs(e)) < 1e-9
    t, e = metrics.log_errors(data, "unfiltered")
    assert np.max(np.abs(e)) < 1e-9


def test_monte_carlo():
    data = launch.launch_monte_carlo_sim(
        {"tf": 0.5, "n_monte_carlo": 2, "seed": 2, "filters": ["ekf"]}
    )
    assert len(data) == 2
    assert not np.allclose(data[0]["unfiltered"]["t"], data[1]["unfiltered"]["t"])


def test_params():
    with pytest.raises(KeyError):
        launch.launch_sim({"foo": 1})
    with pytest.raises(KeyError):
        launch.launch_sim({"tf": 0.1, "params": {"sim/foo": 1}})


def test_uros():
    core = uros.Core()
    pub = uros.Publisher(core, "gps", msgs.Gps)
    received = []
    uros.Subscriber(core, "gps", msgs.Gps, received.append)
    msg = msgs.Gps()
    assert np.all(np.isnan(msg.data["y"]))
    pub.publish(msg)
    assert received == [msg]
    with pytest.raises(ValueError):
        pub.publish(msgs.Control())
    with pytest.raises(ValueError):
        uros.Publisher(core, "gps", msgs.Gps)
    with pytest.raises(ValueError):
        uros.check_nan("test", 0, {"y": msg.data["y"]})
    uros.check_nan("test", 0, {"y": [1, 2, 3]})


def test_simulator_moves_before_measuring():
    core = uros.Core()
    sim = Simulator(core, Pose.identity(), [0.1, 0, 0.05, 0, 0, 0.05], [[2, 0, 0]], seed=0)
    received = []
    for topic, msg_type in [
        ("control", msgs.Control),
        ("landmark", msgs.LandmarkFix),
        ("gps", msgs.Gps),
    ]:
        cb = lambda msg, topic=topic: received.append((topic, float(msg.data["time"])))
        uros.Subscriber(core, topic, msg_type, cb)
    core.set_param("sim/enable_noise", False)
    assert not sim.enable_noise.get()
    core.run(until=0.105)

    # every tick opens with its control, fixes at t = 0 included
    assert received[0] == ("control", 0)
    t_control = [t for topic, t in received if topic == "control"]
    assert len(t_control) == 11
    last_control = None
    for topic, t in received:
        if topic == "control":
            last_control = t
        else:
            assert last_control == t
    assert sum(topic == "gps" for topic, t in received) == 2
    assert sum(topic == "landmark" for topic, t in received) == 6


def test_params_reach_nodes():
    core = uros.Core()
    p = uros.Param(core, "node/gain", 1.0, "f8")
    tables = []
    uros.Subscriber(core, "params", msgs.Params, tables.append)
    core.set_param("node/gain", 2)
    assert p.get() == 2.0
    assert len(tables) == 1 and tables[0].data["node/gain"] == 2.0
    with pytest.raises(KeyError):
        core.set_param("node/offset", 0)
    with pytest.raises(ValueError):
        uros.Param(core, "node/gain", 1.0, "f8")

    # the log layout is fixed once the logger is attached
    uros.Logger(core, 0.1)
    with pytest.raises(ValueError):
        uros.Param(core, "node/offset", 0.0, "f8")
    with pytest.raises(ValueError):
        uros.Publisher(core, "gps", msgs.Gps)


@pytest.mark.slow
def test_long_run():
    """
    Over several noise seeds the error stays bounded, and once settled the
    invariant and unscented filters do at least as well as the ekf on
    rotation
    """
    data = launch.launch_monte_carlo_sim({"tf": 30, "n_monte_carlo": 3, "seed": 5})
    topics = [name + "_pose" for name in filters] + ["unfiltered"]
    rmse_rotation = {topic: [] for topic in topics}
    for log in data:
        res = metrics.summary(log[log["time"] > 10], topics)
        for name in filters:
            assert log[-1][name + "_status"]["n_fail"] == 0
            assert res[name + "_pose"]["max_position"] < 0.1
            assert res[name + "_pose"]["max_rotation"] < 0.1
        for topic in topics:
            rmse_rotation[topic].append(res[topic]["rmse_rotation"])

    ekf = np.mean(rmse_rotation["ekf_pose"])
    assert ekf < np.mean(rmse_rotation["unfiltered"])
    for name in ["iekf", "ukfm"]:
        assert np.mean(rmse_rotation[name + "_pose"]) <= 1.05 * ekf
