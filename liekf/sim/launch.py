import logging
import multiprocessing as mp

import numpy as np

from liekf.filters import make_filter
from liekf.models import GPSMeasurementModel, Landmark3DMeasurementModel, LieSystemModel
from liekf.state import Pose
from liekf.util import init_params as _init_params
from liekf.util import psd_factor
from . import uros
from .estimator import FilterNode
from .simulator import Simulator

_LOG = logging.getLogger(__name__)

default_params = {
    "t0": 0,
    "tf": 350,
    "n_monte_carlo": 1,
    "name": "default",
    "seed": None,
    "filters": ["ekf", "sekf", "iekf", "ukfm"],
    "filter_params": {},  # filter name -> constructor params
    "x0": [0, 0, 0, 1, 0, 0, 0],
    "P0": np.diag([1, 1, 1, np.pi / 4, np.pi / 4, np.pi / 4]),
    "enable_init_noise": True,  # draw the initial estimate from N(x0, P0)
    "velocity": [0.1, 0, 0.05, 0, 0, 0.05],
    "landmarks": [
        [2, 0, 0],
        [3, -1, -1],
        [2, -1, 1],
        [2, 1, 1],
        [2, 1, -1],
    ],
    "dt": 0.01,
    "std_odom": 3e-3,
    "std_gyro": 1e-2,
    "std_landmark": 1e-2,
    "std_gps": np.sqrt(6e-3),
    "landmark_every": 2,
    "gps_every": 10,
    "enable_noise": True,
    "log_dt": 0.1,
    "params": {},  # raw uros param overrides
}

# launch parameters forwarded to the simulator as sim/<name>
sim_params = [
    "dt",
    "std_odom",
    "std_gyro",
    "std_landmark",
    "std_gps",
    "landmark_every",
    "gps_every",
    "enable_noise",
]


def init_params(params):
    return _init_params(default_params, params)


def build_models(p):
    """
    @return: system model, landmark models (in landmark order), gps model
    """
    dt = p["dt"]
    std_u = np.array([p["std_odom"]] * 3 + [p["std_gyro"]] * 3)
    system_model = LieSystemModel(np.diag(std_u ** 2 / dt), dt)
    R = p["std_landmark"] ** 2 * np.eye(3)
    landmark_models = [Landmark3DMeasurementModel(b, R) for b in p["landmarks"]]
    gps_model = GPSMeasurementModel(p["std_gps"] ** 2 * np.eye(3))
    return system_model, landmark_models, gps_model


def _seed_sequence(seed):
    if isinstance(seed, np.random.SeedSequence):
        return seed
    return np.random.SeedSequence(seed)


def launch_sim(params):
    p = init_params(params)
    sim_seed, init_seed = _seed_sequence(p["seed"]).spawn(2)

    x0 = Pose(p["x0"])
    P0 = np.array(p["P0"], dtype=float)
    x0_est = x0
    if p["enable_init_noise"]:
        n = np.random.default_rng(init_seed).standard_normal(Pose.dim)
        x0_est = x0.plus(psd_factor(P0) @ n)

    core = uros.Core(initial_time=p["t0"])
    Simulator(core, x0, p["velocity"], p["landmarks"], sim_seed)
    system_model, landmark_models, gps_model = build_models(p)
    nodes = []
    for kind in p["filters"]:
        kf = make_filter(kind, x0_est, P0, **p["filter_params"].get(kind, {}))
        nodes.append(
            FilterNode(core, kf.kind.value, kf, system_model, landmark_models, gps_model)
        )
    logger = uros.Logger(core, p["log_dt"])
    core.init_params()
    for k in sim_params:
        core.set_param("sim/" + k, p[k])
    for k, v in p["params"].items():
        core.set_param(k, v)
    core.run(until=p["tf"])
    _LOG.info(
        "%s done, failures: %s",
        p["name"],
        ", ".join("{:s} {:d}".format(node.name, node.n_fail) for node in nodes),
    )
    return logger.get_log_as_array()


def launch_monte_carlo_sim(params):
    p = init_params(params)
    if p["n_monte_carlo"] == 1:
        d = dict(p)
        d.pop("n_monte_carlo")
        data = [launch_sim(d)]
    else:
        seeds = _seed_sequence(p["seed"]).spawn(p["n_monte_carlo"])
        new_params = []
        for i in range(p["n_monte_carlo"]):
            d = dict(p)
            d.pop("n_monte_carlo")
            d["name"] = str(i)
            d["seed"] = seeds[i]
            new_params.append(d)
        with mp.Pool(mp.cpu_count()) as pool:
            data = np.array(pool.map(launch_sim, new_params))
    return data
