"""
Estimation error metrics, computed from simulation logs
"""
import numpy as np

from liekf.state import Pose


def pose_error(x_true: Pose, x_est: Pose):
    """
    Tangent error of the estimate, Log(x_est^-1 x_true), in the right
    tangent space of the estimate
    """
    return x_true.minus(x_est)


def weighted_norm(e, W=None):
    """
    sqrt(e^T W e), W defaults to the identity
    """
    e = np.asarray(e, dtype=float).reshape(-1)
    if W is None:
        return float(np.sqrt(e @ e))
    return float(np.sqrt(e @ np.asarray(W, dtype=float) @ e))


def pose_from_record(rec):
    return Pose(np.hstack([rec["t"], rec["q"]]))


def log_errors(log, topic, truth="truth"):
    """
    Tangent errors of a logged pose topic w.r.t. the truth, records
    logged before both topics were published are skipped

    @return:
        t: time of each row
        e: tangent errors, rows of [rho, theta]
    """
    t = []
    e = []
    for rec in log:
        if np.any(np.isnan(rec[topic]["q"])) or np.any(np.isnan(rec[truth]["q"])):
            continue
        t.append(rec["time"])
        e.append(pose_error(pose_from_record(rec[truth]), pose_from_record(rec[topic])))
    return np.array(t), np.array(e).reshape(-1, Pose.dim)


def rmse(e, axis=0):
    return np.sqrt(np.mean(np.square(e), axis=axis))


def summary(log, topics):
    """
    @return: topic -> dict of translation and rotation error statistics
    """
    res = {}
    for topic in topics:
        t, e = log_errors(log, topic)
        e_pos = np.linalg.norm(e[:, :3], axis=1)
        e_rot = np.linalg.norm(e[:, 3:], axis=1)
        res[topic] = {
            "rmse_position": float(rmse(e_pos)),
            "rmse_rotation": float(rmse(e_rot)),
            "max_position": float(np.max(e_pos)),
            "max_rotation": float(np.max(e_rot)),
            "final_error": weighted_norm(e[-1]),
        }
    return res
