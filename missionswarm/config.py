"""
Configuration for the mission swarm.

All tunable parameters live in DEFAULT_CONFIG. A YAML file can override any
subset of it, optionally inheriting from another YAML file.
"""

import copy
import pathlib

import yaml


# Grid geometry (world units). The grid is centred on the origin.
CELL_SIZE = 10.0
GRID_SPLIT = 100
GRID_SIZE = GRID_SPLIT * CELL_SIZE
GRID_HALF_SIZE = GRID_SIZE / 2.0
MAX_COST = 1000.0

AGENT_RADIUS = 10.0


DEFAULT_CONFIG = {
    "seed": 0,
    "duration": 60.0,
    "render_every": 0.05,  # seconds between renderer/log frames
    "grid": {
        "cell_size": CELL_SIZE,
        "split": GRID_SPLIT,
        "max_cost": MAX_COST,
    },
    "agents": {
        "count": 4,
        "radius": AGENT_RADIUS,
        "poll_timeout": 0.01,  # bounded wait when draining the mailbox
        "cycle_sleep": 0.01,
    },
    "steering": {
        "omega": 0.5,  # natural frequency of the critically damped spring
        "max_accel": 50.0,
    },
    "motion": {
        "retention": 0.5,  # fraction of velocity kept after one second of drag
        "period": 0.0001,
    },
    "missions": {
        "completion_radius": 10.0,
        "period": 0.01,
        "announce_every": 100,  # cycles between full-pool re-announcements
    },
    "network": {
        "loss_prob": 0.0,
        "poll_timeout": 0.01,
        "period": 0.01,
    },
}


def deep_update(base: dict, override: dict) -> dict:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_update(out[k], v)
        else:
            out[k] = v
    return out


def load_config(path: pathlib.Path | None) -> dict:
    if path is None:
        return copy.deepcopy(DEFAULT_CONFIG)
    path = pathlib.Path(path)
    cfg = yaml.safe_load(path.read_text())
    if cfg is None:
        return copy.deepcopy(DEFAULT_CONFIG)
    if "inherits" in cfg:
        base_path = path.parent / cfg["inherits"]
        base_cfg = load_config(base_path)
        cfg = {k: v for k, v in cfg.items() if k != "inherits"}
        return deep_update(base_cfg, cfg)
    return deep_update(copy.deepcopy(DEFAULT_CONFIG), cfg)
