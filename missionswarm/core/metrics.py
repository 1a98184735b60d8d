import numpy as np
from .state import SwarmState


def claim_counts(state: SwarmState) -> dict[int, int]:
    """mission id -> number of agents currently claiming it."""
    counts: dict[int, int] = {}
    for a in state.agents.values():
        if a.mission is not None:
            counts[a.mission.id] = counts.get(a.mission.id, 0) + 1
    return counts


def duplicate_claims(state: SwarmState) -> int:
    """
    Number of missions claimed by more than one agent. Transiently non-zero
    while claims propagate, zero once caches converge.
    """
    return sum(1 for n in claim_counts(state).values() if n > 1)


def idle_agents(state: SwarmState) -> int:
    return sum(1 for a in state.agents.values() if a.mission is None)


def mean_target_distance(state: SwarmState) -> float:
    """
    Average distance from each assigned agent to its mission target.
    """
    dists = [
        np.linalg.norm(a.pos - a.mission.target)
        for a in state.agents.values()
        if a.mission is not None
    ]
    if not dists:
        return 0.0
    return float(np.mean(dists))


def mean_speed(state: SwarmState) -> float:
    speeds = [np.linalg.norm(a.kinematics.v) for a in state.agents.values()]
    if not speeds:
        return 0.0
    return float(np.mean(speeds))
