"""
Mission allocation by local comparison.

Every function here is pure: given an agent's position, its current claim,
its mission cache and its cache of peer states, it returns the mission the
agent should hold next. Two agents looking at the same snapshot therefore
resolve a contested mission identically, which is what lets the swarm
converge without a central arbiter.

Costs are squared Euclidean distances from an agent's position to a mission
target.
"""

import logging

logger = logging.getLogger(__name__)


def peer_claims(peers: dict, self_id: int) -> dict:
    """mission id -> list of (peer id, peer cost) for every cached peer claim."""
    claims = {}
    for peer_id, state in peers.items():
        if peer_id == self_id or state.mission is None:
            continue
        cost = state.mission.cost(state.pos)
        claims.setdefault(state.mission.id, []).append((peer_id, cost))
    return claims


def nearest(pos, missions: dict, excluded=()):
    """First mission (in cache order) minimizing cost, skipping excluded ids."""
    best, best_cost = None, float("inf")
    for mission_id, mission in missions.items():
        if mission_id in excluded:
            continue
        cost = mission.cost(pos)
        if cost < best_cost:
            best, best_cost = mission, cost
    return best, best_cost


def contested_by(pos, mission, claims: dict) -> list:
    """Peers claiming mission that are strictly closer to it than pos."""
    my_cost = mission.cost(pos)
    return [(pid, c) for pid, c in claims.get(mission.id, []) if my_cost > c]


def held_by_no_farther(pos, mission, claims: dict) -> bool:
    """True if some peer claiming mission is at least as close to it as pos."""
    my_cost = mission.cost(pos)
    return any(my_cost >= c for _, c in claims.get(mission.id, []))


def acquire(agent_id: int, pos, current, missions: dict, peers: dict):
    """
    Pick the cheapest open mission, keeping the current one unless the
    candidate is strictly cheaper.

    A mission is open if no peer claims it, or if every peer claiming it is
    strictly farther away; in the latter case the peers concede when they
    next see our claim.
    """
    claims = peer_claims(peers, agent_id)
    closed = {m_id for m_id, m in missions.items() if held_by_no_farther(pos, m, claims)}
    if current is not None:
        closed.add(current.id)
    candidate, candidate_cost = nearest(pos, missions, closed)

    if current is not None:
        if candidate is None or current.cost(pos) <= candidate_cost:
            return current
        logger.debug(f"Agent {agent_id} drops mission {current.id} for closer mission {candidate.id}")
    if candidate is None:
        return None
    return candidate.claimed_by(agent_id)


def resolve_conflict(agent_id: int, pos, current, missions: dict, peers: dict):
    """
    Concede the current mission if a peer claiming it is strictly closer,
    then reselect among missions no peer claims. Equal costs keep the claim.
    """
    if current is None:
        return None
    claims = peer_claims(peers, agent_id)
    winners = contested_by(pos, current, claims)
    if not winners:
        return current

    peer_id, peer_cost = min(winners, key=lambda w: w[1])
    logger.debug(
        f"Agent {peer_id} (cost {peer_cost:.1f}) works on the same mission ({current.id}) "
        f"as agent {agent_id} (cost {current.cost(pos):.1f}), conceding"
    )
    excluded = set(claims)
    excluded.add(current.id)
    replacement, _ = nearest(pos, missions, excluded)
    if replacement is None:
        logger.debug(f"Agent {agent_id} did not reassign itself")
        return None
    logger.debug(f"Agent {agent_id} reassigned itself to {replacement}")
    return replacement.claimed_by(agent_id)


def decide(agent_id: int, pos, current, missions: dict, peers: dict):
    """One allocation round: acquisition followed by conflict resolution."""
    chosen = acquire(agent_id, pos, current, missions, peers)
    return resolve_conflict(agent_id, pos, chosen, missions, peers)
