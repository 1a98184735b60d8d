"""
Mission pool.

Keeps the supply of outstanding missions at least twice the agent count and
retires missions once an agent reaches their target. The pool is the source
of truth for which missions exist; agents only ever hold cached copies.
"""

import logging
import threading
import time

import numpy as np

from .state import Mission
from ..config import AGENT_RADIUS, CELL_SIZE, GRID_HALF_SIZE

logger = logging.getLogger(__name__)


class MissionPool:
    def __init__(
        self,
        seed: int = 0,
        half_size: float = GRID_HALF_SIZE,
        margin: float = AGENT_RADIUS + CELL_SIZE,
        completion_radius: float = 10.0,
    ):
        if margin < 0 or margin >= half_size:
            raise ValueError(f"margin {margin} does not fit inside half size {half_size}")
        self.half_size = half_size
        self.margin = margin
        self.completion_radius = completion_radius
        self.rng = np.random.default_rng(seed)
        self._missions: dict[int, Mission] = {}
        self._next_id = 0
        self.retired = 0
        self._lock = threading.Lock()

    @property
    def low(self) -> float:
        return self.margin - self.half_size

    @property
    def high(self) -> float:
        return self.half_size - self.margin

    def count(self) -> int:
        # len() of a dict is atomic, no need to take the producer lock
        return len(self._missions)

    def snapshot(self) -> list[Mission]:
        with self._lock:
            return list(self._missions.values())

    def create_missions(self, n: int) -> list[Mission]:
        out = []
        # uniform() is half-open at low; step past it so targets stay strictly inset
        low = np.nextafter(self.low, self.high)
        with self._lock:
            for _ in range(n):
                target = self.rng.uniform(low, self.high, size=2)
                mission = Mission(id=self._next_id, agent=None, target=target)
                self._missions[mission.id] = mission
                self._next_id += 1
                out.append(mission)
                logger.info(f"Mission {mission.id} created with target ({target[0]:.1f}, {target[1]:.1f})")
        return out

    def replenish(self, n: int) -> list[Mission]:
        """Create batches of n missions until at least 2n are outstanding."""
        if n < 0:
            raise ValueError(f"agent count must be non-negative, got {n}")
        created = []
        while self.count() < 2 * n:
            logger.info("Creating new batch of missions")
            created.extend(self.create_missions(n))
        return created

    def retire(self, mission_id: int) -> bool:
        """Remove a mission. Returns False if it was already gone."""
        with self._lock:
            removed = self._missions.pop(mission_id, None)
            if removed is not None:
                self.retired += 1
        if removed is None:
            logger.debug(f"Mission {mission_id} already retired")
            return False
        logger.info(f"Mission {mission_id} retired")
        return True

    def mission_to_finish(self, agent_state) -> int | None:
        """
        Retire the reporting agent's mission if it has reached the target.
        Returns the retired mission id, or None.
        """
        mission = agent_state.mission
        if mission is None:
            return None
        if np.linalg.norm(agent_state.pos - mission.target) >= self.completion_radius:
            return None
        if self.retire(mission.id):
            logger.info(f"Agent {agent_state.sender_id} completed mission {mission.id}")
            return mission.id
        return None

    def run(self, relay, agent_count: int, stop_event: threading.Event, period: float = 0.01, announce_every: int = 100):
        """Replenishment loop; announces new batches and, periodically, the full pool."""
        logger.info("Starting mission pool")
        cycle = 0
        while not stop_event.is_set():
            logger.debug(f"Missions left in the pool: {self.count()}")
            new_missions = self.replenish(agent_count)
            if new_missions:
                relay.broadcast_missions(new_missions)
            cycle += 1
            if announce_every and cycle % announce_every == 0:
                relay.broadcast_missions(self.snapshot(), full=True)
            time.sleep(period)
        logger.info("Mission pool stopped")
