import logging
import threading
import time

import numpy as np

from .agent import Agent
from .grid import Grid, init_grid
from .missions import MissionPool
from .motion import MotionIntegrator
from .state import Kinematics, SwarmState
from ..comms.network import Relay
from ..config import DEFAULT_CONFIG
from ..policies.pd_steering import PDSteeringPolicy

logger = logging.getLogger(__name__)


def spawn_kinematics(count: int, half_size: float, radius: float) -> list[Kinematics]:
    """
    Place agents on the interior points of a regular lattice over the grid,
    alternating their heading between 0 and pi.
    """
    if count < 0:
        raise ValueError(f"agent count must be non-negative, got {count}")
    side = int(np.ceil(np.sqrt(count))) if count else 0
    size = 2.0 * half_size
    out = []
    for n in range(count):
        i, j = divmod(n, side)
        pos = [(j + 1) * size / (side + 1) - half_size, (i + 1) * size / (side + 1) - half_size]
        out.append(Kinematics.at(pos, theta=(j % 2) * np.pi, radius=radius))
    return out


class SwarmSystem:
    """
    Owns the mission pool, relay, agents and motion integrator, and the
    threads running them. Everything is built from plain config values.
    """

    def __init__(self, cfg: dict | None = None, grid: Grid | None = None):
        self.cfg = cfg or DEFAULT_CONFIG
        grid_cfg = self.cfg["grid"]
        agents_cfg = self.cfg["agents"]
        self.grid = grid or init_grid(
            split=grid_cfg["split"],
            cell_size=grid_cfg["cell_size"],
            max_cost=grid_cfg["max_cost"],
        )
        seed = self.cfg.get("seed", 0)
        self.pool = MissionPool(
            seed=seed,
            half_size=self.grid.half_size,
            margin=agents_cfg["radius"] + self.grid.cell_size,
            completion_radius=self.cfg["missions"]["completion_radius"],
        )
        net_cfg = self.cfg["network"]
        self.relay = Relay(
            loss_prob=net_cfg.get("loss_prob", 0.0),
            seed=seed,
            poll_timeout=net_cfg.get("poll_timeout", 0.01),
            period=net_cfg.get("period", 0.01),
        )
        self.relay.attach_pool(self.pool)
        motion_cfg = self.cfg["motion"]
        self.integrator = MotionIntegrator(
            retention=motion_cfg["retention"],
            period=motion_cfg.get("period", 0.0001),
        )
        steer_cfg = self.cfg["steering"]
        self.policy = PDSteeringPolicy(omega=steer_cfg["omega"], max_accel=steer_cfg["max_accel"])
        self.agents: dict[int, Agent] = {}
        self._stop = threading.Event()
        self._threads: list[threading.Thread] = []
        self._t0 = None

    def add_agent(self, kinematics: Kinematics) -> Agent:
        agent_id = len(self.agents)
        agents_cfg = self.cfg["agents"]
        agent = Agent(
            agent_id,
            kinematics,
            self.relay.connect(agent_id),
            self.policy,
            poll_timeout=agents_cfg.get("poll_timeout", 0.01),
            cycle_sleep=agents_cfg.get("cycle_sleep", 0.01),
        )
        self.agents[agent_id] = agent
        self.integrator.add_agent(agent)
        return agent

    def spawn_agents(self, count: int | None = None) -> list[Agent]:
        agents_cfg = self.cfg["agents"]
        count = agents_cfg["count"] if count is None else count
        return [
            self.add_agent(k)
            for k in spawn_kinematics(count, self.grid.half_size, agents_cfg["radius"])
        ]

    def start(self):
        logger.info(f"Starting swarm with {len(self.agents)} agents")
        self._stop.clear()
        self._t0 = time.perf_counter()
        missions_cfg = self.cfg["missions"]
        pool_thread = threading.Thread(
            target=self.pool.run,
            args=(self.relay, len(self.agents), self._stop),
            kwargs={
                "period": missions_cfg.get("period", 0.01),
                "announce_every": missions_cfg.get("announce_every", 100),
            },
            name="MissionPool",
            daemon=True,
        )
        self._threads = [pool_thread]
        for agent in self.agents.values():
            self._threads.append(
                threading.Thread(target=agent.run, args=(self._stop,), name=f"Agent {agent.id}", daemon=True)
            )
        self.relay.start()
        self.integrator.start()
        for t in self._threads:
            t.start()

    def stop(self):
        logger.info("Stopping swarm")
        self._stop.set()
        for t in self._threads:
            t.join()
        self._threads = []
        self.relay.stop()
        self.integrator.stop()

    @property
    def elapsed(self) -> float:
        return 0.0 if self._t0 is None else time.perf_counter() - self._t0

    def snapshot(self) -> SwarmState:
        """Read-only view for renderers, loggers and metrics."""
        return SwarmState(
            agents={i: a.state() for i, a in self.agents.items()},
            missions=self.pool.snapshot(),
            t=self.elapsed,
        )
