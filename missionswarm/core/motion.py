import logging
import math
import threading
import time

from .state import Kinematics

logger = logging.getLogger(__name__)


def integrate(k: Kinematics, dt: float, retention: float) -> Kinematics:
    """
    Advance k by dt under constant acceleration with exponential drag.

    retention is the fraction of velocity kept after one unit of time, so the
    decay is the same whatever the step size.
    """
    out = k.copy()
    out.p = k.p + dt * (k.v + dt * k.a / 2.0)
    out.v = dt * k.a + k.v * math.exp(dt * math.log(retention))
    return out


class MotionIntegrator:
    """Background thread sweeping every agent's kinematics at a fixed cadence."""

    def __init__(self, retention=0.5, period=0.0001):
        if not 0.0 < retention < 1.0:
            raise ValueError(f"retention must be in (0, 1), got {retention}")
        self.retention = retention
        self.period = period
        self.agents = []
        self._agents_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def add_agent(self, agent):
        with self._agents_lock:
            self.agents.append(agent)

    def step(self, dt: float):
        with self._agents_lock:
            agents = list(self.agents)
        for agent in agents:
            agent.update_kinematics(lambda k: integrate(k, dt, self.retention))

    def run(self):
        logger.info("Starting motion integrator")
        prev_time = time.perf_counter()
        while not self._stop.is_set():
            now = time.perf_counter()
            dt = now - prev_time
            prev_time = now
            self.step(dt)
            time.sleep(self.period)
        logger.info("Motion integrator stopped")

    def start(self):
        self._stop.clear()
        self._thread = threading.Thread(target=self.run, name="MotionIntegrator", daemon=True)
        self._thread.start()

    def stop(self):
        self._stop.set()
        if self._thread:
            self._thread.join()
            self._thread = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
