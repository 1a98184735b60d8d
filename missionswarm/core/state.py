import dataclasses
from dataclasses import dataclass, field
import numpy as np


@dataclass
class Kinematics:
    p: np.ndarray        # position, shape (2,)
    v: np.ndarray        # velocity
    a: np.ndarray        # commanded acceleration
    theta: float = 0.0   # heading, set at spawn only
    radius: float = 10.0

    @classmethod
    def at(cls, pos, vel=None, theta: float = 0.0, radius: float = 10.0):
        p = np.array(pos, dtype=float)
        v = np.zeros(2) if vel is None else np.array(vel, dtype=float)
        return cls(p=p, v=v, a=np.zeros(2), theta=theta, radius=radius)

    def copy(self) -> "Kinematics":
        return Kinematics(
            p=self.p.copy(),
            v=self.v.copy(),
            a=self.a.copy(),
            theta=self.theta,
            radius=self.radius,
        )


@dataclass(frozen=True, eq=False)
class Mission:
    id: int
    agent: int | None
    target: np.ndarray

    def claimed_by(self, agent_id: int) -> "Mission":
        return dataclasses.replace(self, agent=agent_id)

    def cost(self, pos) -> float:
        """Squared distance from pos to the target."""
        d = self.target - pos
        return float(d @ d)

    def __str__(self):
        agent = "None" if self.agent is None else self.agent
        return f"[id: {self.id}, agent: {agent}, target: ({self.target[0]:.1f}, {self.target[1]:.1f})]"


@dataclass
class SwarmState:
    agents: dict     # agent id -> AgentStateMessage
    missions: list[Mission] = field(default_factory=list)
    t: float = 0.0
