from dataclasses import dataclass, field
from ..core.state import Kinematics, Mission


@dataclass
class AgentStateMessage:
    """Value snapshot of one agent, as broadcast to its peers."""

    sender_id: int
    kinematics: Kinematics
    mission: Mission | None
    t: float = 0.0

    @classmethod
    def from_state(cls, agent_id: int, kinematics: Kinematics, mission: Mission | None, t: float = 0.0):
        return cls(
            sender_id=agent_id,
            kinematics=kinematics.copy(),
            mission=mission,
            t=t,
        )

    @property
    def pos(self):
        return self.kinematics.p

    @property
    def mission_id(self) -> int | None:
        return None if self.mission is None else self.mission.id


@dataclass
class MissionAnnouncement:
    """
    Missions published by the pool. With full=True the list is the whole
    outstanding pool and supersedes the recipient's mission cache.
    """

    missions: list[Mission] = field(default_factory=list)
    full: bool = False


@dataclass
class MissionFinished:
    mission_id: int
