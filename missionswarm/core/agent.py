import logging
import queue
import threading
import time

import numpy as np

from .allocation import decide
from .locks import RWLock
from .state import Kinematics, Mission
from ..comms.messages import AgentStateMessage, MissionAnnouncement, MissionFinished
from ..comms.network import ConnectionHandle, receive
from ..policies.base import SteeringPolicy

logger = logging.getLogger(__name__)


class Agent:
    """
    One autonomous agent.

    The kinematics and current mission are shared with the motion integrator
    and are only touched under self.lock. Peer states and known missions are
    private caches built from relay messages and are only used by the
    decision loop thread.
    """

    def __init__(
        self,
        agent_id: int,
        kinematics: Kinematics,
        connection: ConnectionHandle,
        policy: SteeringPolicy,
        poll_timeout: float = 0.01,
        cycle_sleep: float = 0.01,
    ):
        self.id = agent_id
        self.lock = RWLock()
        self._kinematics = kinematics
        self._mission: Mission | None = None
        self.connection = connection
        self.policy = policy
        self.poll_timeout = poll_timeout
        self.cycle_sleep = cycle_sleep
        self.peers: dict[int, AgentStateMessage] = {}
        self.missions: dict[int, Mission] = {}
        self.finished: set[int] = set()

    @property
    def kinematics(self) -> Kinematics:
        with self.lock.read():
            return self._kinematics.copy()

    @property
    def mission(self) -> Mission | None:
        with self.lock.read():
            return self._mission

    def update_kinematics(self, fn):
        """Replace the kinematics with fn(kinematics) under the write lock."""
        with self.lock.write():
            self._kinematics = fn(self._kinematics)

    def set_mission(self, mission: Mission | None):
        with self.lock.write():
            self._mission = mission

    def state(self) -> AgentStateMessage:
        with self.lock.read():
            return AgentStateMessage.from_state(self.id, self._kinematics, self._mission, t=time.time())

    # -- messages -----------------------------------------------------------

    def handle_message(self, message):
        if isinstance(message, AgentStateMessage):
            logger.debug(f"Agent {self.id} updating info from agent {message.sender_id}")
            self.peers[message.sender_id] = message
        elif isinstance(message, MissionAnnouncement):
            self._handle_announcement(message)
        elif isinstance(message, MissionFinished):
            self._handle_finished(message.mission_id)
        else:
            logger.warning(f"Agent {self.id} ignoring unexpected message {message!r}")

    def _handle_announcement(self, message: MissionAnnouncement):
        logger.debug(f"Agent {self.id} received {len(message.missions)} missions (full={message.full})")
        if message.full:
            self.missions = {}
        for m in message.missions:
            # an announcement can be built before a completion it arrives after
            if m.id in self.finished:
                continue
            self.missions[m.id] = m
        current = self.mission
        if message.full and current is not None and current.id not in self.missions:
            logger.info(f"Agent {self.id} dropping superseded mission {current.id}")
            self.set_mission(None)

    def _handle_finished(self, mission_id: int):
        self.finished.add(mission_id)
        if self.missions.pop(mission_id, None) is None:
            logger.debug(f"Agent {self.id} got completion of unknown mission {mission_id}")
        current = self.mission
        if current is not None and current.id == mission_id:
            logger.info(f"Agent {self.id} finished mission {mission_id}")
            self.set_mission(None)

    def drain(self) -> int:
        """
        Wait up to poll_timeout for the first message, then take whatever
        else is already queued without waiting.
        """
        handled = 0
        timeout = self.poll_timeout
        while True:
            try:
                message = receive(self.connection.rx, timeout)
            except queue.Empty:
                break
            self.handle_message(message)
            handled += 1
            timeout = 0
        return handled

    # -- decision -----------------------------------------------------------

    def check_missions(self) -> Mission | None:
        pos = self.kinematics.p
        current = self.mission
        chosen = decide(self.id, pos, current, self.missions, self.peers)
        if chosen is not current:
            if chosen is None:
                logger.debug(f"Agent {self.id} has no mission")
            else:
                logger.debug(f"Agent {self.id} chose mission {chosen}")
            self.set_mission(chosen)
        return chosen

    def steer(self) -> np.ndarray:
        k = self.kinematics
        mission = self.mission
        a = self.policy.act(self.policy.build_observation(k, mission))
        with self.lock.write():
            self._kinematics.a = np.asarray(a, dtype=float)
        if mission is None:
            logger.debug(f"Agent {self.id} acceleration is null, it has no associated mission")
        return a

    def publish(self):
        self.connection.tx.put(self.state())

    def step(self):
        """One decision cycle: drain, allocate, steer, publish."""
        self.drain()
        self.check_missions()
        self.steer()
        self.publish()

    def run(self, stop_event: threading.Event | None = None):
        logger.info(f"Starting agent {self.id}")
        while stop_event is None or not stop_event.is_set():
            self.step()
            time.sleep(self.cycle_sleep)
        logger.info(f"Agent {self.id} stopped")
