import logging
import queue
import threading
import time
from dataclasses import dataclass

import numpy as np

from .messages import AgentStateMessage, MissionAnnouncement, MissionFinished

logger = logging.getLogger(__name__)


@dataclass
class ConnectionHandle:
    agent_id: int
    tx: queue.Queue   # shared inbound queue, agent -> relay
    rx: queue.Queue   # this agent's mailbox, relay -> agent


def receive(q: queue.Queue, timeout: float):
    """Bounded-wait get; raises queue.Empty when nothing arrives in time."""
    if timeout <= 0:
        return q.get_nowait()
    return q.get(timeout=timeout)


class Relay:
    """
    Mailbox-per-agent message router.

    Agent state reports arrive on one shared inbound queue and are forwarded
    to every mailbox except the sender's. Pool events (announcements and
    completions) go to every mailbox, sender included.
    """

    def __init__(self, loss_prob=0.0, seed=None, poll_timeout=0.01, period=0.01):
        if not 0.0 <= loss_prob <= 1.0:
            raise ValueError(f"loss_prob must be in [0, 1], got {loss_prob}")
        self.loss_prob = loss_prob
        self.poll_timeout = poll_timeout
        self.period = period
        self.rng = np.random.default_rng(seed)
        self.inbound: queue.Queue = queue.Queue()
        self.mailboxes: dict[int, queue.Queue] = {}
        self.pool = None
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def attach_pool(self, pool):
        self.pool = pool

    def connect(self, agent_id: int) -> ConnectionHandle:
        with self._lock:
            if agent_id in self.mailboxes:
                raise ValueError(f"agent {agent_id} is already connected")
            mailbox = queue.Queue()
            self.mailboxes[agent_id] = mailbox
        return ConnectionHandle(agent_id=agent_id, tx=self.inbound, rx=mailbox)

    def _recipients(self):
        with self._lock:
            return list(self.mailboxes.items())

    def forward_state(self, msg: AgentStateMessage) -> int:
        """Deliver a state report to every other agent. Returns deliveries made."""
        delivered = 0
        for recv_id, mailbox in self._recipients():
            if recv_id == msg.sender_id:
                continue
            if self.loss_prob > 0 and self.rng.random() < self.loss_prob:
                continue
            mailbox.put(msg)
            delivered += 1
        return delivered

    def broadcast(self, msg):
        for _, mailbox in self._recipients():
            mailbox.put(msg)

    def broadcast_missions(self, missions, full: bool = False):
        logger.debug(f"Announcing {len(missions)} missions (full={full})")
        self.broadcast(MissionAnnouncement(missions=list(missions), full=full))

    def broadcast_finished(self, mission_id: int):
        logger.info(f"Broadcasting completion of mission {mission_id}")
        self.broadcast(MissionFinished(mission_id=mission_id))

    def route(self, msg):
        if not isinstance(msg, AgentStateMessage):
            logger.warning(f"Dropping unexpected message {msg!r}")
            return
        self.forward_state(msg)
        if self.pool is not None:
            finished = self.pool.mission_to_finish(msg)
            if finished is not None:
                self.broadcast_finished(finished)

    def pump(self, timeout=None) -> int:
        """Drain the inbound queue, waiting at most timeout for each message."""
        timeout = self.poll_timeout if timeout is None else timeout
        routed = 0
        while not self._stop.is_set():
            try:
                msg = receive(self.inbound, timeout)
            except queue.Empty:
                break
            self.route(msg)
            routed += 1
        return routed

    def run(self):
        logger.info("Starting relay")
        while not self._stop.is_set():
            self.pump()
            time.sleep(self.period)
        logger.info("Relay stopped")

    def start(self):
        self._stop.clear()
        self._thread = threading.Thread(target=self.run, name="Relay", daemon=True)
        self._thread.start()

    def stop(self):
        self._stop.set()
        if self._thread:
            self._thread.join()
            self._thread = None
