import queue
import unittest

import numpy as np

from missionswarm.comms.messages import AgentStateMessage, MissionAnnouncement, MissionFinished
from missionswarm.comms.network import Relay
from missionswarm.core.missions import MissionPool
from missionswarm.core.state import Kinematics, Mission


def drain(q):
    out = []
    while True:
        try:
            out.append(q.get_nowait())
        except queue.Empty:
            return out


def state(agent_id, pos=(0.0, 0.0), mission=None):
    return AgentStateMessage.from_state(agent_id, Kinematics.at(pos), mission)


class TestRelay(unittest.TestCase):
    def setUp(self):
        self.relay = Relay(poll_timeout=0)
        self.handles = {i: self.relay.connect(i) for i in range(3)}

    def test_connect_twice_fails(self):
        with self.assertRaises(ValueError):
            self.relay.connect(0)

    def test_invalid_loss_prob(self):
        with self.assertRaises(ValueError):
            Relay(loss_prob=1.5)

    def test_state_skips_sender(self):
        self.handles[1].tx.put(state(1))
        self.assertEqual(self.relay.pump(), 1)

        self.assertEqual(drain(self.handles[1].rx), [])
        for i in (0, 2):
            msgs = drain(self.handles[i].rx)
            self.assertEqual(len(msgs), 1)
            self.assertEqual(msgs[0].sender_id, 1)

    def test_pool_events_reach_everyone(self):
        missions = [Mission(id=0, agent=None, target=np.zeros(2))]
        self.relay.broadcast_missions(missions)
        self.relay.broadcast_finished(0)
        for handle in self.handles.values():
            msgs = drain(handle.rx)
            self.assertIsInstance(msgs[0], MissionAnnouncement)
            self.assertEqual([m.id for m in msgs[0].missions], [0])
            self.assertFalse(msgs[0].full)
            self.assertEqual(msgs[1], MissionFinished(mission_id=0))

    def test_completion_report_broadcasts_finished(self):
        pool = MissionPool(seed=0, completion_radius=5.0)
        self.relay.attach_pool(pool)
        mission = pool.create_missions(1)[0].claimed_by(2)

        self.handles[2].tx.put(state(2, mission.target, mission))
        self.relay.pump()

        self.assertEqual(pool.count(), 0)
        reporter = drain(self.handles[2].rx)
        self.assertEqual(reporter, [MissionFinished(mission_id=mission.id)])
        other = drain(self.handles[0].rx)
        self.assertIsInstance(other[0], AgentStateMessage)
        self.assertEqual(other[1], MissionFinished(mission_id=mission.id))

    def test_full_loss_drops_peer_states_only(self):
        relay = Relay(loss_prob=1.0, seed=0, poll_timeout=0)
        a, b = relay.connect(0), relay.connect(1)
        a.tx.put(state(0))
        relay.pump()
        relay.broadcast_finished(3)
        self.assertEqual(drain(b.rx), [MissionFinished(mission_id=3)])

    def test_unexpected_message_is_dropped(self):
        self.handles[0].tx.put("garbage")
        with self.assertLogs("missionswarm.comms.network", level="WARNING"):
            self.relay.pump()
        for handle in self.handles.values():
            self.assertEqual(drain(handle.rx), [])

    def test_start_stop(self):
        self.relay.start()
        self.handles[0].tx.put(state(0))
        self.relay.stop()
        # either routed by the thread or still queued; never lost to a crash
        routed = len(drain(self.handles[1].rx))
        queued = len(drain(self.relay.inbound))
        self.assertEqual(routed + queued, 1)


if __name__ == '__main__':
    unittest.main()
