import json
from pathlib import Path
from ..core.metrics import duplicate_claims, idle_agents, mean_speed, mean_target_distance
from ..core.state import SwarmState


class SwarmLogger:
    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.records = []

    def log_state(self, state: SwarmState, completed=None):
        snapshot = {
            "t": state.t,
            "agents": {
                aid: {
                    "pos": st.kinematics.p.tolist(),
                    "vel": st.kinematics.v.tolist(),
                    "acc": st.kinematics.a.tolist(),
                    "mission_id": st.mission_id,
                }
                for aid, st in state.agents.items()
            },
            "missions": {m.id: m.target.tolist() for m in state.missions},
            "metrics": {
                "duplicate_claims": duplicate_claims(state),
                "idle_agents": idle_agents(state),
                "mean_target_distance": mean_target_distance(state),
                "mean_speed": mean_speed(state),
            },
        }
        if completed is not None:
            snapshot["completed"] = completed
        self.records.append(snapshot)

    def flush(self):
        with self.path.open("w") as f:
            json.dump(self.records, f, indent=2)
