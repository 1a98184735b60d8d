import matplotlib
import matplotlib.pyplot as plt
import numpy as np
from ..core.grid import Grid
from ..core.state import SwarmState


AGENT_COLORS = ["blue", "purple", "orange", "teal", "brown", "magenta"]


class SwarmRenderer2D:
    """Draws the static cost grid once, then agents and mission targets per frame."""

    def __init__(self, grid: Grid):
        self.grid = grid
        self.bounds = grid.bounds
        self.fig, self.ax = plt.subplots(figsize=(7, 7))
        backend = plt.get_backend().lower()
        self._interactive = backend not in {"agg", "pdf", "svg"}
        if self._interactive:
            plt.ion()
        self.agent_scat = None
        self.mission_scat = None
        self.assignment_lines = []
        self.ax.set_xlim(self.bounds[0], self.bounds[1])
        self.ax.set_ylim(self.bounds[2], self.bounds[3])
        self.ax.set_aspect("equal")
        self._draw_static()

    def _draw_static(self):
        cells = np.ma.masked_invalid(self.grid.cells)
        cmap = matplotlib.colormaps["Greys"].copy()
        cmap.set_bad("black")
        self.ax.imshow(
            cells,
            cmap=cmap,
            origin="lower",
            extent=self.bounds,
            alpha=0.4,
            zorder=0,
        )

    def render(self, swarm_state: SwarmState, completed=None):
        agents = list(swarm_state.agents.values())
        if agents:
            positions = np.array([a.pos for a in agents])
            colors = [AGENT_COLORS[a.sender_id % len(AGENT_COLORS)] for a in agents]
            if self.agent_scat is None:
                self.agent_scat = self.ax.scatter(
                    positions[:, 0], positions[:, 1], c=colors, s=40, zorder=4, label="agents"
                )
            else:
                self.agent_scat.set_offsets(positions)

        targets = np.array([m.target for m in swarm_state.missions]).reshape(-1, 2)
        if self.mission_scat is None:
            self.mission_scat = self.ax.scatter(
                targets[:, 0], targets[:, 1], c="green", marker="x", s=30, zorder=3, label="missions"
            )
        else:
            self.mission_scat.set_offsets(targets)

        for line in self.assignment_lines:
            line.remove()
        self.assignment_lines = []
        for a in agents:
            if a.mission is None:
                continue
            (line,) = self.ax.plot(
                [a.pos[0], a.mission.target[0]],
                [a.pos[1], a.mission.target[1]],
                color=AGENT_COLORS[a.sender_id % len(AGENT_COLORS)],
                lw=0.8,
                alpha=0.6,
                zorder=2,
            )
            self.assignment_lines.append(line)

        title = f"t={swarm_state.t:.2f} | missions left {len(swarm_state.missions)}"
        if completed is not None:
            title += f" | completed {completed}"
        self.ax.set_title(title)
        if self._interactive:
            plt.pause(0.001)
