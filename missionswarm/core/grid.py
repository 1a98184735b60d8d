from dataclasses import dataclass
import numpy as np

from ..config import CELL_SIZE, GRID_SPLIT, MAX_COST

UNCROSSABLE = np.inf


@dataclass
class Grid:
    cells: np.ndarray     # row-major traversal cost, UNCROSSABLE for walls
    cell_size: float = CELL_SIZE

    @property
    def width(self) -> int:
        return int(self.cells.shape[1])

    @property
    def height(self) -> int:
        return int(self.cells.shape[0])

    @property
    def half_size(self) -> float:
        return self.width * self.cell_size / 2.0

    @property
    def bounds(self):
        """[xmin, xmax, ymin, ymax], grid centred on the origin."""
        h = self.half_size
        return [-h, h, -h, h]

    def crossable(self) -> np.ndarray:
        return np.isfinite(self.cells)


def init_grid(split: int = GRID_SPLIT, cell_size: float = CELL_SIZE, max_cost: float = MAX_COST) -> Grid:
    """
    Square grid with an uncrossable border, a flat half-cost field and a
    central vertical band whose cost ramps with the row index.
    """
    cells = np.full((split, split), max_cost / 2.0)
    rows = np.arange(split)
    band = slice(int(0.4 * split) + 1, int(0.6 * split))
    cells[:, band] = (max_cost * rows / split)[:, None]
    cells[0, :] = UNCROSSABLE
    cells[-1, :] = UNCROSSABLE
    cells[:, 0] = UNCROSSABLE
    cells[:, -1] = UNCROSSABLE
    return Grid(cells=cells, cell_size=cell_size)
