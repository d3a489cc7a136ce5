import logging
import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from .geometry import Interval, Point

logger = logging.getLogger(__name__)


# ============================================================================
# OCCUPANCY GRID - POINT DENSITY BINNING
# ============================================================================
@dataclass
class Cell:
    """One grid bucket"""
    x_span: Interval
    y_span: Interval
    point_count: int = 0


class OccupancyGrid:
    """
    cell_count x cell_count grid fitted to the bounding box of a point cloud

    Index convention: cells[ix][iy] and counts[ix, iy], ix along x.
    A cell is occupied when its point count exceeds max_count // divisor,
    frozen when the grid is built.
    """

    # --------------------------------------------------------------------- #
    #  Construction
    # --------------------------------------------------------------------- #
    def __init__(self, cell_count: int, origin: Tuple[float, float],
                 x_span: float, y_span: float):
        if cell_count < 1:
            raise ValueError(f"cell_count must be >= 1, got {cell_count}")
        self.cell_count = cell_count
        self.origin_x, self.origin_y = origin
        self.x_span = x_span
        self.y_span = y_span

        self.cells: List[List[Cell]] = []
        for ix in range(cell_count):
            x_s = self.origin_x + ix * x_span
            column = []
            for iy in range(cell_count):
                y_s = self.origin_y + iy * y_span
                column.append(Cell(Interval(x_s, x_s + x_span), Interval(y_s, y_s + y_span)))
            self.cells.append(column)

        self.max_count = 0
        self.threshold = 0

    @classmethod
    def build(cls, points: Sequence[Point], cell_count: int,
              divisor: int = 10) -> "OccupancyGrid":
        """
        Bin a point cloud and classify the cells

        Args:
            points: point cloud snapshot
            cell_count: cells per axis
            divisor: occupancy threshold is max point count // divisor
        """
        if cell_count < 1:
            raise ValueError(f"cell_count must be >= 1, got {cell_count}")
        if points:
            xs = [p.x for p in points]
            ys = [p.y for p in points]
            min_x, max_x = min(xs), max(xs)
            min_y, max_y = min(ys), max(ys)
        else:
            min_x = max_x = min_y = max_y = 0.0

        # +1 keeps the maximum inside the last cell
        x_span = (max_x - min_x + 1) / cell_count
        y_span = (max_y - min_y + 1) / cell_count
        grid = cls(cell_count, (min_x, min_y), x_span, y_span)

        max_count = 0
        for p in points:
            ix, iy = grid.cell_index(p)
            cell = grid.cells[ix][iy]
            cell.point_count += 1
            if cell.point_count > max_count:
                max_count = cell.point_count

        grid.max_count = max_count
        grid.threshold = max_count // divisor
        logger.debug("Occupancy grid %dx%d from %d points, max %d, threshold %d",
                     cell_count, cell_count, len(points), max_count, grid.threshold)
        return grid

    # --------------------------------------------------------------------- #
    #  Queries
    # --------------------------------------------------------------------- #
    def cell_index(self, p: Point) -> Tuple[int, int]:
        """Cell holding p; clamped so the bounding box edges stay inside"""
        ix = math.floor((p.x - self.origin_x) / self.x_span)
        iy = math.floor((p.y - self.origin_y) / self.y_span)
        last = self.cell_count - 1
        return max(0, min(last, ix)), max(0, min(last, iy))

    def cell(self, ix: int, iy: int) -> Cell:
        return self.cells[ix][iy]

    @property
    def counts(self) -> np.ndarray:
        """Point counts indexed [ix, iy]"""
        return np.array([[c.point_count for c in column] for column in self.cells],
                        dtype=np.int64)

    @property
    def occupied(self) -> np.ndarray:
        """Boolean mask indexed [ix, iy]"""
        return self.counts > self.threshold

    def is_occupied(self, ix: int, iy: int) -> bool:
        return self.cells[ix][iy].point_count > self.threshold

    def total_points(self) -> int:
        return int(self.counts.sum())

    # --------------------------------------------------------------------- #
    #  Visualisation
    # --------------------------------------------------------------------- #
    def render(self) -> np.ndarray:
        """
        One pixel per cell: 0 (black) occupied, 255 (white) free

        Image rows follow y and columns follow x, i.e. image[iy, ix].
        """
        return np.where(self.occupied.T, 0, 255).astype(np.uint8)

    def draw(self, ax):
        """Draw occupancy map (black = occupied, white = free)"""
        x1 = self.origin_x + self.cell_count * self.x_span
        y1 = self.origin_y + self.cell_count * self.y_span
        ax.imshow(
            self.render(),
            cmap="gray",
            origin="lower",
            extent=[self.origin_x, x1, self.origin_y, y1],
            vmin=0,
            vmax=255,
            interpolation="nearest",
        )
