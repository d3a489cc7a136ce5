import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
from typing import Sequence

from .geometry import Point
from .occupancy import OccupancyGrid
from .walls import Wall


# ============================================================================
# VISUALIZATION
# ============================================================================
def save_scan_plot(points: Sequence[Point], path: str, walls: Sequence[Wall] = None):
    """Scatter plot of raw points, with detected walls drawn over them"""
    fig, ax = plt.subplots(1, 1, figsize=(8, 8))
    ax.set_aspect('equal')
    ax.grid(True)
    ax.set_title('LIDAR Sweep')

    if points:
        x = np.array([p.x for p in points])
        y = np.array([p.y for p in points])
        ax.scatter(x, y, c='red', s=4, alpha=0.7, label='LIDAR scan')

    for wall in walls or []:
        for tagged in wall.segments:
            s = tagged.segment
            style = 'b-' if tagged.is_measured else 'c--'
            ax.plot([s.p1.x, s.p2.x], [s.p1.y, s.p2.y], style, linewidth=1.5)

    fig.savefig(path)
    plt.close(fig)


def save_grid_image(grid: OccupancyGrid, path: str):
    """Write the occupancy raster, one pixel per cell"""
    plt.imsave(path, grid.render(), cmap='gray', vmin=0, vmax=255)
