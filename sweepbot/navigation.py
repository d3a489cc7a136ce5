from .geometry import Point
from .occupancy import OccupancyGrid


# ============================================================================
# NAVIGATION GRAPH
# ============================================================================
class NavGraph:
    """Graph of traversable cells leading to a destination. Not available yet."""

    @classmethod
    def from_grid(cls, grid: OccupancyGrid, destination: Point) -> "NavGraph":
        raise NotImplementedError("navigation graph construction is not supported")
