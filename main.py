"""
Sweeping LIDAR mapper
Servo-swept TF-Luna -> point cloud -> walls + occupancy grid images
"""
import logging
import time

from sweepbot.config import RobotConfig
from sweepbot.lidar import TFLuna
from sweepbot.occupancy import OccupancyGrid
from sweepbot.plot import save_grid_image, save_scan_plot
from sweepbot.scanner import Scanner
from sweepbot.servo import Servo
from sweepbot.walls import find_walls

# ============================================================================
# EXAMPLE USAGE
# ============================================================================
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    log = logging.getLogger("main")

    cfg = RobotConfig()

    lidar = TFLuna(cfg)
    servo = None
    scanner = None
    try:
        lidar.configure()
        servo = Servo(cfg)

        scanner = Scanner(cfg, lidar, servo)
        scanner.start()

        last_count = 0
        while True:
            time.sleep(1.0)
            if scanner.scan_count == last_count:
                continue
            last_count = scanner.scan_count

            points = scanner.get_points()
            walls = find_walls(points, cfg)
            grid = OccupancyGrid.build(points, cfg.grid_cells, cfg.occupancy_divisor)
            log.info("Sweep %d: %d points, %d walls, %d occupied cells",
                     last_count, len(points), len(walls), int(grid.occupied.sum()))

            save_scan_plot(points, "scan.png", walls)
            save_grid_image(grid, "grid.png")
    except KeyboardInterrupt:
        log.info("Interrupted by user")
    finally:
        if scanner is not None:
            scanner.stop()
        if servo is not None:
            servo.cleanup()
        lidar.close()
