"""
Sweeping scan acquisition
A servo points the single point LIDAR across [0, pi) and a background
thread keeps a shared buffer of the latest point per angle.
"""

import logging
import math
import threading
import time
from typing import List, Optional

from .actuator import Actuator, ActuatorError
from .config import RobotConfig
from .geometry import Point
from .lidar import LidarError, RangeFinder

logger = logging.getLogger(__name__)


class ScanBuffer:
    """
    Fixed size array of points, one lock per slot

    A write to slot i never blocks a reader of slot j. There is no cross
    slot ordering: a snapshot may mix points from two consecutive sweeps.
    """

    def __init__(self, size: int, lock_timeout: float = 0.1):
        self.size = size
        self.lock_timeout = lock_timeout
        self._slots: List[Optional[Point]] = [None] * size
        self._locks = [threading.Lock() for _ in range(size)]
        self._count = 0
        self._count_lock = threading.Lock()

    def write(self, index: int, point: Point) -> bool:
        """Replace slot `index`. Returns False if the slot lock was not acquired."""
        lock = self._locks[index]
        if not lock.acquire(timeout=self.lock_timeout):
            logger.debug("Slot %d busy, update skipped", index)
            return False
        try:
            self._slots[index] = point
        finally:
            lock.release()
        return True

    def read(self, index: int) -> Optional[Point]:
        with self._locks[index]:
            return self._slots[index]

    def snapshot(self) -> List[Point]:
        """Current points in angular order, empty slots left out"""
        points = []
        for i in range(self.size):
            p = self.read(i)
            if p is not None:
                points.append(p)
        return points

    def increment_count(self):
        with self._count_lock:
            self._count += 1

    @property
    def scan_count(self) -> int:
        with self._count_lock:
            return self._count


class Scanner:
    """
    Background sweep loop

    For every step: command the servo, then read the sensor. Failures of
    either are logged and the slot keeps its previous point.
    """

    def __init__(self, cfg: RobotConfig, lidar: RangeFinder, servo: Actuator):
        self.cfg = cfg
        self.lidar = lidar
        self.servo = servo
        self.resolution = cfg.scan_resolution
        self.step = math.pi / self.resolution
        self.buffer = ScanBuffer(self.resolution, cfg.slot_lock_timeout)

        self._running = False
        self._scan_thread = None

    def scan_step(self, i: int) -> bool:
        """Measure slot i. Returns True if the slot was updated."""
        angle = i * self.step
        try:
            self.servo.angle(angle)
        except ActuatorError as e:
            logger.debug("Step %d skipped, servo: %s", i, e)
            return False

        try:
            distance = self.lidar.read_point()
        except LidarError as e:
            logger.debug("Step %d skipped, lidar: %s", i, e)
            return False

        return self.buffer.write(i, Point.from_polar(distance, angle))

    def sweep(self) -> int:
        """One full pass over [0, pi). Returns the number of updated slots."""
        updated = 0
        for i in range(self.resolution):
            if self.scan_step(i):
                updated += 1
        self.buffer.increment_count()
        return updated

    def _scan_loop(self):
        while self._running:
            try:
                updated = self.sweep()
                logger.debug("Sweep %d done, %d/%d slots updated",
                             self.buffer.scan_count, updated, self.resolution)
            except Exception as e:
                if self._running:
                    logger.exception("Scan error: %s", e)
                time.sleep(0.01)

    def start(self):
        """Start sweeping in a daemon thread"""
        if self._running:
            logger.warning("Scanner already running")
            return

        self._running = True
        self._scan_thread = threading.Thread(target=self._scan_loop, daemon=True)
        self._scan_thread.start()
        logger.info("✓ Scanner started: %d steps of %.2f°",
                    self.resolution, math.degrees(self.step))

    def stop(self):
        """Finish the current sweep and join the thread (shutdown only)"""
        if not self._running:
            return

        self._running = False
        if self._scan_thread is not None:
            self._scan_thread.join(timeout=self.resolution * 2.0)
        logger.info("Scanner stopped")

    def get_points(self) -> List[Point]:
        """Snapshot of the latest point cloud (may span two sweeps)"""
        return self.buffer.snapshot()

    @property
    def scan_count(self) -> int:
        return self.buffer.scan_count
