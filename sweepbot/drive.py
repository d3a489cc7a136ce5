# ============================================================================
# DIFFERENTIAL STEPPER DRIVE
# ============================================================================
import logging
import math
import threading
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Tuple

import lgpio

from .actuator import ActuatorError
from .config import RobotConfig

logger = logging.getLogger(__name__)


class Direction(Enum):
    FORWARD = 1
    BACKWARD = -1

    def __neg__(self):
        return Direction.BACKWARD if self is Direction.FORWARD else Direction.FORWARD


class Motor(ABC):
    """Wheel motor that turns by a given angle"""
    @abstractmethod
    def rotate(self, angle: float, direction: Direction):
        """Turn the wheel by |angle| radians, blocking until done"""
        pass

    @abstractmethod
    def distance_to_angle(self, distance: float) -> float:
        """Wheel angle (radians) that rolls the robot `distance`"""
        pass


class Stepper(Motor):
    """Stepper on a DIR/STEP driver"""
    def __init__(self, handle, pins: Tuple[int, int], steps: int,
                 circumference: float, step_time: float = 0.0005):
        self.handle = handle
        self.dir_pin, self.step_pin = pins
        self.steps = steps
        self.circumference = circumference
        self.step_time = step_time
        try:
            lgpio.gpio_claim_output(handle, self.dir_pin)
            lgpio.gpio_claim_output(handle, self.step_pin)
        except lgpio.error as e:
            raise ActuatorError(f"Failed to claim stepper pins {pins}: {e}") from e

    @classmethod
    def from_diameter(cls, handle, pins: Tuple[int, int], steps: int,
                      diameter: float, step_time: float = 0.0005) -> "Stepper":
        return cls(handle, pins, steps, math.pi * diameter, step_time)

    def step(self, count: int, direction: Direction):
        level = 1 if direction is Direction.FORWARD else 0
        lgpio.gpio_write(self.handle, self.dir_pin, level)
        for _ in range(count):
            lgpio.gpio_write(self.handle, self.step_pin, 1)
            time.sleep(self.step_time)
            lgpio.gpio_write(self.handle, self.step_pin, 0)
            time.sleep(self.step_time)

    def rotate(self, angle: float, direction: Direction):
        count = int(self.steps * abs(angle) / (2 * math.pi))
        self.step(count, direction)

    def distance_to_angle(self, distance: float) -> float:
        return distance * 2 * math.pi / self.circumference


class Drive:
    """Two wheel differential drive, both wheels moved in parallel"""
    def __init__(self, left: Motor, right: Motor, wheel_distance: float):
        self.left = left
        self.right = right
        self.wheel_distance = wheel_distance

    @classmethod
    def from_config(cls, cfg: RobotConfig) -> "Drive":
        handle = lgpio.gpiochip_open(0)
        left = Stepper.from_diameter(handle, cfg.left_stepper_pins, cfg.stepper_steps,
                                     cfg.wheel_diameter, cfg.step_time_s)
        right = Stepper.from_diameter(handle, cfg.right_stepper_pins, cfg.stepper_steps,
                                      cfg.wheel_diameter, cfg.step_time_s)
        logger.info("✓ Stepper drive initialized")
        return cls(left, right, cfg.wheel_distance)

    def _run(self, left_angle: float, left_dir: Direction,
             right_angle: float, right_dir: Direction):
        threads = [
            threading.Thread(target=self.left.rotate, args=(left_angle, left_dir)),
            threading.Thread(target=self.right.rotate, args=(right_angle, right_dir)),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

    def go(self, direction: Direction, distance: float):
        """Roll `distance` straight; returns once both wheels finished"""
        self._run(self.left.distance_to_angle(distance), direction,
                  self.right.distance_to_angle(distance), direction)

    def turn(self, angle: float):
        """Rotate in place by `angle` radians (positive = clockwise)"""
        distance = abs(angle) * self.wheel_distance / 2
        left_dir = Direction.BACKWARD if angle < 0 else Direction.FORWARD
        self._run(self.left.distance_to_angle(distance), left_dir,
                  self.right.distance_to_angle(distance), -left_dir)
        logger.debug("Turned %.1f°", math.degrees(angle))
