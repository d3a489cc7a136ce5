# ============================================================================
# ACTUATOR INTERFACE
# ============================================================================
import math
from abc import ABC, abstractmethod


class ActuatorError(Exception):
    """An actuator command could not be applied"""


class Actuator(ABC):
    """Anything that can point the rangefinder at an angle"""
    @abstractmethod
    def angle(self, a: float):
        """Move to `a` radians in [0, pi]. Raises ActuatorError on failure."""
        pass


def pulse_width_for_angle(a: float, pulse_min_us: int, pulse_max_us: int) -> int:
    """Linear map of [0, pi] radians onto [pulse_min_us, pulse_max_us]"""
    a = max(0.0, min(math.pi, a))
    return pulse_min_us + int(round((pulse_max_us - pulse_min_us) * a / math.pi))
