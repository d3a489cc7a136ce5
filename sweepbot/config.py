from dataclasses import dataclass
import math
from typing import Optional, Tuple

# Acknowledgements sent back by the other known sensor firmware revision
ALT_RESET_ACK = bytes([0x5A, 0x05, 0x10, 0x00, 0x6E])
ALT_SAVE_ACK = bytes([0x5A, 0x05, 0x11, 0x00, 0x6F])


# ============================================================================
# CONFIGURATION
# ============================================================================
@dataclass
class RobotConfig:
    """Robot hardware and perception configuration"""

    # --------------------------------------------------------------------- #
    # Rangefinder serial link (115200 8N1)
    # --------------------------------------------------------------------- #
    lidar_port: str = "/dev/serial0"
    baudrate: int = 115200
    read_timeout: Optional[float] = None   # None = blocking reads
    frame_rate: int = 0                    # 0 = measure on request only
    min_signal: int = 100
    distance_byte_order: str = "little"    # "big" on older protocol revisions

    # firmware dependent, see ALT_RESET_ACK / ALT_SAVE_ACK
    reset_ack: bytes = bytes([0x5A, 0x05, 0x10, 0x00, 0x6F])
    save_ack: bytes = bytes([0x5A, 0x05, 0x11, 0x00, 0x70])

    # --------------------------------------------------------------------- #
    # Sweep servo
    # --------------------------------------------------------------------- #
    servo_pin: int = 18
    servo_period_ms: int = 20
    servo_pulse_min_us: int = 500
    servo_pulse_max_us: int = 2500
    servo_settle_s: float = 0.05           # wait after each command

    # --------------------------------------------------------------------- #
    # Scan acquisition
    # --------------------------------------------------------------------- #
    scan_fov: float = math.pi * 0.02       # angle covered by one step
    slot_lock_timeout: float = 0.1         # seconds

    # --------------------------------------------------------------------- #
    # Segment extraction / wall merging
    # --------------------------------------------------------------------- #
    segment_far_range: float = 600.0
    segment_far_ratio: float = 0.01
    segment_near_tolerance: float = 5.0
    wall_slope_tolerance: float = 0.1
    wall_offset_tolerance: float = 5.0

    # --------------------------------------------------------------------- #
    # Occupancy grid
    # --------------------------------------------------------------------- #
    grid_cells: int = 50
    occupancy_divisor: int = 10            # 4 on the coarser variant

    # --------------------------------------------------------------------- #
    # Stepper drive
    # --------------------------------------------------------------------- #
    left_stepper_pins: Tuple[int, int] = (15, 14)    # DIR, STEP
    right_stepper_pins: Tuple[int, int] = (23, 24)   # DIR, STEP
    stepper_steps: int = 180               # steps per wheel revolution
    wheel_diameter: float = 125.0
    wheel_distance: float = 188.5          # between wheel contact points
    step_time_s: float = 0.0005            # half period of a step pulse

    @property
    def scan_resolution(self) -> int:
        """Number of angular steps in one sweep over [0, pi)"""
        return int(round(math.pi / self.scan_fov))
