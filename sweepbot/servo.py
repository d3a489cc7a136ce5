# ============================================================================
# SWEEP SERVO
# ============================================================================
import logging
import time

import lgpio

from .actuator import Actuator, ActuatorError, pulse_width_for_angle
from .config import RobotConfig

logger = logging.getLogger(__name__)


class Servo(Actuator):
    """Hobby servo on a GPIO pin driven through lgpio"""
    def __init__(self, cfg: RobotConfig, handle=None):
        self.cfg = cfg
        self.frequency = int(round(1000 / cfg.servo_period_ms))  # Hz
        try:
            self.handle = lgpio.gpiochip_open(0) if handle is None else handle
            lgpio.gpio_claim_output(self.handle, cfg.servo_pin)
        except lgpio.error as e:
            raise ActuatorError(f"Failed to claim servo pin {cfg.servo_pin}: {e}") from e
        logger.info("✓ Servo initialized on GPIO%d @ %d Hz", cfg.servo_pin, self.frequency)

    def angle(self, a: float):
        pulse = pulse_width_for_angle(a, self.cfg.servo_pulse_min_us,
                                      self.cfg.servo_pulse_max_us)
        try:
            lgpio.tx_servo(self.handle, self.cfg.servo_pin, pulse, self.frequency)
        except lgpio.error as e:
            raise ActuatorError(f"servo command {pulse}us failed: {e}") from e
        logger.debug("Servo pulse %dus for %.3f rad", pulse, a)
        # sensor must not be read before the horn has settled
        time.sleep(self.cfg.servo_settle_s)

    def cleanup(self):
        """Stop pulses and release the chip"""
        lgpio.tx_servo(self.handle, self.cfg.servo_pin, 0)
        lgpio.gpiochip_close(self.handle)
        logger.info("Servo cleaned up")
