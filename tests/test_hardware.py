import math

import pytest

import lgpio

from sweepbot import drive as drive_module
from sweepbot import servo as servo_module
from sweepbot.actuator import ActuatorError
from sweepbot.drive import Direction, Drive, Motor, Stepper
from sweepbot.servo import Servo


class FakeChip:
    """Records lgpio calls instead of touching GPIO"""
    def __init__(self):
        self.claimed = []
        self.servo = []
        self.writes = []
        self.fail = False

    def install(self, monkeypatch, module):
        monkeypatch.setattr(module.lgpio, "gpiochip_open", lambda chip: 0)
        monkeypatch.setattr(module.lgpio, "gpiochip_close", lambda handle: None)
        monkeypatch.setattr(module.lgpio, "gpio_claim_output",
                            lambda handle, pin, *args: self.claimed.append(pin))
        monkeypatch.setattr(module.lgpio, "gpio_write",
                            lambda handle, pin, level: self.writes.append((pin, level)))
        monkeypatch.setattr(module.lgpio, "tx_servo", self._tx_servo)

    def _tx_servo(self, handle, pin, pulse, frequency=50, *args):
        if self.fail:
            raise lgpio.error("bad pulse")
        self.servo.append((pin, pulse, frequency))


def test_servo_sends_pulse(cfg, monkeypatch):
    chip = FakeChip()
    chip.install(monkeypatch, servo_module)
    servo = Servo(cfg)
    servo.angle(math.pi / 2)
    assert chip.claimed == [cfg.servo_pin]
    assert chip.servo == [(cfg.servo_pin, 1500, 50)]


def test_servo_error_wrapped(cfg, monkeypatch):
    chip = FakeChip()
    chip.install(monkeypatch, servo_module)
    servo = Servo(cfg)
    chip.fail = True
    with pytest.raises(ActuatorError):
        servo.angle(1.0)


class RecordingMotor(Motor):
    def __init__(self, circumference=100.0):
        self.circumference = circumference
        self.moves = []

    def rotate(self, angle, direction):
        self.moves.append((angle, direction))

    def distance_to_angle(self, distance):
        return distance * 2 * math.pi / self.circumference


def test_direction_negation():
    assert -Direction.FORWARD is Direction.BACKWARD
    assert -Direction.BACKWARD is Direction.FORWARD


def test_drive_go_moves_both_wheels():
    left, right = RecordingMotor(), RecordingMotor()
    Drive(left, right, 200.0).go(Direction.FORWARD, 50.0)
    assert left.moves == [(pytest.approx(math.pi), Direction.FORWARD)]
    assert right.moves == [(pytest.approx(math.pi), Direction.FORWARD)]


@pytest.mark.parametrize("angle, left_dir", [
    (math.pi / 2, Direction.FORWARD),
    (-math.pi / 2, Direction.BACKWARD),
])
def test_drive_turn_spins_wheels_opposite(angle, left_dir):
    left, right = RecordingMotor(), RecordingMotor()
    Drive(left, right, 200.0).turn(angle)
    # arc per wheel = |angle| * wheel_distance / 2
    expected = (math.pi / 2 * 100.0) * 2 * math.pi / 100.0
    assert left.moves == [(pytest.approx(expected), left_dir)]
    assert right.moves == [(pytest.approx(expected), -left_dir)]


def test_stepper_pulses(monkeypatch):
    chip = FakeChip()
    chip.install(monkeypatch, drive_module)
    stepper = Stepper(0, (15, 14), steps=180, circumference=100.0, step_time=0.0)
    stepper.rotate(1.0, Direction.BACKWARD)

    assert chip.claimed == [15, 14]
    assert chip.writes[0] == (15, 0)
    step_writes = [w for w in chip.writes if w[0] == 14]
    assert len(step_writes) == 2 * 28
    assert stepper.distance_to_angle(100.0) == pytest.approx(2 * math.pi)
