import pytest

from sweepbot.config import RobotConfig
from sweepbot.lidar import checksum


class FakeSerial:
    """Serial port stand-in: records writes, serves queued responses"""
    def __init__(self, responses=()):
        self.responses = list(responses)
        self.written = []
        self.events = []
        self.baudrate = 9600
        self.timeout = 1.0
        self.write_timeout = 1.0
        self.closed = False
        self.fail_with = None

    def write(self, data):
        if self.fail_with is not None:
            raise self.fail_with
        self.written.append(bytes(data))
        self.events.append(bytes(data))
        return len(data)

    def read(self, size):
        if self.fail_with is not None:
            raise self.fail_with
        if not self.responses:
            return b""
        return self.responses.pop(0)

    def reset_input_buffer(self):
        if self.fail_with is not None:
            raise self.fail_with
        self.events.append("reset")

    def close(self):
        self.closed = True


def make_frame(distance, strength=100, byte_order="little"):
    body = bytes([0x59, 0x59]) + distance.to_bytes(2, byte_order) \
        + strength.to_bytes(2, "little") + bytes([0, 0])
    return body + bytes([checksum(body)])


@pytest.fixture
def cfg():
    return RobotConfig(servo_settle_s=0.0, step_time_s=0.0)


@pytest.fixture
def fake_serial():
    return FakeSerial()
