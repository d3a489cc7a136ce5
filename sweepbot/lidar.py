#!/usr/bin/env python3
"""
TF-Luna / TFmini single point LIDAR driver
Request/response UART protocol, one distance per request
"""

import logging
import serial
from abc import ABC, abstractmethod

from .config import RobotConfig

logger = logging.getLogger(__name__)

HEADER = 0x5A
SYNC = 0x59

MEASURE_ID = 0x04
FRAME_RATE_ID = 0x03
FACTORY_RESET_ID = 0x10
SAVE_SETTINGS_ID = 0x11

DATA_LENGTH = 9
ACK_LENGTH = 5
FRAME_RATE_ACK_LENGTH = 6


# ============================================================================
# ERRORS
# ============================================================================
class LidarError(Exception):
    """A single reading or handshake failed"""


class BadLength(LidarError):
    def __init__(self, received: int):
        super().__init__(f"a packet of wrong length was received ({received} bytes)")
        self.received = received


class BadStart(LidarError):
    def __init__(self):
        super().__init__("first bytes of a received data package were improper")


class BadChecksum(LidarError):
    def __init__(self, expected: int, received: int):
        super().__init__(f"a packet with wrong checksum was received "
                         f"(expected {expected:#04x}, got {received:#04x})")
        self.expected = expected
        self.received = received


class WeakSignal(LidarError):
    def __init__(self, strength: int):
        super().__init__(f"lidar signal is not good enough for proper reading ({strength})")
        self.strength = strength


class TransportError(LidarError):
    """The serial link failed; the original exception is kept in `inner`"""
    def __init__(self, message: str, inner: Exception = None):
        super().__init__(message)
        self.inner = inner


class AckMismatch(TransportError):
    def __init__(self, command: str, expected: bytes, received: bytes):
        super().__init__(f"{command} acknowledgement mismatch: "
                         f"expected {expected.hex(' ')}, got {received.hex(' ')}")
        self.expected = expected
        self.received = received


# ============================================================================
# FRAME HELPERS
# ============================================================================
def checksum(data: bytes) -> int:
    """Low byte of the sum of all bytes"""
    return sum(data) & 0xFF


def build_command(command_id: int, payload: bytes = b"") -> bytes:
    """Command frame: 0x5A, total length, id, payload..., checksum"""
    frame = bytes([HEADER, len(payload) + 4, command_id]) + bytes(payload)
    return frame + bytes([checksum(frame)])


MEASURE_REQUEST = build_command(MEASURE_ID)               # 5A 04 04 62
FACTORY_RESET_REQUEST = build_command(FACTORY_RESET_ID)   # 5A 04 10 6E
SAVE_SETTINGS_REQUEST = build_command(SAVE_SETTINGS_ID)   # 5A 04 11 6F


def parse_measurement(data: bytes, min_signal: int = 100,
                      byte_order: str = "little") -> float:
    """
    Validate and decode one 9 byte measurement frame

    Frame: 59 59 dist_lo dist_hi sig_lo sig_hi rsvd rsvd checksum

    Raises:
        BadLength, BadStart, BadChecksum, WeakSignal (checked in that order)
    """
    if len(data) != DATA_LENGTH:
        raise BadLength(len(data))
    if data[0] != SYNC or data[1] != SYNC:
        raise BadStart()
    expected = checksum(data[:8])
    if data[8] != expected:
        raise BadChecksum(expected, data[8])

    strength = int.from_bytes(data[4:6], "little")
    if strength < min_signal or strength == 0xFFFF:
        raise WeakSignal(strength)

    return float(int.from_bytes(data[2:4], byte_order))


# ============================================================================
# SENSOR INTERFACE
# ============================================================================
class RangeFinder(ABC):
    """Abstract base class for single point distance sensors"""
    @abstractmethod
    def read_point(self) -> float:
        """
        Returns:
            distance in the sensor's native unit

        Raises:
            LidarError on any failed reading
        """
        pass

    @abstractmethod
    def configure(self):
        """Bring the sensor into request/response measuring mode"""
        pass


class TFLuna(RangeFinder):
    """
    Driver for Benewake TF-Luna / TFmini over UART

    The sensor is put into on-demand mode (frame rate 0) by configure() and
    then answers every MEASURE_REQUEST with one 9 byte frame.
    """

    def __init__(self, cfg: RobotConfig, port: serial.Serial = None):
        """
        Args:
            cfg: Robot configuration (port, baudrate, ack patterns)
            port: Already opened serial port; opened from cfg when omitted
        """
        self.cfg = cfg
        self._read_size = DATA_LENGTH
        if port is None:
            try:
                port = serial.Serial(cfg.lidar_port, cfg.baudrate,
                                     bytesize=serial.EIGHTBITS,
                                     parity=serial.PARITY_NONE,
                                     stopbits=serial.STOPBITS_ONE,
                                     timeout=cfg.read_timeout)
            except serial.SerialException as e:
                raise TransportError(f"Failed to open {cfg.lidar_port}: {e}", e) from e
            logger.info("✓ TF-Luna connected on %s @ %d baud", cfg.lidar_port, cfg.baudrate)
        self.serial = port

    # --------------------------------------------------------------------- #
    #  Transport wrappers
    # --------------------------------------------------------------------- #
    def _write(self, data: bytes):
        try:
            self.serial.write(data)
        except (serial.SerialException, OSError) as e:
            logger.warning("UART write failed: %s", e)
            raise TransportError(f"uart has returned an error: {e}", e) from e

    def _read(self, size: int) -> bytes:
        try:
            return self.serial.read(size)
        except (serial.SerialException, OSError) as e:
            logger.warning("UART read failed: %s", e)
            raise TransportError(f"uart has returned an error: {e}", e) from e

    def _set_read_mode(self, size: int):
        """Blocking reads of `size` bytes (timeout left to the transport)"""
        self._read_size = size
        try:
            self.serial.timeout = self.cfg.read_timeout
        except (serial.SerialException, ValueError) as e:
            raise TransportError(f"could not set read mode: {e}", e) from e

    # --------------------------------------------------------------------- #
    #  Protocol
    # --------------------------------------------------------------------- #
    def read_point(self) -> float:
        # drop leftovers of a misaligned frame so the reply starts at 59 59
        try:
            self.serial.reset_input_buffer()
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"uart has returned an error: {e}", e) from e
        self._write(MEASURE_REQUEST)
        data = self._read(self._read_size)
        try:
            distance = parse_measurement(data, self.cfg.min_signal,
                                         self.cfg.distance_byte_order)
        except LidarError as e:
            logger.debug("Rejected frame %s: %s", bytes(data).hex(" "), e)
            raise
        return distance

    def configure(self):
        """
        One-shot configuration handshake:
        factory reset -> frame rate 0 -> save settings -> 9 byte read mode

        Raises:
            TransportError (AckMismatch for a wrong acknowledgement); the
            handshake is not retried.
        """
        try:
            self.serial.write_timeout = None
            self.serial.baudrate = self.cfg.baudrate
        except (serial.SerialException, ValueError) as e:
            raise TransportError(f"could not configure uart: {e}", e) from e
        self._set_read_mode(ACK_LENGTH)

        self._write(FACTORY_RESET_REQUEST)
        response = bytes(self._read(ACK_LENGTH))
        logger.info("Factory reset response: %s", response.hex(" "))
        if response != self.cfg.reset_ack:
            raise AckMismatch("factory reset", self.cfg.reset_ack, response)

        payload = self.cfg.frame_rate.to_bytes(2, "little")
        self._set_read_mode(FRAME_RATE_ACK_LENGTH)
        self._write(build_command(FRAME_RATE_ID, payload))
        response = bytes(self._read(FRAME_RATE_ACK_LENGTH))
        logger.info("Frame rate response: %s", response.hex(" "))
        if len(response) != FRAME_RATE_ACK_LENGTH or response[3] != 0 or response[4] != 0:
            expected = build_command(FRAME_RATE_ID, payload)
            raise AckMismatch("frame rate", expected, response)

        self._set_read_mode(ACK_LENGTH)
        self._write(SAVE_SETTINGS_REQUEST)
        response = bytes(self._read(ACK_LENGTH))
        logger.info("Save settings response: %s", response.hex(" "))
        if response != self.cfg.save_ack:
            raise AckMismatch("save settings", self.cfg.save_ack, response)

        self._set_read_mode(DATA_LENGTH)
        logger.info("✓ TF-Luna configured (frame rate %d)", self.cfg.frame_rate)

    def close(self):
        self.serial.close()
        logger.info("TF-Luna stopped")
