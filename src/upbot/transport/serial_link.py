"""
Serial transport - line protocol over a serial port.

Protocol:
    Robot -> supervisor:  <sensor fields>\\n   (e.g. "0 0 1 0 ...")
    Supervisor -> robot:  <command code>\\n    (e.g. "1")
"""

from __future__ import annotations

import logging

import serial

from upbot.config import SERIAL_BAUDRATE, SERIAL_PORT, SERIAL_TIMEOUT
from upbot.errors import TransportError

from .base import Transport

logger = logging.getLogger(__name__)


class SerialTransport(Transport):
    """
    Robot link over pyserial.

    Usage:
        with SerialTransport("/dev/ttyUSB0") as link:
            line = link.receive_sensor_string()
            link.send_command(CMD_FORWARD)
    """

    def __init__(self, port: str = SERIAL_PORT, baudrate: int = SERIAL_BAUDRATE, timeout: float = SERIAL_TIMEOUT):
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout

        self._serial: serial.Serial | None = None
        self._lines_received = 0
        self._commands_sent = 0

    @property
    def is_connected(self) -> bool:
        return self._serial is not None and self._serial.is_open

    @property
    def lines_received(self) -> int:
        return self._lines_received

    @property
    def commands_sent(self) -> int:
        return self._commands_sent

    def connect(self) -> bool:
        """Open the serial port."""
        try:
            self._serial = serial.serial_for_url(
                self.port,
                baudrate=self.baudrate,
                timeout=self.timeout,
            )
            logger.info(f"Connected to robot on {self.port} @ {self.baudrate}")
            return True
        except serial.SerialException as e:
            logger.error(f"Failed to open {self.port}: {e}")
            self._serial = None
            return False

    def close(self) -> None:
        if self._serial:
            self._serial.close()
            self._serial = None
            logger.info(f"Disconnected from {self.port}")

    def receive_sensor_string(self) -> str:
        if not self._serial:
            raise TransportError("serial link not connected")
        try:
            raw = self._serial.readline()
        except serial.SerialException as e:
            raise TransportError(f"read from {self.port} failed: {e}") from e

        line = raw.decode(errors="ignore").strip()
        if line:
            self._lines_received += 1
            logger.debug(f"Received: {line}")
        return line

    def send_command(self, code: int) -> None:
        if not self._serial:
            raise TransportError("serial link not connected")
        try:
            self._serial.write(f"{code}\n".encode())
        except serial.SerialException as e:
            raise TransportError(f"write to {self.port} failed: {e}") from e
        self._commands_sent += 1
        logger.debug(f"Sent: {code}")

    def __enter__(self):
        if not self.connect():
            raise TransportError(f"could not open {self.port}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
