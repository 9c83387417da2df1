"""
Transport Layer - Links to the robot.

Provides:
- Transport: receive_sensor_string / send_command contract
- SerialTransport: line protocol over pyserial
- ReplayTransport: recorded sensor lines, for offline runs and tests
"""

from .base import Transport
from .replay import ReplayTransport
from .serial_link import SerialTransport

__all__ = ["Transport", "ReplayTransport", "SerialTransport"]
