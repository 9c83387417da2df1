"""
Transport contract - how the supervisor talks to a robot.

The decision core never touches a transport; the controller loop
receives a sensor string, hands it to Agent.tick, and sends back the
returned command.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class Transport(ABC):
    """Base class for robot links."""

    @abstractmethod
    def receive_sensor_string(self) -> str:
        """
        Next raw sensor reading. May block.

        Returns:
            The reading, or "" when nothing arrived before a timeout.

        Raises:
            TransportError: the link is gone.
        """
        ...

    @abstractmethod
    def send_command(self, code: int) -> None:
        """
        Transmit one command code.

        Raises:
            TransportError: the command could not be sent.
        """
        ...

    def close(self) -> None:
        """Release the link. Safe to call more than once."""
