"""
Replay transport - feed recorded sensor lines instead of a live robot.

Useful for offline runs over a captured session: every non-blank,
non-comment line of the file is one sensor reading. Commands are kept
in memory rather than sent anywhere.
"""

from __future__ import annotations

import logging
from pathlib import Path

from upbot.errors import TransportError

from .base import Transport

logger = logging.getLogger(__name__)


class ReplayTransport(Transport):
    """
    Usage:
        link = ReplayTransport.from_file(Path("session.txt"))
        # or
        link = ReplayTransport(["0 0 0", "1 0 0"])
    """

    def __init__(self, lines: list[str]):
        stripped = (line.strip() for line in lines)
        self._lines = [line for line in stripped if line and not line.startswith("#")]
        self._pos = 0
        self.sent: list[int] = []

    @classmethod
    def from_file(cls, path: Path) -> ReplayTransport:
        try:
            text = Path(path).read_text()
        except OSError as e:
            raise TransportError(f"cannot read replay file {path}: {e}") from e
        link = cls(text.splitlines())
        logger.info(f"Replaying {len(link._lines)} readings from {path}")
        return link

    @property
    def remaining(self) -> int:
        return len(self._lines) - self._pos

    def receive_sensor_string(self) -> str:
        if self._pos >= len(self._lines):
            raise TransportError("replay exhausted")
        line = self._lines[self._pos]
        self._pos += 1
        return line

    def send_command(self, code: int) -> None:
        self.sent.append(code)
