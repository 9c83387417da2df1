"""
Episode - one observed (sensors, command, ordinal) transition.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from upbot.commands import interpret_command_short
from upbot.errors import InvalidArgument


@dataclass(frozen=True, eq=False)
class Episode:
    """
    Immutable record of one tick.

    sensors is a read-only 1-D numpy array (int64 for sensor strings,
    object for WME input). cmd is the command issued from this state.
    """

    sensors: np.ndarray
    cmd: int
    now: int

    def __post_init__(self):
        self.sensors.setflags(write=False)

    def __len__(self) -> int:
        return len(self.sensors)

    def to_dict(self) -> dict:
        return {
            "now": self.now,
            "cmd": self.cmd,
            "sensors": [v.item() if hasattr(v, "item") else v for v in self.sensors],
        }


def compare_episodes(ep1: Episode, ep2: Episode, compare_command: bool) -> int:
    """
    Count sensor fields on which two episodes agree.

    With compare_command set, episodes issuing different commands
    never match (count 0).
    """
    if ep1 is None or ep2 is None:
        raise InvalidArgument("compare_episodes needs two episodes")
    if len(ep1.sensors) != len(ep2.sensors):
        raise InvalidArgument(
            f"sensor vectors differ in length ({len(ep1.sensors)} vs {len(ep2.sensors)})"
        )
    if compare_command and ep1.cmd != ep2.cmd:
        return 0
    return int(np.count_nonzero(ep1.sensors == ep2.sensors))


def describe_episode(ep: Episode) -> str:
    """Compact single-line form for logs."""
    bits = "".join(str(v) for v in ep.sensors)
    return f"#{ep.now} [{bits}] {interpret_command_short(ep.cmd)}"
