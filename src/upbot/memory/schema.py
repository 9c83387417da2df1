"""
Sensor schema - the fixed layout of one sensor reading.

Parses raw sensor strings into vectors and answers reward queries.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from upbot.config import GOAL_SENSOR, ROOMBA_SENSORS
from upbot.errors import MalformedInput

from .episode import Episode

_FIELD_SEP = re.compile(r"[,\s]+")


def field_value(value) -> float:
    """
    Numeric reading of one sensor value, as used for reward and score.

    Numbers (int, real) count as themselves. Char and text values
    count only when they spell a number ("1", "0.5"); any other text,
    such as "dock", reads as 0. NaN and infinities read as 0.
    """
    try:
        number = float(value)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


@dataclass(frozen=True)
class SensorSchema:
    """
    Named sensor fields plus which one signals the goal.

    Usage:
        schema = SensorSchema.roomba()
        vector = schema.parse("0 0 0 0 0 1 0 0 0 0 0 0 0 0 0 0")

        # Compact bit-string form is accepted too
        vector = schema.parse("0000010000000000")
    """

    names: tuple[str, ...]
    goal_index: int = 0
    score_index: Optional[int] = None

    @classmethod
    def roomba(cls) -> SensorSchema:
        return cls(names=ROOMBA_SENSORS, goal_index=ROOMBA_SENSORS.index(GOAL_SENSOR))

    @classmethod
    def generic(cls, num_sensors: int, goal: int = 0, score: Optional[int] = None) -> SensorSchema:
        """Schema with fields named s0..sN-1."""
        return cls(
            names=tuple(f"s{i}" for i in range(num_sensors)),
            goal_index=goal,
            score_index=score,
        )

    @property
    def num_sensors(self) -> int:
        return len(self.names)

    def index_of(self, name: str) -> int:
        return self.names.index(name)

    def parse(self, sensor_string: str) -> np.ndarray:
        """
        Turn a raw sensor string into a vector.

        Fields are integers separated by commas or whitespace. A bare
        run of digits exactly NUM_SENSORS long is read one field per digit.

        Raises:
            MalformedInput: wrong field count or non-integer field.
        """
        if not isinstance(sensor_string, str):
            raise MalformedInput(f"sensor data must be a string, got {type(sensor_string).__name__}")

        text = sensor_string.strip()
        tokens = _FIELD_SEP.split(text) if text else []
        if (
            len(tokens) == 1
            and self.num_sensors > 1
            and len(text) == self.num_sensors
            and text.isdigit()
        ):
            tokens = list(text)

        if len(tokens) != self.num_sensors:
            raise MalformedInput(
                f"expected {self.num_sensors} sensor fields, got {len(tokens)}: {sensor_string!r}"
            )
        try:
            values = [int(tok) for tok in tokens]
        except ValueError as e:
            raise MalformedInput(f"non-integer sensor field in {sensor_string!r}") from e
        return np.array(values, dtype=np.int64)

    def vector(self, values: Sequence) -> np.ndarray:
        """Validate an already-split sensor list."""
        if isinstance(values, str):
            return self.parse(values)
        if len(values) != self.num_sensors:
            raise MalformedInput(f"expected {self.num_sensors} sensor fields, got {len(values)}")
        if all(isinstance(v, (int, np.integer)) for v in values):
            return np.array(values, dtype=np.int64)
        return np.array(list(values), dtype=object)

    # -------------------------------------------------------------------------
    # Reward queries
    # -------------------------------------------------------------------------

    def episode_contains_reward(self, ep: Episode) -> bool:
        return self.get_reward(ep) != 0

    def get_reward(self, ep: Episode) -> float:
        """Reward carried by an episode (0 when it is not a goal state)."""
        return field_value(ep.sensors[self.goal_index])

    def get_score(self, ep: Episode) -> float:
        """Score field if the schema has one, else the reward."""
        if self.score_index is None:
            return self.get_reward(ep)
        return field_value(ep.sensors[self.score_index])

    def interpret_sensors_short(self, sensors: np.ndarray) -> int:
        """Pack a sensor vector into a bitmask, field 0 as the lowest bit."""
        mask = 0
        for i, value in enumerate(sensors):
            if value:
                mask |= 1 << i
        return mask
