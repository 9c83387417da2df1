"""
Episode store - append-only episodic memory.

Higher layers refer to episodes by index, never by object, so the
indices handed out here stay valid for the life of the store.
"""

from __future__ import annotations

import bisect
import logging
from typing import Iterator, Optional

import numpy as np

from upbot.errors import InvalidArgument

from .episode import Episode
from .schema import SensorSchema

logger = logging.getLogger(__name__)


class EpisodeStore:
    """
    Ordered log of every episode the agent has seen.

    Usage:
        store = EpisodeStore(SensorSchema.roomba())
        idx = store.add_episode(Episode(vector, cmd, now=len(store)))
        store[idx].sensors
    """

    def __init__(self, schema: SensorSchema):
        self.schema = schema
        self._episodes: list[Episode] = []
        self._reward_indices: list[int] = []  # Sorted, for next_reward_index

    def __len__(self) -> int:
        return len(self._episodes)

    def __getitem__(self, idx: int) -> Episode:
        return self._episodes[idx]

    def __iter__(self) -> Iterator[Episode]:
        return iter(self._episodes)

    @property
    def last(self) -> Optional[Episode]:
        return self._episodes[-1] if self._episodes else None

    @property
    def reward_count(self) -> int:
        return len(self._reward_indices)

    def add_episode(self, episode: Episode) -> int:
        """
        Append an episode.

        Returns:
            Index of the new episode.

        Raises:
            InvalidArgument: missing episode, wrong sensor count, or an
                ordinal that does not follow the previous one.
        """
        if episode is None:
            raise InvalidArgument("add_episode needs an episode")
        if len(episode.sensors) != self.schema.num_sensors:
            raise InvalidArgument(
                f"episode has {len(episode.sensors)} sensors, schema needs {self.schema.num_sensors}"
            )
        if self._episodes and episode.now <= self._episodes[-1].now:
            raise InvalidArgument(
                f"episode ordinal {episode.now} does not follow {self._episodes[-1].now}"
            )

        idx = len(self._episodes)
        self._episodes.append(episode)
        if self.schema.episode_contains_reward(episode):
            self._reward_indices.append(idx)
        logger.debug(f"Episode {idx} stored (cmd={episode.cmd})")
        return idx

    def next_reward_index(self, after: int) -> Optional[int]:
        """Index of the first reward episode strictly after `after`."""
        pos = bisect.bisect_right(self._reward_indices, after)
        if pos < len(self._reward_indices):
            return self._reward_indices[pos]
        return None

    def sensor_matrix(self, indices) -> np.ndarray:
        """Stack the sensor vectors of the given episodes into rows."""
        if len(indices) == 0:
            return np.empty((0, self.schema.num_sensors), dtype=np.int64)
        return np.stack([self._episodes[i].sensors for i in indices])

    def recent(self, count: int) -> list[Episode]:
        return self._episodes[-count:] if count > 0 else []
