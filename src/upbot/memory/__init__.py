"""
Memory Layer - What has happened.

Contains:
- Episode: one (sensors, command, ordinal) record
- SensorSchema: sensor string parsing and reward queries
- EpisodeStore: append-only episodic memory
- WmeSet: named/typed attribute input
"""

from .episode import Episode, compare_episodes, describe_episode
from .schema import SensorSchema
from .store import EpisodeStore
from .wme import Wme, WmeKind, WmeSet

__all__ = [
    "Episode",
    "compare_episodes",
    "describe_episode",
    "SensorSchema",
    "EpisodeStore",
    "Wme",
    "WmeKind",
    "WmeSet",
]
