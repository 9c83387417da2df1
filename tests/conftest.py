"""Pytest configuration and fixtures."""

import numpy as np
import pytest

from upbot.agent import Agent
from upbot.commands import CMD_FORWARD
from upbot.memory import Episode, EpisodeStore, SensorSchema
from upbot.params import Parameters


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def schema3():
    """Three sensor fields, field 0 is the goal."""
    return SensorSchema.generic(3, goal=0)


@pytest.fixture
def params3():
    """Exact matching on three fields, no exploration, fixed seed."""
    return Parameters(num_to_match=3, random_chance=0, seed=1)


@pytest.fixture
def agent3(params3, schema3):
    return Agent(params3, schema3)


@pytest.fixture
def store3(schema3):
    return EpisodeStore(schema3)


@pytest.fixture
def make_episode():
    """Factory for episodes from plain lists."""

    def _make(values, cmd=CMD_FORWARD, now=0):
        return Episode(np.array(values, dtype=np.int64), cmd, now)

    return _make


@pytest.fixture
def trained_agent(agent3):
    """
    Agent that has seen ([0,0,0], FORWARD) -> [1,0,0] (goal) three times.
    """
    for _ in range(3):
        agent3.record([0, 0, 0], CMD_FORWARD)
        agent3.record([1, 0, 0], CMD_FORWARD)
    return agent3
