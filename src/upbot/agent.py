"""
Agent - the supervisor's whole decision engine for one robot.

tick() is the single entry point: sensor string in, command code out.
Everything an agent learns lives on the instance; run one Agent per
robot.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np

from upbot.commands import CMD_NO_OP, interpret_command
from upbot.decision import CommandSelector
from upbot.learning import ActionBuilder
from upbot.memory import Episode, EpisodeStore, SensorSchema, WmeSet
from upbot.params import Parameters
from upbot.planning import PlanManager, describe_plan

logger = logging.getLogger(__name__)


class Agent:
    """
    Episode store, action builder, planner and selector for one robot.

    Per tick:
    1. Parse the sensor string (MalformedInput leaves the agent untouched)
    2. Choose a command: scripted plan step or reactive scoring
    3. Store the episode (sensors + chosen command)
    4. Induce actions/sequences from the new transition

    Usage:
        agent = Agent(Parameters.load())
        cmd = agent.tick("0 0 0 0 0 1 0 0 0 0 0 0 0 0 0 0")

        # Scripted training, no decision made:
        agent.record([0, 0, 0, ...], CMD_FORWARD)
    """

    def __init__(self, params: Optional[Parameters] = None, schema: Optional[SensorSchema] = None):
        self.params = params or Parameters()
        self.schema = schema or SensorSchema.roomba()

        seed = self.params.seed if self.params.seed >= 0 else None
        self.rng = np.random.default_rng(seed)

        self.store = EpisodeStore(self.schema)
        self.builder = ActionBuilder(self.store, self.params)
        self.planner = PlanManager(self.builder, self.params)
        self.selector = CommandSelector(self.builder, self.planner, self.params, self.rng)

        self.goals_found = 0
        self._last_goal_now = 0
        logger.info(
            f"Agent ready: {self.schema.num_sensors} sensors, "
            f"match {self.builder.threshold}, {self.builder.depth} levels, "
            f"policy={self.params.policy}"
        )

    @property
    def finished(self) -> bool:
        """True once num_goals_to_find goals have been reached."""
        return self.goals_found >= self.params.num_goals_to_find

    @property
    def tick_count(self) -> int:
        return len(self.store)

    def tick(self, sensor_string: str) -> int:
        """
        Process one sensor reading and return the command to send.

        Raises:
            MalformedInput: the reading does not fit the sensor schema.
        """
        return self._decide(self.schema.parse(sensor_string))

    def tick_wme(self, wme_string: str) -> int:
        """tick() for attr:type:value WME input."""
        return self._decide(WmeSet.parse(wme_string).to_vector(self.schema))

    def record(self, sensors: Sequence, cmd: int) -> Episode:
        """Store an episode with a given command and learn from it, choosing nothing."""
        return self._commit(self.schema.vector(sensors), cmd)

    def _decide(self, sensors: np.ndarray) -> int:
        live = Episode(sensors, CMD_NO_OP, now=len(self.store))
        cmd = self.selector.choose_command(live)
        self._commit(sensors, cmd)
        logger.debug(f"Tick {live.now}: sending {interpret_command(cmd)}")
        return cmd

    def _commit(self, sensors: np.ndarray, cmd: int) -> Episode:
        episode = Episode(sensors, cmd, now=len(self.store))
        self.store.add_episode(episode)
        self.builder.update_all()

        if self.schema.episode_contains_reward(episode):
            self.goals_found += 1
            logger.info(
                f"Goal {self.goals_found} reached at tick {episode.now} "
                f"({episode.now - self._last_goal_now} ticks)"
            )
            self._last_goal_now = episode.now
            if self.finished:
                logger.info(f"Found {self.goals_found} goals, run finished")
        return episode

    def status(self) -> dict:
        """Snapshot for logging and the web interface."""
        last = self.store.last
        return {
            "ticks": self.tick_count,
            "goals_found": self.goals_found,
            "finished": self.finished,
            "last_command": None if last is None else interpret_command(last.cmd),
            "last_source": self.selector.last_source,
            "random_chance": self.selector.random_chance,
            "plans_built": self.planner.plans_built,
            "plans_completed": self.planner.plans_completed,
            "has_plan": self.planner.has_active_plan,
            **self.builder.summary(),
        }

    def describe_plan(self) -> str:
        return describe_plan(self.planner.plan)
