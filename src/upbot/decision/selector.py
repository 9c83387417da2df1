"""
Command selector - what to send to the robot this tick.

Two policies share the same parts:
- set_command: follow the plan's scripted step whenever one is valid,
  otherwise score commands reactively.
- set_command2: like set_command, but also scores reactively mid-plan
  and abandons the route when another command looks clearly better.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from upbot.commands import MOBILE_COMMANDS, interpret_command_short
from upbot.config import RANDOM_CHANCE_FLOOR, RANDOM_CHANCE_STEP
from upbot.learning import ActionBuilder, ScoreTable, generate_score_table
from upbot.memory import Episode
from upbot.params import POLICY_DRIFT, Parameters
from upbot.planning import PlanManager, PlanStatus

logger = logging.getLogger(__name__)

SOURCE_PLAN = "plan"
SOURCE_REACTIVE = "reactive"
SOURCE_RANDOM = "random"


class CommandSelector:
    """
    Chooses one command per tick.

    Usage:
        selector = CommandSelector(builder, planner, params, np.random.default_rng(0))
        cmd = selector.choose_command(episode)
        selector.last_source   # "plan", "reactive" or "random"
    """

    def __init__(
        self,
        builder: ActionBuilder,
        planner: PlanManager,
        params: Parameters,
        rng: np.random.Generator,
    ):
        self.builder = builder
        self.planner = planner
        self.params = params
        self.rng = rng
        self.random_chance = params.random_chance

        self.last_source: Optional[str] = None
        self.last_scores: Optional[ScoreTable] = None
        self._log_count = 0

    def choose_command(self, episode: Episode) -> int:
        """Dispatch to the policy named by params.policy."""
        if self.params.policy == POLICY_DRIFT:
            cmd = self.set_command2(episode)
        else:
            cmd = self.set_command(episode)

        self._log_count += 1
        if self._log_count % 10 == 1:
            logger.info(
                f"Tick {episode.now}: {interpret_command_short(cmd)} ({self.last_source})"
            )
        return cmd

    def set_command(self, episode: Episode) -> int:
        """Scripted step if a valid plan exists, else reactive scoring."""
        if self._ensure_plan(episode):
            cmd = self.planner.take_next_step(episode)
            if cmd is not None:
                self.last_source = SOURCE_PLAN
                return cmd
        return self.reactive_command(episode)

    def set_command2(self, episode: Episode) -> int:
        """
        Like set_command, but drop the plan when live data contradicts it.

        Contradiction: the best reactive score beats the scripted command's
        reactive score by more than params.drift_margin.
        """
        if self._ensure_plan(episode) and self.planner.next_step_is_valid(episode):
            step = self.planner.current_step()
            scores = generate_score_table(self.builder, episode)
            scripted = scores.command_scores[step.command]
            best = max(scores.command_scores[cmd] for cmd in MOBILE_COMMANDS)
            if best - scripted > self.params.drift_margin:
                logger.info(
                    f"Drift: reactive score {best:.2f} beats scripted "
                    f"{interpret_command_short(step.command)} at {scripted:.2f}"
                )
                self.planner.invalidate()
                return self._pick(scores)
        return self.set_command(episode)

    def reactive_command(self, episode: Episode, scores: Optional[ScoreTable] = None) -> int:
        """Best-scoring mobile command, with occasional exploration."""
        if self.random_chance > 0 and self.rng.integers(100) < self.random_chance:
            cmd = int(self.rng.choice(MOBILE_COMMANDS))
            if self.random_chance > RANDOM_CHANCE_FLOOR:
                self.random_chance -= RANDOM_CHANCE_STEP
            self.last_source = SOURCE_RANDOM
            return cmd

        if scores is None:
            scores = generate_score_table(self.builder, episode)
        return self._pick(scores)

    def _pick(self, scores: ScoreTable) -> int:
        """Top-scoring mobile command; exact ties broken uniformly at random."""
        mobile = np.array(MOBILE_COMMANDS)
        values = scores.command_scores[mobile]
        ties = mobile[values == values.max()]
        self.last_scores = scores
        self.last_source = SOURCE_REACTIVE
        return int(self.rng.choice(ties))

    def _ensure_plan(self, episode: Episode) -> bool:
        if self.planner.has_active_plan:
            return True
        return self.planner.plan_route(episode) is PlanStatus.SUCCESS
