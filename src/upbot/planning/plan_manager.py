"""
Plan manager - build, follow and rebuild hierarchical routes.

Planning searches from the highest populated level down. At a level it
walks outcome links backwards from every goal-reaching action until it
meets an action that starts where the robot is now, bounded by
max_route_len. Of the chains found, the one whose start best matches
the live episode wins, higher levels winning ties. It becomes the top
route; each lower route expands the current sequence above it.
Replanning is always a full rebuild.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

import numpy as np

from upbot.learning import Action, ActionBuilder, Sequence
from upbot.memory import Episode, compare_episodes
from upbot.params import Parameters

from .route import Plan, Route, describe_plan

logger = logging.getLogger(__name__)


class PlanStatus(Enum):
    """Outcome of plan_route. Everything but SUCCESS falls back to reactive scoring."""

    SUCCESS = 0
    NO_GOAL_IN_LEVEL = 1  # Actions exist but none reaches a goal
    LEVEL_NOT_POPULATED = 2  # No level has any action
    ROUTE_TOO_LONG = 3  # Goals exist but none within max_route_len of here


class PlanManager:
    """
    Owns the active Plan.

    Usage:
        planner = PlanManager(builder, params)

        if planner.plan_route(episode) is PlanStatus.SUCCESS:
            cmd = planner.take_next_step(episode)
    """

    def __init__(self, builder: ActionBuilder, params: Parameters):
        self.builder = builder
        self.params = params
        self.plan: Optional[Plan] = None
        self.plans_built = 0
        self.plans_completed = 0

    @property
    def has_active_plan(self) -> bool:
        return (
            self.plan is not None
            and not self.plan.is_complete
            and not self.plan.needs_recalc
        )

    def clear(self) -> None:
        self.plan = None

    def invalidate(self) -> None:
        """Flag the plan for a full rebuild."""
        if self.plan is not None and not self.plan.needs_recalc:
            self.plan.routes[0].needs_recalc = True
            logger.info("Route no longer matches live input, flagged for replanning")

    # -------------------------------------------------------------------------
    # Planning
    # -------------------------------------------------------------------------

    def plan_route(self, episode: Episode) -> PlanStatus:
        """
        Replace the current plan with a fresh one toward a known goal.

        Levels without actions are skipped, as are levels without a goal
        action or without a short enough chain from the live episode. A
        lower level only wins over a higher one when its chain starts
        from a strictly closer match.
        """
        self.plan = None
        populated = goal_seen = False
        best = None  # (start match count, level, chain)

        for level in range(self.builder.depth - 1, -1, -1):
            table = self.builder.actions[level]
            if not len(table):
                continue
            populated = True

            goals = [idx for idx, action in enumerate(table) if action.contains_goal]
            if not goals:
                continue
            goal_seen = True

            found = self._find_chain(level, goals, episode)
            if found is None:
                continue
            chain, match = found
            if best is None or match > best[0]:
                best = (match, level, chain)
            if match >= self.builder.schema.num_sensors:
                break

        if best is not None:
            match, level, chain = best
            self.plan = self._build_plan(level, chain)
            self.plans_built += 1
            logger.info(f"Planned {len(chain)}-step route at level {level} (start match {match})")
            logger.debug(describe_plan(self.plan))
            return PlanStatus.SUCCESS

        if goal_seen:
            return PlanStatus.ROUTE_TOO_LONG
        if populated:
            return PlanStatus.NO_GOAL_IN_LEVEL
        return PlanStatus.LEVEL_NOT_POPULATED

    def _find_chain(
        self, level: int, goals: list[int], episode: Episode
    ) -> Optional[tuple[list[int], int]]:
        """
        Shortest action chain from the live episode to a goal action.

        The walk ends at any action whose leading anchor matches the live
        episode, not only at contains_start actions: the robot replans
        mid-run, where no start state is in sight. Among equally short
        chains the closest start match wins, then a contains_start
        action, then the lowest index.

        Returns:
            (chain in execution order, match count of its first action),
            or None.
        """
        table = self.builder.actions[level]
        counts = self.builder.match_counts(level, episode)
        starts = counts >= self.builder.threshold
        if not starts.any():
            return None
        links = self.builder.link_matrix(level)

        toward_goal: dict[int, Optional[int]] = {goal: None for goal in goals}
        frontier = list(goals)
        length = 1
        while frontier and length <= self.params.max_route_len:
            hits = [idx for idx in frontier if starts[idx]]
            if hits:
                hits.sort(key=lambda idx: (-counts[idx], not table[idx].contains_start, idx))
                chain = []
                node = hits[0]
                while node is not None:
                    chain.append(node)
                    node = toward_goal[node]
                return chain, int(counts[hits[0]])

            length += 1
            previous = []
            for q in frontier:
                for p in np.flatnonzero(links[:, q]):
                    p = int(p)
                    if p not in toward_goal:
                        toward_goal[p] = q
                        previous.append(p)
            frontier = previous
        return None

    def _build_plan(self, level: int, chain: list[int]) -> Plan:
        routes: list[Optional[Route]] = [None] * (level + 1)
        routes[level] = Route.from_sequence(level, Sequence(level, list(chain)))
        for k in range(level - 1, -1, -1):
            routes[k] = self._expand(routes[k + 1])
        return Plan(routes)

    def _expand(self, upper: Route) -> Route:
        """Route one level below `upper`, covering its current sequence."""
        table = self.builder.actions[upper.level]
        sequences = [self.builder.lhs_sequence(table[idx]) for idx in upper.current_sequence.actions]
        return Route(
            level=upper.level - 1,
            sequences=sequences,
            curr_seq_index=upper.curr_act_index,
        )

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def current_step(self) -> Optional[Action]:
        """Level-0 action the plan expects to execute next."""
        if self.plan is None:
            return None
        idx = self.plan.routes[0].current_action
        if idx is None:
            return None
        return self.builder.actions[0][idx]

    def next_step_is_valid(self, episode: Episode) -> bool:
        """
        Does the live episode match where the next step starts?

        A mismatch flags the plan for recalculation.
        """
        action = self.current_step()
        if action is None:
            return False
        expected = self.builder.store[action.index]
        if compare_episodes(expected, episode, False) >= self.builder.threshold:
            return True
        self.invalidate()
        return False

    def take_next_step(self, episode: Episode) -> Optional[int]:
        """
        Command for the next scripted step, advancing the cursors.

        An invalid step triggers one full replan. Returns None when no
        valid plan remains.
        """
        if self.plan is None or self.plan.is_complete:
            return None
        if self.plan.needs_recalc or not self.next_step_is_valid(episode):
            if self.plan_route(episode) is not PlanStatus.SUCCESS:
                return None
            if not self.next_step_is_valid(episode):
                self.plan = None
                return None

        action = self.current_step()
        self._advance()
        return action.command

    def _advance(self) -> None:
        """Step routes[0]; a finished sequence steps the level above, and so on up."""
        routes = self.plan.routes
        level = 0
        while routes[level].advance() and level + 1 < len(routes):
            level += 1

        for k in range(level - 1, -1, -1):
            if routes[k].is_complete and not routes[k + 1].is_complete:
                routes[k] = self._expand(routes[k + 1])

        if self.plan.is_complete:
            self.plans_completed += 1
            logger.info(f"Route complete ({self.plans_completed} so far)")
