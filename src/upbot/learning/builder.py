"""
Action/sequence builder - incremental, hierarchical induction.

Level 0 learns from raw episodes: every transition
(episode i-1, command) -> episode i becomes or reinforces an action.
Each level also grows a "current sequence" of its actions; a sequence
closes after an action that reaches a goal or is indeterminate, and the
closed sequence becomes one meta-episode of the next level up. The
same induction then runs on the meta-episode stream, up to
max_level_depth levels.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from upbot.errors import InvalidArgument
from upbot.memory import Episode, EpisodeStore, compare_episodes
from upbot.params import Parameters

from .action import NO_OUTCOME, Action, ActionTable, describe_action
from .sequence import Sequence, contains_sequence

logger = logging.getLogger(__name__)


class ActionBuilder:
    """
    Owns the action tables, sequences and meta-episodes of every level.

    Usage:
        builder = ActionBuilder(store, params)

        # After each store.add_episode():
        builder.update_all()

        builder.actions[0]        # ActionTable of level 0
        builder.sequences[0]      # closed level-0 sequences
    """

    def __init__(self, store: EpisodeStore, params: Parameters):
        self.store = store
        self.schema = store.schema
        self.params = params
        self.depth = max(1, params.max_level_depth)

        self.actions = [ActionTable(level) for level in range(self.depth)]
        self.sequences: list[list[Sequence]] = [[] for _ in range(self.depth)]
        # meta_episodes[k], k >= 1: ids of closed level-(k-1) sequences in
        # the order they happened. meta_episodes[0] is unused (the store).
        self.meta_episodes: list[list[int]] = [[] for _ in range(self.depth)]
        self._current: list[list[int]] = [[] for _ in range(self.depth)]

    @property
    def threshold(self) -> int:
        """Matching sensor fields needed, clamped to the schema width."""
        return max(1, min(self.params.num_to_match, self.schema.num_sensors))

    def highest_level(self) -> int:
        """Highest level holding any action, -1 if none."""
        for level in range(self.depth - 1, -1, -1):
            if len(self.actions[level]):
                return level
        return -1

    # -------------------------------------------------------------------------
    # Induction
    # -------------------------------------------------------------------------

    def update_all(self) -> Optional[int]:
        """
        Fold the newest episode into every level.

        Returns:
            Index of the level-0 action the latest transition matched or
            created, or None while fewer than two episodes exist.
        """
        if len(self.store) < 2:
            return None

        first = self._induce_episode_action(len(self.store) - 1)
        idx = first
        for level in range(self.depth):
            seq_id = self._extend_sequence(level, idx)
            if seq_id is None or level + 1 >= self.depth:
                break
            idx = self._induce_meta_action(level + 1, seq_id)
            if idx is None:
                break
        return first

    def add_action(self, table: ActionTable, candidate: Action, check_redundant: bool = True) -> int:
        """
        Insert a candidate action, merging it with what is already known.

        With check_redundant set, a candidate whose pattern and outcome
        match an existing action only reinforces that action. A matching
        pattern with a new outcome makes the candidate a cousin of the
        existing action (both become indeterminate and share one overall
        frequency counter).

        Returns:
            Index of the action that now represents the observation.
        """
        if table is None or candidate is None:
            raise InvalidArgument("add_action needs a table and a candidate")

        if check_redundant:
            cousin = None
            for idx, action in enumerate(table):
                if not self._same_pattern(action, candidate):
                    continue
                if self._same_outcome(action, candidate):
                    action.freq += 1
                    table.bump_overall(idx)
                    return idx
                cousin = idx

            if cousin is not None:
                new_idx = table.append(candidate)
                group = table.make_cousins(cousin, new_idx)
                logger.info(
                    f"Level {table.level}: action {new_idx} is indeterminate "
                    f"(cousin group {group}, {len(table.cousins_of(new_idx))} outcomes)"
                )
                return new_idx

        idx = table.append(candidate)
        logger.debug(f"New action {idx}: {describe_action(candidate)}")
        return idx

    def _induce_episode_action(self, outcome_idx: int) -> int:
        anchor = outcome_idx - 1
        length = max(1, min(self.params.max_len_lhs, outcome_idx))
        candidate = Action(
            level=0,
            index=anchor,
            length=length,
            command=self.store[anchor].cmd,
            outcome=outcome_idx,
            contains_goal=self.schema.episode_contains_reward(self.store[outcome_idx]),
            contains_start=self._is_start_episode(anchor - length + 1),
        )
        return self.add_action(self.actions[0], candidate)

    def _induce_meta_action(self, level: int, seq_id: int) -> Optional[int]:
        meta = self.meta_episodes[level]
        meta.append(seq_id)
        if len(meta) < 2:
            return None

        lhs = self.sequences[level - 1][meta[-2]]
        lower = self.actions[level - 1]
        candidate = Action(
            level=level,
            index=len(meta) - 2,
            outcome=len(meta) - 1,
            contains_goal=lower[lhs.actions[-1]].contains_goal,
            contains_start=lower[lhs.actions[0]].contains_start,
        )
        return self.add_action(self.actions[level], candidate)

    def _extend_sequence(self, level: int, action_idx: int) -> Optional[int]:
        """Append to the level's current sequence; return the closed sequence id, if any."""
        current = self._current[level]
        current.append(action_idx)
        action = self.actions[level][action_idx]
        if not (
            action.contains_goal
            or action.is_indeterminate
            or len(current) >= self.params.max_route_len
        ):
            return None

        seq = Sequence(level, list(current))
        current.clear()
        seq_id = contains_sequence(self.sequences[level], seq)
        if seq_id is None:
            self.sequences[level].append(seq)
            seq_id = len(self.sequences[level]) - 1
            logger.debug(f"Level {level}: new sequence {seq_id} of {len(seq)} actions")
        return seq_id

    def _is_start_episode(self, idx: int) -> bool:
        """The first episode, or the one right after a goal, is a start state."""
        return idx == 0 or self.schema.episode_contains_reward(self.store[idx - 1])

    # -------------------------------------------------------------------------
    # Matching
    # -------------------------------------------------------------------------

    def _same_pattern(self, a: Action, b: Action) -> bool:
        if a.level != b.level or a.length != b.length or a.command != b.command:
            return False
        if a.level == 0:
            return all(
                compare_episodes(self.store[a.index - k], self.store[b.index - k], True)
                >= self.threshold
                for k in range(a.length)
            )
        meta = self.meta_episodes[a.level]
        return all(meta[a.index - k] == meta[b.index - k] for k in range(a.length))

    def _same_outcome(self, a: Action, b: Action) -> bool:
        if a.outcome == NO_OUTCOME or b.outcome == NO_OUTCOME:
            return a.outcome == b.outcome
        if a.contains_goal != b.contains_goal:
            return False
        if a.level == 0:
            return (
                compare_episodes(self.store[a.outcome], self.store[b.outcome], False)
                >= self.threshold
            )
        meta = self.meta_episodes[a.level]
        return meta[a.outcome] == meta[b.outcome]

    # -------------------------------------------------------------------------
    # Queries used by planning and scoring
    # -------------------------------------------------------------------------

    def lhs_sequence(self, action: Action) -> Sequence:
        """The level-(k-1) sequence a level-k action starts by executing."""
        if action.level == 0:
            raise InvalidArgument("level-0 actions have episodes, not sequences, on the left")
        return self.sequences[action.level - 1][self.meta_episodes[action.level][action.index]]

    def leading_action(self, action: Action) -> Action:
        """The first level-0 action executed when carrying out `action`."""
        while action.level > 0:
            seq = self.lhs_sequence(action)
            action = self.actions[action.level - 1][seq.actions[0]]
        return action

    def anchor_episode(self, action: Action) -> Episode:
        return self.store[self.leading_action(action).index]

    def command_of(self, action: Action) -> int:
        return self.leading_action(action).command

    def step_count(self, action: Action) -> int:
        """Level-0 steps needed to carry out an action."""
        if action.level == 0:
            return 1
        lower = self.actions[action.level - 1]
        return sum(self.step_count(lower[i]) for i in self.lhs_sequence(action).actions)

    def match_counts(self, level: int, episode: Episode) -> np.ndarray:
        """Per action of a level: sensor fields its leading anchor shares with episode."""
        table = self.actions[level]
        if not len(table):
            return np.zeros(0, dtype=np.int64)
        anchors = self.store.sensor_matrix([self.leading_action(a).index for a in table])
        return np.count_nonzero(anchors == episode.sensors, axis=1)

    def link_matrix(self, level: int) -> np.ndarray:
        """
        links[p, q] is True when action p's outcome is where action q starts.

        Level 0 compares outcome and anchor episodes with the match
        threshold; higher levels compare meta-episode ids.
        """
        table = self.actions[level]
        n = len(table)
        links = np.zeros((n, n), dtype=bool)
        if n == 0:
            return links

        known = np.array([a.outcome != NO_OUTCOME for a in table])
        outcomes = [a.outcome if a.outcome != NO_OUTCOME else a.index for a in table]
        anchors = [a.index for a in table]
        if level == 0:
            out_m = self.store.sensor_matrix(outcomes)
            anc_m = self.store.sensor_matrix(anchors)
            for p in range(n):
                links[p] = np.count_nonzero(anc_m == out_m[p], axis=1) >= self.threshold
        else:
            meta = np.asarray(self.meta_episodes[level])
            links = meta[outcomes][:, None] == meta[anchors][None, :]
        links &= known[:, None]
        return links

    # -------------------------------------------------------------------------
    # Display
    # -------------------------------------------------------------------------

    def describe_level(self, level: int) -> list[str]:
        table = self.actions[level]
        return [
            f"{idx:4d}: {describe_action(action, table.confidence(idx))}"
            for idx, action in enumerate(table)
        ]

    def summary(self) -> dict:
        return {
            "episodes": len(self.store),
            "levels": [
                {
                    "level": level,
                    "actions": len(self.actions[level]),
                    "cousin_groups": self.actions[level].group_count,
                    "sequences": len(self.sequences[level]),
                    "meta_episodes": len(self.meta_episodes[level]),
                }
                for level in range(self.depth)
            ],
        }
