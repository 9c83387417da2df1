"""
Reactive scoring - rate commands by what followed similar situations.

A candidate action takes part when its leading anchor episode matches
the live episode (at least the match threshold of sensor fields). Its
score is confidence x discounted reward x the fraction of sensor fields
matched, so an exact match outranks a near one. Each command scores as
its best candidate.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from upbot.commands import NUM_COMMANDS
from upbot.memory import Episode

from .builder import ActionBuilder


@dataclass
class ScoreTable:
    """
    Output of generate_score_table.

    candidates[i] is a (level, action index) pair; indv_scores,
    match_counts and eligible are aligned with it. command_scores is
    indexed by command code.
    """

    candidates: list[tuple[int, int]]
    commands: np.ndarray
    indv_scores: np.ndarray
    match_counts: np.ndarray
    eligible: np.ndarray
    command_scores: np.ndarray

    @classmethod
    def empty(cls) -> ScoreTable:
        return cls(
            candidates=[],
            commands=np.zeros(0, dtype=np.int64),
            indv_scores=np.zeros(0),
            match_counts=np.zeros(0, dtype=np.int64),
            eligible=np.zeros(0, dtype=bool),
            command_scores=np.zeros(NUM_COMMANDS),
        )

    def __len__(self) -> int:
        return len(self.candidates)


def find_discounted_command_score(builder: ActionBuilder, level: int, idx: int) -> float:
    """
    Reward an action leads to, discounted by how far away it is.

    Level 0: the outcome's own reward, else DISCOUNT^d times the reward of
    the first goal episode d steps after the outcome. Higher levels:
    DISCOUNT^steps when the action reaches a goal.
    """
    discount = builder.params.discount
    action = builder.actions[level][idx]
    if level > 0:
        if not action.contains_goal:
            return 0.0
        return discount ** (builder.step_count(action) - 1)

    store = builder.store
    reward = builder.schema.get_reward(store[action.outcome])
    if reward:
        return float(reward)
    later = store.next_reward_index(action.outcome)
    if later is None:
        return 0.0
    return (discount ** (later - action.outcome)) * builder.schema.get_reward(store[later])


def generate_score_table(
    builder: ActionBuilder,
    episode: Episode,
    candidates: Optional[list[tuple[int, int]]] = None,
) -> ScoreTable:
    """
    Score candidate actions (default: every action of every level) against
    the live episode.

    An empty candidate list is not an error; every command scores 0.
    """
    if candidates is None:
        candidates = [
            (level, idx)
            for level in range(builder.depth)
            for idx in range(len(builder.actions[level]))
        ]
    if not candidates:
        return ScoreTable.empty()

    counts_by_level = {}
    n = len(candidates)
    commands = np.zeros(n, dtype=np.int64)
    indv = np.zeros(n)
    matches = np.zeros(n, dtype=np.int64)

    for i, (level, idx) in enumerate(candidates):
        if level not in counts_by_level:
            counts_by_level[level] = builder.match_counts(level, episode)
        action = builder.actions[level][idx]
        commands[i] = builder.command_of(action)
        matches[i] = counts_by_level[level][idx]
        if matches[i] >= builder.threshold:
            confidence = builder.actions[level].confidence(idx)
            closeness = matches[i] / builder.schema.num_sensors
            indv[i] = confidence * closeness * find_discounted_command_score(builder, level, idx)

    eligible = matches >= builder.threshold
    table = ScoreTable(
        candidates=list(candidates),
        commands=commands,
        indv_scores=indv,
        match_counts=matches,
        eligible=eligible,
        command_scores=np.zeros(NUM_COMMANDS),
    )
    for cmd in range(NUM_COMMANDS):
        top = find_top_match(table, cmd)
        if top is not None:
            table.command_scores[cmd] = table.indv_scores[top]
    return table


def find_top_match(table: ScoreTable, command: int) -> Optional[int]:
    """
    Best eligible candidate for a command.

    Ties on score go to the higher match count, then to the lower level
    (more concrete) action, then to the earlier candidate.

    Returns:
        Position in table.candidates, or None when nothing matches.
    """
    best = None
    best_key = None
    for i in np.flatnonzero(table.eligible & (table.commands == command)):
        level = table.candidates[i][0]
        key = (table.indv_scores[i], table.match_counts[i], -level)
        if best_key is None or key > best_key:
            best, best_key = int(i), key
    return best
