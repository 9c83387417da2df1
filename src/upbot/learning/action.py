"""
Actions - induced (pattern -> command -> outcome) rules.

An ActionTable holds every action of one abstraction level. Actions that
share a pattern but were seen to lead to different outcomes are
"cousins": they belong to one CousinGroup that owns the single overall
frequency counter for the pattern.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional

from upbot.commands import interpret_command_short
from upbot.errors import InvalidArgument

NO_OUTCOME = -1  # Outcome not observed yet
NO_GROUP = -1  # Action is deterministic, has no cousins


@dataclass
class Action:
    """
    One induced rule at a given level.

    index/length describe the left-hand side: the entries
    [index - length + 1 .. index] of the level's episodic memory
    (episodes at level 0, meta-episodes above). index is the anchor,
    the entry the command is issued from.
    """

    level: int
    index: int
    length: int = 1
    command: Optional[int] = None  # None above level 0
    outcome: int = NO_OUTCOME
    freq: int = 1
    is_indeterminate: bool = False
    cousin_group: int = NO_GROUP
    contains_goal: bool = False
    contains_start: bool = False
    own_overall_freq: int = 1  # Used only while cousin_group == NO_GROUP

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "index": self.index,
            "length": self.length,
            "command": self.command,
            "outcome": self.outcome,
            "freq": self.freq,
            "indeterminate": self.is_indeterminate,
            "cousin_group": self.cousin_group,
            "goal": self.contains_goal,
            "start": self.contains_start,
        }


@dataclass
class CousinGroup:
    members: list[int] = field(default_factory=list)
    overall_freq: int = 0


class ActionTable:
    """
    All actions of one level plus the cousin groups among them.

    Actions are addressed by their index in the table; indices never
    change once handed out.
    """

    def __init__(self, level: int):
        self.level = level
        self._actions: list[Action] = []
        self._groups: list[CousinGroup] = []

    def __len__(self) -> int:
        return len(self._actions)

    def __getitem__(self, idx: int) -> Action:
        return self._actions[idx]

    def __iter__(self) -> Iterator[Action]:
        return iter(self._actions)

    def append(self, action: Action) -> int:
        if action is None:
            raise InvalidArgument("cannot add a missing action")
        if action.level != self.level:
            raise InvalidArgument(f"level-{action.level} action in level-{self.level} table")
        self._actions.append(action)
        return len(self._actions) - 1

    @property
    def group_count(self) -> int:
        return len(self._groups)

    # -------------------------------------------------------------------------
    # Frequencies
    # -------------------------------------------------------------------------

    def overall_freq(self, idx: int) -> int:
        """How often this action's pattern has been seen, any outcome."""
        action = self._actions[idx]
        if action.cousin_group == NO_GROUP:
            return action.own_overall_freq
        return self._groups[action.cousin_group].overall_freq

    def bump_overall(self, idx: int) -> None:
        action = self._actions[idx]
        if action.cousin_group == NO_GROUP:
            action.own_overall_freq += 1
        else:
            self._groups[action.cousin_group].overall_freq += 1

    def confidence(self, idx: int) -> float:
        """Fraction of pattern sightings that led to this action's outcome."""
        overall = self.overall_freq(idx)
        if overall <= 0:
            return 0.0
        return self._actions[idx].freq / overall

    # -------------------------------------------------------------------------
    # Cousins
    # -------------------------------------------------------------------------

    def cousins_of(self, idx: int) -> list[int]:
        """Members of idx's cousin group (itself included), [] when deterministic."""
        group = self._actions[idx].cousin_group
        if group == NO_GROUP:
            return []
        return list(self._groups[group].members)

    def make_cousins(self, existing_idx: int, new_idx: int) -> int:
        """
        Put a new action in the cousin group of an existing one.

        The sighting that produced the new action is counted once on the
        shared counter.

        Returns:
            The cousin group id.
        """
        existing = self._actions[existing_idx]
        new = self._actions[new_idx]
        if existing.cousin_group == NO_GROUP:
            self._groups.append(
                CousinGroup(members=[existing_idx], overall_freq=existing.own_overall_freq)
            )
            existing.cousin_group = len(self._groups) - 1
            existing.is_indeterminate = True

        group = self._groups[existing.cousin_group]
        if new.cousin_group != NO_GROUP:
            self.remove_cousin(new_idx)
        group.members.append(new_idx)
        group.overall_freq += 1
        new.cousin_group = existing.cousin_group
        new.is_indeterminate = True
        return existing.cousin_group

    def remove_cousin(self, idx: int) -> None:
        """
        Take an action out of its cousin group.

        Its sightings leave the shared counter with it. A group left with
        one member dissolves, making that member deterministic again.
        """
        action = self._actions[idx]
        if action.cousin_group == NO_GROUP:
            return
        group = self._groups[action.cousin_group]
        group.members.remove(idx)
        group.overall_freq -= action.freq
        action.own_overall_freq = action.freq
        action.cousin_group = NO_GROUP
        action.is_indeterminate = False

        if len(group.members) == 1:
            last = self._actions[group.members[0]]
            last.own_overall_freq = group.overall_freq
            last.cousin_group = NO_GROUP
            last.is_indeterminate = False
            group.members.clear()
            group.overall_freq = 0


def describe_action(action: Action, confidence: Optional[float] = None) -> str:
    """Compact single-line form for logs."""
    cmd = interpret_command_short(action.command) if action.command is not None else "--"
    flags = "".join(
        flag
        for flag, on in (("G", action.contains_goal), ("S", action.contains_start), ("I", action.is_indeterminate))
        if on
    )
    text = f"L{action.level} {action.index}[{action.length}] {cmd} -> {action.outcome} x{action.freq}"
    if confidence is not None:
        text += f" ({confidence:.2f})"
    return f"{text} {flags}".rstrip()
