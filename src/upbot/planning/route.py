"""
Routes and plans - hierarchical execution state.

A Route is one level's script: an ordered list of sequences plus a
cursor. A Plan stacks one Route per level. The route at level k holds
the left-hand-side sequences of the actions in level k+1's current
sequence, so route[k].curr_seq_index always equals
route[k+1].curr_act_index.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional

from upbot.learning import Sequence, describe_sequence


class RouteState(Enum):
    """Route lifecycle."""

    EMPTY = auto()
    ACTIVE = auto()
    RECALC = auto()  # Live input diverged; plan must be rebuilt
    COMPLETE = auto()


@dataclass
class Route:
    level: int
    sequences: list[Sequence] = field(default_factory=list)
    curr_seq_index: int = 0
    curr_act_index: int = 0
    needs_recalc: bool = False

    @classmethod
    def from_sequence(cls, level: int, seq: Sequence) -> Route:
        return cls(level=level, sequences=[seq])

    @property
    def state(self) -> RouteState:
        if not self.sequences:
            return RouteState.EMPTY
        if self.curr_seq_index >= len(self.sequences):
            return RouteState.COMPLETE
        if self.needs_recalc:
            return RouteState.RECALC
        return RouteState.ACTIVE

    @property
    def is_complete(self) -> bool:
        return self.state is RouteState.COMPLETE

    @property
    def current_sequence(self) -> Optional[Sequence]:
        if 0 <= self.curr_seq_index < len(self.sequences):
            return self.sequences[self.curr_seq_index]
        return None

    @property
    def current_action(self) -> Optional[int]:
        """Action index (into this level's table) of the step being executed."""
        seq = self.current_sequence
        if seq is None or self.curr_act_index >= len(seq):
            return None
        return seq.actions[self.curr_act_index]

    def advance(self) -> bool:
        """
        Move past the current step.

        Returns:
            True when that step finished the current sequence.
        """
        seq = self.current_sequence
        if seq is None:
            return False
        self.curr_act_index += 1
        if self.curr_act_index < len(seq):
            return False
        self.curr_seq_index += 1
        self.curr_act_index = 0
        return True

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "state": self.state.name,
            "curr_seq_index": self.curr_seq_index,
            "curr_act_index": self.curr_act_index,
            "needs_recalc": self.needs_recalc,
            "sequences": [seq.to_dict() for seq in self.sequences],
        }


def describe_route(route: Route) -> str:
    lines = [
        f"Route L{route.level} {route.state.name} "
        f"at seq {route.curr_seq_index} act {route.curr_act_index}"
    ]
    for i, seq in enumerate(route.sequences):
        marker = ">" if i == route.curr_seq_index else " "
        lines.append(f" {marker} {describe_sequence(seq)}")
    return "\n".join(lines)


class Plan:
    """One Route per level, routes[0] being the one that issues commands."""

    def __init__(self, routes: list[Route]):
        self.routes = routes

    @property
    def top_level(self) -> int:
        return len(self.routes) - 1

    @property
    def is_complete(self) -> bool:
        return self.routes[-1].is_complete

    @property
    def needs_recalc(self) -> bool:
        return any(route.needs_recalc for route in self.routes)

    def to_dict(self) -> dict:
        return {
            "top_level": self.top_level,
            "complete": self.is_complete,
            "needs_recalc": self.needs_recalc,
            "routes": [route.to_dict() for route in self.routes],
        }


def describe_plan(plan: Optional[Plan]) -> str:
    if plan is None:
        return "No plan"
    return "\n".join(describe_route(route) for route in reversed(plan.routes))
