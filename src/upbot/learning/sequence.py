"""
Sequences - ordered chains of same-level actions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(eq=False)
class Sequence:
    """Action indices (into one level's ActionTable) in execution order."""

    level: int
    actions: list[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.actions)

    def same_as(self, other: Sequence) -> bool:
        """Structural equality: same level, same actions, same order."""
        return self.level == other.level and self.actions == other.actions

    def to_dict(self) -> dict:
        return {"level": self.level, "actions": list(self.actions)}


def contains_sequence(
    sequences: list[Sequence], seq: Sequence, ignore_self: bool = False
) -> Optional[int]:
    """
    Find a sequence structurally equal to seq.

    Args:
        sequences: Candidates to search.
        seq: Sequence to look for.
        ignore_self: Skip seq itself when it is already in the list.

    Returns:
        Index of the first match, or None.
    """
    for idx, candidate in enumerate(sequences):
        if ignore_self and candidate is seq:
            continue
        if candidate.same_as(seq):
            return idx
    return None


def describe_sequence(seq: Sequence) -> str:
    return f"L{seq.level} <" + " ".join(str(a) for a in seq.actions) + ">"
