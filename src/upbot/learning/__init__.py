"""
Learning Layer - What tends to happen.

Contains:
- Action / ActionTable: induced rules and cousin groups, per level
- Sequence: chains of same-level actions
- ActionBuilder: incremental hierarchical induction
- Scoring: reactive command scores from matching actions
"""

from .action import NO_GROUP, NO_OUTCOME, Action, ActionTable, CousinGroup, describe_action
from .builder import ActionBuilder
from .scoring import ScoreTable, find_discounted_command_score, find_top_match, generate_score_table
from .sequence import Sequence, contains_sequence, describe_sequence

__all__ = [
    "NO_GROUP",
    "NO_OUTCOME",
    "Action",
    "ActionTable",
    "CousinGroup",
    "describe_action",
    "ActionBuilder",
    "ScoreTable",
    "find_discounted_command_score",
    "find_top_match",
    "generate_score_table",
    "Sequence",
    "contains_sequence",
    "describe_sequence",
]
