"""
UPBOT supervisor - online, hierarchical, model-based robot control.

Layers:
- memory: episodes and the episode store
- learning: action/sequence induction and reactive scoring
- planning: hierarchical routes toward discovered goals
- decision: per-tick command choice
- control / transport / web: running against a real robot
"""

from upbot.agent import Agent
from upbot.errors import InvalidArgument, MalformedInput, SupervisorError, TransportError
from upbot.params import Parameters

__all__ = [
    "Agent",
    "Parameters",
    "SupervisorError",
    "MalformedInput",
    "InvalidArgument",
    "TransportError",
]

__version__ = "0.1.0"
