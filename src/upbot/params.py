"""
Runtime tunable parameters with JSON persistence.

Each Agent owns one Parameters instance. The web interface can modify
values at runtime; learning constants take effect on the next tick,
structural ones (max_level_depth) only on a fresh Agent.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

from upbot.config import (
    DISCOUNT,
    DRIFT_MARGIN,
    MAX_LEN_LHS,
    MAX_LEVEL_DEPTH,
    MAX_ROUTE_LEN,
    NUM_GOALS_TO_FIND,
    NUM_TO_MATCH,
    RANDOM_CHANCE,
)

logger = logging.getLogger(__name__)

PARAMS_FILE = Path(__file__).parent / "params.json"

POLICY_PLAN = "plan"  # set_command: always trust the scripted step
POLICY_DRIFT = "drift"  # set_command2: re-score reactively mid-plan
POLICIES = (POLICY_PLAN, POLICY_DRIFT)


@dataclass
class Parameters:
    """Runtime tunable parameters."""

    # Matching
    num_to_match: int = NUM_TO_MATCH
    max_len_lhs: int = MAX_LEN_LHS

    # Hierarchy / planning
    max_level_depth: int = MAX_LEVEL_DEPTH
    max_route_len: int = MAX_ROUTE_LEN
    discount: float = DISCOUNT

    # Command selection
    policy: str = POLICY_PLAN
    drift_margin: float = DRIFT_MARGIN
    random_chance: int = RANDOM_CHANCE  # percent, 0 disables exploration
    seed: int = 0  # negative = seed from OS entropy

    # Stats
    num_goals_to_find: int = NUM_GOALS_TO_FIND

    def __post_init__(self):
        self._check_policy()

    def update(self, **kwargs):
        """Update parameters from dict (e.g., from web API)."""
        for key, value in kwargs.items():
            if hasattr(self, key):
                expected_type = type(getattr(self, key))
                try:
                    setattr(self, key, expected_type(value))
                except (TypeError, ValueError):
                    logger.warning(f"Invalid value for {key}: {value}")
            else:
                logger.warning(f"Unknown parameter {key}")
        self._check_policy()

    def _check_policy(self):
        if self.policy not in POLICIES:
            logger.warning(f"Unknown policy {self.policy!r}, using {POLICY_PLAN!r}")
            self.policy = POLICY_PLAN

    def save(self, path: Path = PARAMS_FILE):
        """Persist to JSON file."""
        with open(path, "w") as f:
            json.dump(asdict(self), f, indent=2)
        logger.info(f"Parameters saved to {path}")

    @classmethod
    def load(cls, path: Path = PARAMS_FILE) -> Parameters:
        """Load from JSON file, or return defaults."""
        if path.exists():
            try:
                with open(path) as f:
                    data = json.load(f)
                params = cls()
                params.update(**data)
                logger.info(f"Parameters loaded from {path}")
                return params
            except (OSError, ValueError) as e:
                logger.warning(f"Failed to load {path}: {e}, using defaults")
        return cls()

    def to_dict(self) -> dict:
        """Convert to dict for JSON API."""
        return asdict(self)
