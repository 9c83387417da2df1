"""
Planning Layer - How to get to a goal.

Contains:
- Route / Plan: per-level scripts with cursors
- PlanManager: route search, step validation, replanning
"""

from .plan_manager import PlanManager, PlanStatus
from .route import Plan, Route, RouteState, describe_plan, describe_route

__all__ = [
    "PlanManager",
    "PlanStatus",
    "Plan",
    "Route",
    "RouteState",
    "describe_plan",
    "describe_route",
]
