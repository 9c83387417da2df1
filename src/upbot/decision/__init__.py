"""
Decision Layer - What to do.

Contains:
- CommandSelector: scripted or reactive command choice per tick
"""

from .selector import SOURCE_PLAN, SOURCE_RANDOM, SOURCE_REACTIVE, CommandSelector

__all__ = ["CommandSelector", "SOURCE_PLAN", "SOURCE_RANDOM", "SOURCE_REACTIVE"]
