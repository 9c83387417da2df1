"""
Control Layer - Execution.

Main control loop that connects the agent to a robot link.
"""

from .controller import Controller

__all__ = ["Controller"]
