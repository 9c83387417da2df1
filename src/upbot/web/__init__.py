"""
Web Layer - Debug and monitoring interface.

Provides:
- Learning summary and per-level action tables
- Active plan with route cursors
- Recent episodes
- Parameter tuning
"""

from .server import WebServer, create_app, run_server

__all__ = ["WebServer", "create_app", "run_server"]
