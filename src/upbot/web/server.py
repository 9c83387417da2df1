"""
Web server - aiohttp application for the debug interface.

Read-only views of what the agent has learned, plus runtime parameter
tuning. All handlers run on the controller's event loop, so they see
the agent between ticks.
"""

import logging
from typing import Optional

from aiohttp import web

from upbot.agent import Agent
from upbot.config import WEB_HOST, WEB_PORT
from upbot.learning import describe_action

logger = logging.getLogger(__name__)


class WebServer:
    """
    Debug web interface server.

    Provides:
    - GET  /api/status            agent and learning summary
    - GET  /api/actions?level=k   one level's action table
    - GET  /api/plan              active plan, routes and cursors
    - GET  /api/episodes?last=n   most recent episodes
    - GET  /api/params            tunable parameters
    - POST /api/params            update parameters (_save=true persists)
    """

    def __init__(self, agent: Agent, controller=None):
        self.agent = agent
        self.controller = controller
        self.app = web.Application()
        self._setup_routes()

    def _setup_routes(self):
        self.app.router.add_get("/api/status", self.api_status)
        self.app.router.add_get("/api/actions", self.api_actions)
        self.app.router.add_get("/api/plan", self.api_plan)
        self.app.router.add_get("/api/episodes", self.api_episodes)
        self.app.router.add_get("/api/params", self.api_params_get)
        self.app.router.add_post("/api/params", self.api_params_set)

    async def api_status(self, request):
        """Get current agent status."""
        status = self.agent.status()
        if self.controller:
            status["controller"] = {
                "running": self.controller.is_running,
                "loops": self.controller.loop_count,
                "malformed": self.controller.malformed_count,
            }
        return web.json_response(status)

    async def api_actions(self, request):
        try:
            level = int(request.query.get("level", 0))
        except ValueError:
            return web.json_response({"error": "level must be an integer"}, status=400)
        if not 0 <= level < self.agent.builder.depth:
            return web.json_response({"error": f"no level {level}"}, status=404)

        table = self.agent.builder.actions[level]
        actions = []
        for idx, action in enumerate(table):
            entry = action.to_dict()
            entry["id"] = idx
            entry["overall_freq"] = table.overall_freq(idx)
            entry["confidence"] = round(table.confidence(idx), 4)
            entry["text"] = describe_action(action)
            actions.append(entry)
        return web.json_response({"level": level, "actions": actions})

    async def api_plan(self, request):
        plan = self.agent.planner.plan
        return web.json_response({
            "plan": None if plan is None else plan.to_dict(),
            "text": self.agent.describe_plan(),
        })

    async def api_episodes(self, request):
        try:
            last = int(request.query.get("last", 20))
        except ValueError:
            return web.json_response({"error": "last must be an integer"}, status=400)
        episodes = self.agent.store.recent(last)
        return web.json_response({
            "total": len(self.agent.store),
            "episodes": [ep.to_dict() for ep in episodes],
        })

    async def api_params_get(self, request):
        """Get current tunable parameters."""
        return web.json_response(self.agent.params.to_dict())

    async def api_params_set(self, request):
        """Update tunable parameters. Include _save=true to persist to disk."""
        try:
            data = await request.json()
        except ValueError:
            return web.json_response({"error": "body must be JSON"}, status=400)
        if not isinstance(data, dict):
            return web.json_response({"error": "body must be a JSON object"}, status=400)

        save = data.pop("_save", False)
        self.agent.params.update(**data)
        if save:
            self.agent.params.save()
        return web.json_response(self.agent.params.to_dict())


def create_app(agent: Agent, controller=None) -> web.Application:
    """Create aiohttp application."""
    server = WebServer(agent, controller)
    return server.app


async def run_server(agent: Agent, controller=None, host: str = WEB_HOST, port: int = WEB_PORT) -> web.AppRunner:
    """Run the web server."""
    app = create_app(agent, controller)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info(f"Web server running at http://{host}:{port}")
    return runner
