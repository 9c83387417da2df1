"""
Tests for the debug web interface.
"""

import asyncio

from aiohttp import test_utils

from upbot.control import Controller
from upbot.transport import ReplayTransport
from upbot.web import create_app


def _request(app, method, path, **kwargs):
    async def go():
        async with test_utils.TestClient(test_utils.TestServer(app)) as client:
            resp = await client.request(method, path, **kwargs)
            return resp.status, await resp.json()

    return asyncio.run(go())


def test_status(trained_agent):
    controller = Controller(trained_agent, ReplayTransport([]), hz=0)
    status, body = _request(create_app(trained_agent, controller), "GET", "/api/status")
    assert status == 200
    assert body["goals_found"] == 3
    assert body["controller"] == {"running": False, "loops": 0, "malformed": 0}


def test_actions(trained_agent):
    status, body = _request(create_app(trained_agent), "GET", "/api/actions?level=0")
    assert status == 200
    assert [a["id"] for a in body["actions"]] == [0, 1]
    assert body["actions"][0]["confidence"] == 1.0
    assert body["actions"][0]["overall_freq"] == 3


def test_actions_bad_level(trained_agent):
    app = create_app(trained_agent)
    assert _request(app, "GET", "/api/actions?level=x")[0] == 400
    assert _request(create_app(trained_agent), "GET", "/api/actions?level=9")[0] == 404


def test_plan(trained_agent):
    status, body = _request(create_app(trained_agent), "GET", "/api/plan")
    assert status == 200
    assert body == {"plan": None, "text": "No plan"}

    trained_agent.tick("1 0 0")
    status, body = _request(create_app(trained_agent), "GET", "/api/plan")
    assert body["plan"]["top_level"] == 1
    assert body["plan"]["routes"][0]["curr_act_index"] == 1


def test_episodes(trained_agent):
    status, body = _request(create_app(trained_agent), "GET", "/api/episodes?last=2")
    assert status == 200
    assert body["total"] == 6
    assert [ep["now"] for ep in body["episodes"]] == [4, 5]
    assert body["episodes"][1]["sensors"] == [1, 0, 0]


def test_update_params(trained_agent):
    status, body = _request(
        create_app(trained_agent), "POST", "/api/params", json={"drift_margin": 0.25}
    )
    assert status == 200
    assert body["drift_margin"] == 0.25
    assert trained_agent.params.drift_margin == 0.25


def test_update_params_rejects_non_object(trained_agent):
    status, _ = _request(create_app(trained_agent), "POST", "/api/params", json=[1, 2])
    assert status == 400
