"""
Tests for the agent tick cycle and command selection.
"""

import numpy as np
import pytest

from upbot.agent import Agent
from upbot.commands import CMD_FORWARD, CMD_LEFT, CMD_RIGHT, MOBILE_COMMANDS
from upbot.decision import SOURCE_PLAN, SOURCE_RANDOM, SOURCE_REACTIVE
from upbot.errors import MalformedInput
from upbot.learning import ScoreTable, generate_score_table
from upbot.memory import Episode, SensorSchema
from upbot.params import POLICY_DRIFT, Parameters


# =============================================================================
# Tick cycle
# =============================================================================


class TestTick:
    def test_repeats_command_that_reached_goal(self, trained_agent):
        assert trained_agent.tick("0 0 0") == CMD_FORWARD
        assert trained_agent.selector.last_source == SOURCE_PLAN

    def test_tick_stores_episode_with_chosen_command(self, trained_agent):
        cmd = trained_agent.tick("0,0,0")
        last = trained_agent.store.last
        assert last.now == 6
        assert last.cmd == cmd
        assert last.sensors.tolist() == [0, 0, 0]
        assert trained_agent.tick_count == 7

    def test_malformed_reading_changes_nothing(self, trained_agent):
        with pytest.raises(MalformedInput):
            trained_agent.tick("0 0")
        with pytest.raises(MalformedInput):
            trained_agent.tick("0 zero 0")
        assert trained_agent.tick_count == 6

    def test_tick_wme(self, trained_agent):
        assert trained_agent.tick_wme("s0:i:0;s1:i:0;s2:i:0") == CMD_FORWARD

    def test_tick_wme_malformed(self, trained_agent):
        with pytest.raises(MalformedInput):
            trained_agent.tick_wme("s0:i:0;s1:i:0")
        assert trained_agent.tick_count == 6

    def test_first_tick_is_reactive(self, agent3):
        cmd = agent3.tick("0 0 0")
        assert cmd in MOBILE_COMMANDS
        assert agent3.selector.last_source == SOURCE_REACTIVE
        assert agent3.tick_count == 1

    def test_plan_continues_across_ticks(self, trained_agent):
        # From the goal state only M1 = <A1 A0> applies: two scripted steps
        assert trained_agent.tick("1 0 0") == CMD_FORWARD
        assert trained_agent.planner.has_active_plan
        assert trained_agent.tick("0 0 0") == CMD_FORWARD
        assert trained_agent.selector.last_source == SOURCE_PLAN
        assert trained_agent.planner.plans_completed == 1


# =============================================================================
# Goals
# =============================================================================


class TestGoals:
    def test_goal_counting(self, schema3):
        agent = Agent(Parameters(num_to_match=3, num_goals_to_find=2), schema3)
        agent.record([0, 0, 0], CMD_FORWARD)
        agent.record([1, 0, 0], CMD_FORWARD)
        assert agent.goals_found == 1
        assert not agent.finished

        agent.tick("1 0 0")
        assert agent.goals_found == 2
        assert agent.finished

    def test_status(self, trained_agent):
        status = trained_agent.status()
        assert status["ticks"] == 6
        assert status["goals_found"] == 3
        assert status["last_command"] == "forward"
        assert [level["actions"] for level in status["levels"]] == [2, 2, 1, 0]

    def test_describe_plan(self, trained_agent):
        assert trained_agent.describe_plan() == "No plan"
        trained_agent.tick("1 0 0")
        assert trained_agent.describe_plan().startswith("Route L1")


# =============================================================================
# Command selection
# =============================================================================


class TestSelector:
    def test_same_seed_same_choices(self, schema3):
        readings = ["0 0 0", "0 1 0", "0 0 1", "0 1 1", "0 0 0"]

        def run(seed):
            agent = Agent(Parameters(num_to_match=3, seed=seed), schema3)
            return [agent.tick(line) for line in readings]

        assert run(7) == run(7)

    def test_exploration_decays(self, schema3):
        agent = Agent(Parameters(num_to_match=3, random_chance=100, seed=1), schema3)
        assert agent.tick("0 0 0") in MOBILE_COMMANDS
        assert agent.selector.last_source == SOURCE_RANDOM
        assert agent.selector.random_chance == 95

    def test_exploration_floor(self, schema3):
        agent = Agent(Parameters(num_to_match=3, random_chance=10, seed=1), schema3)
        for _ in range(20):
            agent.tick("0 0 0")
        assert agent.selector.random_chance == 10

    def test_ties_only_between_best_commands(self, trained_agent):
        scores = ScoreTable.empty()
        scores.command_scores[CMD_LEFT] = 0.5
        scores.command_scores[CMD_FORWARD] = 0.5
        picks = {trained_agent.selector._pick(scores) for _ in range(30)}
        assert picks <= {CMD_LEFT, CMD_FORWARD}

    def test_drift_policy_follows_plan_when_it_agrees(self, trained_agent):
        trained_agent.params.policy = POLICY_DRIFT
        assert trained_agent.tick("0 0 0") == CMD_FORWARD
        assert trained_agent.selector.last_source == SOURCE_PLAN

    def test_drift_policy_abandons_contradicted_plan(self, trained_agent, monkeypatch):
        def fake_scores(builder, episode, candidates=None):
            table = ScoreTable.empty()
            table.command_scores[CMD_LEFT] = 1.0
            return table

        monkeypatch.setattr("upbot.decision.selector.generate_score_table", fake_scores)
        trained_agent.params.policy = POLICY_DRIFT

        assert trained_agent.tick("0 0 0") == CMD_LEFT
        assert trained_agent.selector.last_source == SOURCE_REACTIVE
        assert trained_agent.planner.plan.needs_recalc

    def test_plan_policy_ignores_drift(self, trained_agent, monkeypatch):
        def fake_scores(builder, episode, candidates=None):
            table = ScoreTable.empty()
            table.command_scores[CMD_LEFT] = 1.0
            return table

        monkeypatch.setattr("upbot.decision.selector.generate_score_table", fake_scores)
        assert trained_agent.tick("0 0 0") == CMD_FORWARD

    def test_rng_is_seeded_from_params(self, schema3):
        a = Agent(Parameters(seed=3), schema3)
        b = Agent(Parameters(seed=3), schema3)
        assert a.rng.integers(1000) == b.rng.integers(1000)
        assert isinstance(Agent(Parameters(seed=-1), schema3).rng, np.random.Generator)


# =============================================================================
# WME goal values
# =============================================================================


class TestWmeGoals:
    def test_text_goal_values_do_not_crash(self, schema3):
        agent = Agent(Parameters(num_to_match=3, policy=POLICY_DRIFT), schema3)
        for goal in ("none", "dock", "none"):
            assert agent.tick_wme(f"s0:s:{goal};s1:i:0;s2:i:0") in MOBILE_COMMANDS
        assert agent.goals_found == 0
        assert agent.tick_count == 3

    def test_char_zero_is_not_a_goal(self, agent3):
        agent3.tick_wme("s0:c:0;s1:i:0;s2:i:0")
        assert agent3.goals_found == 0

    def test_real_goal_value_counts(self, agent3):
        agent3.tick_wme("s0:d:0.5;s1:i:0;s2:i:0")
        assert agent3.goals_found == 1


# =============================================================================
# Match strength
# =============================================================================


def test_exact_match_beats_near_match():
    """Two commands reached the goal: RIGHT from a state one field off, LEFT from this one."""
    schema = SensorSchema.roomba()
    here = [0] * schema.num_sensors
    near = list(here)
    near[0] = 1
    goal = list(here)
    goal[schema.goal_index] = 1

    agent = Agent(Parameters(seed=1), schema)
    agent.record(near, CMD_RIGHT)
    agent.record(goal, CMD_FORWARD)
    agent.record(here, CMD_LEFT)
    agent.record(goal, CMD_FORWARD)

    live = Episode(schema.vector(here), 0, now=100)
    scores = generate_score_table(agent.builder, live).command_scores
    assert scores[CMD_LEFT] > scores[CMD_RIGHT]

    assert agent.tick(" ".join(map(str, here))) == CMD_LEFT


# =============================================================================
# Independent agents
# =============================================================================


def test_agents_share_no_state(schema3):
    a = Agent(Parameters(num_to_match=3, seed=5), schema3)
    b = Agent(Parameters(num_to_match=3, seed=5), schema3)
    fresh = Agent(Parameters(num_to_match=3, seed=5), schema3)

    a.record([0, 0, 0], CMD_FORWARD)
    a.record([1, 0, 0], CMD_FORWARD)
    for values in ([0, 1, 0], [0, 0, 1], [0, 1, 1], [1, 0, 0]):
        b.record(values, CMD_LEFT)
    b.rng.integers(1000, size=10)

    assert len(a.store) == 2 and len(b.store) == 4
    assert len(a.builder.actions[0]) == 1
    assert [act.command for act in b.builder.actions[0]] == [CMD_LEFT] * 3
    assert a.builder.actions[0] is not b.builder.actions[0]
    assert a.goals_found == 1 and b.goals_found == 1
    assert a.params is not b.params

    # b's draws left a's generator where a fresh agent's is
    assert a.rng.integers(1000) == fresh.rng.integers(1000)
