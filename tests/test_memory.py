"""
Tests for the memory layer - episodes, schema parsing, episode store.
"""

import numpy as np
import pytest

from upbot.commands import CMD_FORWARD, CMD_LEFT
from upbot.config import NUM_SENSORS
from upbot.errors import InvalidArgument, MalformedInput
from upbot.memory import Episode, EpisodeStore, SensorSchema, compare_episodes, describe_episode


# =============================================================================
# compare_episodes
# =============================================================================


class TestCompareEpisodes:
    def test_identical_episodes_match_on_every_field(self):
        schema = SensorSchema.roomba()
        values = [0, 1] * (NUM_SENSORS // 2)
        ep1 = Episode(schema.vector(values), CMD_FORWARD, 0)
        ep2 = Episode(schema.vector(values), CMD_FORWARD, 1)
        assert compare_episodes(ep1, ep2, True) == NUM_SENSORS

    def test_counts_agreeing_fields(self, make_episode):
        ep1 = make_episode([0, 1, 1])
        ep2 = make_episode([0, 1, 0])
        assert compare_episodes(ep1, ep2, False) == 2

    def test_command_mismatch_is_no_match(self, make_episode):
        ep1 = make_episode([0, 0, 0], cmd=CMD_FORWARD)
        ep2 = make_episode([0, 0, 0], cmd=CMD_LEFT)
        assert compare_episodes(ep1, ep2, True) == 0
        assert compare_episodes(ep1, ep2, False) == 3

    def test_length_mismatch_rejected(self, make_episode):
        with pytest.raises(InvalidArgument):
            compare_episodes(make_episode([0, 0, 0]), make_episode([0, 0]), False)

    def test_missing_episode_rejected(self, make_episode):
        with pytest.raises(InvalidArgument):
            compare_episodes(make_episode([0, 0, 0]), None, False)


def test_episode_sensors_are_read_only(make_episode):
    ep = make_episode([0, 0, 0])
    with pytest.raises(ValueError):
        ep.sensors[0] = 1


def test_describe_episode(make_episode):
    assert describe_episode(make_episode([1, 0, 1], now=7)) == "#7 [101] FW"


# =============================================================================
# SensorSchema
# =============================================================================


class TestSchema:
    def test_roomba_schema(self):
        schema = SensorSchema.roomba()
        assert schema.num_sensors == NUM_SENSORS
        assert schema.names[schema.goal_index] == "ir"

    @pytest.mark.parametrize("text", ["0 1 0", "0,1,0", " 0, 1 ,0 \n", "010"])
    def test_parse_accepted_forms(self, schema3, text):
        assert schema3.parse(text).tolist() == [0, 1, 0]

    @pytest.mark.parametrize("text", ["", "0 1", "0 1 0 0", "0110", "0 x 0"])
    def test_parse_rejects_malformed(self, schema3, text):
        with pytest.raises(MalformedInput):
            schema3.parse(text)

    def test_parse_rejects_non_string(self, schema3):
        with pytest.raises(MalformedInput):
            schema3.parse(None)

    def test_vector_checks_length(self, schema3):
        assert schema3.vector([1, 0, 0]).dtype == np.int64
        with pytest.raises(MalformedInput):
            schema3.vector([1, 0])

    def test_reward_queries(self, schema3, make_episode):
        assert schema3.episode_contains_reward(make_episode([2, 0, 0]))
        assert schema3.get_reward(make_episode([2, 0, 0])) == 2
        assert schema3.get_reward(make_episode([0, 1, 1])) == 0
        assert not schema3.episode_contains_reward(make_episode([0, 1, 1]))

    def test_score_field(self, make_episode):
        schema = SensorSchema.generic(3, goal=0, score=2)
        assert schema.get_score(make_episode([1, 0, 42])) == 42
        assert SensorSchema.generic(3).get_score(make_episode([1, 0, 42])) == 1

    def test_interpret_sensors_short(self, schema3):
        assert schema3.interpret_sensors_short(np.array([1, 0, 1])) == 0b101
        assert schema3.interpret_sensors_short(np.array([0, 0, 0])) == 0


# =============================================================================
# EpisodeStore
# =============================================================================


class TestEpisodeStore:
    def test_add_returns_index(self, store3, make_episode):
        assert store3.add_episode(make_episode([0, 0, 0], now=0)) == 0
        assert store3.add_episode(make_episode([0, 1, 0], now=1)) == 1
        assert len(store3) == 2
        assert store3.last.now == 1

    def test_wrong_length_rejected(self, store3, make_episode):
        with pytest.raises(InvalidArgument):
            store3.add_episode(make_episode([0, 0], now=0))
        assert len(store3) == 0

    def test_ordinal_must_increase(self, store3, make_episode):
        store3.add_episode(make_episode([0, 0, 0], now=3))
        with pytest.raises(InvalidArgument):
            store3.add_episode(make_episode([0, 0, 0], now=3))

    def test_none_rejected(self, store3):
        with pytest.raises(InvalidArgument):
            store3.add_episode(None)

    def test_next_reward_index(self, store3, make_episode):
        for now, values in enumerate([[0, 0, 0], [1, 0, 0], [0, 0, 0], [0, 0, 1], [1, 0, 0]]):
            store3.add_episode(make_episode(values, now=now))
        assert store3.reward_count == 2
        assert store3.next_reward_index(0) == 1
        assert store3.next_reward_index(1) == 4
        assert store3.next_reward_index(4) is None

    def test_sensor_matrix(self, store3, make_episode):
        store3.add_episode(make_episode([0, 0, 1], now=0))
        store3.add_episode(make_episode([0, 1, 0], now=1))
        assert store3.sensor_matrix([1, 0]).tolist() == [[0, 1, 0], [0, 0, 1]]
        assert store3.sensor_matrix([]).shape == (0, 3)

    def test_recent(self, store3, make_episode):
        for now in range(5):
            store3.add_episode(make_episode([0, 0, now % 2], now=now))
        assert [ep.now for ep in store3.recent(2)] == [3, 4]
        assert store3.recent(0) == []
