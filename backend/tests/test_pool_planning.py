"""Pool sizing: prefer pools of 4, absorb a remainder of 1 into a pool of 5, never a pool of 1."""
import pytest

from poolplay.utils.pool_planning import (
    build_pools,
    plan_pool_configuration,
    pool_label,
    pool_name,
    rr_matches,
)
from poolplay.utils.schedule_types import TeamSnapshot


def _teams(n, skill_level=None):
    return [TeamSnapshot(id=i, name=f"Team {i}", skill_level=skill_level) for i in range(1, n + 1)]


def test_rr_matches():
    assert rr_matches(0) == 0
    assert rr_matches(1) == 0
    assert rr_matches(2) == 1
    assert rr_matches(4) == 6
    assert rr_matches(5) == 10


def test_thirteen_teams_three_pools():
    config = plan_pool_configuration(13)
    assert config.num_pools == 3
    assert config.teams_per_pool == [4, 4, 5]
    assert config.total_matches == 22


def test_ten_teams_extra_pool_of_two():
    config = plan_pool_configuration(10)
    assert config.num_pools == 3
    assert config.teams_per_pool == [4, 4, 2]
    assert config.total_matches == 13


@pytest.mark.parametrize(
    "team_count,expected",
    [
        (0, []),
        (1, [1]),
        (2, [2]),
        (4, [4]),
        (5, [5]),
        (6, [4, 2]),
        (7, [4, 3]),
        (8, [4, 4]),
        (9, [4, 5]),
        (12, [4, 4, 4]),
    ],
)
def test_small_rosters(team_count, expected):
    assert plan_pool_configuration(team_count).teams_per_pool == expected


def test_sizes_always_cover_roster_without_singletons():
    for team_count in range(0, 70):
        config = plan_pool_configuration(team_count)
        assert sum(config.teams_per_pool) == team_count
        assert config.num_pools == len(config.teams_per_pool)
        assert config.total_matches == sum(rr_matches(s) for s in config.teams_per_pool)
        if team_count >= 2:
            assert 1 not in config.teams_per_pool
        assert all(size <= 5 for size in config.teams_per_pool)


def test_negative_team_count_gives_no_pools():
    config = plan_pool_configuration(-3)
    assert config.num_pools == 0
    assert config.total_matches == 0


def test_pool_labels():
    assert pool_label(0) == "A"
    assert pool_label(25) == "Z"
    assert pool_label(26) == "AA"
    assert pool_label(27) == "AB"
    assert pool_name(1) == "B"
    assert pool_name(1, "advanced") == "advanced-B"


def test_build_pools_keeps_input_order():
    pools = build_pools(_teams(9))
    assert [p.name for p in pools] == ["A", "B"]
    assert pools[0].team_ids == [1, 2, 3, 4]
    assert pools[1].team_ids == [5, 6, 7, 8, 9]


def test_build_pools_every_team_exactly_once():
    teams = _teams(23)
    pools = build_pools(teams)
    placed = [tid for p in pools for tid in p.team_ids]
    assert sorted(placed) == [t.id for t in teams]


def test_build_pools_with_skill_prefix():
    pools = build_pools(_teams(6, "intermediate"), "intermediate")
    assert [p.name for p in pools] == ["intermediate-A", "intermediate-B"]
    assert all(p.skill_level == "intermediate" for p in pools)


def test_build_pools_empty_roster():
    assert build_pools([]) == []
