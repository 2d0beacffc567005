"""Advancement selection, seeding order and first-round referee choice."""
import pytest

from poolplay.services.bracket_seeding import (
    ADVANCE_ALL,
    find_first_round_referee,
    order_seeds,
    recommend_advancement,
    seed_advancing_teams,
    select_advancing_teams,
)
from poolplay.services.errors import InputError, NoAdvancingTeamsError
from poolplay.services.standings import TeamStanding


def _standing(team_id, wins, losses, sets_won, sets_lost):
    return TeamStanding(team_id=team_id, team_name=f"Team {team_id}", wins=wins, losses=losses, sets_won=sets_won, sets_lost=sets_lost)


@pytest.fixture
def pool_standings():
    return {
        "A": [_standing(1, 3, 0, 6, 1), _standing(2, 2, 1, 4, 3), _standing(3, 1, 2, 3, 4), _standing(4, 0, 3, 1, 6)],
        "B": [_standing(5, 3, 0, 6, 0), _standing(6, 2, 1, 5, 3), _standing(7, 1, 2, 2, 5), _standing(8, 0, 3, 1, 6)],
        "C": [_standing(9, 2, 1, 5, 2), _standing(10, 2, 1, 4, 3), _standing(11, 1, 2, 3, 5), _standing(12, 1, 2, 2, 4)],
    }


def test_top_n_per_pool(pool_standings):
    advancing = select_advancing_teams(pool_standings, 2)
    assert [(a.pool_name, a.pool_rank, a.team_id) for a in advancing] == [
        ("A", 1, 1),
        ("A", 2, 2),
        ("B", 1, 5),
        ("B", 2, 6),
        ("C", 1, 9),
        ("C", 2, 10),
    ]


def test_seeds_position_major(pool_standings):
    seeds = seed_advancing_teams(pool_standings, 2)
    # Winners by record (5: +6, 1: +5, 9: 2-1), then runners-up (6: +2, then 2 and 10 fully tied)
    assert [s.team_id for s in seeds] == [5, 1, 9, 6, 2, 10]
    assert [s.seed for s in seeds] == [1, 2, 3, 4, 5, 6]


def test_full_tie_keeps_pool_order():
    standings = {
        "A": [_standing(1, 1, 0, 2, 0)],
        "B": [_standing(2, 1, 0, 2, 0)],
        "C": [_standing(3, 1, 0, 2, 0)],
    }
    assert [s.team_id for s in seed_advancing_teams(standings, 1)] == [1, 2, 3]


def test_advance_all(pool_standings):
    assert len(select_advancing_teams(pool_standings, ADVANCE_ALL)) == 12
    assert len(select_advancing_teams(pool_standings, None)) == 12


def test_small_pool_advances_what_it_has():
    standings = {"A": [_standing(1, 1, 0, 2, 0), _standing(2, 0, 1, 0, 2)], "B": [_standing(3, 0, 0, 0, 0)]}
    assert [a.team_id for a in select_advancing_teams(standings, 2)] == [1, 2, 3]


def test_non_positive_advancement_rejected(pool_standings):
    with pytest.raises(InputError):
        select_advancing_teams(pool_standings, 0)
    with pytest.raises(InputError):
        select_advancing_teams(pool_standings, -1)


def test_no_teams_to_advance():
    with pytest.raises(NoAdvancingTeamsError):
        seed_advancing_teams({}, 2)


def test_order_seeds_empty():
    assert order_seeds([]) == []


def test_first_round_referee_is_best_non_advancing(pool_standings):
    advancing_ids = {a.team_id for a in select_advancing_teams(pool_standings, 2)}
    referee = find_first_round_referee(pool_standings, advancing_ids)
    # Third places: 3 (1-2, -1), 7 (1-2, -3), 11 (1-2, -2)
    assert referee.team_id == 3


def test_first_round_referee_limited_to_category(pool_standings):
    advancing_ids = {a.team_id for a in select_advancing_teams(pool_standings, 2)}
    referee = find_first_round_referee(pool_standings, advancing_ids, eligible_team_ids={7, 8})
    assert referee.team_id == 7


def test_no_referee_when_everyone_advances(pool_standings):
    advancing_ids = {a.team_id for a in select_advancing_teams(pool_standings, ADVANCE_ALL)}
    assert find_first_round_referee(pool_standings, advancing_ids) is None


@pytest.mark.parametrize(
    "total_teams,teams_per_pool,bracket_size",
    [(6, 1, 6), (8, 1, 8), (12, 2, 12), (16, 2, 16), (20, 2, 20), (30, 3, 30), (40, 3, 32)],
)
def test_recommend_advancement(total_teams, teams_per_pool, bracket_size):
    recommendation = recommend_advancement(total_teams)
    assert recommendation["teams_per_pool"] == teams_per_pool
    assert recommendation["bracket_size"] == bracket_size
    assert recommendation["reasoning"]
