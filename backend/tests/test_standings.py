"""Pool standings ranking from completed results."""
from poolplay.services.standings import UNKNOWN_TEAM_NAME, MatchResult, calculate_pool_standings


def _result(team1, team2, sets1, sets2, status="completed", pool="A"):
    return MatchResult(pool_name=pool, team1_id=team1, team2_id=team2, status=status, sets_won_team1=sets1, sets_won_team2=sets2)


def test_sets_won_breaks_equal_differential():
    results = [
        _result(1, 2, 2, 0),
        _result(3, 4, 2, 1),
        _result(1, 3, 2, 1),
        _result(2, 4, 2, 0),
        _result(1, 4, 0, 2),
        _result(2, 3, 1, 2),
    ]
    standings = calculate_pool_standings(results, {1: "Sandy", 2: "Spikers", 3: "Diggers", 4: "Setters"})

    # 3: 2-1 (5-4), 1: 2-1 (4-3), both +1
    assert [s.team_id for s in standings[:2]] == [3, 1]
    top = standings[0]
    assert (top.wins, top.losses, top.sets_won, top.sets_lost) == (2, 1, 5, 4)
    assert top.team_name == "Diggers"
    assert standings[1].sets_differential == 1


def test_differential_breaks_equal_win_percentage():
    results = [_result(1, 3, 2, 1), _result(2, 3, 2, 0), _result(1, 4, 0, 2), _result(2, 4, 0, 2)]
    standings = calculate_pool_standings(results)
    team1 = next(s for s in standings if s.team_id == 1)
    team2 = next(s for s in standings if s.team_id == 2)
    assert team1.sets_differential == -1
    assert team2.sets_differential == 0
    assert standings.index(team2) < standings.index(team1)


def test_full_tie_keeps_first_appearance():
    standings = calculate_pool_standings([_result(7, 5, 1, 1), _result(5, 7, 1, 1)])
    assert [s.team_id for s in standings] == [7, 5]
    assert all(s.wins == 0 and s.losses == 0 for s in standings)
    assert all(s.win_percentage == 0.0 for s in standings)


def test_unfinished_results_do_not_count():
    standings = calculate_pool_standings([_result(1, 2, 2, 0), _result(1, 3, 0, 0, status="scheduled")])
    by_id = {s.team_id: s for s in standings}
    assert set(by_id) == {1, 2, 3}
    assert by_id[1].wins == 1
    assert by_id[3].wins == 0 and by_id[3].losses == 0


def test_missing_name_defaults():
    standings = calculate_pool_standings([_result(1, 2, 2, 0)], {1: "Known"})
    assert standings[1].team_name == UNKNOWN_TEAM_NAME


def test_win_percentage_and_dict():
    standings = calculate_pool_standings([_result(1, 2, 2, 1), _result(1, 3, 1, 2)])
    team1 = next(s for s in standings if s.team_id == 1)
    assert team1.win_percentage == 0.5
    data = team1.to_dict()
    assert data["sets_won"] == 3
    assert data["sets_lost"] == 3
    assert data["sets_differential"] == 0


def test_empty_results():
    assert calculate_pool_standings([]) == []
