"""Pool completion status and its store-backed check."""
import pytest
from sqlmodel import Session

from poolplay.models.match import Match, MatchStatus, TournamentPhase
from poolplay.services.errors import NotFoundError
from poolplay.services.pool_completion import check_pool_completion, summarize_pool_completion
from poolplay.services.standings import MatchResult


def _result(pool, team1, team2, status="completed", sets1=2, sets2=0):
    return MatchResult(pool_name=pool, team1_id=team1, team2_id=team2, status=status, sets_won_team1=sets1, sets_won_team2=sets2)


def test_all_pools_complete():
    status = summarize_pool_completion([_result("A", 1, 2), _result("B", 3, 4)])
    assert status.total_pools == 2
    assert status.completed_pools == 2
    assert status.all_pools_complete
    assert status.ready_for_brackets
    assert [s.team_id for s in status.standings_by_pool()["A"]] == [1, 2]


def test_one_unfinished_match_blocks_brackets():
    status = summarize_pool_completion(
        [_result("A", 1, 2), _result("A", 1, 3, status="scheduled"), _result("B", 4, 5)]
    )
    pool_a, pool_b = status.pool_stats
    assert (pool_a.total_matches, pool_a.completed_matches, pool_a.is_complete) == (2, 1, False)
    assert pool_a.standings == []
    assert pool_b.is_complete
    assert not status.ready_for_brackets


def test_no_pools_is_not_ready():
    status = summarize_pool_completion([])
    assert status.total_pools == 0
    assert not status.all_pools_complete
    assert not status.ready_for_brackets


def test_pools_kept_in_first_appearance_order():
    status = summarize_pool_completion([_result("B", 1, 2), _result("A", 3, 4), _result("B", 1, 5)])
    assert [p.pool_name for p in status.pool_stats] == ["B", "A"]


def test_to_dict_shape():
    data = summarize_pool_completion([_result("A", 1, 2)], {1: "Sandy", 2: "Spikers"}).to_dict()
    assert data["ready_for_brackets"] is True
    assert data["pool_stats"][0]["standings"][0]["team_name"] == "Sandy"


def test_check_pool_completion_reads_store(session: Session, make_tournament, make_teams):
    tournament = make_tournament()
    team1, team2, team3 = make_teams(tournament.id, 3)
    session.add(
        Match(
            tournament_id=tournament.id,
            tournament_phase=TournamentPhase.pool_play,
            pool_name="A",
            round_number=1,
            match_number=1,
            team1_id=team1.id,
            team2_id=team2.id,
            status=MatchStatus.completed,
            sets_won_team1=2,
        )
    )
    session.add(
        Match(
            tournament_id=tournament.id,
            tournament_phase=TournamentPhase.pool_play,
            pool_name="A",
            round_number=2,
            match_number=2,
            team1_id=team1.id,
            team2_id=team3.id,
        )
    )
    session.commit()

    status = check_pool_completion(session, tournament.id)
    assert status.total_pools == 1
    assert status.pool_stats[0].completed_matches == 1
    assert not status.ready_for_brackets


def test_check_pool_completion_unknown_tournament(session: Session):
    with pytest.raises(NotFoundError):
        check_pool_completion(session, 9999)
