"""Court/time assignment: least rest violation, then earliest court, then lowest court number."""
from datetime import datetime, timedelta

from poolplay.utils.court_scheduling import (
    COURT_TRANSITION_MINUTES,
    RestStateTracker,
    count_rest_violations,
    schedule_fixtures,
)
from poolplay.utils.referee_assignment import assign_referees
from poolplay.utils.round_robin import generate_round_robin_fixtures
from poolplay.utils.schedule_types import Fixture, Pool, TeamSnapshot

START = datetime(2026, 6, 6, 9, 0)


def _fixture(n, team1, team2, referee=None):
    return Fixture(pool_name="A", round_number=1, match_number=n, team1_id=team1, team2_id=team2, referee_team_id=referee)


def test_single_court_runs_back_to_back():
    fixtures = [_fixture(1, 1, 2), _fixture(2, 3, 4), _fixture(3, 5, 6)]
    scheduled = schedule_fixtures(fixtures, START, estimated_game_duration=20, number_of_courts=1, warm_up_duration=7)
    slot = timedelta(minutes=20 + 7 + COURT_TRANSITION_MINUTES)
    assert [f.court_number for f in scheduled] == [1, 1, 1]
    assert [f.scheduled_time for f in scheduled] == [START, START + slot, START + 2 * slot]


def test_idle_court_preferred_when_no_rest_conflict():
    fixtures = [_fixture(1, 1, 2), _fixture(2, 3, 4), _fixture(3, 5, 6)]
    scheduled = schedule_fixtures(fixtures, START, estimated_game_duration=20, number_of_courts=2)
    assert [(f.court_number, f.scheduled_time) for f in scheduled] == [
        (1, START),
        (2, START),
        (1, START + timedelta(minutes=32)),
    ]


def test_rest_outweighs_earlier_court():
    # Second fixture involves the first one's referee; waiting for court 1 avoids a rest violation
    fixtures = [_fixture(1, 1, 2, referee=3), _fixture(2, 3, 4, referee=1)]
    scheduled = schedule_fixtures(fixtures, START, estimated_game_duration=20, number_of_courts=2)
    assert (scheduled[0].court_number, scheduled[0].scheduled_time) == (1, START)
    assert (scheduled[1].court_number, scheduled[1].scheduled_time) == (1, START + timedelta(minutes=32))
    assert count_rest_violations(scheduled, estimated_game_duration=20) == 0


def test_every_fixture_gets_court_and_time():
    teams = [TeamSnapshot(id=i, name=f"Team {i}") for i in range(1, 14)]
    fixtures = []
    for i, size in enumerate([4, 4, 5]):
        start = sum([4, 4, 5][:i])
        fixtures += generate_round_robin_fixtures(Pool(name="ABC"[i], teams=tuple(teams[start : start + size])))
    fixtures = assign_referees(fixtures, teams)

    scheduled = schedule_fixtures(fixtures, START, estimated_game_duration=20, number_of_courts=3)
    assert len(scheduled) == 22
    assert all(f.court_number in (1, 2, 3) for f in scheduled)
    assert all(f.scheduled_time >= START for f in scheduled)

    # A court never hosts two fixtures at once
    by_court = {}
    for f in scheduled:
        by_court.setdefault(f.court_number, []).append(f.scheduled_time)
    for times in by_court.values():
        assert len(times) == len(set(times))


def test_schedule_is_deterministic():
    fixtures = [_fixture(i, i, i + 10, referee=i + 20) for i in range(1, 8)]
    first = schedule_fixtures(fixtures, START, 25, 3)
    second = schedule_fixtures(fixtures, START, 25, 3)
    assert first == second


def test_no_courts_returns_fixtures_unchanged():
    fixtures = [_fixture(1, 1, 2)]
    assert schedule_fixtures(fixtures, START, 20, 0) == fixtures


def test_rest_violation_counts_shortfall():
    tracker = RestStateTracker()
    tracker.update_team_state(1, START)
    desired = timedelta(minutes=27)
    assert tracker.rest_violation([1, 2], START + timedelta(minutes=10), desired) == timedelta(minutes=17)
    assert tracker.rest_violation([1], START + timedelta(minutes=40), desired) == timedelta(0)
    assert tracker.rest_violation([2], START, desired) == timedelta(0)


def test_count_rest_violations_flags_quick_turnaround():
    fixtures = [
        Fixture("A", 1, 1, 1, 2, court_number=1, scheduled_time=START),
        Fixture("A", 1, 2, 1, 3, court_number=2, scheduled_time=START + timedelta(minutes=10)),
    ]
    assert count_rest_violations(fixtures, estimated_game_duration=20) == 1
