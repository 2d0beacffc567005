"""
Court/time assignment for pool-play fixtures.

Greedy, single pass, no backtracking. For each fixture in order every court
is scored by how far it would cut into the desired rest of the teams
involved (both sides plus the referee); the least-violating court wins.

Desired rest = game duration + warm-up. A court is busy for
game duration + warm-up + transition after each fixture.
"""
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from poolplay.utils.schedule_types import Fixture

DEFAULT_WARM_UP_MINUTES = 7
COURT_TRANSITION_MINUTES = 5


class TeamRestState:
    """Tracks when a single team was last on court (playing or refereeing)"""

    def __init__(self):
        self.last_play_time: Optional[datetime] = None

    def update(self, play_time: datetime):
        self.last_play_time = play_time

    def has_previous_match(self) -> bool:
        return self.last_play_time is not None


class RestStateTracker:
    """Tracks rest state for all teams during assignment process"""

    def __init__(self):
        self.team_states: Dict[int, TeamRestState] = {}

    def get_or_create_state(self, team_id: int) -> TeamRestState:
        if team_id not in self.team_states:
            self.team_states[team_id] = TeamRestState()
        return self.team_states[team_id]

    def update_team_state(self, team_id: int, play_time: datetime):
        self.get_or_create_state(team_id).update(play_time)

    def rest_violation(self, team_ids: Sequence[int], start_time: datetime, desired_rest: timedelta) -> timedelta:
        """
        Sum of rest shortfall over the given teams if they played at start_time.
        Teams that have not played yet have unlimited rest.
        """
        total = timedelta(0)
        for team_id in team_ids:
            state = self.team_states.get(team_id)
            if state is None or not state.has_previous_match():
                continue
            rest = start_time - state.last_play_time
            if rest < desired_rest:
                total += desired_rest - rest
        return total


class CourtClock:
    """Next free start time per court (1-based court numbers)"""

    def __init__(self, number_of_courts: int, first_game_time: datetime):
        self.next_available: Dict[int, datetime] = {
            court: first_game_time for court in range(1, number_of_courts + 1)
        }

    def courts(self) -> List[int]:
        return sorted(self.next_available)

    def occupy(self, court: int, slot_length: timedelta) -> None:
        self.next_available[court] = self.next_available[court] + slot_length


def schedule_fixtures(
    fixtures: Sequence[Fixture],
    first_game_time: datetime,
    estimated_game_duration: int,
    number_of_courts: int,
    warm_up_duration: int = DEFAULT_WARM_UP_MINUTES,
) -> List[Fixture]:
    """
    Assign court_number and scheduled_time to every fixture.

    Court choice per fixture: least rest violation, then earliest free time,
    then lowest court number. With no courts the fixtures come back unchanged.
    """
    if number_of_courts <= 0:
        return list(fixtures)

    desired_rest = timedelta(minutes=estimated_game_duration + warm_up_duration)
    slot_length = timedelta(minutes=estimated_game_duration + warm_up_duration + COURT_TRANSITION_MINUTES)

    clock = CourtClock(number_of_courts, first_game_time)
    rest_tracker = RestStateTracker()
    scheduled: List[Fixture] = []

    for fixture in fixtures:
        participants = fixture.participant_ids

        best_court = min(
            clock.courts(),
            key=lambda court: (
                rest_tracker.rest_violation(participants, clock.next_available[court], desired_rest),
                clock.next_available[court],
                court,
            ),
        )
        start_time = clock.next_available[best_court]

        scheduled.append(replace(fixture, court_number=best_court, scheduled_time=start_time))

        for team_id in participants:
            rest_tracker.update_team_state(team_id, start_time)
        clock.occupy(best_court, slot_length)

    return scheduled


def count_rest_violations(
    fixtures: Sequence[Fixture],
    estimated_game_duration: int,
    warm_up_duration: int = DEFAULT_WARM_UP_MINUTES,
) -> int:
    """Number of times a team is back on court before its desired rest has passed."""
    desired_rest = timedelta(minutes=estimated_game_duration + warm_up_duration)
    timed = sorted(
        (f for f in fixtures if f.scheduled_time is not None),
        key=lambda f: (f.scheduled_time, f.court_number or 0),
    )
    last_seen: Dict[int, datetime] = {}
    violations = 0
    for fixture in timed:
        for team_id in fixture.participant_ids:
            previous = last_seen.get(team_id)
            if previous is not None and fixture.scheduled_time - previous < desired_rest:
                violations += 1
            last_seen[team_id] = fixture.scheduled_time
    return violations
