"""Referee duty assignment for pool-play fixtures."""
from dataclasses import replace
from typing import Dict, List, Sequence

from poolplay.utils.schedule_types import Fixture, TeamSnapshot


def assign_referees(fixtures: Sequence[Fixture], teams: Sequence[TeamSnapshot]) -> List[Fixture]:
    """
    Give each fixture a referee team that is not playing in it.

    Fixtures are processed in order; the candidate with the fewest duties so
    far wins, ties going to the earlier team in `teams`. When nobody is free
    (a lone pool of 2) the fixture keeps referee_team_id=None.
    """
    duties: Dict[int, int] = {team.id: 0 for team in teams}
    assigned: List[Fixture] = []

    for fixture in fixtures:
        candidates = [t for t in teams if t.id != fixture.team1_id and t.id != fixture.team2_id]
        if not candidates:
            assigned.append(replace(fixture, referee_team_id=None))
            continue

        # min() returns the first minimum, which keeps roster order on ties
        referee = min(candidates, key=lambda t: duties[t.id])
        duties[referee.id] += 1
        assigned.append(replace(fixture, referee_team_id=referee.id))

    return assigned


def referee_duty_counts(fixtures: Sequence[Fixture]) -> Dict[int, int]:
    counts: Dict[int, int] = {}
    for fixture in fixtures:
        if fixture.referee_team_id is not None:
            counts[fixture.referee_team_id] = counts.get(fixture.referee_team_id, 0) + 1
    return counts
