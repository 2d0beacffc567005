"""
Round robin fixture generation within a single pool.

Every unordered pair of pool members meets exactly once. Pairings are
grouped into rounds in which no team appears twice so a round can be
played across parallel courts.
"""
from typing import List, Sequence, Tuple

from poolplay.utils.schedule_types import Fixture, Pool, TeamSnapshot

Pairing = Tuple[TeamSnapshot, TeamSnapshot]


def all_pairings(teams: Sequence[TeamSnapshot]) -> List[Pairing]:
    """All (i, j) pairings with i < j over member order."""
    pairings: List[Pairing] = []
    for i in range(len(teams)):
        for j in range(i + 1, len(teams)):
            pairings.append((teams[i], teams[j]))
    return pairings


def partition_into_rounds(pairings: Sequence[Pairing]) -> List[List[Pairing]]:
    """
    Greedy first-fit partition of pairings into rounds.

    Each pass scans the remaining pairings in order and takes every pairing
    whose teams are both still free in the current round. Does not guarantee
    the minimum number of rounds.
    """
    remaining = list(pairings)
    rounds: List[List[Pairing]] = []

    while remaining:
        current: List[Pairing] = []
        busy = set()
        leftover: List[Pairing] = []
        for pairing in remaining:
            team_a, team_b = pairing
            if team_a.id in busy or team_b.id in busy:
                leftover.append(pairing)
                continue
            current.append(pairing)
            busy.add(team_a.id)
            busy.add(team_b.id)

        # A non-empty remaining list always yields at least its first pairing
        rounds.append(current)
        remaining = leftover

    return rounds


def generate_round_robin_fixtures(pool: Pool) -> List[Fixture]:
    """Fixtures for one pool, ordered round by round. Pools under 2 teams get none."""
    if len(pool.teams) < 2:
        return []

    fixtures: List[Fixture] = []
    match_number = 1
    for round_number, round_pairings in enumerate(partition_into_rounds(all_pairings(pool.teams)), start=1):
        for team_a, team_b in round_pairings:
            fixtures.append(
                Fixture(
                    pool_name=pool.name,
                    round_number=round_number,
                    match_number=match_number,
                    team1_id=team_a.id,
                    team2_id=team_b.id,
                    skill_level=pool.skill_level,
                )
            )
            match_number += 1

    return fixtures
