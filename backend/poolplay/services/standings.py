"""
Pool standings from completed match results.

Ranking: win percentage, then set differential, then sets won, all
descending. Teams tied on all three keep their first-appearance order.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

UNKNOWN_TEAM_NAME = "Unknown Team"


@dataclass(frozen=True)
class MatchResult:
    """The parts of a Match row that standings and completion checks read."""

    pool_name: Optional[str]
    team1_id: Optional[int]
    team2_id: Optional[int]
    status: str
    sets_won_team1: int = 0
    sets_won_team2: int = 0

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"


@dataclass
class TeamStanding:
    team_id: int
    team_name: str
    wins: int = 0
    losses: int = 0
    sets_won: int = 0
    sets_lost: int = 0

    @property
    def sets_differential(self) -> int:
        return self.sets_won - self.sets_lost

    @property
    def win_percentage(self) -> float:
        decided = self.wins + self.losses
        return self.wins / decided if decided > 0 else 0.0

    def to_dict(self) -> Dict:
        return {
            "team_id": self.team_id,
            "team_name": self.team_name,
            "wins": self.wins,
            "losses": self.losses,
            "sets_won": self.sets_won,
            "sets_lost": self.sets_lost,
            "sets_differential": self.sets_differential,
            "win_percentage": self.win_percentage,
        }


def standing_rank_key(standing: TeamStanding):
    return (-standing.win_percentage, -standing.sets_differential, -standing.sets_won)


def calculate_pool_standings(
    results: Sequence[MatchResult],
    team_names: Optional[Mapping[int, str]] = None,
) -> List[TeamStanding]:
    """
    Standings for one pool.

    Every team named in any result gets a row; only completed results count.
    A match with equal sets awards no win or loss.
    """
    team_names = team_names or {}
    table: Dict[int, TeamStanding] = {}

    for result in results:
        for team_id in (result.team1_id, result.team2_id):
            if team_id is not None and team_id not in table:
                table[team_id] = TeamStanding(team_id=team_id, team_name=team_names.get(team_id, UNKNOWN_TEAM_NAME))

    for result in results:
        if not result.is_completed or result.team1_id is None or result.team2_id is None:
            continue
        team1 = table[result.team1_id]
        team2 = table[result.team2_id]
        sets1 = result.sets_won_team1 or 0
        sets2 = result.sets_won_team2 or 0

        team1.sets_won += sets1
        team1.sets_lost += sets2
        team2.sets_won += sets2
        team2.sets_lost += sets1

        if sets1 > sets2:
            team1.wins += 1
            team2.losses += 1
        elif sets2 > sets1:
            team2.wins += 1
            team1.losses += 1

    # sorted() is stable
    return sorted(table.values(), key=standing_rank_key)
