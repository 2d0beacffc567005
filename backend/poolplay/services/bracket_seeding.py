"""
Advancement selection and playoff seeding.

The top N of every pool advance. Seeds go by finishing position first
(every pool winner, then every runner-up, ...) and, within a finishing
position, by win percentage, set differential and sets won. Teams still
tied keep pool order.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Collection, Dict, List, Mapping, Optional, Sequence

from poolplay.services.errors import InputError, NoAdvancingTeamsError
from poolplay.services.standings import TeamStanding, standing_rank_key

# Sentinel for "every team in every pool advances"
ADVANCE_ALL = 999


@dataclass(frozen=True)
class AdvancingTeam:
    pool_name: str
    pool_rank: int  # 1-based finishing position within the pool
    standing: TeamStanding

    @property
    def team_id(self) -> int:
        return self.standing.team_id


@dataclass(frozen=True)
class SeededTeam:
    seed: int  # 1 = top seed
    pool_name: str
    pool_rank: int
    standing: TeamStanding

    @property
    def team_id(self) -> int:
        return self.standing.team_id

    @property
    def team_name(self) -> str:
        return self.standing.team_name


def _seed_order_key(entry: AdvancingTeam):
    return (entry.pool_rank,) + standing_rank_key(entry.standing)


def select_advancing_teams(
    pool_standings: Mapping[str, Sequence[TeamStanding]],
    teams_per_pool: Optional[int],
) -> List[AdvancingTeam]:
    """Top `teams_per_pool` of every pool, pool by pool. None or ADVANCE_ALL takes everyone."""
    if teams_per_pool is not None and teams_per_pool != ADVANCE_ALL and teams_per_pool <= 0:
        raise InputError(f"teams_per_pool must be positive, got {teams_per_pool}")

    advancing: List[AdvancingTeam] = []
    for pool_name, standings in pool_standings.items():
        cutoff = len(standings) if teams_per_pool in (None, ADVANCE_ALL) else teams_per_pool
        for rank, standing in enumerate(standings[:cutoff], start=1):
            advancing.append(AdvancingTeam(pool_name=pool_name, pool_rank=rank, standing=standing))
    return advancing


def order_seeds(advancing: Sequence[AdvancingTeam]) -> List[SeededTeam]:
    """Assign seeds 1..K. Input order must be pool order; sorted() keeps it for full ties."""
    ordered = sorted(advancing, key=_seed_order_key)
    return [
        SeededTeam(seed=i, pool_name=a.pool_name, pool_rank=a.pool_rank, standing=a.standing)
        for i, a in enumerate(ordered, start=1)
    ]


def seed_advancing_teams(
    pool_standings: Mapping[str, Sequence[TeamStanding]],
    teams_per_pool: Optional[int],
) -> List[SeededTeam]:
    seeds = order_seeds(select_advancing_teams(pool_standings, teams_per_pool))
    if not seeds:
        raise NoAdvancingTeamsError("No teams available to advance")
    return seeds


def find_first_round_referee(
    pool_standings: Mapping[str, Sequence[TeamStanding]],
    advancing_team_ids: Collection[int],
    eligible_team_ids: Optional[Collection[int]] = None,
) -> Optional[TeamStanding]:
    """
    Best-placed team that did not advance, ranked like seeds.

    `eligible_team_ids` narrows the search to one bracket category.
    """
    candidates: List[AdvancingTeam] = []
    for pool_name, standings in pool_standings.items():
        for rank, standing in enumerate(standings, start=1):
            if standing.team_id in advancing_team_ids:
                continue
            if eligible_team_ids is not None and standing.team_id not in eligible_team_ids:
                continue
            candidates.append(AdvancingTeam(pool_name=pool_name, pool_rank=rank, standing=standing))

    if not candidates:
        return None
    return sorted(candidates, key=_seed_order_key)[0].standing


def recommend_advancement(total_teams: int) -> Dict:
    """Suggested advancement count per pool for a tournament of `total_teams`."""
    if total_teams <= 8:
        return {
            "teams_per_pool": 1,
            "reasoning": "With 8 or fewer teams, advance top team from each pool for clean bracket",
            "bracket_size": min(total_teams, 8),
        }
    if total_teams <= 16:
        return {
            "teams_per_pool": 2,
            "reasoning": "Advance top 2 from each pool for optimal 8-16 team bracket",
            "bracket_size": min(total_teams, 16),
        }
    if total_teams <= 24:
        return {
            "teams_per_pool": 2,
            "reasoning": "Advance top 2 from each pool for competitive 16+ team bracket",
            "bracket_size": min(total_teams, 24),
        }
    return {
        "teams_per_pool": 3,
        "reasoning": "Large tournament - advance top 3 from each pool",
        "bracket_size": min(total_teams, 32),
    }
