"""
Immutable snapshots the scheduling pipeline works on.

Rows from the store are converted into these at the session boundary
(see services/schedule_orchestrator.py and services/pool_completion.py);
nothing in utils/ touches a Session.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class TeamSnapshot:
    id: int
    name: str
    skill_level: Optional[str] = None
    division: Optional[str] = None


@dataclass(frozen=True)
class Pool:
    name: str
    teams: Tuple[TeamSnapshot, ...] = ()
    skill_level: Optional[str] = None

    @property
    def team_ids(self) -> List[int]:
        return [t.id for t in self.teams]


@dataclass(frozen=True)
class PoolConfiguration:
    num_pools: int
    teams_per_pool: List[int] = field(default_factory=list)
    total_matches: int = 0


@dataclass(frozen=True)
class Fixture:
    """A pool-play match before it is persisted."""

    pool_name: str
    round_number: int
    match_number: int
    team1_id: int
    team2_id: int
    referee_team_id: Optional[int] = None
    court_number: Optional[int] = None
    scheduled_time: Optional[datetime] = None
    skill_level: Optional[str] = None

    @property
    def participant_ids(self) -> List[int]:
        """Teams occupied by this fixture: both sides plus the referee if set."""
        ids = [self.team1_id, self.team2_id]
        if self.referee_team_id is not None:
            ids.append(self.referee_team_id)
        return ids
