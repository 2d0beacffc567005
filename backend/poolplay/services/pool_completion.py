"""
Pool completion monitoring.

A pool is complete when every one of its matches is completed; the
tournament is ready for brackets once at least one pool exists and all
pools are complete. Standings are only computed for complete pools.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from poolplay.models.match import Match, TournamentPhase
from poolplay.models.team import Team
from poolplay.models.tournament import Tournament
from poolplay.services.errors import NotFoundError, SchedulingError
from poolplay.services.standings import MatchResult, TeamStanding, calculate_pool_standings

logger = logging.getLogger(__name__)

DEFAULT_POOL_NAME = "Pool"


@dataclass
class PoolStats:
    pool_name: str
    total_matches: int
    completed_matches: int
    is_complete: bool
    standings: List[TeamStanding] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "pool_name": self.pool_name,
            "total_matches": self.total_matches,
            "completed_matches": self.completed_matches,
            "is_complete": self.is_complete,
            "standings": [s.to_dict() for s in self.standings],
        }


@dataclass
class PoolCompletionStatus:
    pool_stats: List[PoolStats] = field(default_factory=list)

    @property
    def total_pools(self) -> int:
        return len(self.pool_stats)

    @property
    def completed_pools(self) -> int:
        return sum(1 for p in self.pool_stats if p.is_complete)

    @property
    def all_pools_complete(self) -> bool:
        return self.total_pools > 0 and self.completed_pools == self.total_pools

    @property
    def ready_for_brackets(self) -> bool:
        return self.all_pools_complete

    def standings_by_pool(self) -> Dict[str, List[TeamStanding]]:
        return {p.pool_name: p.standings for p in self.pool_stats}

    def to_dict(self) -> Dict:
        return {
            "all_pools_complete": self.all_pools_complete,
            "total_pools": self.total_pools,
            "completed_pools": self.completed_pools,
            "ready_for_brackets": self.ready_for_brackets,
            "pool_stats": [p.to_dict() for p in self.pool_stats],
        }


def group_by_pool(results: Sequence[MatchResult]) -> Dict[str, List[MatchResult]]:
    """Group results by pool name, pools in order of first appearance."""
    groups: Dict[str, List[MatchResult]] = {}
    for result in results:
        groups.setdefault(result.pool_name or DEFAULT_POOL_NAME, []).append(result)
    return groups


def summarize_pool_completion(
    results: Sequence[MatchResult],
    team_names: Optional[Mapping[int, str]] = None,
) -> PoolCompletionStatus:
    status = PoolCompletionStatus()
    for pool_name, pool_results in group_by_pool(results).items():
        completed = [r for r in pool_results if r.is_completed]
        is_complete = len(completed) == len(pool_results)
        status.pool_stats.append(
            PoolStats(
                pool_name=pool_name,
                total_matches=len(pool_results),
                completed_matches=len(completed),
                is_complete=is_complete,
                standings=calculate_pool_standings(completed, team_names) if is_complete else [],
            )
        )
    return status


def match_to_result(match: Match) -> MatchResult:
    return MatchResult(
        pool_name=match.pool_name,
        team1_id=match.team1_id,
        team2_id=match.team2_id,
        status=str(getattr(match.status, "value", match.status)),
        sets_won_team1=match.sets_won_team1 or 0,
        sets_won_team2=match.sets_won_team2 or 0,
    )


def load_pool_play_results(session: Session, tournament_id: int) -> List[MatchResult]:
    # Insert order is pool order, so ordering by id keeps pools in generation order
    matches = session.exec(
        select(Match)
        .where(Match.tournament_id == tournament_id, Match.tournament_phase == TournamentPhase.pool_play)
        .order_by(Match.id)
    ).all()
    return [match_to_result(m) for m in matches]


def load_team_names(session: Session, tournament_id: int) -> Dict[int, str]:
    teams = session.exec(select(Team).where(Team.tournament_id == tournament_id)).all()
    return {t.id: t.name for t in teams}


def check_pool_completion(session: Session, tournament_id: int) -> PoolCompletionStatus:
    """
    Pool completion for a tournament read from the store.

    Raises NotFoundError for an unknown tournament and SchedulingError when
    the store cannot be read.
    """
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise NotFoundError(f"Tournament {tournament_id} not found")

    try:
        results = load_pool_play_results(session, tournament_id)
        team_names = load_team_names(session, tournament_id)
    except SQLAlchemyError as exc:
        logger.error("Failed to load pool play for tournament %d: %s", tournament_id, exc)
        raise SchedulingError(f"Could not read pool play matches: {exc}") from exc

    status = summarize_pool_completion(results, team_names)
    logger.info(
        "Pool completion for tournament %d: %d/%d pools complete (ready_for_brackets=%s)",
        tournament_id,
        status.completed_pools,
        status.total_pools,
        status.ready_for_brackets,
    )
    return status
