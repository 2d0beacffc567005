"""
Pool-play schedule generation.

Pipeline (pure, deterministic for a given roster order):
1. Plan and build pools
2. Round robin fixtures per pool
3. Referee assignment across the whole roster
4. Court/time assignment

build_pool_play_schedule() wraps the pipeline for a stored tournament:
reads checked-in teams, runs it, and persists the Match rows.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from poolplay.models.match import Match, MatchStatus, TournamentPhase
from poolplay.models.team import CheckInStatus, Team
from poolplay.models.tournament import Tournament
from poolplay.services.errors import ConflictError, DegenerateCaseWarning, InputError, NotFoundError, SchedulingError
from poolplay.utils.court_scheduling import DEFAULT_WARM_UP_MINUTES, schedule_fixtures
from poolplay.utils.pool_planning import build_pools
from poolplay.utils.referee_assignment import assign_referees
from poolplay.utils.round_robin import generate_round_robin_fixtures
from poolplay.utils.schedule_types import Fixture, Pool, TeamSnapshot

logger = logging.getLogger(__name__)

OPEN_SKILL_LEVEL = "open"


@dataclass
class PoolPlaySchedule:
    pools: List[Pool] = field(default_factory=list)
    matches: List[Fixture] = field(default_factory=list)
    warnings: List[DegenerateCaseWarning] = field(default_factory=list)
    required_courts: Optional[int] = None
    skill_level_breakdown: Optional[Dict[str, Dict[str, int]]] = None


def _validate_timing(estimated_game_duration: int, warm_up_duration: int) -> None:
    if estimated_game_duration is None or estimated_game_duration <= 0:
        raise InputError(f"estimated_game_duration must be positive, got {estimated_game_duration}")
    if warm_up_duration is None or warm_up_duration < 0:
        raise InputError(f"warm_up_duration must not be negative, got {warm_up_duration}")


def _resolve_courts(number_of_courts: Optional[int], pool_count: int) -> int:
    """None means one court per pool."""
    if number_of_courts is None:
        return pool_count
    if number_of_courts <= 0:
        raise InputError(f"number_of_courts must be positive, got {number_of_courts}")
    return number_of_courts


def _referee_warnings(fixtures: Sequence[Fixture]) -> List[DegenerateCaseWarning]:
    warnings = []
    for fixture in fixtures:
        if fixture.referee_team_id is None:
            warnings.append(
                DegenerateCaseWarning(
                    code=DegenerateCaseWarning.NO_REFEREE,
                    message=f"No team available to referee pool {fixture.pool_name} match {fixture.match_number}",
                    pool_name=fixture.pool_name,
                    match_number=fixture.match_number,
                )
            )
    return warnings


def _assign_and_schedule(
    fixtures: List[Fixture],
    teams: Sequence[TeamSnapshot],
    first_game_time: datetime,
    estimated_game_duration: int,
    number_of_courts: int,
    warm_up_duration: int,
) -> List[Fixture]:
    with_referees = assign_referees(fixtures, teams)
    return schedule_fixtures(
        with_referees,
        first_game_time,
        estimated_game_duration,
        number_of_courts,
        warm_up_duration,
    )


def generate_pool_play_schedule(
    teams: Sequence[TeamSnapshot],
    first_game_time: datetime,
    estimated_game_duration: int,
    number_of_courts: Optional[int] = None,
    warm_up_duration: int = DEFAULT_WARM_UP_MINUTES,
) -> PoolPlaySchedule:
    """Pools and scheduled fixtures for one roster. No teams gives an empty schedule."""
    _validate_timing(estimated_game_duration, warm_up_duration)

    pools = build_pools(teams)
    courts = _resolve_courts(number_of_courts, len(pools))

    fixtures: List[Fixture] = []
    for pool in pools:
        fixtures.extend(generate_round_robin_fixtures(pool))

    scheduled = _assign_and_schedule(
        fixtures, teams, first_game_time, estimated_game_duration, courts, warm_up_duration
    )
    return PoolPlaySchedule(pools=pools, matches=scheduled, warnings=_referee_warnings(scheduled))


def group_teams_by_skill_level(teams: Sequence[TeamSnapshot]) -> Dict[str, List[TeamSnapshot]]:
    """Skill level -> teams, levels in order of first appearance. Missing level counts as "open"."""
    groups: Dict[str, List[TeamSnapshot]] = {}
    for team in teams:
        groups.setdefault(team.skill_level or OPEN_SKILL_LEVEL, []).append(team)
    return groups


def generate_pool_play_schedule_by_skill_level(
    teams: Sequence[TeamSnapshot],
    first_game_time: datetime,
    estimated_game_duration: int,
    warm_up_duration: int = DEFAULT_WARM_UP_MINUTES,
    number_of_courts: Optional[int] = None,
) -> PoolPlaySchedule:
    """
    Separate pools per skill level, scheduled together.

    Each pool needs one court during pool play, so required_courts is the
    total pool count; it is also used when number_of_courts is not given.
    Referees are drawn from the whole roster.
    """
    _validate_timing(estimated_game_duration, warm_up_duration)

    all_pools: List[Pool] = []
    all_fixtures: List[Fixture] = []
    breakdown: Dict[str, Dict[str, int]] = {}

    for skill_level, skill_teams in group_teams_by_skill_level(teams).items():
        pools = build_pools(skill_teams, skill_level)
        skill_fixtures: List[Fixture] = []
        for pool in pools:
            skill_fixtures.extend(generate_round_robin_fixtures(pool))

        breakdown[skill_level] = {
            "pools": len(pools),
            "matches": len(skill_fixtures),
            "teams": len(skill_teams),
        }
        all_pools.extend(pools)
        all_fixtures.extend(skill_fixtures)

    required_courts = len(all_pools)
    courts = _resolve_courts(number_of_courts, required_courts)

    scheduled = _assign_and_schedule(
        all_fixtures, teams, first_game_time, estimated_game_duration, courts, warm_up_duration
    )
    return PoolPlaySchedule(
        pools=all_pools,
        matches=scheduled,
        warnings=_referee_warnings(scheduled),
        required_courts=required_courts,
        skill_level_breakdown=breakdown,
    )


# ============================================================================
# Store-backed build
# ============================================================================


class PoolPlayBuildResult:
    """Summary of a persisted pool-play build"""

    def __init__(self, tournament_id: int):
        self.tournament_id = tournament_id
        self.pools: List[Pool] = []
        self.match_ids: List[int] = []
        self.required_courts: Optional[int] = None
        self.courts_used = 0
        self.skill_level_breakdown: Optional[Dict[str, Dict[str, int]]] = None
        self.warnings: List[DegenerateCaseWarning] = []

    def to_dict(self):
        return {
            "tournament_id": self.tournament_id,
            "pools": [{"name": p.name, "team_ids": p.team_ids} for p in self.pools],
            "matches_created": len(self.match_ids),
            "required_courts": self.required_courts,
            "courts_used": self.courts_used,
            "skill_level_breakdown": self.skill_level_breakdown,
            "warnings": [w.to_dict() for w in self.warnings],
        }


def team_to_snapshot(team: Team) -> TeamSnapshot:
    return TeamSnapshot(id=team.id, name=team.name, skill_level=team.skill_level, division=team.division)


def fixture_to_match(fixture: Fixture, tournament_id: int, division: Optional[str] = None) -> Match:
    return Match(
        tournament_id=tournament_id,
        tournament_phase=TournamentPhase.pool_play,
        pool_name=fixture.pool_name,
        round_number=fixture.round_number,
        match_number=fixture.match_number,
        team1_id=fixture.team1_id,
        team2_id=fixture.team2_id,
        referee_team_id=fixture.referee_team_id,
        scheduled_time=fixture.scheduled_time,
        court_number=fixture.court_number or 1,
        status=MatchStatus.scheduled,
        skill_level=fixture.skill_level,
        division=division,
    )


def build_pool_play_schedule(session: Session, tournament_id: int, replace_existing: bool = False) -> PoolPlayBuildResult:
    """
    Generate and persist pool play for a tournament's checked-in teams.

    Raises:
        NotFoundError: unknown tournament
        InputError: missing first game time, no checked-in teams, bad timing
        ConflictError: pool play exists (and replace_existing is False) or brackets exist
        SchedulingError: store failure
    """
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise NotFoundError(f"Tournament {tournament_id} not found")
    if tournament.first_game_time is None:
        raise InputError("first_game_time is not set for this tournament")
    if tournament.brackets_generated:
        raise ConflictError("Playoff brackets already generated; pool play can no longer be rebuilt")

    existing = session.exec(
        select(Match.id).where(
            Match.tournament_id == tournament_id, Match.tournament_phase == TournamentPhase.pool_play
        )
    ).all()
    if existing and not replace_existing:
        raise ConflictError(f"Tournament {tournament_id} already has {len(existing)} pool play matches")

    teams = session.exec(
        select(Team)
        .where(Team.tournament_id == tournament_id, Team.check_in_status == CheckInStatus.checked_in)
        .order_by(Team.id)
    ).all()
    if not teams:
        raise InputError("No checked-in teams to schedule")
    snapshots = [team_to_snapshot(t) for t in teams]
    divisions = {t.id: t.division for t in teams}

    if tournament.partition_by_skill_level:
        schedule = generate_pool_play_schedule_by_skill_level(
            snapshots,
            tournament.first_game_time,
            tournament.estimated_game_duration,
            tournament.warm_up_duration,
            tournament.number_of_courts,
        )
    else:
        schedule = generate_pool_play_schedule(
            snapshots,
            tournament.first_game_time,
            tournament.estimated_game_duration,
            tournament.number_of_courts,
            tournament.warm_up_duration,
        )

    result = PoolPlayBuildResult(tournament_id)
    result.pools = schedule.pools
    result.required_courts = schedule.required_courts
    result.skill_level_breakdown = schedule.skill_level_breakdown
    result.warnings = schedule.warnings
    result.courts_used = len({f.court_number for f in schedule.matches if f.court_number is not None})

    try:
        if existing:
            session.exec(
                delete(Match).where(
                    Match.tournament_id == tournament_id, Match.tournament_phase == TournamentPhase.pool_play
                )
            )
        rows = [fixture_to_match(f, tournament_id, divisions.get(f.team1_id)) for f in schedule.matches]
        for row in rows:
            session.add(row)
        session.commit()
        for row in rows:
            session.refresh(row)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Failed to persist pool play for tournament %d: %s", tournament_id, exc)
        raise SchedulingError(f"Could not save pool play schedule: {exc}") from exc

    result.match_ids = [row.id for row in rows]
    logger.info(
        "Pool play for tournament %d: %d teams, %d pools, %d matches, %d without referee",
        tournament_id,
        len(snapshots),
        len(schedule.pools),
        len(rows),
        len(schedule.warnings),
    )
    for warning in schedule.warnings:
        logger.warning("Tournament %d: %s", tournament_id, warning.message)
    return result
