"""
Playoff bracket generation for a stored tournament.

Gated on pool completion. Advancing teams are split into categories by
(division, skill level); every category gets its own seeded single
elimination bracket. Rows are inserted in one transaction together with the
tournament's brackets_generated flag.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from poolplay.models.match import Match, MatchStatus, TournamentPhase
from poolplay.models.team import Team
from poolplay.models.tournament import Tournament
from poolplay.services.bracket_builder import Bracket, build_bracket, category_label_prefix
from poolplay.services.bracket_seeding import (
    AdvancingTeam,
    find_first_round_referee,
    order_seeds,
    select_advancing_teams,
)
from poolplay.services.errors import (
    ConflictError,
    DegenerateCaseWarning,
    IncompleteDataError,
    NoAdvancingTeamsError,
    NotFoundError,
    SchedulingError,
)
from poolplay.services.pool_completion import check_pool_completion

logger = logging.getLogger(__name__)

Category = Tuple[Optional[str], Optional[str]]  # (division, skill_level)


@dataclass
class CategoryBracket:
    division: Optional[str]
    skill_level: Optional[str]
    bracket: Bracket
    team_count: int
    referee_team_id: Optional[int] = None

    @property
    def label(self) -> str:
        return category_label_prefix(self.division, self.skill_level).rstrip(" -") or "Open"

    def to_dict(self) -> Dict:
        return {
            "category": self.label,
            "division": self.division,
            "skill_level": self.skill_level,
            "teams": self.team_count,
            "matches": len(self.bracket.slots),
            "bracket_size": self.bracket.bracket_size,
        }


@dataclass
class PlayoffGenerationResult:
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    total_matches: int = 0
    categories: List[CategoryBracket] = field(default_factory=list)
    warnings: List[DegenerateCaseWarning] = field(default_factory=list)

    def to_dict(self) -> Dict:
        result = {
            "success": self.success,
            "total_matches": self.total_matches,
            "categories": [c.to_dict() for c in self.categories],
            "warnings": [w.to_dict() for w in self.warnings],
        }
        if self.message:
            result["message"] = self.message
        if self.error:
            result["error"] = self.error
            result["error_code"] = self.error_code
        return result


def group_by_category(advancing: List[AdvancingTeam], categories: Dict[int, Category]) -> Dict[Category, List[AdvancingTeam]]:
    """Category -> advancing teams, both in first-appearance (pool) order."""
    grouped: Dict[Category, List[AdvancingTeam]] = {}
    for entry in advancing:
        grouped.setdefault(categories.get(entry.team_id, (None, None)), []).append(entry)
    return grouped


def bracket_to_matches(category: CategoryBracket, tournament_id: int) -> List[Match]:
    return [
        Match(
            tournament_id=tournament_id,
            tournament_phase=TournamentPhase.playoffs,
            round_number=slot.round_number,
            match_number=slot.match_number,
            team1_id=slot.team1_id,
            team2_id=slot.team2_id,
            referee_team_id=slot.referee_team_id,
            scheduled_time=None,
            court_number=slot.court_number,
            status=MatchStatus.scheduled,
            bracket_position=slot.bracket_position,
            division=category.division,
            skill_level=category.skill_level,
        )
        for slot in category.bracket.matches()
    ]


def plan_category_brackets(
    session: Session, tournament_id: int, teams_per_pool: int
) -> Tuple[List[CategoryBracket], List[DegenerateCaseWarning]]:
    """Seeded brackets per category. Nothing is written."""
    status = check_pool_completion(session, tournament_id)
    if status.total_pools == 0:
        raise NotFoundError("No pool play matches found")
    if not status.ready_for_brackets:
        incomplete = [p.pool_name for p in status.pool_stats if not p.is_complete]
        raise IncompleteDataError(f"Pool play is not complete: {', '.join(incomplete)}")

    teams = session.exec(select(Team).where(Team.tournament_id == tournament_id)).all()
    categories: Dict[int, Category] = {t.id: (t.division, t.skill_level) for t in teams}

    pool_standings = status.standings_by_pool()
    advancing = select_advancing_teams(pool_standings, teams_per_pool)
    if not advancing:
        raise NoAdvancingTeamsError("No teams available to advance")
    advancing_ids = {a.team_id for a in advancing}

    planned: List[CategoryBracket] = []
    warnings: List[DegenerateCaseWarning] = []
    for (division, skill_level), entries in group_by_category(advancing, categories).items():
        seeds = order_seeds(entries)
        category_team_ids = {tid for tid, cat in categories.items() if cat == (division, skill_level)}
        referee = find_first_round_referee(pool_standings, advancing_ids, category_team_ids)
        bracket = build_bracket(
            seeds,
            first_round_referee_id=referee.team_id if referee else None,
            label_prefix=category_label_prefix(division, skill_level),
        )
        category = CategoryBracket(
            division=division,
            skill_level=skill_level,
            bracket=bracket,
            team_count=len(seeds),
            referee_team_id=referee.team_id if referee else None,
        )
        planned.append(category)

        if referee is None and bracket.slots:
            warnings.append(
                DegenerateCaseWarning(
                    code=DegenerateCaseWarning.NO_REFEREE,
                    message=f"{category.label}: no non-advancing team to referee the first round",
                )
            )
        for slot in bracket.byes():
            warnings.append(
                DegenerateCaseWarning(
                    code=DegenerateCaseWarning.FIRST_ROUND_BYE,
                    message=f"{slot.bracket_position}: bye",
                    match_number=slot.match_number,
                )
            )

    return planned, warnings


def generate_playoff_brackets(session: Session, tournament_id: int, teams_per_pool: int) -> PlayoffGenerationResult:
    """
    Build and store playoff brackets once pool play is complete.

    Never raises for expected failures; the result carries success/error.
    """
    try:
        tournament = session.get(Tournament, tournament_id)
        if not tournament:
            raise NotFoundError(f"Tournament {tournament_id} not found")
        if tournament.brackets_generated:
            raise ConflictError("Playoff brackets have already been generated")

        planned, warnings = plan_category_brackets(session, tournament_id, teams_per_pool)

        playoff_format = {
            "advancement_per_pool": teams_per_pool,
            "bracket_size": max(c.bracket.bracket_size for c in planned),
            "categories": [c.to_dict() for c in planned],
            "generated_at": datetime.utcnow().isoformat(),
        }
        # Claim the flag in the same transaction as the inserts; a concurrent run loses here
        claimed = session.exec(
            update(Tournament)
            .where(Tournament.id == tournament_id, Tournament.brackets_generated.is_(False))
            .values(brackets_generated=True, playoff_format=playoff_format)
        )
        if claimed.rowcount != 1:
            session.rollback()
            raise ConflictError("Playoff brackets have already been generated")

        rows: List[Match] = []
        for category in planned:
            rows.extend(bracket_to_matches(category, tournament_id))
        for row in rows:
            session.add(row)
        session.commit()

    except SchedulingError as exc:
        logger.warning("Playoff generation for tournament %d refused: %s", tournament_id, exc.message)
        return PlayoffGenerationResult(success=False, error=exc.message, error_code=exc.code)
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Playoff generation for tournament %d failed: %s", tournament_id, exc)
        return PlayoffGenerationResult(success=False, error=str(exc), error_code=SchedulingError.code)

    details = ", ".join(f"{c.label} ({c.team_count} teams, {len(c.bracket.slots)} matches)" for c in planned)
    message = f"Generated {len(rows)} playoff matches across {len(planned)} categories: {details}"
    logger.info("Tournament %d: %s", tournament_id, message)
    for warning in warnings:
        logger.warning("Tournament %d: %s", tournament_id, warning.message)

    return PlayoffGenerationResult(
        success=True,
        message=message,
        total_matches=len(rows),
        categories=planned,
        warnings=warnings,
    )
