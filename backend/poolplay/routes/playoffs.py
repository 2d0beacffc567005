"""Pool completion and playoff bracket endpoints."""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session, select

from poolplay.database import get_session
from poolplay.models.match import Match, TournamentPhase
from poolplay.models.team import CheckInStatus, Team
from poolplay.models.tournament import Tournament
from poolplay.routes.errors import http_error, http_error_for_code
from poolplay.routes.schedule import MatchResponse
from poolplay.services.bracket_seeding import recommend_advancement
from poolplay.services.errors import SchedulingError
from poolplay.services.playoff_orchestrator import generate_playoff_brackets
from poolplay.services.pool_completion import check_pool_completion

router = APIRouter()


class GenerateBracketsRequest(BaseModel):
    teams_per_pool: Optional[int] = None  # default: tournament setting; 999 = everyone advances


class BracketRound(BaseModel):
    round_number: int
    matches: List[MatchResponse]


class CategoryBracketResponse(BaseModel):
    division: Optional[str]
    skill_level: Optional[str]
    rounds: List[BracketRound]


@router.get("/tournaments/{tournament_id}/pool-completion", response_model=Dict[str, Any])
def get_pool_completion(tournament_id: int, session: Session = Depends(get_session)):
    try:
        status = check_pool_completion(session, tournament_id)
    except SchedulingError as exc:
        raise http_error(exc)
    return status.to_dict()


@router.get("/tournaments/{tournament_id}/advancement-recommendation", response_model=Dict[str, Any])
def get_advancement_recommendation(tournament_id: int, session: Session = Depends(get_session)):
    """Suggested teams-per-pool advancement based on the checked-in roster size"""
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")
    teams = session.exec(
        select(Team).where(Team.tournament_id == tournament_id, Team.check_in_status == CheckInStatus.checked_in)
    ).all()
    return {"total_teams": len(teams), **recommend_advancement(len(teams))}


@router.post("/tournaments/{tournament_id}/playoffs/generate", response_model=Dict[str, Any], status_code=201)
def post_generate_playoff_brackets(
    tournament_id: int,
    payload: Optional[GenerateBracketsRequest] = None,
    session: Session = Depends(get_session),
):
    """Build the playoff brackets once every pool is complete"""
    teams_per_pool = payload.teams_per_pool if payload else None
    if teams_per_pool is None:
        tournament = session.get(Tournament, tournament_id)
        if not tournament:
            raise HTTPException(status_code=404, detail="Tournament not found")
        teams_per_pool = tournament.teams_per_pool_advancement

    result = generate_playoff_brackets(session, tournament_id, teams_per_pool)
    if not result.success:
        raise http_error_for_code(result.error_code, result.error)
    return result.to_dict()


@router.get("/tournaments/{tournament_id}/playoffs/bracket", response_model=List[CategoryBracketResponse])
def get_playoff_bracket(tournament_id: int, session: Session = Depends(get_session)):
    """Playoff matches grouped by category, then round"""
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")

    matches = session.exec(
        select(Match)
        .where(Match.tournament_id == tournament_id, Match.tournament_phase == TournamentPhase.playoffs)
        .order_by(Match.id)
    ).all()

    categories: Dict[tuple, Dict[int, List[Match]]] = {}
    for match in matches:
        rounds = categories.setdefault((match.division, match.skill_level), {})
        rounds.setdefault(match.round_number, []).append(match)

    return [
        CategoryBracketResponse(
            division=division,
            skill_level=skill_level,
            rounds=[
                BracketRound(
                    round_number=round_number,
                    matches=[
                        MatchResponse.model_validate(m)
                        for m in sorted(rounds[round_number], key=lambda m: m.match_number)
                    ],
                )
                for round_number in sorted(rounds)
            ],
        )
        for (division, skill_level), rounds in categories.items()
    ]
