"""Pool-play schedule endpoints."""
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlmodel import Session, select

from poolplay.database import get_session
from poolplay.models.match import Match, MatchStatus, TournamentPhase
from poolplay.models.tournament import Tournament
from poolplay.routes.errors import http_error
from poolplay.services.errors import SchedulingError
from poolplay.services.schedule_orchestrator import build_pool_play_schedule
from poolplay.utils.pool_planning import plan_pool_configuration

router = APIRouter()


class MatchResponse(BaseModel):
    id: int
    tournament_id: int
    tournament_phase: TournamentPhase
    pool_name: Optional[str]
    round_number: int
    match_number: int
    team1_id: Optional[int]
    team2_id: Optional[int]
    referee_team_id: Optional[int]
    scheduled_time: Optional[datetime]
    court_number: int
    status: MatchStatus
    team1_score: int
    team2_score: int
    sets_won_team1: int
    sets_won_team2: int
    winner_id: Optional[int]
    bracket_position: Optional[str]
    division: Optional[str]
    skill_level: Optional[str]
    completed_at: Optional[datetime]

    class Config:
        from_attributes = True


class PoolConfigurationResponse(BaseModel):
    team_count: int
    num_pools: int
    teams_per_pool: List[int]
    total_matches: int


@router.get("/pool-configuration", response_model=PoolConfigurationResponse)
def preview_pool_configuration(team_count: int = Query(..., ge=0)):
    """How a roster of `team_count` teams would be split into pools"""
    config = plan_pool_configuration(team_count)
    return PoolConfigurationResponse(
        team_count=team_count,
        num_pools=config.num_pools,
        teams_per_pool=config.teams_per_pool,
        total_matches=config.total_matches,
    )


@router.post("/tournaments/{tournament_id}/pool-play/generate", response_model=Dict[str, Any], status_code=201)
def generate_pool_play(tournament_id: int, replace_existing: bool = False, session: Session = Depends(get_session)):
    """
    Generate pools, round robin matches, referees and court times for all
    checked-in teams and store them as pool play matches.
    """
    try:
        result = build_pool_play_schedule(session, tournament_id, replace_existing=replace_existing)
    except SchedulingError as exc:
        raise http_error(exc)
    return result.to_dict()


@router.get("/tournaments/{tournament_id}/matches", response_model=List[MatchResponse])
def list_matches(
    tournament_id: int,
    phase: Optional[TournamentPhase] = None,
    pool_name: Optional[str] = None,
    session: Session = Depends(get_session),
):
    """Matches in stable order: phase, pool, round, match number"""
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")

    query = select(Match).where(Match.tournament_id == tournament_id)
    if phase is not None:
        query = query.where(Match.tournament_phase == phase)
    if pool_name is not None:
        query = query.where(Match.pool_name == pool_name)

    return session.exec(
        query.order_by(Match.tournament_phase, Match.pool_name, Match.round_number, Match.match_number, Match.id)
    ).all()
