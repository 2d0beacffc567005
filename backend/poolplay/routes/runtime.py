"""
Match result entry and playoff advancement.

Completing a playoff match moves its winner into the next round. An
advancement conflict is reported in the response but does not undo the
result that was just recorded.
"""
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator
from sqlmodel import Session

from poolplay.database import get_session
from poolplay.models.match import Match, MatchStatus, TournamentPhase
from poolplay.models.tournament import Tournament
from poolplay.routes.schedule import MatchResponse
from poolplay.services.advancement_service import (
    CONFLICT,
    ERROR,
    advance_winner_to_next_round,
    resolve_all_dependencies,
)

router = APIRouter()


class MatchResultUpdate(BaseModel):
    status: Optional[MatchStatus] = None
    team1_score: Optional[int] = None
    team2_score: Optional[int] = None
    sets_won_team1: Optional[int] = None
    sets_won_team2: Optional[int] = None
    winner_id: Optional[int] = None

    @field_validator("team1_score", "team2_score", "sets_won_team1", "sets_won_team2")
    @classmethod
    def validate_non_negative(cls, v):
        if v is not None and v < 0:
            raise ValueError("scores must not be negative")
        return v


class MatchResultResponse(BaseModel):
    match: MatchResponse
    advancement: Optional[Dict[str, Any]] = None


def _get_match_or_404(session: Session, tournament_id: int, match_id: int) -> Match:
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")
    match = session.get(Match, match_id)
    if not match or match.tournament_id != tournament_id:
        raise HTTPException(status_code=404, detail="Match not found")
    return match


def _is_first_round_bye(match: Match) -> bool:
    return match.tournament_phase == TournamentPhase.playoffs and match.round_number == 1


def _decide_winner(match: Match, requested_winner: Optional[int]) -> Optional[int]:
    teams = [t for t in (match.team1_id, match.team2_id) if t is not None]
    if requested_winner is not None:
        if requested_winner not in teams:
            raise HTTPException(status_code=422, detail="winner_id must be one of the match's teams")
        return requested_winner
    if len(teams) == 1 and _is_first_round_bye(match):
        return teams[0]
    if match.sets_won_team1 > match.sets_won_team2:
        return match.team1_id
    if match.sets_won_team2 > match.sets_won_team1:
        return match.team2_id
    return None


@router.patch("/tournaments/{tournament_id}/runtime/matches/{match_id}", response_model=MatchResultResponse)
def update_match_result(
    tournament_id: int,
    match_id: int,
    payload: MatchResultUpdate,
    session: Session = Depends(get_session),
) -> MatchResultResponse:
    """Record scores; status=completed finalizes the match (terminal)."""
    match = _get_match_or_404(session, tournament_id, match_id)

    if match.status == MatchStatus.completed:
        raise HTTPException(status_code=422, detail="Match is already completed")

    for key in ("team1_score", "team2_score", "sets_won_team1", "sets_won_team2"):
        value = getattr(payload, key)
        if value is not None:
            setattr(match, key, value)

    if payload.status == MatchStatus.completed:
        if match.team1_id is None and match.team2_id is None:
            raise HTTPException(status_code=422, detail="Match has no teams yet")
        if (match.team1_id is None or match.team2_id is None) and not _is_first_round_bye(match):
            raise HTTPException(status_code=422, detail="Match is still waiting for an opponent")
        winner_id = _decide_winner(match, payload.winner_id)
        if winner_id is None and match.tournament_phase == TournamentPhase.playoffs:
            raise HTTPException(status_code=422, detail="Playoff matches need a winner")
        match.winner_id = winner_id
        match.status = MatchStatus.completed
        match.completed_at = datetime.utcnow()

    session.add(match)
    session.commit()
    session.refresh(match)

    advancement = None
    if match.status == MatchStatus.completed and match.tournament_phase == TournamentPhase.playoffs:
        advancement = advance_winner_to_next_round(session, match_id).to_dict()
        session.refresh(match)

    return MatchResultResponse(match=MatchResponse.model_validate(match), advancement=advancement)


@router.post("/tournaments/{tournament_id}/runtime/matches/{match_id}/advance", response_model=Dict[str, Any])
def advance_match(tournament_id: int, match_id: int, session: Session = Depends(get_session)) -> Dict[str, Any]:
    """Re-run advancement for a completed playoff match (retry/repair)."""
    match = _get_match_or_404(session, tournament_id, match_id)
    if match.tournament_phase != TournamentPhase.playoffs:
        raise HTTPException(status_code=422, detail="Only playoff matches advance")
    if match.status != MatchStatus.completed or match.winner_id is None:
        raise HTTPException(status_code=422, detail="Match must be completed with a winner to advance")

    outcome = advance_winner_to_next_round(session, match_id)
    if outcome.status == CONFLICT:
        raise HTTPException(status_code=409, detail=outcome.to_dict())
    if outcome.status == ERROR:
        raise HTTPException(status_code=500, detail=outcome.message)
    return outcome.to_dict()


@router.post("/tournaments/{tournament_id}/runtime/resolve-dependencies", response_model=Dict[str, Any])
def resolve_dependencies(tournament_id: int, session: Session = Depends(get_session)) -> Dict[str, Any]:
    """Advance every completed playoff match; idempotent."""
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")
    return resolve_all_dependencies(session, tournament_id)
