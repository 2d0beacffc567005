from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from poolplay.database import get_session
from poolplay.models.team import CheckInStatus, Team
from poolplay.models.tournament import Tournament

router = APIRouter()


class TeamCreate(BaseModel):
    name: str
    skill_level: Optional[str] = None
    division: Optional[str] = None
    check_in_status: CheckInStatus = CheckInStatus.registered

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name is required")
        return v.strip()


class TeamUpdate(BaseModel):
    name: Optional[str] = None
    skill_level: Optional[str] = None
    division: Optional[str] = None
    check_in_status: Optional[CheckInStatus] = None


class TeamResponse(BaseModel):
    id: int
    tournament_id: int
    name: str
    skill_level: Optional[str]
    division: Optional[str]
    check_in_status: CheckInStatus
    created_at: datetime

    class Config:
        from_attributes = True


def _get_tournament_or_404(session: Session, tournament_id: int) -> Tournament:
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")
    return tournament


@router.get("/tournaments/{tournament_id}/teams", response_model=List[TeamResponse])
def list_teams(tournament_id: int, checked_in_only: bool = False, session: Session = Depends(get_session)):
    """List teams in registration order"""
    _get_tournament_or_404(session, tournament_id)
    query = select(Team).where(Team.tournament_id == tournament_id)
    if checked_in_only:
        query = query.where(Team.check_in_status == CheckInStatus.checked_in)
    return session.exec(query.order_by(Team.id)).all()


@router.post("/tournaments/{tournament_id}/teams", response_model=TeamResponse, status_code=201)
def create_team(tournament_id: int, team_data: TeamCreate, session: Session = Depends(get_session)):
    _get_tournament_or_404(session, tournament_id)
    team = Team(tournament_id=tournament_id, **team_data.model_dump())
    session.add(team)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail=f"Team name '{team_data.name}' already registered")
    session.refresh(team)
    return team


@router.patch("/tournaments/{tournament_id}/teams/{team_id}", response_model=TeamResponse)
def update_team(tournament_id: int, team_id: int, team_data: TeamUpdate, session: Session = Depends(get_session)):
    """Update a team; used for check-in."""
    _get_tournament_or_404(session, tournament_id)
    team = session.get(Team, team_id)
    if not team or team.tournament_id != tournament_id:
        raise HTTPException(status_code=404, detail="Team not found")

    for key, value in team_data.model_dump(exclude_unset=True).items():
        setattr(team, key, value)
    session.add(team)
    session.commit()
    session.refresh(team)
    return team
