from datetime import date, datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator
from sqlmodel import Session, select

from poolplay.database import get_session
from poolplay.models.tournament import Tournament

router = APIRouter()


class TournamentCreate(BaseModel):
    name: str
    location: Optional[str] = None
    start_date: Optional[date] = None
    notes: Optional[str] = None
    first_game_time: Optional[datetime] = None
    estimated_game_duration: int = 30
    warm_up_duration: int = 7
    number_of_courts: Optional[int] = None
    partition_by_skill_level: bool = False
    teams_per_pool_advancement: int = 2

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name is required")
        return v.strip()

    @field_validator("estimated_game_duration")
    @classmethod
    def validate_duration(cls, v):
        if v <= 0:
            raise ValueError("estimated_game_duration must be positive")
        return v

    @field_validator("warm_up_duration")
    @classmethod
    def validate_warm_up(cls, v):
        if v < 0:
            raise ValueError("warm_up_duration must not be negative")
        return v

    @field_validator("number_of_courts")
    @classmethod
    def validate_courts(cls, v):
        if v is not None and v <= 0:
            raise ValueError("number_of_courts must be positive (omit for one court per pool)")
        return v


class TournamentUpdate(BaseModel):
    name: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[date] = None
    notes: Optional[str] = None
    first_game_time: Optional[datetime] = None
    estimated_game_duration: Optional[int] = None
    warm_up_duration: Optional[int] = None
    number_of_courts: Optional[int] = None
    partition_by_skill_level: Optional[bool] = None
    teams_per_pool_advancement: Optional[int] = None

    @field_validator(
        "name", "estimated_game_duration", "warm_up_duration", "partition_by_skill_level", "teams_per_pool_advancement"
    )
    @classmethod
    def validate_not_null(cls, v, info):
        # Only runs for fields that were sent; these columns are NOT NULL
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("estimated_game_duration")
    @classmethod
    def validate_duration(cls, v):
        if v is not None and v <= 0:
            raise ValueError("estimated_game_duration must be positive")
        return v

    @field_validator("warm_up_duration")
    @classmethod
    def validate_warm_up(cls, v):
        if v is not None and v < 0:
            raise ValueError("warm_up_duration must not be negative")
        return v

    @field_validator("number_of_courts")
    @classmethod
    def validate_courts(cls, v):
        if v is not None and v <= 0:
            raise ValueError("number_of_courts must be positive (null for one court per pool)")
        return v


class TournamentResponse(BaseModel):
    id: int
    name: str
    location: Optional[str]
    start_date: Optional[date]
    notes: Optional[str]
    first_game_time: Optional[datetime]
    estimated_game_duration: int
    warm_up_duration: int
    number_of_courts: Optional[int]
    partition_by_skill_level: bool
    teams_per_pool_advancement: int
    brackets_generated: bool
    playoff_format: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


@router.get("/tournaments", response_model=List[TournamentResponse])
def list_tournaments(session: Session = Depends(get_session)):
    """List all tournaments"""
    return session.exec(select(Tournament).order_by(Tournament.id)).all()


@router.post("/tournaments", response_model=TournamentResponse, status_code=201)
def create_tournament(tournament_data: TournamentCreate, session: Session = Depends(get_session)):
    tournament = Tournament(**tournament_data.model_dump())
    session.add(tournament)
    session.commit()
    session.refresh(tournament)
    return tournament


@router.get("/tournaments/{tournament_id}", response_model=TournamentResponse)
def get_tournament(tournament_id: int, session: Session = Depends(get_session)):
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")
    return tournament


@router.patch("/tournaments/{tournament_id}", response_model=TournamentResponse)
def update_tournament(tournament_id: int, tournament_data: TournamentUpdate, session: Session = Depends(get_session)):
    """Update scheduling configuration. Only fields that are sent are changed."""
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")

    update_data = tournament_data.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        setattr(tournament, key, value)
    tournament.updated_at = datetime.utcnow()

    session.add(tournament)
    session.commit()
    session.refresh(tournament)
    return tournament
