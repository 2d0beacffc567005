from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from poolplay.models.match import Match
    from poolplay.models.team import Team


class Tournament(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    location: Optional[str] = None
    start_date: Optional[date] = None
    notes: Optional[str] = None

    # Pool-play scheduling inputs
    first_game_time: Optional[datetime] = Field(default=None)
    estimated_game_duration: int = Field(default=30)  # minutes
    warm_up_duration: int = Field(default=7)  # minutes
    number_of_courts: Optional[int] = Field(default=None)  # null = one court per pool
    partition_by_skill_level: bool = Field(default=False)

    # Playoffs
    teams_per_pool_advancement: int = Field(default=2)
    brackets_generated: bool = Field(default=False)
    playoff_format: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    teams: List["Team"] = Relationship(back_populates="tournament")
    matches: List["Match"] = Relationship(back_populates="tournament")
