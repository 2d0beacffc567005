from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from poolplay.models.tournament import Tournament


class TournamentPhase(str, Enum):
    pool_play = "pool_play"
    playoffs = "playoffs"


class MatchStatus(str, Enum):
    scheduled = "scheduled"
    completed = "completed"


class Match(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    tournament_phase: TournamentPhase = Field(sa_column=Column(String, nullable=False, index=True))
    pool_name: Optional[str] = Field(default=None)  # pool_play only
    round_number: int
    match_number: int

    # Team slots (playoff placeholders stay null until advancement fills them)
    team1_id: Optional[int] = Field(default=None, foreign_key="team.id")
    team2_id: Optional[int] = Field(default=None, foreign_key="team.id")
    referee_team_id: Optional[int] = Field(default=None, foreign_key="team.id")

    scheduled_time: Optional[datetime] = Field(default=None)
    court_number: int = Field(default=1)
    status: MatchStatus = Field(default=MatchStatus.scheduled, sa_column=Column(String, nullable=False))

    team1_score: int = Field(default=0)
    team2_score: int = Field(default=0)
    sets_won_team1: int = Field(default=0)
    sets_won_team2: int = Field(default=0)
    winner_id: Optional[int] = Field(default=None, foreign_key="team.id")

    bracket_position: Optional[str] = Field(default=None)  # human label, playoffs only
    division: Optional[str] = Field(default=None)
    skill_level: Optional[str] = Field(default=None)

    completed_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="matches")
