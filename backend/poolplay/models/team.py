from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String
from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from poolplay.models.tournament import Tournament


class CheckInStatus(str, Enum):
    registered = "registered"
    checked_in = "checked_in"


class Team(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("tournament_id", "name", name="uq_tournament_team_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    name: str
    skill_level: Optional[str] = Field(default=None)
    division: Optional[str] = Field(default=None)
    check_in_status: CheckInStatus = Field(default=CheckInStatus.registered, sa_column=Column(String))
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="teams")
