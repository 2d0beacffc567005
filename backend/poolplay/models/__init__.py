from poolplay.models.match import Match, MatchStatus, TournamentPhase
from poolplay.models.team import CheckInStatus, Team
from poolplay.models.tournament import Tournament

__all__ = [
    "Tournament",
    "Team",
    "CheckInStatus",
    "Match",
    "MatchStatus",
    "TournamentPhase",
]
