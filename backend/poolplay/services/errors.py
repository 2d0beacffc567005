"""
Error taxonomy for scheduling and playoff orchestration.

Pure generation code never raises these for well-formed input; they come
from the functions that talk to the store or validate caller parameters.
"""
from typing import Optional


class SchedulingError(Exception):
    """Base exception for scheduling errors"""

    code = "SCHEDULING_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputError(SchedulingError):
    """Invalid caller input (empty roster, non-positive duration, bad court count)"""

    code = "INVALID_INPUT"


class NotFoundError(SchedulingError):
    """Referenced tournament, match or pool-play data is missing"""

    code = "NOT_FOUND"


class IncompleteDataError(SchedulingError):
    """Pool play has not finished yet"""

    code = "POOLS_INCOMPLETE"


class ConflictError(SchedulingError):
    """A write would overwrite a different value already in place"""

    code = "CONFLICT"


class DegenerateCaseWarning:
    """Accepted degenerate outcome (no referee, first-round bye). Recorded, never raised."""

    NO_REFEREE = "NO_REFEREE"
    FIRST_ROUND_BYE = "FIRST_ROUND_BYE"

    def __init__(self, code: str, message: str, pool_name: Optional[str] = None, match_number: Optional[int] = None):
        self.code = code
        self.message = message
        self.pool_name = pool_name
        self.match_number = match_number

    def to_dict(self):
        return {
            "code": self.code,
            "message": self.message,
            "pool_name": self.pool_name,
            "match_number": self.match_number,
        }

    def __repr__(self):
        return f"DegenerateCaseWarning(code={self.code}, message={self.message})"


class NoAdvancingTeamsError(InputError):
    """Advancement selected zero teams"""

    code = "NO_TEAMS_TO_ADVANCE"
