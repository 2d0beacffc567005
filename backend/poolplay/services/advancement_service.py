"""
Playoff advancement: when a playoff match completes, move its winner into
the next round.

Match m of round r feeds match ceil(m/2) of round r+1 in the same
tournament/division/skill level (team1 slot for odd m, team2 for even m).
Only team1_id/team2_id of the downstream row are written.

Safe under at-least-once delivery: the slot is written with a conditional
UPDATE (only while still NULL and the downstream match is not completed).
Re-delivering the same winner is a no-op; a different team already in the
slot, or a downstream match already decided, is reported as a conflict and
left alone. The completed source match is never rolled back.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from poolplay.models.match import Match, MatchStatus, TournamentPhase
from poolplay.services.bracket_builder import SLOT_TEAM1, advancement_target

logger = logging.getLogger(__name__)

ADVANCED = "advanced"
ALREADY_SET = "already_set"
FINAL = "final"
NOT_READY = "not_ready"
NOT_PLAYOFF = "not_playoff"
NOT_FOUND = "not_found"
CONFLICT = "conflict"
ERROR = "error"


@dataclass
class AdvancementOutcome:
    status: str
    match_id: int
    winner_id: Optional[int] = None
    next_match_id: Optional[int] = None
    slot: Optional[str] = None
    existing_team_id: Optional[int] = None
    message: str = ""

    @property
    def advanced(self) -> bool:
        return self.status == ADVANCED

    def to_dict(self) -> Dict:
        return {
            "status": self.status,
            "match_id": self.match_id,
            "winner_id": self.winner_id,
            "next_match_id": self.next_match_id,
            "slot": self.slot,
            "existing_team_id": self.existing_team_id,
            "message": self.message,
        }


def _same_value(column, value):
    return column.is_(None) if value is None else column == value


def find_next_round_match(session: Session, match: Match) -> Optional[Match]:
    """Downstream playoff match for `match`, or None when `match` is the final."""
    next_round, next_match_number, _ = advancement_target(match.round_number, match.match_number)
    candidates = session.exec(
        select(Match)
        .where(
            Match.tournament_id == match.tournament_id,
            Match.tournament_phase == TournamentPhase.playoffs,
            _same_value(Match.division, match.division),
            _same_value(Match.skill_level, match.skill_level),
            Match.round_number == next_round,
            Match.match_number == next_match_number,
        )
        .order_by(Match.id)
    ).all()
    if len(candidates) > 1:
        logger.warning(
            "Match %d: %d candidate matches for round %d match %d, using id %d",
            match.id,
            len(candidates),
            next_round,
            next_match_number,
            candidates[0].id,
        )
    return candidates[0] if candidates else None


def advance_winner_to_next_round(session: Session, match_id: int) -> AdvancementOutcome:
    """
    Fill the downstream slot for a completed playoff match.

    Never raises for expected conditions; the outcome says what happened and
    is logged either way.
    """
    try:
        match = session.get(Match, match_id)
        if not match:
            logger.error("Advancement: match %d not found", match_id)
            return AdvancementOutcome(status=NOT_FOUND, match_id=match_id, message="Match not found")

        if match.tournament_phase != TournamentPhase.playoffs:
            return AdvancementOutcome(status=NOT_PLAYOFF, match_id=match_id, message="Not a playoff match")

        winner_id = match.winner_id
        if winner_id is None or match.status != MatchStatus.completed:
            logger.info(
                "Advancement: match %d not ready (status=%s, winner_id=%s)", match_id, match.status, winner_id
            )
            return AdvancementOutcome(
                status=NOT_READY, match_id=match_id, winner_id=winner_id, message="Match not completed or no winner"
            )

        next_match = find_next_round_match(session, match)
        if next_match is None:
            logger.info("Advancement: match %d (%s) has no next round match", match_id, match.bracket_position)
            return AdvancementOutcome(status=FINAL, match_id=match_id, winner_id=winner_id, message="Final match")

        _, _, slot = advancement_target(match.round_number, match.match_number)
        column = Match.team1_id if slot == SLOT_TEAM1 else Match.team2_id

        result = session.exec(
            update(Match)
            .where(Match.id == next_match.id, column.is_(None), Match.status != MatchStatus.completed)
            .values({column.key: winner_id})
        )
        session.commit()

        outcome = AdvancementOutcome(
            status=ADVANCED,
            match_id=match_id,
            winner_id=winner_id,
            next_match_id=next_match.id,
            slot=slot,
        )
        if result.rowcount == 1:
            outcome.message = f"Advanced to {next_match.bracket_position}"
            logger.info(
                "Advancement: team %d from match %d -> match %d (%s) %s",
                winner_id,
                match_id,
                next_match.id,
                next_match.bracket_position,
                slot,
            )
            return outcome

        # Slot already filled or downstream match already decided
        session.refresh(next_match)
        existing = next_match.team1_id if slot == SLOT_TEAM1 else next_match.team2_id
        outcome.existing_team_id = existing
        if existing == winner_id:
            outcome.status = ALREADY_SET
            outcome.message = "Winner already in place"
            logger.info("Advancement: match %d already advanced to match %d", match_id, next_match.id)
            return outcome

        outcome.status = CONFLICT
        if existing is None:
            outcome.message = (
                f"Match {next_match.id} ({next_match.bracket_position}) is already completed, "
                f"refusing to place team {winner_id}"
            )
            logger.warning("Advancement conflict: %s", outcome.message)
            return outcome

        outcome.message = (
            f"{slot} of match {next_match.id} already holds team {existing}, refusing to replace with {winner_id}"
        )
        logger.warning("Advancement conflict: %s", outcome.message)
        return outcome

    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Advancement failed for match %d: %s", match_id, exc)
        return AdvancementOutcome(status=ERROR, match_id=match_id, message=str(exc))


def resolve_all_dependencies(session: Session, tournament_id: int) -> Dict:
    """
    Bulk advancement for every completed playoff match in a tournament.

    Processes rounds in order so a later round sees winners placed earlier
    in the same call. Idempotent.
    """
    def _open_slots() -> int:
        playoff_matches = session.exec(
            select(Match).where(
                Match.tournament_id == tournament_id,
                Match.tournament_phase == TournamentPhase.playoffs,
            )
        ).all()
        return sum(1 for m in playoff_matches if m.team1_id is None or m.team2_id is None)

    unknown_before = _open_slots()

    completed = session.exec(
        select(Match)
        .where(
            Match.tournament_id == tournament_id,
            Match.tournament_phase == TournamentPhase.playoffs,
            Match.status == MatchStatus.completed,
            Match.winner_id.is_not(None),
        )
        .order_by(Match.round_number, Match.match_number, Match.id)
    ).all()
    completed_ids = [m.id for m in completed]

    teams_advanced = 0
    conflicts: List[Dict] = []
    for match_id in completed_ids:
        outcome = advance_winner_to_next_round(session, match_id)
        if outcome.advanced:
            teams_advanced += 1
        elif outcome.status == CONFLICT:
            conflicts.append(outcome.to_dict())

    session.expire_all()
    unknown_after = _open_slots()

    return {
        "matches_processed": len(completed_ids),
        "teams_advanced": teams_advanced,
        "unknown_before": unknown_before,
        "unknown_after": unknown_after,
        "conflicts": conflicts,
    }
