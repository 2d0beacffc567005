"""
Single elimination bracket construction.

The bracket is an arena keyed by (round_number, match_number). The winner
of match m in round r feeds match ceil(m/2) in round r+1: team1 when m is
odd, team2 when m is even. Only round 1 is populated at build time; later
rounds are placeholders filled by the advancement service.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from poolplay.services.bracket_seeding import SeededTeam

PLAYOFF_COURT_COUNT = 4

SLOT_TEAM1 = "team1"
SLOT_TEAM2 = "team2"


def calculate_bracket_size(num_teams: int) -> int:
    """Calculate the bracket size (next power of 2)."""
    if num_teams <= 0:
        return 0
    return 2 ** math.ceil(math.log2(num_teams))


def total_rounds_for(bracket_size: int) -> int:
    if bracket_size <= 1:
        return 0
    return int(math.log2(bracket_size))


def bracket_position_label(round_number: int, match_number: int, total_rounds: int, prefix: str = "") -> str:
    if round_number == total_rounds:
        name = "Final"
    elif round_number == total_rounds - 1:
        name = "Semifinal A" if match_number == 1 else "Semifinal B"
    elif round_number == total_rounds - 2:
        name = f"Quarterfinal {match_number}"
    else:
        name = f"Round {round_number} - Match {match_number}"
    return f"{prefix}{name}"


def category_label_prefix(division: Optional[str], skill_level: Optional[str]) -> str:
    parts = [p for p in (division, skill_level.upper() if skill_level else None) if p]
    return f"{' '.join(parts)} - " if parts else ""


def advancement_target(round_number: int, match_number: int) -> Tuple[int, int, str]:
    """(next_round, next_match_number, slot) the winner of this match moves into."""
    slot = SLOT_TEAM1 if match_number % 2 == 1 else SLOT_TEAM2
    return round_number + 1, math.ceil(match_number / 2), slot


@dataclass
class BracketSlot:
    round_number: int
    match_number: int
    bracket_position: str
    team1_id: Optional[int] = None
    team2_id: Optional[int] = None
    referee_team_id: Optional[int] = None
    court_number: int = 1
    team1_seed: Optional[int] = None
    team2_seed: Optional[int] = None

    @property
    def is_bye(self) -> bool:
        return self.round_number == 1 and (self.team1_id is None) != (self.team2_id is None)


@dataclass
class Bracket:
    bracket_size: int
    total_rounds: int
    slots: Dict[Tuple[int, int], BracketSlot] = field(default_factory=dict)

    def get(self, round_number: int, match_number: int) -> Optional[BracketSlot]:
        return self.slots.get((round_number, match_number))

    def matches(self) -> List[BracketSlot]:
        return [self.slots[key] for key in sorted(self.slots)]

    def round(self, round_number: int) -> List[BracketSlot]:
        return [s for s in self.matches() if s.round_number == round_number]

    def byes(self) -> List[BracketSlot]:
        return [s for s in self.round(1) if s.is_bye]

    def next_slot(self, round_number: int, match_number: int) -> Optional[Tuple[BracketSlot, str]]:
        """Downstream slot for a match winner, or None for the final."""
        next_round, next_match, side = advancement_target(round_number, match_number)
        target = self.get(next_round, next_match)
        if target is None:
            return None
        return target, side


def build_bracket(
    seeded_teams: Sequence[SeededTeam],
    first_round_referee_id: Optional[int] = None,
    label_prefix: str = "",
) -> Bracket:
    """
    Full bracket for K seeded teams: bracket_size - 1 matches.

    First round match i (0-based) puts seed i+1 against seed bracket_size-i.
    Seeds beyond K do not exist, so the top seeds draw byes (an empty slot).
    """
    num_teams = len(seeded_teams)
    bracket_size = calculate_bracket_size(num_teams)
    total_rounds = total_rounds_for(bracket_size)
    bracket = Bracket(bracket_size=bracket_size, total_rounds=total_rounds)
    if total_rounds == 0:
        return bracket

    ordered = sorted(seeded_teams, key=lambda s: s.seed)

    for i in range(bracket_size // 2):
        higher = ordered[i] if i < num_teams else None
        lower_index = bracket_size - 1 - i
        lower = ordered[lower_index] if lower_index < num_teams else None
        match_number = i + 1
        bracket.slots[(1, match_number)] = BracketSlot(
            round_number=1,
            match_number=match_number,
            bracket_position=bracket_position_label(1, match_number, total_rounds, label_prefix),
            team1_id=higher.team_id if higher else None,
            team2_id=lower.team_id if lower else None,
            referee_team_id=first_round_referee_id,
            court_number=(i % PLAYOFF_COURT_COUNT) + 1,
            team1_seed=higher.seed if higher else None,
            team2_seed=lower.seed if lower else None,
        )

    for round_number in range(2, total_rounds + 1):
        for match_number in range(1, bracket_size // (2**round_number) + 1):
            bracket.slots[(round_number, match_number)] = BracketSlot(
                round_number=round_number,
                match_number=match_number,
                bracket_position=bracket_position_label(round_number, match_number, total_rounds, label_prefix),
            )

    return bracket
