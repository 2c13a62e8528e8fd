"""
Snake draft pick order math.

Maps a 1-based global pick index to its round, slot within the round and the
draft slot (team index) that owns it. Supports the "3rd Round Reversal" (3RR)
variant: from the reversal round onward the usual snake alternation is shifted
by one round, so the round before the reversal round and the reversal round
itself run in the same direction.
"""

from typing import List, Optional

from draft_monitor.errors import PickOutOfRangeError
from draft_monitor.types import DraftSettings, PickPosition

FORWARD = "F"
BACKWARD = "B"


def is_round_reversed(settings: DraftSettings, round_number: int) -> bool:
    """True when the given round runs from the last slot back to the first."""
    if not settings.is_snake:
        return False

    normally_reversed = round_number % 2 == 0
    past_reversal = settings.reversal_round is not None and round_number >= settings.reversal_round
    return normally_reversed != past_reversal


def resolve(settings: DraftSettings, global_index: int) -> PickPosition:
    """
    Resolve a global pick index to its place in the draft.

    Args:
        settings: Draft settings (team count, rounds, optional reversal round)
        global_index: 1-based pick number across the whole draft

    Returns:
        PickPosition with round, slot_in_round, team_index and is_reversed

    Raises:
        PickOutOfRangeError: if global_index is below 1 or past the last pick
    """
    if global_index < 1 or global_index > settings.total_picks:
        raise PickOutOfRangeError(
            f"Pick {global_index} is outside 1..{settings.total_picks} "
            f"({settings.team_count} teams x {settings.total_rounds} rounds)"
        )

    team_count = settings.team_count
    round_number = (global_index + team_count - 1) // team_count
    slot_in_round = global_index - (round_number - 1) * team_count
    reversed_round = is_round_reversed(settings, round_number)
    team_index = team_count - slot_in_round + 1 if reversed_round else slot_in_round

    return PickPosition(
        global_index=global_index,
        round=round_number,
        slot_in_round=slot_in_round,
        team_index=team_index,
        is_reversed=reversed_round,
    )


def round_direction(settings: DraftSettings, round_number: int) -> str:
    return BACKWARD if is_round_reversed(settings, round_number) else FORWARD


def direction_sequence(settings: DraftSettings, rounds: Optional[int] = None) -> List[str]:
    """Direction of each round, e.g. ['F', 'B', 'B', 'F'] for a 3RR draft."""
    rounds = settings.total_rounds if rounds is None else rounds
    return [round_direction(settings, r) for r in range(1, rounds + 1)]


def is_draft_complete(settings: DraftSettings, picks_made: int) -> bool:
    return picks_made >= settings.total_picks
