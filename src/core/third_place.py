"""
Third-place playoff between the two semifinal losers.
"""
from typing import List, Optional

from .models import Entrant, Match, THIRD_PLACE_MATCH_ID, THIRD_PLACE_ROUND_INDEX
from .elimination import order_by_seed


def semifinal_losers(semifinals: List[Match]) -> List[Optional[Entrant]]:
    """Loser of each semifinal; None where the losing slot was a bye."""
    return [m.loser() for m in semifinals]


def resolve_third_place_match(semifinals: List[Match]) -> Optional[Match]:
    """
    Build the third-place match once both semifinals are decided.

    With two losers the lower seed takes the first slot. With a single loser
    (a semifinal that was a bye) the match is degenerate: its sole entrant is
    also its winner. Returns None if a semifinal is undecided or there is no
    loser at all.
    """
    if len(semifinals) != 2 or not all(m.is_decided for m in semifinals):
        return None

    losers = [loser for loser in semifinal_losers(semifinals) if loser is not None]
    if not losers:
        return None

    if len(losers) == 1:
        return Match(THIRD_PLACE_MATCH_ID, THIRD_PLACE_ROUND_INDEX, 0,
                     participant1=losers[0], winner=losers[0])

    p1, p2 = order_by_seed(losers[0], losers[1])
    return Match(THIRD_PLACE_MATCH_ID, THIRD_PLACE_ROUND_INDEX, 0, participant1=p1, participant2=p2)
