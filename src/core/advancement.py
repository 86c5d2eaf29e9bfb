"""
Winner recording and propagation through a single elimination bracket.

Each match is either pending (no winner) or decided. set_winner() is the only
transition; calls that cannot apply (unknown match, decided match, winner not
in the match) leave everything unchanged so replayed or duplicated
submissions are harmless.
"""
import logging
from typing import Dict, Optional

from .models import Entrant, Match
from .elimination import Bracket, order_by_seed
from .third_place import resolve_third_place_match

logger = logging.getLogger(__name__)


def third_place_applicable(bracket: Bracket) -> bool:
    """A third-place playoff exists for every bracket with a semifinal round."""
    return bracket.num_rounds > 1


def is_finished(bracket: Bracket, third_place_match: Optional[Match]) -> bool:
    """The final is decided and so is the third-place match, where one applies."""
    final = bracket.final_match
    if final is None or not final.is_decided:
        return False
    if not third_place_applicable(bracket):
        return True
    return third_place_match is not None and third_place_match.is_decided


def _accepts(match: Match, winner: Optional[Entrant]) -> bool:
    return winner is not None and match.is_playable and match.has_participant(winner)


def _result(bracket: Bracket, third_place_match: Optional[Match]) -> Dict:
    return {
        'bracket': bracket,
        'third_place_match': third_place_match,
        'finished': is_finished(bracket, third_place_match),
    }


def _advance_into(next_match: Match, from_index: int, winner: Entrant) -> Match:
    # Even feeders fill the first slot, odd feeders the second.
    if from_index % 2 == 0:
        p1, p2 = winner, next_match.participant2
    else:
        p1, p2 = next_match.participant1, winner
    p1, p2 = order_by_seed(p1, p2)
    return next_match.replace(participant1=p1, participant2=p2)


def set_winner(bracket: Bracket, third_place_match: Optional[Match], match_id, winner: Entrant) -> Dict:
    """
    Record the winner of a match and advance them into the next round.

    Returns a dict with the (possibly new) 'bracket', 'third_place_match' and
    whether the competition is 'finished'. The inputs are never modified.
    """
    if third_place_match is not None and match_id == third_place_match.id:
        if not _accepts(third_place_match, winner):
            logger.debug(f'Ignoring third-place winner {winner!r}')
            return _result(bracket, third_place_match)
        decided = third_place_match.replace(winner=third_place_match.slot_entrant(winner.id))
        return _result(bracket, decided)

    match = bracket.find(match_id)
    if match is None:
        logger.debug(f'Ignoring winner for unknown match {match_id}')
        return _result(bracket, third_place_match)
    if not _accepts(match, winner):
        logger.debug(f'Ignoring winner {winner!r} for match {match_id}')
        return _result(bracket, third_place_match)

    next_match = None
    if match.next_match_id is not None:
        next_match = bracket.find(match.next_match_id)
        if next_match is None:
            logger.warning(f'Match {match_id} links to missing match {match.next_match_id}')
            return _result(bracket, third_place_match)

    chosen = match.slot_entrant(winner.id)
    updated = [match.replace(winner=chosen)]
    if next_match is not None:
        updated.append(_advance_into(next_match, match.match_index, chosen))
    bracket = bracket.replace_matches(*updated)

    round_idx = bracket.round_of(match_id)
    if third_place_match is None and round_idx == bracket.semifinal_round_index:
        semifinals = bracket.rounds[round_idx]
        if all(m.is_decided for m in semifinals):
            third_place_match = resolve_third_place_match(semifinals)

    return _result(bracket, third_place_match)
