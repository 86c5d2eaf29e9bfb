"""
Single elimination bracket generation.
"""
import math
from typing import List, Dict, Tuple, Optional

from .models import Entrant, Match, MIN_PARTICIPANTS


def get_round_name(matches_in_round: int) -> str:
    """Get the name of a round based on its number of matches."""
    if matches_in_round == 1:
        return "Final"
    elif matches_in_round == 2:
        return "Semifinals"
    elif matches_in_round == 4:
        return "Quarterfinals"
    else:
        return f"Round of {matches_in_round * 2}"


def calculate_bracket_size(num_entrants: int) -> int:
    """Calculate the bracket size (next power of 2)."""
    if num_entrants <= 0:
        return 0
    return 2 ** math.ceil(math.log2(num_entrants))


def calculate_byes(num_entrants: int) -> int:
    """Calculate number of byes needed."""
    return calculate_bracket_size(num_entrants) - num_entrants


def _generate_bracket_order(bracket_size: int) -> List[int]:
    """
    Generate the standard tournament bracket order.

    Starting from [1], each doubling emits every seed followed by its mirror
    (current_size + 1 - seed), so if all higher seeds win, 1 and 2 meet only
    in the final.

    For 8 entrants: [1, 8, 4, 5, 2, 7, 3, 6]
    """
    order = [1]
    while len(order) < bracket_size:
        current_size = len(order) * 2
        next_order = []
        for seed in order:
            next_order.extend([seed, current_size + 1 - seed])
        order = next_order
    return order


def order_by_seed(p1: Optional[Entrant], p2: Optional[Entrant]) -> Tuple[Optional[Entrant], Optional[Entrant]]:
    """Put the lower seed in the first slot when both slots are filled."""
    if p1 is not None and p2 is not None and p1.seed > p2.seed:
        return p2, p1
    return p1, p2


class Bracket:
    """
    Round-by-round match tree addressed by match id.

    Matches are never mutated in place; replace_matches() returns a new
    Bracket that reuses every round list the update did not touch.
    """

    def __init__(self, rounds: List[List[Match]]):
        self.rounds = rounds
        self._index = {}
        for round_idx, round_matches in enumerate(rounds):
            for position, match in enumerate(round_matches):
                self._index[match.id] = (round_idx, position)

    @property
    def num_rounds(self) -> int:
        return len(self.rounds)

    @property
    def bracket_size(self) -> int:
        if not self.rounds:
            return 0
        return len(self.rounds[0]) * 2

    @property
    def final_match(self) -> Optional[Match]:
        if not self.rounds:
            return None
        return self.rounds[-1][0]

    @property
    def semifinal_round_index(self) -> Optional[int]:
        """Index of the second-to-last round, or None for a single-round bracket."""
        if self.num_rounds < 2:
            return None
        return self.num_rounds - 2

    @property
    def champion(self) -> Optional[Entrant]:
        final = self.final_match
        return final.winner if final else None

    def _locate(self, match_id) -> Optional[Tuple[int, int]]:
        try:
            return self._index.get(match_id)
        except TypeError:
            # Unhashable ids (lists, dicts from a request body) never name a match
            return None

    def find(self, match_id) -> Optional[Match]:
        location = self._locate(match_id)
        if location is None:
            return None
        round_idx, position = location
        return self.rounds[round_idx][position]

    def round_of(self, match_id) -> Optional[int]:
        location = self._locate(match_id)
        return location[0] if location else None

    def matches(self):
        for round_matches in self.rounds:
            yield from round_matches

    def replace_matches(self, *updated: Match) -> 'Bracket':
        rounds = list(self.rounds)
        copied = set()
        for match in updated:
            round_idx, position = self._index[match.id]
            if round_idx not in copied:
                rounds[round_idx] = list(rounds[round_idx])
                copied.add(round_idx)
            rounds[round_idx][position] = match
        return Bracket(rounds)

    def to_list(self) -> List[List[Dict]]:
        return [[m.to_dict() for m in round_matches] for round_matches in self.rounds]

    @classmethod
    def from_list(cls, data: List[List[Dict]]) -> 'Bracket':
        return cls([[Match.from_dict(m) for m in round_matches] for round_matches in data])

    def __eq__(self, other):
        if not isinstance(other, Bracket):
            return NotImplemented
        return self.to_list() == other.to_list()

    def __repr__(self):
        return f"Bracket(rounds={self.num_rounds}, size={self.bracket_size})"


def build_bracket(seeded_entrants: List[Entrant]) -> Bracket:
    """
    Build a complete bracket from seeded entrants (seed >= 1).

    Round 0 pairs consecutive slots of the bracket order; a seed beyond the
    entrant count is a bye and its opponent is declared the winner at once.
    Later rounds pull in any winners already known from byes. Match ids are
    allocated sequentially, round by round.
    """
    if len(seeded_entrants) < MIN_PARTICIPANTS:
        raise ValueError(f'build_bracket needs at least {MIN_PARTICIPANTS} seeded entrants')

    bracket_size = calculate_bracket_size(len(seeded_entrants))
    total_rounds = int(math.log2(bracket_size))
    seed_to_entrant = {e.seed: e for e in seeded_entrants}
    bracket_order = _generate_bracket_order(bracket_size)

    rounds = []
    match_id = 0

    first_round = []
    for i in range(0, len(bracket_order), 2):
        p1 = seed_to_entrant.get(bracket_order[i])
        p2 = seed_to_entrant.get(bracket_order[i + 1])

        # Handle byes - the present entrant advances
        winner = None
        if p1 is not None and p2 is None:
            winner = p1
        elif p1 is None and p2 is not None:
            winner = p2

        first_round.append(Match(match_id, 0, i // 2, p1, p2, winner))
        match_id += 1
    rounds.append(first_round)

    for round_idx in range(1, total_rounds):
        previous_round = rounds[round_idx - 1]
        current_round = []
        for i in range(len(previous_round) // 2):
            p1, p2 = order_by_seed(previous_round[i * 2].winner, previous_round[i * 2 + 1].winner)
            current_round.append(Match(match_id, round_idx, i, p1, p2))
            match_id += 1

        rounds[round_idx - 1] = [
            m.replace(next_match_id=current_round[position // 2].id)
            for position, m in enumerate(previous_round)
        ]
        rounds.append(current_round)

    return Bracket(rounds)


def get_bracket_display(bracket: Bracket) -> Dict:
    """Summarise a bracket for display: named rounds, byes and champion."""
    rounds = {}
    for round_matches in bracket.rounds:
        rounds[get_round_name(len(round_matches))] = round_matches

    first_round = bracket.rounds[0] if bracket.rounds else []
    byes = sum(1 for m in first_round if (m.participant1 is None) != (m.participant2 is None))

    return {
        'rounds': rounds,
        'bracket_size': bracket.bracket_size,
        'total_rounds': bracket.num_rounds,
        'byes': byes,
        'champion': bracket.champion,
    }
