"""
Per-competition point awards from qualification rank and bracket finish.
"""
from typing import Dict, List, Optional

from .models import Entrant, Match
from .elimination import Bracket
from .seeding import rank_qualifiers

# (first rank, last rank, points)
QUALIFICATION_POINTS = [
    (1, 1, 12),
    (2, 2, 10),
    (3, 3, 8),
    (4, 4, 6),
    (5, 6, 4),
    (7, 8, 3),
    (9, 12, 2),
    (13, 16, 1),
    (17, 24, 0.5),
    (25, 32, 0.25),
]

PLACEMENT_POINTS = {
    'winner': 100,
    'runner_up': 88,
    'third': 76,
    'fourth': 64,
}

# (participants in the round, points for each loser of that round)
ELIMINATION_TIERS = [
    (8, 48),
    (16, 32),
    (32, 16),
    (64, 10),
]


def qualification_points(rank: int) -> float:
    """Points for a 1-based qualification rank; 0 beyond rank 32."""
    for first, last, points in QUALIFICATION_POINTS:
        if first <= rank <= last:
            return points
    return 0


def final_placings(bracket: Bracket, third_place_match: Optional[Match]) -> Dict[str, Optional[Entrant]]:
    """Winner, runner-up, third and fourth place, each None until known."""
    final = bracket.final_match
    return {
        'winner': final.winner if final else None,
        'runner_up': final.loser() if final else None,
        'third': third_place_match.winner if third_place_match else None,
        'fourth': third_place_match.loser() if third_place_match else None,
    }


def _add(points: Dict, entrant_id, amount):
    points[entrant_id] = points.get(entrant_id, 0) + amount


def compute_competition_points(qualification_entrants: List[Entrant], bracket: Bracket,
                               third_place_match: Optional[Match]) -> Dict:
    """
    Map entrant id to the points earned in one competition.

    Qualification points follow the score ranking; bracket points go to the
    top four placings and to losers of rounds that match an elimination tier.
    Anyone in the top four is not paid again at a lower tier.
    """
    points = {e.id: 0 for e in qualification_entrants}

    for rank, entrant in enumerate(rank_qualifiers(qualification_entrants), start=1):
        _add(points, entrant.id, qualification_points(rank))

    placings = final_placings(bracket, third_place_match)
    for place, entrant in placings.items():
        if entrant is not None:
            _add(points, entrant.id, PLACEMENT_POINTS[place])

    top_four = {e.id for e in placings.values() if e is not None}
    for participants, tier_points in ELIMINATION_TIERS:
        round_matches = next((r for r in bracket.rounds if len(r) * 2 == participants), None)
        if round_matches is None:
            continue
        for match in round_matches:
            loser = match.loser()
            if loser is not None and loser.id not in top_four:
                _add(points, loser.id, tier_points)

    return points


def points_table() -> Dict[str, Dict[str, float]]:
    """Human readable point tables, keyed by place label."""
    def label(first, last):
        return f"{first}." if first == last else f"{first}.-{last}."

    qualification = {label(first, last): pts for first, last, pts in QUALIFICATION_POINTS}
    bracket = {f"{i}.": PLACEMENT_POINTS[place]
               for i, place in enumerate(['winner', 'runner_up', 'third', 'fourth'], start=1)}
    for participants, tier_points in ELIMINATION_TIERS:
        bracket[label(participants // 2 + 1, participants)] = tier_points
    return {'qualification': qualification, 'bracket': bracket}
