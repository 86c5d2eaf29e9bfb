"""
Qualification ranking and seed assignment.
"""
from typing import List, Optional, Tuple

from .models import Entrant, ValidationError, MIN_PARTICIPANTS


def is_qualified(entrant: Entrant) -> bool:
    """An entrant qualifies with a submitted score strictly greater than zero."""
    return entrant.score is not None and entrant.score > 0


def rank_qualifiers(entrants: List[Entrant]) -> List[Entrant]:
    """
    Return qualified entrants ordered by score, best first.

    Python's sort is stable, so equal scores keep their input order.
    """
    qualified = [e for e in entrants if is_qualified(e)]
    return sorted(qualified, key=lambda e: e.score, reverse=True)


def assign_seeds(entrants: List[Entrant]) -> Tuple[List[Entrant], Optional[ValidationError]]:
    """
    Rank qualified entrants and assign dense 1-based seeds.

    Returns (seeded_entrants, None) on success, or ([], ValidationError) when
    fewer than MIN_PARTICIPANTS entrants qualify. Input entrants are not modified.
    """
    ranked = rank_qualifiers(entrants)
    if len(ranked) < MIN_PARTICIPANTS:
        return [], ValidationError(
            'MIN_PARTICIPANTS',
            f'At least {MIN_PARTICIPANTS} participants with a score greater than 0 are required '
            f'to build a bracket ({len(ranked)} qualified).'
        )
    return [e.replace(seed=rank) for rank, e in enumerate(ranked, start=1)], None
