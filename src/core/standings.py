"""
Season standings: per-competition point lists and the ranked table.
"""
from typing import Dict, List, Optional, Tuple

from .models import ChampionshipStanding, ValidationError


def total_points(standing: ChampionshipStanding) -> float:
    return sum(standing.points_per_competition)


def sort_standings(standings: List[ChampionshipStanding]) -> List[ChampionshipStanding]:
    """Highest total first; equal totals keep registration order (ascending id)."""
    return sorted(standings, key=lambda s: (-total_points(s), s.id))


def apply_points_to_standings(standings: List[ChampionshipStanding], points: Dict) -> List[ChampionshipStanding]:
    """Append each standing's points for this competition (0 if absent) and re-rank."""
    updated = [
        ChampionshipStanding(s.id, s.name, s.points_per_competition + [points.get(s.id, 0)])
        for s in standings
    ]
    return sort_standings(updated)


def next_standing_id(standings: List[ChampionshipStanding]) -> int:
    return max((s.id for s in standings), default=0) + 1


def find_by_name(standings: List[ChampionshipStanding], name: str) -> Optional[ChampionshipStanding]:
    """Case-insensitive name lookup."""
    wanted = name.strip().lower()
    return next((s for s in standings if s.name.strip().lower() == wanted), None)


def add_standing(standings: List[ChampionshipStanding], name: str,
                 competitions_held: int) -> Tuple[List[ChampionshipStanding], Optional[ValidationError]]:
    """
    Add a new participant to the season. Returns (standings, error).

    Blank and duplicate names (case-insensitive) leave the list unchanged.
    A late joiner gets a zero for every competition already held.
    """
    name = (name or '').strip()
    if not name:
        return standings, ValidationError('INVALID_NAME', 'Name is required.')
    if find_by_name(standings, name):
        return standings, ValidationError('DUPLICATE_NAME', f'"{name}" is already registered.')
    standing = ChampionshipStanding(next_standing_id(standings), name, [0] * competitions_held)
    return standings + [standing], None


def merge_standing(standings: List[ChampionshipStanding], standing: ChampionshipStanding,
                   competitions_held: int) -> List[ChampionshipStanding]:
    """
    Insert an externally registered standing.

    A standing whose id or name is already present is ignored. Its point list
    is padded or cut to the number of competitions held.
    """
    if any(s.id == standing.id for s in standings) or find_by_name(standings, standing.name):
        return standings
    points = list(standing.points_per_competition[:competitions_held])
    points += [0] * (competitions_held - len(points))
    return standings + [ChampionshipStanding(standing.id, standing.name.strip(), points)]


def remove_standing(standings: List[ChampionshipStanding], standing_id) -> List[ChampionshipStanding]:
    return [s for s in standings if s.id != standing_id]


def reset_standings(standings: List[ChampionshipStanding]) -> List[ChampionshipStanding]:
    """Keep the participants, drop all points."""
    return [ChampionshipStanding(s.id, s.name, []) for s in standings]
