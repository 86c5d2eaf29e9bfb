# Entry point for simulating a single competition from qualification scores

import argparse
import sys
import yaml
from core.models import Entrant
from core.seeding import assign_seeds, rank_qualifiers
from core.elimination import build_bracket, get_round_name
from core.advancement import set_winner
from core.points import compute_competition_points, final_placings


def load_entrants(file_path):
    """
    Load a YAML mapping of participant name -> qualification score.

    A missing score means the participant did not qualify. Raises ValueError
    for anything that is not a mapping of names to numbers.
    """
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{file_path}: expected a mapping of participant names to scores")

    entrants = []
    for i, (name, score) in enumerate(data.items(), start=1):
        if score is not None and (isinstance(score, bool) or not isinstance(score, (int, float))):
            raise ValueError(f"{file_path}: score for '{name}' must be a number, got {score!r}")
        entrants.append(Entrant(id=i, name=str(name), score=score))
    return entrants


def simulate(entrants):
    """
    Play out a competition where the better seed always wins.

    Returns (result, None) with the finished bracket, third-place match and
    points, or (None, ValidationError) if too few entrants qualified.
    """
    seeded, error = assign_seeds(entrants)
    if error:
        return None, error

    bracket = build_bracket(seeded)
    third_place_match = None
    while True:
        match = next((m for m in bracket.matches() if m.is_playable), None)
        if match is None and third_place_match is not None and third_place_match.is_playable:
            match = third_place_match
        if match is None:
            break
        # The lower seed always sits in the first slot
        result = set_winner(bracket, third_place_match, match.id, match.participant1)
        bracket, third_place_match = result['bracket'], result['third_place_match']

    return {
        'bracket': bracket,
        'third_place_match': third_place_match,
        'points': compute_competition_points(entrants, bracket, third_place_match),
    }, None


def print_report(entrants, result):
    bracket = result['bracket']
    print("--- Qualification ---")
    for rank, entrant in enumerate(rank_qualifiers(entrants), start=1):
        print(f"  {rank}. {entrant.name} ({entrant.score})")

    for round_matches in bracket.rounds:
        print(f"\n--- {get_round_name(len(round_matches))} ---")
        for match in round_matches:
            p1 = match.participant1.name if match.participant1 else 'BYE'
            p2 = match.participant2.name if match.participant2 else 'BYE'
            winner = match.winner.name if match.winner else '?'
            print(f"  {p1} vs {p2} -> {winner}")

    placings = final_placings(bracket, result['third_place_match'])
    print("\n--- Placings ---")
    for place, entrant in placings.items():
        if entrant is not None:
            print(f"  {place}: {entrant.name}")

    print("\n--- Points ---")
    names = {e.id: e.name for e in entrants}
    for entrant_id, points in sorted(result['points'].items(), key=lambda item: -item[1]):
        print(f"  {names[entrant_id]}: {points}")


def main(argv=None):
    parser = argparse.ArgumentParser(description='Simulate one competition where the better seed always wins.')
    parser.add_argument('entrants_file', help='YAML file mapping participant names to qualification scores')
    args = parser.parse_args(argv)

    try:
        entrants = load_entrants(args.entrants_file)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    result, error = simulate(entrants)
    if error:
        print(error.message, file=sys.stderr)
        return 1
    print_report(entrants, result)
    return 0


if __name__ == '__main__':
    sys.exit(main())
