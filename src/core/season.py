"""
Season state and the transitions that move it through a competition.

A season cycles CHAMPIONSHIP_VIEW -> QUALIFICATION -> BRACKET -> FINISHED and
back to CHAMPIONSHIP_VIEW once the competition's points are folded into the
standings. Every transition returns (new_state, error); on error the state
returned is the one passed in.
"""
import json
import logging
import random
from typing import Dict, List, Optional, Tuple

import yaml

from .models import Entrant, Match, ChampionshipStanding, ValidationError
from .elimination import Bracket, build_bracket
from .seeding import assign_seeds, rank_qualifiers
from .advancement import set_winner
from .points import compute_competition_points
from .standings import (
    add_standing,
    apply_points_to_standings,
    find_by_name,
    remove_standing,
    reset_standings,
    sort_standings,
)

logger = logging.getLogger(__name__)

CHAMPIONSHIP_VIEW = 'CHAMPIONSHIP_VIEW'
QUALIFICATION = 'QUALIFICATION'
BRACKET = 'BRACKET'
FINISHED = 'FINISHED'
PHASES = (CHAMPIONSHIP_VIEW, QUALIFICATION, BRACKET, FINISHED)


class StateDecodeError(ValueError):
    """Raised when a persisted or transmitted season state is malformed."""


class SeasonState:
    def __init__(self, phase=CHAMPIONSHIP_VIEW, standings=None, competition_participants=None,
                 bracket=None, third_place_match=None, total_competitions=None, competitions_held=0):
        self.phase = phase
        self.standings = standings if standings is not None else []
        self.competition_participants = competition_participants if competition_participants is not None else []
        self.bracket = bracket if bracket is not None else Bracket([])
        self.third_place_match = third_place_match
        self.total_competitions = total_competitions
        self.competitions_held = competitions_held

    def replace(self, **changes) -> 'SeasonState':
        values = {
            'phase': self.phase,
            'standings': self.standings,
            'competition_participants': self.competition_participants,
            'bracket': self.bracket,
            'third_place_match': self.third_place_match,
            'total_competitions': self.total_competitions,
            'competitions_held': self.competitions_held,
        }
        values.update(changes)
        return SeasonState(**values)

    def __eq__(self, other):
        if not isinstance(other, SeasonState):
            return NotImplemented
        return state_to_dict(self) == state_to_dict(other)

    def __repr__(self):
        return (f"SeasonState(phase={self.phase}, standings={len(self.standings)}, "
                f"held={self.competitions_held}/{self.total_competitions})")


def _phase_error(state: SeasonState, action: str) -> ValidationError:
    return ValidationError('INVALID_PHASE', f'Cannot {action} during {state.phase}.')


# ============================================================================
# QUERIES
# ============================================================================

def is_season_finished(state: SeasonState) -> bool:
    return state.total_competitions is not None and state.competitions_held >= state.total_competitions


def season_podium(state: SeasonState) -> List[ChampionshipStanding]:
    return sort_standings(state.standings)[:3]


def qualification_winner(state: SeasonState) -> Optional[Entrant]:
    ranked = rank_qualifiers(state.competition_participants)
    return ranked[0] if ranked else None


# ============================================================================
# SEASON MANAGEMENT
# ============================================================================

def set_total_competitions(state: SeasonState, count) -> Tuple[SeasonState, Optional[ValidationError]]:
    if state.phase != CHAMPIONSHIP_VIEW:
        return state, _phase_error(state, 'change the season length')
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        return state, ValidationError('INVALID_LENGTH', 'Season length must be a positive whole number.')
    if count < state.competitions_held:
        return state, ValidationError(
            'INVALID_LENGTH', f'{state.competitions_held} competitions have already been held.')
    return state.replace(total_competitions=count), None


def add_participant(state: SeasonState, name: str) -> Tuple[SeasonState, Optional[ValidationError]]:
    """Register a participant for the season; also used for self-registration."""
    if is_season_finished(state):
        return state, ValidationError('SEASON_FINISHED', 'The season has finished.')
    standings, error = add_standing(state.standings, name, state.competitions_held)
    if error:
        return state, error
    return state.replace(standings=standings), None


def remove_participant(state: SeasonState, standing_id) -> Tuple[SeasonState, Optional[ValidationError]]:
    if state.phase != CHAMPIONSHIP_VIEW:
        return state, _phase_error(state, 'remove participants')
    if not any(s.id == standing_id for s in state.standings):
        return state, ValidationError('NOT_FOUND', f'No participant with id {standing_id}.')
    return state.replace(standings=remove_standing(state.standings, standing_id)), None


def reset_season(state: SeasonState) -> Tuple[SeasonState, Optional[ValidationError]]:
    """Start a new season with the same participants and no points."""
    return SeasonState(standings=reset_standings(state.standings)), None


# ============================================================================
# COMPETITION LIFECYCLE
# ============================================================================

def start_competition(state: SeasonState) -> Tuple[SeasonState, Optional[ValidationError]]:
    if state.phase != CHAMPIONSHIP_VIEW:
        return state, _phase_error(state, 'start a competition')
    if state.total_competitions is None:
        return state, ValidationError('INVALID_LENGTH', 'Set the season length first.')
    if is_season_finished(state):
        return state, ValidationError('SEASON_FINISHED', 'The season has finished.')
    if len(state.standings) < 2:
        return state, ValidationError('NOT_ENOUGH_PARTICIPANTS', 'At least 2 participants are required.')

    participants = [Entrant(s.id, s.name) for s in state.standings]
    return state.replace(
        phase=QUALIFICATION,
        competition_participants=participants,
        bracket=Bracket([]),
        third_place_match=None,
    ), None


def submit_score(state: SeasonState, entrant_id, score) -> Tuple[SeasonState, Optional[ValidationError]]:
    """Set or clear (score=None) an entrant's qualification score."""
    if state.phase != QUALIFICATION:
        return state, _phase_error(state, 'submit scores')
    if score is not None and (isinstance(score, bool) or not isinstance(score, (int, float)) or score < 0):
        return state, ValidationError('INVALID_SCORE', 'Score must be a non-negative number.')
    if not any(p.id == entrant_id for p in state.competition_participants):
        return state, ValidationError('NOT_FOUND', f'No participant with id {entrant_id}.')

    participants = [p.replace(score=score) if p.id == entrant_id else p
                    for p in state.competition_participants]
    return state.replace(competition_participants=participants), None


def add_mock_participants(state: SeasonState, count: int = 7,
                          rng: Optional[random.Random] = None) -> Tuple[SeasonState, Optional[ValidationError]]:
    """
    Fill the qualification with test data.

    Adds "Participant 1".."Participant N" to the season when missing and gives
    every one of them in this competition a random score from 1 to 100.
    """
    if state.phase != QUALIFICATION:
        return state, _phase_error(state, 'generate test data')
    rng = rng or random.Random()

    standings = state.standings
    participants = list(state.competition_participants)
    for i in range(1, count + 1):
        name = f'Participant {i}'
        score = rng.randint(1, 100)
        existing = find_by_name(standings, name)
        if existing is None:
            standings, _ = add_standing(standings, name, state.competitions_held)
            participants.append(Entrant(standings[-1].id, name, score))
            continue
        participants = [p.replace(score=score) if p.id == existing.id else p for p in participants]

    return state.replace(standings=standings, competition_participants=participants), None


def start_bracket(state: SeasonState) -> Tuple[SeasonState, Optional[ValidationError]]:
    if state.phase != QUALIFICATION:
        return state, _phase_error(state, 'build the bracket')
    seeded, error = assign_seeds(state.competition_participants)
    if error:
        return state, error

    seeds = {e.id: e.seed for e in seeded}
    participants = [p.replace(seed=seeds.get(p.id, 0)) for p in state.competition_participants]
    return state.replace(
        phase=BRACKET,
        competition_participants=participants,
        bracket=build_bracket(seeded),
        third_place_match=None,
    ), None


def record_winner(state: SeasonState, match_id, winner_id) -> Tuple[SeasonState, Optional[ValidationError]]:
    """
    Record a match result by entrant id.

    Unknown matches, decided matches and winners that are not in the match
    are ignored, as are late duplicates arriving after the bracket finished.
    """
    if state.phase == FINISHED:
        return state, None
    if state.phase != BRACKET:
        return state, _phase_error(state, 'record results')

    tpm = state.third_place_match
    match = tpm if tpm is not None and tpm.id == match_id else state.bracket.find(match_id)
    winner = match.slot_entrant(winner_id) if match is not None else None
    if winner is None:
        return state, None

    result = set_winner(state.bracket, tpm, match_id, winner)
    return state.replace(
        bracket=result['bracket'],
        third_place_match=result['third_place_match'],
        phase=FINISHED if result['finished'] else BRACKET,
    ), None


def return_to_qualification(state: SeasonState) -> Tuple[SeasonState, Optional[ValidationError]]:
    """Throw the bracket away and reopen qualification with the scores kept."""
    if state.phase not in (BRACKET, FINISHED):
        return state, _phase_error(state, 'return to qualification')
    participants = [p.replace(seed=0) for p in state.competition_participants]
    return state.replace(
        phase=QUALIFICATION,
        competition_participants=participants,
        bracket=Bracket([]),
        third_place_match=None,
    ), None


def abort_competition(state: SeasonState) -> Tuple[SeasonState, Optional[ValidationError]]:
    """Discard the competition in progress without awarding points."""
    if state.phase == CHAMPIONSHIP_VIEW:
        return state, _phase_error(state, 'abort a competition')
    return state.replace(
        phase=CHAMPIONSHIP_VIEW,
        competition_participants=[],
        bracket=Bracket([]),
        third_place_match=None,
    ), None


def finish_competition(state: SeasonState) -> Tuple[SeasonState, Optional[ValidationError]]:
    """Award this competition's points and return to the season table."""
    if state.phase != FINISHED:
        return state, _phase_error(state, 'finish the competition')
    points = compute_competition_points(state.competition_participants, state.bracket,
                                        state.third_place_match)
    return SeasonState(
        phase=CHAMPIONSHIP_VIEW,
        standings=apply_points_to_standings(state.standings, points),
        total_competitions=state.total_competitions,
        competitions_held=state.competitions_held + 1,
    ), None


# ============================================================================
# SERIALIZATION
# ============================================================================

def state_to_dict(state: SeasonState) -> Dict:
    return {
        'phase': state.phase,
        'standings': [s.to_dict() for s in state.standings],
        'competitionParticipants': [p.to_dict() for p in state.competition_participants],
        'bracket': state.bracket.to_list(),
        'thirdPlaceMatch': state.third_place_match.to_dict() if state.third_place_match else None,
        'totalCompetitions': state.total_competitions,
        'competitionsHeld': state.competitions_held,
    }


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check(condition, message):
    if not condition:
        raise StateDecodeError(message)


def _check_entrant(data, where):
    _check(isinstance(data, dict), f'{where}: expected an object')
    _check(_is_number(data.get('id')), f'{where}.id: expected a number')
    _check(isinstance(data.get('name'), str), f'{where}.name: expected a string')
    _check(data.get('score') is None or _is_number(data['score']), f'{where}.score: expected a number or null')
    _check(_is_int(data.get('seed', 0)), f'{where}.seed: expected an integer')


def _check_match(data, where):
    _check(isinstance(data, dict), f'{where}: expected an object')
    _check(_is_number(data.get('id')), f'{where}.id: expected a number')
    _check(_is_int(data.get('roundIndex')), f'{where}.roundIndex: expected an integer')
    _check(_is_int(data.get('matchIndex')), f'{where}.matchIndex: expected an integer')
    for slot in ('participant1', 'participant2', 'winner'):
        if data.get(slot) is not None:
            _check_entrant(data[slot], f'{where}.{slot}')
    next_id = data.get('nextMatchId')
    _check(next_id is None or _is_number(next_id), f'{where}.nextMatchId: expected a number or null')


def _check_links(rounds):
    """Match ids are unique, positions agree with indices and every link lands one round later."""
    seen = set()
    for r, round_matches in enumerate(rounds):
        next_ids = {m['id'] for m in rounds[r + 1]} if r + 1 < len(rounds) else set()
        for m, match in enumerate(round_matches):
            where = f'bracket[{r}][{m}]'
            _check(match['id'] not in seen, f'{where}.id: duplicate match id {match["id"]}')
            seen.add(match['id'])
            _check(match['roundIndex'] == r and match['matchIndex'] == m,
                   f'{where}: roundIndex/matchIndex do not match its position')
            next_id = match.get('nextMatchId')
            if r + 1 < len(rounds):
                _check(next_id in next_ids, f'{where}.nextMatchId: no match {next_id} in the next round')
            else:
                _check(next_id is None, f'{where}.nextMatchId: the final has no next match')


def state_from_dict(data) -> SeasonState:
    """Validate and decode a season state. Raises StateDecodeError."""
    _check(isinstance(data, dict), 'state: expected an object')
    _check(data.get('phase') in PHASES, f"phase: expected one of {', '.join(PHASES)}")

    standings = data.get('standings', [])
    _check(isinstance(standings, list), 'standings: expected a list')
    for i, s in enumerate(standings):
        where = f'standings[{i}]'
        _check(isinstance(s, dict), f'{where}: expected an object')
        _check(_is_number(s.get('id')), f'{where}.id: expected a number')
        _check(isinstance(s.get('name'), str), f'{where}.name: expected a string')
        points = s.get('pointsPerCompetition', [])
        _check(isinstance(points, list) and all(_is_number(p) for p in points),
               f'{where}.pointsPerCompetition: expected a list of numbers')

    participants = data.get('competitionParticipants', [])
    _check(isinstance(participants, list), 'competitionParticipants: expected a list')
    for i, p in enumerate(participants):
        _check_entrant(p, f'competitionParticipants[{i}]')

    rounds = data.get('bracket', [])
    _check(isinstance(rounds, list), 'bracket: expected a list of rounds')
    for r, round_matches in enumerate(rounds):
        _check(isinstance(round_matches, list) and round_matches,
               f'bracket[{r}]: expected a non-empty list of matches')
        for m, match in enumerate(round_matches):
            _check_match(match, f'bracket[{r}][{m}]')
    _check_links(rounds)

    tpm = data.get('thirdPlaceMatch')
    if tpm is not None:
        _check_match(tpm, 'thirdPlaceMatch')

    total = data.get('totalCompetitions')
    _check(total is None or _is_int(total), 'totalCompetitions: expected an integer or null')
    held = data.get('competitionsHeld', 0)
    _check(_is_int(held) and held >= 0, 'competitionsHeld: expected a non-negative integer')

    return SeasonState(
        phase=data['phase'],
        standings=[ChampionshipStanding.from_dict(s) for s in standings],
        competition_participants=[Entrant.from_dict(p) for p in participants],
        bracket=Bracket.from_list(rounds),
        third_place_match=Match.from_dict(tpm) if tpm is not None else None,
        total_competitions=total,
        competitions_held=held,
    )


def _parse_text(text):
    # JSON first: YAML 1.1 reads exponent numbers like 1e-07 as strings.
    try:
        return json.loads(text)
    except ValueError:
        return yaml.safe_load(text)


def decode_state(blob) -> SeasonState:
    """
    Decode a season state from a dict or a JSON/YAML string.

    Anything that fails to parse or validate yields a fresh default state.
    """
    data = blob
    if isinstance(blob, (str, bytes)):
        try:
            data = _parse_text(blob)
        except yaml.YAMLError as e:
            logger.warning(f'Discarding unparseable season state: {e}')
            return SeasonState()
    if data is None:
        return SeasonState()
    try:
        return state_from_dict(data)
    except StateDecodeError as e:
        logger.warning(f'Discarding invalid season state: {e}')
        return SeasonState()
