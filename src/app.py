"""
Flask web application for the Season Bracket competition host.

The core in src/core is a pure transformation layer; this module owns the
season file, serialises writers with a file lock and exposes the season
operations as a JSON API.
"""
import os
import random
import yaml
from filelock import FileLock
from flask import Flask, request, jsonify
from core.season import (
    SeasonState,
    decode_state,
    state_to_dict,
    is_season_finished,
    season_podium,
    qualification_winner,
    set_total_competitions,
    add_participant,
    remove_participant,
    reset_season,
    start_competition,
    submit_score,
    add_mock_participants,
    start_bracket,
    record_winner,
    return_to_qualification,
    abort_competition,
    finish_competition,
)
from core.elimination import get_bracket_display
from core.points import final_placings, points_table
from core.standings import sort_standings, total_points

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('SEASON_DATA_DIR', os.path.join(BASE_DIR, 'data'))
SEASON_FILE = os.path.join(DATA_DIR, 'season.yaml')
LOCK_TIMEOUT = 10

# HTTP status for each validation error code; anything else is a 400.
ERROR_STATUS = {
    'INVALID_PHASE': 409,
    'SEASON_FINISHED': 409,
    'DUPLICATE_NAME': 409,
    'NOT_FOUND': 404,
}


def _data_lock() -> FileLock:
    os.makedirs(DATA_DIR, exist_ok=True)
    return FileLock(SEASON_FILE + '.lock', timeout=LOCK_TIMEOUT)


def load_season() -> SeasonState:
    """Load the season from YAML; a missing or invalid file gives a fresh season."""
    if not os.path.exists(SEASON_FILE):
        return SeasonState()
    try:
        with open(SEASON_FILE, 'r', encoding='utf-8') as f:
            content = f.read()
    except OSError as e:
        app.logger.warning(f'Failed to read {SEASON_FILE}: {e}')
        return SeasonState()
    return decode_state(content)


def save_season(state: SeasonState):
    """Save the season to YAML."""
    os.makedirs(DATA_DIR, exist_ok=True)
    with open(SEASON_FILE, 'w', encoding='utf-8') as f:
        yaml.dump(state_to_dict(state), f, default_flow_style=False, sort_keys=False)


def _error_response(error):
    return jsonify({'error': error.message, 'code': error.code}), ERROR_STATUS.get(error.code, 400)


def _apply(transition, *args):
    """Run a season transition under the lock and persist the result."""
    with _data_lock():
        state = load_season()
        new_state, error = transition(state, *args)
        if error:
            return _error_response(error)
        save_season(new_state)
    return jsonify({'success': True, 'state': state_to_dict(new_state)})


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _entrant_json(entrant):
    return entrant.to_dict() if entrant is not None else None


# ============================================================================
# READ-ONLY VIEWS
# ============================================================================

@app.route('/api/state')
def api_state():
    """Full season state, suitable for a read-only mirror."""
    return jsonify(state_to_dict(load_season()))


@app.route('/api/standings')
def api_standings():
    """Ranked season table with totals."""
    state = load_season()
    table = [
        {**s.to_dict(), 'rank': rank, 'total': total_points(s)}
        for rank, s in enumerate(sort_standings(state.standings), start=1)
    ]
    finished = is_season_finished(state)
    return jsonify({
        'standings': table,
        'competitionsHeld': state.competitions_held,
        'totalCompetitions': state.total_competitions,
        'seasonFinished': finished,
        'podium': [s.to_dict() for s in season_podium(state)] if finished else [],
    })


@app.route('/api/bracket')
def api_bracket():
    """Current bracket with named rounds and final placings."""
    state = load_season()
    display = get_bracket_display(state.bracket)
    placings = final_placings(state.bracket, state.third_place_match)
    tpm = state.third_place_match
    return jsonify({
        'phase': state.phase,
        'rounds': [
            {'name': name, 'matches': [m.to_dict() for m in matches]}
            for name, matches in display['rounds'].items()
        ],
        'bracketSize': display['bracket_size'],
        'totalRounds': display['total_rounds'],
        'byes': display['byes'],
        'thirdPlaceMatch': tpm.to_dict() if tpm else None,
        'placings': {place: _entrant_json(e) for place, e in placings.items()},
        'qualificationWinner': _entrant_json(qualification_winner(state)),
    })


@app.route('/api/points-table')
def api_points_table():
    return jsonify(points_table())


# ============================================================================
# SEASON MANAGEMENT
# ============================================================================

@app.route('/api/season/length', methods=['POST'])
def api_season_length():
    """Set how many competitions the season has."""
    count = _json_body().get('count')
    return _apply(set_total_competitions, count)


@app.route('/api/participants', methods=['POST'])
def api_add_participant():
    name = _json_body().get('name')
    if not isinstance(name, str):
        return jsonify({'error': 'Missing participant name'}), 400
    return _apply(add_participant, name)


@app.route('/api/register', methods=['POST'])
def api_register():
    """Public self-registration; names are unique regardless of case."""
    name = _json_body().get('name')
    if not isinstance(name, str):
        return jsonify({'error': 'Missing participant name'}), 400
    response = _apply(add_participant, name)
    if isinstance(response, tuple):
        return response
    app.logger.info(f'Registered participant "{name.strip()}"')
    return response


@app.route('/api/participants/remove', methods=['POST'])
def api_remove_participant():
    standing_id = _json_body().get('id')
    if standing_id is None:
        return jsonify({'error': 'Missing participant id'}), 400
    return _apply(remove_participant, standing_id)


@app.route('/api/reset', methods=['POST'])
def api_reset():
    """Start a new season, keeping the participant list."""
    app.logger.info('Season reset')
    return _apply(reset_season)


# ============================================================================
# COMPETITION
# ============================================================================

@app.route('/api/competition/start', methods=['POST'])
def api_start_competition():
    return _apply(start_competition)


@app.route('/api/scores', methods=['POST'])
def api_submit_score():
    """Submit a qualification score; a null score clears it."""
    data = _json_body()
    participant_id = data.get('participant_id', data.get('participantId'))
    if participant_id is None:
        return jsonify({'error': 'Missing participant id'}), 400
    return _apply(submit_score, participant_id, data.get('score'))


@app.route('/api/test-data', methods=['POST'])
def api_load_test_data():
    """Fill the qualification with test participants and random scores."""
    return _apply(add_mock_participants, 7, random.Random())


@app.route('/api/bracket/start', methods=['POST'])
def api_start_bracket():
    return _apply(start_bracket)


@app.route('/api/bracket/winner', methods=['POST'])
def api_set_winner():
    """Record a match winner. Replayed or invalid results leave the bracket as is."""
    data = _json_body()
    match_id = data.get('match_id')
    winner_id = data.get('winner_id')
    if match_id is None or winner_id is None:
        return jsonify({'error': 'Missing match_id or winner_id'}), 400
    return _apply(record_winner, match_id, winner_id)


@app.route('/api/bracket/back', methods=['POST'])
def api_back_to_qualification():
    return _apply(return_to_qualification)


@app.route('/api/competition/abort', methods=['POST'])
def api_abort_competition():
    app.logger.info('Competition aborted')
    return _apply(abort_competition)


@app.route('/api/competition/finish', methods=['POST'])
def api_finish_competition():
    """Award points for the finished competition and return to the season table."""
    response = _apply(finish_competition)
    if isinstance(response, tuple):
        return response
    state = response.get_json()['state']
    app.logger.info(f"Competition {state['competitionsHeld']} finished")
    return response


if __name__ == '__main__':
    app.run(debug=True, port=5000)
