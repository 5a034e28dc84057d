"""
Flask JSON API for the court scheduler and box rotation tools.

Callers post the current snapshot of matches, courts and divisions (or the
players of a box); nothing is stored apart from the scheduler settings.
"""
import logging
from flask import Flask, request, jsonify
from scheduling.config import SETTINGS_FILE, load_settings, save_settings, queue_options, get_default_settings
from scheduling.models import build_courts
from scheduling.allocation import (
    get_scheduled_queue,
    get_next_match_for_court,
    auto_assign_first_wave,
    auto_assign_on_court_free,
    get_court_statuses,
)
from scheduling.rotation import (
    get_rotation_pattern,
    generate_box_pairings,
    validate_pattern_fairness,
    get_schedule_display,
)
from scheduling.packing import (
    pack_players_into_boxes,
    format_packing_for_display,
    get_packing_adjustment_suggestions,
)

app = Flask(__name__)

REQUEST_ERRORS = (ValueError, KeyError, TypeError)

SETTINGS_FIELDS = {
    'strategy': str,
    'match_duration_minutes': int,
    'stage_weights': dict,
    'default_box_size': int,
    'log_level': str,
}


def _error(message, status=400):
    app.logger.warning(f'Rejected {request.method} {request.path}: {message}')
    return jsonify({'success': False, 'error': message}), status


def _payload():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError('Request body must be a JSON object.')
    return data


def _build_queue(data, settings):
    strategy = data.get('strategy') or settings['strategy']
    result = get_scheduled_queue(
        data.get('matches', []),
        data.get('courts', []),
        data.get('divisions', []),
        strategy=strategy,
        **queue_options(settings),
    )
    return strategy, result


@app.route('/api/queue', methods=['POST'])
def api_queue():
    """Priority-ordered queue of matches waiting for a court."""
    try:
        data = _payload()
        strategy, result = _build_queue(data, load_settings(SETTINGS_FILE))
    except REQUEST_ERRORS as e:
        return _error(str(e))

    return jsonify({
        'success': True,
        'strategy': strategy,
        'queue': [m.to_dict() for m in result['queue']],
        'wait_times': result['wait_times'],
    })


@app.route('/api/queue/first-wave', methods=['POST'])
def api_first_wave():
    """Assign the head of the queue to every free active court."""
    try:
        data = _payload()
        _strategy, result = _build_queue(data, load_settings(SETTINGS_FILE))
        assignments = auto_assign_first_wave(result['queue'], data.get('courts', []))
    except REQUEST_ERRORS as e:
        return _error(str(e))

    app.logger.info(f'First wave: {len(assignments)} assignments')
    return jsonify({'success': True, 'assignments': assignments})


@app.route('/api/queue/court-free', methods=['POST'])
def api_court_free():
    """Assign the next match to a court that has just finished."""
    try:
        data = _payload()
        if not data.get('court'):
            raise ValueError('A freed court is required.')
        _strategy, result = _build_queue(data, load_settings(SETTINGS_FILE))
        assignment = auto_assign_on_court_free(result['queue'], data['court'])
    except REQUEST_ERRORS as e:
        return _error(str(e))

    return jsonify({'success': True, 'assignment': assignment})


@app.route('/api/queue/next-match', methods=['POST'])
def api_next_match():
    """Next queued match not already placed on an active court."""
    try:
        data = _payload()
        _strategy, result = _build_queue(data, load_settings(SETTINGS_FILE))
        active_names = [c.name for c in build_courts(data.get('courts', [])) if c.active]
        match = get_next_match_for_court(result['queue'], active_names)
    except REQUEST_ERRORS as e:
        return _error(str(e))

    return jsonify({'success': True, 'match': match.to_dict() if match else None})


@app.route('/api/courts/status', methods=['POST'])
def api_court_status():
    try:
        data = _payload()
        courts = get_court_statuses(data.get('courts', []), data.get('matches', []))
    except REQUEST_ERRORS as e:
        return _error(str(e))

    return jsonify({'success': True, 'courts': courts})


@app.route('/api/box/pairings', methods=['POST'])
def api_box_pairings():
    """Round-by-round pairings for one box of players."""
    try:
        data = _payload()
        players = data.get('players') or []
        box_size = int(data.get('box_size') or load_settings(SETTINGS_FILE)['default_box_size'])
        pairings = generate_box_pairings(players, box_size)
        schedule = get_schedule_display(players, box_size)
    except REQUEST_ERRORS as e:
        return _error(str(e))

    return jsonify({'success': True, 'pairings': pairings, 'schedule': schedule})


@app.route('/api/box/patterns', methods=['GET'])
@app.route('/api/box/patterns/<int:box_size>', methods=['GET'])
def api_box_pattern(box_size=None):
    """Rotation pattern for a box size (default_box_size when omitted) with its fairness check."""
    try:
        if box_size is None:
            box_size = load_settings(SETTINGS_FILE)['default_box_size']
        pattern = get_rotation_pattern(box_size)
    except REQUEST_ERRORS as e:
        return _error(str(e))

    pattern['rounds'] = [
        {key: list(value) if isinstance(value, tuple) else value for key, value in round_def.items()}
        for round_def in pattern['rounds']
    ]
    return jsonify({'success': True, 'pattern': pattern, 'validation': validate_pattern_fairness(pattern)})


@app.route('/api/box/packing/<int:player_count>', methods=['GET'])
def api_box_packing(player_count):
    packing = pack_players_into_boxes(player_count)
    return jsonify({
        'success': packing['success'],
        'packing': packing,
        'display': format_packing_for_display(packing),
        'suggestions': get_packing_adjustment_suggestions(player_count),
    })


@app.route('/api/settings', methods=['GET'])
def api_settings():
    try:
        settings = load_settings(SETTINGS_FILE)
    except REQUEST_ERRORS as e:
        return _error(str(e))

    return jsonify({'success': True, 'settings': settings})


@app.route('/api/settings/update', methods=['POST'])
def api_update_settings():
    """Update any subset of the scheduler settings."""
    try:
        data = _payload()
        settings = load_settings(SETTINGS_FILE)
        for key, field_type in SETTINGS_FIELDS.items():
            if key in data:
                settings[key] = field_type(data[key])
        save_settings(settings, SETTINGS_FILE)
    except REQUEST_ERRORS as e:
        return _error(str(e))

    app.logger.info(f'Settings updated: {sorted(k for k in data if k in SETTINGS_FIELDS)}')
    return jsonify({'success': True, 'settings': settings})


@app.route('/api/settings/reset', methods=['POST'])
def api_reset_settings():
    try:
        save_settings(get_default_settings(), SETTINGS_FILE)
    except OSError as e:
        return _error(f'Could not reset settings: {e}', status=500)

    app.logger.info('Settings reset to defaults')
    return jsonify({'success': True, 'settings': get_default_settings()})


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    app.run(debug=True, port=5000)
