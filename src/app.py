"""
Flask web application for the Football Match Manager.
"""
import os
import hmac
import json
import logging
import math
import yaml
from datetime import timedelta
from functools import wraps
from filelock import FileLock
from flask import Flask, request, jsonify, Response, session
from core.models import Team, Match, validate_round, BYE
from core.outcomes import RandomOutcomes
from core.elimination import build_cup_bracket, NO_MATCHES_ERROR, ROUND_LABEL_STYLES
from core.league import build_league_table
from generate_matches import generate_first_round

app = Flask(__name__)
app.logger.setLevel(logging.INFO)


def _get_or_create_secret_key() -> bytes:
    """Get SESSION_SECRET from env, or generate and persist to file."""
    env_key = os.environ.get('SESSION_SECRET')
    if env_key:
        return env_key.encode()
    key_file = os.path.join(DATA_DIR, '.secret_key')
    if os.path.exists(key_file):
        with open(key_file, 'rb') as f:
            return f.read()
    key = os.urandom(24)
    os.makedirs(os.path.dirname(key_file), exist_ok=True)
    with open(key_file, 'wb') as f:
        f.write(key)
    return key


BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('MATCH_DATA_DIR', os.path.join(BASE_DIR, 'data'))

TEAMS_FILE = os.path.join(DATA_DIR, 'teams.json')
SETTINGS_FILE = os.path.join(DATA_DIR, 'settings.yaml')
DEFAULT_ADMIN_PASSWORD = 'changeme'
SESSION_COOKIE_NAME = 'match.sid'

app.secret_key = _get_or_create_secret_key()
app.json.sort_keys = False  # keep teams in store order
app.config['SESSION_COOKIE_NAME'] = SESSION_COOKIE_NAME
app.config['SESSION_COOKIE_HTTPONLY'] = True
app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(hours=4)
app.config['OUTCOME_SEED'] = int(os.environ['OUTCOME_SEED']) if os.environ.get('OUTCOME_SEED') else None

if not os.environ.get('ADMIN_PASSWORD'):
    app.logger.warning('ADMIN_PASSWORD is not set; using the default admin password')


def _admin_password() -> str:
    return os.environ.get('ADMIN_PASSWORD') or DEFAULT_ADMIN_PASSWORD


def _teams_lock() -> FileLock:
    os.makedirs(os.path.dirname(TEAMS_FILE), exist_ok=True)
    return FileLock(TEAMS_FILE + '.lock', timeout=10)


def load_teams() -> dict:
    """Load the team name -> roster mapping. No file yet means no teams."""
    if not os.path.exists(TEAMS_FILE):
        return {}
    with _teams_lock():
        with open(TEAMS_FILE, 'r', encoding='utf-8') as f:
            content = f.read()
    if not content.strip():
        return {}
    data = json.loads(content)
    if not isinstance(data, dict):
        raise ValueError(f'{TEAMS_FILE} does not contain a team mapping')
    return data


def save_teams(teams: dict):
    """Overwrite the teams file with a full replacement mapping."""
    with _teams_lock():
        with open(TEAMS_FILE, 'w', encoding='utf-8') as f:
            json.dump(teams, f, indent=2, ensure_ascii=False)


def normalize_teams(payload) -> dict:
    """Turn a submitted team mapping into its stored form, filling player defaults."""
    if not isinstance(payload, dict):
        raise ValueError('Teams must be a mapping of team name to player list')
    normalized = {}
    for name, roster in payload.items():
        name = str(name).strip()
        if not name:
            raise ValueError('Team names cannot be empty')
        if name == BYE:
            raise ValueError(f'"{BYE}" is reserved for automatic advances and cannot be a team name')
        if name in normalized:
            raise ValueError(f'Team "{name}" is listed more than once')
        normalized[name] = Team.from_dict(name, roster).to_dict()
    return normalized


def get_default_settings():
    """Return default simulation settings."""
    return {
        'confidence_min': 80,
        'confidence_max': 100,
        'home_win_probability': 0.45,
        'away_win_probability': 0.45,
        'round_labels': 'neutral',
    }


def load_settings():
    """Load simulation settings from YAML file, merging with defaults."""
    defaults = get_default_settings()
    if not os.path.exists(SETTINGS_FILE):
        return defaults
    try:
        with open(SETTINGS_FILE, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        app.logger.warning(f'Failed to parse {SETTINGS_FILE}: {e}')
        return defaults
    if not isinstance(data, dict):
        return defaults
    return {**defaults, **{k: v for k, v in data.items() if k in defaults}}


def save_settings(settings):
    """Save simulation settings to YAML file."""
    os.makedirs(os.path.dirname(SETTINGS_FILE), exist_ok=True)
    with open(SETTINGS_FILE, 'w', encoding='utf-8') as f:
        yaml.dump(settings, f, default_flow_style=False)


def apply_settings_update(settings, data):
    """Return ``settings`` updated from request ``data``; raises ValueError on bad values."""
    updated = dict(settings)
    for key in ('confidence_min', 'confidence_max'):
        if key in data:
            updated[key] = int(data[key])
    for key in ('home_win_probability', 'away_win_probability'):
        if key in data:
            updated[key] = float(data[key])
    if 'round_labels' in data:
        updated['round_labels'] = data['round_labels']

    if not 50 <= updated['confidence_min'] <= updated['confidence_max'] <= 100:
        raise ValueError('Confidence range must satisfy 50 <= min <= max <= 100')
    home_p, away_p = updated['home_win_probability'], updated['away_win_probability']
    if not (math.isfinite(home_p) and math.isfinite(away_p)):
        raise ValueError('Win probabilities must be finite numbers')
    if home_p < 0 or away_p < 0 or home_p + away_p > 1:
        raise ValueError('Win probabilities must be non-negative and sum to at most 1')
    if updated['round_labels'] not in ROUND_LABEL_STYLES:
        raise ValueError(f'round_labels must be one of {", ".join(ROUND_LABEL_STYLES)}')
    return updated


def make_outcomes(settings) -> RandomOutcomes:
    return RandomOutcomes(
        seed=app.config.get('OUTCOME_SEED'),
        confidence_range=(settings['confidence_min'], settings['confidence_max']),
    )


def is_admin() -> bool:
    return bool(session.get('is_admin'))


def admin_required(f):
    """Reject the request with 403 unless the session has logged in as admin."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not is_admin():
            return jsonify({'message': 'Admin only'}), 403
        return f(*args, **kwargs)
    return decorated_function


def _round_for_simulation():
    """Matches posted with the request, or the session's last generated round."""
    if request.method == 'POST':
        data = request.get_json(silent=True) or {}
        raw = data.get('matches', []) if isinstance(data, dict) else data
    else:
        raw = session.get('matches', [])
    if not isinstance(raw, list):
        raise ValueError('"matches" must be a list')
    return validate_round([Match.from_dict(m) for m in raw])


# --- Teams ---

@app.route('/api/teams', methods=['GET'])
def api_get_teams():
    """Return the full team mapping."""
    try:
        return jsonify(load_teams())
    except (OSError, ValueError) as e:
        app.logger.error(f'Failed to read {TEAMS_FILE}: {e}')
        return jsonify({'error': 'Failed to read teams'}), 500


@app.route('/api/teams', methods=['POST'])
@admin_required
def api_save_teams():
    """Replace the full team mapping."""
    try:
        teams = normalize_teams(request.get_json(silent=True))
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    try:
        save_teams(teams)
    except OSError as e:
        app.logger.error(f'Failed to write {TEAMS_FILE}: {e}')
        return jsonify({'error': 'Failed to save teams'}), 500
    app.logger.info(f'Saved {len(teams)} teams')
    return jsonify({'message': 'Teams saved'})


@app.route('/api/export-teams', methods=['GET'])
def api_export_teams():
    """Export the team mapping as a downloadable YAML file."""
    try:
        teams = load_teams()
    except (OSError, ValueError) as e:
        app.logger.error(f'Failed to read {TEAMS_FILE}: {e}')
        return jsonify({'error': 'Failed to read teams'}), 500

    yaml_content = yaml.dump(teams, default_flow_style=False, allow_unicode=True, sort_keys=False)
    return Response(
        yaml_content,
        mimetype='application/x-yaml',
        headers={'Content-Disposition': 'attachment; filename=teams_export.yaml'}
    )


@app.route('/api/import-teams', methods=['POST'])
@admin_required
def api_import_teams():
    """Replace the team mapping with an uploaded YAML export."""
    file = request.files.get('yaml_file')
    if not file or file.filename == '':
        return jsonify({'error': 'No file uploaded'}), 400
    try:
        teams = normalize_teams(yaml.safe_load(file.read().decode('utf-8')) or {})
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        return jsonify({'error': f'Invalid YAML: {e}'}), 400
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    try:
        save_teams(teams)
    except OSError as e:
        app.logger.error(f'Failed to write {TEAMS_FILE}: {e}')
        return jsonify({'error': 'Failed to save teams'}), 500
    app.logger.info(f'Imported {len(teams)} teams from {file.filename}')
    return jsonify({'message': 'Teams imported', 'count': len(teams)})


# --- Auth ---

@app.route('/api/auth', methods=['GET'])
def api_auth():
    return jsonify({'isAdmin': is_admin()})


@app.route('/api/login', methods=['POST'])
def api_login():
    """Check the admin password and mark the session as admin."""
    data = request.get_json(silent=True) or request.form
    password = data.get('password') if hasattr(data, 'get') else None
    if isinstance(password, str) and password and hmac.compare_digest(
            password.encode('utf-8'), _admin_password().encode('utf-8')):
        session['is_admin'] = True
        session.permanent = True
        app.logger.info(f'Admin login from {request.remote_addr}')
        return jsonify({'ok': True, 'message': 'Logged in'})
    app.logger.warning(f'Failed admin login from {request.remote_addr}')
    return jsonify({'ok': False, 'message': 'Invalid password'}), 401


@app.route('/api/logout', methods=['POST'])
def api_logout():
    """Destroy the session and clear its cookie."""
    session.clear()
    response = jsonify({'ok': True})
    response.delete_cookie(app.config['SESSION_COOKIE_NAME'])
    return response


# --- Matches and simulations ---

@app.route('/api/generate', methods=['POST'])
@admin_required
def api_generate():
    """Pair the current teams into a new first round for this session."""
    try:
        teams = load_teams()
    except (OSError, ValueError) as e:
        app.logger.error(f'Failed to read {TEAMS_FILE}: {e}')
        return jsonify({'error': 'Failed to read teams'}), 500

    matches = generate_first_round(list(teams.keys()), make_outcomes(load_settings()))
    session['matches'] = [m.to_dict() for m in matches]
    app.logger.info(f'Generated {len(matches)} matches for {len(teams)} teams')
    return jsonify({'matches': session['matches']})


@app.route('/api/matches', methods=['GET'])
def api_matches():
    return jsonify(session.get('matches', []))


@app.route('/cup', methods=['GET', 'POST'])
def cup():
    """Simulate a knockout cup over the generated round."""
    try:
        matches = _round_for_simulation()
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    if not matches:
        return jsonify({'error': NO_MATCHES_ERROR}), 400

    settings = load_settings()
    return jsonify(build_cup_bracket(matches, make_outcomes(settings), settings['round_labels']))


@app.route('/league', methods=['GET', 'POST'])
def league():
    """Simulate a league table over the generated round."""
    try:
        matches = _round_for_simulation()
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    if not matches:
        return jsonify({'error': NO_MATCHES_ERROR}), 400

    settings = load_settings()
    return jsonify(build_league_table(
        matches,
        make_outcomes(settings),
        home_win_probability=settings['home_win_probability'],
        away_win_probability=settings['away_win_probability'],
    ))


# --- Settings ---

@app.route('/api/settings', methods=['GET'])
def api_get_settings():
    return jsonify(load_settings())


@app.route('/api/settings', methods=['POST'])
@admin_required
def api_update_settings():
    """Update simulation settings."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Settings must be a JSON object'}), 400
    try:
        settings = apply_settings_update(load_settings(), data)
    except (TypeError, ValueError) as e:
        return jsonify({'error': str(e)}), 400
    save_settings(settings)
    return jsonify({'success': True, 'settings': settings})


if __name__ == '__main__':
    app.run(debug=True, port=int(os.environ.get('PORT', 3000)))
