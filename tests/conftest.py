"""
Shared pytest fixtures for the match manager tests.

Running tests:
    pytest tests/                  - full suite
    pytest tests/ -m "not slow"   - skip the statistical simulation checks
"""
import pytest
import sys
import os

# Add src and scripts directories to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'scripts'))

# Keep the app from generating a key file in the real data directory
os.environ.setdefault('SESSION_SECRET', 'test-session-secret')

from core.outcomes import RandomOutcomes


class ScriptedOutcomes(RandomOutcomes):
    """
    Outcome source that replays fixed draws.

    ``picks`` is a list of 'home'/'away' choices, ``confidences`` and ``rolls``
    are consumed in order. Unscripted draws fall back to home / 90 / 0.0, and
    shuffle keeps the input order unless ``order`` is given.
    """

    def __init__(self, picks=None, confidences=None, rolls=None, order=None):
        super().__init__(seed=0)
        self.picks = list(picks or [])
        self.confidences = list(confidences or [])
        self.rolls = list(rolls or [])
        self.order = order

    def shuffle(self, names):
        if self.order is not None:
            assert sorted(self.order) == sorted(names)
            return list(self.order)
        return list(names)

    def pick_winner(self, home, away):
        pick = self.picks.pop(0) if self.picks else 'home'
        return home if pick == 'home' else away

    def confidence(self):
        return self.confidences.pop(0) if self.confidences else 90

    def roll(self):
        return self.rolls.pop(0) if self.rolls else 0.0


@pytest.fixture
def scripted():
    """Factory for scripted outcome sources."""
    return ScriptedOutcomes


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the app's data files at a temporary directory."""
    import app as app_module

    monkeypatch.setattr(app_module, 'DATA_DIR', str(tmp_path))
    monkeypatch.setattr(app_module, 'TEAMS_FILE', str(tmp_path / 'teams.json'))
    monkeypatch.setattr(app_module, 'SETTINGS_FILE', str(tmp_path / 'settings.yaml'))
    monkeypatch.setenv('ADMIN_PASSWORD', 'letmein')
    return tmp_path


@pytest.fixture
def client(temp_data_dir):
    """Create an unauthenticated test client."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def admin_client(temp_data_dir):
    """Create a test client whose session is already logged in as admin."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        with client.session_transaction() as sess:
            sess['is_admin'] = True
        yield client


@pytest.fixture
def sample_teams():
    """Four teams with small rosters."""
    return {
        "Lions": [
            {"name": "Ana", "position": "Forward", "rating": 82},
            {"name": "Ben", "position": "Goalkeeper", "rating": 77},
        ],
        "Tigers": [
            {"name": "Carl", "position": "Midfielder", "rating": 70},
        ],
        "Bears": [
            {"name": "Dora", "position": "Defender", "rating": 88},
        ],
        "Wolves": [],
    }
