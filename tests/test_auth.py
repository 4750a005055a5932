"""
Tests for the admin login gate.
"""
import pytest
import sys
import os
from datetime import timedelta

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from app import app


class TestAuthRoutes:
    """Tests for login, auth status and logout routes."""

    def test_not_admin_by_default(self, client):
        response = client.get('/api/auth')
        assert response.status_code == 200
        assert response.get_json() == {'isAdmin': False}

    def test_login_success(self, client):
        """Correct password sets the admin flag."""
        response = client.post('/api/login', json={'password': 'letmein'})
        assert response.status_code == 200
        assert response.get_json() == {'ok': True, 'message': 'Logged in'}
        assert client.get('/api/auth').get_json() == {'isAdmin': True}
        with client.session_transaction() as sess:
            assert sess.get('is_admin') is True
            assert sess.permanent is True

    def test_login_failure(self, client):
        """Wrong password returns 401 and leaves the session unprivileged."""
        response = client.post('/api/login', json={'password': 'wrong'})
        assert response.status_code == 401
        assert response.get_json() == {'ok': False, 'message': 'Invalid password'}
        assert client.get('/api/auth').get_json() == {'isAdmin': False}

    @pytest.mark.parametrize("body", [{}, {'password': ''}, {'password': None}, {'password': 123}])
    def test_login_missing_password(self, client, body):
        response = client.post('/api/login', json=body)
        assert response.status_code == 401
        assert client.get('/api/auth').get_json() == {'isAdmin': False}

    def test_login_without_body(self, client):
        response = client.post('/api/login')
        assert response.status_code == 401

    def test_login_form_encoded(self, client):
        response = client.post('/api/login', data={'password': 'letmein'})
        assert response.status_code == 200

    def test_default_password(self, client, monkeypatch):
        """Without ADMIN_PASSWORD configured the default password is used."""
        monkeypatch.delenv('ADMIN_PASSWORD')
        assert client.post('/api/login', json={'password': 'letmein'}).status_code == 401
        assert client.post('/api/login', json={'password': 'changeme'}).status_code == 200

    def test_session_cookie(self, client):
        """The session cookie has a fixed name and is HttpOnly."""
        response = client.post('/api/login', json={'password': 'letmein'})
        cookie = response.headers.get('Set-Cookie')
        assert cookie.startswith('match.sid=')
        assert 'HttpOnly' in cookie
        assert 'Expires=' in cookie

    def test_session_lifetime(self):
        assert app.config['PERMANENT_SESSION_LIFETIME'] == timedelta(hours=4)

    def test_logout_clears_session(self, client):
        client.post('/api/login', json={'password': 'letmein'})
        response = client.post('/api/logout')
        assert response.status_code == 200
        assert response.get_json() == {'ok': True}
        assert any(h.startswith('match.sid=;') for h in response.headers.getlist('Set-Cookie'))
        assert client.get('/api/auth').get_json() == {'isAdmin': False}

    def test_logout_when_not_logged_in(self, client):
        response = client.post('/api/logout')
        assert response.status_code == 200
        assert response.get_json() == {'ok': True}


class TestAdminGate:
    """Tests for routes that require the admin flag."""

    @pytest.mark.parametrize("path", ['/api/teams', '/api/generate', '/api/settings'])
    def test_protected_routes_reject_visitors(self, client, path):
        response = client.post(path, json={})
        assert response.status_code == 403
        assert response.get_json() == {'message': 'Admin only'}

    def test_login_unlocks_saving(self, client):
        assert client.post('/api/teams', json={'Lions': []}).status_code == 403
        client.post('/api/login', json={'password': 'letmein'})
        assert client.post('/api/teams', json={'Lions': []}).status_code == 200
        assert client.get('/api/teams').get_json() == {'Lions': []}

    def test_logout_locks_again(self, client):
        client.post('/api/login', json={'password': 'letmein'})
        client.post('/api/logout')
        assert client.post('/api/generate').status_code == 403

    def test_logout_drops_generated_round(self, client):
        client.post('/api/login', json={'password': 'letmein'})
        client.post('/api/teams', json={'A': [], 'B': []})
        client.post('/api/generate')
        assert len(client.get('/api/matches').get_json()) == 1
        client.post('/api/logout')
        assert client.get('/api/matches').get_json() == []
