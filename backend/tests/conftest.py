import os
import sys
import pytest
from flask import g
from flask.testing import FlaskClient

# Ensure the backend root (containing the `arcade` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from arcade import create_app, db
from config import Config


class FreshLoginClient(FlaskClient):
    """Test client that forgets the user Flask-Login cached on the shared app context.

    Requests reuse the fixture's app context, so `g` outlives a request.
    """

    def open(self, *args, **kwargs):
        g.pop('_login_user', None)
        g.pop('auth_error', None)
        return super().open(*args, **kwargs)


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret-key-that-is-long-enough-for-hs256'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    TOKEN_TTL_HOURS = 24
    LEADERBOARD_LIMIT = 20
    CORS_ORIGINS = ['http://localhost:3000']


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    application.test_client_class = FreshLoginClient
    with application.app_context():
        # Ensure models are imported so tables are created
        import arcade.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def signup(client):
    """Register and log in a user, returning Authorization headers."""
    def _signup(username, password='password', email=None):
        body = {'username': username, 'password': password}
        if email is not None:
            body['email'] = email
        res = client.post('/register', json=body)
        assert res.status_code == 201, res.get_json()
        res = client.post('/login', json={'username': username, 'password': password})
        assert res.status_code == 200, res.get_json()
        return {'Authorization': f"Bearer {res.get_json()['token']}"}
    return _signup
