from flask import g, jsonify, current_app
from werkzeug.exceptions import Unauthorized

from arcade import db
from arcade.services import AuthService


def register_auth_handlers(manager):
    """Wire Flask-Login to the Authorization header instead of a session cookie."""

    @manager.request_loader
    def load_user_from_request(req):
        try:
            return AuthService.from_app(db.session).authenticate(req.headers.get('Authorization'))
        except Unauthorized as exc:
            g.auth_error = exc.description
            current_app.logger.info(f"[auth] rejected {req.method} {req.path}: {exc.description}")
            return None

    @manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': g.get('auth_error', 'Missing token')}), 401
