from flask import Flask, jsonify, request
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
allowed_methods = ['POST', 'GET', 'OPTIONS', 'PUT', 'DELETE']
allowed_headers = [
    'Accept',
    'Content-Type',
    'Content-Length',
    'Accept-Encoding',
    'X-CSRF-Token',
    'Authorization',
]

DEMO_SCORES = {
    'testuser1': {'Snake': 42, 'Tetris': 1800, 'XO': 3},
    'testuser2': {'Snake': 57, 'Battleship': 4},
    'testuser3': {'Tetris': 2400, 'XO': 5, 'Battleship': 2},
}


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    if not flask_app.config.get('SECRET_KEY'):
        raise RuntimeError('SECRET_KEY must be set to sign bearer tokens')

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    CORS(
        flask_app,
        origins=flask_app.config.get('CORS_ORIGINS', []),
        methods=allowed_methods,
        allow_headers=allowed_headers,
    )

    # Preflight requests never reach routing or the auth gate
    @flask_app.before_request
    def short_circuit_options():
        if request.method == 'OPTIONS':
            return jsonify({'status': 'ok'}), 200

    from arcade.main import main
    flask_app.register_blueprint(main)

    from arcade.api.scores import scores
    flask_app.register_blueprint(scores)

    from arcade.auth import register_auth_handlers
    register_auth_handlers(login_manager)

    register_error_handlers(flask_app)
    register_commands(flask_app)

    if not flask_app.config.get('TESTING'):
        verify_store(flask_app)

    return flask_app


def register_error_handlers(flask_app):
    @flask_app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return jsonify({'error': exc.description}), exc.code

    @flask_app.errorhandler(SQLAlchemyError)
    def handle_db_error(exc):
        db.session.rollback()
        flask_app.logger.exception(f"[db] error while serving {request.method} {request.path}: {exc}")
        return jsonify({'error': 'Database error'}), 500


def verify_store(flask_app):
    """Fail fast when the database is unreachable."""
    with flask_app.app_context():
        try:
            db.session.execute(text('SELECT 1'))
        except SQLAlchemyError as exc:
            flask_app.logger.error(f"[startup] cannot reach database: {exc}")
            raise
        finally:
            db.session.remove()
    flask_app.logger.info('[startup] database connection ok')


def register_commands(flask_app):
    @flask_app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables first.')
    @click.option('--seed', is_flag=True, help='Add demo users and scores.')
    def init_db_command(drop, seed):
        """Creates the tables, optionally dropping and seeding them."""
        from arcade.models import User, Score
        with flask_app.app_context():
            if drop:
                db.drop_all()
            db.create_all()

            if seed:
                for username, games in DEMO_SCORES.items():
                    user = User(username=username)
                    user.set_password('password')
                    for game_name, value in games.items():
                        user.scores.append(Score(game_name=game_name, score=value))
                    db.session.add(user)
                db.session.commit()
            click.echo('Database tables are ready!' + (' Demo data seeded.' if seed else ''))
