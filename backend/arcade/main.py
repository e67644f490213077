from flask import Blueprint, jsonify, current_app
from werkzeug.exceptions import BadRequest

from arcade import db
from arcade.payloads import json_body, required_string
from arcade.services import AuthService

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Backend is Live!'})


@main.route('/register', methods=['POST'])
def register():
    data = json_body()
    username = required_string(data, 'username', max_length=64)
    password = required_string(data, 'password')
    email = data.get('email')
    if email is not None and not isinstance(email, str):
        raise BadRequest('Invalid request: email must be a string')
    if email and len(email) > 255:
        raise BadRequest('Invalid request: email must be at most 255 characters')

    user = AuthService.from_app(db.session).register(username, password, email)
    current_app.logger.info(f"[register] user={user.username}")
    return jsonify({
        'message': f'User {user.username} registered successfully!',
        'user': user.to_dict(),
    }), 201


@main.route('/login', methods=['POST'])
def login():
    data = json_body()
    username = required_string(data, 'username')
    password = required_string(data, 'password')

    token = AuthService.from_app(db.session).login(username, password)
    current_app.logger.info(f"[login] user={username}")
    return jsonify({'token': token})
