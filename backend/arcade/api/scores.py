from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from werkzeug.exceptions import BadRequest

from arcade import db
from arcade.payloads import json_body, required_string
from arcade.services import ScoreService, LeaderboardQuery
from arcade.services.leaderboard import DEFAULT_LIMIT

scores = Blueprint('scores', __name__)

# Scores are stored in a 32-bit INTEGER column
MIN_SCORE = -2**31
MAX_SCORE = 2**31 - 1


@scores.route('/submit-score', methods=['POST'])
@login_required
def submit_score():
    data = json_body()
    game_name = required_string(data, 'game_name', max_length=64)
    score = data.get('score')
    # bool is an int subclass; reject it explicitly
    if not isinstance(score, int) or isinstance(score, bool):
        raise BadRequest('Invalid request: score must be an integer')
    if not MIN_SCORE <= score <= MAX_SCORE:
        raise BadRequest('Invalid request: score is out of range')

    updated = ScoreService(db.session).submit(current_user, game_name, score)
    return jsonify({'message': 'Score processed', 'updated': updated})


@scores.route('/leaderboard', methods=['GET'])
def leaderboard():
    game = request.args.get('game') or None
    limit = current_app.config.get('LEADERBOARD_LIMIT', DEFAULT_LIMIT)
    return jsonify(LeaderboardQuery(db.session).top_scores(game, limit=limit))
