from flask import request
from werkzeug.exceptions import BadRequest


def json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest('Invalid request: expected a JSON object')
    return data


def required_string(data, key, max_length=None):
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise BadRequest(f'Invalid request: {key} is required')
    if max_length and len(value) > max_length:
        raise BadRequest(f'Invalid request: {key} must be at most {max_length} characters')
    return value
