import json

from flask import jsonify, request

from smarthr.errors import ValidationError


def success(data, status=200):
    return jsonify({'data': data}), status


def created(data):
    return success(data, 201)


def message(text):
    return jsonify({'message': text}), 200


def error_response(error, status):
    return jsonify({'error': error}), status


def read_json_body():
    """Parse the request body; an empty body counts as ``{}``."""
    raw = request.get_data(as_text=True)
    if not raw or not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except ValueError as e:
        raise ValidationError([{'path': [], 'message': f'Malformed JSON body: {e}', 'code': 'invalid_type'}])
