"""Request/response helpers shared by the JSON blueprints."""
from typing import Any, Dict
from flask import jsonify, request
from coffeeshop.exceptions import BusinessLogicError


def request_payload() -> Dict[str, Any]:
    """JSON object when sent as JSON, form fields otherwise."""
    if not request.is_json:
        return request.form.to_dict()

    payload = request.get_json(silent=True)
    if payload is None:
        raise BusinessLogicError('invalid JSON format')
    if not isinstance(payload, dict):
        raise BusinessLogicError('invalid request body')
    return payload


def success(message: str, result: Any = None, status_code: int = 200):
    """Success envelope shared by every endpoint."""
    body = {'success': True, 'message': message}
    if result is not None:
        body['result'] = result
    return jsonify(body), status_code
