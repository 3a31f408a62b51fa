# /aloa/utils/responses.py
from flask import jsonify


def success_response(data=None, message=None, status=200):
    """Builds the uniform success envelope."""
    body = {'success': True}
    if message:
        body['message'] = message
    if data is not None:
        body['data'] = data
    return jsonify(body), status


def error_response(message, status, errors=None):
    """Builds the uniform error envelope."""
    body = {'success': False, 'message': message}
    if errors:
        body['errors'] = errors
    return jsonify(body), status


def pagination_meta(page_obj):
    return {
        'current': page_obj.page,
        'pages': page_obj.pages,
        'total': page_obj.total,
    }
