"""
Uniform JSON envelopes.

Every route answers with either ``{"success": true, "data": ...}`` or
``{"success": false, "error": {"code": ..., "message": ...}}``.
"""

import logging
from functools import wraps

from flask import jsonify

logger = logging.getLogger(__name__)


def success(data, status=200):
    return jsonify({'success': True, 'data': data}), status


def error(code, message, status):
    return jsonify({'success': False, 'error': {'code': code, 'message': message}}), status


def bad_request(message):
    return error('BAD_REQUEST', message, 400)


def not_found(message):
    return error('NOT_FOUND', message, 404)


def handle_failure(code, message):
    """Turn any exception escaping the wrapped view into a 500 envelope.

    The exception is logged with its traceback; the client only sees
    ``message`` under ``code``.
    """
    def decorator(f):
        @wraps(f)
        def decorated(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except Exception:
                logger.exception('%s in %s', code, f.__name__)
                return error(code, message, 500)
        return decorated
    return decorator
