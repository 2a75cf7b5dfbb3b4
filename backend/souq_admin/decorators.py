# Overview: Request decorators for API routes.

import hmac
from functools import wraps

from flask import current_app, jsonify, request


def require_admin_token(f):
    """
    Require the configured admin bearer token.

    SECURITY: Returns 401 if:
    - No Authorization header
    - Token does not match ADMIN_API_TOKEN

    When ADMIN_API_TOKEN is unset the check is skipped (local development).
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        expected = current_app.config.get("ADMIN_API_TOKEN")
        if not expected:
            return f(*args, **kwargs)

        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"error": "Authentication required"}), 401

        token = auth_header.split(" ", 1)[1]
        if not hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
            return jsonify({"error": "Invalid token"}), 401

        return f(*args, **kwargs)

    return decorated_function
