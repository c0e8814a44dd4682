from functools import wraps
from flask import request, jsonify, g
from utils.tokens import decode_jwt


def _request_token():
    token = request.cookies.get("access_token")
    if token:
        return token
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header[len("Bearer "):]
    return None


def login_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _request_token()
        if not token:
            return jsonify({"error": "Unauthorized"}), 401

        decoded = decode_jwt(token)
        if not decoded or "user_id" not in decoded:
            return jsonify({"error": "Invalid token"}), 401

        g.user = decoded
        return f(*args, **kwargs)

    return decorated_function


def role_required(*roles):
    """Restrict a login-protected view to the given roles."""
    def decorator(f):
        @wraps(f)
        @login_required
        def decorated_function(*args, **kwargs):
            if g.user.get("role") not in roles:
                return jsonify({"error": "Access denied"}), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def current_user_id():
    return g.user.get("user_id")
