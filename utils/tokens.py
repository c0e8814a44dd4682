import logging
import datetime
import jwt
from flask import current_app

logger = logging.getLogger(__name__)


def get_jwt_token(user_data):
    """Generate JWT token with user payload"""
    if not user_data:
        raise ValueError("User data must be provided to generate JWT token")

    expiration = datetime.datetime.utcnow() + current_app.config["JWT_EXPIRATION"]
    payload = {"exp": expiration, **user_data}

    return jwt.encode(payload, current_app.config["SECRET_KEY"], algorithm="HS256")


def decode_jwt(token):
    """Decode and validate a JWT token, returning None when it cannot be trusted."""
    try:
        return jwt.decode(token, current_app.config["SECRET_KEY"], algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        logger.info("Token expired")
        return None
    except jwt.InvalidTokenError:
        logger.info("Invalid token provided")
        return None
