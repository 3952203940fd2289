"""
JWT session tokens and the decorator protecting API routes.
"""
from functools import wraps
from datetime import datetime

import jwt
from flask import request, jsonify, g, current_app

from models import User
from store import get_store
from services.errors import ServiceError


JWT_ALGORITHM = 'HS256'


def generate_access_token(user_id):
    """Generate a session access token.

    Args:
        user_id: The user's ID

    Returns:
        JWT access token string, valid for JWT_ACCESS_TOKEN_EXPIRES (24 hours)
    """
    now = datetime.utcnow()
    payload = {
        'sub': user_id,
        'type': 'access',
        'iat': now,
        'exp': now + current_app.config['JWT_ACCESS_TOKEN_EXPIRES'],
    }
    return jwt.encode(payload, current_app.config['JWT_SECRET_KEY'], algorithm=JWT_ALGORITHM)


def decode_token(token):
    """Decode and validate a JWT token.

    Args:
        token: JWT token string

    Returns:
        Decoded payload dict

    Raises:
        jwt.ExpiredSignatureError: Token has expired
        jwt.InvalidTokenError: Token is invalid
    """
    return jwt.decode(token, current_app.config['JWT_SECRET_KEY'], algorithms=[JWT_ALGORITHM])


def jwt_required(f):
    """Decorator requiring valid JWT access token.

    Sets g.current_user_id and g.current_user from the token.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        auth_header = request.headers.get('Authorization', '')

        if not auth_header.startswith('Bearer '):
            return jsonify({'error': 'Missing or invalid Authorization header'}), 401

        token = auth_header.replace('Bearer ', '', 1).strip()

        try:
            payload = decode_token(token)

            if payload.get('type') != 'access':
                return jsonify({'error': 'Invalid token type'}), 401

            g.current_user_id = payload['sub']

            # The account must still exist
            user = get_store().find_one(User, id=g.current_user_id)
            if not user:
                return jsonify({'error': 'User not found'}), 401

            g.current_user = user

        except jwt.ExpiredSignatureError:
            return jsonify({'error': 'Token expired'}), 401
        except (jwt.InvalidTokenError, KeyError):
            return jsonify({'error': 'Invalid token'}), 401
        except ServiceError as e:
            return jsonify({'error': e.message}), e.status_code

        return f(*args, **kwargs)
    return decorated
