"""Middleware for bearer authentication."""
from functools import wraps
from flask import g, request
from coffeeshop.exceptions import ForbiddenError, UnauthorizedError
from coffeeshop.services.auth_service import verify_token


def _bearer_token():
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def require_auth(f):
    """
    Decorator: Require a valid bearer token.

    Sets g.claims to the verified Claims for the view.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        if not token:
            raise UnauthorizedError('Please log in first')
        g.claims = verify_token(token)
        return f(*args, **kwargs)
    return decorated_function


def require_role(*roles):
    """
    Decorator: Require a bearer token whose role is one of roles.

    Wraps require_auth, so it replaces it on the view.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if g.claims.role not in roles:
                raise ForbiddenError()
            return f(*args, **kwargs)
        return require_auth(decorated_function)
    return decorator
