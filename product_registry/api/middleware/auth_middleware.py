"""
Authentication Middleware
Only handles token extraction and validation; role guards live in the registry
"""

import logging
from functools import wraps
from flask import request, current_app

from product_registry.core.exceptions import AuthError

logger = logging.getLogger(__name__)


class AuthMiddleware:
    """Middleware for authentication - token handling only"""

    @staticmethod
    def extract_token() -> str:
        """
        Extract JWT token from Authorization header

        Returns:
            Token string

        Raises:
            AuthError: If no token found
        """
        auth_header = request.headers.get('Authorization')

        if not auth_header:
            raise AuthError("No authorization header")

        scheme, _, token = auth_header.partition(' ')
        if scheme.lower() != 'bearer' or not token.strip():
            raise AuthError("Invalid authorization header format")

        return token.strip()

    @staticmethod
    def caller_required(f):
        """
        Decorator for routes requiring an authenticated caller
        Passes the Caller as first argument; AuthError is rendered by the error handler
        """
        @wraps(f)
        def wrapper(*args, **kwargs):
            token = AuthMiddleware.extract_token()
            caller = current_app.extensions['registry'].tokens.verify_token(token)

            return f(caller, *args, **kwargs)

        return wrapper


auth_middleware = AuthMiddleware()
