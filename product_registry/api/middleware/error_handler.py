"""
Error Handler Middleware
Centralized error handling for the application
"""

import logging
from flask import request
from werkzeug.exceptions import HTTPException

from product_registry.api.middleware.response_middleware import response_middleware
from product_registry.core.exceptions import AuthError, RegistryError

logger = logging.getLogger(__name__)


class ErrorHandler:
    """Centralized error handling"""

    @staticmethod
    def init_app(app):
        """Initialize error handlers for Flask app"""

        # Authentication errors
        @app.errorhandler(AuthError)
        def handle_auth_error(error):
            logger.warning(f"Authentication error: {str(error)} - {request.path}")
            return response_middleware.create_error_response(
                'authentication_failed', str(error), 401
            )

        # Registry taxonomy
        @app.errorhandler(RegistryError)
        def handle_registry_error(error):
            if error.status_code >= 500:
                logger.error(f"{type(error).__name__}: {error} - {request.method} {request.path}")
            else:
                logger.info(f"{type(error).__name__}: {error} - {request.method} {request.path}")
            return response_middleware.create_error_response(
                error.kind, str(error), error.status_code
            )

        # HTTP exceptions
        @app.errorhandler(HTTPException)
        def handle_http_exception(error):
            logger.info(f"HTTP {error.code}: {request.path}")
            return response_middleware.create_error_response(
                error.name.lower().replace(' ', '_'), error.description, error.code
            )

        # Generic exception handler
        @app.errorhandler(Exception)
        def handle_unexpected_error(error):
            logger.exception(f"Unexpected error on {request.method} {request.path}")

            if app.config.get('DEBUG'):
                return response_middleware.create_error_response(
                    'internal_error', str(error), 500, {'type': type(error).__name__}
                )
            return response_middleware.create_error_response(
                'internal_error', 'An unexpected error occurred', 500
            )


error_handler = ErrorHandler()
