#middleware/response_middleware
from flask import request, jsonify, make_response
from typing import Dict, Optional, Any
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


class ResponseMiddleware:

    @staticmethod
    def create_error_response(error: str, message: str, status_code: int = 400,
                              details: Optional[Dict] = None):
        """
        Unified error response with consistent format
        """
        error_data = {
            'status': 'error',
            'error': error,
            'message': message,
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'path': request.path,
            'method': request.method
        }

        if details:
            error_data['details'] = details

        return make_response(jsonify(error_data), status_code)

    @staticmethod
    def create_success_response(data: Dict[Any, Any], message: str = "Success",
                                status_code: int = 200, headers: Optional[Dict[str, str]] = None):
        """
        Unified success response with consistent format
        """
        response_data = {
            'status': 'success',
            'message': message,
            'data': data,
            'timestamp': datetime.now(timezone.utc).isoformat()
        }

        response = make_response(jsonify(response_data), status_code)
        for name, value in (headers or {}).items():
            response.headers[name] = value
        return response


response_middleware = ResponseMiddleware()
