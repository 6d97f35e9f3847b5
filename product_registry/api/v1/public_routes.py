"""
Public Routes
Unauthenticated product reference resolution (/product/<id>, encoded in scannable codes)
"""
from flask import Blueprint, current_app
import logging

from product_registry.api.middleware.response_middleware import response_middleware

public_bp = Blueprint('public_products', __name__)
logger = logging.getLogger(__name__)


@public_bp.route('/product/<product_id>', methods=['GET'])
def resolve_reference(product_id):
    product = current_app.extensions['registry'].ledger.get(product_id)
    return response_middleware.create_success_response(product.to_dict())


@public_bp.route('/health', methods=['GET'])
def health():
    """Health check including the registry backend"""
    try:
        backend = current_app.extensions['registry'].ledger.health()
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        backend = {'connected': False, 'error': str(e)}

    healthy = bool(backend.get('connected'))
    return response_middleware.create_success_response(
        {'status': 'healthy' if healthy else 'unhealthy', 'backend': backend},
        status_code=200 if healthy else 503
    )
