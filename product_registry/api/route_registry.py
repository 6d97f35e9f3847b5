"""
API Route Registry
Central registration of all API routes
"""
import logging
from flask import Flask

logger = logging.getLogger(__name__)


def register_routes(app: Flask):
    """Register all API routes with the Flask app"""
    from product_registry.api.v1.product_routes import product_bp, transition_bp
    from product_registry.api.v1.public_routes import public_bp

    app.register_blueprint(product_bp, url_prefix='/v1/products')
    app.register_blueprint(transition_bp, url_prefix='/v1/transitions')
    app.register_blueprint(public_bp)

    logger.info("Registered: /v1/products, /v1/transitions, /product, /health")
    return True

