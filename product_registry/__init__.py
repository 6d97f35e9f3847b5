# product_registry/__init__.py
from flask import Flask
from flask_cors import CORS
import logging
import sys


def create_app(config_class=None, backend=None):
    """
    Application factory pattern

    Args:
        config_class: config object; defaults to the one selected by FLASK_ENV
        backend: registry backend to use instead of building one from config
    """
    from product_registry.config.settings import get_config
    from product_registry.extensions import build_registry
    from product_registry.api.route_registry import register_routes
    from product_registry.api.middleware.error_handler import error_handler

    app = Flask(__name__)
    app.config.from_object(config_class or get_config())

    setup_logging(app)

    CORS(app,
         origins=app.config['CORS_ORIGINS'],
         allow_headers=['Content-Type', 'Authorization'],
         methods=['GET', 'POST', 'OPTIONS'],
         supports_credentials=True)

    app.extensions['registry'] = build_registry(app.config, backend=backend)
    app.logger.info(f"Registry ready ({app.config['REGISTRY_BACKEND']})")

    register_routes(app)
    error_handler.init_app(app)

    return app


def setup_logging(app):
    """Setup application logging"""
    log_level = app.config.get('LOG_LEVEL', 'INFO')

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    # Quiet down noisy loggers
    logging.getLogger('werkzeug').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('web3').setLevel(logging.WARNING)
