import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration"""
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key')

    # JWT issued by the identity provider
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY') or SECRET_KEY
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=24)

    # Registry backend: memory, mongo or contract
    REGISTRY_BACKEND = os.getenv('REGISTRY_BACKEND', 'memory').lower()

    # Database
    MONGODB_URI = os.getenv('MONGODB_URI')
    DATABASE_NAME = os.getenv('DATABASE_NAME', 'product_registry')

    # Blockchain
    BLOCKCHAIN_RPC_URL = os.getenv('BLOCKCHAIN_RPC_URL')
    CONTRACT_ADDRESS = os.getenv('CONTRACT_ADDRESS')
    CONTRACT_ABI_PATH = os.getenv('CONTRACT_ABI_PATH')
    CHAIN_ID = int(os.getenv('CHAIN_ID', '11155111'))
    PRIVATE_KEY = os.getenv('PRIVATE_KEY')

    # Ledger client
    LEDGER_MAX_WORKERS = int(os.getenv('LEDGER_MAX_WORKERS', '4'))
    CONFIRMATION_TIMEOUT_SECONDS = int(os.getenv('CONFIRMATION_TIMEOUT_SECONDS', '120'))
    PENDING_HANDLE_LIMIT = int(os.getenv('PENDING_HANDLE_LIMIT', '1000'))
    MAX_PAGE_SIZE = int(os.getenv('MAX_PAGE_SIZE', '100'))

    # CORS
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', 'http://localhost:3000,http://localhost:5173').split(',')

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    LOG_LEVEL = 'DEBUG'

    if not Config.MONGODB_URI:
        MONGODB_URI = 'mongodb://localhost:27017/product_registry_dev'


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    LOG_LEVEL = 'WARNING'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=2)


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    DEBUG = True
    REGISTRY_BACKEND = 'memory'
    SECRET_KEY = 'test-secret-key'
    JWT_SECRET_KEY = 'test-jwt-secret'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=5)
    CONFIRMATION_TIMEOUT_SECONDS = 5
    MAX_PAGE_SIZE = 50


def get_config():
    """Get configuration based on FLASK_ENV environment variable"""
    env = os.getenv('FLASK_ENV', 'development').lower()

    config_map = {
        'development': DevelopmentConfig,
        'production': ProductionConfig,
        'testing': TestingConfig
    }

    return config_map.get(env, DevelopmentConfig)
