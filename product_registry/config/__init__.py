"""
Configuration module
Centralized configuration for the registry backends and the web layer
"""

from .database import get_db_connection, close_db_connection
from .settings import get_config

__all__ = ['get_db_connection', 'close_db_connection', 'get_config']
