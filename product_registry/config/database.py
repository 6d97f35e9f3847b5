"""
Database Configuration and Connection Management
Shared MongoDB connection for the mongo registry backend
"""

import logging
from typing import Optional

from pymongo import MongoClient
from pymongo.errors import ConnectionFailure

from product_registry.core.exceptions import LedgerConnectionError

logger = logging.getLogger(__name__)

# Global connection instances
_db_connection = None
_mongo_client = None


def get_db_connection(connection_string: Optional[str] = None, db_name: str = 'product_registry'):
    """
    Get database connection with connection pooling (singleton pattern)
    Returns the same connection instance across the application

    Args:
        connection_string: MongoDB URI, required on first call
        db_name: database to use

    Returns:
        Database: MongoDB database instance

    Raises:
        LedgerConnectionError: if the server cannot be reached
    """
    global _db_connection, _mongo_client

    if _db_connection is None:
        if not connection_string:
            raise ValueError("MONGODB_URI not configured")

        try:
            _mongo_client = MongoClient(
                connection_string,
                maxPoolSize=50,
                minPoolSize=0,
                maxIdleTimeMS=30000,
                serverSelectionTimeoutMS=30000
            )

            # Test connection
            _mongo_client.admin.command('ping')

            _db_connection = _mongo_client[db_name]
            logger.info(f"Connected to database: {db_name}")

        except ConnectionFailure as e:
            logger.error(f"Database connection failed: {e}")
            _mongo_client = None
            raise LedgerConnectionError(f"Database connection failed: {e}") from e

    return _db_connection


def close_db_connection():
    """
    Close database connection and cleanup resources
    Should be called on application shutdown
    """
    global _db_connection, _mongo_client

    if _mongo_client:
        try:
            _mongo_client.close()
            logger.info("Database connection closed")
        finally:
            _db_connection = None
            _mongo_client = None
