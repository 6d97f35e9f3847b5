# services/registry/mongo_store.py
"""
MongoDB product store
Ids come from a counters document; status changes are conditional updates so
concurrent writers on the same product cannot both succeed
"""

import logging
from functools import wraps
from typing import Optional

import pymongo
from pymongo import ReturnDocument
from pymongo.errors import ConnectionFailure, PyMongoError

from product_registry.core.exceptions import LedgerConnectionError, RegistryError
from product_registry.models.enums import ProductStatus
from product_registry.models.product import Product
from product_registry.services.registry.store import ProductStore

logger = logging.getLogger(__name__)

PRODUCT_COUNTER_ID = 'product_id'


def translate_mongo_errors(f):
    """Surface driver failures as registry errors"""
    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except ConnectionFailure as e:
            logger.error(f"Database unreachable in {f.__name__}: {e}")
            raise LedgerConnectionError(f"Database unreachable: {e}") from e
        except PyMongoError as e:
            logger.error(f"Database error in {f.__name__}: {e}")
            raise RegistryError(f"Database error: {e}") from e
    return wrapper


class MongoProductStore(ProductStore):

    def __init__(self, db):
        self.db = db
        self.products = db.products
        self.counters = db.counters

    @translate_mongo_errors
    def init_indexes(self):
        self.products.create_index([('status', pymongo.ASCENDING)])
        self.products.create_index([('owner', pymongo.ASCENDING)])
        logger.info("Product indexes ensured")

    def _next_id(self) -> int:
        counter = self.counters.find_one_and_update(
            {'_id': PRODUCT_COUNTER_ID},
            {'$inc': {'seq': 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER
        )
        return int(counter['seq'])

    @translate_mongo_errors
    def insert_next(self, batch_id, certification, origin, created_at, owner):
        product = Product(
            id=self._next_id(),
            batch_id=batch_id,
            certification=certification,
            origin=origin,
            created_at=created_at,
            owner=owner,
            status=ProductStatus.CREATED
        )
        self.products.insert_one(product.to_document())
        return product

    @translate_mongo_errors
    def get(self, product_id) -> Optional[Product]:
        doc = self.products.find_one({'_id': product_id})
        return Product.from_document(doc) if doc else None

    @translate_mongo_errors
    def compare_and_set_status(self, product_id, expected, new):
        result = self.products.update_one(
            {'_id': product_id, 'status': expected.name},
            {'$set': {'status': new.name}}
        )
        return result.modified_count == 1

    @translate_mongo_errors
    def count(self):
        return self.products.count_documents({})

    @translate_mongo_errors
    def list_descending(self, offset, limit):
        cursor = self.products.find({}).sort('_id', pymongo.DESCENDING).skip(offset).limit(limit)
        return [Product.from_document(doc) for doc in cursor]

    @translate_mongo_errors
    def ping(self):
        self.db.client.admin.command('ping')
        return True
