# services/registry/lookup_service.py
"""
Lookup/Query Service
Read-only access to the registry: point lookups, count and newest-first pagination
"""

import logging
from typing import Any, Dict, List

from product_registry.models.product import Product
from product_registry.utils.pagination_utils import (
    create_pagination_metadata, validate_pagination_params
)
from product_registry.validators.product_validator import ProductValidator

logger = logging.getLogger(__name__)


class LookupService:

    def __init__(self, reader, max_page_size: int = 100):
        """
        Args:
            reader: anything with get(id), count() and list_descending(offset, limit)
            max_page_size: upper bound applied to limit
        """
        self.reader = reader
        self.max_page_size = max_page_size

    def get(self, product_id) -> Product:
        return self.reader.get(ProductValidator.parse_product_id(product_id))

    def count(self) -> int:
        return self.reader.count()

    def list(self, offset: Any = 0, limit: Any = 20) -> List[Product]:
        """Products ordered by id descending"""
        params = validate_pagination_params(offset, limit, self.max_page_size)
        return self.reader.list_descending(params['offset'], params['limit'])

    def page(self, offset: Any = 0, limit: Any = 20) -> Dict[str, Any]:
        params = validate_pagination_params(offset, limit, self.max_page_size)
        total = self.reader.count()
        products = self.reader.list_descending(params['offset'], params['limit'])

        return {
            'products': [product.to_dict() for product in products],
            'pagination': create_pagination_metadata(total, params['offset'], params['limit'])
        }
