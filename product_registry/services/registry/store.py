# services/registry/store.py
"""
Product stores
Storage seam for the registry state machine; only the state machine writes through it
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from product_registry.models.enums import ProductStatus
from product_registry.models.product import Product
from product_registry.utils.pagination_utils import descending_id_window

logger = logging.getLogger(__name__)


class ProductStore(ABC):
    """id -> Product mapping with atomic id allocation and status compare-and-set"""

    @abstractmethod
    def insert_next(self, batch_id: str, certification: str, origin: str,
                    created_at: int, owner: str) -> Product:
        """Allocate the next sequential id and store a Created product under it"""

    @abstractmethod
    def get(self, product_id: int) -> Optional[Product]:
        """Return the product or None when no record exists"""

    @abstractmethod
    def compare_and_set_status(self, product_id: int, expected: ProductStatus,
                               new: ProductStatus) -> bool:
        """Set status to new only if it currently equals expected"""

    @abstractmethod
    def count(self) -> int:
        pass

    def list_descending(self, offset: int, limit: int) -> List[Product]:
        """Products newest first; ids are sequential so the window is computed from count()"""
        products = []
        for product_id in descending_id_window(self.count(), offset, limit):
            product = self.get(product_id)
            if product is not None:
                products.append(product)
        return products

    def ping(self) -> bool:
        return True


class InMemoryProductStore(ProductStore):
    """Process-local store used for development and tests"""

    def __init__(self):
        self._products: Dict[int, Product] = {}
        self._last_id = 0
        self._lock = threading.Lock()

    def insert_next(self, batch_id, certification, origin, created_at, owner):
        with self._lock:
            self._last_id += 1
            product = Product(
                id=self._last_id,
                batch_id=batch_id,
                certification=certification,
                origin=origin,
                created_at=created_at,
                owner=owner,
                status=ProductStatus.CREATED
            )
            self._products[product.id] = product
        return product

    def get(self, product_id):
        with self._lock:
            return self._products.get(product_id)

    def compare_and_set_status(self, product_id, expected, new):
        with self._lock:
            current = self._products.get(product_id)
            if current is None or current.status != expected:
                return False
            self._products[product_id] = current.with_status(new)
            return True

    def count(self):
        with self._lock:
            return self._last_id
