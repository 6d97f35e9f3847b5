# services/ledger/ledger_client.py
"""
Ledger Client
Request/response access to the registry with confirmation semantics: guards are
checked up front, accepted transitions run on a worker pool and come back as
PendingTransition handles
"""

import logging
import threading
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List

from product_registry.core.exceptions import NotFound, RegistryError
from product_registry.models.enums import TransitionType
from product_registry.models.product import Caller, Product
from product_registry.services.ledger.pending import PendingTransition
from product_registry.services.registry.lookup_service import LookupService
from product_registry.validators.product_validator import ProductValidator

logger = logging.getLogger(__name__)


class LedgerClient:
    """
    Submits create/verify/finalize to a registry backend

    The backend is either a RegistryStateMachine or a ContractRegistry; both
    expose check_guard/create/verify/finalize and the read methods used by
    LookupService. Connection failures are not retried here.
    """

    def __init__(self, backend, max_workers: int = 4, handle_limit: int = 1000,
                 max_page_size: int = 100):
        self.backend = backend
        self.lookup = LookupService(backend, max_page_size=max_page_size)
        self.handle_limit = handle_limit
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='ledger')
        self._handles: "OrderedDict[str, PendingTransition]" = OrderedDict()
        self._handles_lock = threading.Lock()

    # Submission

    def create(self, batch_id: str, certification: str, origin: str, timestamp: int,
               caller: Caller) -> PendingTransition:
        ProductValidator.require_product_data({
            'batch_id': batch_id,
            'certification': certification,
            'origin': origin,
            'timestamp': timestamp
        })
        self.backend.check_guard(TransitionType.CREATE, caller)
        return self._submit(
            TransitionType.CREATE, None,
            self.backend.create, batch_id, certification, origin, timestamp, caller
        )

    def verify(self, product_id, caller: Caller) -> PendingTransition:
        product_id = ProductValidator.parse_product_id(product_id)
        self.backend.check_guard(TransitionType.VERIFY, caller, product_id)
        return self._submit(TransitionType.VERIFY, product_id, self.backend.verify, product_id, caller)

    def finalize(self, product_id, caller: Caller) -> PendingTransition:
        product_id = ProductValidator.parse_product_id(product_id)
        self.backend.check_guard(TransitionType.FINALIZE, caller, product_id)
        return self._submit(TransitionType.FINALIZE, product_id, self.backend.finalize, product_id, caller)

    def _submit(self, transition, product_id, fn, *args) -> PendingTransition:
        future = self._executor.submit(self._run, transition, product_id, fn, *args)
        pending = PendingTransition(transition, future, product_id=product_id)
        self._track(pending)
        logger.debug(f"Submitted {transition.value} for product {product_id} as {pending.handle_id}")
        return pending

    @staticmethod
    def _run(transition, product_id, fn, *args):
        try:
            return fn(*args)
        except RegistryError as e:
            logger.warning(f"{transition.value} for product {product_id} failed: {e}")
            raise
        except Exception:
            logger.exception(f"{transition.value} for product {product_id} crashed")
            raise

    # Handles

    def _track(self, pending: PendingTransition) -> None:
        with self._handles_lock:
            self._handles[pending.handle_id] = pending
            # forget the oldest resolved handles first
            if len(self._handles) > self.handle_limit:
                for handle_id in [h for h, p in self._handles.items() if p.done()]:
                    if len(self._handles) <= self.handle_limit:
                        break
                    del self._handles[handle_id]

    def get_handle(self, handle_id: str) -> PendingTransition:
        with self._handles_lock:
            pending = self._handles.get(handle_id)
        if pending is None:
            raise NotFound(f"Transition {handle_id} is unknown or expired")
        return pending

    # Reads

    def get(self, product_id) -> Product:
        return self.lookup.get(product_id)

    def list(self, offset: int = 0, limit: int = 20) -> List[Product]:
        return self.lookup.list(offset, limit)

    def count(self) -> int:
        return self.lookup.count()

    def page(self, offset: int = 0, limit: int = 20) -> Dict[str, Any]:
        return self.lookup.page(offset, limit)

    def health(self) -> Dict[str, Any]:
        return self.backend.health()

    def close(self, wait: bool = True) -> None:
        """Stop accepting work; submitted transitions still run to completion"""
        self._executor.shutdown(wait=wait)
