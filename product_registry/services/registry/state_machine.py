# services/registry/state_machine.py
"""
Registry State Machine
Owns the product lifecycle: Created -> Verified -> Finalized, each step guarded by a role
"""

import logging
import threading
from collections import namedtuple
from contextlib import contextmanager
from typing import Callable, Dict, List, Optional

from product_registry.core.exceptions import InvalidTransition, NotFound, Unauthorized
from product_registry.models.enums import ProductStatus, Role, TransitionType
from product_registry.models.product import Caller, Product, TransitionEvent
from product_registry.services.registry.store import ProductStore
from product_registry.validators.product_validator import ProductValidator

logger = logging.getLogger(__name__)

Guard = namedtuple('Guard', ['role', 'source', 'target'])

TRANSITIONS: Dict[TransitionType, Guard] = {
    TransitionType.CREATE: Guard(Role.MANUFACTURER, None, ProductStatus.CREATED),
    TransitionType.VERIFY: Guard(Role.DISTRIBUTOR, ProductStatus.CREATED, ProductStatus.VERIFIED),
    TransitionType.FINALIZE: Guard(Role.RETAILER, ProductStatus.VERIFIED, ProductStatus.FINALIZED),
}


def check_role(transition: TransitionType, caller: Caller) -> Guard:
    """Raise Unauthorized unless caller holds the role the transition requires"""
    guard = TRANSITIONS[transition]
    if caller is None or caller.registry_role != guard.role:
        role = caller.role if caller is not None else None
        raise Unauthorized(
            f"{transition.value} requires role '{guard.role.value}', caller has '{role}'"
        )
    return guard


def check_status(transition: TransitionType, product: Product) -> Guard:
    """Raise InvalidTransition unless product sits in the transition's source status"""
    guard = TRANSITIONS[transition]
    if product.status != guard.source:
        raise InvalidTransition(
            f"Cannot {transition.value} product {product.id}: status is "
            f"{product.status.label}, expected {guard.source.label}"
        )
    return guard


class KeyedLocks:
    """One lock per key, kept only while some caller holds or waits on it"""

    def __init__(self):
        self._locks: Dict[int, list] = {}
        self._guard = threading.Lock()

    def __len__(self):
        with self._guard:
            return len(self._locks)

    @contextmanager
    def __call__(self, key):
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                # [lock, number of holders and waiters]
                entry = self._locks[key] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if not entry[1]:
                    del self._locks[key]


class RegistryStateMachine:
    """
    Authoritative product registry

    Transitions on the same product are serialized; transitions on different
    products never wait on each other.
    """

    def __init__(self, store: ProductStore):
        self.store = store
        self._product_locks = KeyedLocks()
        self._listeners: List[Callable[[TransitionEvent], None]] = []

    def subscribe(self, listener: Callable[[TransitionEvent], None]) -> None:
        """Register a callback invoked after every committed transition"""
        self._listeners.append(listener)

    def _publish(self, event: TransitionEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Transition listener failed for product {event.product_id}")

    # Guards

    def check_guard(self, transition: TransitionType, caller: Caller,
                    product_id: Optional[int] = None) -> None:
        """
        Evaluate a transition's guard against the current state without applying it

        Raises:
            ValidationError, Unauthorized, NotFound, InvalidTransition
        """
        if product_id is not None:
            product_id = ProductValidator.parse_product_id(product_id)
        check_role(transition, caller)
        if transition is not TransitionType.CREATE:
            check_status(transition, self.get(product_id))

    # Transitions

    def create(self, batch_id: str, certification: str, origin: str, timestamp: int,
               caller: Caller) -> int:
        """Mint a new product in Created status and return its id"""
        ProductValidator.require_product_data({
            'batch_id': batch_id,
            'certification': certification,
            'origin': origin,
            'timestamp': timestamp
        })
        check_role(TransitionType.CREATE, caller)

        product = self.store.insert_next(
            batch_id=batch_id,
            certification=certification,
            origin=origin,
            created_at=timestamp,
            owner=caller.identity
        )
        logger.info(f"Product {product.id} created by {caller.identity} (batch {batch_id})")
        self._publish(TransitionEvent(
            product_id=product.id,
            transition=TransitionType.CREATE,
            previous_status=None,
            status=product.status,
            caller=caller
        ))
        return product.id

    def verify(self, product_id: int, caller: Caller) -> ProductStatus:
        return self._advance(TransitionType.VERIFY, product_id, caller)

    def finalize(self, product_id: int, caller: Caller) -> ProductStatus:
        return self._advance(TransitionType.FINALIZE, product_id, caller)

    def _advance(self, transition: TransitionType, product_id, caller: Caller) -> ProductStatus:
        product_id = ProductValidator.parse_product_id(product_id)
        guard = check_role(transition, caller)
        # unknown ids never get a lock entry
        self.get(product_id)

        with self._product_locks(product_id):
            product = self.get(product_id)
            try:
                check_status(transition, product)
            except InvalidTransition as e:
                logger.warning(str(e))
                raise

            if not self.store.compare_and_set_status(product_id, guard.source, guard.target):
                # Another writer outside this process moved the product first
                current = self.get(product_id)
                raise InvalidTransition(
                    f"Cannot {transition.value} product {product_id}: status changed to "
                    f"{current.status.label}"
                )

        logger.info(
            f"Product {product_id} {guard.source.label} -> {guard.target.label} by {caller.identity}"
        )
        self._publish(TransitionEvent(
            product_id=product_id,
            transition=transition,
            previous_status=guard.source,
            status=guard.target,
            caller=caller
        ))
        return guard.target

    # Reads

    def get(self, product_id) -> Product:
        product_id = ProductValidator.parse_product_id(product_id)
        product = self.store.get(product_id)
        if product is None:
            raise NotFound(f"Product {product_id} does not exist")
        return product

    def count(self) -> int:
        return self.store.count()

    def list_descending(self, offset: int, limit: int) -> List[Product]:
        return self.store.list_descending(offset, limit)

    def health(self) -> Dict:
        return {'backend': type(self.store).__name__, 'connected': self.store.ping()}
