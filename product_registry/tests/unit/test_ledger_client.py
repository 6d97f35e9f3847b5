# tests/unit/test_ledger_client.py
import threading
from concurrent.futures import Future

import pytest

from product_registry.core.exceptions import (
    ConfirmationTimeout, InvalidTransition, LedgerConnectionError, NotFound,
    Unauthorized, ValidationError
)
from product_registry.models.enums import HandleState, ProductStatus, TransitionType
from product_registry.models.product import Caller
from product_registry.services.ledger.ledger_client import LedgerClient
from product_registry.services.ledger.pending import PendingTransition
from product_registry.services.registry.state_machine import RegistryStateMachine
from product_registry.services.registry.store import InMemoryProductStore


class BlockingStore(InMemoryProductStore):
    """Holds every insert until released"""

    def __init__(self):
        super().__init__()
        self.release = threading.Event()

    def insert_next(self, *args, **kwargs):
        self.release.wait(timeout=5)
        return super().insert_next(*args, **kwargs)


class UnreachableStore(InMemoryProductStore):
    def insert_next(self, *args, **kwargs):
        raise LedgerConnectionError("Database unreachable")


def test_create_resolves_to_new_id(ledger, manufacturer):
    pending = ledger.create("B789", "Organic", "Farm X", 1700000000, manufacturer)

    assert pending.transition is TransitionType.CREATE
    assert pending.result(timeout=5) == 1
    assert pending.state is HandleState.CONFIRMED

    product = ledger.get(1)
    assert product.batch_id == "B789"
    assert product.status is ProductStatus.CREATED


def test_scenarios_end_to_end(ledger, manufacturer, distributor, retailer):
    product_id = ledger.create("B789", "Organic", "Farm X", 1700000000, manufacturer).result(timeout=5)

    with pytest.raises(Unauthorized):
        ledger.verify(product_id, retailer)

    assert ledger.verify(product_id, distributor).result(timeout=5) is ProductStatus.VERIFIED

    with pytest.raises(InvalidTransition):
        ledger.verify(product_id, distributor)

    assert ledger.finalize(product_id, retailer).result(timeout=5) is ProductStatus.FINALIZED
    assert ledger.get(product_id).status is ProductStatus.FINALIZED

    with pytest.raises(NotFound):
        ledger.get(999)


def test_precondition_errors_raise_without_pending_phase(ledger, manufacturer, distributor):
    with pytest.raises(ValidationError):
        ledger.create("", "Organic", "Farm X", 1, manufacturer)
    with pytest.raises(Unauthorized):
        ledger.create("B1", "Organic", "Farm X", 1, distributor)
    with pytest.raises(NotFound):
        ledger.verify(7, distributor)
    with pytest.raises(ValidationError):
        ledger.verify("seven", distributor)

    assert ledger.count() == 0


def test_abandoned_wait_does_not_cancel_transition(manufacturer):
    store = BlockingStore()
    ledger = LedgerClient(RegistryStateMachine(store), max_workers=2)
    try:
        pending = ledger.create("B1", "c", "o", 1, manufacturer)

        with pytest.raises(ConfirmationTimeout):
            pending.result(timeout=0.05)
        assert pending.state is HandleState.PENDING
        assert pending.to_dict()['state'] == 'pending'

        store.release.set()
        assert pending.result(timeout=5) == 1
        assert ledger.get(1).owner == manufacturer.identity
    finally:
        store.release.set()
        ledger.close()


def test_pending_create_does_not_block_other_products(manufacturer, distributor):
    store = BlockingStore()
    registry = RegistryStateMachine(store)
    store.release.set()
    existing = registry.create("B0", "c", "o", 0, manufacturer)
    store.release.clear()

    ledger = LedgerClient(registry, max_workers=2)
    try:
        blocked = ledger.create("B1", "c", "o", 1, manufacturer)
        verified = ledger.verify(existing, distributor)

        assert verified.result(timeout=5) is ProductStatus.VERIFIED
        assert not blocked.done()
    finally:
        store.release.set()
        ledger.close()


def test_connection_errors_surface_through_handle(manufacturer):
    ledger = LedgerClient(RegistryStateMachine(UnreachableStore()), max_workers=1)
    try:
        pending = ledger.create("B1", "c", "o", 1, manufacturer)

        with pytest.raises(LedgerConnectionError):
            pending.result(timeout=5)
        assert pending.state is HandleState.FAILED
        assert pending.to_dict()['error'] == 'connection_error'
        # builtin ConnectionError so callers can catch it generically
        assert isinstance(pending.exception(), ConnectionError)
    finally:
        ledger.close()


def test_race_on_same_product_fails_one_handle(ledger, manufacturer):
    product_id = ledger.create("B1", "c", "o", 1, manufacturer).result(timeout=5)

    handles = []
    rejected = 0
    for n in range(5):
        try:
            handles.append(ledger.verify(product_id, Caller(identity=f"d{n}", role="distributor")))
        except InvalidTransition:
            rejected += 1

    confirmed = 0
    for pending in handles:
        try:
            pending.result(timeout=5)
            confirmed += 1
        except InvalidTransition:
            rejected += 1

    assert confirmed == 1
    assert rejected == 4


def test_handles_can_be_polled_and_expire(manufacturer, registry):
    ledger = LedgerClient(registry, max_workers=1, handle_limit=3)
    try:
        handles = [ledger.create(f"B{n}", "c", "o", n, manufacturer) for n in range(5)]
        for pending in handles:
            pending.result(timeout=5)
        # one more submission triggers pruning of resolved handles
        last = ledger.create("B5", "c", "o", 5, manufacturer)
        last.result(timeout=5)

        assert ledger.get_handle(last.handle_id) is last
        with pytest.raises(NotFound):
            ledger.get_handle(handles[0].handle_id)
        with pytest.raises(NotFound):
            ledger.get_handle("missing")
    finally:
        ledger.close()


def test_to_dict_reports_outcome(ledger, manufacturer, distributor):
    created = ledger.create("B1", "c", "o", 1, manufacturer)
    created.result(timeout=5)
    assert created.to_dict()['product_id'] == 1
    assert created.to_dict()['state'] == 'confirmed'

    verified = ledger.verify(1, distributor)
    verified.result(timeout=5)
    data = verified.to_dict()
    assert data['transition'] == 'verify'
    assert data['status'] == 'Verified'


class ResolvingFuture(Future):
    """Reports pending on the first done() check and is resolved from then on"""

    def __init__(self, value):
        super().__init__()
        self._value = value
        self._checked = False

    def done(self):
        if not self._checked:
            self._checked = True
            return False
        if not super().done():
            self.set_result(self._value)
        return True


def test_to_dict_is_consistent_when_resolving_mid_call():
    pending = PendingTransition(TransitionType.CREATE, ResolvingFuture(9))

    data = pending.to_dict()

    assert data['state'] == 'pending'
    assert data['product_id'] is None
    assert pending.to_dict()['product_id'] == 9
