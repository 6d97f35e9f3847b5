"""
Registry Services Module
State machine, stores and lookups for the product lifecycle
"""

from .state_machine import RegistryStateMachine
from .store import ProductStore, InMemoryProductStore
from .lookup_service import LookupService

__all__ = [
    'RegistryStateMachine',
    'ProductStore',
    'InMemoryProductStore',
    'LookupService'
]
