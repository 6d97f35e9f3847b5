"""
Ledger Services Module
"""

from .ledger_client import LedgerClient
from .pending import PendingTransition

__all__ = [
    'LedgerClient',
    'PendingTransition'
]
