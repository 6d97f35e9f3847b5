# extensions.py
"""
Registry wiring
Builds the configured backend and the services the routes reach through app.extensions['registry']
"""
import atexit
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Mapping

from product_registry.models.enums import RegistryBackend
from product_registry.services.auth.token_service import TokenService
from product_registry.services.ledger.ledger_client import LedgerClient

logger = logging.getLogger(__name__)


@dataclass
class Registry:
    backend: Any
    ledger: LedgerClient
    tokens: TokenService


def build_backend(config: Mapping[str, Any]):
    """Create the registry backend named by REGISTRY_BACKEND"""
    try:
        kind = RegistryBackend(config.get('REGISTRY_BACKEND', 'memory'))
    except ValueError:
        raise ValueError(f"Unknown REGISTRY_BACKEND: {config.get('REGISTRY_BACKEND')}")

    if kind is RegistryBackend.CONTRACT:
        from product_registry.services.blockchain_service import ContractRegistry
        backend = ContractRegistry(
            rpc_url=config.get('BLOCKCHAIN_RPC_URL'),
            contract_address=config.get('CONTRACT_ADDRESS'),
            private_key=config.get('PRIVATE_KEY'),
            chain_id=config.get('CHAIN_ID', 11155111),
            confirmation_timeout=config.get('CONFIRMATION_TIMEOUT_SECONDS', 120),
            abi_path=config.get('CONTRACT_ABI_PATH')
        )
        logger.info(f"Registry backend: contract {backend.contract_address}")
        return backend

    from product_registry.services.registry.state_machine import RegistryStateMachine

    if kind is RegistryBackend.MONGO:
        from product_registry.config.database import close_db_connection, get_db_connection
        from product_registry.services.registry.mongo_store import MongoProductStore
        store = MongoProductStore(get_db_connection(
            config.get('MONGODB_URI'), config.get('DATABASE_NAME', 'product_registry')
        ))
        store.init_indexes()
        atexit.register(close_db_connection)
    else:
        from product_registry.services.registry.store import InMemoryProductStore
        store = InMemoryProductStore()

    logger.info(f"Registry backend: {type(store).__name__}")
    return RegistryStateMachine(store)


def build_registry(config: Mapping[str, Any], backend=None) -> Registry:
    backend = backend if backend is not None else build_backend(config)
    ledger = LedgerClient(
        backend,
        max_workers=config.get('LEDGER_MAX_WORKERS', 4),
        handle_limit=config.get('PENDING_HANDLE_LIMIT', 1000),
        max_page_size=config.get('MAX_PAGE_SIZE', 100)
    )
    tokens = TokenService(
        config.get('JWT_SECRET_KEY'),
        token_expiry=config.get('JWT_ACCESS_TOKEN_EXPIRES') or timedelta(hours=24)
    )
    return Registry(backend=backend, ledger=ledger, tokens=tokens)
