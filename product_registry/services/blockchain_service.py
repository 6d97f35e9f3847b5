#services/blockchain_service
"""
Contract-backed registry
Drives the ProductNFT contract (mintNFT / verifyProduct / finalizeProduct) with a
service account; role guards are checked before anything is submitted
"""
import json
import logging
import threading
from typing import Any, Dict, List, Optional

import requests
from eth_account import Account
from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted

from product_registry.core.exceptions import (
    ConfirmationTimeout, InvalidTransition, LedgerConnectionError, NotFound
)
from product_registry.models.enums import ProductStatus, TransitionType
from product_registry.models.product import Caller, Product
from product_registry.services.registry.state_machine import check_role, check_status
from product_registry.utils.pagination_utils import descending_id_window
from product_registry.validators.product_validator import ProductValidator

logger = logging.getLogger(__name__)

PRODUCT_NOT_FOUND_REVERT = 'Product does not exist'
DEFAULT_GAS_LIMIT = 300000

PRODUCT_NFT_ABI = json.loads('''[
    {
        "inputs": [
            {"name": "batchId", "type": "string"},
            {"name": "certification", "type": "string"},
            {"name": "origin", "type": "string"},
            {"name": "timestamp", "type": "uint256"}
        ],
        "name": "mintNFT",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "name": "verifyProduct",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "name": "finalizeProduct",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function"
    },
    {
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "name": "getProductById",
        "outputs": [
            {"name": "batchId", "type": "string"},
            {"name": "certification", "type": "string"},
            {"name": "origin", "type": "string"},
            {"name": "timestamp", "type": "uint256"},
            {"name": "owner", "type": "address"},
            {"name": "status", "type": "uint8"}
        ],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "inputs": [],
        "name": "productCount",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function"
    },
    {
        "anonymous": false,
        "inputs": [
            {"indexed": true, "name": "tokenId", "type": "uint256"},
            {"indexed": false, "name": "owner", "type": "address"}
        ],
        "name": "ProductMinted",
        "type": "event"
    }
]''')

NETWORK_NAMES = {
    1: 'Ethereum Mainnet',
    11155111: 'Sepolia Testnet',
    137: 'Polygon Mainnet',
    80002: 'Polygon Amoy',
    31337: 'Hardhat Local'
}


def load_contract_abi(path: Optional[str]) -> List[Dict[str, Any]]:
    """Load an ABI from a plain list or a compiled artifact with an 'abi' key"""
    if not path:
        return PRODUCT_NFT_ABI

    with open(path, "r", encoding="utf-8") as f:
        abi_data = json.load(f)

    if isinstance(abi_data, list):
        return abi_data
    if isinstance(abi_data, dict) and 'abi' in abi_data:
        return abi_data['abi']
    raise ValueError("Unknown ABI format")


class ContractRegistry:
    """Registry backend living in the ProductNFT contract"""

    def __init__(self, rpc_url=None, contract_address=None, private_key=None,
                 chain_id=11155111, confirmation_timeout=120, abi_path=None,
                 web3=None, contract=None):
        self.rpc_url = rpc_url
        self.contract_address = contract_address
        self.private_key = private_key
        self.chain_id = int(chain_id)
        self.confirmation_timeout = confirmation_timeout

        self.web3 = web3
        self.contract = contract
        self.account = Account.from_key(private_key) if private_key else None
        self._send_lock = threading.Lock()

        if self.web3 is None and self.rpc_url:
            self.web3 = Web3(Web3.HTTPProvider(self.rpc_url))
        if self.contract is None and self.web3 is not None and self.contract_address:
            self.contract = self.web3.eth.contract(
                address=Web3.to_checksum_address(self.contract_address),
                abi=load_contract_abi(abi_path)
            )

        if self.web3 is None:
            logger.warning("BLOCKCHAIN_RPC_URL not configured")
        elif self.contract is None:
            logger.warning("CONTRACT_ADDRESS not configured")

    # Connection

    def is_connected(self) -> bool:
        try:
            return self.web3 is not None and self.contract is not None and self.web3.is_connected()
        except requests.exceptions.RequestException:
            return False

    def _ensure_connected(self):
        if not self.is_connected():
            raise LedgerConnectionError("Blockchain not connected")

    def _ensure_account(self):
        self._ensure_connected()
        if self.account is None:
            raise LedgerConnectionError("Blockchain account not configured")

    def _get_network_name(self):
        """Get human-readable network name"""
        return NETWORK_NAMES.get(self.chain_id, f'Unknown Network (Chain ID: {self.chain_id})')

    def health(self) -> Dict[str, Any]:
        info = {
            'backend': type(self).__name__,
            'connected': self.is_connected(),
            'chain_id': self.chain_id,
            'network_name': self._get_network_name(),
            'contract_address': self.contract_address
        }
        if info['connected']:
            try:
                info['latest_block'] = self.web3.eth.get_block('latest').number
            except requests.exceptions.RequestException as e:
                logger.error(f"Error getting latest block: {e}")
                info['connected'] = False
        return info

    # Errors

    @staticmethod
    def _translate_revert(error: ContractLogicError, product_id=None):
        message = str(error)
        if PRODUCT_NOT_FOUND_REVERT in message:
            return NotFound(f"Product {product_id} does not exist")
        return InvalidTransition(f"Contract rejected transition: {message}")

    # Transactions

    def _transact(self, function_call, product_id=None):
        """Sign, send and wait for a contract transaction; returns the receipt"""
        self._ensure_account()

        try:
            # nonce allocation must not interleave between concurrent senders
            with self._send_lock:
                transaction = function_call.build_transaction({
                    'from': self.account.address,
                    'gas': DEFAULT_GAS_LIMIT,
                    'gasPrice': self.web3.eth.gas_price,
                    'nonce': self.web3.eth.get_transaction_count(self.account.address, 'pending'),
                    'chainId': self.chain_id
                })
                signed_txn = self.web3.eth.account.sign_transaction(transaction, self.private_key)
                tx_hash = self.web3.eth.send_raw_transaction(signed_txn.raw_transaction)
        except ContractLogicError as e:
            raise self._translate_revert(e, product_id) from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Blockchain submission failed: {e}")
            raise LedgerConnectionError(f"Failed to submit transaction: {e}") from e

        try:
            receipt = self.web3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.confirmation_timeout
            )
        except TimeExhausted as e:
            raise ConfirmationTimeout(
                f"Transaction {tx_hash.hex()} not confirmed after {self.confirmation_timeout}s"
            ) from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Lost connection while awaiting {tx_hash.hex()}: {e}")
            raise LedgerConnectionError(f"Lost connection awaiting confirmation: {e}") from e

        if receipt.status != 1:
            raise InvalidTransition(f"Transaction {tx_hash.hex()} reverted")

        logger.info(f"Transaction {tx_hash.hex()} confirmed in block {receipt.blockNumber}")
        return receipt

    def check_guard(self, transition: TransitionType, caller: Caller, product_id=None) -> None:
        if product_id is not None:
            product_id = ProductValidator.parse_product_id(product_id)
        check_role(transition, caller)
        if transition is not TransitionType.CREATE:
            check_status(transition, self.get(product_id))

    def create(self, batch_id: str, certification: str, origin: str, timestamp: int,
               caller: Caller) -> int:
        ProductValidator.require_product_data({
            'batch_id': batch_id,
            'certification': certification,
            'origin': origin,
            'timestamp': timestamp
        })
        check_role(TransitionType.CREATE, caller)
        self._ensure_account()

        receipt = self._transact(
            self.contract.functions.mintNFT(batch_id, certification, origin, timestamp)
        )
        events = self.contract.events.ProductMinted().process_receipt(receipt)
        if not events:
            raise InvalidTransition("Mint confirmed without a ProductMinted event")

        product_id = int(events[0]['args']['tokenId'])
        # on-chain owner is the signing account; the creator is only recorded here
        logger.info(
            f"Product {product_id} minted for {caller.identity} by {self.account.address} "
            f"(batch {batch_id}, tx {receipt.transactionHash.hex()})"
        )
        return product_id

    def verify(self, product_id, caller: Caller) -> ProductStatus:
        return self._advance(TransitionType.VERIFY, product_id, caller)

    def finalize(self, product_id, caller: Caller) -> ProductStatus:
        return self._advance(TransitionType.FINALIZE, product_id, caller)

    def _advance(self, transition, product_id, caller):
        product_id = ProductValidator.parse_product_id(product_id)
        check_role(transition, caller)
        guard = check_status(transition, self.get(product_id))

        if transition is TransitionType.VERIFY:
            function_call = self.contract.functions.verifyProduct(product_id)
        else:
            function_call = self.contract.functions.finalizeProduct(product_id)

        self._transact(function_call, product_id)
        logger.info(f"Product {product_id} {guard.source.label} -> {guard.target.label} on-chain")
        return guard.target

    # Reads

    def get(self, product_id) -> Product:
        product_id = ProductValidator.parse_product_id(product_id)
        self._ensure_connected()

        try:
            result = self.contract.functions.getProductById(product_id).call()
        except ContractLogicError as e:
            raise self._translate_revert(e, product_id) from e
        except requests.exceptions.RequestException as e:
            raise LedgerConnectionError(f"Failed to read product {product_id}: {e}") from e

        batch_id, certification, origin, timestamp, owner, status = result
        # unset slots read back as zero values
        if not batch_id:
            raise NotFound(f"Product {product_id} does not exist")

        return Product(
            id=product_id,
            batch_id=batch_id,
            certification=certification,
            origin=origin,
            created_at=int(timestamp),
            owner=owner,
            status=ProductStatus(int(status))
        )

    def count(self) -> int:
        self._ensure_connected()
        try:
            return int(self.contract.functions.productCount().call())
        except requests.exceptions.RequestException as e:
            raise LedgerConnectionError(f"Failed to read product count: {e}") from e

    def list_descending(self, offset: int, limit: int) -> List[Product]:
        return [self.get(product_id) for product_id in descending_id_window(self.count(), offset, limit)]
