"""
EVM signing identity using web3.py

Defines the ChainAccount capability interface consumed by the pipeline and
a local private key implementation backed by eth_account and web3.
Includes thread-safe nonce management shared by every transaction the
process sends.
"""

from __future__ import annotations

import logging
import os
import threading
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any

from web3 import Web3, HTTPProvider
from web3.middleware import ExtraDataToPOAMiddleware
from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..errors import PermitSwapError, SignerError, TransactionError
from ..types import TxResult

logger = logging.getLogger(__name__)


class ChainAccount(ABC):
    """
    Signing identity and chain access used by the pipeline

    Any backend that can sign EIP-712 data and transactions for one address
    (local key, hardware wallet, remote signer) can implement this.
    """

    @abstractmethod
    def get_address(self) -> str:
        """Checksummed address of the signing key"""
        ...

    @abstractmethod
    def sign_typed_data(self, typed_data: Dict[str, Any]) -> bytes:
        """
        Sign an EIP-712 payload

        Args:
            typed_data: Full typed data (types, domain, primaryType, message)

        Returns:
            Raw signature bytes (65 bytes for secp256k1 r || s || v)
        """
        ...

    @abstractmethod
    def sign_transaction(self, tx_dict: Dict[str, Any]) -> bytes:
        """Sign a transaction and return the raw serialized bytes"""
        ...

    @abstractmethod
    def send_raw_transaction(self, raw_tx: bytes) -> str:
        """Broadcast a raw transaction and return its 0x-prefixed hash"""
        ...

    @abstractmethod
    def get_transaction_count(self, address: str) -> int:
        """Transaction count of the address, i.e. its next nonce"""
        ...

    @abstractmethod
    def wait_for_receipt(self, tx_hash: str, timeout: int = 120) -> Dict[str, Any]:
        """Block until the transaction is included and return its receipt"""
        ...


class NonceManager:
    """
    Thread-safe nonce manager for EVM transactions.

    Prevents nonce collisions when several transactions are sent from the
    same account in one process by:
    1. Keeping track of pending nonces locally
    2. Using a lock to prevent race conditions
    3. Syncing with the chain when needed

    Usage:
        nonce_mgr = NonceManager()
        nonce = nonce_mgr.get_nonce(account)  # Thread-safe
        # ... send transaction ...
        nonce_mgr.confirm_nonce(address, nonce)  # On broadcast
        # or
        nonce_mgr.release_nonce(address, nonce)  # Failed before broadcast
    """

    def __init__(self):
        self._lock = threading.Lock()
        # {address: next_nonce}
        self._pending_nonces: Dict[str, int] = {}
        # {address: set of nonces handed out but not yet confirmed}
        self._in_flight: Dict[str, set] = {}

    def get_nonce(self, account: ChainAccount) -> int:
        """
        Get the next available nonce for an account (thread-safe).

        Reads the on-chain transaction count on every call.

        Args:
            account: Signing identity

        Returns:
            Next nonce to use
        """
        address = account.get_address().lower()

        with self._lock:
            chain_nonce = account.get_transaction_count(account.get_address())
            tracked_nonce = self._pending_nonces.get(address, chain_nonce)

            # Transactions sent outside this manager advance the chain nonce
            next_nonce = max(chain_nonce, tracked_nonce)

            self._pending_nonces[address] = next_nonce + 1
            self._in_flight.setdefault(address, set()).add(next_nonce)

            logger.debug(
                f"NonceManager: address={address[:10]}... "
                f"chain={chain_nonce} tracked={tracked_nonce} assigned={next_nonce}"
            )

            return next_nonce

    def confirm_nonce(self, address: str, nonce: int) -> None:
        """Mark a nonce as used (transaction broadcast)"""
        address = address.lower()

        with self._lock:
            if address in self._in_flight:
                self._in_flight[address].discard(nonce)

    def release_nonce(self, address: str, nonce: int) -> None:
        """
        Release a nonce that was never broadcast so the next transaction
        can reuse it.
        """
        address = address.lower()

        with self._lock:
            if address in self._in_flight:
                self._in_flight[address].discard(nonce)

            current_pending = self._pending_nonces.get(address, 0)
            if nonce == current_pending - 1:
                self._pending_nonces[address] = nonce
                logger.debug(f"NonceManager: released nonce {nonce} for {address[:10]}...")

    def reset(self, address: Optional[str] = None) -> None:
        """
        Reset nonce tracking, forcing re-sync with chain.

        Args:
            address: Address to reset. If None, resets all addresses.
        """
        with self._lock:
            if address:
                address = address.lower()
                self._pending_nonces.pop(address, None)
                self._in_flight.pop(address, None)
            else:
                self._pending_nonces.clear()
                self._in_flight.clear()

    def in_flight(self, address: str) -> set:
        """Nonces handed out and not yet confirmed or released"""
        with self._lock:
            return set(self._in_flight.get(address.lower(), set()))


# Global nonce manager instance (shared across all signers)
_nonce_manager = NonceManager()


def get_nonce_manager() -> NonceManager:
    """Get the global nonce manager instance."""
    return _nonce_manager


def sign_and_send(
    account: ChainAccount,
    tx_dict: Dict[str, Any],
    wait_for_receipt: bool = True,
    timeout: int = 120,
    nonce_manager: Optional[NonceManager] = None,
) -> TxResult:
    """
    Assign a nonce, sign, broadcast and optionally wait for inclusion.

    The nonce is read immediately before signing. A transaction that was
    never broadcast gives its nonce back to the manager.

    Args:
        account: Signing identity
        tx_dict: Transaction fields without nonce
        wait_for_receipt: Block until the transaction is mined
        timeout: Receipt timeout in seconds
        nonce_manager: Nonce allocator (global manager if None)

    Returns:
        TxResult: PENDING when not waiting, SUCCESS or FAILED (reverted)
        once a receipt was observed

    Raises:
        SignerError: Signing failed
        TransactionError: Broadcast rejected, or no receipt within timeout
    """
    manager = nonce_manager or _nonce_manager
    address = account.get_address()

    tx = dict(tx_dict)
    tx.pop("from", None)
    nonce = manager.get_nonce(account)
    tx["nonce"] = nonce

    try:
        raw_tx = account.sign_transaction(tx)
    except PermitSwapError:
        manager.release_nonce(address, nonce)
        raise
    except Exception as e:
        manager.release_nonce(address, nonce)
        raise SignerError.failed(str(e), e) from e

    try:
        tx_hash = account.send_raw_transaction(raw_tx)
    except Exception as e:
        # A rejected broadcast usually means our view of the nonce is stale
        manager.reset(address)
        logger.error(f"Transaction broadcast failed (nonce={nonce}): {e}")
        raise TransactionError.send_failed(str(e), e) from e

    manager.confirm_nonce(address, nonce)
    logger.debug(f"Broadcast {tx_hash} with nonce {nonce}")

    if not wait_for_receipt:
        return TxResult.pending(tx_hash, nonce=nonce)

    try:
        receipt = account.wait_for_receipt(tx_hash, timeout)
    except Exception as e:
        raise TransactionError.confirmation_failed(tx_hash, str(e), e) from e

    block_number = receipt.get("blockNumber")
    gas_used = receipt.get("gasUsed")
    if receipt.get("status") != 1:
        return TxResult.failed(
            "Transaction reverted",
            tx_hash=tx_hash,
            nonce=nonce,
            block_number=block_number,
            gas_used=gas_used,
        )

    return TxResult.success(tx_hash, nonce=nonce, block_number=block_number, gas_used=gas_used)


class EVMSigner(ChainAccount):
    """
    Local EVM signer using web3.py

    Signs with a local private key and talks to the chain through a Web3
    HTTP connection.

    Usage:
        web3 = create_web3("https://mainnet.base.org", chain_id=8453)
        signer = EVMSigner.from_private_key("0x...", web3)

        signature = signer.sign_typed_data(quote.permit2.eip712)
    """

    _FEE_FIELDS = ("gasPrice", "maxFeePerGas", "maxPriorityFeePerGas")

    def __init__(
        self,
        account: "LocalAccount",
        web3: "Web3",
        gas_limit_multiplier: float = 1.2,
    ):
        """
        Initialize with eth_account LocalAccount

        Args:
            account: LocalAccount from eth_account
            web3: Web3 instance connected to the chain RPC
            gas_limit_multiplier: Buffer applied to node gas estimates
        """
        self._account = account
        self._web3 = web3
        self._gas_limit_multiplier = gas_limit_multiplier

    @property
    def address(self) -> str:
        """Get wallet address (checksummed)"""
        return self._account.address

    @property
    def web3(self) -> "Web3":
        return self._web3

    def get_address(self) -> str:
        return self._account.address

    def sign_typed_data(self, typed_data: Dict[str, Any]) -> bytes:
        signed = self._account.sign_typed_data(full_message=typed_data)
        return bytes(signed.signature)

    def sign_transaction(self, tx_dict: Dict[str, Any]) -> bytes:
        """
        Sign a transaction, completing fields the caller left out

        chainId, gas and gasPrice are taken from the node when absent.

        Args:
            tx_dict: Transaction dictionary with to, data, value, nonce

        Returns:
            Raw signed transaction bytes
        """
        tx = {key: value for key, value in tx_dict.items() if value is not None}

        if "chainId" not in tx:
            tx["chainId"] = self._web3.eth.chain_id

        if "gas" not in tx:
            estimate_params = {
                "from": self.address,
                "to": tx["to"],
                "data": Web3.to_hex(tx.get("data", b"")),
                "value": tx.get("value", 0),
            }
            estimated = self._web3.eth.estimate_gas(estimate_params)
            tx["gas"] = int(estimated * self._gas_limit_multiplier)

        if not any(fee in tx for fee in self._FEE_FIELDS):
            tx["gasPrice"] = self._web3.eth.gas_price

        signed = self._account.sign_transaction(tx)
        return bytes(signed.raw_transaction)

    def send_raw_transaction(self, raw_tx: bytes) -> str:
        tx_hash = self._web3.eth.send_raw_transaction(raw_tx)
        return Web3.to_hex(tx_hash)

    def get_transaction_count(self, address: str) -> int:
        # "pending" counts mempool transactions from this account
        return self._web3.eth.get_transaction_count(Web3.to_checksum_address(address), "pending")

    def wait_for_receipt(self, tx_hash: str, timeout: int = 120) -> Dict[str, Any]:
        receipt = self._web3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
        return dict(receipt)

    @classmethod
    def from_private_key(
        cls,
        private_key: str,
        web3: "Web3",
        gas_limit_multiplier: float = 1.2,
    ) -> "EVMSigner":
        """
        Create signer from private key

        Args:
            private_key: Hex-encoded private key (with or without 0x prefix)
            web3: Web3 instance
            gas_limit_multiplier: Buffer applied to node gas estimates

        Returns:
            EVMSigner instance
        """
        if not private_key.startswith("0x"):
            private_key = "0x" + private_key

        try:
            account = Account.from_key(private_key)
        except Exception as e:
            # eth_keys raises its own ValidationError for wrong key lengths
            raise SignerError.failed("invalid private key", e) from e
        return cls(account, web3, gas_limit_multiplier)

    @classmethod
    def from_env(cls, web3: "Web3", env_var: str = "EVM_PRIVATE_KEY") -> "EVMSigner":
        """
        Create signer from environment variable

        Raises:
            SignerError: If environment variable is not set
        """
        private_key = os.getenv(env_var, "")
        if not private_key:
            raise SignerError.not_configured()

        return cls.from_private_key(private_key, web3)

    def __repr__(self) -> str:
        return f"EVMSigner(address={self.address})"


def create_web3(
    rpc_url: str,
    chain_id: Optional[int] = None,
    timeout: int = 30,
) -> "Web3":
    """
    Create Web3 instance for a chain

    Args:
        rpc_url: RPC endpoint URL
        chain_id: Chain ID. If None, will detect from RPC.
        timeout: Request timeout in seconds

    Returns:
        Configured Web3 instance
    """
    provider = HTTPProvider(
        rpc_url,
        request_kwargs={"timeout": timeout},
    )

    web3 = Web3(provider)

    if chain_id is None:
        chain_id = web3.eth.chain_id

    # Proof-of-authority chains put extra data in block headers
    if chain_id in (56, 97):
        web3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)

    return web3


def create_evm_signer(
    private_key: str,
    rpc_url: str,
    chain_id: Optional[int] = None,
    rpc_timeout: int = 30,
    gas_limit_multiplier: float = 1.2,
) -> EVMSigner:
    """
    Create an EVM signer connected to an RPC endpoint

    Raises:
        SignerError: If no private key is given
    """
    if not private_key:
        raise SignerError.not_configured()

    web3 = create_web3(rpc_url, chain_id, timeout=rpc_timeout)
    return EVMSigner.from_private_key(private_key, web3, gas_limit_multiplier)
