"""
Settlement Module

Signs and broadcasts the bound swap transaction.
"""

import logging
from typing import Any, Dict, Optional

from web3 import Web3

from ..infra.evm_signer import ChainAccount, NonceManager, sign_and_send
from ..infra.correlation import log_prefix
from ..types import BoundTransaction, TxResult

logger = logging.getLogger(__name__)


class SettlementSubmitter:
    """
    Broadcasts a bound transaction without waiting for confirmation

    Steps run strictly in order: nonce read, signing, broadcast. The nonce
    comes from the shared NonceManager, so an approval sent earlier in the
    same process is accounted for even before the node reports it.
    """

    def __init__(
        self,
        chain_id: int,
        explorer_tx_url: Optional[str] = None,
        nonce_manager: Optional[NonceManager] = None,
    ):
        self._chain_id = chain_id
        self._explorer_tx_url = explorer_tx_url
        self._nonce_manager = nonce_manager

    def build_transaction(self, bound: BoundTransaction) -> Dict[str, Any]:
        """Transaction fields without nonce; absent gas fields are left to the signer"""
        tx: Dict[str, Any] = {
            "to": Web3.to_checksum_address(bound.to),
            "data": bound.data,
            "value": bound.value,
            "chainId": self._chain_id,
        }
        if bound.gas is not None:
            tx["gas"] = bound.gas
        if bound.gas_price is not None:
            tx["gasPrice"] = bound.gas_price
        return tx

    def submit(self, bound: BoundTransaction, account: ChainAccount) -> TxResult:
        """
        Sign and broadcast the settlement transaction

        Args:
            bound: Transaction with the permit signature bound
            account: Signing identity of the taker

        Returns:
            PENDING TxResult carrying the transaction hash

        Raises:
            SignerError: Signing failed
            TransactionError: Node rejected the broadcast
        """
        tx = self.build_transaction(bound)
        result = sign_and_send(
            account,
            tx,
            wait_for_receipt=False,
            nonce_manager=self._nonce_manager,
        )

        if self._explorer_tx_url:
            result.explorer_url = f"{self._explorer_tx_url}{result.tx_hash}"

        logger.info(f"{log_prefix()}Transaction hash: {result.tx_hash} (nonce {result.nonce})")
        if result.explorer_url:
            logger.info(f"{log_prefix()}See tx details at {result.explorer_url}")
        return result
