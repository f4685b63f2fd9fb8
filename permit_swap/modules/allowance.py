"""
Allowance Module

Makes sure the spender named by the aggregator may move the sell token
before a quote is settled.
"""

import logging
from typing import Optional

from ..config import ApprovalPolicy
from ..errors import TransactionError
from ..infra.erc20 import ERC20Token, MAX_UINT256
from ..infra.evm_signer import ChainAccount, NonceManager, sign_and_send
from ..infra.correlation import log_prefix
from ..types import PriceQuote, TxResult

logger = logging.getLogger(__name__)


class AllowanceCoordinator:
    """
    Sends an approval when the price reports a missing allowance

    With ApprovalPolicy.UNLIMITED the spender is approved for MAX_UINT256
    once, so later swaps of the same token skip this step entirely. This
    saves an approval transaction per trade at the cost of leaving the
    spender with an unbounded allowance. ApprovalPolicy.EXACT approves only
    the amount being sold.

    Usage:
        coordinator = AllowanceCoordinator(signer)
        approval = coordinator.ensure_allowance(price, sell_token, request.sell_amount)
    """

    def __init__(
        self,
        account: ChainAccount,
        policy: ApprovalPolicy = ApprovalPolicy.UNLIMITED,
        receipt_timeout: int = 120,
        nonce_manager: Optional[NonceManager] = None,
    ):
        self._account = account
        self._policy = policy
        self._receipt_timeout = receipt_timeout
        self._nonce_manager = nonce_manager

    @property
    def policy(self) -> ApprovalPolicy:
        return self._policy

    def approval_amount(self, required_amount: int) -> int:
        if self._policy is ApprovalPolicy.EXACT:
            return required_amount
        return MAX_UINT256

    def ensure_allowance(
        self,
        price: PriceQuote,
        token: ERC20Token,
        required_amount: int,
    ) -> Optional[TxResult]:
        """
        Approve the spender if needed and wait for the approval to be mined

        Args:
            price: Indicative price carrying the allowance issue, if any
            token: Sell token contract
            required_amount: Sell amount in smallest units

        Returns:
            Confirmed approval, or None when nothing had to be sent

        Raises:
            TransactionError: Approval reverted, was rejected, or was not
                confirmed in time. The swap must not continue.
        """
        issue = price.issues.allowance
        if issue is None:
            logger.info(f"{log_prefix()}Token {token.address} already approved for the spender")
            return None

        owner = self._account.get_address()
        current = token.allowance(owner, issue.spender)
        if current >= required_amount:
            # A previous run's approval may not be reflected in the price yet
            logger.info(
                f"{log_prefix()}Spender {issue.spender} already has allowance {current} "
                f">= {required_amount}, skipping approval"
            )
            return None

        amount = self.approval_amount(required_amount)
        logger.info(
            f"{log_prefix()}Approving {issue.spender} to spend {token.address} "
            f"({'unlimited' if amount == MAX_UINT256 else amount})"
        )

        tx_dict = token.build_approve(issue.spender, amount, owner)
        result = sign_and_send(
            self._account,
            tx_dict,
            wait_for_receipt=True,
            timeout=self._receipt_timeout,
            nonce_manager=self._nonce_manager,
        )

        if not result.is_success:
            logger.error(f"{log_prefix()}Approval {result.tx_hash} reverted")
            raise TransactionError.approval_reverted(result.tx_hash, issue.spender)

        logger.info(f"{log_prefix()}Approval confirmed in block {result.block_number}: {result.tx_hash}")
        return result
