"""
Test Allowance Module

Tests for AllowanceCoordinator with mocked token contract and account.
"""

import sys
import unittest
from pathlib import Path
from unittest.mock import MagicMock, Mock

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from permit_swap.config import ApprovalPolicy
from permit_swap.errors import TransactionError, ErrorCode
from permit_swap.infra.erc20 import ERC20Token, MAX_UINT256
from permit_swap.infra.evm_signer import ChainAccount, NonceManager
from permit_swap.modules.allowance import AllowanceCoordinator
from permit_swap.types import PriceQuote, QuoteIssues, AllowanceIssue, TxStatus

TAKER = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
SPENDER = "0x000000000022D473030F116dDEE9F6B43aC78BA3"
WETH = "0x4200000000000000000000000000000000000006"
SELL_AMOUNT = 100_000_000_000_000_000


def make_account(receipt_status: int = 1) -> Mock:
    account = Mock(spec=ChainAccount)
    account.get_address.return_value = TAKER
    account.get_transaction_count.return_value = 5
    account.sign_transaction.return_value = b"\x02signed"
    account.send_raw_transaction.return_value = "0x" + "ab" * 32
    account.wait_for_receipt.return_value = {"status": receipt_status, "blockNumber": 100, "gasUsed": 46_000}
    return account


def make_token(current_allowance: int = 0) -> MagicMock:
    token = MagicMock(spec=ERC20Token)
    token.address = WETH
    token.allowance.return_value = current_allowance
    token.build_approve.return_value = {
        "from": TAKER,
        "to": WETH,
        "data": "0x095ea7b3",
        "value": 0,
        "gas": 46_000,
        "gasPrice": 1_000_000,
        "chainId": 8453,
    }
    return token


def price_with_issue() -> PriceQuote:
    return PriceQuote(
        liquidity_available=True,
        issues=QuoteIssues(allowance=AllowanceIssue(spender=SPENDER, actual=0)),
    )


def price_without_issue() -> PriceQuote:
    return PriceQuote(liquidity_available=True, issues=QuoteIssues(allowance=None))


class TestEnsureAllowance(unittest.TestCase):
    """AllowanceCoordinator.ensure_allowance"""

    def setUp(self):
        self.nonces = NonceManager()

    def test_no_issue_no_writes(self):
        account = make_account()
        token = make_token()
        coordinator = AllowanceCoordinator(account, nonce_manager=self.nonces)

        result = coordinator.ensure_allowance(price_without_issue(), token, SELL_AMOUNT)

        self.assertIsNone(result)
        token.build_approve.assert_not_called()
        account.sign_transaction.assert_not_called()
        account.send_raw_transaction.assert_not_called()

    def test_issue_sends_one_unlimited_approval(self):
        account = make_account()
        token = make_token()
        coordinator = AllowanceCoordinator(account, nonce_manager=self.nonces)

        result = coordinator.ensure_allowance(price_with_issue(), token, SELL_AMOUNT)

        token.build_approve.assert_called_once_with(SPENDER, MAX_UINT256, TAKER)
        account.send_raw_transaction.assert_called_once()
        account.wait_for_receipt.assert_called_once_with("0x" + "ab" * 32, 120)
        self.assertEqual(result.status, TxStatus.SUCCESS)
        self.assertEqual(result.block_number, 100)
        self.assertEqual(result.nonce, 5)

    def test_signed_tx_has_nonce_and_no_from(self):
        account = make_account()
        coordinator = AllowanceCoordinator(account, nonce_manager=self.nonces)

        coordinator.ensure_allowance(price_with_issue(), make_token(), SELL_AMOUNT)

        signed_tx = account.sign_transaction.call_args[0][0]
        self.assertEqual(signed_tx["nonce"], 5)
        self.assertNotIn("from", signed_tx)

    def test_returns_after_receipt(self):
        calls = []
        account = make_account()
        account.send_raw_transaction.side_effect = lambda raw: calls.append("send") or "0x01"
        account.wait_for_receipt.side_effect = (
            lambda tx_hash, timeout: calls.append("receipt") or {"status": 1, "blockNumber": 1}
        )
        coordinator = AllowanceCoordinator(account, nonce_manager=self.nonces)

        coordinator.ensure_allowance(price_with_issue(), make_token(), SELL_AMOUNT)
        calls.append("returned")

        self.assertEqual(calls, ["send", "receipt", "returned"])

    def test_exact_policy(self):
        account = make_account()
        token = make_token()
        coordinator = AllowanceCoordinator(account, policy=ApprovalPolicy.EXACT, nonce_manager=self.nonces)

        coordinator.ensure_allowance(price_with_issue(), token, SELL_AMOUNT)

        token.build_approve.assert_called_once_with(SPENDER, SELL_AMOUNT, TAKER)

    def test_already_approved_on_chain(self):
        account = make_account()
        token = make_token(current_allowance=MAX_UINT256)
        coordinator = AllowanceCoordinator(account, nonce_manager=self.nonces)

        result = coordinator.ensure_allowance(price_with_issue(), token, SELL_AMOUNT)

        self.assertIsNone(result)
        token.allowance.assert_called_once_with(TAKER, SPENDER)
        token.build_approve.assert_not_called()
        account.send_raw_transaction.assert_not_called()

    def test_reverted_approval_raises(self):
        account = make_account(receipt_status=0)
        coordinator = AllowanceCoordinator(account, nonce_manager=self.nonces)

        with self.assertRaises(TransactionError) as ctx:
            coordinator.ensure_allowance(price_with_issue(), make_token(), SELL_AMOUNT)

        self.assertEqual(ctx.exception.code, ErrorCode.TX_APPROVAL_REVERTED)
        self.assertEqual(ctx.exception.tx_hash, "0x" + "ab" * 32)

    def test_unconfirmed_approval_raises(self):
        account = make_account()
        account.wait_for_receipt.side_effect = TimeoutError("not mined after 120s")
        coordinator = AllowanceCoordinator(account, nonce_manager=self.nonces)

        with self.assertRaises(TransactionError) as ctx:
            coordinator.ensure_allowance(price_with_issue(), make_token(), SELL_AMOUNT)

        self.assertEqual(ctx.exception.code, ErrorCode.TX_CONFIRMATION_FAILED)

    def test_approval_amount(self):
        account = make_account()
        self.assertEqual(AllowanceCoordinator(account).approval_amount(7), MAX_UINT256)
        self.assertEqual(AllowanceCoordinator(account, policy=ApprovalPolicy.EXACT).approval_amount(7), 7)


if __name__ == "__main__":
    unittest.main()
