"""
Test Settlement Module

Tests for SettlementSubmitter with a mocked account.
"""

import sys
import unittest
from pathlib import Path
from unittest.mock import Mock

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from permit_swap.errors import SignerError, TransactionError
from permit_swap.infra.evm_signer import ChainAccount, NonceManager
from permit_swap.modules.settlement import SettlementSubmitter
from permit_swap.types import BoundTransaction, TxStatus

TAKER = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
SETTLER = "0x1111111111111111111111111111111111111111"
TX_HASH = "0x" + "ef" * 32


def make_account() -> Mock:
    account = Mock(spec=ChainAccount)
    account.get_address.return_value = TAKER
    account.get_transaction_count.return_value = 12
    account.sign_transaction.return_value = b"\x02signed"
    account.send_raw_transaction.return_value = TX_HASH
    return account


class TestSettlementSubmitter(unittest.TestCase):
    """SettlementSubmitter.build_transaction and submit"""

    def setUp(self):
        self.nonces = NonceManager()
        self.submitter = SettlementSubmitter(
            8453,
            explorer_tx_url="https://basescan.org/tx/",
            nonce_manager=self.nonces,
        )

    def test_build_transaction(self):
        bound = BoundTransaction(to=SETTLER, data=b"\xaa", value=0, gas=210_000, gas_price=1_000_000)

        tx = self.submitter.build_transaction(bound)

        self.assertEqual(tx, {
            "to": SETTLER,
            "data": b"\xaa",
            "value": 0,
            "chainId": 8453,
            "gas": 210_000,
            "gasPrice": 1_000_000,
        })

    def test_build_transaction_without_gas(self):
        tx = self.submitter.build_transaction(BoundTransaction(to=SETTLER, data=b"\xaa"))

        self.assertNotIn("gas", tx)
        self.assertNotIn("gasPrice", tx)

    def test_submit(self):
        account = make_account()
        bound = BoundTransaction(to=SETTLER, data=b"\xaa" + bytes(97), signature=bytes(65))

        result = self.submitter.submit(bound, account)

        self.assertEqual(result.status, TxStatus.PENDING)
        self.assertEqual(result.tx_hash, TX_HASH)
        self.assertEqual(result.nonce, 12)
        self.assertEqual(result.explorer_url, f"https://basescan.org/tx/{TX_HASH}")
        account.wait_for_receipt.assert_not_called()

        signed_tx = account.sign_transaction.call_args[0][0]
        self.assertEqual(signed_tx["data"], bound.data)
        self.assertEqual(signed_tx["nonce"], 12)

    def test_nonce_read_before_signing(self):
        calls = []
        account = make_account()
        account.get_transaction_count.side_effect = lambda address: calls.append("nonce") or 0
        account.sign_transaction.side_effect = lambda tx: calls.append("sign") or b"\x02"
        account.send_raw_transaction.side_effect = lambda raw: calls.append("send") or TX_HASH

        self.submitter.submit(BoundTransaction(to=SETTLER, data=b"\xaa"), account)

        self.assertEqual(calls, ["nonce", "sign", "send"])

    def test_broadcast_rejected(self):
        account = make_account()
        account.send_raw_transaction.side_effect = ValueError("insufficient funds for gas")

        with self.assertRaises(TransactionError):
            self.submitter.submit(BoundTransaction(to=SETTLER, data=b"\xaa"), account)

    def test_signing_failure_not_broadcast(self):
        account = make_account()
        account.sign_transaction.side_effect = RuntimeError("locked")

        with self.assertRaises(SignerError):
            self.submitter.submit(BoundTransaction(to=SETTLER, data=b"\xaa"), account)

        account.send_raw_transaction.assert_not_called()


if __name__ == "__main__":
    unittest.main()
