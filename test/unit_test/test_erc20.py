"""
Test ERC-20 token access with a mocked Web3 contract
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from permit_swap.errors import RpcError, ErrorCode
from permit_swap.infra.erc20 import ERC20Token, WrappedNativeToken, MAX_UINT256, ERC20_ABI, WETH_ABI

WETH = "0x4200000000000000000000000000000000000006"
OWNER = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
SPENDER = "0x000000000022D473030F116dDEE9F6B43aC78BA3"


def make_token(cls=ERC20Token):
    web3 = MagicMock()
    contract = web3.eth.contract.return_value
    return cls(web3, WETH.lower()), web3, contract


class TestERC20Token:

    def test_address_checksummed(self):
        token, web3, _ = make_token()
        assert token.address == WETH
        web3.eth.contract.assert_called_once_with(address=WETH, abi=ERC20_ABI)

    def test_decimals_cached(self):
        token, _, contract = make_token()
        contract.functions.decimals.return_value.call.return_value = 18

        assert token.decimals() == 18
        assert token.decimals() == 18
        contract.functions.decimals.return_value.call.assert_called_once()

    def test_allowance(self):
        token, _, contract = make_token()
        contract.functions.allowance.return_value.call.return_value = MAX_UINT256

        assert token.allowance(OWNER.lower(), SPENDER) == MAX_UINT256
        contract.functions.allowance.assert_called_once_with(OWNER, SPENDER)

    def test_call_failure_wrapped(self):
        token, _, contract = make_token()
        contract.functions.balanceOf.return_value.call.side_effect = ConnectionError("rpc down")

        with pytest.raises(RpcError) as exc_info:
            token.balance_of(OWNER)

        assert exc_info.value.code == ErrorCode.RPC_CALL_FAILED
        assert exc_info.value.recoverable is True

    def test_build_approve(self):
        token, _, contract = make_token()
        contract.functions.approve.return_value.build_transaction.return_value = {"to": WETH, "data": "0x095ea7b3"}

        tx = token.build_approve(SPENDER, MAX_UINT256, OWNER)

        assert tx["data"] == "0x095ea7b3"
        contract.functions.approve.assert_called_once_with(SPENDER, MAX_UINT256)
        contract.functions.approve.return_value.build_transaction.assert_called_once_with({"from": OWNER})

    def test_build_approve_out_of_range(self):
        token, _, _ = make_token()
        with pytest.raises(ValueError):
            token.build_approve(SPENDER, MAX_UINT256 + 1, OWNER)


class TestWrappedNativeToken:

    def test_abi(self):
        _, web3, _ = make_token(WrappedNativeToken)
        web3.eth.contract.assert_called_once_with(address=WETH, abi=WETH_ABI)

    def test_build_deposit(self):
        token, _, contract = make_token(WrappedNativeToken)
        contract.functions.deposit.return_value.build_transaction.return_value = {"value": 5}

        token.build_deposit(5, OWNER)

        contract.functions.deposit.return_value.build_transaction.assert_called_once_with({"from": OWNER, "value": 5})
