"""
ERC-20 contract access

Thin read/write wrapper over an ERC-20 token contract. Writes are returned
as unsigned transaction dicts so the caller decides how they are signed
and sent.
"""

import logging
from typing import Any, Dict, List, Optional

from web3 import Web3

from ..errors import RpcError

logger = logging.getLogger(__name__)

MAX_UINT256 = 2**256 - 1

ERC20_ABI: List[Dict[str, Any]] = [
    {
        "constant": True,
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "symbol",
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "balance", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": False,
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "value", "type": "uint256"},
        ],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

WETH_ABI: List[Dict[str, Any]] = ERC20_ABI + [
    {
        "constant": False,
        "inputs": [],
        "name": "deposit",
        "outputs": [],
        "stateMutability": "payable",
        "type": "function",
    },
]


class ERC20Token:
    """
    ERC-20 token contract

    decimals() is read from the contract on first use and cached for the
    lifetime of the instance.

    Usage:
        token = ERC20Token(web3, "0x4200000000000000000000000000000000000006")
        raw_amount = to_base_units(Decimal("0.1"), token.decimals())
        tx = token.build_approve(spender, MAX_UINT256, owner)
    """

    abi: List[Dict[str, Any]] = ERC20_ABI

    def __init__(self, web3: "Web3", address: str):
        self._web3 = web3
        self._address = Web3.to_checksum_address(address)
        self._contract = web3.eth.contract(address=self._address, abi=self.abi)
        self._decimals: Optional[int] = None

    @property
    def address(self) -> str:
        return self._address

    def _call(self, name: str, *args) -> Any:
        try:
            return getattr(self._contract.functions, name)(*args).call()
        except Exception as e:
            raise RpcError.call_failed(f"{name}() on {self._address}", e) from e

    def decimals(self) -> int:
        """Token decimals, read once from the contract"""
        if self._decimals is None:
            self._decimals = int(self._call("decimals"))
            logger.debug(f"Token {self._address} decimals={self._decimals}")
        return self._decimals

    def symbol(self) -> str:
        return self._call("symbol")

    def balance_of(self, owner: str) -> int:
        return int(self._call("balanceOf", Web3.to_checksum_address(owner)))

    def allowance(self, owner: str, spender: str) -> int:
        return int(self._call(
            "allowance",
            Web3.to_checksum_address(owner),
            Web3.to_checksum_address(spender),
        ))

    def build_approve(self, spender: str, amount: int, owner: str) -> Dict[str, Any]:
        """
        Build an unsigned approve(spender, amount) transaction

        The node fills gas, fee fields and chainId. The nonce is left to
        the sender.
        """
        if not 0 <= amount <= MAX_UINT256:
            raise ValueError(f"approve amount out of uint256 range: {amount}")
        try:
            return self._contract.functions.approve(
                Web3.to_checksum_address(spender),
                amount,
            ).build_transaction({"from": Web3.to_checksum_address(owner)})
        except Exception as e:
            raise RpcError.call_failed(f"approve() on {self._address}", e) from e

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(address={self._address})"


class WrappedNativeToken(ERC20Token):
    """Wrapped native asset (WETH) with deposit on top of ERC-20"""

    abi = WETH_ABI

    def build_deposit(self, amount: int, owner: str) -> Dict[str, Any]:
        """Build an unsigned deposit() wrapping `amount` wei of native asset"""
        try:
            return self._contract.functions.deposit().build_transaction({
                "from": Web3.to_checksum_address(owner),
                "value": amount,
            })
        except Exception as e:
            raise RpcError.call_failed(f"deposit() on {self._address}", e) from e

