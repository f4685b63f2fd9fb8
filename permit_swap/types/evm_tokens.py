"""
EVM token registry

Symbol to address mappings for the tokens the CLI accepts by name.
Decimals are deliberately absent: trade sizes are always derived from the
live contract's decimals().
"""

from typing import Dict, Optional
from enum import Enum

from ..errors import ConfigurationError


class EVMChain(Enum):
    """Chains with a token registry"""
    ETH = 1
    BASE = 8453


# Native token placeholder understood by the 0x API
NATIVE_TOKEN_ADDRESS = "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE"


ETH_TOKEN_ADDRESSES: Dict[str, str] = {
    "ETH": NATIVE_TOKEN_ADDRESS,
    "WETH": "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
    "USDC": "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
    "USDT": "0xdAC17F958D2ee523a2206206994597C13D831ec7",
    "DAI": "0x6B175474E89094C44Da98b954EedeaC495271d0F",
    "WBTC": "0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599",
}

BASE_TOKEN_ADDRESSES: Dict[str, str] = {
    "ETH": NATIVE_TOKEN_ADDRESS,
    "WETH": "0x4200000000000000000000000000000000000006",
    "USDC": "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
    "DAI": "0x50c5725949A6F0c72E6C4a641F24049A917DB0Cb",
    "CBETH": "0x2Ae3F1Ec7F1F5012CFEab0185bfc7aa3cf0DEc22",
}

# Wrapped native token per chain
WRAPPED_NATIVE: Dict[int, str] = {
    EVMChain.ETH.value: ETH_TOKEN_ADDRESSES["WETH"],
    EVMChain.BASE.value: BASE_TOKEN_ADDRESSES["WETH"],
}

_REGISTRY: Dict[int, Dict[str, str]] = {
    EVMChain.ETH.value: ETH_TOKEN_ADDRESSES,
    EVMChain.BASE.value: BASE_TOKEN_ADDRESSES,
}


def _is_address(value: str) -> bool:
    return value.startswith("0x") and len(value) == 42


def get_token_address(symbol: str, chain_id: int) -> Optional[str]:
    """Look up a token address by symbol, None when unknown"""
    return _REGISTRY.get(chain_id, {}).get(symbol.upper())


def resolve_token_address(token: str, chain_id: int) -> str:
    """
    Resolve a symbol or address to an address

    Args:
        token: Token symbol ("WETH") or 0x-prefixed address
        chain_id: EVM chain ID

    Returns:
        Token address (addresses are passed through unchanged)

    Raises:
        ConfigurationError: If the symbol is not in the registry
    """
    if _is_address(token):
        return token

    address = get_token_address(token, chain_id)
    if address is None:
        raise ConfigurationError.invalid(
            "token", f"Unknown token '{token}' on chain {chain_id}. Pass the contract address instead."
        )
    return address


def is_native_token(address: str) -> bool:
    """Check if address is the native token placeholder"""
    return address.lower() == NATIVE_TOKEN_ADDRESS.lower()
