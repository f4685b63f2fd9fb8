"""
Infrastructure layer

Provides:
- ChainAccount: signing identity interface
- EVMSigner: local private key ChainAccount using web3.py
- NonceManager / sign_and_send: nonce allocation and transaction sending
- ERC20Token / WrappedNativeToken: token contract access
- CorrelationContext: per-run log correlation IDs
"""

from .evm_signer import (
    ChainAccount,
    EVMSigner,
    NonceManager,
    get_nonce_manager,
    sign_and_send,
    create_web3,
    create_evm_signer,
)
from .erc20 import ERC20Token, WrappedNativeToken, MAX_UINT256, ERC20_ABI, WETH_ABI
from .correlation import (
    CorrelationContext,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
    log_prefix,
)

__all__ = [
    "ChainAccount",
    "EVMSigner",
    "NonceManager",
    "get_nonce_manager",
    "sign_and_send",
    "create_web3",
    "create_evm_signer",
    "ERC20Token",
    "WrappedNativeToken",
    "MAX_UINT256",
    "ERC20_ABI",
    "WETH_ABI",
    "CorrelationContext",
    "generate_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
    "log_prefix",
]
