"""
permit_swap - single token swap settlement through the 0x Permit2 flow

Pipeline:
- Price: indicative price and allowance check (0x /swap/permit2/price)
- Allowance: approve the Permit2 spender and wait for confirmation
- Quote: executable quote with affiliate fee and surplus collection
- Bind: sign the Permit2 typed data and append it to the calldata
- Submit: sign and broadcast the settlement transaction
"""

from .types import (
    SwapRequest,
    PriceQuote,
    ExecutableQuote,
    BoundTransaction,
    TxResult,
    TxStatus,
    SwapOutcome,
    EVMChain,
    NATIVE_TOKEN_ADDRESS,
    to_base_units,
)
from .errors import (
    ErrorCode,
    PermitSwapError,
    QuoteError,
    RpcError,
    TransactionError,
    BindingError,
    SignerError,
    ConfigurationError,
)
from .config import ApprovalPolicy, Config, config, get_config, setup_logging

from .infra import ChainAccount, EVMSigner, NonceManager, ERC20Token, WrappedNativeToken, MAX_UINT256
from .protocols import ZeroExAPI, PermitBinder
from .modules import AllowanceCoordinator, SettlementSubmitter, SwapPipeline

__all__ = [
    # Types
    "SwapRequest",
    "PriceQuote",
    "ExecutableQuote",
    "BoundTransaction",
    "TxResult",
    "TxStatus",
    "SwapOutcome",
    "EVMChain",
    "NATIVE_TOKEN_ADDRESS",
    "to_base_units",
    # Errors
    "ErrorCode",
    "PermitSwapError",
    "QuoteError",
    "RpcError",
    "TransactionError",
    "BindingError",
    "SignerError",
    "ConfigurationError",
    # Config
    "ApprovalPolicy",
    "Config",
    "config",
    "get_config",
    "setup_logging",
    # Infrastructure
    "ChainAccount",
    "EVMSigner",
    "NonceManager",
    "ERC20Token",
    "WrappedNativeToken",
    "MAX_UINT256",
    # Protocol
    "ZeroExAPI",
    "PermitBinder",
    # Pipeline
    "AllowanceCoordinator",
    "SettlementSubmitter",
    "SwapPipeline",
]
