"""
Type definitions for the swap settlement pipeline
"""

from .swap import SwapRequest, to_base_units
from .quote import (
    AllowanceIssue,
    BalanceIssue,
    QuoteIssues,
    PriceQuote,
    QuoteTransaction,
    Permit2Payload,
    Fill,
    Route,
    TokenTaxes,
    TokenMetadata,
    IntegratorFee,
    ExecutableQuote,
    BoundTransaction,
)
from .result import TxResult, TxStatus, SwapOutcome

from .evm_tokens import (
    EVMChain,
    NATIVE_TOKEN_ADDRESS,
    ETH_TOKEN_ADDRESSES,
    BASE_TOKEN_ADDRESSES,
    WRAPPED_NATIVE,
    get_token_address,
    resolve_token_address,
    is_native_token,
)

__all__ = [
    # Requests
    "SwapRequest",
    "to_base_units",
    # Aggregator responses
    "AllowanceIssue",
    "BalanceIssue",
    "QuoteIssues",
    "PriceQuote",
    "QuoteTransaction",
    "Permit2Payload",
    "Fill",
    "Route",
    "TokenTaxes",
    "TokenMetadata",
    "IntegratorFee",
    "ExecutableQuote",
    "BoundTransaction",
    # Results
    "TxResult",
    "TxStatus",
    "SwapOutcome",
    # Token registry
    "EVMChain",
    "NATIVE_TOKEN_ADDRESS",
    "ETH_TOKEN_ADDRESSES",
    "BASE_TOKEN_ADDRESSES",
    "WRAPPED_NATIVE",
    "get_token_address",
    "resolve_token_address",
    "is_native_token",
]
