"""
Error definitions for the swap settlement pipeline
"""

from .exceptions import (
    ErrorCode,
    PermitSwapError,
    QuoteError,
    RpcError,
    TransactionError,
    BindingError,
    SignerError,
    ConfigurationError,
)

__all__ = [
    "ErrorCode",
    "PermitSwapError",
    "QuoteError",
    "RpcError",
    "TransactionError",
    "BindingError",
    "SignerError",
    "ConfigurationError",
]
