"""
Exception definitions for the swap settlement pipeline
"""

from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """
    Unified error codes for swap operations

    1xxx - Aggregator API / RPC errors
    2xxx - Transaction errors
    3xxx - Liquidity errors
    6xxx - Signer errors
    9xxx - Configuration errors
    """
    # Aggregator API errors
    API_REQUEST_FAILED = "1001"
    API_TIMEOUT = "1002"
    API_INVALID_RESPONSE = "1004"
    API_HTTP_ERROR = "1005"

    # RPC errors
    RPC_CALL_FAILED = "1102"

    # Transaction errors
    TX_SEND_FAILED = "2002"
    TX_CONFIRMATION_FAILED = "2003"
    TX_BINDING_FAILED = "2006"
    TX_APPROVAL_REVERTED = "2007"
    TX_REVERTED = "2008"

    # Liquidity errors
    LIQUIDITY_INSUFFICIENT = "3003"

    # Signer errors
    SIGNER_NOT_CONFIGURED = "6001"
    SIGNER_FAILED = "6002"

    # Configuration errors
    CONFIG_INVALID = "9001"
    CONFIG_MISSING = "9002"


class PermitSwapError(Exception):
    """
    Base exception for all swap pipeline errors

    Attributes:
        message: Human-readable error message
        code: Error code for programmatic handling
        recoverable: Whether rerunning the pipeline might succeed
        original_error: The underlying exception if any
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        recoverable: bool = False,
        original_error: Optional[Exception] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.recoverable = recoverable
        self.original_error = original_error
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


class QuoteError(PermitSwapError):
    """
    Aggregator API errors

    Raised when:
    - The price or quote endpoint returns a non-success status
    - The request cannot be delivered (timeout, connection refused)
    - The response body is not JSON or lacks required fields
    - The aggregator reports no liquidity for the pair
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.API_REQUEST_FAILED,
        original_error: Optional[Exception] = None,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
        recoverable: bool = False,
    ):
        super().__init__(
            message,
            code,
            recoverable=recoverable,
            original_error=original_error,
            details={"endpoint": endpoint, "status_code": status_code},
        )
        self.endpoint = endpoint
        self.status_code = status_code

    @classmethod
    def http_status(cls, endpoint: str, status_code: int, reason: str) -> "QuoteError":
        return cls(
            f"Aggregator returned HTTP {status_code} for {endpoint}: {reason}",
            ErrorCode.API_HTTP_ERROR,
            endpoint=endpoint,
            status_code=status_code,
            recoverable=status_code >= 500 or status_code == 429,
        )

    @classmethod
    def request_failed(cls, endpoint: str, error: Exception) -> "QuoteError":
        return cls(
            f"Aggregator request to {endpoint} failed: {error}",
            ErrorCode.API_REQUEST_FAILED,
            original_error=error,
            endpoint=endpoint,
            recoverable=True,
        )

    @classmethod
    def timeout(cls, endpoint: str, timeout_seconds: float) -> "QuoteError":
        return cls(
            f"Aggregator request to {endpoint} timed out after {timeout_seconds}s",
            ErrorCode.API_TIMEOUT,
            endpoint=endpoint,
            recoverable=True,
        )

    @classmethod
    def malformed(cls, endpoint: str, reason: str, error: Exception = None) -> "QuoteError":
        return cls(
            f"Malformed response from {endpoint}: {reason}",
            ErrorCode.API_INVALID_RESPONSE,
            original_error=error,
            endpoint=endpoint,
        )

    @classmethod
    def no_liquidity(cls, sell_token: str, buy_token: str) -> "QuoteError":
        return cls(
            f"No liquidity available for {sell_token} -> {buy_token}",
            ErrorCode.LIQUIDITY_INSUFFICIENT,
        )


class RpcError(PermitSwapError):
    """
    Blockchain RPC errors raised while reading contract state
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.RPC_CALL_FAILED,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, code, recoverable=True, original_error=original_error)

    @classmethod
    def call_failed(cls, call: str, error: Exception) -> "RpcError":
        return cls(
            f"Contract call {call} failed: {error}",
            ErrorCode.RPC_CALL_FAILED,
            original_error=error,
        )


class TransactionError(PermitSwapError):
    """
    Transaction execution errors

    Raised when:
    - The approval transaction reverts or is never confirmed
    - The node rejects a broadcast (stale nonce, underpriced, out of gas)
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.TX_SEND_FAILED,
        tx_hash: Optional[str] = None,
        recoverable: bool = False,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=recoverable,
            original_error=original_error,
            details={"tx_hash": tx_hash},
        )
        self.tx_hash = tx_hash

    @classmethod
    def send_failed(cls, error: str, original_error: Exception = None) -> "TransactionError":
        # Network hiccups are worth a rerun; node rejections are not
        recoverable = "timeout" in error.lower() or "connection" in error.lower()
        return cls(
            f"Failed to send transaction: {error}",
            ErrorCode.TX_SEND_FAILED,
            recoverable=recoverable,
            original_error=original_error,
        )

    @classmethod
    def confirmation_failed(cls, tx_hash: str, error: str, original_error: Exception = None) -> "TransactionError":
        return cls(
            f"Transaction confirmation failed: {error}",
            ErrorCode.TX_CONFIRMATION_FAILED,
            tx_hash=tx_hash,
            recoverable=True,
            original_error=original_error,
        )

    @classmethod
    def approval_reverted(cls, tx_hash: str, spender: str) -> "TransactionError":
        return cls(
            f"Approval for spender {spender} reverted on-chain",
            ErrorCode.TX_APPROVAL_REVERTED,
            tx_hash=tx_hash,
        )

    @classmethod
    def reverted(cls, tx_hash: str, action: str) -> "TransactionError":
        return cls(
            f"{action} transaction reverted on-chain",
            ErrorCode.TX_REVERTED,
            tx_hash=tx_hash,
        )


class BindingError(PermitSwapError):
    """
    Permit binding precondition failure

    Raised when a quote carries a permit payload but its typed data, the
    resulting signature or the original calldata is empty. Submitting such
    calldata is never attempted.
    """

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.TX_BINDING_FAILED, recoverable=False)

    @classmethod
    def missing_signature(cls) -> "BindingError":
        return cls("Permit payload present but signing produced no signature")

    @classmethod
    def missing_calldata(cls) -> "BindingError":
        return cls("Permit payload present but quote transaction has no calldata")

    @classmethod
    def missing_typed_data(cls) -> "BindingError":
        return cls("Permit payload present but carries no EIP-712 typed data")


class SignerError(PermitSwapError):
    """
    Signing-related errors

    Raised when:
    - No private key configured
    - Typed-data or transaction signing fails
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.SIGNER_FAILED,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message, code, recoverable=False, original_error=original_error)

    @classmethod
    def not_configured(cls) -> "SignerError":
        return cls(
            "No signer configured. Set EVM_PRIVATE_KEY.",
            ErrorCode.SIGNER_NOT_CONFIGURED,
        )

    @classmethod
    def failed(cls, reason: str, original_error: Exception = None) -> "SignerError":
        return cls(f"Signing failed: {reason}", ErrorCode.SIGNER_FAILED, original_error=original_error)


class ConfigurationError(PermitSwapError):
    """
    Configuration-related errors

    Raised when:
    - Required configuration is missing
    - Configuration values are invalid
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
    ):
        super().__init__(message, code, recoverable=False)

    @classmethod
    def missing(cls, param: str) -> "ConfigurationError":
        return cls(f"Missing required configuration: {param}", ErrorCode.CONFIG_MISSING)

    @classmethod
    def invalid(cls, param: str, reason: str) -> "ConfigurationError":
        return cls(f"Invalid configuration '{param}': {reason}", ErrorCode.CONFIG_INVALID)
