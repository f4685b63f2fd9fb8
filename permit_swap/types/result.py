"""
Result type definitions for transactions and swap runs
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .swap import SwapRequest


class TxStatus(Enum):
    """Transaction status"""
    SUCCESS = "success"
    FAILED = "failed"
    PENDING = "pending"  # Broadcast, confirmation not awaited


@dataclass
class TxResult:
    """
    Transaction execution result

    Attributes:
        status: Transaction status
        tx_hash: 0x-prefixed transaction hash
        error: Error message if failed
        error_code: Error code for programmatic handling
        nonce: Nonce the transaction was signed with
        block_number: Block of inclusion (confirmed transactions only)
        gas_used: Gas consumed (confirmed transactions only)
        explorer_url: Block explorer link for the hash
    """
    status: TxStatus
    tx_hash: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    nonce: Optional[int] = None
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    explorer_url: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status == TxStatus.SUCCESS

    @property
    def is_pending(self) -> bool:
        return self.status == TxStatus.PENDING

    @property
    def is_failed(self) -> bool:
        return self.status == TxStatus.FAILED

    @classmethod
    def success(cls, tx_hash: str, **kwargs) -> "TxResult":
        """Create confirmed result"""
        return cls(status=TxStatus.SUCCESS, tx_hash=tx_hash, **kwargs)

    @classmethod
    def pending(cls, tx_hash: str, **kwargs) -> "TxResult":
        """Create broadcast-only result"""
        return cls(status=TxStatus.PENDING, tx_hash=tx_hash, **kwargs)

    @classmethod
    def failed(cls, error: str, tx_hash: str = None, **kwargs) -> "TxResult":
        """Create failed result"""
        return cls(status=TxStatus.FAILED, tx_hash=tx_hash, error=error, **kwargs)

    def __str__(self) -> str:
        if self.tx_hash and not self.is_failed:
            return f"TxResult({self.status.value.upper()}, {self.tx_hash[:18]}...)"
        return f"TxResult({self.status.value}, error={self.error})"


@dataclass
class SwapOutcome:
    """
    Result of one pipeline run

    Attributes:
        request: Parameters the price and quote were fetched with
        settlement: Broadcast settlement transaction
        approval: Confirmed approval, None when no approval was sent
        permit_signed: Whether a Permit2 signature was bound into the calldata
    """
    request: "SwapRequest"
    settlement: TxResult
    approval: Optional[TxResult] = None
    permit_signed: bool = False

    @property
    def tx_hash(self) -> Optional[str]:
        return self.settlement.tx_hash
