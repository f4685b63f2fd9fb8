"""
Pipeline stages

- AllowanceCoordinator: approval of the aggregator's spender
- SettlementSubmitter: signing and broadcast of the swap transaction
- SwapPipeline: price -> allowance -> quote -> bind -> submit
"""

from .allowance import AllowanceCoordinator
from .settlement import SettlementSubmitter
from .swap import SwapPipeline

__all__ = [
    "AllowanceCoordinator",
    "SettlementSubmitter",
    "SwapPipeline",
]
