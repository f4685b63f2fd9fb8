"""
Aggregator protocol integrations
"""

from .zeroex import ZeroExAPI, PermitBinder

__all__ = [
    "ZeroExAPI",
    "PermitBinder",
]
