"""
0x Swap Protocol (Permit2 flow)

Usage:
    from permit_swap.protocols.zeroex import ZeroExAPI, PermitBinder

    with ZeroExAPI(api_key="...") as api:
        quote = api.get_quote(request)

    bound = PermitBinder().bind(quote, signer)
"""

from .api import ZeroExAPI
from .permit import PermitBinder, splice_signature, encode_signature_length

__all__ = [
    "ZeroExAPI",
    "PermitBinder",
    "splice_signature",
    "encode_signature_length",
]
