"""
Permit2 signature binding

The settlement contract expects the Permit2 signature appended to the
quote calldata as a length-prefixed trailer:

    calldata = original || uint256(len(signature)) || signature
"""

import logging

from eth_abi import encode

from ...types import ExecutableQuote, BoundTransaction
from ...errors import BindingError, PermitSwapError, SignerError
from ...infra.evm_signer import ChainAccount
from ...infra.correlation import log_prefix

logger = logging.getLogger(__name__)


def encode_signature_length(signature: bytes) -> bytes:
    """Signature length as a 32-byte big-endian unsigned integer"""
    return encode(["uint256"], [len(signature)])


def splice_signature(data: bytes, signature: bytes) -> bytes:
    """
    Append a length-prefixed signature to calldata

    Raises:
        BindingError: If either part is empty
    """
    if not signature:
        raise BindingError.missing_signature()
    if not data:
        raise BindingError.missing_calldata()
    return bytes(data) + encode_signature_length(signature) + bytes(signature)


class PermitBinder:
    """
    Signs the quote's Permit2 payload and binds the signature to its calldata

    Binding never modifies the quote; each call returns a new
    BoundTransaction, so a quote cannot end up with two signatures appended.
    """

    def bind(self, quote: ExecutableQuote, account: ChainAccount) -> BoundTransaction:
        """
        Produce the transaction to submit for a quote

        Args:
            quote: Executable quote from the aggregator
            account: Signing identity of the taker

        Returns:
            BoundTransaction; identical to the quote transaction when the
            route needs no permit

        Raises:
            SignerError: Typed-data signing failed
            BindingError: Typed data, signature or calldata missing
        """
        tx = quote.transaction

        if quote.permit2 is None:
            logger.info(f"{log_prefix()}Quote carries no Permit2 payload, submitting calldata as-is")
            return BoundTransaction(
                to=tx.to,
                data=tx.data,
                value=tx.value,
                gas=tx.gas,
                gas_price=tx.gas_price,
            )

        # Fail before asking for a signature the calldata could never carry
        if not tx.data:
            raise BindingError.missing_calldata()
        if not quote.permit2.eip712:
            raise BindingError.missing_typed_data()

        try:
            signature = account.sign_typed_data(quote.permit2.eip712)
        except PermitSwapError:
            raise
        except Exception as e:
            logger.error(f"{log_prefix()}Permit2 signing failed: {e}")
            raise SignerError.failed(f"Permit2 typed data: {e}", e) from e

        signature = bytes(signature) if signature else b""
        data = splice_signature(tx.data, signature)
        logger.info(
            f"{log_prefix()}Signed Permit2 payload ({len(signature)}-byte signature), "
            f"calldata {len(tx.data)} -> {len(data)} bytes"
        )

        return BoundTransaction(
            to=tx.to,
            data=data,
            value=tx.value,
            gas=tx.gas,
            gas_price=tx.gas_price,
            signature=signature,
        )
